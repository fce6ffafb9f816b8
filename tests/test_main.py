"""
Tests for process bootstrap exit codes.
"""

import asyncio
from unittest.mock import AsyncMock, patch

import pytest

import main
from config import DEFAULT_CONFIG


class TestStartup:
    @pytest.mark.asyncio
    async def test_publisher_without_session_exits_non_zero(self):
        config = dict(DEFAULT_CONFIG, SESSION_STRING="")
        assert await main.run_publisher(config) == 1

    @pytest.mark.asyncio
    @patch("main.EventChannel")
    @patch("main.AnnouncementListener")
    async def test_publisher_with_unauthorized_session_exits_non_zero(self, mock_listener_cls, mock_channel_cls):
        mock_listener_cls.return_value.start = AsyncMock(return_value=False)
        channel = mock_channel_cls.from_url.return_value
        channel.close = AsyncMock()

        config = dict(DEFAULT_CONFIG, SESSION_STRING="revoked", API_ID=1, CHANNEL_USERNAME="launches")
        assert await main.run_publisher(config) == 1
        channel.close.assert_awaited_once()

    @patch("main.load_config", return_value=dict(DEFAULT_CONFIG, SESSION_STRING=""))
    def test_main_returns_exit_code(self, _mock_config):
        assert main.main(["publisher"]) == 1

    @pytest.mark.asyncio
    @patch("main.EventChannel")
    @patch("main.LedgerListener")
    async def test_watcher_connection_failure_exits_non_zero(self, mock_ledger_cls, mock_channel_cls):
        ledger = mock_ledger_cls.return_value
        ledger.connect = AsyncMock(side_effect=OSError("connection refused"))
        ledger.disconnect = AsyncMock()
        channel = mock_channel_cls.from_url.return_value
        channel.close = AsyncMock()

        assert await main.run_watcher(dict(DEFAULT_CONFIG)) == 1
        ledger.disconnect.assert_awaited_once()
        channel.close.assert_awaited_once()

    @pytest.mark.asyncio
    @patch("main.install_stop_handlers")
    @patch("main.EventChannel")
    @patch("main.LedgerListener")
    async def test_watcher_exits_non_zero_when_a_task_dies(self, mock_ledger_cls, mock_channel_cls, _mock_handlers):
        async def listen_forever(on_message):
            await asyncio.Event().wait()

        ledger = mock_ledger_cls.return_value
        ledger.connect = AsyncMock()
        ledger.run = AsyncMock(side_effect=RuntimeError("stream handler crashed"))
        ledger.disconnect = AsyncMock()
        channel = mock_channel_cls.from_url.return_value
        channel.ping = AsyncMock()
        channel.listen = AsyncMock(side_effect=listen_forever)
        channel.close = AsyncMock()

        config = dict(DEFAULT_CONFIG, WATCH_TTL_SECONDS=0)
        assert await asyncio.wait_for(main.run_watcher(config), timeout=1) == 1
        ledger.disconnect.assert_awaited_once()
        channel.close.assert_awaited_once()

    def test_unknown_stage_is_rejected(self):
        with pytest.raises(SystemExit):
            main.main(["backfill"])
