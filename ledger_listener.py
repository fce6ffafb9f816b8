import asyncio
import itertools
import json
import logging
from typing import Any, Awaitable, Callable, Dict, Set

import websockets
from websockets.exceptions import ConnectionClosed, WebSocketException

from filters import NATIVE_CURRENCY, encode_currency_code

logger = logging.getLogger("LedgerListener")

SUBSCRIBE_ID = "subscribe-transactions"


class LedgerQueryError(RuntimeError):
    """Raised when a ledger request fails, times out or the connection drops."""


class LedgerListener:
    """
    XRPL websocket client: streams validated transactions to a callback and
    multiplexes request/response queries over the same connection.
    """

    def __init__(self, uri: str, on_transaction: Callable[[Dict[str, Any]], Awaitable[Any]],
                 reconnect_delay: float = 5, query_timeout: float = 10.0):
        self.uri = uri
        self.on_transaction = on_transaction
        self.reconnect_delay = reconnect_delay
        self.query_timeout = query_timeout
        self._ws = None
        self._ids = itertools.count(1)
        self._pending: Dict[int, asyncio.Future] = {}
        self._handlers: Set[asyncio.Task] = set()
        self._stop_event = asyncio.Event()

    async def connect(self):
        self._ws = await websockets.connect(self.uri)
        await self._ws.send(json.dumps({
            "id": SUBSCRIBE_ID,
            "command": "subscribe",
            "streams": ["transactions"]
        }))
        logger.info(f"[XRPL] Connected to {self.uri} and subscribed to transactions")

    async def run(self):
        while not self._stop_event.is_set():
            if self._ws is None:
                try:
                    await self.connect()
                except (OSError, WebSocketException, asyncio.TimeoutError) as e:
                    logger.error(f"[XRPL] Connection failed: {e}")
                    await self._sleep_before_retry()
                    continue

            try:
                async for raw_msg in self._ws:
                    self._dispatch(raw_msg)
            except ConnectionClosed as e:
                if not self._stop_event.is_set():
                    logger.error(f"[XRPL] Connection closed: {e}")
            finally:
                self._ws = None
                self._fail_pending("connection lost")

            if not self._stop_event.is_set():
                await self._sleep_before_retry()

    async def _sleep_before_retry(self):
        try:
            await asyncio.wait_for(self._stop_event.wait(), timeout=self.reconnect_delay)
        except asyncio.TimeoutError:
            pass

    def _dispatch(self, raw_msg):
        try:
            msg = json.loads(raw_msg)
        except ValueError as e:
            logger.error(f"[XRPL] Failed to parse stream message: {e}")
            return

        if not isinstance(msg, dict):
            return

        msg_id = msg.get("id")
        if msg_id == SUBSCRIBE_ID:
            if msg.get("status") != "success":
                logger.error(f"[XRPL] Subscribe rejected: {msg.get('error_message') or msg.get('error')}")
            return

        if msg_id in self._pending:
            future = self._pending.pop(msg_id)
            if not future.done():
                future.set_result(msg)
            return

        if msg.get("type") == "transaction":
            # Handlers await ledger queries whose responses arrive through this loop
            task = asyncio.create_task(self.on_transaction(msg))
            self._handlers.add(task)
            task.add_done_callback(self._handler_done)

    def _handler_done(self, task: asyncio.Task):
        self._handlers.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error(f"[XRPL] Transaction handler failed: {task.exception()}")

    def _fail_pending(self, reason: str):
        for future in self._pending.values():
            if not future.done():
                future.set_exception(LedgerQueryError(reason))
        self._pending.clear()

    async def request(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        if self._ws is None:
            raise LedgerQueryError("not connected")

        request_id = next(self._ids)
        future = asyncio.get_running_loop().create_future()
        self._pending[request_id] = future

        try:
            await self._ws.send(json.dumps({"id": request_id, **payload}))
            response = await asyncio.wait_for(future, timeout=self.query_timeout)
        except asyncio.TimeoutError as e:
            raise LedgerQueryError(f"{payload.get('command')} timed out") from e
        except (ConnectionClosed, OSError) as e:
            raise LedgerQueryError(f"{payload.get('command')} failed: {e}") from e
        finally:
            self._pending.pop(request_id, None)

        if response.get("status") != "success":
            raise LedgerQueryError(
                f"{payload.get('command')} error: {response.get('error_message') or response.get('error')}"
            )
        return response.get("result", {})

    async def amm_info(self, currency: str, issuer: str) -> Dict[str, Any]:
        """Pool state for the (currency, issuer) / XRP pair."""
        result = await self.request({
            "command": "amm_info",
            "asset": {"currency": encode_currency_code(currency), "issuer": issuer},
            "asset2": {"currency": NATIVE_CURRENCY}
        })
        amm = result.get("amm")
        if not isinstance(amm, dict):
            raise LedgerQueryError("amm_info response has no pool")
        return amm

    async def disconnect(self):
        self._stop_event.set()
        for task in list(self._handlers):
            task.cancel()
        ws, self._ws = self._ws, None
        if ws is not None:
            await ws.close()
        self._fail_pending("disconnected")
        logger.info("[XRPL] Disconnected")
