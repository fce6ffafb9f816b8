# pool_watcher.py

import asyncio
import logging
from typing import Any, Dict, Optional

from filters import candidate_currency_codes, pool_creation_asset, split_pool_reserves
from ledger_listener import LedgerQueryError
from models import LaunchFact, MalformedEventError
from pool_metrics import MetricsError, compute_pool_metrics
from telegram_alert import TelegramNotifier, format_pool_live
from token_cache import PendingWatchSet

logger = logging.getLogger("PoolWatcher")


class PoolWatcher:
    """
    Waits for the AMMCreate of every announced token and reports the new pool.
    Each watch fires at most once: the match is claimed from the watch set
    before the first await of the handler.
    """

    def __init__(self, ledger, notifier: Optional[TelegramNotifier], watch_set: PendingWatchSet,
                 query_attempts: int = 1, retry_delay: float = 1.0):
        self.ledger = ledger
        self.notifier = notifier
        self.watch_set = watch_set
        self.query_attempts = max(1, int(query_attempts))
        self.retry_delay = retry_delay

    def handle_launch_event(self, payload) -> bool:
        try:
            fact = LaunchFact.from_json(payload)
        except MalformedEventError as e:
            logger.error(f"Dropping malformed launch event: {e}")
            return False

        if not self.watch_set.add_if_new(fact):
            logger.info(f"Already listening for AMM creation for {fact.token} ({fact.issuer})")
            return False

        logger.info(f"New token detected: {fact.token}. Listening for AMM creation... ({len(self.watch_set)} pending)")
        return True

    def _claim(self, event: Dict[str, Any]) -> Optional[LaunchFact]:
        asset = pool_creation_asset(event)
        if asset is None:
            return None
        currency, issuer = asset
        for code in candidate_currency_codes(currency):
            fact = self.watch_set.claim(issuer, code)
            if fact:
                return fact
        return None

    async def handle_transaction(self, event: Dict[str, Any]) -> bool:
        """Returns True when a pool-live notification was sent."""
        fact = self._claim(event)
        if fact is None:
            return False

        logger.info(f"AMMCreate transaction found for {fact.token}")

        try:
            amm = await self._fetch_pool(fact)
            xrp_drops, issued = split_pool_reserves(amm.get("amount"), amm.get("amount2"))
            metrics = compute_pool_metrics(xrp_drops, issued.get("value"), fact.supply)
        except (LedgerQueryError, MetricsError, ValueError) as e:
            logger.error(f"Error fetching AMM info or computing metrics for {fact.token}: {e}")
            return False

        logger.info(
            f"[POOL] {fact.token}: price={metrics.initial_price} XRP, liquidity={metrics.liquidity} XRP, "
            f"pool supply={metrics.pool_supply}, dev allocation={metrics.dev_allocation_percent:.2f}%"
        )
        if not self.notifier:
            return False
        return await self.notifier.notify(format_pool_live(fact.token, metrics))

    async def _fetch_pool(self, fact: LaunchFact) -> Dict[str, Any]:
        delay = self.retry_delay
        for attempt in range(1, self.query_attempts + 1):
            try:
                return await self.ledger.amm_info(fact.token, fact.issuer)
            except LedgerQueryError as e:
                if attempt >= self.query_attempts:
                    raise
                logger.warning(f"amm_info for {fact.token} failed, retrying ({attempt}/{self.query_attempts - 1}): {e}")
                await asyncio.sleep(delay)
                delay *= 2

    def expire_watches(self) -> int:
        expired = self.watch_set.cleanup_expired()
        for fact in expired:
            logger.warning(f"Launch abandoned: no AMM pool for {fact.token} ({fact.issuer}) announced at {fact.timestamp}")
        return len(expired)

    async def run_expiry_loop(self, interval: float = 60):
        while True:
            await asyncio.sleep(interval)
            self.expire_watches()
