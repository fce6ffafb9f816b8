# Filename: token_cache.py

import logging
import time
from typing import Dict, List, Optional

from models import LaunchFact, watch_key

logger = logging.getLogger("PendingWatchSet")


class PendingWatchSet:
    """
    Tokens waiting for their AMM pool, keyed by "issuer.token".
    In-memory only: a restart forgets every pending watch.
    Only touched from the event loop thread; claim() does its check-and-remove
    without awaiting, so two transactions can never claim the same watch.
    """

    def __init__(self, max_lifetime: int = 3 * 3600):
        self.max_lifetime = max_lifetime  # 0 disables expiry
        self.watches: Dict[str, dict] = {}

    def add_if_new(self, fact: LaunchFact) -> bool:
        if fact.key in self.watches:
            return False
        now = time.time()
        self.watches[fact.key] = {
            "fact": fact,
            "created": now,
            "expires_at": now + self.max_lifetime if self.max_lifetime > 0 else None
        }
        return True

    def claim(self, issuer: str, currency: str) -> Optional[LaunchFact]:
        """Remove and return the watch for (issuer, currency); None if not pending."""
        entry = self.watches.pop(watch_key(issuer, currency), None)
        return entry["fact"] if entry else None

    def get_ready_for_purge(self, now: float = None) -> List[str]:
        now = now if now is not None else time.time()
        return [
            key for key, entry in self.watches.items()
            if entry["expires_at"] is not None and now >= entry["expires_at"]
        ]

    def cleanup_expired(self, now: float = None) -> List[LaunchFact]:
        expired = []
        for key in self.get_ready_for_purge(now):
            entry = self.watches.pop(key, None)
            if entry:
                expired.append(entry["fact"])
        return expired

    def __contains__(self, key: str) -> bool:
        return key in self.watches

    def __len__(self) -> int:
        return len(self.watches)
