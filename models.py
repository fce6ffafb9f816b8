# Filename: models.py

import json
from dataclasses import dataclass, asdict
from decimal import Decimal

SOURCE_TAG = "firstledger.net"


class MalformedEventError(ValueError):
    """Raised when an event-channel payload cannot be decoded into a LaunchFact."""


def watch_key(issuer: str, token: str) -> str:
    return f"{issuer}.{token}"


@dataclass(frozen=True)
class LaunchFact:
    """
    LaunchFact is the structured record extracted from a launch announcement.
    It travels by value from the publisher to the pool watcher as JSON.
    """
    token: str                       # Currency code as announced (e.g. "ABC")
    issuer: str                      # Issuing XRPL account
    supply: str                      # Supply as written, thousands separators included
    timestamp: str                   # ISO-8601 detection time (UTC)
    source: str = SOURCE_TAG         # Origin of the announcement

    @property
    def key(self) -> str:
        return watch_key(self.issuer, self.token)

    def to_json(self) -> str:
        return json.dumps(asdict(self), ensure_ascii=False)

    @classmethod
    def from_json(cls, payload) -> "LaunchFact":
        if isinstance(payload, bytes):
            payload = payload.decode("utf-8", errors="replace")
        try:
            data = json.loads(payload)
        except (TypeError, ValueError) as e:
            raise MalformedEventError(f"invalid JSON: {e}") from e

        if not isinstance(data, dict):
            raise MalformedEventError(f"expected a JSON object, got {type(data).__name__}")

        for field_name in ("token", "issuer", "supply"):
            value = data.get(field_name)
            if not isinstance(value, str) or not value:
                raise MalformedEventError(f"missing or invalid field '{field_name}'")

        return cls(
            token=data["token"],
            issuer=data["issuer"],
            supply=data["supply"],
            timestamp=str(data.get("timestamp", "")),
            source=str(data.get("source", SOURCE_TAG)),
        )


@dataclass(frozen=True)
class PoolMetrics:
    """Derived market metrics for a freshly created AMM pool."""
    initial_price: Decimal           # XRP per token
    liquidity: Decimal               # XRP side of the pool
    pool_supply: Decimal             # Token side of the pool
    dev_allocation_percent: Decimal  # Share of announced supply kept out of the pool
