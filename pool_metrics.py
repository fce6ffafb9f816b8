# Filename: pool_metrics.py

from decimal import Decimal, InvalidOperation

from models import PoolMetrics

DROPS_PER_XRP = Decimal(1_000_000)


class MetricsError(ValueError):
    """Raised when pool metrics cannot be computed from the given amounts."""


def _to_decimal(value, label: str) -> Decimal:
    try:
        number = Decimal(str(value).replace(",", "").strip())
    except (InvalidOperation, ValueError) as e:
        raise MetricsError(f"{label} is not a number: {value!r}") from e
    if not number.is_finite():
        raise MetricsError(f"{label} is not finite: {value!r}")
    return number


def compute_pool_metrics(xrp_drops, token_value, announced_supply: str) -> PoolMetrics:
    """
    Derive launch metrics from the pool reserves and the announced supply.

    Args:
        xrp_drops: XRP reserve in drops (integer string)
        token_value: token reserve as a decimal string
        announced_supply: supply as written in the announcement ("1,000,000")

    Raises:
        MetricsError: on unparsable amounts or a zero pool/announced supply
    """
    liquidity = _to_decimal(xrp_drops, "XRP reserve") / DROPS_PER_XRP
    pool_supply = _to_decimal(token_value, "token reserve")
    initial_supply = _to_decimal(announced_supply, "announced supply")

    if pool_supply == 0:
        raise MetricsError("pool supply is zero")
    if initial_supply == 0:
        raise MetricsError("announced supply is zero")

    dev_allocation = (initial_supply - pool_supply) / initial_supply * 100
    initial_price = liquidity / pool_supply

    return PoolMetrics(
        initial_price=initial_price,
        liquidity=liquidity,
        pool_supply=pool_supply,
        dev_allocation_percent=dev_allocation
    )
