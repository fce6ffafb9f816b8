# Filename: filters.py

import re
from typing import Any, Dict, Optional, Tuple

from loguru import logger

POOL_CREATION_TYPE = "AMMCreate"
NATIVE_CURRENCY = "XRP"

STANDARD_CURRENCY_CODE = re.compile(r"[A-Za-z0-9?!@#$%^&*<>(){}\[\]|]{3}")
HEX_CURRENCY_CODE = re.compile(r"[0-9A-Fa-f]{40}")


def encode_currency_code(code: str) -> str:
    """
    Ledger form of a currency code: standard 3-char ASCII codes travel as-is,
    anything else as 40 hex digits (UTF-8, right-padded with zeros).
    """
    if HEX_CURRENCY_CODE.fullmatch(code):
        return code
    if STANDARD_CURRENCY_CODE.fullmatch(code) and code.upper() != NATIVE_CURRENCY:
        return code
    return code.encode("utf-8").hex().upper().ljust(40, "0")[:40]


def decode_currency_code(code: str) -> Optional[str]:
    """Readable form of a 40-hex currency code, None when it has none."""
    if len(code) != 40:
        return None
    try:
        text = bytes.fromhex(code).rstrip(b"\x00").decode("utf-8")
    except ValueError:
        return None
    return text if text and text.isprintable() else None


def is_native_amount(amount: Any) -> bool:
    # XRP amounts are drop strings, issued amounts are {currency, issuer, value} objects
    return isinstance(amount, str)


def is_issued_amount(amount: Any) -> bool:
    return isinstance(amount, dict) and "currency" in amount and "issuer" in amount


def split_pool_reserves(amount: Any, amount2: Any) -> Tuple[str, Dict[str, Any]]:
    """
    Return (xrp_drops, issued_amount) whatever the field order.
    Raises ValueError when the pair is not one XRP side and one issued side.
    """
    if is_native_amount(amount) and is_issued_amount(amount2):
        return amount, amount2
    if is_native_amount(amount2) and is_issued_amount(amount):
        return amount2, amount
    raise ValueError(f"expected one XRP and one issued amount, got {amount!r} / {amount2!r}")


def extract_transaction(event: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    if not isinstance(event, dict):
        return None
    tx = event.get("transaction") or event.get("tx_json")
    return tx if isinstance(tx, dict) else None


def pool_creation_asset(event: Dict[str, Any]) -> Optional[Tuple[str, str]]:
    """
    (currency, issuer) of the issued side of a validated XRP-paired AMMCreate,
    or None for any other stream event.
    """
    if not isinstance(event, dict) or event.get("validated") is not True:
        return None

    tx = extract_transaction(event)
    if not tx or tx.get("TransactionType") != POOL_CREATION_TYPE:
        return None

    try:
        _, issued = split_pool_reserves(tx.get("Amount"), tx.get("Amount2"))
    except ValueError as e:
        logger.debug(f"[FILTER ❌] {POOL_CREATION_TYPE} {tx.get('hash', '?')} skipped: {e}")
        return None

    return issued["currency"], issued["issuer"]


def candidate_currency_codes(currency: str) -> Tuple[str, ...]:
    """Codes an announcement may have used for this ledger currency."""
    decoded = decode_currency_code(currency)
    if decoded and decoded != currency:
        return currency, decoded
    return (currency,)
