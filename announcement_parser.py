# Filename: announcement_parser.py

import re
from dataclasses import dataclass
from typing import Optional

TICKER_PATTERN = re.compile(r"📈 (.*)")
# Classic XRPL address: "r" + base58 (ripple alphabet excludes 0, O, I, l)
ISSUER_PATTERN = re.compile(r"(?<![A-Za-z0-9])(r[1-9A-HJ-NP-Za-km-z]{24,})")
SUPPLY_PATTERN = re.compile(r"Supply: (.*)")


@dataclass(frozen=True)
class ParsedAnnouncement:
    token: str
    issuer: str
    supply: str


def _search(pattern: re.Pattern, text: str) -> Optional[str]:
    match = pattern.search(text)
    if not match:
        return None
    value = match.group(1).strip()
    return value or None


def parse_announcement(text: str) -> Optional[ParsedAnnouncement]:
    """
    Extract ticker, issuer and supply from a launch announcement.
    Returns None unless all three are present.
    """
    if not isinstance(text, str) or not text:
        return None

    token = _search(TICKER_PATTERN, text)
    issuer = _search(ISSUER_PATTERN, text)
    supply = _search(SUPPLY_PATTERN, text)

    if token and issuer and supply:
        return ParsedAnnouncement(token=token, issuer=issuer, supply=supply)
    return None
