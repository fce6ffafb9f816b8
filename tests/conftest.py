"""
Shared fixtures for the launch alert tests.

Builds realistic announcement texts and XRPL stream events so each test
module only states what differs.
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from models import LaunchFact

ISSUER = "rHb9CJAWyB4rj91VRWn96DkukG4bwdtyTh"
OTHER_ISSUER = "rPT1Sjq2YGrBMTttX4GZHjKu9dyfzbpAYe"
CHANNEL_ID = 1987654321


def make_announcement(token="ABC", issuer=ISSUER, supply="1,000,000"):
    lines = ["🚀 New token launched on First Ledger!"]
    if token is not None:
        lines.append(f"📈 {token}")
    if issuer is not None:
        lines.append(f"Issuer: {issuer}")
    if supply is not None:
        lines.append(f"Supply: {supply}")
    lines.append("Trade now at firstledger.net")
    return "\n".join(lines)


def make_fact(token="ABC", issuer=ISSUER, supply="1,000,000"):
    return LaunchFact(token=token, issuer=issuer, supply=supply, timestamp="2026-10-18T12:00:00+00:00")


def make_amm_create(currency="ABC", issuer=ISSUER, validated=True, tx_type="AMMCreate",
                    amount2="50000000", token_value="800000", tx_key="transaction", swap=False):
    issued = {"currency": currency, "issuer": issuer, "value": token_value}
    amount, second = (amount2, issued) if swap else (issued, amount2)
    return {
        "type": "transaction",
        "validated": validated,
        tx_key: {
            "TransactionType": tx_type,
            "Account": OTHER_ISSUER,
            "Amount": amount,
            "Amount2": second,
            "hash": "ABCDEF0123456789",
        },
    }


class FakeLedger:
    """Stands in for LedgerListener.amm_info; yields to the loop like a real query."""

    def __init__(self, amm=None, errors=None):
        self.amm = amm if amm is not None else {
            "amount": "50000000",
            "amount2": {"currency": "ABC", "issuer": ISSUER, "value": "800000"},
        }
        self.errors = list(errors or [])
        self.calls = []

    async def amm_info(self, currency, issuer):
        self.calls.append((currency, issuer))
        await asyncio.sleep(0)
        if self.errors:
            raise self.errors.pop(0)
        return self.amm


@pytest.fixture
def notifier():
    mock = MagicMock()
    mock.notify = AsyncMock(return_value=True)
    return mock


@pytest.fixture
def fake_ledger():
    return FakeLedger()
