"""
Tests for the LaunchFact wire format.
"""

import json

import pytest

from models import LaunchFact, MalformedEventError, watch_key
from tests.conftest import ISSUER, make_fact


class TestLaunchFact:
    def test_wire_fields(self):
        payload = json.loads(make_fact().to_json())
        assert payload == {
            "token": "ABC",
            "issuer": ISSUER,
            "supply": "1,000,000",
            "timestamp": "2026-10-18T12:00:00+00:00",
            "source": "firstledger.net",
        }

    def test_decodes_wire_payload(self):
        fact = make_fact()
        assert LaunchFact.from_json(fact.to_json()) == fact

    def test_key(self):
        assert make_fact().key == watch_key(ISSUER, "ABC") == f"{ISSUER}.ABC"

    def test_missing_optional_fields_get_defaults(self):
        fact = LaunchFact.from_json(json.dumps({"token": "ABC", "issuer": ISSUER, "supply": "5"}))
        assert fact.source == "firstledger.net"
        assert fact.timestamp == ""

    @pytest.mark.parametrize("payload", [b"\xff\xfe", "", "null", '"ABC"', '{"token": "", "issuer": "r", "supply": "1"}'])
    def test_malformed_payloads(self, payload):
        with pytest.raises(MalformedEventError):
            LaunchFact.from_json(payload)
