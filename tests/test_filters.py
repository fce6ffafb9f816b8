"""
Tests for the pool-creation transaction filter.
"""

import pytest

from filters import (
    candidate_currency_codes,
    decode_currency_code,
    encode_currency_code,
    pool_creation_asset,
    split_pool_reserves,
)
from tests.conftest import ISSUER, OTHER_ISSUER, make_amm_create


class TestPoolCreationAsset:
    def test_validated_xrp_paired_amm_create(self):
        assert pool_creation_asset(make_amm_create()) == ("ABC", ISSUER)

    def test_api_v2_tx_json_shape(self):
        assert pool_creation_asset(make_amm_create(tx_key="tx_json")) == ("ABC", ISSUER)

    def test_reserve_order_is_irrelevant(self):
        assert pool_creation_asset(make_amm_create(swap=True)) == ("ABC", ISSUER)

    def test_unvalidated_transaction_is_ignored(self):
        assert pool_creation_asset(make_amm_create(validated=False)) is None

    def test_other_transaction_type_is_ignored(self):
        assert pool_creation_asset(make_amm_create(tx_type="Payment")) is None

    def test_token_token_pool_is_ignored(self):
        token_side = {"currency": "USD", "issuer": OTHER_ISSUER, "value": "10"}
        assert pool_creation_asset(make_amm_create(amount2=token_side)) is None

    @pytest.mark.parametrize("event", [None, "AMMCreate", {}, {"validated": True}])
    def test_garbage_events_are_ignored(self, event):
        assert pool_creation_asset(event) is None


class TestSplitPoolReserves:
    def test_xrp_first(self):
        issued = {"currency": "ABC", "issuer": ISSUER, "value": "1"}
        assert split_pool_reserves("100", issued) == ("100", issued)

    def test_xrp_second(self):
        issued = {"currency": "ABC", "issuer": ISSUER, "value": "1"}
        assert split_pool_reserves(issued, "100") == ("100", issued)

    def test_two_xrp_amounts_rejected(self):
        with pytest.raises(ValueError):
            split_pool_reserves("100", "200")

    def test_missing_amount_rejected(self):
        with pytest.raises(ValueError):
            split_pool_reserves(None, "200")


class TestCurrencyCodes:
    def test_three_letter_code_is_unchanged(self):
        assert encode_currency_code("ABC") == "ABC"

    def test_long_code_is_hex_encoded(self):
        assert encode_currency_code("SOLO") == "534F4C4F" + "0" * 32

    @pytest.mark.parametrize("code", ["🐸🐸🐸", "€UR"])
    def test_non_ascii_three_char_code_is_hex_encoded(self, code):
        encoded = encode_currency_code(code)
        assert len(encoded) == 40
        assert decode_currency_code(encoded) == code

    def test_native_code_is_never_sent_as_standard(self):
        assert encode_currency_code("XRP") == "585250" + "0" * 34

    def test_standard_code_with_symbols_is_unchanged(self):
        assert encode_currency_code("A$#") == "A$#"

    def test_hex_code_decodes(self):
        assert decode_currency_code("534F4C4F" + "0" * 32) == "SOLO"

    def test_short_code_does_not_decode(self):
        assert decode_currency_code("ABC") is None

    def test_candidates_include_decoded_form(self):
        code = encode_currency_code("PHNIX")
        assert candidate_currency_codes(code) == (code, "PHNIX")

    def test_candidates_for_plain_code(self):
        assert candidate_currency_codes("ABC") == ("ABC",)
