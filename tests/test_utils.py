"""Tests for utility functions."""

import json

import pytest
from hexbytes import HexBytes
from web3.datastructures import AttributeDict

from wallet_bridge.exceptions import InvalidRequestError
from wallet_bridge.utils import (
    coerce_quantity,
    decode_chain_id,
    encode_chain_id,
    message_to_bytes,
    parse_typed_data,
    to_json_compatible,
)


class TestChainId:
    """Test chain id decoding and encoding."""

    def test_decode_hex(self):
        assert decode_chain_id("0x89") == 137

    def test_decode_decimal_string(self):
        assert decode_chain_id("137") == 137

    def test_decode_int(self):
        assert decode_chain_id(137) == 137

    def test_decode_invalid(self):
        """Test that garbage chain ids are rejected."""
        with pytest.raises(InvalidRequestError):
            decode_chain_id("polygon")
        with pytest.raises(InvalidRequestError):
            decode_chain_id(True)

    def test_decode_negative_rejected(self):
        """Test that negative chain ids are rejected in any encoding."""
        with pytest.raises(InvalidRequestError):
            decode_chain_id("-1")
        with pytest.raises(InvalidRequestError):
            decode_chain_id(-5)

    def test_encode_is_minimal_hex(self):
        assert encode_chain_id(1) == "0x1"
        assert encode_chain_id(137) == "0x89"


class TestCoerceQuantity:
    """Test exact-precision coercion of transaction fields."""

    def test_large_hex_keeps_precision(self):
        """Test that values beyond float precision survive."""
        assert coerce_quantity("0x" + "f" * 64, "value") == 2**256 - 1

    def test_decimal_string(self):
        assert coerce_quantity("21000", "gas") == 21000

    def test_absent_values(self):
        assert coerce_quantity(None, "value") is None
        assert coerce_quantity("", "value") is None

    def test_zero_is_kept(self):
        assert coerce_quantity("0x0", "value") == 0

    def test_fractional_float_rejected(self):
        with pytest.raises(InvalidRequestError):
            coerce_quantity(1.5, "value")


class TestMessageBytes:
    """Test message decoding for sign requests."""

    def test_hex_message_is_decoded(self):
        assert message_to_bytes("0x68656c6c6f") == b"hello"

    def test_text_message_is_utf8(self):
        assert message_to_bytes("Sign in: привет") == "Sign in: привет".encode()

    def test_non_string_rejected(self):
        with pytest.raises(InvalidRequestError):
            message_to_bytes(42)


class TestParseTypedData:
    """Test typed data normalisation."""

    PAYLOAD = {
        "types": {
            "EIP712Domain": [{"name": "name", "type": "string"}],
            "Claim": [{"name": "amount", "type": "uint256"}],
        },
        "domain": {"name": "Claims", "chainId": "0x89"},
        "message": {"amount": 5},
    }

    def test_domain_type_is_stripped(self):
        _, types, _ = parse_typed_data(self.PAYLOAD)
        assert list(types) == ["Claim"]

    def test_string_and_object_forms_agree(self):
        assert parse_typed_data(json.dumps(self.PAYLOAD)) == parse_typed_data(self.PAYLOAD)

    def test_hex_domain_chain_id_is_decoded(self):
        domain, _, _ = parse_typed_data(self.PAYLOAD)
        assert domain["chainId"] == 137

    def test_input_is_not_mutated(self):
        parse_typed_data(self.PAYLOAD)
        assert "EIP712Domain" in self.PAYLOAD["types"]
        assert self.PAYLOAD["domain"]["chainId"] == "0x89"

    def test_non_object_rejected(self):
        with pytest.raises(InvalidRequestError):
            parse_typed_data("[1, 2]")


def test_to_json_compatible_converts_web3_values():
    value = AttributeDict({"hash": HexBytes("0x01ff"), "logs": [HexBytes("0x02")], "n": 3})
    assert to_json_compatible(value) == {"hash": "0x01ff", "logs": ["0x02"], "n": 3}
