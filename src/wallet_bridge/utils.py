"""Utility functions for the wallet bridge."""

import json
import re
from collections.abc import Mapping, Sequence
from typing import Any

from eth_typing import HexStr
from hexbytes import HexBytes
from web3 import Web3

from .exceptions import InvalidRequestError

_HEX_PATTERN = re.compile(r"^0x[0-9a-fA-F]*$")

DOMAIN_TYPE_NAME = "EIP712Domain"


def is_hex_string(value: Any) -> bool:
    """Return True when ``value`` is a ``0x``-prefixed hex string."""
    return isinstance(value, str) and bool(_HEX_PATTERN.match(value))


def decode_chain_id(value: Any) -> int:
    """Decode a chain id given as int, ``0x`` hex string or decimal string."""
    if isinstance(value, bool):
        raise InvalidRequestError("Invalid chain id", details={"chainId": value})

    if isinstance(value, int):
        chain_id = value
    elif isinstance(value, str):
        text = value.strip()
        try:
            if text.lower().startswith("0x"):
                chain_id = int(text, 16)
            else:
                chain_id = int(text)
        except ValueError as exc:
            raise InvalidRequestError("Invalid chain id", details={"chainId": value}) from exc
    else:
        raise InvalidRequestError("Invalid chain id", details={"chainId": repr(value)})

    if chain_id < 0:
        raise InvalidRequestError("Chain id cannot be negative", details={"chainId": value})
    return chain_id


def encode_chain_id(chain_id: int) -> str:
    """Encode a chain id as a minimal ``0x`` hex quantity."""
    return hex(chain_id)


def coerce_quantity(value: Any, field: str) -> int | None:
    """Coerce a hex/decimal string or int transaction field to an exact int.

    ``None`` and empty strings are treated as absent.
    """
    if value is None or value == "":
        return None

    if isinstance(value, bool):
        raise InvalidRequestError(f"Invalid {field} value", details={field: value})

    if isinstance(value, int):
        return value

    if isinstance(value, float):
        if not value.is_integer():
            raise InvalidRequestError(f"Invalid {field} value", details={field: value})
        return int(value)

    if isinstance(value, str):
        text = value.strip()
        try:
            if text.lower().startswith("0x"):
                return int(text, 16)
            return int(text, 10)
        except ValueError as exc:
            raise InvalidRequestError(f"Invalid {field} value", details={field: value}) from exc

    raise InvalidRequestError(f"Invalid {field} value", details={field: repr(value)})


def message_to_bytes(message: Any) -> bytes:
    """Return the raw bytes of a sign request message.

    Hex-shaped strings are decoded; any other string is taken as UTF-8 text.
    """
    if isinstance(message, bytes | bytearray):
        return bytes(message)

    if not isinstance(message, str):
        raise InvalidRequestError("Message must be a string", details={"message": repr(message)})

    if is_hex_string(message):
        return Web3.to_bytes(hexstr=HexStr(message))

    return message.encode("utf-8")


def parse_typed_data(
    value: Any,
) -> tuple[dict[str, Any], dict[str, list[dict[str, str]]], dict[str, Any]]:
    """Split an EIP-712 payload into ``(domain, types, message)``.

    Accepts the JSON-encoded string or the already-structured object. The
    ``EIP712Domain`` entry is dropped from ``types`` because the signing
    scheme derives it from the domain itself.
    """
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except json.JSONDecodeError as exc:
            raise InvalidRequestError(
                "Typed data is not valid JSON", details={"error": str(exc)}
            ) from exc

    if not isinstance(value, Mapping):
        raise InvalidRequestError(
            "Typed data must be an object", details={"typedData": repr(value)}
        )

    domain = dict(_typed_data_section(value, "domain"))
    message = dict(_typed_data_section(value, "message"))

    types: dict[str, list[dict[str, str]]] = {}
    for name, fields in _typed_data_section(value, "types").items():
        if not isinstance(fields, list) or not all(isinstance(item, Mapping) for item in fields):
            raise InvalidRequestError(
                "Typed data type definitions must be arrays of objects",
                details={"type": str(name)},
            )
        if name != DOMAIN_TYPE_NAME:
            types[name] = [dict(item) for item in fields]

    if "chainId" in domain and isinstance(domain["chainId"], str):
        domain["chainId"] = decode_chain_id(domain["chainId"])

    return domain, types, message


def _typed_data_section(value: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    section = value.get(key)
    if section is None:
        return {}
    if not isinstance(section, Mapping):
        raise InvalidRequestError(
            f"Typed data {key} must be an object", details={key: repr(section)}
        )
    return section


def to_json_compatible(value: Any) -> Any:
    """Serialise web3 return values into structures that survive the page boundary."""
    if value is None:
        return None
    if isinstance(value, Mapping):
        return {key: to_json_compatible(item) for key, item in value.items()}
    if isinstance(value, Sequence) and not isinstance(value, str | bytes | bytearray | HexBytes):
        return [to_json_compatible(item) for item in value]
    if isinstance(value, bytes | bytearray | HexBytes):
        return HexBytes(value).to_0x_hex()
    return value
