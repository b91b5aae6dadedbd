"""Hex encoding helpers for Engine API JSON values.

Chain RPC uses two hex encodings:

- quantities: integers as 0x-prefixed hex without leading zeros ("0x0", "0x1a")
- data: byte strings as 0x-prefixed, even-length hex ("0x", "0x00ff")
"""

import re
from typing import Any, Optional

HASH_LENGTH = 32
ADDRESS_LENGTH = 20
LOGS_BLOOM_LENGTH = 256
PAYLOAD_ID_LENGTH = 8
MAX_EXTRA_DATA_BYTES = 32
UINT64_MAX = 2**64 - 1
UINT256_MAX = 2**256 - 1

_QUANTITY_RE = re.compile(r"0x[0-9a-fA-F]+")
_DATA_RE = re.compile(r"0x(?:[0-9a-fA-F]{2})*")


def encode_quantity(value: int) -> str:
    if value < 0:
        raise ValueError(f"Quantity cannot be negative: {value}")
    return hex(value)


def decode_quantity(value: Any) -> int:
    """Decode a hex quantity. Leading zeros are tolerated, a missing 0x is not."""
    if not isinstance(value, str) or not _QUANTITY_RE.fullmatch(value):
        raise ValueError(f"Invalid hex quantity: {value!r}")
    return int(value[2:], 16)


def encode_data(value: bytes) -> str:
    return "0x" + bytes(value).hex()


def decode_data(value: Any, length: Optional[int] = None) -> bytes:
    """Decode hex data, optionally requiring an exact byte length."""
    if not isinstance(value, str) or not _DATA_RE.fullmatch(value):
        raise ValueError(f"Invalid hex data: {value!r}")
    raw = bytes.fromhex(value[2:])
    if length is not None and len(raw) != length:
        raise ValueError(f"Expected {length} bytes, got {len(raw)}: {value}")
    return raw


def pad_to(value: bytes, length: int) -> bytes:
    """Right-pad value with zero bytes up to length. Longer values are returned as-is."""
    if len(value) >= length:
        return bytes(value)
    return bytes(value) + b"\x00" * (length - len(value))


def to_bytes32(value: bytes) -> bytes:
    return pad_to(value, HASH_LENGTH)[:HASH_LENGTH]


def check_length(name: str, value: bytes, length: int) -> None:
    if len(value) != length:
        raise ValueError(f"{name} must be {length} bytes, got {len(value)}")


def check_uint64(name: str, value: int) -> None:
    if not 0 <= value <= UINT64_MAX:
        raise ValueError(f"{name} out of uint64 range: {value}")
