"""Raw byte strings as ``0x``-prefixed hex, and byte arrays as JSON number lists."""

from __future__ import annotations

import re
from dataclasses import dataclass

from chainrpc_types.uint import DecodeError

__all__ = ["encode_bytes", "decode_bytes", "BytesArray"]

_HEX_DIGITS = re.compile(r"[0-9a-fA-F]*")


def encode_bytes(data) -> str:
    """Encode bytes as ``0x`` followed by lower-case hex."""
    return "0x" + bytes(data).hex()


def decode_bytes(text) -> bytes:
    """Decode a ``0x``-prefixed hex string into bytes."""
    if not isinstance(text, str) or not text.startswith("0x"):
        raise DecodeError(f"invalid value: {text!r}, expected 0x prefix")
    digits = text[2:]
    if len(digits) % 2:
        raise DecodeError("Invalid hex: odd number of digits")
    if not _HEX_DIGITS.fullmatch(digits):
        raise DecodeError("Invalid hex: invalid character")
    return bytes.fromhex(digits)


@dataclass(frozen=True)
class BytesArray:
    """An array of bytes carried on the wire as a list of numbers."""

    data: bytes = b""

    def __post_init__(self) -> None:
        object.__setattr__(self, "data", bytes(self.data))

    @classmethod
    def from_json(cls, data):
        if not isinstance(data, list):
            raise DecodeError(f"expected a list of bytes, got {data!r}")
        for item in data:
            if isinstance(item, bool) or not isinstance(item, int) or not 0 <= item <= 255:
                raise DecodeError(f"invalid byte value {item!r}")
        return cls(bytes(data))

    def to_json(self) -> list:
        return list(self.data)