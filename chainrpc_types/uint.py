"""Fixed-size hashes and hex-encoded quantities as they appear on the JSON-RPC wire."""

from __future__ import annotations

import re
import secrets
from dataclasses import dataclass
from typing import ClassVar

__all__ = [
    "DecodeError",
    "FixedHash",
    "H64",
    "H128",
    "H160",
    "H256",
    "H512",
    "H520",
    "H2048",
    "Address",
    "encode_quantity",
    "decode_quantity",
]

_HEX_DIGITS = re.compile(r"[0-9a-fA-F]*")


class DecodeError(ValueError):
    """Raised when a wire value cannot be decoded."""


def _strip_prefix(text: str) -> str:
    return text[2:] if text.startswith("0x") else text


@dataclass(frozen=True, order=True, repr=False)
class FixedHash:
    """A big-endian byte string of a fixed length, such as a hash or an address."""

    data: bytes
    SIZE: ClassVar[int] = 0

    def __post_init__(self) -> None:
        if type(self) is FixedHash:
            raise TypeError("FixedHash is abstract; use a sized subclass such as H256")
        data = bytes(self.data)
        if len(data) != self.SIZE:
            raise ValueError(
                f"{type(self).__name__} takes {self.SIZE} bytes, got {len(data)}"
            )
        object.__setattr__(self, "data", data)

    @classmethod
    def from_hex(cls, text):
        """Parse a hex string of exactly the right length, with or without ``0x``."""
        if not isinstance(text, str):
            raise DecodeError(f"expected a hex string, got {text!r}")
        digits = _strip_prefix(text)
        if len(digits) != 2 * cls.SIZE:
            raise DecodeError(
                f"invalid length {len(digits)}, expected {2 * cls.SIZE} hex digits"
            )
        if not _HEX_DIGITS.fullmatch(digits):
            raise DecodeError(f"invalid hex character in {text!r}")
        return cls(bytes.fromhex(digits))

    @classmethod
    def from_low_u64_be(cls, value):
        """Build a hash whose last eight bytes hold ``value`` big-endian."""
        if not 0 <= value < 1 << 64:
            raise ValueError(f"{value} does not fit in 64 bits")
        return cls(bytes(cls.SIZE - 8) + value.to_bytes(8, "big"))

    @classmethod
    def from_uint(cls, value):
        """Build a hash holding the unsigned integer ``value`` big-endian."""
        if value < 0 or value.bit_length() > 8 * cls.SIZE:
            raise ValueError(f"{value} does not fit in {cls.SIZE} bytes")
        return cls(value.to_bytes(cls.SIZE, "big"))

    @classmethod
    def zero(cls):
        """The all-zero hash."""
        return cls(bytes(cls.SIZE))

    @classmethod
    def random(cls):
        """A hash of random bytes."""
        return cls(secrets.token_bytes(cls.SIZE))

    def to_uint(self) -> int:
        """The bytes read as a big-endian unsigned integer."""
        return int.from_bytes(self.data, "big")

    def to_json(self) -> str:
        """The full ``0x``-prefixed lower-case hex form."""
        return "0x" + self.data.hex()

    def __bytes__(self) -> bytes:
        return self.data

    def __str__(self) -> str:
        digits = self.data.hex()
        return f"0x{digits[:4]}…{digits[-4:]}"

    def __repr__(self) -> str:
        return f"{type(self).__name__}('{self.to_json()}')"

    def __format__(self, spec: str) -> str:
        if spec == "":
            return str(self)
        if spec == "x":
            return self.data.hex()
        if spec == "#x":
            return self.to_json()
        raise ValueError(f"unsupported format spec {spec!r} for {type(self).__name__}")


class H64(FixedHash):
    SIZE = 8


class H128(FixedHash):
    SIZE = 16


class H160(FixedHash):
    SIZE = 20


class H256(FixedHash):
    SIZE = 32


class H512(FixedHash):
    SIZE = 64


class H520(FixedHash):
    SIZE = 65


class H2048(FixedHash):
    """A 2048-bit logs bloom."""

    SIZE = 256


Address = H160


def encode_quantity(value: int) -> str:
    """Encode a non-negative integer as ``0x``-prefixed hex without leading zeros."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"expected an integer, got {value!r}")
    if value < 0:
        raise ValueError(f"quantities are unsigned, got {value}")
    return f"0x{value:x}"


def decode_quantity(value, bits: int = 256) -> int:
    """Decode a hex quantity of at most ``bits`` bits; the ``0x`` prefix is optional."""
    if not isinstance(value, str):
        raise DecodeError(f"expected a hex string, got {value!r}")
    digits = _strip_prefix(value)
    if not digits or len(digits) > bits // 4:
        raise DecodeError(
            f"invalid length {len(digits)}, expected 1 to {bits // 4} hex digits"
        )
    if not _HEX_DIGITS.fullmatch(digits):
        raise DecodeError(f"invalid hex character in {value!r}")
    return int(digits, 16)