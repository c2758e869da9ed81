"""A miner's work package."""

from __future__ import annotations

from dataclasses import dataclass

from chainrpc_types.uint import H256, DecodeError, encode_quantity

__all__ = ["Work"]

_U64_LIMIT = 1 << 64


@dataclass(frozen=True)
class Work:
    """Proof-of-work hash, seed hash, target and, where known, the block number."""

    pow_hash: H256
    seed_hash: H256
    target: H256
    number: int | None = None

    @classmethod
    def from_json(cls, data):
        """Decode a three- or four-element array; the fourth element is a JSON integer."""
        if not isinstance(data, list) or len(data) not in (3, 4):
            raise DecodeError(
                f"Cannot deserialize Work: expected an array of 3 or 4 elements, got {data!r}"
            )
        try:
            pow_hash, seed_hash, target = (H256.from_hex(item) for item in data[:3])
        except DecodeError as exc:
            raise DecodeError(f"Cannot deserialize Work: {exc}") from exc
        number = None
        if len(data) == 4:
            number = data[3]
            if isinstance(number, bool) or not isinstance(number, int) or not 0 <= number < _U64_LIMIT:
                raise DecodeError(f"Cannot deserialize Work: invalid block number {number!r}")
        return cls(pow_hash, seed_hash, target, number)

    def to_json(self) -> list:
        """Encode as an array; the block number, if any, as a hex quantity."""
        result = [self.pow_hash.to_json(), self.seed_hash.to_json(), self.target.to_json()]
        if self.number is not None:
            result.append(encode_quantity(self.number))
        return result