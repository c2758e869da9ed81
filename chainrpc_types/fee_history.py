"""The result of an ``eth_feeHistory`` call."""

from __future__ import annotations

from dataclasses import dataclass

from chainrpc_types.block import decode_block_number, encode_block_number
from chainrpc_types.uint import DecodeError, decode_quantity, encode_quantity

__all__ = ["FeeHistory"]


def _list(value, name: str) -> list:
    if not isinstance(value, list):
        raise DecodeError(f"expected a list for {name}, got {value!r}")
    return value


def _ratio(value) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise DecodeError(f"expected a number, got {value!r}")
    return float(value)


@dataclass
class FeeHistory:
    """Base fees, gas-used ratios and optional rewards over a range of blocks."""

    oldest_block: object
    base_fee_per_gas: list[int]
    gas_used_ratio: list[float]
    reward: list[list[int]] | None = None

    @classmethod
    def from_json(cls, data):
        if not isinstance(data, dict):
            raise DecodeError(f"expected an object for fee history, got {type(data).__name__}")
        for key in ("oldestBlock", "baseFeePerGas", "gasUsedRatio"):
            if key not in data:
                raise DecodeError(f"missing field `{key}`")
        reward = data.get("reward")
        return cls(
            oldest_block=decode_block_number(data["oldestBlock"]),
            base_fee_per_gas=[decode_quantity(v) for v in _list(data["baseFeePerGas"], "baseFeePerGas")],
            gas_used_ratio=[_ratio(v) for v in _list(data["gasUsedRatio"], "gasUsedRatio")],
            reward=None
            if reward is None
            else [[decode_quantity(v) for v in _list(row, "reward")] for row in _list(reward, "reward")],
        )

    def to_json(self) -> dict:
        return {
            "oldestBlock": encode_block_number(self.oldest_block),
            "baseFeePerGas": [encode_quantity(v) for v in self.base_fee_per_gas],
            "gasUsedRatio": [float(v) for v in self.gas_used_ratio],
            "reward": None
            if self.reward is None
            else [[encode_quantity(v) for v in row] for row in self.reward],
        }