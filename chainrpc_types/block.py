"""Blocks, block headers, block numbers and identifiers for blocks and transactions."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Union

from chainrpc_types.bytes import decode_bytes, encode_bytes
from chainrpc_types.uint import (
    H64,
    H160,
    H256,
    H2048,
    DecodeError,
    decode_quantity,
    encode_quantity,
)

__all__ = [
    "BlockTag",
    "BlockNumber",
    "BlockId",
    "encode_block_number",
    "decode_block_number",
    "encode_block_id",
    "BlockHeader",
    "Block",
    "TransactionId",
]

_HEX_DIGITS = re.compile(r"[0-9a-fA-F]+")
_U64_LIMIT = 1 << 64


class BlockTag(Enum):
    """A named block."""

    LATEST = "latest"
    EARLIEST = "earliest"
    PENDING = "pending"


BlockNumber = Union[BlockTag, int]
BlockId = Union[H256, BlockTag, int]


def encode_block_number(value) -> str:
    """Encode a tag or a block number for the wire."""
    if isinstance(value, BlockTag):
        return value.value
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"expected a BlockTag or an integer, got {value!r}")
    if not 0 <= value < _U64_LIMIT:
        raise ValueError(f"block number {value} out of range")
    return f"0x{value:x}"


def decode_block_number(value):
    """Decode a tag or a ``0x``-prefixed block number."""
    if not isinstance(value, str):
        raise DecodeError(f"invalid block number: expected a string, got {value!r}")
    try:
        return BlockTag(value)
    except ValueError:
        pass
    if not value.startswith("0x"):
        raise DecodeError("invalid block number: missing 0x prefix")
    digits = value[2:]
    if not digits:
        raise DecodeError("invalid block number: cannot parse integer from empty string")
    if not _HEX_DIGITS.fullmatch(digits):
        raise DecodeError("invalid block number: invalid digit found in string")
    number = int(digits, 16)
    if number >= _U64_LIMIT:
        raise DecodeError("invalid block number: number too large to fit in target type")
    return number


def encode_block_id(value):
    """Encode a block hash as an EIP-1898 object, or a block number as a string."""
    if isinstance(value, H256):
        return {"blockHash": value.to_json()}
    return encode_block_number(value)


def _object(data, name: str) -> dict:
    if not isinstance(data, dict):
        raise DecodeError(f"expected an object for {name}, got {type(data).__name__}")
    return data


def _field(data: dict, key: str):
    try:
        return data[key]
    except KeyError:
        raise DecodeError(f"missing field `{key}`") from None


def _optional(data: dict, key: str, decode: Callable[[Any], Any]):
    value = data.get(key)
    return None if value is None else decode(value)


def _list(value, decode: Callable[[Any], Any]) -> list:
    if not isinstance(value, list):
        raise DecodeError(f"expected a list, got {value!r}")
    return [decode(item) for item in value]


def _u64(value) -> int:
    return decode_quantity(value, 64)


def _u256(value) -> int:
    return decode_quantity(value, 256)


def _or_none(value, encode: Callable[[Any], Any]):
    return None if value is None else encode(value)


def _hash_to_json(value: H256):
    return value.to_json()


def _common_fields(data: dict) -> dict:
    return {
        "hash": _optional(data, "hash", H256.from_hex),
        "parent_hash": H256.from_hex(_field(data, "parentHash")),
        "uncles_hash": H256.from_hex(_field(data, "sha3Uncles")),
        "author": _optional(data, "miner", H160.from_hex) or H160.zero(),
        "state_root": H256.from_hex(_field(data, "stateRoot")),
        "transactions_root": H256.from_hex(_field(data, "transactionsRoot")),
        "receipts_root": H256.from_hex(_field(data, "receiptsRoot")),
        "number": _optional(data, "number", _u64),
        "gas_used": _u256(_field(data, "gasUsed")),
        "gas_limit": _u256(_field(data, "gasLimit")),
        "base_fee_per_gas": _optional(data, "baseFeePerGas", _u256),
        "extra_data": decode_bytes(_field(data, "extraData")),
        "timestamp": _u256(_field(data, "timestamp")),
        "difficulty": _u256(_field(data, "difficulty")),
        "mix_hash": _optional(data, "mixHash", H256.from_hex),
        "nonce": _optional(data, "nonce", H64.from_hex),
    }


@dataclass(kw_only=True)
class BlockHeader:
    """A block header as returned by RPC calls."""

    hash: H256 | None
    parent_hash: H256
    uncles_hash: H256
    author: H160 = field(default_factory=H160.zero)
    state_root: H256
    transactions_root: H256
    receipts_root: H256
    number: int | None
    gas_used: int
    gas_limit: int
    base_fee_per_gas: int | None = None
    extra_data: bytes
    logs_bloom: H2048
    timestamp: int
    difficulty: int
    mix_hash: H256 | None
    nonce: H64 | None

    @classmethod
    def from_json(cls, data):
        data = _object(data, "block header")
        return cls(
            logs_bloom=H2048.from_hex(_field(data, "logsBloom")),
            **_common_fields(data),
        )

    def to_json(self) -> dict:
        result = {
            "hash": _or_none(self.hash, _hash_to_json),
            "parentHash": self.parent_hash.to_json(),
            "sha3Uncles": self.uncles_hash.to_json(),
            "miner": self.author.to_json(),
            "stateRoot": self.state_root.to_json(),
            "transactionsRoot": self.transactions_root.to_json(),
            "receiptsRoot": self.receipts_root.to_json(),
            "number": _or_none(self.number, encode_quantity),
            "gasUsed": encode_quantity(self.gas_used),
            "gasLimit": encode_quantity(self.gas_limit),
        }
        if self.base_fee_per_gas is not None:
            result["baseFeePerGas"] = encode_quantity(self.base_fee_per_gas)
        result.update(
            {
                "extraData": encode_bytes(self.extra_data),
                "logsBloom": self.logs_bloom.to_json(),
                "timestamp": encode_quantity(self.timestamp),
                "difficulty": encode_quantity(self.difficulty),
                "mixHash": _or_none(self.mix_hash, _hash_to_json),
                "nonce": _or_none(self.nonce, _hash_to_json),
            }
        )
        return result


@dataclass
class Block:
    """A block as returned by RPC calls; transactions are hashes or full objects."""

    hash: H256 | None = None
    parent_hash: H256 = field(default_factory=H256.zero)
    uncles_hash: H256 = field(default_factory=H256.zero)
    author: H160 = field(default_factory=H160.zero)
    state_root: H256 = field(default_factory=H256.zero)
    transactions_root: H256 = field(default_factory=H256.zero)
    receipts_root: H256 = field(default_factory=H256.zero)
    number: int | None = None
    gas_used: int = 0
    gas_limit: int = 0
    base_fee_per_gas: int | None = None
    extra_data: bytes = b""
    logs_bloom: H2048 | None = None
    timestamp: int = 0
    difficulty: int = 0
    total_difficulty: int | None = None
    seal_fields: list[bytes] = field(default_factory=list)
    uncles: list[H256] = field(default_factory=list)
    transactions: list[Any] = field(default_factory=list)
    size: int | None = None
    mix_hash: H256 | None = None
    nonce: H64 | None = None

    @classmethod
    def from_json(cls, data, transaction_decoder=None):
        """Decode a block; ``transaction_decoder`` turns each transaction entry into a value."""
        data = _object(data, "block")
        decode_tx = transaction_decoder or (lambda value: value)
        seal_fields = data.get("sealFields", [])
        return cls(
            logs_bloom=_optional(data, "logsBloom", H2048.from_hex),
            total_difficulty=_optional(data, "totalDifficulty", _u256),
            seal_fields=_list(seal_fields, decode_bytes),
            uncles=_list(_field(data, "uncles"), H256.from_hex),
            transactions=_list(_field(data, "transactions"), decode_tx),
            size=_optional(data, "size", _u256),
            **_common_fields(data),
        )

    def to_json(self, transaction_encoder=None) -> dict:
        """Encode a block; ``transaction_encoder`` turns each transaction into JSON."""
        encode_tx = transaction_encoder or (lambda value: value)
        result = {
            "hash": _or_none(self.hash, _hash_to_json),
            "parentHash": self.parent_hash.to_json(),
            "sha3Uncles": self.uncles_hash.to_json(),
            "miner": self.author.to_json(),
            "stateRoot": self.state_root.to_json(),
            "transactionsRoot": self.transactions_root.to_json(),
            "receiptsRoot": self.receipts_root.to_json(),
            "number": _or_none(self.number, encode_quantity),
            "gasUsed": encode_quantity(self.gas_used),
            "gasLimit": encode_quantity(self.gas_limit),
        }
        if self.base_fee_per_gas is not None:
            result["baseFeePerGas"] = encode_quantity(self.base_fee_per_gas)
        result.update(
            {
                "extraData": encode_bytes(self.extra_data),
                "logsBloom": _or_none(self.logs_bloom, _hash_to_json),
                "timestamp": encode_quantity(self.timestamp),
                "difficulty": encode_quantity(self.difficulty),
                "totalDifficulty": _or_none(self.total_difficulty, encode_quantity),
                "sealFields": [encode_bytes(seal) for seal in self.seal_fields],
                "uncles": [uncle.to_json() for uncle in self.uncles],
                "transactions": [encode_tx(tx) for tx in self.transactions],
                "size": _or_none(self.size, encode_quantity),
                "mixHash": _or_none(self.mix_hash, _hash_to_json),
                "nonce": _or_none(self.nonce, _hash_to_json),
            }
        )
        return result


@dataclass(frozen=True)
class TransactionId:
    """Identifies a transaction by its hash, or by its block and index within it."""

    hash: H256 | None = None
    block: BlockId | None = None
    index: int | None = None

    def __post_init__(self) -> None:
        by_hash = self.hash is not None and self.block is None and self.index is None
        by_block = self.hash is None and self.block is not None and self.index is not None
        if not (by_hash or by_block):
            raise ValueError("a transaction id needs either a hash or a block and an index")

    @classmethod
    def by_hash(cls, hash):
        return cls(hash=hash)

    @classmethod
    def by_block(cls, block, index):
        return cls(block=block, index=index)