"""Account and storage proofs returned by ``eth_getProof`` (EIP-1186)."""

from __future__ import annotations

from dataclasses import dataclass, field

from chainrpc_types.bytes import decode_bytes, encode_bytes
from chainrpc_types.uint import H256, DecodeError, decode_quantity, encode_quantity

__all__ = ["StorageProof", "Proof"]


def _object(data, name: str) -> dict:
    if not isinstance(data, dict):
        raise DecodeError(f"expected an object for {name}, got {type(data).__name__}")
    return data


def _field(data: dict, key: str):
    try:
        return data[key]
    except KeyError:
        raise DecodeError(f"missing field `{key}`") from None


def _list(value) -> list:
    if not isinstance(value, list):
        raise DecodeError(f"expected a list, got {value!r}")
    return value


@dataclass
class StorageProof:
    """A storage key, its value and the proof for it."""

    key: int = 0
    value: int = 0
    proof: list[bytes] = field(default_factory=list)

    @classmethod
    def from_json(cls, data):
        data = _object(data, "storage proof")
        return cls(
            key=decode_quantity(_field(data, "key")),
            value=decode_quantity(_field(data, "value")),
            proof=[decode_bytes(node) for node in _list(_field(data, "proof"))],
        )

    def to_json(self) -> dict:
        return {
            "key": encode_quantity(self.key),
            "value": encode_quantity(self.value),
            "proof": [encode_bytes(node) for node in self.proof],
        }


@dataclass
class Proof:
    """An account's state together with Merkle proofs of it and of requested storage."""

    balance: int = 0
    code_hash: H256 = field(default_factory=H256.zero)
    nonce: int = 0
    storage_hash: H256 = field(default_factory=H256.zero)
    account_proof: list[bytes] = field(default_factory=list)
    storage_proof: list[StorageProof] = field(default_factory=list)

    @classmethod
    def from_json(cls, data):
        data = _object(data, "proof")
        return cls(
            balance=decode_quantity(_field(data, "balance")),
            code_hash=H256.from_hex(_field(data, "codeHash")),
            nonce=decode_quantity(_field(data, "nonce")),
            storage_hash=H256.from_hex(_field(data, "storageHash")),
            account_proof=[decode_bytes(node) for node in _list(_field(data, "accountProof"))],
            storage_proof=[StorageProof.from_json(item) for item in _list(_field(data, "storageProof"))],
        )

    def to_json(self) -> dict:
        return {
            "balance": encode_quantity(self.balance),
            "codeHash": self.code_hash.to_json(),
            "nonce": encode_quantity(self.nonce),
            "storageHash": self.storage_hash.to_json(),
            "accountProof": [encode_bytes(node) for node in self.account_proof],
            "storageProof": [item.to_json() for item in self.storage_proof],
        }