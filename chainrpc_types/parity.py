"""Peer information and pending-transaction filters of OpenEthereum/Parity nodes."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable

from chainrpc_types.uint import H160, DecodeError, decode_quantity, encode_quantity

__all__ = [
    "EthProtocolInfo",
    "PipProtocolInfo",
    "PeerProtocolsInfo",
    "PeerNetworkInfo",
    "ParityPeerInfo",
    "ParityPeerType",
    "Comparison",
    "FilterCondition",
    "ToFilter",
    "ParityPendingTransactionFilter",
    "ParityPendingTransactionFilterBuilder",
]

_U32_LIMIT = 1 << 32


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


def _string(value) -> str:
    if not isinstance(value, str):
        raise DecodeError(f"expected a string, got {value!r}")
    return value


def _uint(value, limit: int | None = None) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise DecodeError(f"expected a non-negative integer, got {value!r}")
    if limit is not None and value >= limit:
        raise DecodeError(f"integer {value} out of range")
    return value


def _u32(value) -> int:
    return _uint(value, _U32_LIMIT)


@dataclass
class EthProtocolInfo:
    """Eth protocol version, difficulty and head of chain of a peer."""

    version: int
    difficulty: int | None
    head: str

    @classmethod
    def from_json(cls, data):
        data = _object(data, "eth protocol info")
        return cls(
            version=_u32(_field(data, "version")),
            difficulty=_optional(data, "difficulty", decode_quantity),
            head=_string(_field(data, "head")),
        )

    def to_json(self) -> dict:
        return {
            "version": self.version,
            "difficulty": None if self.difficulty is None else encode_quantity(self.difficulty),
            "head": self.head,
        }


@dataclass
class PipProtocolInfo:
    """PIP protocol version, difficulty and head of chain of a peer."""

    version: int
    difficulty: int
    head: str

    @classmethod
    def from_json(cls, data):
        data = _object(data, "pip protocol info")
        return cls(
            version=_u32(_field(data, "version")),
            difficulty=decode_quantity(_field(data, "difficulty")),
            head=_string(_field(data, "head")),
        )

    def to_json(self) -> dict:
        return {
            "version": self.version,
            "difficulty": encode_quantity(self.difficulty),
            "head": self.head,
        }


@dataclass
class PeerProtocolsInfo:
    """The chain protocols a peer speaks."""

    eth: EthProtocolInfo | None = None
    pip: PipProtocolInfo | None = None

    @classmethod
    def from_json(cls, data):
        data = _object(data, "peer protocols info")
        return cls(
            eth=_optional(data, "eth", EthProtocolInfo.from_json),
            pip=_optional(data, "pip", PipProtocolInfo.from_json),
        )

    def to_json(self) -> dict:
        return {
            "eth": None if self.eth is None else self.eth.to_json(),
            "pip": None if self.pip is None else self.pip.to_json(),
        }


@dataclass
class PeerNetworkInfo:
    """Remote and local addresses of a peer connection."""

    remote_address: str
    local_address: str

    @classmethod
    def from_json(cls, data):
        data = _object(data, "peer network info")
        return cls(
            remote_address=_string(_field(data, "remoteAddress")),
            local_address=_string(_field(data, "localAddress")),
        )

    def to_json(self) -> dict:
        return {"remoteAddress": self.remote_address, "localAddress": self.local_address}


@dataclass
class ParityPeerInfo:
    """Details of one peer."""

    id: str | None
    name: str
    caps: list[str]
    network: PeerNetworkInfo
    protocols: PeerProtocolsInfo

    @classmethod
    def from_json(cls, data):
        data = _object(data, "peer info")
        caps = _field(data, "caps")
        if not isinstance(caps, list):
            raise DecodeError(f"expected a list of capabilities, got {caps!r}")
        return cls(
            id=_optional(data, "id", _string),
            name=_string(_field(data, "name")),
            caps=[_string(cap) for cap in caps],
            network=PeerNetworkInfo.from_json(_field(data, "network")),
            protocols=PeerProtocolsInfo.from_json(_field(data, "protocols")),
        )

    def to_json(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "caps": list(self.caps),
            "network": self.network.to_json(),
            "protocols": self.protocols.to_json(),
        }


@dataclass
class ParityPeerType:
    """Active, connected and maximum peer counts, with the list of peers."""

    active: int
    connected: int
    max: int
    peers: list[ParityPeerInfo] = field(default_factory=list)

    @classmethod
    def from_json(cls, data):
        data = _object(data, "peers")
        peers = _field(data, "peers")
        if not isinstance(peers, list):
            raise DecodeError(f"expected a list of peers, got {peers!r}")
        return cls(
            active=_uint(_field(data, "active")),
            connected=_uint(_field(data, "connected")),
            max=_u32(_field(data, "max")),
            peers=[ParityPeerInfo.from_json(peer) for peer in peers],
        )

    def to_json(self) -> dict:
        return {
            "active": self.active,
            "connected": self.connected,
            "max": self.max,
            "peers": [peer.to_json() for peer in self.peers],
        }


class Comparison(Enum):
    """How a filter condition compares a field with its value."""

    LOWER_THAN = "lt"
    EQUAL = "eq"
    GREATER_THAN = "gt"


@dataclass(frozen=True)
class FilterCondition:
    """A comparison of a transaction field with a value."""

    comparison: Comparison
    value: Any

    def to_json(self, encoder) -> dict:
        """Encode as ``{"lt"|"eq"|"gt": encoder(value)}``."""
        return {self.comparison.value: encoder(self.value)}


def _condition(value) -> FilterCondition:
    if isinstance(value, FilterCondition):
        return value
    return FilterCondition(Comparison.EQUAL, value)


@dataclass(frozen=True)
class ToFilter:
    """Matches a recipient address, or contract creation when no address is set."""

    target: H160 | None = None

    @classmethod
    def address(cls, address):
        return cls(address)

    @classmethod
    def contract_creation(cls):
        return cls(None)

    @property
    def is_contract_creation(self) -> bool:
        return self.target is None

    def to_json(self) -> dict:
        if self.target is None:
            return {"action": "contract_creation"}
        return {"eq": self.target.to_json()}


@dataclass(frozen=True)
class ParityPendingTransactionFilter:
    """A filter for pending transactions."""

    sender: FilterCondition | None = None
    to: ToFilter | None = None
    gas: FilterCondition | None = None
    gas_price: FilterCondition | None = None
    value: FilterCondition | None = None
    nonce: FilterCondition | None = None

    @classmethod
    def builder(cls):
        return ParityPendingTransactionFilterBuilder()

    def to_json(self) -> dict:
        result: dict = {}
        if self.sender is not None:
            result["from"] = self.sender.to_json(H160.to_json)
        if self.to is not None:
            result["to"] = self.to.to_json()
        quantities = (
            ("gas", self.gas),
            ("gas_price", self.gas_price),
            ("value", self.value),
            ("nonce", self.nonce),
        )
        for key, condition in quantities:
            if condition is not None:
                result[key] = condition.to_json(encode_quantity)
        return result


class ParityPendingTransactionFilterBuilder:
    """Builds a :class:`ParityPendingTransactionFilter`; plain values mean equality."""

    def __init__(self) -> None:
        self._filter = ParityPendingTransactionFilter()

    def _set(self, **changes):
        self._filter = dataclasses.replace(self._filter, **changes)
        return self

    def sender(self, address):
        return self._set(sender=FilterCondition(Comparison.EQUAL, address))

    def to(self, to_or_action):
        return self._set(to=to_or_action)

    def gas(self, gas):
        return self._set(gas=_condition(gas))

    def gas_price(self, gas_price):
        return self._set(gas_price=_condition(gas_price))

    def value(self, value):
        return self._set(value=_condition(value))

    def nonce(self, nonce):
        return self._set(nonce=_condition(nonce))

    def build(self) -> ParityPendingTransactionFilter:
        return self._filter