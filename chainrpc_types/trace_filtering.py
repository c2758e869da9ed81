"""Types of the transaction-trace filtering API."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Union

from chainrpc_types.block import encode_block_number
from chainrpc_types.bytes import decode_bytes, encode_bytes
from chainrpc_types.uint import H160, H256, DecodeError, decode_quantity, encode_quantity

__all__ = [
    "TraceFilter",
    "TraceFilterBuilder",
    "ActionType",
    "CallType",
    "RewardType",
    "CallResult",
    "CreateResult",
    "Call",
    "Create",
    "Suicide",
    "Reward",
    "Action",
    "Res",
    "decode_action",
    "decode_result",
    "Trace",
]

_U64_LIMIT = 1 << 64


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


def _uint(value, limit: int | None = None) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise DecodeError(f"expected a non-negative integer, got {value!r}")
    if limit is not None and value >= limit:
        raise DecodeError(f"integer {value} out of range")
    return value


def _string(value) -> str:
    if not isinstance(value, str):
        raise DecodeError(f"expected a string, got {value!r}")
    return value


def _enum(kind, value):
    try:
        return kind(value)
    except ValueError:
        expected = ", ".join(f"`{member.value}`" for member in kind)
        raise DecodeError(f"unknown variant `{value}`, expected one of {expected}") from None


@dataclass
class TraceFilter:
    """A filter for ``trace_filter``."""

    from_block: Any = None
    to_block: Any = None
    from_address: list[H160] | None = None
    to_address: list[H160] | None = None
    after: int | None = None
    count: int | None = None

    def to_json(self) -> dict:
        """Encode, leaving out every field that is not set."""
        result: dict = {}
        if self.from_block is not None:
            result["fromBlock"] = encode_block_number(self.from_block)
        if self.to_block is not None:
            result["toBlock"] = encode_block_number(self.to_block)
        if self.from_address is not None:
            result["fromAddress"] = [address.to_json() for address in self.from_address]
        if self.to_address is not None:
            result["toAddress"] = [address.to_json() for address in self.to_address]
        if self.after is not None:
            result["after"] = self.after
        if self.count is not None:
            result["count"] = self.count
        return result


class TraceFilterBuilder:
    """Builds a :class:`TraceFilter` step by step."""

    def __init__(self) -> None:
        self._filter = TraceFilter()

    def from_block(self, block):
        self._filter.from_block = block
        return self

    def to_block(self, block):
        self._filter.to_block = block
        return self

    def to_address(self, addresses):
        self._filter.to_address = list(addresses)
        return self

    def from_address(self, addresses):
        self._filter.from_address = list(addresses)
        return self

    def after(self, after):
        """Skip this many traces of the output."""
        self._filter.after = after
        return self

    def count(self, count):
        """Return at most this many traces."""
        self._filter.count = count
        return self

    def build(self) -> TraceFilter:
        return copy.deepcopy(self._filter)


class ActionType(Enum):
    """The kind of an external action."""

    CALL = "call"
    CREATE = "create"
    SUICIDE = "suicide"
    REWARD = "reward"


class CallType(Enum):
    """The kind of a call."""

    NONE = "none"
    CALL = "call"
    CALL_CODE = "callcode"
    DELEGATE_CALL = "delegatecall"
    STATIC_CALL = "staticcall"


class RewardType(Enum):
    """The kind of a reward."""

    BLOCK = "block"
    UNCLE = "uncle"
    EMPTY_STEP = "emptyStep"
    EXTERNAL = "external"


@dataclass
class CallResult:
    """The result of a call."""

    gas_used: int = 0
    output: bytes = b""

    @classmethod
    def from_json(cls, data):
        data = _object(data, "call result")
        return cls(
            gas_used=decode_quantity(_field(data, "gasUsed")),
            output=decode_bytes(_field(data, "output")),
        )

    def to_json(self) -> dict:
        return {"gasUsed": encode_quantity(self.gas_used), "output": encode_bytes(self.output)}


@dataclass
class CreateResult:
    """The result of a contract creation."""

    gas_used: int = 0
    code: bytes = b""
    address: H160 = field(default_factory=H160.zero)

    @classmethod
    def from_json(cls, data):
        data = _object(data, "create result")
        return cls(
            gas_used=decode_quantity(_field(data, "gasUsed")),
            code=decode_bytes(_field(data, "code")),
            address=H160.from_hex(_field(data, "address")),
        )

    def to_json(self) -> dict:
        return {
            "gasUsed": encode_quantity(self.gas_used),
            "code": encode_bytes(self.code),
            "address": self.address.to_json(),
        }


@dataclass
class Call:
    """A call action."""

    sender: H160 = field(default_factory=H160.zero)
    to: H160 = field(default_factory=H160.zero)
    value: int = 0
    gas: int = 0
    input: bytes = b""
    call_type: CallType = CallType.NONE

    @classmethod
    def from_json(cls, data):
        data = _object(data, "call")
        return cls(
            sender=H160.from_hex(_field(data, "from")),
            to=H160.from_hex(_field(data, "to")),
            value=decode_quantity(_field(data, "value")),
            gas=decode_quantity(_field(data, "gas")),
            input=decode_bytes(_field(data, "input")),
            call_type=_enum(CallType, _field(data, "callType")),
        )

    def to_json(self) -> dict:
        return {
            "from": self.sender.to_json(),
            "to": self.to.to_json(),
            "value": encode_quantity(self.value),
            "gas": encode_quantity(self.gas),
            "input": encode_bytes(self.input),
            "callType": self.call_type.value,
        }


@dataclass
class Create:
    """A contract creation action."""

    sender: H160 = field(default_factory=H160.zero)
    value: int = 0
    gas: int = 0
    init: bytes = b""

    @classmethod
    def from_json(cls, data):
        data = _object(data, "create")
        return cls(
            sender=H160.from_hex(_field(data, "from")),
            value=decode_quantity(_field(data, "value")),
            gas=decode_quantity(_field(data, "gas")),
            init=decode_bytes(_field(data, "init")),
        )

    def to_json(self) -> dict:
        return {
            "from": self.sender.to_json(),
            "value": encode_quantity(self.value),
            "gas": encode_quantity(self.gas),
            "init": encode_bytes(self.init),
        }


@dataclass
class Suicide:
    """A contract self-destruct action."""

    address: H160 = field(default_factory=H160.zero)
    refund_address: H160 = field(default_factory=H160.zero)
    balance: int = 0

    @classmethod
    def from_json(cls, data):
        data = _object(data, "suicide")
        return cls(
            address=H160.from_hex(_field(data, "address")),
            refund_address=H160.from_hex(_field(data, "refundAddress")),
            balance=decode_quantity(_field(data, "balance")),
        )

    def to_json(self) -> dict:
        return {
            "address": self.address.to_json(),
            "refundAddress": self.refund_address.to_json(),
            "balance": encode_quantity(self.balance),
        }


@dataclass
class Reward:
    """A reward action."""

    author: H160
    value: int
    reward_type: RewardType

    @classmethod
    def from_json(cls, data):
        data = _object(data, "reward")
        return cls(
            author=H160.from_hex(_field(data, "author")),
            value=decode_quantity(_field(data, "value")),
            reward_type=_enum(RewardType, _field(data, "rewardType")),
        )

    def to_json(self) -> dict:
        return {
            "author": self.author.to_json(),
            "value": encode_quantity(self.value),
            "rewardType": self.reward_type.value,
        }


Action = Union[Call, Create, Suicide, Reward]
Res = Union[CallResult, CreateResult, None]

_ACTION_KINDS = (Call, Create, Suicide, Reward)
_RESULT_KINDS = (CallResult, CreateResult)


def _first_match(kinds, data, name: str):
    for kind in kinds:
        try:
            return kind.from_json(data)
        except DecodeError:
            continue
    raise DecodeError(f"data did not match any variant of {name}")


def decode_action(data) -> Action:
    """Decode an action as the first of call, create, suicide and reward that fits."""
    return _first_match(_ACTION_KINDS, data, "action")


def decode_result(data) -> Res:
    """Decode a result as a call or create result; ``null`` decodes to ``None``."""
    if data is None:
        return None
    return _first_match(_RESULT_KINDS, data, "result")


def _list_of_uints(value) -> list[int]:
    if not isinstance(value, list):
        raise DecodeError(f"expected a list, got {value!r}")
    return [_uint(item) for item in value]


@dataclass
class Trace:
    """A trace located within a block and transaction."""

    action: Action
    result: Res
    trace_address: list[int]
    subtraces: int
    transaction_position: int | None
    transaction_hash: H256 | None
    block_number: int
    block_hash: H256
    action_type: ActionType
    error: str | None = None

    @classmethod
    def from_json(cls, data):
        data = _object(data, "trace")
        return cls(
            action=decode_action(_field(data, "action")),
            result=decode_result(data.get("result")),
            trace_address=_list_of_uints(_field(data, "traceAddress")),
            subtraces=_uint(_field(data, "subtraces")),
            transaction_position=_optional(data, "transactionPosition", _uint),
            transaction_hash=_optional(data, "transactionHash", H256.from_hex),
            block_number=_uint(_field(data, "blockNumber"), _U64_LIMIT),
            block_hash=H256.from_hex(_field(data, "blockHash")),
            action_type=_enum(ActionType, _field(data, "type")),
            error=_optional(data, "error", _string),
        )

    def to_json(self) -> dict:
        return {
            "action": self.action.to_json(),
            "result": None if self.result is None else self.result.to_json(),
            "traceAddress": list(self.trace_address),
            "subtraces": self.subtraces,
            "transactionPosition": self.transaction_position,
            "transactionHash": None if self.transaction_hash is None else self.transaction_hash.to_json(),
            "blockNumber": self.block_number,
            "blockHash": self.block_hash.to_json(),
            "type": self.action_type.value,
            "error": self.error,
        }