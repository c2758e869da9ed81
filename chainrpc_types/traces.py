"""Types of the ad-hoc trace API: transaction traces, VM traces and state diffs."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable

from chainrpc_types.bytes import decode_bytes, encode_bytes
from chainrpc_types.trace_filtering import ActionType, decode_action, decode_result
from chainrpc_types.uint import H160, H256, DecodeError, decode_quantity, encode_quantity

__all__ = [
    "TraceType",
    "encode_trace_types",
    "DiffKind",
    "Diff",
    "AccountDiff",
    "StateDiff",
    "TransactionTrace",
    "MemoryDiff",
    "StorageDiff",
    "VMExecutedOperation",
    "VMOperation",
    "VMTrace",
    "BlockTrace",
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


def _list(value, decode: Callable[[Any], Any]) -> list:
    if not isinstance(value, list):
        raise DecodeError(f"expected a list, got {value!r}")
    return [decode(item) for item in value]


def _uint(value, limit: int | None = None) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise DecodeError(f"expected a non-negative integer, got {value!r}")
    if limit is not None and value >= limit:
        raise DecodeError(f"integer {value} out of range")
    return value


def _u64(value) -> int:
    return _uint(value, _U64_LIMIT)


def _string(value) -> str:
    if not isinstance(value, str):
        raise DecodeError(f"expected a string, got {value!r}")
    return value


def _u256(value) -> int:
    return decode_quantity(value, 256)


class TraceType(Enum):
    """The kind of trace to make."""

    TRACE = "trace"
    VM_TRACE = "vmTrace"
    STATE_DIFF = "stateDiff"


def encode_trace_types(trace_types) -> list[str]:
    """Encode trace kinds as the list of names the API expects."""
    return [TraceType(trace_type).value for trace_type in trace_types]


class DiffKind(Enum):
    """How a value changed."""

    SAME = "="
    BORN = "+"
    DIED = "-"
    CHANGED = "*"


@dataclass(frozen=True)
class Diff:
    """A change of one value: unchanged, created (``after``), removed (``before``) or changed (both)."""

    kind: DiffKind
    before: Any = None
    after: Any = None

    def __post_init__(self) -> None:
        expected = {
            DiffKind.SAME: (False, False),
            DiffKind.BORN: (False, True),
            DiffKind.DIED: (True, False),
            DiffKind.CHANGED: (True, True),
        }[self.kind]
        if (self.before is not None, self.after is not None) != expected:
            raise ValueError(f"inconsistent values for a diff of kind {self.kind.name}")

    @classmethod
    def from_json(cls, data, decoder):
        """Decode ``"="``, ``{"+": v}``, ``{"-": v}`` or ``{"*": {"from": a, "to": b}}``."""
        if data == DiffKind.SAME.value:
            return cls(DiffKind.SAME)
        if not isinstance(data, dict) or len(data) != 1:
            raise DecodeError(f"expected a diff, got {data!r}")
        ((tag, payload),) = data.items()
        try:
            kind = DiffKind(tag)
        except ValueError:
            raise DecodeError(f"unknown variant `{tag}`, expected one of `=`, `+`, `-`, `*`") from None
        if kind is DiffKind.SAME:
            if payload is not None:
                raise DecodeError("unexpected value for an unchanged diff")
            return cls(DiffKind.SAME)
        if kind is DiffKind.BORN:
            return cls(kind, after=decoder(payload))
        if kind is DiffKind.DIED:
            return cls(kind, before=decoder(payload))
        payload = _object(payload, "changed value")
        return cls(
            kind,
            before=decoder(_field(payload, "from")),
            after=decoder(_field(payload, "to")),
        )

    def to_json(self, encoder):
        if self.kind is DiffKind.SAME:
            return DiffKind.SAME.value
        if self.kind is DiffKind.BORN:
            return {DiffKind.BORN.value: encoder(self.after)}
        if self.kind is DiffKind.DIED:
            return {DiffKind.DIED.value: encoder(self.before)}
        return {DiffKind.CHANGED.value: {"from": encoder(self.before), "to": encoder(self.after)}}


def _decode_storage(data) -> dict:
    data = _object(data, "storage")
    return {H256.from_hex(key): Diff.from_json(value, H256.from_hex) for key, value in data.items()}


@dataclass
class AccountDiff:
    """Changes of one account's balance, nonce, code and storage."""

    balance: Diff
    nonce: Diff
    code: Diff
    storage: dict = field(default_factory=dict)

    @classmethod
    def from_json(cls, data):
        data = _object(data, "account diff")
        return cls(
            balance=Diff.from_json(_field(data, "balance"), _u256),
            nonce=Diff.from_json(_field(data, "nonce"), _u256),
            code=Diff.from_json(_field(data, "code"), decode_bytes),
            storage=_decode_storage(_field(data, "storage")),
        )

    def to_json(self) -> dict:
        storage = sorted(
            ((key.to_json(), diff.to_json(H256.to_json)) for key, diff in self.storage.items()),
            key=lambda item: item[0],
        )
        return {
            "balance": self.balance.to_json(encode_quantity),
            "nonce": self.nonce.to_json(encode_quantity),
            "code": self.code.to_json(encode_bytes),
            "storage": dict(storage),
        }


@dataclass
class StateDiff:
    """Account changes keyed by address; encoded in address order."""

    accounts: dict = field(default_factory=dict)

    @classmethod
    def from_json(cls, data):
        data = _object(data, "state diff")
        return cls({H160.from_hex(key): AccountDiff.from_json(value) for key, value in data.items()})

    def to_json(self) -> dict:
        entries = sorted(
            ((address.to_json(), diff.to_json()) for address, diff in self.accounts.items()),
            key=lambda item: item[0],
        )
        return dict(entries)


def _action_type(value) -> ActionType:
    try:
        return ActionType(value)
    except ValueError:
        raise DecodeError(f"unknown action type `{value}`") from None


@dataclass
class TransactionTrace:
    """One trace of a transaction."""

    trace_address: list[int]
    subtraces: int
    action: Any
    action_type: ActionType
    result: Any = None
    error: str | None = None

    @classmethod
    def from_json(cls, data):
        data = _object(data, "transaction trace")
        return cls(
            trace_address=_list(_field(data, "traceAddress"), _uint),
            subtraces=_uint(_field(data, "subtraces")),
            action=decode_action(_field(data, "action")),
            action_type=_action_type(_field(data, "type")),
            result=decode_result(data.get("result")),
            error=_optional(data, "error", _string),
        )

    def to_json(self) -> dict:
        return {
            "traceAddress": list(self.trace_address),
            "subtraces": self.subtraces,
            "action": self.action.to_json(),
            "type": self.action_type.value,
            "result": None if self.result is None else self.result.to_json(),
            "error": self.error,
        }


@dataclass
class MemoryDiff:
    """A changed chunk of memory."""

    off: int = 0
    data: bytes = b""

    @classmethod
    def from_json(cls, data):
        data = _object(data, "memory diff")
        return cls(off=_uint(_field(data, "off")), data=decode_bytes(_field(data, "data")))

    def to_json(self) -> dict:
        return {"off": self.off, "data": encode_bytes(self.data)}


@dataclass
class StorageDiff:
    """A changed storage value."""

    key: int = 0
    val: int = 0

    @classmethod
    def from_json(cls, data):
        data = _object(data, "storage diff")
        return cls(key=_u256(_field(data, "key")), val=_u256(_field(data, "val")))

    def to_json(self) -> dict:
        return {"key": encode_quantity(self.key), "val": encode_quantity(self.val)}


@dataclass
class VMExecutedOperation:
    """The effects of one executed VM operation."""

    used: int = 0
    push: list[int] = field(default_factory=list)
    mem: MemoryDiff | None = None
    store: StorageDiff | None = None

    @classmethod
    def from_json(cls, data):
        data = _object(data, "executed operation")
        return cls(
            used=_u64(_field(data, "used")),
            push=_list(_field(data, "push"), _u256),
            mem=_optional(data, "mem", MemoryDiff.from_json),
            store=_optional(data, "store", StorageDiff.from_json),
        )

    def to_json(self) -> dict:
        return {
            "used": self.used,
            "push": [encode_quantity(value) for value in self.push],
            "mem": None if self.mem is None else self.mem.to_json(),
            "store": None if self.store is None else self.store.to_json(),
        }


@dataclass
class VMOperation:
    """One executed VM operation, with the nested trace of a call or create."""

    pc: int = 0
    cost: int = 0
    ex: VMExecutedOperation | None = None
    sub: VMTrace | None = None

    @classmethod
    def from_json(cls, data):
        data = _object(data, "VM operation")
        return cls(
            pc=_uint(_field(data, "pc")),
            cost=_u64(_field(data, "cost")),
            ex=_optional(data, "ex", VMExecutedOperation.from_json),
            sub=_optional(data, "sub", VMTrace.from_json),
        )

    def to_json(self) -> dict:
        return {
            "pc": self.pc,
            "cost": self.cost,
            "ex": None if self.ex is None else self.ex.to_json(),
            "sub": None if self.sub is None else self.sub.to_json(),
        }


@dataclass
class VMTrace:
    """A full VM trace of a call or create: the code and the operations executed."""

    code: bytes = b""
    ops: list[VMOperation] = field(default_factory=list)

    @classmethod
    def from_json(cls, data):
        data = _object(data, "VM trace")
        return cls(
            code=decode_bytes(_field(data, "code")),
            ops=_list(_field(data, "ops"), VMOperation.from_json),
        )

    def to_json(self) -> dict:
        return {"code": encode_bytes(self.code), "ops": [op.to_json() for op in self.ops]}


@dataclass
class BlockTrace:
    """The result of an ad-hoc trace: output, traces, VM trace and state diff."""

    output: bytes = b""
    trace: list[TransactionTrace] | None = None
    vm_trace: VMTrace | None = None
    state_diff: StateDiff | None = None
    transaction_hash: H256 | None = None

    @classmethod
    def from_json(cls, data):
        data = _object(data, "block trace")
        return cls(
            output=decode_bytes(_field(data, "output")),
            trace=_optional(data, "trace", lambda value: _list(value, TransactionTrace.from_json)),
            vm_trace=_optional(data, "vmTrace", VMTrace.from_json),
            state_diff=_optional(data, "stateDiff", StateDiff.from_json),
            transaction_hash=_optional(data, "transactionHash", H256.from_hex),
        )

    def to_json(self) -> dict:
        return {
            "output": encode_bytes(self.output),
            "trace": None if self.trace is None else [item.to_json() for item in self.trace],
            "vmTrace": None if self.vm_trace is None else self.vm_trace.to_json(),
            "stateDiff": None if self.state_diff is None else self.state_diff.to_json(),
            "transactionHash": None if self.transaction_hash is None else self.transaction_hash.to_json(),
        }