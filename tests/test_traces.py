import json

import pytest

from chainrpc_types.trace_filtering import ActionType, Call, CallResult
from chainrpc_types.traces import (
    AccountDiff,
    BlockTrace,
    Diff,
    DiffKind,
    MemoryDiff,
    StateDiff,
    StorageDiff,
    TraceType,
    TransactionTrace,
    VMExecutedOperation,
    VMOperation,
    VMTrace,
    encode_trace_types,
)
from chainrpc_types.uint import H160, H256, DecodeError

EXAMPLE_TRACES = """[{
  "output": "0x",
  "stateDiff": {
    "0x5df9b87991262f6ba471f09758cde1c0fc1de734": {
      "balance": {"+": "0x7a69"},
      "code": {"+": "0x"},
      "nonce": {"+": "0x0"},
      "storage": {}
    },
    "0xa1e4380a3b1f749673e270229993ee55f35663b4": {
      "balance": {"*": {"from": "0x6c6b935b8bbd400000", "to": "0x6c5d01021be7168597"}},
      "code": "=",
      "nonce": {"*": {"from": "0x0", "to": "0x1"}},
      "storage": {}
    },
    "0xe6a7a1d47ff21b6321162aea7c6cb457d5476bca": {
      "balance": {"*": {"from": "0xf3426785a8ab466000", "to": "0xf350f9df18816f6000"}},
      "code": "=",
      "nonce": "=",
      "storage": {}
    }
  },
  "trace": [
    {
      "action": {
        "callType": "call",
        "from": "0xa1e4380a3b1f749673e270229993ee55f35663b4",
        "gas": "0x0",
        "input": "0x",
        "to": "0x5df9b87991262f6ba471f09758cde1c0fc1de734",
        "value": "0x7a69"
      },
      "result": {"gasUsed": "0x0", "output": "0x"},
      "subtraces": 0,
      "traceAddress": [],
      "type": "call"
    }
  ],
  "transactionHash": "0x5c504ed432cb51138bcf09aa5e8a410dd4a1e204ef84bfed1be16dfba1b22060",
  "vmTrace": {"code": "0x", "ops": []}
}]"""

EXAMPLE_TRACE = """{
  "output": "0x",
  "stateDiff": {
    "0x01f0eb5c4b0a9d8285b67195f5f10ce22971a102": {
      "balance": {"*": {"from": "0x7361af5818297800", "to": "0x734a36bb22448000"}},
      "code": "=",
      "nonce": {"*": {"from": "0x1d6", "to": "0x1d7"}},
      "storage": {}
    },
    "0xb2930b35844a230f00e51431acae96fe543a0347": {
      "balance": {"*": {"from": "0x11b39d46046d14d44e5", "to": "0x11b39d687ebea8b3ce5"}},
      "code": "=",
      "nonce": "=",
      "storage": {}
    }
  },
  "trace": [
    {
      "action": {
        "callType": "call",
        "from": "0x01f0eb5c4b0a9d8285b67195f5f10ce22971a102",
        "gas": "0xa5f8",
        "input": "0x1a695230000000000000000000000000c227a75b32ed37d3f9d6341b9904d003dad3b1b3",
        "to": "0x0b95993a39a363d99280ac950f5e4536ab5c5566",
        "value": "0x1550f7dca70000"
      },
      "result": {"gasUsed": "0x1ddf", "output": "0x"},
      "subtraces": 1,
      "traceAddress": [],
      "type": "call"
    },
    {
      "action": {
        "callType": "call",
        "from": "0x0b95993a39a363d99280ac950f5e4536ab5c5566",
        "gas": "0x8fc",
        "input": "0x",
        "to": "0xc227a75b32ed37d3f9d6341b9904d003dad3b1b3",
        "value": "0x1550f7dca70000"
      },
      "result": {"gasUsed": "0x0", "output": "0x"},
      "subtraces": 0,
      "traceAddress": [0],
      "type": "call"
    }
  ],
  "vmTrace": {
    "code": "0x6060604052",
    "ops": [
      {"cost": 3, "ex": {"mem": null, "push": ["0x60"], "store": null, "used": 42485}, "pc": 0, "sub": null},
      {
        "cost": 12,
        "ex": {
          "mem": {"data": "0x0000000000000000000000000000000000000000000000000000000000000060", "off": 64},
          "push": [],
          "store": null,
          "used": 42470
        },
        "pc": 4,
        "sub": null
      },
      {
        "cost": 3,
        "ex": {
          "mem": null,
          "push": ["0x100000000000000000000000000000000000000000000000000000000", "0x1a695230"],
          "store": null,
          "used": 42440
        },
        "pc": 44,
        "sub": null
      },
      {"cost": 9700, "ex": {"mem": null, "push": ["0x1"], "store": null, "used": 34884}, "pc": 294,
       "sub": {"code": "0x", "ops": []}}
    ]
  }
}"""


def test_serialize_trace_type():
    trace_types = [TraceType.TRACE, TraceType.VM_TRACE, TraceType.STATE_DIFF]
    encoded = json.dumps(encode_trace_types(trace_types), separators=(",", ":"))
    assert encoded == '["trace","vmTrace","stateDiff"]'


def test_encode_trace_types_accepts_names():
    assert encode_trace_types(["vmTrace", "trace"]) == ["vmTrace", "trace"]


def test_encode_trace_types_rejects_unknown():
    with pytest.raises(ValueError):
        encode_trace_types(["bogus"])


def test_deserialize_blocktrace():
    trace = BlockTrace.from_json(json.loads(EXAMPLE_TRACE))
    assert trace.output == b""
    assert trace.transaction_hash is None
    assert len(trace.trace) == 2
    first, second = trace.trace
    assert isinstance(first.action, Call)
    assert first.action.gas == 0xA5F8
    assert first.action.value == 0x1550F7DCA70000
    assert first.action_type is ActionType.CALL
    assert isinstance(first.result, CallResult)
    assert first.result.gas_used == 0x1DDF
    assert first.subtraces == 1
    assert second.trace_address == [0]

    ops = trace.vm_trace.ops
    assert trace.vm_trace.code == bytes.fromhex("6060604052")
    assert [op.pc for op in ops] == [0, 4, 44, 294]
    assert ops[0].ex.push == [0x60]
    assert ops[1].ex.mem.off == 64
    assert ops[1].ex.mem.data == bytes(31) + b"\x60"
    assert ops[2].ex.push == [1 << 224, 0x1A695230]
    assert ops[3].cost == 9700
    assert ops[3].sub.code == b""
    assert ops[3].sub.ops == []
    assert ops[0].sub is None


def test_blocktrace_state_diff_values():
    trace = BlockTrace.from_json(json.loads(EXAMPLE_TRACE))
    accounts = trace.state_diff.accounts
    account = accounts[H160.from_hex("0x01f0eb5c4b0a9d8285b67195f5f10ce22971a102")]
    assert account.balance == Diff(DiffKind.CHANGED, 0x7361AF5818297800, 0x734A36BB22448000)
    assert account.nonce == Diff(DiffKind.CHANGED, 0x1D6, 0x1D7)
    assert account.code.kind is DiffKind.SAME
    assert account.storage == {}


def test_deserialize_blocktraces():
    traces = [BlockTrace.from_json(item) for item in json.loads(EXAMPLE_TRACES)]
    assert len(traces) == 1
    trace = traces[0]
    assert trace.transaction_hash.to_json() == (
        "0x5c504ed432cb51138bcf09aa5e8a410dd4a1e204ef84bfed1be16dfba1b22060"
    )
    assert trace.vm_trace.ops == []
    created = trace.state_diff.accounts[H160.from_hex("0x5df9b87991262f6ba471f09758cde1c0fc1de734")]
    assert created.balance == Diff(DiffKind.BORN, after=0x7A69)
    assert created.code == Diff(DiffKind.BORN, after=b"")
    assert created.nonce == Diff(DiffKind.BORN, after=0)
    untouched = trace.state_diff.accounts[H160.from_hex("0xe6a7a1d47ff21b6321162aea7c6cb457d5476bca")]
    assert untouched.nonce.kind is DiffKind.SAME
    assert trace.trace[0].action.value == 0x7A69


def test_blocktraces_round_trip():
    original = json.loads(EXAMPLE_TRACES)[0]
    encoded = BlockTrace.from_json(original).to_json()
    assert encoded["stateDiff"] == original["stateDiff"]
    assert encoded["transactionHash"] == original["transactionHash"]
    assert encoded["vmTrace"] == original["vmTrace"]
    assert BlockTrace.from_json(encoded).to_json() == encoded


def test_blocktrace_round_trip_vm_trace():
    original = json.loads(EXAMPLE_TRACE)
    encoded = BlockTrace.from_json(original).to_json()
    assert encoded["vmTrace"] == original["vmTrace"]
    assert encoded["trace"][1]["traceAddress"] == [0]
    assert encoded["trace"][0]["type"] == "call"


def test_blocktrace_missing_output():
    with pytest.raises(DecodeError):
        BlockTrace.from_json({"trace": None})


def test_blocktrace_optional_fields_default_to_none():
    trace = BlockTrace.from_json({"output": "0x01"})
    assert trace.output == b"\x01"
    assert trace.trace is None
    assert trace.vm_trace is None
    assert trace.state_diff is None


@pytest.mark.parametrize(
    "data, expected",
    [
        ("=", Diff(DiffKind.SAME)),
        ({"+": "0x10"}, Diff(DiffKind.BORN, after=16)),
        ({"-": "0x10"}, Diff(DiffKind.DIED, before=16)),
        ({"*": {"from": "0x1", "to": "0x2"}}, Diff(DiffKind.CHANGED, 1, 2)),
    ],
)
def test_diff_decode_and_encode(data, expected):
    from chainrpc_types.uint import decode_quantity, encode_quantity

    decoded = Diff.from_json(data, decode_quantity)
    assert decoded == expected
    assert decoded.to_json(encode_quantity) == data


@pytest.mark.parametrize(
    "data",
    ["+", {"?": "0x1"}, {"*": {"from": "0x1"}}, {"+": "0x1", "-": "0x2"}, 5],
)
def test_diff_rejects_malformed(data):
    from chainrpc_types.uint import decode_quantity

    with pytest.raises(DecodeError):
        Diff.from_json(data, decode_quantity)


def test_diff_rejects_inconsistent_construction():
    with pytest.raises(ValueError):
        Diff(DiffKind.BORN)
    with pytest.raises(ValueError):
        Diff(DiffKind.SAME, before=1)


def test_account_diff_storage_round_trip():
    key_low = "0x" + "00" * 31 + "01"
    key_high = "0x" + "ff" * 32
    data = {
        "balance": "=",
        "nonce": "=",
        "code": {"-": "0xdead"},
        "storage": {
            key_high: {"+": "0x" + "00" * 31 + "05"},
            key_low: {"*": {"from": "0x" + "00" * 32, "to": "0x" + "00" * 31 + "07"}},
        },
    }
    diff = AccountDiff.from_json(data)
    assert diff.code == Diff(DiffKind.DIED, before=b"\xde\xad")
    assert diff.storage[H256.from_hex(key_high)].after.to_json() == "0x" + "00" * 31 + "05"
    encoded = diff.to_json()
    assert list(encoded["storage"]) == [key_low, key_high]
    assert encoded == {**data, "storage": {key_low: data["storage"][key_low], key_high: data["storage"][key_high]}}


def test_state_diff_encodes_in_address_order():
    same = {"balance": "=", "nonce": "=", "code": "=", "storage": {}}
    high = "0x" + "ee" * 20
    low = "0x" + "11" * 20
    state = StateDiff.from_json({high: same, low: same})
    assert list(state.to_json()) == [low, high]


def test_transaction_trace_without_result():
    data = {
        "action": {
            "address": "0x" + "11" * 20,
            "refundAddress": "0x" + "22" * 20,
            "balance": "0x5",
        },
        "type": "suicide",
        "subtraces": 0,
        "traceAddress": [1, 2],
        "result": None,
        "error": "Reverted",
    }
    trace = TransactionTrace.from_json(data)
    assert trace.result is None
    assert trace.error == "Reverted"
    assert trace.action.balance == 5
    assert trace.action_type is ActionType.SUICIDE
    assert trace.to_json() == {
        "traceAddress": [1, 2],
        "subtraces": 0,
        "action": data["action"],
        "type": "suicide",
        "result": None,
        "error": "Reverted",
    }


def test_transaction_trace_unknown_type():
    with pytest.raises(DecodeError):
        TransactionTrace.from_json(
            {
                "action": {"author": "0x" + "11" * 20, "value": "0x0", "rewardType": "block"},
                "type": "explode",
                "subtraces": 0,
                "traceAddress": [],
            }
        )


def test_memory_and_storage_diff_round_trip():
    memory = MemoryDiff.from_json({"off": 32, "data": "0x0102"})
    assert memory == MemoryDiff(off=32, data=b"\x01\x02")
    assert memory.to_json() == {"off": 32, "data": "0x0102"}
    storage = StorageDiff.from_json({"key": "0x1", "val": "0xff"})
    assert storage == StorageDiff(key=1, val=255)
    assert storage.to_json() == {"key": "0x1", "val": "0xff"}


def test_executed_operation_with_store():
    op = VMExecutedOperation.from_json(
        {"used": 10, "push": [], "mem": None, "store": {"key": "0x2", "val": "0x3"}}
    )
    assert op.store == StorageDiff(key=2, val=3)
    assert op.mem is None


def test_vm_operation_requires_pc():
    with pytest.raises(DecodeError):
        VMOperation.from_json({"cost": 1, "ex": None, "sub": None})


def test_vm_operation_rejects_negative_cost():
    with pytest.raises(DecodeError):
        VMOperation.from_json({"pc": 0, "cost": -1, "ex": None, "sub": None})


def test_vm_trace_nested_round_trip():
    data = {
        "code": "0x00",
        "ops": [
            {
                "pc": 7,
                "cost": 100,
                "ex": None,
                "sub": {"code": "0x01", "ops": [{"pc": 0, "cost": 0, "ex": None, "sub": None}]},
            }
        ],
    }
    trace = VMTrace.from_json(data)
    assert trace.ops[0].sub.ops[0].pc == 0
    assert trace.to_json() == data