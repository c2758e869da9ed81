# chainrpc-types

Plain Python values for data exchanged with an Ethereum JSON-RPC node,
together with the JSON shapes the node expects and returns.

The package has no runtime dependencies and does no networking. You decode
what a node sent with `from_json()` (or a `decode_*` function) and produce
request parameters with `to_json()` (or an `encode_*` function), then hand
them to whatever transport you use.

## Modules

- `chainrpc_types.uint`: fixed-size hashes `H64`, `H128`, `H160` (also
  available as `Address`), `H256`, `H512`, `H520` and the 256-byte logs bloom
  `H2048`, all subclasses of `FixedHash`; the `0x`-prefixed quantity encoding
  `encode_quantity` / `decode_quantity`; and `DecodeError`.
- `chainrpc_types.bytes`: `encode_bytes` / `decode_bytes` for `0x`-prefixed
  byte strings, and `BytesArray`, carried as a list of numbers.
- `chainrpc_types.block`: `Block`, `BlockHeader`, `BlockTag`,
  `encode_block_number`, `decode_block_number`, `encode_block_id` and
  `TransactionId`.
- `chainrpc_types.log`: `Log` (with `is_removed()`), `Filter`,
  `FilterBuilder` and `TopicFilter`.
- `chainrpc_types.fee_history`: `FeeHistory`, the result of `eth_feeHistory`.
- `chainrpc_types.proof`: `Proof` and `StorageProof`, the result of
  `eth_getProof`.
- `chainrpc_types.work`: `Work`, a miner's work package.
- `chainrpc_types.parity`: peer information (`ParityPeerType`,
  `ParityPeerInfo`, `PeerNetworkInfo`, `PeerProtocolsInfo`,
  `EthProtocolInfo`, `PipProtocolInfo`) and pending-transaction filters
  (`ParityPendingTransactionFilter`, its builder, `FilterCondition`,
  `Comparison`, `ToFilter`).
- `chainrpc_types.trace_filtering`: `Trace`, the actions `Call`, `Create`,
  `Suicide`, `Reward`, the results `CallResult`, `CreateResult`,
  `decode_action`, `decode_result`, `TraceFilter` and `TraceFilterBuilder`.
- `chainrpc_types.traces`: `BlockTrace`, `TransactionTrace`, `VMTrace`,
  `VMOperation`, `VMExecutedOperation`, `MemoryDiff`, `StorageDiff`,
  `StateDiff`, `AccountDiff`, `Diff`, `DiffKind`, `TraceType` and
  `encode_trace_types`.

## Examples

Block numbers and tags:

```python
from chainrpc_types.block import BlockTag, encode_block_number, decode_block_number

encode_block_number(100)              # "0x64"
encode_block_number(BlockTag.LATEST)  # "latest"
decode_block_number("pending")        # BlockTag.PENDING
decode_block_number("64")             # raises DecodeError: missing 0x prefix
```

Quantities and hashes:

```python
from chainrpc_types.uint import H160, decode_quantity, encode_quantity

encode_quantity(256)                  # "0x100"
decode_quantity("0x01")               # 1
H160.from_low_u64_be(5).to_json()     # "0x0000000000000000000000000000000000000005"
```

A log filter; a single address is sent as a string, several as a list, and
trailing unconstrained topics are dropped:

```python
from chainrpc_types.block import BlockTag
from chainrpc_types.log import FilterBuilder
from chainrpc_types.uint import H160

log_filter = (
    FilterBuilder()
    .from_block(BlockTag.LATEST)
    .address([H160.from_low_u64_be(1)])
    .build()
)
log_filter.to_json()
# {"fromBlock": "latest", "address": "0x0000000000000000000000000000000000000001"}
```

Trace kinds for the ad-hoc trace API:

```python
from chainrpc_types.traces import TraceType, encode_trace_types

encode_trace_types([TraceType.TRACE, TraceType.VM_TRACE, TraceType.STATE_DIFF])
# ["trace", "vmTrace", "stateDiff"]
```

Anything that cannot be decoded raises `chainrpc_types.uint.DecodeError`, a
subclass of `ValueError`.

## What is not included

- No client: nothing here sends requests or talks to a node.
- No types for transactions, receipts, call or transaction requests, signed
  data, signature recovery or sync state. A `Block` keeps its transactions as
  whatever the optional `transaction_decoder` passed to `Block.from_json`
  returns (the raw JSON by default).

## Running the tests

```
pip install -e ".[test]"
pytest
```