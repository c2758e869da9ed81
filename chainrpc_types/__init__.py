"""Typed values and JSON encoding for Ethereum JSON-RPC: hashes, quantities, blocks, logs, proofs and traces."""

__version__ = "0.1.7"

__all__ = [
    "block",
    "bytes",
    "fee_history",
    "log",
    "parity",
    "proof",
    "trace_filtering",
    "traces",
    "uint",
    "work",
]