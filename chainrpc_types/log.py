"""Logs produced by transactions, and the filters used to query them."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any, Callable, Union

from chainrpc_types.block import decode_block_number, encode_block_number
from chainrpc_types.bytes import decode_bytes, encode_bytes
from chainrpc_types.uint import H160, H256, DecodeError, decode_quantity, encode_quantity

__all__ = ["Log", "TopicFilter", "Filter", "FilterBuilder"]


def _field(data: dict, key: str):
    try:
        return data[key]
    except KeyError:
        raise DecodeError(f"missing field `{key}`") from None


def _optional(data: dict, key: str, decode: Callable[[Any], Any]):
    value = data.get(key)
    return None if value is None else decode(value)


def _or_none(value, encode: Callable[[Any], Any]):
    return None if value is None else encode(value)


def _u64(value) -> int:
    return decode_quantity(value, 64)


def _u256(value) -> int:
    return decode_quantity(value, 256)


def _string(value) -> str:
    if not isinstance(value, str):
        raise DecodeError(f"expected a string, got {value!r}")
    return value


def _boolean(value) -> bool:
    if not isinstance(value, bool):
        raise DecodeError(f"expected a boolean, got {value!r}")
    return value


@dataclass(kw_only=True)
class Log:
    """A log produced by a transaction."""

    address: H160
    topics: list[H256] = field(default_factory=list)
    data: bytes = b""
    block_hash: H256 | None = None
    block_number: int | None = None
    transaction_hash: H256 | None = None
    transaction_index: int | None = None
    log_index: int | None = None
    transaction_log_index: int | None = None
    log_type: str | None = None
    removed: bool | None = None

    @classmethod
    def from_json(cls, data):
        if not isinstance(data, dict):
            raise DecodeError(f"expected an object for log, got {type(data).__name__}")
        topics = _field(data, "topics")
        if not isinstance(topics, list):
            raise DecodeError(f"expected a list of topics, got {topics!r}")
        return cls(
            address=H160.from_hex(_field(data, "address")),
            topics=[H256.from_hex(topic) for topic in topics],
            data=decode_bytes(_field(data, "data")),
            block_hash=_optional(data, "blockHash", H256.from_hex),
            block_number=_optional(data, "blockNumber", _u64),
            transaction_hash=_optional(data, "transactionHash", H256.from_hex),
            transaction_index=_optional(data, "transactionIndex", _u64),
            log_index=_optional(data, "logIndex", _u256),
            transaction_log_index=_optional(data, "transactionLogIndex", _u256),
            log_type=_optional(data, "logType", _string),
            removed=_optional(data, "removed", _boolean),
        )

    def to_json(self) -> dict:
        return {
            "address": self.address.to_json(),
            "topics": [topic.to_json() for topic in self.topics],
            "data": encode_bytes(self.data),
            "blockHash": _or_none(self.block_hash, H256.to_json),
            "blockNumber": _or_none(self.block_number, encode_quantity),
            "transactionHash": _or_none(self.transaction_hash, H256.to_json),
            "transactionIndex": _or_none(self.transaction_index, encode_quantity),
            "logIndex": _or_none(self.log_index, encode_quantity),
            "transactionLogIndex": _or_none(self.transaction_log_index, encode_quantity),
            "logType": self.log_type,
            "removed": self.removed,
        }

    def is_removed(self) -> bool:
        """True if the log was removed by a chain reorganisation."""
        if self.removed is not None:
            return self.removed
        return self.log_type == "removed"


Topic = Union[None, H256, list]


def _topic_to_option(topic: Topic) -> list[H256] | None:
    if topic is None:
        return None
    if isinstance(topic, H256):
        return [topic]
    return list(topic)


@dataclass
class TopicFilter:
    """Topic constraints by position: ``None`` matches any, a hash matches it, a list matches any of it."""

    topic0: Topic = None
    topic1: Topic = None
    topic2: Topic = None
    topic3: Topic = None


def _value_or_array(values: list, encode: Callable[[Any], Any]):
    if not values:
        return None
    if len(values) == 1:
        return encode(values[0])
    return [encode(value) for value in values]


@dataclass
class Filter:
    """A log filter."""

    from_block: Any = None
    to_block: Any = None
    block_hash: H256 | None = None
    address: list[H160] | None = None
    topics: list[list[H256] | None] | None = None
    limit: int | None = None

    def to_json(self) -> dict:
        result: dict = {}
        if self.from_block is not None:
            result["fromBlock"] = encode_block_number(self.from_block)
        if self.to_block is not None:
            result["toBlock"] = encode_block_number(self.to_block)
        if self.block_hash is not None:
            result["blockHash"] = self.block_hash.to_json()
        if self.address is not None:
            result["address"] = _value_or_array(self.address, H160.to_json)
        if self.topics is not None:
            result["topics"] = [
                None if topic is None else _value_or_array(topic, H256.to_json)
                for topic in self.topics
            ]
        if self.limit is not None:
            result["limit"] = self.limit
        return result


class FilterBuilder:
    """Builds a :class:`Filter` step by step."""

    def __init__(self) -> None:
        self._filter = Filter()

    def from_block(self, block):
        """Set the first block; clears a previously set block hash."""
        self._filter.block_hash = None
        self._filter.from_block = block
        return self

    def to_block(self, block):
        """Set the last block; clears a previously set block hash."""
        self._filter.block_hash = None
        self._filter.to_block = block
        return self

    def block_hash(self, hash):
        """Set the block hash; clears previously set first and last blocks."""
        self._filter.from_block = None
        self._filter.to_block = None
        self._filter.block_hash = hash
        return self

    def address(self, addresses):
        self._filter.address = list(addresses)
        return self

    def topics(self, topic1, topic2, topic3, topic4):
        """Set the topic constraints; trailing unconstrained positions are dropped."""
        topics = [None if topic is None else list(topic) for topic in (topic1, topic2, topic3, topic4)]
        while topics and topics[-1] is None:
            topics.pop()
        self._filter.topics = topics
        return self

    def topic_filter(self, topic_filter):
        """Set the topics from a :class:`TopicFilter`."""
        return self.topics(
            _topic_to_option(topic_filter.topic0),
            _topic_to_option(topic_filter.topic1),
            _topic_to_option(topic_filter.topic2),
            _topic_to_option(topic_filter.topic3),
        )

    def limit(self, limit):
        self._filter.limit = limit
        return self

    def build(self) -> Filter:
        return copy.deepcopy(self._filter)


def _decode_unused(value):
    return decode_block_number(value)