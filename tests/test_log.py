import pytest

from chainrpc_types.block import BlockTag
from chainrpc_types.log import Filter, FilterBuilder, Log, TopicFilter
from chainrpc_types.uint import H160, H256, DecodeError


def _log(**overrides):
    values = dict(
        address=H160.from_low_u64_be(1),
        topics=[],
        data=b"",
        block_hash=H256.from_low_u64_be(2),
        block_number=1,
        transaction_hash=H256.from_low_u64_be(3),
        transaction_index=0,
        log_index=0,
        transaction_log_index=0,
        log_type=None,
        removed=None,
    )
    values.update(overrides)
    return Log(**values)


def test_is_removed_removed_true():
    assert _log(removed=True).is_removed() is True


def test_is_removed_removed_false():
    assert _log(removed=False).is_removed() is False


def test_is_removed_log_type_removed():
    assert _log(log_type="removed").is_removed() is True


def test_is_removed_log_type_mined():
    assert _log(log_type="mined").is_removed() is False


def test_is_removed_log_type_and_removed_none():
    assert _log().is_removed() is False


def test_removed_flag_takes_precedence_over_log_type():
    assert _log(removed=False, log_type="removed").is_removed() is False


def test_does_topic_filter_set_topics_correctly():
    topic_filter = TopicFilter(
        topic0=H256.from_low_u64_be(3),
        topic1=[H256.from_low_u64_be(5), H256.from_low_u64_be(8)],
        topic2=H256.from_low_u64_be(13),
        topic3=None,
    )
    filter0 = FilterBuilder().topic_filter(topic_filter).build()
    filter1 = (
        FilterBuilder()
        .topics(
            [H256.from_low_u64_be(3)],
            [H256.from_low_u64_be(5), H256.from_low_u64_be(8)],
            [H256.from_low_u64_be(13)],
            None,
        )
        .build()
    )
    assert filter0 == filter1


def test_trailing_empty_topics_are_dropped_but_inner_kept():
    topic = H256.from_low_u64_be(7)
    built = FilterBuilder().topics(None, [topic], None, None).build()
    assert built.topics == [None, [topic]]
    assert built.to_json() == {"topics": [None, topic.to_json()]}


def test_address_single_and_many():
    first = H160.from_low_u64_be(1)
    second = H160.from_low_u64_be(2)
    assert FilterBuilder().address([first]).build().to_json() == {"address": first.to_json()}
    assert FilterBuilder().address([first, second]).build().to_json() == {
        "address": [first.to_json(), second.to_json()]
    }
    assert FilterBuilder().address([]).build().to_json() == {"address": None}


def test_block_range_and_hash_are_exclusive():
    hash_ = H256.from_low_u64_be(9)
    built = FilterBuilder().from_block(BlockTag.EARLIEST).to_block(BlockTag.LATEST).block_hash(hash_).build()
    assert built == Filter(block_hash=hash_)

    built = FilterBuilder().block_hash(hash_).from_block(BlockTag.EARLIEST).build()
    assert built == Filter(from_block=BlockTag.EARLIEST)
    assert built.to_json() == {"fromBlock": "earliest"}


def test_empty_filter_serializes_to_empty_object():
    assert FilterBuilder().build().to_json() == {}


def test_limit_serialized():
    assert FilterBuilder().limit(10).build().to_json() == {"limit": 10}


def test_build_returns_independent_copy():
    builder = FilterBuilder().limit(1)
    built = builder.build()
    builder.limit(2)
    assert built.limit == 1
    assert builder.build().limit == 2


def test_log_round_trip():
    log = _log(topics=[H256.from_low_u64_be(4)], data=b"\x01\x02", log_type="mined", removed=False)
    assert Log.from_json(log.to_json()) == log


def test_log_from_json_optional_fields_missing():
    log = Log.from_json(
        {
            "address": H160.from_low_u64_be(1).to_json(),
            "topics": [],
            "data": "0x",
        }
    )
    assert log.block_hash is None
    assert log.removed is None
    assert log.is_removed() is False


def test_log_from_json_missing_address():
    with pytest.raises(DecodeError):
        Log.from_json({"topics": [], "data": "0x"})