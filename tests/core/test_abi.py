"""Tests for batchcall/core/abi.py: selectors and the calldata/return-data codec."""

from __future__ import annotations

import pytest

from batchcall.core.abi import (
    AGGREGATE_WITH_SENDER_SELECTOR,
    ARRAY_LENGTHS_MISMATCH_SELECTOR,
    MAX_UINT256,
    REENTRANCY_SELECTOR,
    REENTRANCY_UNLOCKED_SELECTOR,
    SENDER_SELECTOR,
    MalformedCalldata,
    decode_address,
    decode_aggregate_args,
    decode_bool,
    decode_bytes_array,
    encode_address,
    encode_aggregate_call,
    encode_bool,
    encode_bytes_array,
    split_selector,
)
from batchcall.state.addresses import ZERO_ADDRESS, derive_address


class TestSelectors:
    def test_known_selectors(self):
        # keccak256 of the canonical signatures, first four bytes.
        assert SENDER_SELECTOR == bytes.fromhex("67e404ce")
        assert len(AGGREGATE_WITH_SENDER_SELECTOR) == 4
        assert len(REENTRANCY_UNLOCKED_SELECTOR) == 4

    def test_selectors_are_distinct(self):
        sels = {
            AGGREGATE_WITH_SENDER_SELECTOR,
            SENDER_SELECTOR,
            REENTRANCY_UNLOCKED_SELECTOR,
            ARRAY_LENGTHS_MISMATCH_SELECTOR,
            REENTRANCY_SELECTOR,
        }
        assert len(sels) == 5

    def test_split_selector(self):
        assert split_selector(b"\x01\x02\x03\x04rest") == (b"\x01\x02\x03\x04", b"rest")
        assert split_selector(b"\x01\x02") == (b"", b"\x01\x02")


class TestAggregateCalldata:
    def test_decodes_what_it_encodes(self):
        t1, t2 = derive_address("t1"), derive_address("t2")
        data = encode_aggregate_call([t1, t2], [b"\xaa", b""], [0, MAX_UINT256])
        sel, args = split_selector(data)
        assert sel == AGGREGATE_WITH_SENDER_SELECTOR
        assert decode_aggregate_args(args) == ([t1, t2], [b"\xaa", b""], [0, MAX_UINT256])

    def test_mismatched_lengths_are_representable(self):
        t = derive_address("t")
        _, args = split_selector(encode_aggregate_call([t], [b"x"], []))
        targets, payloads, values = decode_aggregate_args(args)
        assert (len(targets), len(payloads), len(values)) == (1, 1, 0)

    def test_rejects_out_of_range_values(self):
        t = derive_address("t")
        with pytest.raises(ValueError):
            encode_aggregate_call([t], [b""], [MAX_UINT256 + 1])
        with pytest.raises(ValueError):
            encode_aggregate_call([t], [b""], [-1])
        with pytest.raises(TypeError):
            encode_aggregate_call([t], ["text"], [0])

    def test_truncated_arguments_are_malformed(self):
        _, args = split_selector(encode_aggregate_call([derive_address("t")], [b"abc"], [1]))
        with pytest.raises(MalformedCalldata):
            decode_aggregate_args(args[:-32])
        with pytest.raises(MalformedCalldata):
            decode_aggregate_args(b"")


class TestReturnData:
    def test_bytes_array(self):
        items = [b"", b"\x00" * 31, b"\xff" * 33]
        assert decode_bytes_array(encode_bytes_array(items)) == items
        assert decode_bytes_array(encode_bytes_array([])) == []

    def test_address_none_encodes_as_zero(self):
        assert decode_address(encode_address(None)) == ZERO_ADDRESS
        a = derive_address("a")
        assert decode_address(encode_address(a)) == a

    def test_bool(self):
        assert decode_bool(encode_bool(True)) is True
        assert decode_bool(encode_bool(False)) is False

    def test_garbage_return_data_is_malformed(self):
        with pytest.raises(MalformedCalldata):
            decode_bytes_array(b"\x01")
        with pytest.raises(MalformedCalldata):
            decode_bool(b"")
