from __future__ import annotations

import pytest

from batchcall.state.addresses import derive_address
from batchcall.state.canonical import canonical_json_bytes, domain_sep_bytes, encode_uvarint
from batchcall.state.ledger import ValueLedger
from batchcall.state.world_root import compute_world_root

A = derive_address("a")
B = derive_address("b")


def test_world_root_is_insertion_order_independent() -> None:
    l1 = ValueLedger()
    l1.set(A, 1)
    l1.set(B, 2)
    l2 = ValueLedger()
    l2.set(B, 2)
    l2.set(A, 1)

    s1 = {A: {"x": 1}, B: {"y": [1, 2]}}
    s2 = {B: {"y": [1, 2]}, A: {"x": 1}}
    assert compute_world_root(l1, s1) == compute_world_root(l2, s2)


def test_world_root_changes_on_balance_or_state_change() -> None:
    ledger = ValueLedger()
    ledger.set(A, 1)
    base = compute_world_root(ledger, {A: {"x": 1}})

    assert compute_world_root(ledger, {A: {"x": 2}}) != base
    ledger.set(A, 2)
    assert compute_world_root(ledger, {A: {"x": 1}}) != base


def test_world_root_format() -> None:
    root = compute_world_root(ValueLedger(), {})
    assert root.startswith("0x")
    assert len(root) == 66


def test_duplicate_spellings_of_one_contract_are_rejected() -> None:
    with pytest.raises(ValueError):
        compute_world_root(ValueLedger(), {A: {}, A.lower(): {}})


def test_canonical_json_normalizes_state() -> None:
    assert canonical_json_bytes({"b": 1, "a": None}) == b'{"a":null,"b":1}'
    assert canonical_json_bytes({"out": b"\xaa", "seen": ("x", "y")}) == b'{"out":"0xaa","seen":["x","y"]}'
    with pytest.raises(TypeError):
        canonical_json_bytes({1: "non-str key"})
    with pytest.raises(TypeError):
        canonical_json_bytes({"a": 1.0})


def test_uvarint_and_domain_separator() -> None:
    assert encode_uvarint(0) == b"\x00"
    assert encode_uvarint(300) == b"\xac\x02"
    with pytest.raises(ValueError):
        encode_uvarint(-1)
    assert domain_sep_bytes("world_root") == b"batchcall:world_root:v1\x00"
    with pytest.raises(ValueError):
        domain_sep_bytes("bad\x00label")
