"""Tests for batchcall/core/batch.py: execute_batch, its raising variant, and register reads."""

from __future__ import annotations

from typing import Any

import pytest

from batchcall.core import (
    ArrayLengthsMismatch,
    BatchForwarder,
    Call,
    CallReverted,
    MulticallerWithSender,
    MulticallerWithSenderSpec,
    Reentrancy,
    Revert,
    Substrate,
    SubstrateError,
    classify_revert,
    execute_batch,
    execute_batch_or_raise,
    execute_calls,
    read_registers,
)
from batchcall.core.abi import (
    ARRAY_LENGTHS_MISMATCH_SELECTOR,
    REENTRANCY_SELECTOR,
    MalformedCalldata,
    encode_aggregate_call,
)
from batchcall.core.substrate import Contract, Frame
from batchcall.state.addresses import derive_address

ENGINE = derive_address("engine")
INITIATOR = derive_address("initiator")


class Ledgered(Contract):
    """Records received value; reverts with its payload when the payload starts with 0xdead."""

    def __init__(self, address):
        super().__init__(address)
        self.received = 0

    def handle(self, frame: Frame) -> bytes:
        self.received += frame.value
        if frame.payload.startswith(b"\xde\xad"):
            raise Revert(frame.payload)
        return frame.payload

    def snapshot(self) -> Any:
        return self.received

    def restore(self, snapshot: Any) -> None:
        self.received = snapshot

    def public_state(self):
        return {"received": self.received}


class AlwaysReverts(Contract):
    def handle(self, frame: Frame) -> bytes:
        raise Revert(b"")


class Reenter(Contract):
    def __init__(self, address, engine):
        super().__init__(address)
        self.engine = engine

    def handle(self, frame: Frame) -> bytes:
        return frame.call(self.engine, encode_aggregate_call([], [], [])).output


@pytest.fixture(params=[MulticallerWithSender, MulticallerWithSenderSpec], ids=["optimized", "reference"])
def world(request):
    s = Substrate()
    engine = s.deploy(request.param(ENGINE))
    target = s.deploy(Ledgered(derive_address("target")))
    return s, engine, target


def test_failing_second_call_rolls_back_the_first(world) -> None:
    s, engine, target = world
    s.fund(INITIATOR, 0x10)
    res = execute_batch(
        s, engine.address, initiator=INITIATOR,
        targets=[target.address, target.address],
        payloads=[b"\xaa", b"\xde\xad"],
        values=[0x10, 0],
        attached_funds=0x10,
    )
    assert not res.ok
    assert res.error_output == b"\xde\xad"
    # Nothing from the failed batch persists, including the first call's value.
    assert target.received == 0
    assert s.balance_of(target.address) == 0
    assert s.balance_of(INITIATOR) == 0x10


def test_execute_calls_matches_execute_batch(world) -> None:
    s, engine, target = world
    res = execute_calls(
        s, engine.address, initiator=INITIATOR,
        calls=[Call(target.address, b"\x01"), Call(target.address)],
    )
    assert res.ok and res.outputs == (b"\x01", b"")


class TestRaisingVariant:
    def test_returns_outputs(self, world):
        s, engine, target = world
        out = execute_batch_or_raise(
            s, engine.address, initiator=INITIATOR, targets=[target.address], payloads=[b"x"], values=[0]
        )
        assert out == (b"x",)

    def test_mismatch(self, world):
        s, engine, target = world
        with pytest.raises(ArrayLengthsMismatch) as ei:
            execute_batch_or_raise(
                s, engine.address, initiator=INITIATOR, targets=[target.address], payloads=[], values=[]
            )
        assert ei.value.output == ARRAY_LENGTHS_MISMATCH_SELECTOR

    def test_propagated_failure_carries_raw_output(self, world):
        s, engine, target = world
        with pytest.raises(CallReverted) as ei:
            execute_batch_or_raise(
                s, engine.address, initiator=INITIATOR,
                targets=[target.address], payloads=[b"\xde\xad\xbe\xef"], values=[0],
            )
        assert ei.value.output == b"\xde\xad\xbe\xef"
        assert isinstance(ei.value, Revert)

    def test_reentrancy_is_not_a_batch_level_error_when_caught_by_the_target(self, world):
        s, engine, _ = world
        r = s.deploy(Reenter(derive_address("reenter"), engine.address))
        out = execute_batch_or_raise(
            s, engine.address, initiator=INITIATOR, targets=[r.address], payloads=[b""], values=[0]
        )
        assert out == (REENTRANCY_SELECTOR,)


class TestClassifyRevert:
    def test_engine_errors(self):
        assert classify_revert(ARRAY_LENGTHS_MISMATCH_SELECTOR) == ArrayLengthsMismatch.kind
        assert classify_revert(REENTRANCY_SELECTOR) == Reentrancy.kind

    def test_everything_else_is_propagated(self):
        assert classify_revert(b"") == CallReverted.kind
        assert classify_revert(REENTRANCY_SELECTOR + b"\x00") == CallReverted.kind


class TestReadRegisters:
    def test_at_rest(self, world):
        s, engine, _ = world
        regs = read_registers(s, engine.address, reader=INITIATOR)
        assert regs.sender is None and regs.unlocked

    def test_non_engine_target_raises(self, world):
        s, _, target = world
        # The echo target returns its selector-only calldata, which is not valid return data.
        with pytest.raises(MalformedCalldata):
            read_registers(s, target.address, reader=INITIATOR)

    def test_reverting_target_raises_substrate_error(self, world):
        s, _, _ = world
        bad = s.deploy(AlwaysReverts(derive_address("always-reverts")))
        with pytest.raises(SubstrateError):
            read_registers(s, bad.address, reader=INITIATOR)


def test_bare_forwarder_leaves_operations_to_engines() -> None:
    bare = BatchForwarder(derive_address("bare"))
    with pytest.raises(NotImplementedError):
        bare.sender()
    with pytest.raises(NotImplementedError):
        bare.reentrancy_unlocked()
    with pytest.raises(NotImplementedError):
        bare.aggregate_with_sender(None, [], [], [])
    for name in ("aggregate_with_sender", "sender", "reentrancy_unlocked"):
        assert "each engine implements it" in getattr(BatchForwarder, name).__doc__
