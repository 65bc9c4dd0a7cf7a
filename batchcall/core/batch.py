"""
Batch front door: submit one `aggregateWithSender` transaction.

`execute_batch` encodes the request, runs it as a top-level transaction from
the initiator's account with `attached_funds` attached, and decodes the
outcome into a `BatchResult`. It never raises for batch-level failures; use
`execute_batch_or_raise` for exception-style handling.
"""

from __future__ import annotations

import logging
from typing import Sequence

from ..state.addresses import Address, is_zero_address
from .abi import (
    ARRAY_LENGTHS_MISMATCH_SELECTOR,
    REENTRANCY_SELECTOR,
    decode_bool,
    decode_address,
    decode_bytes_array,
    encode_aggregate_call,
    encode_reentrancy_unlocked_call,
    encode_sender_call,
)
from .errors import ArrayLengthsMismatch, CallReverted, Reentrancy, SubstrateError
from .substrate import Substrate
from .types import BatchResult, Call, Registers

logger = logging.getLogger(__name__)


def classify_revert(output: bytes) -> str:
    """
    Label a batch-level revert payload.

    The engine's own errors are recognised by selector; anything else is a
    propagated sub-call failure. A sub-call that reverts with exactly one of
    the engine's selectors is indistinguishable on the wire and is labelled by
    the selector.
    """
    if output == ARRAY_LENGTHS_MISMATCH_SELECTOR:
        return ArrayLengthsMismatch.kind
    if output == REENTRANCY_SELECTOR:
        return Reentrancy.kind
    return CallReverted.kind


def execute_batch(
    substrate: Substrate,
    engine: Address,
    *,
    initiator: Address,
    targets: Sequence[Address],
    payloads: Sequence[bytes],
    values: Sequence[int],
    attached_funds: int = 0,
) -> BatchResult:
    """Run one batch transaction and report its outcome."""
    calldata = encode_aggregate_call(targets, payloads, values)
    result = substrate.transact(initiator, engine, calldata, attached_funds)
    if not result.success:
        kind = classify_revert(result.output)
        logger.debug("batch failed: engine=%s kind=%s output=0x%s", engine, kind, result.output.hex())
        return BatchResult(ok=False, error_output=result.output, error=kind)
    return BatchResult(ok=True, outputs=tuple(decode_bytes_array(result.output)))


def execute_calls(
    substrate: Substrate,
    engine: Address,
    *,
    initiator: Address,
    calls: Sequence[Call],
    attached_funds: int = 0,
) -> BatchResult:
    """Like `execute_batch()` but takes `Call` triples."""
    return execute_batch(
        substrate,
        engine,
        initiator=initiator,
        targets=[c.target for c in calls],
        payloads=[c.payload for c in calls],
        values=[c.value for c in calls],
        attached_funds=attached_funds,
    )


def execute_batch_or_raise(
    substrate: Substrate,
    engine: Address,
    *,
    initiator: Address,
    targets: Sequence[Address],
    payloads: Sequence[bytes],
    values: Sequence[int],
    attached_funds: int = 0,
) -> tuple[bytes, ...]:
    """Like `execute_batch()` but raises on failure.

    Raises:
        ArrayLengthsMismatch: The three input sequences differ in length.
        Reentrancy: The engine already has a batch in progress.
        CallReverted: A sub-call failed; ``.output`` is its raw output.
    """
    result = execute_batch(
        substrate,
        engine,
        initiator=initiator,
        targets=targets,
        payloads=payloads,
        values=values,
        attached_funds=attached_funds,
    )
    if result.ok:
        return result.outputs

    output = result.error_output or b""
    if result.error == ArrayLengthsMismatch.kind:
        raise ArrayLengthsMismatch()
    if result.error == Reentrancy.kind:
        raise Reentrancy()
    raise CallReverted(output)


def read_registers(substrate: Substrate, engine: Address, *, reader: Address) -> Registers:
    """Read `sender()` and `reentrancyUnlocked()` through the ABI, as any external party would."""
    sender_res = substrate.call(reader, engine, encode_sender_call())
    unlocked_res = substrate.call(reader, engine, encode_reentrancy_unlocked_call())
    if not sender_res.success or not unlocked_res.success:
        raise SubstrateError(f"engine at {engine} rejected a register read")
    sender = decode_address(sender_res.output)
    return Registers(
        sender=None if is_zero_address(sender) else sender,
        unlocked=decode_bool(unlocked_res.output),
    )

