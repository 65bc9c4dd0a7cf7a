"""Reference specification of the sender-context batch forwarder.

A deliberately plain restatement of the contract that ``engine.py``
implements: separate register fields held in an immutable ``Registers``
value, guard predicates from ``guards.py``, a ``zip`` loop that appends
outputs. It is the ground truth the equivalence harness compares the
optimized engine against; it is not meant to be fast.

Contract, in order:

1. lengths differ -> ``ArrayLengthsMismatch``
2. guard locked -> ``Reentrancy``
3. empty batch -> ``[]`` without touching the registers
4. publish the caller as sender (the zero address reads as unset) and lock
5. dispatch every call in order; the first failure aborts the batch with
   that call's raw output
6. clear the sender and unlock
7. return the outputs
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Optional, Sequence

from ..state.addresses import Address, is_zero_address
from .errors import ArrayLengthsMismatch, CallReverted, Reentrancy
from .forwarder import BatchForwarder
from .guards import guard_lengths_match, guard_unlocked, is_empty_batch
from .substrate import Frame
from .types import Registers

logger = logging.getLogger(__name__)


class MulticallerWithSenderSpec(BatchForwarder):
    """Ground-truth forwarder with one field per register."""

    def __init__(self, address: Address) -> None:
        super().__init__(address)
        self._registers = Registers()

    def aggregate_with_sender(
        self,
        frame: Frame,
        targets: Sequence[Address],
        payloads: Sequence[bytes],
        values: Sequence[int],
    ) -> list[bytes]:
        if not guard_lengths_match(targets, payloads, values):
            raise ArrayLengthsMismatch()
        if not guard_unlocked(self._registers):
            raise Reentrancy()
        if is_empty_batch(targets):
            return []

        before = self._registers
        # The zero address reads back as unset, exactly like the packed slot.
        sender = None if is_zero_address(frame.caller) else frame.caller
        self._registers = replace(self._registers, sender=sender, unlocked=False)

        results: list[bytes] = []
        for target, payload, value in zip(targets, payloads, values):
            result = frame.substrate.call(self.address, target, payload, value)
            if not result.success:
                self._registers = before
                logger.debug("reference batch abort at index %d", len(results))
                raise CallReverted(result.output)
            results.append(result.output)

        self._registers = replace(self._registers, sender=None, unlocked=True)
        return results

    def sender(self) -> Optional[Address]:
        return self._registers.sender

    def reentrancy_unlocked(self) -> bool:
        return self._registers.unlocked

    def snapshot(self) -> Any:
        return self._registers

    def restore(self, snapshot: Any) -> None:
        self._registers = snapshot
