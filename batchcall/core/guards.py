"""Guard predicates for the reference forwarder.

One pure function per precondition, evaluated in the order the batch
operation checks them. Each returns True iff the batch may proceed past that
check.
"""

from __future__ import annotations

from typing import Sequence

from .types import Registers


def guard_lengths_match(targets: Sequence[object], payloads: Sequence[object], values: Sequence[object]) -> bool:
    return len(targets) == len(payloads) == len(values)


def guard_unlocked(registers: Registers) -> bool:
    return registers.unlocked


def is_empty_batch(targets: Sequence[object]) -> bool:
    return len(targets) == 0
