"""Exhaustive enumeration of small batch shapes.

A shape fixes everything about a batch except its values:

- ``batch_length`` N,
- ``payload_length`` (every payload in the batch has this many bytes),
- ``aliasing``: for each target after the first, whether it repeats the
  immediately preceding target (True) or is a fresh address (False),
- ``behaviors``: one ``TargetBehavior`` per *distinct* target, so aliased
  positions share an outcome exactly as a repeated contract would.
- ``initiator``: who submits the batch (a fixed account, the zero address, or
  an account that is also the first distinct target).

For N = 0 there is one topology and one (empty) behavior vector. For N >= 1
there are 2^(N-1) topologies, and each topology with k distinct targets has
|behaviors|^k outcome vectors. When the initiator is itself a target, that
target is a plain account and always succeeds, so only the other k - 1 targets
vary.
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass
from enum import Enum, unique
from typing import TYPE_CHECKING, Iterator

if TYPE_CHECKING:
    from .config import HarnessConfig


@unique
class TargetBehavior(Enum):
    """What a scripted target does when dispatched to."""
    SUCCEED = "succeed"                        # echo the payload
    REVERT = "revert"                          # revert with the payload as output
    REENTER = "reenter"                        # nested one-call batch on the engine
    REENTER_EMPTY = "reenter_empty"            # nested empty batch
    REENTER_MISMATCHED = "reenter_mismatched"  # nested batch with mismatched array lengths


@unique
class InitiatorRole(Enum):
    """Which account submits the batch."""
    ACCOUNT = "account"  # a fixed account with no code
    ZERO = "zero"        # the zero address
    TARGET = "target"    # the fixed account, also dispatched to as distinct target 0


@dataclass(frozen=True)
class Shape:
    batch_length: int
    payload_length: int
    aliasing: tuple[bool, ...] = ()
    behaviors: tuple[TargetBehavior, ...] = ()
    initiator: InitiatorRole = InitiatorRole.ACCOUNT

    def __post_init__(self) -> None:
        if self.batch_length < 0 or self.payload_length < 0:
            raise ValueError("batch_length and payload_length must be non-negative")
        if len(self.aliasing) != max(self.batch_length - 1, 0):
            raise ValueError("aliasing must have one entry per target after the first")
        if len(self.behaviors) != self.distinct_targets:
            raise ValueError(
                f"behaviors must have one entry per distinct target: "
                f"{len(self.behaviors)} != {self.distinct_targets}"
            )
        if self.initiator is InitiatorRole.TARGET:
            if self.batch_length == 0:
                raise ValueError("an initiator-as-target shape needs at least one call")
            if self.behaviors[0] is not TargetBehavior.SUCCEED:
                raise ValueError("the initiator account always succeeds as a target")

    @property
    def distinct_targets(self) -> int:
        if self.batch_length == 0:
            return 0
        return self.batch_length - sum(self.aliasing)

    def target_slots(self) -> tuple[int, ...]:
        """Distinct-target index of each batch position."""
        if self.batch_length == 0:
            return ()
        slots = [0]
        for aliased in self.aliasing:
            slots.append(slots[-1] if aliased else slots[-1] + 1)
        return tuple(slots)

    def label(self) -> str:
        topo = "".join("=" if a else "+" for a in self.aliasing) or "-"
        outcomes = ",".join(b.value for b in self.behaviors) or "-"
        return (
            f"n={self.batch_length}/len={self.payload_length}/topo={topo}"
            f"/outcomes={outcomes}/from={self.initiator.value}"
        )


def aliasing_topologies(batch_length: int) -> Iterator[tuple[bool, ...]]:
    return itertools.product((False, True), repeat=max(batch_length - 1, 0))


def behavior_vectors(distinct: int, *, include_reentrant: bool) -> Iterator[tuple[TargetBehavior, ...]]:
    choices = [TargetBehavior.SUCCEED, TargetBehavior.REVERT]
    if include_reentrant:
        choices += [TargetBehavior.REENTER, TargetBehavior.REENTER_EMPTY, TargetBehavior.REENTER_MISMATCHED]
    return itertools.product(choices, repeat=distinct)


def enumerate_shapes(config: HarnessConfig) -> Iterator[Shape]:
    reentrant = config.include_reentrant_targets
    for initiator in config.initiator_roles:
        for n in config.batch_lengths:
            if initiator is InitiatorRole.TARGET and n == 0:
                continue
            for payload_length in config.payload_lengths:
                for aliasing in aliasing_topologies(n):
                    distinct = n - sum(aliasing) if n else 0
                    if initiator is InitiatorRole.TARGET:
                        # Distinct target 0 is the initiator account.
                        vectors = (
                            (TargetBehavior.SUCCEED,) + rest
                            for rest in behavior_vectors(distinct - 1, include_reentrant=reentrant)
                        )
                    else:
                        vectors = behavior_vectors(distinct, include_reentrant=reentrant)
                    for behaviors in vectors:
                        yield Shape(
                            batch_length=n,
                            payload_length=payload_length,
                            aliasing=tuple(aliasing),
                            behaviors=tuple(behaviors),
                            initiator=initiator,
                        )


def count_shapes(config: HarnessConfig) -> int:
    return sum(1 for _ in enumerate_shapes(config))
