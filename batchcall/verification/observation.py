"""
Externally observable outcome of one batch run, and field-by-field diffing.

Compared signals:
  (i)   overall success / failure
  (ii)  output sequence, or the raw revert payload
  (iii) post-call sender register and reentrancy guard
  (iv)  engine residual balance
  (v)   per-target bookkeeping: received value, call count, observed senders,
        mid-batch world roots, balance
  (vi)  initiator balance and the whole-world root
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from ..core.types import BatchResult
from ..state.addresses import Address
from .scenario import World


@dataclass(frozen=True)
class TargetLedger:
    address: Address
    received: int
    calls: int
    observed_senders: tuple[Address, ...]
    observed_roots: tuple[str, ...]
    balance: int


@dataclass(frozen=True)
class Observation:
    ok: bool
    outputs: tuple[bytes, ...]
    error_output: Optional[bytes]
    sender: Optional[Address]
    unlocked: bool
    engine_balance: int
    initiator_balance: int
    targets: tuple[TargetLedger, ...]
    world_root: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ok": self.ok,
            "outputs": ["0x" + o.hex() for o in self.outputs],
            "error_output": None if self.error_output is None else "0x" + self.error_output.hex(),
            "sender": self.sender,
            "unlocked": self.unlocked,
            "engine_balance": self.engine_balance,
            "initiator_balance": self.initiator_balance,
            "targets": [
                {
                    "address": t.address,
                    "received": t.received,
                    "calls": t.calls,
                    "observed_senders": list(t.observed_senders),
                    "observed_roots": list(t.observed_roots),
                    "balance": t.balance,
                }
                for t in self.targets
            ],
            "world_root": self.world_root,
        }


def observe(world: World, result: BatchResult) -> Observation:
    substrate = world.substrate
    targets = tuple(
        TargetLedger(
            address=address,
            received=target.received,
            calls=target.calls,
            observed_senders=target.observed_senders,
            observed_roots=target.observed_roots,
            balance=substrate.balance_of(address),
        )
        for address, target in sorted(world.targets.items())
    )
    return Observation(
        ok=result.ok,
        outputs=result.outputs,
        error_output=result.error_output,
        sender=world.engine.sender(),
        unlocked=world.engine.reentrancy_unlocked(),
        engine_balance=substrate.balance_of(world.engine.address),
        initiator_balance=substrate.balance_of(world.initiator),
        targets=targets,
        world_root=substrate.world_root(),
    )


def _hex(b: Optional[bytes]) -> str:
    return "None" if b is None else "0x" + b.hex()


def diff_observations(ours: Observation, ref: Observation) -> list[str]:
    """Human-readable mismatches; empty iff the observations agree."""
    diffs: list[str] = []

    if ours.ok != ref.ok:
        diffs.append(f"outcome: ours.ok={ours.ok}, ref.ok={ref.ok}")
    if ours.outputs != ref.outputs:
        diffs.append(
            "outputs: ours=[" + ", ".join(map(_hex, ours.outputs)) + "], "
            "ref=[" + ", ".join(map(_hex, ref.outputs)) + "]"
        )
    if ours.error_output != ref.error_output:
        diffs.append(f"error_output: ours={_hex(ours.error_output)}, ref={_hex(ref.error_output)}")

    if ours.sender != ref.sender:
        diffs.append(f"sender: ours={ours.sender}, ref={ref.sender}")
    if ours.unlocked != ref.unlocked:
        diffs.append(f"unlocked: ours={ours.unlocked}, ref={ref.unlocked}")

    if ours.engine_balance != ref.engine_balance:
        diffs.append(f"engine_balance: ours={ours.engine_balance}, ref={ref.engine_balance}")

    ours_targets = {t.address: t for t in ours.targets}
    ref_targets = {t.address: t for t in ref.targets}
    for address in sorted(set(ours_targets) | set(ref_targets)):
        a = ours_targets.get(address)
        b = ref_targets.get(address)
        if a is None or b is None:
            diffs.append(f"target {address}: present in ours={a is not None}, ref={b is not None}")
            continue
        for name in ("received", "calls", "observed_senders", "observed_roots", "balance"):
            va, vb = getattr(a, name), getattr(b, name)
            if va != vb:
                diffs.append(f"target {address} {name}: ours={va}, ref={vb}")

    if ours.initiator_balance != ref.initiator_balance:
        diffs.append(f"initiator_balance: ours={ours.initiator_balance}, ref={ref.initiator_balance}")
    if ours.world_root != ref.world_root:
        diffs.append(f"world_root: ours={ours.world_root}, ref={ref.world_root}")

    return diffs
