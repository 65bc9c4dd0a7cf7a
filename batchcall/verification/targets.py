"""
Scripted targets for equivalence scenarios.

A `ScriptedTarget` stands in for arbitrary downstream code. Every dispatch:
- adds the forwarded value to its received-value bookkeeping and bumps its call count,
- reads the engine's `sender()` through the ABI and records what it saw,
- records the world root as it stands mid-batch,
- then succeeds (echoing the payload), reverts (with the payload as output),
  or re-enters the engine with a nested batch (one call, empty, or with
  mismatched array lengths), depending on its behavior.

All bookkeeping is storage, so frame rollback undoes it exactly like balances.
"""

from __future__ import annotations

from typing import Any, Dict

from ..core.abi import decode_address, encode_aggregate_call, encode_sender_call
from ..core.errors import Revert
from ..core.substrate import Contract, Frame
from ..state.addresses import ZERO_ADDRESS, Address, canonical_address
from .shapes import TargetBehavior


# Nested aggregate calldata per re-entering behavior, built from (own address, payload).
_NESTED_BATCHES = {
    TargetBehavior.REENTER: lambda me, payload: encode_aggregate_call([me], [payload], [0]),
    TargetBehavior.REENTER_EMPTY: lambda me, payload: encode_aggregate_call([], [], []),
    TargetBehavior.REENTER_MISMATCHED: lambda me, payload: encode_aggregate_call([me], [payload], []),
}


class ScriptedTarget(Contract):
    def __init__(self, address: Address, *, behavior: TargetBehavior, engine: Address) -> None:
        super().__init__(address)
        self.behavior = behavior
        self.engine = canonical_address(engine, name="engine")
        self._received = 0
        self._calls = 0
        self._observed_senders: tuple[Address, ...] = ()
        self._observed_roots: tuple[str, ...] = ()
        # Transient (not storage): limits re-entry to one nested attempt per dispatch chain.
        self._reentering = False

    @property
    def received(self) -> int:
        return self._received

    @property
    def calls(self) -> int:
        return self._calls

    @property
    def observed_senders(self) -> tuple[Address, ...]:
        return self._observed_senders

    @property
    def observed_roots(self) -> tuple[str, ...]:
        return self._observed_roots

    def handle(self, frame: Frame) -> bytes:
        self._received += frame.value
        self._calls += 1

        seen = frame.call(self.engine, encode_sender_call())
        self._observed_senders += (decode_address(seen.output) if seen.success else ZERO_ADDRESS,)
        self._observed_roots += (frame.substrate.world_root(),)

        if self.behavior is TargetBehavior.REVERT:
            raise Revert(frame.payload)
        if self.behavior in _NESTED_BATCHES and not self._reentering:
            self._reentering = True
            try:
                nested = frame.call(self.engine, _NESTED_BATCHES[self.behavior](self.address, frame.payload))
            finally:
                self._reentering = False
            return nested.output
        return frame.payload

    def snapshot(self) -> Any:
        return (self._received, self._calls, self._observed_senders, self._observed_roots)

    def restore(self, snapshot: Any) -> None:
        self._received, self._calls, self._observed_senders, self._observed_roots = snapshot

    def public_state(self) -> Dict[str, Any]:
        return {
            "behavior": self.behavior.value,
            "received": self._received,
            "calls": self._calls,
            "observed_senders": list(self._observed_senders),
            "observed_roots": list(self._observed_roots),
        }
