"""
In-process execution substrate (the call-dispatch primitive).

The substrate owns the value ledger and the registry of deployed contracts and
provides the one capability the forwarding engine cannot implement itself:

    call(caller, target, payload, value) -> CallResult(success, output)

Semantics:
- `value` moves from `caller` to `target` before the target runs; a caller that
  cannot cover it gets a failed call with empty output and nothing runs.
- A target with no deployed contract accepts the value and returns empty output.
- A contract aborts its frame by raising `Revert(output)`. Every ledger and
  contract-state change made inside that frame (nested frames included) is
  rolled back and the caller observes `CallResult(False, output)`.
- Frames nest at most `max_call_depth` (default `MAX_CALL_DEPTH`) deep; deeper calls fail with empty output.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from ..state.addresses import Address, canonical_address
from ..state.ledger import ValueLedger
from ..state.world_root import compute_world_root
from .errors import Revert, SubstrateError
from .types import CallResult

logger = logging.getLogger(__name__)

MAX_CALL_DEPTH = 1024


@dataclass(frozen=True)
class Frame:
    """Execution context handed to a contract for one call."""

    substrate: "Substrate"
    caller: Address
    address: Address
    payload: bytes
    value: int
    depth: int

    def call(self, target: Address, payload: bytes = b"", value: int = 0) -> CallResult:
        """Dispatch a nested call from the executing contract's own account."""
        return self.substrate.call(self.address, target, payload, value)


class Contract:
    """
    Base class for code deployed on the substrate.

    Subclasses implement `handle`; stateful subclasses also implement
    `snapshot`/`restore` (so frame rollback covers their storage) and
    `public_state` (so world roots and reports can see it).
    """

    def __init__(self, address: Address) -> None:
        self.address = canonical_address(address, name="contract address")

    def handle(self, frame: Frame) -> bytes:
        raise NotImplementedError

    def snapshot(self) -> Any:
        return None

    def restore(self, snapshot: Any) -> None:
        return None

    def public_state(self) -> Dict[str, Any]:
        return {}

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.address})"


class Substrate:
    """Ledger + deployed contracts + the frame-rollback call primitive."""

    def __init__(self, *, max_call_depth: int = MAX_CALL_DEPTH) -> None:
        if not isinstance(max_call_depth, int) or isinstance(max_call_depth, bool) or max_call_depth <= 0:
            raise SubstrateError("max_call_depth must be a positive int")
        self.ledger = ValueLedger()
        self._contracts: Dict[Address, Contract] = {}
        self._depth = 0
        self.max_call_depth = max_call_depth

    # -- accounts ------------------------------------------------------------

    def deploy(self, contract: Contract) -> Contract:
        if not isinstance(contract, Contract):
            raise SubstrateError(f"not a Contract: {contract!r}")
        if contract.address in self._contracts:
            raise SubstrateError(f"address already has code: {contract.address}")
        self._contracts[contract.address] = contract
        return contract

    def contract_at(self, address: Address) -> Optional[Contract]:
        return self._contracts.get(canonical_address(address))

    def fund(self, address: Address, amount: int) -> None:
        self.ledger.add(address, amount)

    def balance_of(self, address: Address) -> int:
        return self.ledger.get(address)

    @property
    def depth(self) -> int:
        return self._depth

    # -- journaling ----------------------------------------------------------

    def _snapshot(self) -> tuple[Dict[Address, int], Dict[Address, Any]]:
        return (
            self.ledger.snapshot(),
            {address: c.snapshot() for address, c in self._contracts.items()},
        )

    def _restore(self, snap: tuple[Dict[Address, int], Dict[Address, Any]]) -> None:
        balances, states = snap
        self.ledger.restore(balances)
        for address, state in states.items():
            self._contracts[address].restore(state)

    # -- execution -----------------------------------------------------------

    def call(self, caller: Address, target: Address, payload: bytes = b"", value: int = 0) -> CallResult:
        """Execute one frame. Never raises for frame-level failures."""
        if not isinstance(value, int) or isinstance(value, bool) or value < 0:
            raise SubstrateError(f"call value must be a non-negative int: {value!r}")
        if not isinstance(payload, (bytes, bytearray)):
            raise SubstrateError("call payload must be bytes")
        caller = canonical_address(caller, name="caller")
        target = canonical_address(target, name="target")

        if self._depth >= self.max_call_depth:
            logger.debug("call depth exceeded: %s -> %s", caller, target)
            return CallResult(success=False, output=b"")
        if self.ledger.get(caller) < value:
            logger.debug("insufficient balance: %s cannot send %d to %s", caller, value, target)
            return CallResult(success=False, output=b"")

        snap = self._snapshot()
        self.ledger.transfer(caller, target, value)
        contract = self._contracts.get(target)
        if contract is None:
            return CallResult(success=True, output=b"")

        frame = Frame(
            substrate=self,
            caller=caller,
            address=target,
            payload=bytes(payload),
            value=value,
            depth=self._depth + 1,
        )
        self._depth += 1
        try:
            output = contract.handle(frame)
        except Revert as exc:
            self._restore(snap)
            logger.debug("frame reverted at depth %d: %s -> %s output=0x%s", frame.depth, caller, target, exc.output.hex())
            return CallResult(success=False, output=exc.output)
        except Exception:
            self._restore(snap)
            raise
        finally:
            self._depth -= 1
        return CallResult(success=True, output=bytes(output or b""))

    def transact(self, origin: Address, target: Address, payload: bytes = b"", value: int = 0) -> CallResult:
        """Top-level entry: an externally owned account starts a fresh call tree."""
        if self._depth != 0:
            raise SubstrateError("transact() is only valid outside of any frame")
        if self.contract_at(origin) is not None:
            raise SubstrateError(f"origin must not be a contract: {origin}")
        return self.call(origin, target, payload, value)

    # -- observation ---------------------------------------------------------

    def public_states(self) -> Dict[Address, Dict[str, Any]]:
        return {address: c.public_state() for address, c in self._contracts.items()}

    def world_root(self) -> str:
        return compute_world_root(self.ledger, self.public_states())
