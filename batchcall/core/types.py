"""Data types shared by the substrate, the engines and the batch front door.

All types are frozen dataclasses (immutable).

Conventions:
- addresses are checksummed `0x` hex strings (see `batchcall.state.addresses`),
- payloads and outputs are raw `bytes`,
- values are non-negative integers in native units.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..state.addresses import Address


@dataclass(frozen=True)
class Call:
    """One forwarded sub-call of a batch."""

    target: Address
    payload: bytes = b""
    value: int = 0


@dataclass(frozen=True)
class CallResult:
    """Outcome of one dispatched frame."""

    success: bool
    output: bytes = b""


@dataclass(frozen=True)
class Registers:
    """Externally observable engine registers."""

    sender: Optional[Address] = None
    unlocked: bool = True

    @property
    def at_rest(self) -> bool:
        return self.sender is None and self.unlocked


@dataclass(frozen=True)
class BatchResult:
    """Result of one `execute_batch` invocation."""

    ok: bool
    outputs: tuple[bytes, ...] = ()
    error_output: Optional[bytes] = None
    error: Optional[str] = None
