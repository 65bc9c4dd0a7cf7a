"""Exception types for the batch forwarder and its execution substrate.

Every failure that aborts a call frame is a ``Revert`` carrying the raw output
bytes the caller observes. The substrate turns a ``Revert`` into a failed
``CallResult`` and rolls the frame back; ``execute_batch_or_raise()`` in
``batch.py`` maps a failed result back onto these classes.
"""

from __future__ import annotations

from .abi import ARRAY_LENGTHS_MISMATCH_SELECTOR, REENTRANCY_SELECTOR


class Revert(Exception):
    """Abort the current call frame, surfacing ``output`` verbatim."""

    def __init__(self, output: bytes = b"") -> None:
        self.output = bytes(output)
        super().__init__(f"revert: 0x{self.output.hex()}")


class ArrayLengthsMismatch(Revert):
    """Raised when targets, payloads and values differ in length."""

    kind = "ArrayLengthsMismatch"

    def __init__(self) -> None:
        super().__init__(ARRAY_LENGTHS_MISMATCH_SELECTOR)


class Reentrancy(Revert):
    """Raised when a batch is requested while another is in progress."""

    kind = "Reentrancy"

    def __init__(self) -> None:
        super().__init__(REENTRANCY_SELECTOR)


class CallReverted(Revert):
    """Pass-through of the first failing sub-call's raw output."""

    kind = "PropagatedFailure"


class SubstrateError(Exception):
    """Raised on misuse of the execution substrate (not a call-frame failure)."""
