"""`batchcall.core`: sender-context batch forwarding on an in-process substrate.

Public API:
- `Substrate`, `Contract`, `Frame`: the call-dispatch primitive with frame rollback
- `MulticallerWithSender`: optimized engine (packed register/guard slot)
- `MulticallerWithSenderSpec`: reference specification
- `execute_batch(...) -> BatchResult` / `execute_batch_or_raise(...)`
"""

from .batch import classify_revert, execute_batch, execute_batch_or_raise, execute_calls, read_registers
from .engine import MulticallerWithSender
from .errors import ArrayLengthsMismatch, CallReverted, Reentrancy, Revert, SubstrateError
from .forwarder import BatchForwarder
from .reference import MulticallerWithSenderSpec
from .substrate import MAX_CALL_DEPTH, Contract, Frame, Substrate
from .types import BatchResult, Call, CallResult, Registers

__all__ = [
    "classify_revert",
    "execute_batch",
    "execute_batch_or_raise",
    "execute_calls",
    "read_registers",
    "MulticallerWithSender",
    "MulticallerWithSenderSpec",
    "BatchForwarder",
    "ArrayLengthsMismatch",
    "CallReverted",
    "Reentrancy",
    "Revert",
    "SubstrateError",
    "MAX_CALL_DEPTH",
    "Contract",
    "Frame",
    "Substrate",
    "BatchResult",
    "Call",
    "CallResult",
    "Registers",
]
