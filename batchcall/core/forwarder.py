"""ABI shell shared by the batch forwarder implementations.

``BatchForwarder.handle()`` decodes calldata and routes it to the three public
operations; subclasses supply the operations themselves. Keeping the shell
common means the optimized engine and the reference specification are compared
on their semantics alone, never on decoding differences.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

from ..state.addresses import Address
from .abi import (
    AGGREGATE_WITH_SENDER_SELECTOR,
    REENTRANCY_UNLOCKED_SELECTOR,
    SENDER_SELECTOR,
    MalformedCalldata,
    decode_aggregate_args,
    encode_address,
    encode_bool,
    encode_bytes_array,
    split_selector,
)
from .errors import Revert
from .substrate import Contract, Frame
from .types import Registers


class BatchForwarder(Contract):
    """Contract surface: ``aggregateWithSender``, ``sender()``, ``reentrancyUnlocked()``."""

    def handle(self, frame: Frame) -> bytes:
        if not frame.payload:
            # Plain value transfer.
            return b""

        sel, args = split_selector(frame.payload)
        if sel == AGGREGATE_WITH_SENDER_SELECTOR:
            try:
                targets, payloads, values = decode_aggregate_args(args)
            except MalformedCalldata as exc:
                raise Revert(b"") from exc
            return encode_bytes_array(self.aggregate_with_sender(frame, targets, payloads, values))

        # View functions are not payable.
        if frame.value:
            raise Revert(b"")
        if sel == SENDER_SELECTOR:
            return encode_address(self.sender())
        if sel == REENTRANCY_UNLOCKED_SELECTOR:
            return encode_bool(self.reentrancy_unlocked())
        raise Revert(b"")

    def aggregate_with_sender(
        self,
        frame: Frame,
        targets: Sequence[Address],
        payloads: Sequence[bytes],
        values: Sequence[int],
    ) -> list[bytes]:
        """Run one batch; each engine implements it."""
        raise NotImplementedError

    def sender(self) -> Optional[Address]:
        """Current sender register, None when unset; each engine implements it."""
        raise NotImplementedError

    def reentrancy_unlocked(self) -> bool:
        """Current guard register; each engine implements it."""
        raise NotImplementedError

    def registers(self) -> Registers:
        return Registers(sender=self.sender(), unlocked=self.reentrancy_unlocked())

    def public_state(self) -> Dict[str, Any]:
        return {"sender": self.sender(), "unlocked": self.reentrancy_unlocked()}
