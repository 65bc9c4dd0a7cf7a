"""Optimized batch forwarding engine.

The caller-context register and the reentrancy guard share one integer slot:

    slot = sender | (unlocked << 160)

so acquiring a batch is a single store of the caller's address (which also
clears the unlocked bit) and releasing it is a single store of the bare
unlocked bit. The slot reads back through ``sender()`` and
``reentrancy_unlocked()``.

Keep this module observationally identical to ``reference.py``; the
equivalence harness in ``batchcall.verification`` is the check.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

from ..state.addresses import Address, address_from_int, address_to_int
from .errors import ArrayLengthsMismatch, CallReverted, Reentrancy
from .forwarder import BatchForwarder
from .substrate import Frame

logger = logging.getLogger(__name__)

_SENDER_MASK = (1 << 160) - 1
_UNLOCKED_BIT = 1 << 160


class MulticallerWithSender(BatchForwarder):
    """Forwards a batch of calls, exposing the batch initiator via ``sender()``."""

    def __init__(self, address: Address) -> None:
        super().__init__(address)
        self._slot = _UNLOCKED_BIT

    def aggregate_with_sender(
        self,
        frame: Frame,
        targets: Sequence[Address],
        payloads: Sequence[bytes],
        values: Sequence[int],
    ) -> list[bytes]:
        n = len(payloads)
        if len(targets) != n or len(values) != n:
            raise ArrayLengthsMismatch()

        slot = self._slot
        if not slot & _UNLOCKED_BIT:
            raise Reentrancy()
        if not n:
            return []

        self._slot = address_to_int(frame.caller)
        logger.debug("batch start: engine=%s sender=%s calls=%d", self.address, frame.caller, n)

        results = [b""] * n
        call = frame.substrate.call
        me = self.address
        for i in range(n):
            result = call(me, targets[i], payloads[i], values[i])
            if not result.success:
                self._slot = slot
                logger.debug("batch abort: engine=%s index=%d", me, i)
                raise CallReverted(result.output)
            results[i] = result.output

        self._slot = _UNLOCKED_BIT
        return results

    def sender(self) -> Optional[Address]:
        bits = self._slot & _SENDER_MASK
        return address_from_int(bits) if bits else None

    def reentrancy_unlocked(self) -> bool:
        return bool(self._slot & _UNLOCKED_BIT)

    def snapshot(self) -> Any:
        return self._slot

    def restore(self, snapshot: Any) -> None:
        self._slot = snapshot
