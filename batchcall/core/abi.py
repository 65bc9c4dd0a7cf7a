"""
Solidity ABI codec for the batch forwarder's public surface.

Calldata layout follows the standard contract ABI: a 4-byte selector followed
by the head/tail encoding of the arguments. Custom errors are identified by the
4-byte selector of their signature with no arguments.
"""

from __future__ import annotations

from typing import Sequence

from eth_abi import decode, encode
from eth_abi.exceptions import DecodingError
from eth_utils import function_signature_to_4byte_selector

from ..state.addresses import Address, ZERO_ADDRESS, canonical_address


MAX_UINT256 = (1 << 256) - 1
SELECTOR_NBYTES = 4

AGGREGATE_WITH_SENDER_SIGNATURE = "aggregateWithSender(address[],bytes[],uint256[])"
SENDER_SIGNATURE = "sender()"
REENTRANCY_UNLOCKED_SIGNATURE = "reentrancyUnlocked()"

ARRAY_LENGTHS_MISMATCH_SIGNATURE = "ArrayLengthsMismatch()"
REENTRANCY_SIGNATURE = "Reentrancy()"

_AGGREGATE_ARG_TYPES = ("address[]", "bytes[]", "uint256[]")


class MalformedCalldata(ValueError):
    """Calldata that does not decode against the expected argument types."""


def selector(signature: str) -> bytes:
    return bytes(function_signature_to_4byte_selector(signature))


AGGREGATE_WITH_SENDER_SELECTOR = selector(AGGREGATE_WITH_SENDER_SIGNATURE)
SENDER_SELECTOR = selector(SENDER_SIGNATURE)
REENTRANCY_UNLOCKED_SELECTOR = selector(REENTRANCY_UNLOCKED_SIGNATURE)

ARRAY_LENGTHS_MISMATCH_SELECTOR = selector(ARRAY_LENGTHS_MISMATCH_SIGNATURE)
REENTRANCY_SELECTOR = selector(REENTRANCY_SIGNATURE)


def _require_uint256(value: object, *, name: str) -> int:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")
    if value < 0 or value > MAX_UINT256:
        raise ValueError(f"{name} out of uint256 range: {value}")
    return int(value)


def split_selector(calldata: bytes) -> tuple[bytes, bytes]:
    """Return (selector, args). Calldata shorter than a selector has an empty selector."""
    data = bytes(calldata)
    if len(data) < SELECTOR_NBYTES:
        return b"", data
    return data[:SELECTOR_NBYTES], data[SELECTOR_NBYTES:]


def encode_aggregate_call(
    targets: Sequence[Address],
    payloads: Sequence[bytes],
    values: Sequence[int],
) -> bytes:
    """
    Encode `aggregateWithSender(targets, payloads, values)` calldata.

    The three arrays are encoded independently, so mismatched lengths are
    representable on the wire and left for the engine to reject.
    """
    targets_c = [canonical_address(t, name=f"targets[{i}]") for i, t in enumerate(targets)]
    payloads_c = []
    for i, payload in enumerate(payloads):
        if not isinstance(payload, (bytes, bytearray)):
            raise TypeError(f"payloads[{i}] must be bytes")
        payloads_c.append(bytes(payload))
    values_c = [_require_uint256(v, name=f"values[{i}]") for i, v in enumerate(values)]
    return AGGREGATE_WITH_SENDER_SELECTOR + encode(list(_AGGREGATE_ARG_TYPES), [targets_c, payloads_c, values_c])


def decode_aggregate_args(args: bytes) -> tuple[list[Address], list[bytes], list[int]]:
    """Decode the argument block of `aggregateWithSender` (selector already stripped)."""
    try:
        targets, payloads, values = decode(list(_AGGREGATE_ARG_TYPES), bytes(args))
    except (DecodingError, ValueError, OverflowError) as exc:
        raise MalformedCalldata(f"aggregateWithSender arguments: {exc}") from exc
    return (
        [canonical_address(t) for t in targets],
        [bytes(p) for p in payloads],
        [int(v) for v in values],
    )


def encode_sender_call() -> bytes:
    return SENDER_SELECTOR


def encode_reentrancy_unlocked_call() -> bytes:
    return REENTRANCY_UNLOCKED_SELECTOR


def encode_bytes_array(items: Sequence[bytes]) -> bytes:
    return encode(["bytes[]"], [[bytes(item) for item in items]])


def decode_bytes_array(data: bytes) -> list[bytes]:
    try:
        (items,) = decode(["bytes[]"], bytes(data))
    except (DecodingError, ValueError, OverflowError) as exc:
        raise MalformedCalldata(f"bytes[] return data: {exc}") from exc
    return [bytes(item) for item in items]


def encode_address(address: Address | None) -> bytes:
    return encode(["address"], [canonical_address(address if address is not None else ZERO_ADDRESS)])


def decode_address(data: bytes) -> Address:
    try:
        (address,) = decode(["address"], bytes(data))
    except (DecodingError, ValueError, OverflowError) as exc:
        raise MalformedCalldata(f"address return data: {exc}") from exc
    return canonical_address(address)


def encode_bool(flag: bool) -> bytes:
    return encode(["bool"], [bool(flag)])


def decode_bool(data: bytes) -> bool:
    try:
        (flag,) = decode(["bool"], bytes(data))
    except (DecodingError, ValueError, OverflowError) as exc:
        raise MalformedCalldata(f"bool return data: {exc}") from exc
    return bool(flag)
