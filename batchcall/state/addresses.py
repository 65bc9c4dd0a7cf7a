"""
Account addresses for the simulated execution substrate.

Addresses are 20-byte identifiers carried as checksummed `0x`-prefixed hex
strings. Every address that enters the ledger or the contract registry goes
through `canonical_address`, so two spellings of the same account can never
map to different balances.
"""

from __future__ import annotations

from typing import Any

from eth_utils import is_hex_address, keccak, to_checksum_address


Address = str  # checksummed 0x-prefixed 20-byte hex

ADDRESS_NBYTES = 20
ZERO_ADDRESS: Address = "0x" + "00" * ADDRESS_NBYTES


def canonical_address(value: Any, *, name: str = "address") -> Address:
    """
    Return the checksummed form of a 20-byte address.

    Accepts lowercase, uppercase or checksummed hex strings, and raw 20-byte values.

    Raises:
        TypeError: If value is neither str nor bytes
        ValueError: If value is not a 20-byte address
    """
    if isinstance(value, (bytes, bytearray)):
        if len(value) != ADDRESS_NBYTES:
            raise ValueError(f"{name} must be {ADDRESS_NBYTES} bytes, got {len(value)}")
        return to_checksum_address(bytes(value))
    if not isinstance(value, str):
        raise TypeError(f"{name} must be a hex string or bytes")
    if not is_hex_address(value):
        raise ValueError(f"{name} must be a 0x-prefixed 20-byte hex address: {value!r}")
    return to_checksum_address(value)


def address_to_int(address: Address) -> int:
    return int(canonical_address(address), 16)


def address_from_int(value: int) -> Address:
    if not isinstance(value, int) or isinstance(value, bool) or value < 0 or value >> 160:
        raise ValueError(f"address integer out of range: {value!r}")
    return to_checksum_address(value.to_bytes(ADDRESS_NBYTES, "big"))


def derive_address(label: str) -> Address:
    """Deterministic address for a label (last 20 bytes of keccak256(label))."""
    if not isinstance(label, str) or not label:
        raise ValueError("label must be a non-empty string")
    return to_checksum_address(keccak(text=label)[-ADDRESS_NBYTES:])


def is_zero_address(address: Address) -> bool:
    return address_to_int(address) == 0
