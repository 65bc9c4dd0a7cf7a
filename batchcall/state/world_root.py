"""
Deterministic world root hashing (v1).

A world is one substrate: the value ledger plus the public state of every
deployed contract. The root is intended for:
- "nothing changed" checks around aborted batches,
- parity checking between two independently built worlds,
- stable identifiers in equivalence reports.
"""

from __future__ import annotations

from typing import Any, Mapping

from .addresses import Address, canonical_address
from .canonical import canonical_json_bytes, domain_sep_bytes, encode_bytes, encode_uvarint, sha256_hex
from .ledger import ValueLedger


WORLD_ROOT_VERSION = 1


def _address_bytes(address: Address) -> bytes:
    return bytes.fromhex(canonical_address(address)[2:])


def _sorted_balance_entries(ledger: ValueLedger) -> list[tuple[bytes, int]]:
    entries: list[tuple[bytes, int]] = []
    for address, amount in ledger.get_all_balances().items():
        if not isinstance(amount, int) or isinstance(amount, bool) or amount < 0:
            raise ValueError(f"invalid balance amount: {amount!r}")
        entries.append((_address_bytes(address), amount))
    entries.sort(key=lambda t: t[0])
    return entries


def _sorted_contract_entries(contract_states: Mapping[Address, Mapping[str, Any]]) -> list[tuple[bytes, bytes]]:
    entries: list[tuple[bytes, bytes]] = []
    seen: set[bytes] = set()
    for address, state in contract_states.items():
        key = _address_bytes(address)
        if key in seen:
            raise ValueError("duplicate decoded address in contract states")
        seen.add(key)
        entries.append((key, canonical_json_bytes(dict(state))))
    entries.sort(key=lambda t: t[0])
    return entries


def compute_world_root(
    ledger: ValueLedger,
    contract_states: Mapping[Address, Mapping[str, Any]],
) -> str:
    """
    Hash the ledger and the public contract states into a 0x-prefixed sha256 hex root.

    Independent of dict insertion order.
    """
    out = bytearray(domain_sep_bytes("world_root", version=WORLD_ROOT_VERSION))

    balances = _sorted_balance_entries(ledger)
    out += encode_uvarint(len(balances))
    for address_b, amount in balances:
        out += address_b
        out += encode_uvarint(amount)

    contracts = _sorted_contract_entries(contract_states)
    out += encode_uvarint(len(contracts))
    for address_b, state_b in contracts:
        out += address_b
        out += encode_bytes(state_b)

    return sha256_hex(bytes(out))
