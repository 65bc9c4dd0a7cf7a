"""
State management for the simulated execution substrate
"""

from .addresses import Address, ZERO_ADDRESS, canonical_address, derive_address
from .ledger import ValueLedger
from .world_root import compute_world_root

__all__ = [
    "Address",
    "ZERO_ADDRESS",
    "canonical_address",
    "derive_address",
    "ValueLedger",
    "compute_world_root",
]
