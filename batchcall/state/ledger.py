"""
Native value ledger for the simulated execution substrate.

Implements ValueLedger[Address] -> Amount
"""

from typing import Dict, Mapping

from .addresses import Address, canonical_address


Amount = int  # Non-negative integer (arbitrary precision)


class ValueLedger:
    """
    Balance table mapping address -> amount.

    Note: balances live in a plain dict. Callers that hash or serialize the
    ledger must sort entries explicitly (see `batchcall/state/world_root.py`).
    """

    def __init__(self):
        """Initialize empty ledger."""
        self._balances: Dict[Address, Amount] = {}

    def get(self, address: Address) -> Amount:
        """Get balance for address. Returns 0 if not found."""
        return self._balances.get(canonical_address(address), 0)

    def set(self, address: Address, amount: Amount) -> None:
        """
        Set balance for address.

        Args:
            address: Account address
            amount: Non-negative amount

        Raises:
            ValueError: If amount is negative
        """
        if not isinstance(amount, int) or isinstance(amount, bool):
            raise TypeError(f"Balance must be an int: {amount!r}")
        if amount < 0:
            raise ValueError(f"Balance cannot be negative: {amount}")
        key = canonical_address(address)
        if amount == 0:
            # Remove zero balances to keep table sparse
            self._balances.pop(key, None)
        else:
            self._balances[key] = amount

    def add(self, address: Address, delta: Amount) -> None:
        """
        Add delta to balance (delta may be negative).

        Raises:
            ValueError: If resulting balance would be negative
        """
        current = self.get(address)
        new_balance = current + delta
        if new_balance < 0:
            raise ValueError(
                f"Insufficient balance: {current} + {delta} = {new_balance} < 0"
            )
        self.set(address, new_balance)

    def subtract(self, address: Address, delta: Amount) -> None:
        """
        Subtract delta from balance.

        Raises:
            ValueError: If delta is negative or insufficient balance
        """
        if delta < 0:
            raise ValueError(f"Delta must be non-negative: {delta}")
        self.add(address, -delta)

    def transfer(self, sender: Address, recipient: Address, amount: Amount) -> None:
        """
        Move amount from sender to recipient.

        A self-transfer only checks that the sender can cover the amount.

        Raises:
            ValueError: If amount is negative or sender balance is insufficient
        """
        if amount < 0:
            raise ValueError(f"Transfer amount must be non-negative: {amount}")
        self.subtract(sender, amount)
        self.add(recipient, amount)

    def snapshot(self) -> Dict[Address, Amount]:
        return dict(self._balances)

    def restore(self, snapshot: Mapping[Address, Amount]) -> None:
        self._balances = dict(snapshot)

    def get_all_balances(self) -> Dict[Address, Amount]:
        """
        Get all non-zero balances.

        Returns:
            Dictionary mapping address -> amount
        """
        return dict(self._balances)

    def __repr__(self) -> str:
        return f"ValueLedger({len(self._balances)} entries)"
