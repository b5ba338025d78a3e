"""
Amount conventions and holder balance tracking.

Implements BalanceTable[Holder, Asset] -> Amount for the in-memory ledger.
"""

from __future__ import annotations

from typing import Dict, Tuple

from ..errors import AmountOverflow


# Type aliases
Holder = str  # opaque account owner identifier
Asset = str  # "A", "B" or the pool token symbol
Amount = int  # non-negative fixed-point integer

# Native amount width (unsigned 64-bit token amounts).
AMOUNT_BITS = 64
MAX_AMOUNT = (1 << AMOUNT_BITS) - 1


def require_amount(name: str, value: int) -> int:
    """
    Validate that `value` is an int inside [0, MAX_AMOUNT].

    Raises:
        TypeError: If value is not an int (bools are rejected)
        ValueError: If value is negative
        AmountOverflow: If value does not fit the amount width
    """
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")
    if value < 0:
        raise ValueError(f"{name} must be non-negative: {value}")
    if value > MAX_AMOUNT:
        raise AmountOverflow(f"{name} exceeds {AMOUNT_BITS}-bit amount range: {value}")
    return value


class BalanceTable:
    """
    Balance table mapping (holder, asset) -> amount.

    Zero balances are dropped to keep the table sparse.
    """

    def __init__(self) -> None:
        self._balances: Dict[Tuple[Holder, Asset], Amount] = {}

    def get(self, holder: Holder, asset: Asset) -> Amount:
        """Get balance for (holder, asset). Returns 0 if not found."""
        return self._balances.get((holder, asset), 0)

    def set(self, holder: Holder, asset: Asset, amount: Amount) -> None:
        """
        Set balance for (holder, asset).

        Raises:
            ValueError: If amount is negative
            AmountOverflow: If amount exceeds the amount width
        """
        require_amount("balance", amount)
        if amount == 0:
            self._balances.pop((holder, asset), None)
        else:
            self._balances[(holder, asset)] = amount

    def add(self, holder: Holder, asset: Asset, delta: int) -> None:
        """
        Add delta to a balance (delta may be negative).

        Raises:
            ValueError: If the resulting balance would be negative
        """
        current = self.get(holder, asset)
        new_balance = current + delta
        if new_balance < 0:
            raise ValueError(
                f"Insufficient {asset} balance for {holder}: {current} + {delta} = {new_balance} < 0"
            )
        self.set(holder, asset, new_balance)

    def subtract(self, holder: Holder, asset: Asset, delta: Amount) -> None:
        """Subtract a non-negative amount from a balance."""
        if delta < 0:
            raise ValueError(f"Delta must be non-negative: {delta}")
        self.add(holder, asset, -delta)

    def total(self, asset: Asset) -> Amount:
        """Sum of all holder balances of `asset`."""
        return sum(amount for (_, a), amount in self._balances.items() if a == asset)

    def get_all_balances(self) -> Dict[Tuple[Holder, Asset], Amount]:
        return dict(self._balances)

    def __repr__(self) -> str:
        return f"BalanceTable({len(self._balances)} entries)"
