"""
Pool-token balance tracking.

Pool tokens are tracked separately from the reserve assets so the sum of
holder balances can be checked against `PoolState.pool_supply`.
"""

from __future__ import annotations

from typing import Dict

from .balances import Amount, Holder, require_amount


class LPTable:
    """
    Pool-token balance table mapping holder -> amount.

    Notes:
    - Balances are always non-negative.
    - Zero balances are omitted.
    """

    def __init__(self) -> None:
        self._balances: Dict[Holder, Amount] = {}

    def get(self, holder: Holder) -> Amount:
        """Get the pool-token balance of `holder`. Returns 0 if not found."""
        return self._balances.get(holder, 0)

    def mint(self, holder: Holder, amount: Amount) -> None:
        require_amount("mint amount", amount)
        new_balance = self.get(holder) + amount
        require_amount("pool-token balance", new_balance)
        if new_balance:
            self._balances[holder] = new_balance

    def burn(self, holder: Holder, amount: Amount) -> None:
        require_amount("burn amount", amount)
        current = self.get(holder)
        if amount > current:
            raise ValueError(f"Insufficient pool-token balance for {holder}: {amount} > {current}")
        if amount == current:
            self._balances.pop(holder, None)
        else:
            self._balances[holder] = current - amount

    def total(self) -> Amount:
        """Sum of all holder balances; equals the pool supply when the ledger is consistent."""
        return sum(self._balances.values())

    def __repr__(self) -> str:
        return f"LPTable({len(self._balances)} entries)"
