"""
In-memory ledger for a single pool.

This is an imperative-shell wrapper around the functional core:
- reads the current PoolState snapshot,
- runs one engine operation against it,
- checks the holder can fund the result,
- commits the new PoolState and the holder balance deltas together,
- publishes the result's events.

Operations are serialized with a single-writer lock, so no two operations ever
see the same snapshot. If the engine or a balance check raises, nothing is
committed.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Iterable, List, Optional, Protocol, Tuple, TypeVar, runtime_checkable

from ..config import PoolConfig
from ..core.admin import withdraw_admin_fees
from ..core.events import PoolEvent, deposit_event
from ..core.liquidity import DepositResult, WithdrawResult, deposit, withdraw_proportional, withdraw_single_asset
from ..core.swap import SwapResult, swap
from ..state.balances import Amount, BalanceTable, Holder
from ..state.lp import LPTable
from ..state.pools import ASSET_SYMBOLS, AssetRef, PoolState, asset_index


logger = logging.getLogger(__name__)

T = TypeVar("T")


@runtime_checkable
class Ledger(Protocol):
    """What the engine needs from its persistence collaborator."""

    def read_pool(self) -> PoolState: ...

    def commit(self, state: PoolState, events: Iterable[PoolEvent]) -> None: ...


class InMemoryLedger:
    """
    Ledger holding one pool, holder balances of "A"/"B" and pool-token balances.
    """

    def __init__(self, fee_authority: Holder = "admin") -> None:
        self.balances = BalanceTable()
        self.pool_tokens = LPTable()
        self.fee_authority = fee_authority
        self._pool: Optional[PoolState] = None
        self._events: List[PoolEvent] = []
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # Ledger protocol

    def read_pool(self) -> PoolState:
        if self._pool is None:
            raise LookupError("pool has not been initialized")
        return self._pool

    def commit(self, state: PoolState, events: Iterable[PoolEvent]) -> None:
        self._pool = state
        for event in events:
            self._events.append(event)
            logger.info("pool event %s", event.to_dict())

    @property
    def events(self) -> Tuple[PoolEvent, ...]:
        return tuple(self._events)

    # ------------------------------------------------------------------
    # Holder funding (token minting is outside the engine)

    def fund(self, holder: Holder, asset: AssetRef, amount: Amount) -> None:
        with self._lock:
            self.balances.add(holder, _symbol(asset), amount)

    # ------------------------------------------------------------------
    # Pool operations

    def initialize_pool(
        self,
        holder: Holder,
        seed_amount_a: Amount,
        seed_amount_b: Amount,
        config: PoolConfig,
        now: int = 0,
    ) -> PoolState:
        """Seed the pool from `holder` and credit the initial pool tokens to it."""
        with self._lock:
            if self._pool is not None:
                raise ValueError("pool is already initialized")
            self._require_funds(holder, ((ASSET_SYMBOLS[0], seed_amount_a), (ASSET_SYMBOLS[1], seed_amount_b)))
            state = config.initialize(seed_amount_a, seed_amount_b, now)
            self.balances.subtract(holder, ASSET_SYMBOLS[0], seed_amount_a)
            self.balances.subtract(holder, ASSET_SYMBOLS[1], seed_amount_b)
            self.pool_tokens.mint(holder, state.pool_supply)
            self.commit(state, (deposit_event(seed_amount_a, seed_amount_b, state.pool_supply),))
            return state

    def swap(
        self,
        holder: Holder,
        input_asset: AssetRef,
        input_amount: Amount,
        min_output_amount: Amount,
        now: int,
    ) -> SwapResult:
        def run(pool: PoolState) -> SwapResult:
            self._require_funds(holder, ((_symbol(input_asset), input_amount),))
            return swap(pool, input_asset, input_amount, min_output_amount, now)

        def apply(result: SwapResult) -> None:
            self.balances.subtract(holder, ASSET_SYMBOLS[result.input_index], result.amount_in)
            self.balances.add(holder, ASSET_SYMBOLS[result.output_index], result.amount_out)

        return self._execute("swap", run, apply)

    def deposit(
        self,
        holder: Holder,
        amount_a: Amount,
        amount_b: Amount,
        min_pool_tokens: Amount,
        now: int,
    ) -> DepositResult:
        def run(pool: PoolState) -> DepositResult:
            self._require_funds(holder, ((ASSET_SYMBOLS[0], amount_a), (ASSET_SYMBOLS[1], amount_b)))
            return deposit(pool, amount_a, amount_b, min_pool_tokens, now)

        def apply(result: DepositResult) -> None:
            self.balances.subtract(holder, ASSET_SYMBOLS[0], amount_a)
            self.balances.subtract(holder, ASSET_SYMBOLS[1], amount_b)
            self.pool_tokens.mint(holder, result.pool_tokens_minted)

        return self._execute("deposit", run, apply)

    def withdraw(
        self,
        holder: Holder,
        pool_token_amount: Amount,
        min_amount_a: Amount,
        min_amount_b: Amount,
    ) -> WithdrawResult:
        def run(pool: PoolState) -> WithdrawResult:
            self._require_pool_tokens(holder, pool_token_amount)
            return withdraw_proportional(pool, pool_token_amount, min_amount_a, min_amount_b)

        return self._execute("withdraw", run, lambda result: self._pay_withdrawal(holder, result))

    def withdraw_one(
        self,
        holder: Holder,
        pool_token_amount: Amount,
        output_asset: AssetRef,
        min_output_amount: Amount,
        now: int,
    ) -> WithdrawResult:
        def run(pool: PoolState) -> WithdrawResult:
            self._require_pool_tokens(holder, pool_token_amount)
            return withdraw_single_asset(pool, pool_token_amount, output_asset, min_output_amount, now)

        return self._execute("withdraw_one", run, lambda result: self._pay_withdrawal(holder, result))

    def collect_admin_fees(self) -> Tuple[Amount, Amount]:
        """Pay the withheld admin fees out to the fee authority."""
        with self._lock:
            state, released = withdraw_admin_fees(self.read_pool())
            for symbol, amount in zip(ASSET_SYMBOLS, released):
                self.balances.add(self.fee_authority, symbol, amount)
            self.commit(state, ())
            logger.info("admin fees collected a=%d b=%d", released[0], released[1])
            return released

    def apply_admin(self, update: Callable[[PoolState], PoolState]) -> PoolState:
        """Apply an admin state transition (e.g. `core.admin.reramp`) atomically."""
        with self._lock:
            state = update(self.read_pool())
            self.commit(state, ())
            return state

    # ------------------------------------------------------------------
    # Helpers

    def _execute(self, name: str, run: Callable[[PoolState], T], apply: Callable[[T], None]) -> T:
        with self._lock:
            try:
                result = run(self.read_pool())
            except ValueError as exc:
                logger.warning("%s rejected: %s", name, exc)
                raise
            apply(result)
            self.commit(result.state, result.events)  # type: ignore[attr-defined]
            return result

    def _pay_withdrawal(self, holder: Holder, result: WithdrawResult) -> None:
        self.pool_tokens.burn(holder, result.pool_tokens_burned)
        for symbol, amount in zip(ASSET_SYMBOLS, result.amounts):
            self.balances.add(holder, symbol, amount)

    def _require_funds(self, holder: Holder, needs: Iterable[Tuple[str, Amount]]) -> None:
        for symbol, amount in needs:
            have = self.balances.get(holder, symbol)
            if amount > have:
                raise ValueError(f"Insufficient {symbol} balance for {holder}: {amount} > {have}")

    def _require_pool_tokens(self, holder: Holder, amount: Amount) -> None:
        have = self.pool_tokens.get(holder)
        if amount > have:
            raise ValueError(f"Insufficient pool-token balance for {holder}: {amount} > {have}")

    def pool_account_balance(self, asset: AssetRef) -> Amount:
        """Balance of the pool's reserve account for `asset` (LP reserve + withheld admin fee)."""
        return self.read_pool().account_balance(asset)

    def check_consistency(self) -> bool:
        """Holder pool-token balances add up to the pool supply."""
        return self.pool_tokens.total() == self.read_pool().pool_supply


def _symbol(asset: AssetRef) -> str:
    return ASSET_SYMBOLS[asset_index(asset)]
