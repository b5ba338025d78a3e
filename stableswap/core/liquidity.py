"""
Liquidity accounting: pool creation, deposits and withdrawals.

Pool tokens track the invariant D. A deposit mints in proportion to the growth
of D, a withdrawal burns in proportion to its shrinkage, and the part of a
deposit or single-asset withdrawal that deviates from the pool's current ratio
pays the imbalance fee (see `fees.imbalance_fee`). Balanced contributions and
proportional redemptions pay nothing.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Tuple

from ..errors import EmptyPool, InsufficientSupply, InvalidRamp, SlippageExceeded, ZeroAmount
from ..kernels.python.stableswap_invariant_v1 import compute_d, compute_y
from ..state.balances import Amount, require_amount
from ..state.pools import AssetRef, PoolState, PoolStatus, asset_index, other_index
from .amp import MAX_AMP, MIN_AMP, AmpSchedule, Timestamp, effective_amp
from .events import PoolEvent, burn_event, deposit_event, withdraw_event
from .fees import ZERO_FEES, Fees, imbalance_fee, split_fee


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DepositResult:
    state: PoolState
    amounts: Tuple[Amount, Amount]
    pool_tokens_minted: Amount
    fees: Tuple[Amount, Amount]
    events: Tuple[PoolEvent, ...]


@dataclass(frozen=True)
class WithdrawResult:
    """
    Outcome of a withdrawal.

    `amounts` is what the holder receives per asset, `fees` the total fee charged
    per asset and `admin_fees` the part of it withheld for the fee authority.
    """
    state: PoolState
    amounts: Tuple[Amount, Amount]
    pool_tokens_burned: Amount
    fees: Tuple[Amount, Amount]
    admin_fees: Tuple[Amount, Amount]
    events: Tuple[PoolEvent, ...]


def initialize(
    seed_amount_a: Amount,
    seed_amount_b: Amount,
    amp_factor: int,
    fees: Fees = ZERO_FEES,
    now: Timestamp = 0,
    *,
    decimals: int = 6,
) -> PoolState:
    """
    Create a pool from its seed deposit.

    The initial pool-token supply is the invariant of the seed reserves:
        pool_supply = compute_d((seed_a, seed_b), amp_factor)

    Raises:
        ZeroAmount: If either seed amount is zero
        InvalidRamp: If amp_factor is outside [MIN_AMP, MAX_AMP]
    """
    require_amount("seed_amount_a", seed_amount_a)
    require_amount("seed_amount_b", seed_amount_b)
    if seed_amount_a == 0 or seed_amount_b == 0:
        raise ZeroAmount(f"Initial deposits must be positive: ({seed_amount_a}, {seed_amount_b})")
    if not isinstance(amp_factor, int) or isinstance(amp_factor, bool):
        raise TypeError("amp_factor must be an int")
    if not (MIN_AMP <= amp_factor <= MAX_AMP):
        raise InvalidRamp(f"amp_factor must be in [{MIN_AMP}, {MAX_AMP}]: {amp_factor}")

    supply = compute_d((seed_amount_a, seed_amount_b), amp_factor)
    state = PoolState(
        reserve_a=seed_amount_a,
        reserve_b=seed_amount_b,
        pool_supply=supply,
        amp=AmpSchedule.constant(amp_factor, now),
        fees=fees,
        status=PoolStatus.ACTIVE,
        decimals=decimals,
    )
    logger.debug("initialize reserves=(%d, %d) supply=%d amp=%d", seed_amount_a, seed_amount_b, supply, amp_factor)
    return state


def deposit(
    state: PoolState,
    amount_a: Amount,
    amount_b: Amount,
    min_pool_tokens: Amount,
    now: Timestamp,
) -> DepositResult:
    """
    Deposit both assets and mint pool tokens.

    First deposit (pool_supply == 0):
        minted = compute_d(new_reserves)

    Subsequent deposits:
        D0 = D(old), D1 = D(old + amounts)
        ideal_i = D1 * old_i / D0
        fee_i = imbalance_fee(|new_i - ideal_i|)
        D2 = D(new - fees)
        minted = pool_supply * (D2 - D0) / D0

    Raises:
        PoolPaused: If the pool is paused
        ZeroAmount: If both amounts are zero or nothing would be minted
        SlippageExceeded: If minted < min_pool_tokens
    """
    state.require_active()
    require_amount("amount_a", amount_a)
    require_amount("amount_b", amount_b)
    require_amount("min_pool_tokens", min_pool_tokens)
    if amount_a == 0 and amount_b == 0:
        raise ZeroAmount("deposit amounts must not both be zero")

    amp = effective_amp(now, state.amp)
    old = state.reserves
    new = (
        require_amount("reserve_a", old[0] + amount_a),
        require_amount("reserve_b", old[1] + amount_b),
    )
    for i in range(2):
        require_amount("reserve account", new[i] + state.admin_fees[i])

    if state.pool_supply == 0:
        minted = compute_d(new, amp)
        if minted == 0:
            raise EmptyPool("the first deposit must contain both assets")
        fees = (0, 0)
        new_reserves = new
    else:
        d0 = compute_d(old, amp)
        d1 = compute_d(new, amp)
        if d1 <= d0:
            raise ZeroAmount("deposit does not increase the pool invariant")
        fee_list = []
        adjusted = []
        for i in range(2):
            ideal = d1 * old[i] // d0
            fee = imbalance_fee(abs(new[i] - ideal), state.fees)
            fee_list.append(fee)
            adjusted.append(new[i] - fee)
        d2 = compute_d(adjusted, amp)
        if d2 <= d0:
            raise ZeroAmount("deposit is consumed by imbalance fees")
        minted = state.pool_supply * (d2 - d0) // d0
        fees = (fee_list[0], fee_list[1])
        # Imbalance fees stay in the reserves for liquidity providers.
        new_reserves = new

    if minted == 0:
        raise ZeroAmount("deposit mints zero pool tokens")
    if minted < min_pool_tokens:
        raise SlippageExceeded("pool tokens minted", minted, min_pool_tokens)
    new_supply = require_amount("pool_supply", state.pool_supply + minted)

    next_state = state.with_balances(new_reserves, pool_supply=new_supply)
    logger.debug("deposit a=%d b=%d minted=%d fees=%s amp=%d", amount_a, amount_b, minted, fees, amp)
    return DepositResult(
        state=next_state,
        amounts=(amount_a, amount_b),
        pool_tokens_minted=minted,
        fees=fees,
        events=(deposit_event(amount_a, amount_b, minted),),
    )


def _check_burn(state: PoolState, pool_token_amount: Amount) -> None:
    require_amount("pool_token_amount", pool_token_amount)
    if pool_token_amount == 0:
        raise ZeroAmount("pool_token_amount must be positive")
    if pool_token_amount > state.pool_supply:
        raise InsufficientSupply(pool_token_amount, state.pool_supply)


def withdraw_proportional(
    state: PoolState,
    pool_token_amount: Amount,
    min_amount_a: Amount,
    min_amount_b: Amount,
) -> WithdrawResult:
    """
    Burn pool tokens for a proportional share of both reserves, without fee.

        amount_i = floor(reserve_i * pool_token_amount / pool_supply)

    Allowed on a paused pool so liquidity providers can always exit.

    Raises:
        ZeroAmount: If pool_token_amount is zero
        InsufficientSupply: If pool_token_amount > pool_supply
        SlippageExceeded: If either amount is below its minimum
    """
    _check_burn(state, pool_token_amount)
    require_amount("min_amount_a", min_amount_a)
    require_amount("min_amount_b", min_amount_b)

    supply = state.pool_supply
    out_a = state.reserve_a * pool_token_amount // supply
    out_b = state.reserve_b * pool_token_amount // supply
    if out_a < min_amount_a:
        raise SlippageExceeded("amount_a", out_a, min_amount_a)
    if out_b < min_amount_b:
        raise SlippageExceeded("amount_b", out_b, min_amount_b)

    next_state = state.with_balances(
        (state.reserve_a - out_a, state.reserve_b - out_b),
        pool_supply=supply - pool_token_amount,
    )
    logger.debug("withdraw burn=%d a=%d b=%d", pool_token_amount, out_a, out_b)
    return WithdrawResult(
        state=next_state,
        amounts=(out_a, out_b),
        pool_tokens_burned=pool_token_amount,
        fees=(0, 0),
        admin_fees=(0, 0),
        events=(
            withdraw_event(0, out_a),
            withdraw_event(1, out_b),
            burn_event(pool_token_amount),
        ),
    )


def withdraw_single_asset(
    state: PoolState,
    pool_token_amount: Amount,
    output_asset: AssetRef,
    min_output_amount: Amount,
    now: Timestamp,
) -> WithdrawResult:
    """
    Burn pool tokens for a single asset.

        D0 = D(x), D1 = D0 - burn * D0 / supply
        y  = compute_y(x, D1, out)                 # fee-free remaining reserve
        expected_out   = x_out * D1 / D0 - y       # imbalance vs. a balanced exit
        expected_other = x_other - x_other * D1 / D0
        x'_i = x_i - imbalance_fee(expected_i)
        dy = x'_out - compute_y(x', D1, out)       # after imbalance fee
        imbalance fee total = (x_out - y) - dy

    The withdraw fee is then split off `dy`. The admin cut of the imbalance fee
    and of the withdraw fee is withheld from the output reserve.

    Raises:
        PoolPaused: If the pool is paused
        ZeroAmount: If pool_token_amount is zero or the output rounds to zero
        InsufficientSupply: If pool_token_amount > pool_supply
        EmptyPool: If the whole supply is burned into one asset
        SlippageExceeded: If the net output is below min_output_amount
    """
    state.require_active()
    _check_burn(state, pool_token_amount)
    require_amount("min_output_amount", min_output_amount)
    i = asset_index(output_asset)
    j = other_index(i)
    supply = state.pool_supply
    if pool_token_amount == supply:
        raise EmptyPool("cannot burn the whole supply into a single asset")

    amp = effective_amp(now, state.amp)
    x = list(state.reserves)
    d0 = compute_d(x, amp)
    d1 = d0 - pool_token_amount * d0 // supply
    new_y = compute_y(x, amp, d1, i)

    expected_out = abs(x[i] * d1 // d0 - new_y)
    expected_other = x[j] - x[j] * d1 // d0
    adjusted = list(x)
    adjusted[i] = x[i] - imbalance_fee(expected_out, state.fees)
    adjusted[j] = x[j] - imbalance_fee(expected_other, state.fees)
    dy = adjusted[i] - compute_y(adjusted, amp, d1, i)
    if dy <= 0:
        raise ZeroAmount("single-asset withdrawal rounds to zero")
    imbalance_total = (x[i] - new_y) - dy

    withdraw = split_fee(dy, state.fees.withdraw_fee, state.fees.admin_withdraw_fee)
    admin_fee = state.fees.admin_trade_fee.apply(imbalance_total) + withdraw.admin_fee
    amount_out = withdraw.net
    if amount_out == 0:
        raise ZeroAmount("single-asset withdrawal rounds to zero")
    if amount_out < min_output_amount:
        raise SlippageExceeded("amount_out", amount_out, min_output_amount)

    reserves = list(state.reserves)
    reserves[i] = reserves[i] - amount_out - admin_fee
    admin_fees = list(state.admin_fees)
    admin_fees[i] += admin_fee
    next_state = state.with_balances(
        (reserves[0], reserves[1]),
        pool_supply=supply - pool_token_amount,
        admin_fees=(admin_fees[0], admin_fees[1]),
    )

    amounts = [0, 0]
    amounts[i] = amount_out
    total_fee = [0, 0]
    total_fee[i] = imbalance_total + withdraw.trade_fee
    withheld = [0, 0]
    withheld[i] = admin_fee
    logger.debug(
        "withdraw_one burn=%d asset=%d out=%d fee=%d admin=%d amp=%d",
        pool_token_amount,
        i,
        amount_out,
        total_fee[i],
        admin_fee,
        amp,
    )
    return WithdrawResult(
        state=next_state,
        amounts=(amounts[0], amounts[1]),
        pool_tokens_burned=pool_token_amount,
        fees=(total_fee[0], total_fee[1]),
        admin_fees=(withheld[0], withheld[1]),
        events=(
            withdraw_event(i, amount_out, fee=total_fee[i]),
            burn_event(pool_token_amount),
        ),
    )


def virtual_price(state: PoolState, now: Timestamp) -> int:
    """
    Invariant per pool token, scaled by 10**decimals. Zero for an empty pool.

    Honest trades never decrease it.
    """
    if state.pool_supply == 0:
        return 0
    d = compute_d(state.reserves, effective_amp(now, state.amp))
    return d * 10**state.decimals // state.pool_supply
