"""
StableSwap exact-in swap.

Algorithm:
    A   = effective amp at `now`
    D0  = compute_d(reserves, A)
    x'  = reserve_in + amount_in
    y   = compute_y((x', reserve_out), A, D0, out)      # minimal y keeping D0
    dy  = reserve_out - y                               # gross output
    fee = floor(dy * trade_fee), admin = floor(fee * admin_trade_fee)
    out = dy - fee                                      # paid to the trader

Post-swap:
    reserve_in'  = reserve_in + amount_in
    reserve_out' = y + fee - admin      (LP-owned part of the output account)
    admin_out'   = admin_out + admin    (withheld in the same account)

Because y is the minimal integer that keeps the invariant at D0 and the LP fee
is added back on top, the invariant never decreases across a swap.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Tuple

from ..errors import EmptyPool, SlippageExceeded, ZeroAmount
from ..kernels.python.stableswap_invariant_v1 import compute_d, compute_y
from ..state.balances import Amount, require_amount
from ..state.pools import ASSET_SYMBOLS, AssetRef, PoolState, asset_index, other_index
from .amp import Timestamp, effective_amp
from .events import EventType, PoolEvent
from .fees import split_fee


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SwapResult:
    state: PoolState
    input_index: int
    output_index: int
    amount_in: Amount
    amount_out: Amount
    gross_amount_out: Amount
    trade_fee: Amount
    admin_fee: Amount
    amp: int
    events: Tuple[PoolEvent, ...]

    @property
    def lp_fee(self) -> Amount:
        return self.trade_fee - self.admin_fee


def swap(
    state: PoolState,
    input_asset: AssetRef,
    input_amount: Amount,
    min_output_amount: Amount,
    now: Timestamp,
) -> SwapResult:
    """
    Swap `input_amount` of `input_asset` for the other pool asset.

    Raises:
        PoolPaused: If the pool is paused
        ZeroAmount: If input_amount is zero or the output rounds to zero
        EmptyPool: If the pool holds no liquidity
        SlippageExceeded: If the net output is below min_output_amount
        AmountOverflow: If the input reserve would leave the amount range
    """
    state.require_active()
    i = asset_index(input_asset)
    j = other_index(i)
    require_amount("input_amount", input_amount)
    require_amount("min_output_amount", min_output_amount)
    if input_amount == 0:
        raise ZeroAmount("input_amount must be positive")
    if not state.is_initialized or 0 in state.reserves:
        raise EmptyPool("cannot swap against an empty pool")

    amp = effective_amp(now, state.amp)
    reserves = list(state.reserves)
    d0 = compute_d(reserves, amp)

    reserves[i] = require_amount("input reserve", reserves[i] + input_amount)
    require_amount("input reserve account", reserves[i] + state.admin_fees[i])
    y = compute_y(reserves, amp, d0, j)

    old_out = state.reserves[j]
    if y >= old_out:
        raise ZeroAmount(f"swap output rounds to zero (input {input_amount})")
    gross = old_out - y

    fee = split_fee(gross, state.fees.trade_fee, state.fees.admin_trade_fee)
    if fee.net < min_output_amount:
        raise SlippageExceeded("amount_out", fee.net, min_output_amount)

    reserves[j] = y + fee.lp_fee
    admin_fees = list(state.admin_fees)
    admin_fees[j] += fee.admin_fee
    next_state = state.with_balances(
        (reserves[0], reserves[1]),
        admin_fees=(admin_fees[0], admin_fees[1]),
    )

    event = PoolEvent(
        type=EventType.SWAP,
        input_asset=ASSET_SYMBOLS[i],
        output_asset=ASSET_SYMBOLS[j],
        amount_in=input_amount,
        amount_out=fee.net,
        trade_fee=fee.trade_fee,
        admin_fee=fee.admin_fee,
    )
    logger.debug(
        "swap %s->%s in=%d out=%d fee=%d admin=%d amp=%d",
        ASSET_SYMBOLS[i],
        ASSET_SYMBOLS[j],
        input_amount,
        fee.net,
        fee.trade_fee,
        fee.admin_fee,
        amp,
    )
    return SwapResult(
        state=next_state,
        input_index=i,
        output_index=j,
        amount_in=input_amount,
        amount_out=fee.net,
        gross_amount_out=gross,
        trade_fee=fee.trade_fee,
        admin_fee=fee.admin_fee,
        amp=amp,
        events=(event,),
    )
