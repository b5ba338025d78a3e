# [TESTER] v1

from __future__ import annotations

import pytest

from stableswap.core.admin import pause, reramp
from stableswap.core.amp import MIN_RAMP_DURATION
from stableswap.core.events import EventType
from stableswap.core.fees import FeeRate, Fees
from stableswap.core.liquidity import initialize
from stableswap.core.swap import swap
from stableswap.errors import AmountOverflow, PoolPaused, SlippageExceeded, ZeroAmount
from stableswap.kernels.python.stableswap_invariant_v1 import compute_d, invariant_holds
from stableswap.state.balances import MAX_AMOUNT
from stableswap.state.pools import ASSET_A, ASSET_B


FEES = Fees(trade_fee=FeeRate(4, 10_000), admin_trade_fee=FeeRate(5_000, 10_000))


def _pool(a: int = 1_000_000_000, b: int = 1_000_000_000, amp: int = 100, fees: Fees = FEES):
    return initialize(a, b, amp, fees)


def test_swap_near_peg_returns_close_to_input() -> None:
    result = swap(_pool(fees=Fees()), ASSET_A, 1_000_000, 0, now=0)
    # Balanced pool at amp 100: slippage on a 0.1% trade is tiny.
    assert 999_000 < result.amount_out < 1_000_000
    assert result.trade_fee == 0
    assert result.state.reserve_a == 1_001_000_000
    assert result.state.reserve_b == 1_000_000_000 - result.amount_out


def test_swap_fee_split_and_admin_accrual() -> None:
    state = _pool()
    result = swap(state, "A", 1_000_000, 0, now=0)

    assert result.trade_fee == result.gross_amount_out * 4 // 10_000
    assert result.admin_fee == result.trade_fee // 2
    assert result.amount_out == result.gross_amount_out - result.trade_fee
    assert result.state.admin_fee_b == result.admin_fee
    assert result.state.admin_fee_a == 0
    # The reserve account pays exactly the net output.
    assert result.state.account_balance(ASSET_B) == state.account_balance(ASSET_B) - result.amount_out
    assert result.state.account_balance(ASSET_A) == state.account_balance(ASSET_A) + 1_000_000


def test_swap_never_decreases_invariant() -> None:
    for fees in (Fees(), FEES):
        state = _pool(1_300_000_000, 700_000_000, amp=60, fees=fees)
        for input_asset, amount in ((ASSET_A, 12_345_678), (ASSET_B, 250_000_000), (ASSET_A, 1), (ASSET_B, 99)):
            d0 = compute_d(state.reserves, 60)
            try:
                result = swap(state, input_asset, amount, 0, now=0)
            except ZeroAmount:
                continue
            assert invariant_holds(result.state.reserves, 60, d0)
            state = result.state


def test_fee_bearing_swap_grows_invariant() -> None:
    state = _pool()
    d0 = compute_d(state.reserves, 100)
    result = swap(state, ASSET_B, 50_000_000, 0, now=0)
    assert compute_d(result.state.reserves, 100) > d0


def test_swap_event_shape() -> None:
    result = swap(_pool(), ASSET_B, 5_000, 0, now=0)
    (event,) = result.events
    assert event.type is EventType.SWAP
    assert event.to_dict() == {
        "type": "Swap",
        "inputAsset": "B",
        "outputAsset": "A",
        "amountIn": 5_000,
        "amountOut": result.amount_out,
        "tradeFee": result.trade_fee,
        "adminFee": result.admin_fee,
    }


def test_swap_slippage_bound() -> None:
    state = _pool()
    quote = swap(state, ASSET_A, 1_000_000, 0, now=0)
    assert swap(state, ASSET_A, 1_000_000, quote.amount_out, now=0).amount_out == quote.amount_out
    with pytest.raises(SlippageExceeded, match="below the requested minimum") as exc:
        swap(state, ASSET_A, 1_000_000, quote.amount_out + 1, now=0)
    assert exc.value.actual == quote.amount_out
    assert exc.value.bound == quote.amount_out + 1


def test_swap_zero_input_rejected() -> None:
    with pytest.raises(ZeroAmount):
        swap(_pool(), ASSET_A, 0, 0, now=0)


def test_swap_dust_output_rejected() -> None:
    with pytest.raises(ZeroAmount, match="rounds to zero"):
        swap(_pool(), ASSET_A, 1, 0, now=0)


def test_swap_on_paused_pool_rejected() -> None:
    with pytest.raises(PoolPaused):
        swap(pause(_pool()), ASSET_A, 1_000, 0, now=0)


def test_swap_input_reserve_overflow() -> None:
    with pytest.raises(AmountOverflow):
        swap(_pool(), ASSET_A, MAX_AMOUNT - 10, 0, now=0)


def test_swap_unknown_asset_rejected() -> None:
    with pytest.raises(ValueError, match="not in pool"):
        swap(_pool(), "C", 1_000, 0, now=0)


def test_swap_uses_ramped_amp() -> None:
    state = _pool(1_500_000_000, 500_000_000, amp=10, fees=Fees())
    ramped = reramp(state, 100, MIN_RAMP_DURATION, 2 * MIN_RAMP_DURATION)
    before = swap(ramped, ASSET_A, 10_000_000, 0, now=MIN_RAMP_DURATION)
    after = swap(ramped, ASSET_A, 10_000_000, 0, now=2 * MIN_RAMP_DURATION)
    assert before.amp == 10
    assert after.amp == 100
    # Selling the abundant asset pays more once the curve is flatter.
    assert after.amount_out > before.amount_out
