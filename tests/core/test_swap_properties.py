"""Property tests: random swap / deposit / withdraw sequences on one pool.

Uses Hypothesis to fuzz operation sequences and fee parameters, and checks that
every accepted step keeps the fee bounds and the reserve-account bookkeeping,
and never lowers the invariant per pool token.
"""

from __future__ import annotations

import importlib.util

import pytest

if importlib.util.find_spec("hypothesis") is None:  # pragma: no cover
    pytest.skip("hypothesis not installed", allow_module_level=True)

import hypothesis.strategies as st
from hypothesis import given, settings

from stableswap.core.fees import FeeRate, Fees
from stableswap.core.liquidity import (
    deposit,
    initialize,
    virtual_price,
    withdraw_proportional,
    withdraw_single_asset,
)
from stableswap.core.swap import swap
from stableswap.errors import StableSwapError
from stableswap.kernels.python.stableswap_invariant_v1 import compute_d, invariant_holds


def _rate(max_numerator: int) -> st.SearchStrategy[FeeRate]:
    return st.builds(FeeRate, st.integers(min_value=0, max_value=max_numerator), st.just(10_000))


fees = st.builds(
    Fees,
    trade_fee=_rate(100),
    admin_trade_fee=_rate(10_000),
    withdraw_fee=_rate(100),
    admin_withdraw_fee=_rate(10_000),
)
reserve = st.integers(min_value=1_000_000, max_value=10**12)
amp = st.integers(min_value=1, max_value=5_000)
step = st.tuples(
    st.sampled_from(["swap_a", "swap_b", "deposit", "withdraw", "withdraw_a", "withdraw_b"]),
    st.integers(min_value=1, max_value=10**10),
    st.integers(min_value=0, max_value=10**10),
)


@settings(max_examples=100, deadline=None)
@given(a=reserve, b=reserve, amp=amp, pool_fees=fees, steps=st.lists(step, min_size=1, max_size=12))
def test_operation_sequences_keep_pool_sound(a: int, b: int, amp: int, pool_fees: Fees, steps) -> None:
    state = initialize(a, b, amp, pool_fees)
    for kind, x, y in steps:
        d0 = compute_d(state.reserves, amp)
        # Proportional withdrawal is exact per asset but not per unit of D.
        check_d_per_token = kind != "withdraw"
        try:
            if kind in ("swap_a", "swap_b"):
                result = swap(state, "A" if kind == "swap_a" else "B", x, 0, now=0)
                assert 0 <= result.admin_fee <= result.trade_fee <= result.gross_amount_out
                assert result.trade_fee == pool_fees.trade_fee.apply(result.gross_amount_out)
                assert invariant_holds(result.state.reserves, amp, d0)
                j = result.output_index
                assert result.state.account_balance(j) == state.account_balance(j) - result.amount_out
            elif kind == "deposit":
                result = deposit(state, x, y, 0, now=0)
                assert result.state.pool_supply == state.pool_supply + result.pool_tokens_minted
            else:
                burn = 1 + x % state.pool_supply
                if burn == state.pool_supply:
                    continue
                if kind == "withdraw":
                    result = withdraw_proportional(state, burn, 0, 0)
                    assert result.amounts == (
                        state.reserve_a * burn // state.pool_supply,
                        state.reserve_b * burn // state.pool_supply,
                    )
                else:
                    i = 0 if kind == "withdraw_a" else 1
                    result = withdraw_single_asset(state, burn, i, 0, now=0)
                    assert result.amounts[1 - i] == 0
                    assert 0 <= result.admin_fees[i] <= result.fees[i]
                    assert result.state.account_balance(i) == state.account_balance(i) - result.amounts[i]
        except StableSwapError:
            continue
        if check_d_per_token:
            d1 = compute_d(result.state.reserves, amp)
            assert d1 * state.pool_supply >= d0 * result.state.pool_supply
        state = result.state


@settings(max_examples=100, deadline=None)
@given(a=reserve, b=reserve, amp=amp, pool_fees=fees, amount=st.integers(min_value=1_000, max_value=10**9))
def test_fee_bearing_swap_never_lowers_virtual_price(a: int, b: int, amp: int, pool_fees: Fees, amount: int) -> None:
    state = initialize(a, b, amp, pool_fees)
    try:
        result = swap(state, "A", amount, 0, now=0)
    except StableSwapError:
        return
    assert virtual_price(result.state, now=0) >= virtual_price(state, now=0)
