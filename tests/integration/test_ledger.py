from __future__ import annotations

import logging
import threading

import pytest

from stableswap.config import PoolConfig
from stableswap.core.admin import pause, reramp
from stableswap.core.amp import MIN_RAMP_DURATION, effective_amp
from stableswap.core.events import deposit_event
from stableswap.core.fees import FeeRate, Fees
from stableswap.errors import PoolPaused, SlippageExceeded
from stableswap.integration.ledger import InMemoryLedger, Ledger


SEED = 50_000_000_000
FEE_CONFIG = PoolConfig(
    amp=100,
    fees=Fees(trade_fee=FeeRate(4, 10_000), admin_trade_fee=FeeRate(5_000, 10_000)),
)


def _ledger(config: PoolConfig = PoolConfig(amp=100)) -> InMemoryLedger:
    ledger = InMemoryLedger()
    ledger.fund("lp", "A", SEED + 1_000_000_000)
    ledger.fund("lp", "B", SEED + 1_000_000_000)
    ledger.initialize_pool("lp", SEED, SEED, config)
    return ledger


def _total(ledger: InMemoryLedger, symbol: str) -> int:
    return ledger.balances.total(symbol) + ledger.pool_account_balance(symbol)


def test_deposit_withdraw_scenario_through_ledger() -> None:
    ledger = _ledger()
    assert ledger.pool_tokens.get("lp") == 100_000_000_000

    dep = ledger.deposit("lp", 1_000_000_000, 1_000_000_000, 0, now=0)
    assert dep.pool_tokens_minted == 2_000_000_000
    assert ledger.read_pool().reserves == (51_000_000_000, 51_000_000_000)
    assert ledger.balances.get("lp", "A") == 0

    wd = ledger.withdraw("lp", 100_000, 0, 0)
    assert wd.amounts == (50_000, 50_000)
    assert ledger.balances.get("lp", "A") == 50_000
    assert ledger.pool_tokens.get("lp") == 102_000_000_000 - 100_000
    assert [e.to_dict() for e in ledger.events[-3:]] == [
        {"type": "WithdrawA", "tokenAAmount": 50_000},
        {"type": "WithdrawB", "tokenBAmount": 50_000},
        {"type": "Burn", "poolTokenAmount": 100_000},
    ]
    assert [e.type.value for e in ledger.events] == ["Deposit", "Deposit", "WithdrawA", "WithdrawB", "Burn"]
    assert ledger.check_consistency()


def test_failed_operation_commits_nothing(caplog: pytest.LogCaptureFixture) -> None:
    ledger = _ledger()
    ledger.fund("trader", "A", 1_000)
    before_pool = ledger.read_pool()
    before_events = ledger.events

    with caplog.at_level(logging.WARNING, logger="stableswap.integration.ledger"):
        with pytest.raises(SlippageExceeded):
            ledger.swap("trader", "A", 1_000, 1_001, now=0)
        with pytest.raises(ValueError, match="Insufficient A balance"):
            ledger.swap("trader", "A", 1_001, 0, now=0)
        with pytest.raises(ValueError, match="Insufficient pool-token balance"):
            ledger.withdraw("trader", 1, 0, 0)

    assert "swap rejected" in caplog.text
    assert ledger.read_pool() == before_pool
    assert ledger.events == before_events
    assert ledger.balances.get("trader", "A") == 1_000


def test_swaps_conserve_assets_and_collect_admin_fees() -> None:
    ledger = _ledger(FEE_CONFIG)
    ledger.fund("trader", "A", 10_000_000)
    totals = (_total(ledger, "A"), _total(ledger, "B"))

    result = ledger.swap("trader", "A", 10_000_000, 0, now=0)
    assert ledger.balances.get("trader", "B") == result.amount_out
    assert ledger.balances.get("trader", "A") == 0
    assert (_total(ledger, "A"), _total(ledger, "B")) == totals

    released = ledger.collect_admin_fees()
    assert released == (0, result.admin_fee)
    assert ledger.balances.get("admin", "B") == result.admin_fee
    assert ledger.read_pool().admin_fees == (0, 0)
    assert (_total(ledger, "A"), _total(ledger, "B")) == totals


def test_withdraw_one_pays_single_asset() -> None:
    ledger = _ledger(FEE_CONFIG)
    result = ledger.withdraw_one("lp", 1_000_000, "B", 0, now=0)
    assert result.amounts[0] == 0
    assert ledger.balances.get("lp", "B") == 1_000_000_000 + result.amounts[1]
    assert [e.type.value for e in ledger.events[-2:]] == ["WithdrawB", "Burn"]
    assert ledger.check_consistency()

    with pytest.raises(ValueError, match="Insufficient pool-token balance"):
        ledger.withdraw_one("lp", 10**12, "B", 0, now=0)


def test_admin_updates_apply_atomically() -> None:
    ledger = _ledger()
    ledger.apply_admin(lambda s: reramp(s, 200, MIN_RAMP_DURATION, 2 * MIN_RAMP_DURATION))
    assert effective_amp(2 * MIN_RAMP_DURATION, ledger.read_pool().amp) == 200

    ledger.apply_admin(pause)
    with pytest.raises(PoolPaused):
        ledger.deposit("lp", 1_000, 1_000, 0, now=0)
    ledger.withdraw("lp", 1_000_000, 0, 0)
    assert ledger.check_consistency()


def test_pool_cannot_be_initialized_twice() -> None:
    ledger = _ledger()
    with pytest.raises(ValueError, match="already initialized"):
        ledger.initialize_pool("lp", 1, 1, PoolConfig(amp=100))


def test_uninitialized_pool_lookup() -> None:
    with pytest.raises(LookupError):
        InMemoryLedger().read_pool()


def test_concurrent_swaps_are_serialized() -> None:
    ledger = _ledger(FEE_CONFIG)
    traders = [f"trader{i}" for i in range(8)]
    for name in traders:
        ledger.fund(name, "A", 5_000_000)
        ledger.fund(name, "B", 5_000_000)
    totals = (_total(ledger, "A"), _total(ledger, "B"))

    def trade(name: str) -> None:
        for k in range(10):
            ledger.swap(name, "A" if k % 2 == 0 else "B", 100_000, 0, now=0)

    threads = [threading.Thread(target=trade, args=(name,)) for name in traders]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len([e for e in ledger.events if e.type.value == "Swap"]) == 80
    assert (_total(ledger, "A"), _total(ledger, "B")) == totals
    assert ledger.check_consistency()


def test_in_memory_ledger_satisfies_ledger_protocol() -> None:
    ledger = _ledger()
    assert isinstance(ledger, Ledger)

    def publish(target: Ledger) -> None:
        target.commit(target.read_pool(), (deposit_event(1, 1, 0),))

    publish(ledger)
    assert ledger.events[-1].to_dict() == {
        "type": "Deposit",
        "tokenAAmount": 1,
        "tokenBAmount": 1,
        "poolTokenAmount": 0,
    }
