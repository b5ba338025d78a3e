"""
Core pool algorithms
"""

from .amp import AmpSchedule, effective_amp, ramp
from .fees import FeeRate, Fees, FeeSplit, ZERO_FEES, imbalance_fee, split_fee
from .events import EventType, PoolEvent
from .swap import SwapResult, swap
from .liquidity import (
    DepositResult,
    WithdrawResult,
    initialize,
    deposit,
    withdraw_proportional,
    withdraw_single_asset,
    virtual_price,
)
from .admin import reramp, stop_ramp, pause, unpause, set_fees, withdraw_admin_fees

__all__ = [
    "AmpSchedule",
    "effective_amp",
    "ramp",
    "FeeRate",
    "Fees",
    "FeeSplit",
    "ZERO_FEES",
    "imbalance_fee",
    "split_fee",
    "EventType",
    "PoolEvent",
    "SwapResult",
    "swap",
    "DepositResult",
    "WithdrawResult",
    "initialize",
    "deposit",
    "withdraw_proportional",
    "withdraw_single_asset",
    "virtual_price",
    "reramp",
    "stop_ramp",
    "pause",
    "unpause",
    "set_fees",
    "withdraw_admin_fees",
]
