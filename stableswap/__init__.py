"""
StableSwap invariant-curve pool engine.

Pure integer accounting for a two-asset StableSwap pool: swaps, deposits and
withdrawals priced on the hybrid constant-sum / constant-product invariant,
with trade and admin fees and a time-ramped amplification coefficient.
"""

from .errors import (
    StableSwapError,
    ZeroAmount,
    SlippageExceeded,
    InsufficientSupply,
    EmptyPool,
    PoolPaused,
    InvalidFees,
    InvalidRamp,
    InvalidConfig,
    ConvergenceError,
    AmountOverflow,
)
from .core import (
    AmpSchedule,
    FeeRate,
    Fees,
    ZERO_FEES,
    EventType,
    PoolEvent,
    SwapResult,
    DepositResult,
    WithdrawResult,
    effective_amp,
    initialize,
    swap,
    deposit,
    withdraw_proportional,
    withdraw_single_asset,
    virtual_price,
    reramp,
    stop_ramp,
    pause,
    unpause,
    set_fees,
    withdraw_admin_fees,
)
from .kernels.python.stableswap_invariant_v1 import compute_d, compute_y
from .state.pools import ASSET_A, ASSET_B, PoolState, PoolStatus
from .config import PoolConfig, load_pool_config

__all__ = [
    "StableSwapError",
    "ZeroAmount",
    "SlippageExceeded",
    "InsufficientSupply",
    "EmptyPool",
    "PoolPaused",
    "InvalidFees",
    "InvalidRamp",
    "InvalidConfig",
    "ConvergenceError",
    "AmountOverflow",
    "AmpSchedule",
    "FeeRate",
    "Fees",
    "ZERO_FEES",
    "EventType",
    "PoolEvent",
    "SwapResult",
    "DepositResult",
    "WithdrawResult",
    "effective_amp",
    "initialize",
    "swap",
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
    "compute_d",
    "compute_y",
    "ASSET_A",
    "ASSET_B",
    "PoolState",
    "PoolStatus",
    "PoolConfig",
    "load_pool_config",
]
