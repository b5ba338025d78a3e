"""
Pool state for a two-asset StableSwap pool.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Tuple, Union

from ..core.amp import AmpSchedule
from ..core.fees import Fees
from ..errors import PoolPaused
from .balances import Amount, require_amount


ASSET_A = 0
ASSET_B = 1
ASSET_SYMBOLS = ("A", "B")
N_COINS = len(ASSET_SYMBOLS)

AssetRef = Union[int, str]


def asset_index(asset: AssetRef) -> int:
    """
    Resolve an asset index (0/1) or symbol ("A"/"B") to its index.

    Raises:
        ValueError: If the asset is not part of the pool
    """
    if isinstance(asset, str):
        symbol = asset.strip().upper()
        if symbol in ASSET_SYMBOLS:
            return ASSET_SYMBOLS.index(symbol)
    elif isinstance(asset, int) and not isinstance(asset, bool) and 0 <= asset < N_COINS:
        return asset
    raise ValueError(f"Asset {asset!r} not in pool (expected one of {ASSET_SYMBOLS})")


def other_index(index: int) -> int:
    return 1 - index


class PoolStatus(Enum):
    """Pool status enumeration."""
    ACTIVE = "ACTIVE"
    PAUSED = "PAUSED"


@dataclass(frozen=True)
class PoolState:
    """
    State of a StableSwap pool.

    The reserve accounts of the pool hold `reserve_x + admin_fee_x` of each
    asset; `reserve_x` is owned by liquidity providers, `admin_fee_x` is
    withheld for the fee authority.

    Attributes:
        reserve_a: LP-owned balance of asset A
        reserve_b: LP-owned balance of asset B
        pool_supply: Outstanding pool tokens
        amp: Amplification schedule
        fees: Fee parameters
        admin_fee_a: Admin fees withheld in asset A
        admin_fee_b: Admin fees withheld in asset B
        status: Pool status
        decimals: Decimal precision of the pool token
    """
    reserve_a: Amount
    reserve_b: Amount
    pool_supply: Amount
    amp: AmpSchedule
    fees: Fees
    admin_fee_a: Amount = 0
    admin_fee_b: Amount = 0
    status: PoolStatus = PoolStatus.ACTIVE
    decimals: int = 6

    def __post_init__(self) -> None:
        """Validate pool state invariants."""
        for name in ("reserve_a", "reserve_b", "pool_supply", "admin_fee_a", "admin_fee_b"):
            require_amount(name, getattr(self, name))
        if not isinstance(self.amp, AmpSchedule):
            raise TypeError("amp must be an AmpSchedule")
        if not isinstance(self.fees, Fees):
            raise TypeError("fees must be a Fees record")
        if not isinstance(self.status, PoolStatus):
            raise TypeError("status must be a PoolStatus")
        if not isinstance(self.decimals, int) or isinstance(self.decimals, bool) or not (0 <= self.decimals <= 18):
            raise ValueError(f"decimals must be an int in [0, 18]: {self.decimals}")
        if self.pool_supply > 0 and (self.reserve_a == 0 or self.reserve_b == 0):
            raise ValueError(
                f"Reserves must be positive while pool tokens are outstanding: ({self.reserve_a}, {self.reserve_b})"
            )

    def require_active(self) -> None:
        if self.status != PoolStatus.ACTIVE:
            raise PoolPaused(f"Pool is not active: {self.status.value}")

    @property
    def reserves(self) -> Tuple[Amount, Amount]:
        return (self.reserve_a, self.reserve_b)

    @property
    def admin_fees(self) -> Tuple[Amount, Amount]:
        return (self.admin_fee_a, self.admin_fee_b)

    @property
    def is_initialized(self) -> bool:
        return self.pool_supply > 0

    def reserve(self, asset: AssetRef) -> Amount:
        return self.reserves[asset_index(asset)]

    def account_balance(self, asset: AssetRef) -> Amount:
        """Balance of the pool's reserve account: LP-owned reserve plus withheld admin fee."""
        i = asset_index(asset)
        return self.reserves[i] + self.admin_fees[i]

    def with_balances(
        self,
        reserves: Tuple[Amount, Amount],
        *,
        pool_supply: Amount | None = None,
        admin_fees: Tuple[Amount, Amount] | None = None,
    ) -> "PoolState":
        """Return a copy with new reserves (and optionally supply / admin fees)."""
        fees_a, fees_b = self.admin_fees if admin_fees is None else admin_fees
        return replace(
            self,
            reserve_a=reserves[0],
            reserve_b=reserves[1],
            pool_supply=self.pool_supply if pool_supply is None else pool_supply,
            admin_fee_a=fees_a,
            admin_fee_b=fees_b,
        )

    def __repr__(self) -> str:
        return (
            f"PoolState(reserves=({self.reserve_a}, {self.reserve_b}), "
            f"pool_supply={self.pool_supply}, "
            f"admin_fees=({self.admin_fee_a}, {self.admin_fee_b}), "
            f"amp={self.amp.initial_amp}->{self.amp.target_amp}, status={self.status.value})"
        )
