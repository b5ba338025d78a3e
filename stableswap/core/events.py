"""Event records emitted by pool operations.

Events are immutable values returned with each result; the ledger layer is
responsible for publishing them. `PoolEvent.to_dict()` renders the record shape
used on the wire (camelCase keys, unset fields omitted).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, unique
from typing import Any, Dict, Optional


@unique
class EventType(Enum):
    SWAP = "Swap"
    DEPOSIT = "Deposit"
    WITHDRAW_A = "WithdrawA"
    WITHDRAW_B = "WithdrawB"
    BURN = "Burn"


# Field name -> wire key, in wire order.
_WIRE_KEYS = (
    ("input_asset", "inputAsset"),
    ("output_asset", "outputAsset"),
    ("token_a_amount", "tokenAAmount"),
    ("token_b_amount", "tokenBAmount"),
    ("pool_token_amount", "poolTokenAmount"),
    ("amount_in", "amountIn"),
    ("amount_out", "amountOut"),
    ("trade_fee", "tradeFee"),
    ("admin_fee", "adminFee"),
)


@dataclass(frozen=True)
class PoolEvent:
    type: EventType
    input_asset: Optional[str] = None
    output_asset: Optional[str] = None
    token_a_amount: Optional[int] = None
    token_b_amount: Optional[int] = None
    pool_token_amount: Optional[int] = None
    amount_in: Optional[int] = None
    amount_out: Optional[int] = None
    trade_fee: Optional[int] = None
    admin_fee: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"type": self.type.value}
        for field_name, key in _WIRE_KEYS:
            value = getattr(self, field_name)
            if value is not None:
                out[key] = value
        return out


def deposit_event(amount_a: int, amount_b: int, minted: int) -> PoolEvent:
    return PoolEvent(
        type=EventType.DEPOSIT,
        token_a_amount=amount_a,
        token_b_amount=amount_b,
        pool_token_amount=minted,
    )


def withdraw_event(index: int, amount: int, *, fee: Optional[int] = None) -> PoolEvent:
    if index == 0:
        return PoolEvent(type=EventType.WITHDRAW_A, token_a_amount=amount, trade_fee=fee)
    return PoolEvent(type=EventType.WITHDRAW_B, token_b_amount=amount, trade_fee=fee)


def burn_event(amount: int) -> PoolEvent:
    return PoolEvent(type=EventType.BURN, pool_token_amount=amount)
