"""
Fee model (deterministic, integer-only).

Fees are rational fractions `numerator / denominator` applied with floor
rounding. The admin fee is a sub-cut of the trade fee; whatever is not taken
by the admin stays in the pool for liquidity providers.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..errors import InvalidFees
from ..state.balances import Amount, require_amount


@dataclass(frozen=True)
class FeeRate:
    numerator: int = 0
    denominator: int = 10_000

    def __post_init__(self) -> None:
        for name, v in (("numerator", self.numerator), ("denominator", self.denominator)):
            if not isinstance(v, int) or isinstance(v, bool):
                raise InvalidFees(f"fee {name} must be an int")
        if self.denominator <= 0:
            raise InvalidFees(f"fee denominator must be positive: {self.denominator}")
        if not (0 <= self.numerator <= self.denominator):
            raise InvalidFees(
                f"fee numerator must be in [0, {self.denominator}]: {self.numerator}"
            )

    def apply(self, amount: Amount) -> Amount:
        """floor(amount * numerator / denominator)"""
        return (amount * self.numerator) // self.denominator


ZERO_RATE = FeeRate(0, 10_000)
HALF_RATE = FeeRate(1, 2)


@dataclass(frozen=True)
class Fees:
    """
    Fee parameters of a pool.

    Attributes:
        trade_fee: Charged on the gross output of every swap
        admin_trade_fee: Admin cut of `trade_fee`
        withdraw_fee: Charged on single-asset withdrawals
        admin_withdraw_fee: Admin cut of `withdraw_fee`
        imbalance_fee_factor: Fraction of the trade-fee rate charged on the
            imbalanced part of deposits and single-asset withdrawals
    """

    trade_fee: FeeRate = ZERO_RATE
    admin_trade_fee: FeeRate = ZERO_RATE
    withdraw_fee: FeeRate = ZERO_RATE
    admin_withdraw_fee: FeeRate = ZERO_RATE
    imbalance_fee_factor: FeeRate = HALF_RATE

    def __post_init__(self) -> None:
        for name in (
            "trade_fee",
            "admin_trade_fee",
            "withdraw_fee",
            "admin_withdraw_fee",
            "imbalance_fee_factor",
        ):
            if not isinstance(getattr(self, name), FeeRate):
                raise InvalidFees(f"{name} must be a FeeRate")


ZERO_FEES = Fees()


@dataclass(frozen=True)
class FeeSplit:
    net: int
    trade_fee: int
    admin_fee: int

    @property
    def lp_fee(self) -> int:
        """Portion of the trade fee left in the pool for liquidity providers."""
        return self.trade_fee - self.admin_fee


def split_fee(gross_amount: Amount, fee: FeeRate, admin_fee: FeeRate) -> FeeSplit:
    """
    Split `gross_amount` into (net, trade_fee, admin_fee).

        trade_fee = floor(gross * fee)
        net       = gross - trade_fee
        admin_fee = floor(trade_fee * admin)
    """
    require_amount("gross_amount", gross_amount)
    trade_fee = fee.apply(gross_amount)
    admin = admin_fee.apply(trade_fee)
    if trade_fee > gross_amount or admin > trade_fee:
        raise AssertionError("fee split over-distributed")
    return FeeSplit(net=gross_amount - trade_fee, trade_fee=trade_fee, admin_fee=admin)


def imbalance_fee(amount: Amount, fees: Fees) -> Amount:
    """
    Fee on the imbalanced part of a deposit or single-asset withdrawal.

        fee = floor(amount * trade_fee * imbalance_fee_factor)
    """
    require_amount("imbalance amount", amount)
    numerator = fees.trade_fee.numerator * fees.imbalance_fee_factor.numerator
    denominator = fees.trade_fee.denominator * fees.imbalance_fee_factor.denominator
    return (amount * numerator) // denominator
