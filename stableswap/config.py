"""
Pool configuration.

A pool configuration is a small YAML document:

    amp: 100
    decimals: 6
    fees:
      trade_fee: [4, 10000]
      admin_trade_fee: [5000, 10000]
      withdraw_fee: [0, 10000]
      admin_withdraw_fee: [0, 10000]
      imbalance_fee_factor: [1, 2]

Omitted fee entries default to zero (`imbalance_fee_factor` defaults to 1/2).
Unknown keys are rejected so typos cannot silently fall back to defaults.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Union

import yaml

from .core.amp import MAX_AMP, MIN_AMP, Timestamp
from .core.fees import ZERO_FEES, FeeRate, Fees
from .core.liquidity import initialize
from .errors import InvalidConfig, InvalidFees
from .state.balances import Amount
from .state.pools import PoolState


_TOP_LEVEL_KEYS = frozenset({"amp", "decimals", "fees"})
_FEE_KEYS = (
    "trade_fee",
    "admin_trade_fee",
    "withdraw_fee",
    "admin_withdraw_fee",
    "imbalance_fee_factor",
)


@dataclass(frozen=True)
class PoolConfig:
    amp: int
    decimals: int = 6
    fees: Fees = field(default=ZERO_FEES)

    def __post_init__(self) -> None:
        if not isinstance(self.amp, int) or isinstance(self.amp, bool):
            raise InvalidConfig("amp must be an int")
        if not (MIN_AMP <= self.amp <= MAX_AMP):
            raise InvalidConfig(f"amp must be in [{MIN_AMP}, {MAX_AMP}]: {self.amp}")
        if not isinstance(self.decimals, int) or isinstance(self.decimals, bool) or not (0 <= self.decimals <= 18):
            raise InvalidConfig(f"decimals must be an int in [0, 18]: {self.decimals}")

    def initialize(self, seed_amount_a: Amount, seed_amount_b: Amount, now: Timestamp = 0) -> PoolState:
        """Create a pool with this configuration from its seed deposit."""
        return initialize(seed_amount_a, seed_amount_b, self.amp, self.fees, now, decimals=self.decimals)


def _fee_rate(name: str, raw: Any) -> FeeRate:
    if isinstance(raw, Mapping):
        raw = [raw.get("numerator"), raw.get("denominator")]
    if not isinstance(raw, (list, tuple)) or len(raw) != 2:
        raise InvalidConfig(f"fees.{name} must be a [numerator, denominator] pair")
    try:
        return FeeRate(raw[0], raw[1])
    except InvalidFees as exc:
        raise InvalidConfig(f"fees.{name}: {exc}") from exc


def pool_config_from_mapping(obj: Any) -> PoolConfig:
    """
    Build a PoolConfig from a decoded document.

    Raises:
        InvalidConfig: If the document is malformed
    """
    if not isinstance(obj, Mapping):
        raise InvalidConfig("pool config must be a mapping")
    unknown = set(obj) - _TOP_LEVEL_KEYS
    if unknown:
        raise InvalidConfig(f"unknown pool config keys: {sorted(unknown)}")
    if "amp" not in obj:
        raise InvalidConfig("pool config requires 'amp'")

    fees_obj = obj.get("fees") or {}
    if not isinstance(fees_obj, Mapping):
        raise InvalidConfig("fees must be a mapping")
    unknown_fees = set(fees_obj) - set(_FEE_KEYS)
    if unknown_fees:
        raise InvalidConfig(f"unknown fee keys: {sorted(unknown_fees)}")
    rates = {name: _fee_rate(name, fees_obj[name]) for name in _FEE_KEYS if name in fees_obj}

    return PoolConfig(
        amp=obj["amp"],
        decimals=obj.get("decimals", 6),
        fees=Fees(**rates),
    )


def load_pool_config(path: Union[str, Path]) -> PoolConfig:
    """
    Load a PoolConfig from a YAML file.

    Raises:
        InvalidConfig: If the file is not valid YAML or the document is malformed
    """
    text = Path(path).read_text(encoding="utf-8")
    try:
        obj = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise InvalidConfig(f"invalid pool config YAML in {path}: {exc}") from exc
    return pool_config_from_mapping(obj)
