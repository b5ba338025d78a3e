"""
Administrative pool operations.

Authorization happens outside the engine; these functions only validate the
parameters and return the next PoolState.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Tuple

from ..errors import InvalidFees
from ..state.balances import Amount
from ..state.pools import PoolState, PoolStatus
from .amp import Timestamp, ramp, stop_ramp as _stop_schedule
from .fees import Fees


logger = logging.getLogger(__name__)


def reramp(state: PoolState, new_target: int, start_time: Timestamp, stop_time: Timestamp) -> PoolState:
    """
    Start a new amplification ramp toward `new_target` (see `amp.ramp` for the rules).

    Raises:
        InvalidRamp: If the ramp violates a ramp rule
    """
    schedule = ramp(state.amp, new_target, start_time, stop_time)
    logger.info(
        "reramp amp %d -> %d over [%d, %d]",
        schedule.initial_amp,
        schedule.target_amp,
        start_time,
        stop_time,
    )
    return replace(state, amp=schedule)


def stop_ramp(state: PoolState, now: Timestamp) -> PoolState:
    """Freeze the amplification coefficient at its value in effect at `now`."""
    return replace(state, amp=_stop_schedule(state.amp, now))


def pause(state: PoolState) -> PoolState:
    return replace(state, status=PoolStatus.PAUSED)


def unpause(state: PoolState) -> PoolState:
    return replace(state, status=PoolStatus.ACTIVE)


def set_fees(state: PoolState, fees: Fees) -> PoolState:
    if not isinstance(fees, Fees):
        raise InvalidFees("fees must be a Fees record")
    return replace(state, fees=fees)


def withdraw_admin_fees(state: PoolState) -> Tuple[PoolState, Tuple[Amount, Amount]]:
    """
    Release the withheld admin fees.

    Returns the next state (admin balances zeroed) and the released amounts,
    which the ledger pays out to the fee authority.
    """
    released = state.admin_fees
    return state.with_balances(state.reserves, admin_fees=(0, 0)), released
