"""
Amplification coefficient schedule.

The coefficient moves linearly from `initial_amp` at `start_ramp_ts` to
`target_amp` at `stop_ramp_ts` and is constant outside that window. The
interpolation truncates toward `initial_amp`, so the ramp is monotone and
never overshoots its target.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..errors import InvalidRamp


MIN_AMP = 1
MAX_AMP = 1_000_000
# Largest multiplicative change a single ramp may request.
MAX_AMP_CHANGE = 10
# Seconds; also the lock between two consecutive ramps.
MIN_RAMP_DURATION = 86_400

Timestamp = int


def _require_int(name: str, value: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")


@dataclass(frozen=True)
class AmpSchedule:
    initial_amp: int
    target_amp: int
    start_ramp_ts: Timestamp = 0
    stop_ramp_ts: Timestamp = 0

    def __post_init__(self) -> None:
        for name in ("initial_amp", "target_amp", "start_ramp_ts", "stop_ramp_ts"):
            _require_int(name, getattr(self, name))
        for name in ("initial_amp", "target_amp"):
            v = getattr(self, name)
            if not (0 <= v <= MAX_AMP):
                raise InvalidRamp(f"{name} must be in [0, {MAX_AMP}]: {v}")
        if self.stop_ramp_ts < self.start_ramp_ts:
            raise InvalidRamp(
                f"stop_ramp_ts ({self.stop_ramp_ts}) precedes start_ramp_ts ({self.start_ramp_ts})"
            )

    @classmethod
    def constant(cls, amp: int, now: Timestamp = 0) -> "AmpSchedule":
        """A schedule that holds `amp` from `now` on."""
        return cls(initial_amp=amp, target_amp=amp, start_ramp_ts=now, stop_ramp_ts=now)

    @property
    def is_ramping(self) -> bool:
        return self.initial_amp != self.target_amp and self.stop_ramp_ts > self.start_ramp_ts


def effective_amp(now: Timestamp, schedule: AmpSchedule) -> int:
    """
    Amplification coefficient in effect at `now`.

        initial                                       if now <= start
        target                                        if now >= stop
        initial +/- |target - initial| * elapsed // duration   otherwise
    """
    _require_int("now", now)
    if now >= schedule.stop_ramp_ts:
        return schedule.target_amp
    if now <= schedule.start_ramp_ts:
        return schedule.initial_amp

    elapsed = now - schedule.start_ramp_ts
    duration = schedule.stop_ramp_ts - schedule.start_ramp_ts
    if schedule.target_amp >= schedule.initial_amp:
        delta = (schedule.target_amp - schedule.initial_amp) * elapsed // duration
        return schedule.initial_amp + delta
    delta = (schedule.initial_amp - schedule.target_amp) * elapsed // duration
    return schedule.initial_amp - delta


def ramp(
    schedule: AmpSchedule,
    target_amp: int,
    start_ramp_ts: Timestamp,
    stop_ramp_ts: Timestamp,
) -> AmpSchedule:
    """
    Build a new ramp starting from the coefficient in effect at `start_ramp_ts`.

    Rules:
    - MIN_AMP <= target_amp <= MAX_AMP
    - a new ramp may start only MIN_RAMP_DURATION after the previous one started
    - stop_ramp_ts - start_ramp_ts >= MIN_RAMP_DURATION
    - the target is within a factor MAX_AMP_CHANGE of the current coefficient

    Raises:
        InvalidRamp: If any rule is violated
    """
    for name, v in (
        ("target_amp", target_amp),
        ("start_ramp_ts", start_ramp_ts),
        ("stop_ramp_ts", stop_ramp_ts),
    ):
        _require_int(name, v)

    if not (MIN_AMP <= target_amp <= MAX_AMP):
        raise InvalidRamp(f"target_amp must be in [{MIN_AMP}, {MAX_AMP}]: {target_amp}")
    if start_ramp_ts < schedule.start_ramp_ts + MIN_RAMP_DURATION:
        raise InvalidRamp(
            f"ramp locked until {schedule.start_ramp_ts + MIN_RAMP_DURATION}, got start {start_ramp_ts}"
        )
    if stop_ramp_ts - start_ramp_ts < MIN_RAMP_DURATION:
        raise InvalidRamp(
            f"ramp duration must be at least {MIN_RAMP_DURATION}s: {stop_ramp_ts - start_ramp_ts}"
        )

    current = effective_amp(start_ramp_ts, schedule)
    if target_amp > current:
        if target_amp > current * MAX_AMP_CHANGE:
            raise InvalidRamp(f"target_amp {target_amp} exceeds {MAX_AMP_CHANGE}x current amp {current}")
    elif target_amp * MAX_AMP_CHANGE < current:
        raise InvalidRamp(f"target_amp {target_amp} is below 1/{MAX_AMP_CHANGE} of current amp {current}")

    return AmpSchedule(
        initial_amp=current,
        target_amp=target_amp,
        start_ramp_ts=start_ramp_ts,
        stop_ramp_ts=stop_ramp_ts,
    )


def stop_ramp(schedule: AmpSchedule, now: Timestamp) -> AmpSchedule:
    """Freeze the coefficient at its value in effect at `now`."""
    return AmpSchedule.constant(effective_amp(now, schedule), now)
