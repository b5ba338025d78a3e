"""Exception types for the StableSwap pool engine.

Every error derives from ``ValueError`` so callers that already treat invalid
operations as ``ValueError`` keep working. All of them are raised before a new
``PoolState`` is produced: an operation either returns a complete result or
changes nothing.
"""

from __future__ import annotations


class StableSwapError(ValueError):
    """Base class for pool engine errors."""


class ZeroAmount(StableSwapError):
    """Raised when a request carries a zero principal amount."""


class SlippageExceeded(StableSwapError):
    """Raised when a computed amount violates a caller-supplied bound."""

    def __init__(self, what: str, actual: int, bound: int) -> None:
        self.what = what
        self.actual = actual
        self.bound = bound
        super().__init__(f"{what} ({actual}) is below the requested minimum ({bound})")


class InsufficientSupply(StableSwapError):
    """Raised when a burn exceeds the outstanding pool-token supply."""

    def __init__(self, requested: int, supply: int) -> None:
        self.requested = requested
        self.supply = supply
        super().__init__(f"Cannot burn more pool tokens than supply: {requested} > {supply}")


class EmptyPool(StableSwapError):
    """Raised when an operation needs liquidity the pool does not hold."""


class PoolPaused(StableSwapError):
    """Raised when a user operation targets a paused pool."""


class InvalidFees(StableSwapError):
    """Raised when a fee fraction is malformed."""


class InvalidRamp(StableSwapError):
    """Raised when an amplification ramp violates the ramp rules."""


class InvalidConfig(StableSwapError):
    """Raised when a pool configuration document cannot be used."""


class ConvergenceError(StableSwapError):
    """Raised when a Newton iteration does not settle within its cap.

    Not retryable: it signals parameters outside the supported numeric range.
    """


class AmountOverflow(StableSwapError, OverflowError):
    """Raised when a value leaves the representable integer range."""
