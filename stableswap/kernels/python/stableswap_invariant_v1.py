"""
StableSwap invariant kernel (v1 semantics).

Invariant, for n reserves x_i and leverage Ann = A * n**n:

    Ann * sum(x_i) + D = Ann * D + D**(n+1) / (n**n * prod(x_i))

`compute_d` solves for D with Newton-Raphson:

    D_P    = D**(n+1) / (n**n * prod(x_i))
    D[k+1] = (Ann * S + n * D_P) * D[k] / ((Ann - 1) * D[k] + (n + 1) * D_P)

`compute_y` holds D and every reserve but one fixed and solves the quadratic in
the unknown reserve y (S' and P' are the sum and product of the others):

    Ann * y**2 + (Ann * S' + D - Ann * D) * y - D**(n+1) / (n**n * P') = 0
    y[k+1] = (Ann * y[k]**2 + c) / (2 * Ann * y[k] + b)

Written this way neither iteration divides by Ann, so A = 0 (the
constant-product limit) needs no special case.

Rounding:
- Both iterations stop once successive iterates differ by at most 1, or when
  they alternate between two values, and give up after MAX_ITERATIONS with
  ConvergenceError.
- `compute_d` then normalizes its result to the maximal integer D the reserves
  reach under the exact (rational) invariant, and `compute_y` to the minimal
  integer y that still reaches D, each with a bounded loop. Both results are
  therefore exact floors/ceilings and monotone in the reserves.
- Intermediates are checked against a 192-bit bound; D and y must fit the
  64-bit amount width. Nothing is silently wrapped.
"""

from __future__ import annotations

from typing import Sequence

from ...errors import AmountOverflow, ConvergenceError, EmptyPool
from ...state.balances import MAX_AMOUNT


MAX_ITERATIONS = 255
WIDE_BITS = 192
MAX_WIDE = (1 << WIDE_BITS) - 1

_MAX_NORMALIZE_STEPS = 16


def _require_int(name: str, value: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")


def _wide(name: str, value: int) -> int:
    if value > MAX_WIDE or value < -MAX_WIDE:
        raise AmountOverflow(f"{name} exceeds the {WIDE_BITS}-bit intermediate range")
    return value


def _narrow(name: str, value: int) -> int:
    if value > MAX_AMOUNT:
        raise AmountOverflow(f"{name} does not fit the amount width: {value}")
    return value


def _check_inputs(reserves: Sequence[int], amp: int) -> int:
    _require_int("amp", amp)
    if amp < 0:
        raise ValueError(f"amp must be non-negative: {amp}")
    n = len(reserves)
    if n < 2:
        raise ValueError(f"need at least two reserves, got {n}")
    for i, x in enumerate(reserves):
        _require_int(f"reserves[{i}]", x)
        if x < 0:
            raise ValueError(f"reserves must be non-negative: {list(reserves)}")
        _narrow(f"reserves[{i}]", x)
    return n


def leverage(amp: int, n_coins: int) -> int:
    """Ann = A * n**n"""
    return amp * n_coins**n_coins


def compute_d(reserves: Sequence[int], amp: int) -> int:
    """
    Compute the invariant D of `reserves` at amplification `amp`.

    The result is the maximal integer D with `invariant_holds(reserves, amp, D)`.
    Returns 0 without iterating when any reserve is zero.

    Raises:
        ConvergenceError: If Newton-Raphson does not settle within MAX_ITERATIONS
        AmountOverflow: If an intermediate or the result leaves its range
    """
    n = _check_inputs(reserves, amp)
    if any(x == 0 for x in reserves):
        return 0

    s = sum(reserves)
    ann = leverage(amp, n)
    d = s
    d_prev_prev = None
    for _ in range(MAX_ITERATIONS):
        d_p = d
        for x in reserves:
            d_p = _wide("D_P", d_p * d) // (x * n)
        d_prev = d
        numerator = _wide("D numerator", (ann * s + n * d_p) * d)
        denominator = (ann - 1) * d + (n + 1) * d_p
        if denominator <= 0:
            raise ConvergenceError(f"non-positive Newton denominator for D: {denominator}")
        d = numerator // denominator
        if abs(d - d_prev) <= 1:
            break
        if d == d_prev_prev:
            # Integer rounding can trap Newton in a two-cycle around the root.
            d = min(d, d_prev)
            break
        d_prev_prev = d_prev
    else:
        raise ConvergenceError(f"D did not converge within {MAX_ITERATIONS} iterations")

    return _narrow("D", _normalize_max_d(reserves, amp, d))


def _y_terms(reserves: Sequence[int], amp: int, d: int, unknown_index: int) -> tuple[int, int, int, int]:
    n = len(reserves)
    others = [x for i, x in enumerate(reserves) if i != unknown_index]
    if any(x == 0 for x in others):
        raise EmptyPool("cannot solve for a reserve while another reserve is empty")
    ann = leverage(amp, n)
    c = d
    for x in others:
        c = _wide("c", c * d) // (x * n)
    c = _wide("c", c * d) // n
    b = ann * sum(others) + d - ann * d
    return ann, b, c, n


def invariant_holds(reserves: Sequence[int], amp: int, d: int) -> bool:
    """
    Exact check that `reserves` reach invariant `d`:

        (Ann * S + D - Ann * D) * n**n * prod(x_i) >= D**(n+1)
    """
    n = _check_inputs(reserves, amp)
    _require_int("d", d)
    ann = leverage(amp, n)
    prod = 1
    for x in reserves:
        prod *= x
    lhs = (ann * sum(reserves) + d - ann * d) * n**n * prod
    return lhs >= d ** (n + 1)


def compute_y(reserves: Sequence[int], amp: int, d: int, unknown_index: int) -> int:
    """
    Solve for reserve `unknown_index` so the pool keeps invariant `d`.

    The value currently stored at `unknown_index` is ignored. The result is the
    minimal integer y with `invariant_holds(reserves', amp, d)`.

    Raises:
        EmptyPool: If a known reserve is zero
        ConvergenceError: If Newton-Raphson or the normalization does not settle
        AmountOverflow: If an intermediate or the result leaves its range
    """
    n = _check_inputs(reserves, amp)
    _require_int("d", d)
    _require_int("unknown_index", unknown_index)
    if not (0 <= unknown_index < n):
        raise ValueError(f"unknown_index must be in [0, {n}): {unknown_index}")
    if d < 0:
        raise ValueError(f"d must be non-negative: {d}")
    if d == 0:
        return 0

    ann, b, c, _ = _y_terms(reserves, amp, d, unknown_index)
    y = d
    y_prev_prev = None
    for _ in range(MAX_ITERATIONS):
        y_prev = y
        denominator = 2 * ann * y + b
        if denominator <= 0:
            raise ConvergenceError(f"non-positive Newton denominator for y: {denominator}")
        y = _wide("y numerator", ann * y * y + c) // denominator
        if abs(y - y_prev) <= 1:
            break
        if y == y_prev_prev:
            y = max(y, y_prev)
            break
        y_prev_prev = y_prev
    else:
        raise ConvergenceError(f"y did not converge within {MAX_ITERATIONS} iterations")

    return _narrow("y", _normalize_min_y(reserves, amp, d, unknown_index, y))


def _normalize_min_y(reserves: Sequence[int], amp: int, d: int, unknown_index: int, candidate: int) -> int:
    trial = list(reserves)

    def holds(y: int) -> bool:
        trial[unknown_index] = y
        return invariant_holds(trial, amp, d)

    y = max(candidate, 0)
    for _ in range(_MAX_NORMALIZE_STEPS):
        if holds(y):
            break
        y += 1
    else:
        raise ConvergenceError("normalize loop exceeded bound (raising y)")

    for _ in range(_MAX_NORMALIZE_STEPS):
        if y > 0 and holds(y - 1):
            y -= 1
            continue
        return y
    raise ConvergenceError("normalize loop exceeded bound (lowering y)")


def _normalize_max_d(reserves: Sequence[int], amp: int, candidate: int) -> int:
    d = max(candidate, 0)
    for _ in range(_MAX_NORMALIZE_STEPS):
        if d == 0 or invariant_holds(reserves, amp, d):
            break
        d -= 1
    else:
        raise ConvergenceError("normalize loop exceeded bound (lowering D)")

    for _ in range(_MAX_NORMALIZE_STEPS):
        if invariant_holds(reserves, amp, d + 1):
            d += 1
            continue
        return d
    raise ConvergenceError("normalize loop exceeded bound (raising D)")
