"""Element (yield-token) pool math.

The invariant is a time-decaying power sum Bi^s + Bo^s = const with
s = 1 - t, t the time to maturity in [0, 1). At t = 0 the curve is
constant sum and one unit in buys one unit out.

The fee is charged on the absolute deviation between the amount paid and
the ideal (fee-free) amount:

    out = ideal_out - |Ai - ideal_out| * f
    in = ideal_in + |ideal_in - Ao| * f

Callers evaluate inside DECIMAL_CONTEXT and pass balances that already
include the virtual principal-side liquidity.
"""

from decimal import Decimal

from sor.math import ONE, sign

from .errors import AmountOutsideDomainError, InvalidFeeError, InvalidTimeError, ZeroBalanceError


def _validate(balance_in: Decimal, balance_out: Decimal, swap_fee: Decimal, time: Decimal) -> None:
    if balance_in <= 0:
        raise ZeroBalanceError("balance_in must be positive")
    if balance_out <= 0:
        raise ZeroBalanceError("balance_out must be positive")
    if swap_fee < 0 or swap_fee >= 1:
        raise InvalidFeeError(f"swap fee {swap_fee} outside [0, 1)")
    if time < 0 or time >= 1:
        raise InvalidTimeError(f"time {time} outside [0, 1)")


def _remaining_out(
    balance_in: Decimal, balance_out: Decimal, time: Decimal, amount_in: Decimal
) -> Decimal:
    """X = (Bi^s - (Ai + Bi)^s + Bo^s)^(1/s): the output balance left after an ideal swap."""
    s = ONE - time
    inner = balance_in**s - (amount_in + balance_in) ** s + balance_out**s
    if inner <= 0:
        raise AmountOutsideDomainError(f"amount_in {amount_in} drains balance_out")
    return inner ** (ONE / s)


def _required_in(
    balance_in: Decimal, balance_out: Decimal, time: Decimal, amount_out: Decimal
) -> Decimal:
    """Z = (Bi^s + Bo^s - (Bo - Ao)^s)^(1/s): the input balance after an ideal swap."""
    if amount_out >= balance_out:
        raise AmountOutsideDomainError(f"amount_out {amount_out} >= balance_out {balance_out}")
    s = ONE - time
    inner = balance_in**s + balance_out**s - (balance_out - amount_out) ** s
    return inner ** (ONE / s)


def calc_out_given_in(
    balance_in: Decimal,
    balance_out: Decimal,
    swap_fee: Decimal,
    time: Decimal,
    amount_in: Decimal,
) -> Decimal:
    _validate(balance_in, balance_out, swap_fee, time)
    ideal_out = balance_out - _remaining_out(balance_in, balance_out, time, amount_in)
    return ideal_out - abs(amount_in - ideal_out) * swap_fee


def calc_in_given_out(
    balance_in: Decimal,
    balance_out: Decimal,
    swap_fee: Decimal,
    time: Decimal,
    amount_out: Decimal,
) -> Decimal:
    _validate(balance_in, balance_out, swap_fee, time)
    ideal_in = _required_in(balance_in, balance_out, time, amount_out) - balance_in
    return ideal_in + abs(ideal_in - amount_out) * swap_fee


def _exact_in_slopes(
    balance_in: Decimal,
    balance_out: Decimal,
    swap_fee: Decimal,
    time: Decimal,
    amount_in: Decimal,
) -> tuple[Decimal, Decimal]:
    """Returns (dOut/dAi, d2Out/dAi2) of the fee-adjusted output."""
    _validate(balance_in, balance_out, swap_fee, time)
    remaining = _remaining_out(balance_in, balance_out, time, amount_in)
    grown = amount_in + balance_in
    ideal_slope = remaining**time / grown**time
    ideal_curvature = -time * remaining ** (2 * time - ONE) * grown ** (-2 * time) - (
        time * remaining**time * grown ** (-time - ONE)
    )
    # At the kink take the side the price moves towards
    deviation = sign(amount_in - (balance_out - remaining)) or sign(ONE - ideal_slope)
    slope = ideal_slope - swap_fee * deviation * (ONE - ideal_slope)
    curvature = ideal_curvature * (ONE + swap_fee * deviation)
    return slope, curvature


def _exact_out_slopes(
    balance_in: Decimal,
    balance_out: Decimal,
    swap_fee: Decimal,
    time: Decimal,
    amount_out: Decimal,
) -> tuple[Decimal, Decimal]:
    """Returns (dIn/dAo, d2In/dAo2) of the fee-adjusted input."""
    _validate(balance_in, balance_out, swap_fee, time)
    required = _required_in(balance_in, balance_out, time, amount_out)
    remaining = balance_out - amount_out
    ideal_slope = required**time * remaining ** (-time)
    ideal_curvature = time * required ** (2 * time - ONE) * remaining ** (-2 * time) + (
        time * required**time * remaining ** (-time - ONE)
    )
    deviation = sign(required - balance_in - amount_out) or sign(ideal_slope - ONE)
    slope = ideal_slope + swap_fee * deviation * (ideal_slope - ONE)
    curvature = ideal_curvature * (ONE + swap_fee * deviation)
    return slope, curvature


def spot_price_after_swap_exact_in(
    balance_in: Decimal,
    balance_out: Decimal,
    swap_fee: Decimal,
    time: Decimal,
    amount_in: Decimal,
) -> Decimal:
    """SP = 1 / out'(Ai)."""
    slope, _ = _exact_in_slopes(balance_in, balance_out, swap_fee, time, amount_in)
    if slope <= 0:
        raise AmountOutsideDomainError("marginal output is not positive")
    return ONE / slope


def derivative_spot_price_after_swap_exact_in(
    balance_in: Decimal,
    balance_out: Decimal,
    swap_fee: Decimal,
    time: Decimal,
    amount_in: Decimal,
) -> Decimal:
    """dSP/dAi = -out'' / out'^2."""
    slope, curvature = _exact_in_slopes(balance_in, balance_out, swap_fee, time, amount_in)
    if slope <= 0:
        raise AmountOutsideDomainError("marginal output is not positive")
    return -curvature / (slope * slope)


def spot_price_after_swap_exact_out(
    balance_in: Decimal,
    balance_out: Decimal,
    swap_fee: Decimal,
    time: Decimal,
    amount_out: Decimal,
) -> Decimal:
    """SP = in'(Ao)."""
    slope, _ = _exact_out_slopes(balance_in, balance_out, swap_fee, time, amount_out)
    return slope


def derivative_spot_price_after_swap_exact_out(
    balance_in: Decimal,
    balance_out: Decimal,
    swap_fee: Decimal,
    time: Decimal,
    amount_out: Decimal,
) -> Decimal:
    """dSP/dAo = in''(Ao)."""
    _, curvature = _exact_out_slopes(balance_in, balance_out, swap_fee, time, amount_out)
    return curvature


__all__ = [
    "calc_in_given_out",
    "calc_out_given_in",
    "derivative_spot_price_after_swap_exact_in",
    "derivative_spot_price_after_swap_exact_out",
    "spot_price_after_swap_exact_in",
    "spot_price_after_swap_exact_out",
]
