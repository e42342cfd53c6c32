"""Stable pool math.

StableSwap invariant in Balancer's parameterization (amplification times
n, not n^n), evaluated in Decimal human units. Callers evaluate inside
DECIMAL_CONTEXT.

Invariant D satisfies:
    ann * S + D = ann * D + D^(n+1) / (n^n * P)
with ann = amp * n, S the sum and P the product of all balances.

Spot prices come from implicit differentiation of
    G(x, y) = ann * (x + y + s) - K / (x * y)
where x/y are the in/out balances, s is the sum of the other balances and
K = D^(n+1) / (n^n * p) with p the product of the other balances.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from sor.constants import STABLE_INVARIANT_TOLERANCE, STABLE_MAX_ITERATIONS
from sor.math import ONE, ZERO

from .errors import (
    AmountOutsideDomainError,
    InvalidFeeError,
    StableInvariantDidNotConverge,
    ZeroBalanceError,
)

TWO = Decimal(2)


def calculate_invariant(amp: Decimal, balances: tuple[Decimal, ...] | list[Decimal]) -> Decimal:
    """Calculate StableSwap invariant D using Newton-Raphson iteration.

    Algorithm:
        1. Initial guess: D = sum(balances)
        2. Iterate until |D_new - D_old| <= D * STABLE_INVARIANT_TOLERANCE
        3. Max iterations: STABLE_MAX_ITERATIONS

    Raises:
        StableInvariantDidNotConverge: If iteration doesn't converge
        ZeroBalanceError: If any balance is not positive
    """
    n_coins = len(balances)
    if n_coins == 0:
        return ZERO
    for i, bal in enumerate(balances):
        if bal <= 0:
            raise ZeroBalanceError(f"Balance at index {i} must be positive")

    n = Decimal(n_coins)
    sum_balances = sum(balances, ZERO)
    amp_times_n = amp * n
    d_prev = sum_balances

    for _ in range(STABLE_MAX_ITERATIONS):
        # d_p = D^(n+1) / (n^n * prod(balances)), built up one balance at a time
        d_p = d_prev
        for bal in balances:
            d_p = d_p * d_prev / (n * bal)

        numerator = (amp_times_n * sum_balances + d_p * n) * d_prev
        denominator = (amp_times_n - ONE) * d_prev + (n + ONE) * d_p
        d_new = numerator / denominator

        if abs(d_new - d_prev) <= d_new * STABLE_INVARIANT_TOLERANCE:
            return d_new
        d_prev = d_new

    raise StableInvariantDidNotConverge(
        f"Stable invariant did not converge after {STABLE_MAX_ITERATIONS} iterations"
    )


def get_token_balance_given_invariant_and_all_other_balances(
    amp: Decimal,
    balances: tuple[Decimal, ...] | list[Decimal],
    invariant: Decimal,
    token_index: int,
) -> Decimal:
    """Solve for balances[token_index] given D and all other balances.

    The unknown balance y is the positive root of
        y^2 + (b - D) * y - c = 0
    with b = s + D / ann and c = D^(n+1) / (ann * n^n * p), where s and p are
    the sum and product of the other balances.

    Raises:
        IndexError: If token_index is out of range
        ZeroBalanceError: If another balance is not positive
    """
    n_coins = len(balances)
    if token_index < 0 or token_index >= n_coins:
        raise IndexError(f"token_index {token_index} out of range for {n_coins} tokens")

    n = Decimal(n_coins)
    amp_times_n = amp * n
    sum_others = ZERO
    prod_others = ONE
    for j, bal in enumerate(balances):
        if j == token_index:
            continue
        if bal <= 0:
            raise ZeroBalanceError(f"Balance at index {j} must be positive")
        sum_others += bal
        prod_others *= bal

    b = sum_others + invariant / amp_times_n
    c = invariant ** (n + ONE) / (amp_times_n * n**n * prod_others)
    b_minus_d = b - invariant
    return (-b_minus_d + (b_minus_d * b_minus_d + 4 * c).sqrt()) / TWO


def _validate_fee(swap_fee: Decimal) -> None:
    if swap_fee < 0 or swap_fee >= 1:
        raise InvalidFeeError(f"swap fee {swap_fee} outside [0, 1)")


def calc_out_given_in(
    amp: Decimal,
    balances: tuple[Decimal, ...] | list[Decimal],
    token_index_in: int,
    token_index_out: int,
    swap_fee: Decimal,
    amount_in: Decimal,
) -> Decimal:
    """Output for an exact input. The fee is taken from the input amount."""
    _validate_fee(swap_fee)
    invariant = calculate_invariant(amp, balances)
    new_balances = list(balances)
    new_balances[token_index_in] = balances[token_index_in] + amount_in * (ONE - swap_fee)
    final_balance_out = get_token_balance_given_invariant_and_all_other_balances(
        amp, new_balances, invariant, token_index_out
    )
    return balances[token_index_out] - final_balance_out


def calc_in_given_out(
    amp: Decimal,
    balances: tuple[Decimal, ...] | list[Decimal],
    token_index_in: int,
    token_index_out: int,
    swap_fee: Decimal,
    amount_out: Decimal,
) -> Decimal:
    """Input required for an exact output, grossed up by the fee.

    Raises:
        AmountOutsideDomainError: If amount_out >= the output balance
    """
    _validate_fee(swap_fee)
    if amount_out >= balances[token_index_out]:
        raise AmountOutsideDomainError(
            f"amount_out {amount_out} >= balance_out {balances[token_index_out]}"
        )
    invariant = calculate_invariant(amp, balances)
    new_balances = list(balances)
    new_balances[token_index_out] = balances[token_index_out] - amount_out
    final_balance_in = get_token_balance_given_invariant_and_all_other_balances(
        amp, new_balances, invariant, token_index_in
    )
    return (final_balance_in - balances[token_index_in]) / (ONE - swap_fee)


@dataclass(frozen=True)
class _Curve:
    """Partial derivatives of G at a point (x, y) on the invariant curve."""

    g_x: Decimal
    g_y: Decimal
    g_xx: Decimal
    g_xy: Decimal
    g_yy: Decimal


def _curve_at(
    amp: Decimal,
    balances: tuple[Decimal, ...] | list[Decimal],
    invariant: Decimal,
    token_index_in: int,
    token_index_out: int,
    x: Decimal,
    y: Decimal,
) -> _Curve:
    n = Decimal(len(balances))
    amp_times_n = amp * n
    prod_others = ONE
    for j, bal in enumerate(balances):
        if j not in (token_index_in, token_index_out):
            prod_others *= bal
    k = invariant ** (n + ONE) / (n**n * prod_others)
    return _Curve(
        g_x=amp_times_n + k / (x * x * y),
        g_y=amp_times_n + k / (x * y * y),
        g_xx=-TWO * k / (x**3 * y),
        g_xy=-k / (x * x * y * y),
        g_yy=-TWO * k / (x * y**3),
    )


def _exact_in_state(
    amp: Decimal,
    balances: tuple[Decimal, ...] | list[Decimal],
    token_index_in: int,
    token_index_out: int,
    swap_fee: Decimal,
    amount_in: Decimal,
) -> tuple[Decimal, Decimal]:
    """Returns (y', y'') of the output balance as a function of the input balance."""
    _validate_fee(swap_fee)
    invariant = calculate_invariant(amp, balances)
    x = balances[token_index_in] + amount_in * (ONE - swap_fee)
    new_balances = list(balances)
    new_balances[token_index_in] = x
    y = get_token_balance_given_invariant_and_all_other_balances(
        amp, new_balances, invariant, token_index_out
    )
    if y <= 0:
        raise AmountOutsideDomainError("output balance exhausted")
    curve = _curve_at(amp, balances, invariant, token_index_in, token_index_out, x, y)
    dy = -curve.g_x / curve.g_y
    d2y = -(curve.g_xx + TWO * curve.g_xy * dy + curve.g_yy * dy * dy) / curve.g_y
    return dy, d2y


def _exact_out_state(
    amp: Decimal,
    balances: tuple[Decimal, ...] | list[Decimal],
    token_index_in: int,
    token_index_out: int,
    swap_fee: Decimal,
    amount_out: Decimal,
) -> tuple[Decimal, Decimal]:
    """Returns (x', x'') of the input balance as a function of the output balance."""
    _validate_fee(swap_fee)
    if amount_out >= balances[token_index_out]:
        raise AmountOutsideDomainError(
            f"amount_out {amount_out} >= balance_out {balances[token_index_out]}"
        )
    invariant = calculate_invariant(amp, balances)
    y = balances[token_index_out] - amount_out
    new_balances = list(balances)
    new_balances[token_index_out] = y
    x = get_token_balance_given_invariant_and_all_other_balances(
        amp, new_balances, invariant, token_index_in
    )
    curve = _curve_at(amp, balances, invariant, token_index_in, token_index_out, x, y)
    dx = -curve.g_y / curve.g_x
    d2x = -(curve.g_yy + TWO * curve.g_xy * dx + curve.g_xx * dx * dx) / curve.g_x
    return dx, d2x


def spot_price_after_swap_exact_in(
    amp: Decimal,
    balances: tuple[Decimal, ...] | list[Decimal],
    token_index_in: int,
    token_index_out: int,
    swap_fee: Decimal,
    amount_in: Decimal,
) -> Decimal:
    """SP = -1 / (g * y'(x)) with x = Bi + Ai * g and g = 1 - f."""
    dy, _ = _exact_in_state(amp, balances, token_index_in, token_index_out, swap_fee, amount_in)
    return -ONE / ((ONE - swap_fee) * dy)


def derivative_spot_price_after_swap_exact_in(
    amp: Decimal,
    balances: tuple[Decimal, ...] | list[Decimal],
    token_index_in: int,
    token_index_out: int,
    swap_fee: Decimal,
    amount_in: Decimal,
) -> Decimal:
    """dSP/dAi = y'' / y'^2 (the fee factors cancel)."""
    dy, d2y = _exact_in_state(amp, balances, token_index_in, token_index_out, swap_fee, amount_in)
    return d2y / (dy * dy)


def spot_price_after_swap_exact_out(
    amp: Decimal,
    balances: tuple[Decimal, ...] | list[Decimal],
    token_index_in: int,
    token_index_out: int,
    swap_fee: Decimal,
    amount_out: Decimal,
) -> Decimal:
    """SP = -x'(y) / g with y = Bo - Ao."""
    dx, _ = _exact_out_state(amp, balances, token_index_in, token_index_out, swap_fee, amount_out)
    return -dx / (ONE - swap_fee)


def derivative_spot_price_after_swap_exact_out(
    amp: Decimal,
    balances: tuple[Decimal, ...] | list[Decimal],
    token_index_in: int,
    token_index_out: int,
    swap_fee: Decimal,
    amount_out: Decimal,
) -> Decimal:
    """dSP/dAo = x''(y) / g."""
    _, d2x = _exact_out_state(amp, balances, token_index_in, token_index_out, swap_fee, amount_out)
    return d2x / (ONE - swap_fee)


__all__ = [
    "calc_in_given_out",
    "calc_out_given_in",
    "calculate_invariant",
    "derivative_spot_price_after_swap_exact_in",
    "derivative_spot_price_after_swap_exact_out",
    "get_token_balance_given_invariant_and_all_other_balances",
    "spot_price_after_swap_exact_in",
    "spot_price_after_swap_exact_out",
]
