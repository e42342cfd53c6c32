"""Weighted product pool math.

Closed-form swap, spot-price and spot-price-derivative formulas for
Balancer weighted pools, in human units. Spot prices are token_in per
token_out. Callers evaluate inside DECIMAL_CONTEXT.

Token-to-token notation: Bi/Bo balances, wi/wo normalized weights,
f swap fee, A the swap amount. Share-token (join/exit) formulas use the
single-asset forms where w is the non-share token's normalized weight and
the fee is only charged on the non-proportional share (1 - w).
"""

from decimal import Decimal

from sor.math import ONE

from .errors import AmountOutsideDomainError, InvalidFeeError, ZeroBalanceError, ZeroWeightError


def _validate(balance_in: Decimal, balance_out: Decimal, swap_fee: Decimal) -> None:
    if balance_in <= 0:
        raise ZeroBalanceError("balance_in must be positive")
    if balance_out <= 0:
        raise ZeroBalanceError("balance_out must be positive")
    if swap_fee < 0 or swap_fee >= 1:
        raise InvalidFeeError(f"swap fee {swap_fee} outside [0, 1)")


def _validate_weights(weight_in: Decimal, weight_out: Decimal) -> None:
    if weight_in <= 0:
        raise ZeroWeightError("weight_in must be positive")
    if weight_out <= 0:
        raise ZeroWeightError("weight_out must be positive")


# =============================================================================
# Token to token
# =============================================================================


def calc_out_given_in(
    balance_in: Decimal,
    weight_in: Decimal,
    balance_out: Decimal,
    weight_out: Decimal,
    swap_fee: Decimal,
    amount_in: Decimal,
) -> Decimal:
    """Output for an exact input (sell order).

    Formula:
        amount_out = Bo * (1 - (Bi / (Bi + Ai * (1 - f)))^(wi / wo))
    """
    _validate(balance_in, balance_out, swap_fee)
    _validate_weights(weight_in, weight_out)
    amount_in_after_fee = amount_in * (ONE - swap_fee)
    base = balance_in / (balance_in + amount_in_after_fee)
    return balance_out * (ONE - base ** (weight_in / weight_out))


def calc_in_given_out(
    balance_in: Decimal,
    weight_in: Decimal,
    balance_out: Decimal,
    weight_out: Decimal,
    swap_fee: Decimal,
    amount_out: Decimal,
) -> Decimal:
    """Input required for an exact output (buy order).

    Formula:
        amount_in = Bi * ((Bo / (Bo - Ao))^(wo / wi) - 1) / (1 - f)

    Raises:
        AmountOutsideDomainError: If amount_out >= balance_out
    """
    _validate(balance_in, balance_out, swap_fee)
    _validate_weights(weight_in, weight_out)
    if amount_out >= balance_out:
        raise AmountOutsideDomainError(f"amount_out {amount_out} >= balance_out {balance_out}")
    base = balance_out / (balance_out - amount_out)
    return balance_in * (base ** (weight_out / weight_in) - ONE) / (ONE - swap_fee)


def spot_price_after_swap_exact_in(
    balance_in: Decimal,
    weight_in: Decimal,
    balance_out: Decimal,
    weight_out: Decimal,
    swap_fee: Decimal,
    amount_in: Decimal,
) -> Decimal:
    """SP = (Bi + Ai*g)^(r+1) / (Bo * r * g * Bi^r), with g = 1 - f and r = wi/wo."""
    _validate(balance_in, balance_out, swap_fee)
    _validate_weights(weight_in, weight_out)
    gamma = ONE - swap_fee
    ratio = weight_in / weight_out
    grown = balance_in + amount_in * gamma
    return grown ** (ratio + ONE) / (balance_out * ratio * gamma * balance_in**ratio)


def derivative_spot_price_after_swap_exact_in(
    balance_in: Decimal,
    weight_in: Decimal,
    balance_out: Decimal,
    weight_out: Decimal,
    swap_fee: Decimal,
    amount_in: Decimal,
) -> Decimal:
    """dSP/dAi = (r+1) * (Bi + Ai*g)^r / (Bo * r * Bi^r)."""
    _validate(balance_in, balance_out, swap_fee)
    _validate_weights(weight_in, weight_out)
    gamma = ONE - swap_fee
    ratio = weight_in / weight_out
    grown = balance_in + amount_in * gamma
    return (ratio + ONE) * grown**ratio / (balance_out * ratio * balance_in**ratio)


def spot_price_after_swap_exact_out(
    balance_in: Decimal,
    weight_in: Decimal,
    balance_out: Decimal,
    weight_out: Decimal,
    swap_fee: Decimal,
    amount_out: Decimal,
) -> Decimal:
    """SP = Bi * q * Bo^q * (Bo - Ao)^(-q-1) / g, with q = wo/wi."""
    _validate(balance_in, balance_out, swap_fee)
    _validate_weights(weight_in, weight_out)
    if amount_out >= balance_out:
        raise AmountOutsideDomainError(f"amount_out {amount_out} >= balance_out {balance_out}")
    gamma = ONE - swap_fee
    ratio = weight_out / weight_in
    remaining = balance_out - amount_out
    return balance_in * ratio * balance_out**ratio * remaining ** (-ratio - ONE) / gamma


def derivative_spot_price_after_swap_exact_out(
    balance_in: Decimal,
    weight_in: Decimal,
    balance_out: Decimal,
    weight_out: Decimal,
    swap_fee: Decimal,
    amount_out: Decimal,
) -> Decimal:
    """dSP/dAo = Bi * q * (q+1) * Bo^q * (Bo - Ao)^(-q-2) / g."""
    _validate(balance_in, balance_out, swap_fee)
    _validate_weights(weight_in, weight_out)
    if amount_out >= balance_out:
        raise AmountOutsideDomainError(f"amount_out {amount_out} >= balance_out {balance_out}")
    gamma = ONE - swap_fee
    ratio = weight_out / weight_in
    remaining = balance_out - amount_out
    return (
        balance_in
        * ratio
        * (ratio + ONE)
        * balance_out**ratio
        * remaining ** (-ratio - Decimal(2))
        / gamma
    )


# =============================================================================
# Single-asset join (token -> share token)
# =============================================================================


def _join_fee_factor(weight: Decimal, swap_fee: Decimal) -> Decimal:
    # Fee applies only to the part of the deposit that is not proportional
    return ONE - (ONE - weight) * swap_fee


def calc_bpt_out_given_exact_token_in(
    balance_in: Decimal,
    weight: Decimal,
    total_shares: Decimal,
    swap_fee: Decimal,
    amount_in: Decimal,
) -> Decimal:
    """Shares minted for a single-token deposit: Bbpt * ((1 + A*phi/Bi)^w - 1)."""
    _validate(balance_in, total_shares, swap_fee)
    phi = _join_fee_factor(weight, swap_fee)
    return total_shares * ((ONE + amount_in * phi / balance_in) ** weight - ONE)


def calc_token_in_given_exact_bpt_out(
    balance_in: Decimal,
    weight: Decimal,
    total_shares: Decimal,
    swap_fee: Decimal,
    amount_out: Decimal,
) -> Decimal:
    """Deposit needed to mint exact shares: Bi * ((1 + A/Bbpt)^(1/w) - 1) / phi."""
    _validate(balance_in, total_shares, swap_fee)
    phi = _join_fee_factor(weight, swap_fee)
    return balance_in * ((ONE + amount_out / total_shares) ** (ONE / weight) - ONE) / phi


def spot_price_token_to_bpt_exact_in(
    balance_in: Decimal,
    weight: Decimal,
    total_shares: Decimal,
    swap_fee: Decimal,
    amount_in: Decimal,
) -> Decimal:
    """SP = Bi * (1 + A*phi/Bi)^(1-w) / (Bbpt * w * phi)."""
    _validate(balance_in, total_shares, swap_fee)
    phi = _join_fee_factor(weight, swap_fee)
    base = ONE + amount_in * phi / balance_in
    return balance_in * base ** (ONE - weight) / (total_shares * weight * phi)


def derivative_token_to_bpt_exact_in(
    balance_in: Decimal,
    weight: Decimal,
    total_shares: Decimal,
    swap_fee: Decimal,
    amount_in: Decimal,
) -> Decimal:
    """dSP/dA = (1 - w) * (1 + A*phi/Bi)^(-w) / (Bbpt * w)."""
    _validate(balance_in, total_shares, swap_fee)
    phi = _join_fee_factor(weight, swap_fee)
    base = ONE + amount_in * phi / balance_in
    return (ONE - weight) * base ** (-weight) / (total_shares * weight)


def spot_price_token_to_bpt_exact_out(
    balance_in: Decimal,
    weight: Decimal,
    total_shares: Decimal,
    swap_fee: Decimal,
    amount_out: Decimal,
) -> Decimal:
    """SP = Bi * (1 + A/Bbpt)^(1/w - 1) / (w * Bbpt * phi)."""
    _validate(balance_in, total_shares, swap_fee)
    phi = _join_fee_factor(weight, swap_fee)
    base = ONE + amount_out / total_shares
    return balance_in * base ** (ONE / weight - ONE) / (weight * total_shares * phi)


def derivative_token_to_bpt_exact_out(
    balance_in: Decimal,
    weight: Decimal,
    total_shares: Decimal,
    swap_fee: Decimal,
    amount_out: Decimal,
) -> Decimal:
    """dSP/dA = Bi * (1/w - 1) * (1 + A/Bbpt)^(1/w - 2) / (w * Bbpt^2 * phi)."""
    _validate(balance_in, total_shares, swap_fee)
    phi = _join_fee_factor(weight, swap_fee)
    base = ONE + amount_out / total_shares
    exponent = ONE / weight
    return (
        balance_in
        * (exponent - ONE)
        * base ** (exponent - Decimal(2))
        / (weight * total_shares * total_shares * phi)
    )


# =============================================================================
# Single-asset exit (share token -> token)
# =============================================================================


def calc_token_out_given_exact_bpt_in(
    balance_out: Decimal,
    weight: Decimal,
    total_shares: Decimal,
    swap_fee: Decimal,
    amount_in: Decimal,
) -> Decimal:
    """Tokens received for burning shares: phi * Bo * (1 - (1 - A/Bbpt)^(1/w)).

    Raises:
        AmountOutsideDomainError: If amount_in >= total_shares
    """
    _validate(total_shares, balance_out, swap_fee)
    if amount_in >= total_shares:
        raise AmountOutsideDomainError(f"amount_in {amount_in} >= total shares {total_shares}")
    phi = _join_fee_factor(weight, swap_fee)
    return phi * balance_out * (ONE - (ONE - amount_in / total_shares) ** (ONE / weight))


def calc_bpt_in_given_exact_token_out(
    balance_out: Decimal,
    weight: Decimal,
    total_shares: Decimal,
    swap_fee: Decimal,
    amount_out: Decimal,
) -> Decimal:
    """Shares burned for an exact withdrawal: Bbpt * (1 - (1 - A/(phi*Bo))^w).

    Raises:
        AmountOutsideDomainError: If the withdrawal exceeds phi * balance_out
    """
    _validate(total_shares, balance_out, swap_fee)
    phi = _join_fee_factor(weight, swap_fee)
    if amount_out >= phi * balance_out:
        raise AmountOutsideDomainError(f"amount_out {amount_out} exceeds exit capacity")
    return total_shares * (ONE - (ONE - amount_out / (phi * balance_out)) ** weight)


def spot_price_bpt_to_token_exact_in(
    balance_out: Decimal,
    weight: Decimal,
    total_shares: Decimal,
    swap_fee: Decimal,
    amount_in: Decimal,
) -> Decimal:
    """SP = w * Bbpt * (1 - A/Bbpt)^(1 - 1/w) / (phi * Bo)."""
    _validate(total_shares, balance_out, swap_fee)
    if amount_in >= total_shares:
        raise AmountOutsideDomainError(f"amount_in {amount_in} >= total shares {total_shares}")
    phi = _join_fee_factor(weight, swap_fee)
    base = ONE - amount_in / total_shares
    return weight * total_shares * base ** (ONE - ONE / weight) / (phi * balance_out)


def derivative_bpt_to_token_exact_in(
    balance_out: Decimal,
    weight: Decimal,
    total_shares: Decimal,
    swap_fee: Decimal,
    amount_in: Decimal,
) -> Decimal:
    """dSP/dA = (1 - w) * (1 - A/Bbpt)^(-1/w) / (phi * Bo)."""
    _validate(total_shares, balance_out, swap_fee)
    if amount_in >= total_shares:
        raise AmountOutsideDomainError(f"amount_in {amount_in} >= total shares {total_shares}")
    phi = _join_fee_factor(weight, swap_fee)
    base = ONE - amount_in / total_shares
    return (ONE - weight) * base ** (-ONE / weight) / (phi * balance_out)


def spot_price_bpt_to_token_exact_out(
    balance_out: Decimal,
    weight: Decimal,
    total_shares: Decimal,
    swap_fee: Decimal,
    amount_out: Decimal,
) -> Decimal:
    """SP = Bbpt * w * (1 - A/(phi*Bo))^(w-1) / (phi * Bo)."""
    _validate(total_shares, balance_out, swap_fee)
    phi = _join_fee_factor(weight, swap_fee)
    if amount_out >= phi * balance_out:
        raise AmountOutsideDomainError(f"amount_out {amount_out} exceeds exit capacity")
    base = ONE - amount_out / (phi * balance_out)
    return total_shares * weight * base ** (weight - ONE) / (phi * balance_out)


def derivative_bpt_to_token_exact_out(
    balance_out: Decimal,
    weight: Decimal,
    total_shares: Decimal,
    swap_fee: Decimal,
    amount_out: Decimal,
) -> Decimal:
    """dSP/dA = Bbpt * w * (1 - w) * (1 - A/(phi*Bo))^(w-2) / (phi*Bo)^2."""
    _validate(total_shares, balance_out, swap_fee)
    phi = _join_fee_factor(weight, swap_fee)
    capacity = phi * balance_out
    if amount_out >= capacity:
        raise AmountOutsideDomainError(f"amount_out {amount_out} exceeds exit capacity")
    base = ONE - amount_out / capacity
    return total_shares * weight * (ONE - weight) * base ** (weight - Decimal(2)) / (capacity**2)


__all__ = [
    "calc_bpt_in_given_exact_token_out",
    "calc_bpt_out_given_exact_token_in",
    "calc_in_given_out",
    "calc_out_given_in",
    "calc_token_in_given_exact_bpt_out",
    "calc_token_out_given_exact_bpt_in",
    "derivative_bpt_to_token_exact_in",
    "derivative_bpt_to_token_exact_out",
    "derivative_spot_price_after_swap_exact_in",
    "derivative_spot_price_after_swap_exact_out",
    "derivative_token_to_bpt_exact_in",
    "derivative_token_to_bpt_exact_out",
    "spot_price_after_swap_exact_in",
    "spot_price_after_swap_exact_out",
    "spot_price_bpt_to_token_exact_in",
    "spot_price_bpt_to_token_exact_out",
    "spot_price_token_to_bpt_exact_in",
    "spot_price_token_to_bpt_exact_out",
]
