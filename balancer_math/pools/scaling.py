"""Balancer scaling and slippage helpers.

Functions for converting between decimal strings and scaled integers,
scaling token amounts between native decimals and 18-decimal
fixed-point, and applying slippage tolerances.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation

from balancer_math.config import DEFAULT_MATH_CONFIG
from balancer_math.constants import ONE, POOL_DECIMALS
from balancer_math.errors import MissingDecimals, UnsupportedDecimals
from balancer_math.math import fixed_point as fp


def parse_fixed(value: str, decimals: int = POOL_DECIMALS) -> int:
    """Convert a decimal string to an integer scaled by 10^decimals.

    Digits beyond the target precision are truncated, never rounded up.

    Args:
        value: Base-10 decimal string (e.g. "1000.5")
        decimals: Target precision

    Returns:
        Scaled integer (e.g. parse_fixed("1.5", 6) == 1_500_000)

    Raises:
        ValueError: If value is not a decimal number or decimals is negative
    """
    if decimals < 0:
        raise ValueError(f"decimals must be non-negative, got {decimals}")
    try:
        # Normalise exponent notation ("1E-7") to plain digits
        plain = format(Decimal(value.strip()), "f")
    except (InvalidOperation, AttributeError) as err:
        raise ValueError(f"Not a decimal number: {value!r}") from err

    negative = plain.startswith("-")
    plain = plain.lstrip("+-")
    whole, _, fraction = plain.partition(".")
    fraction = fraction[:decimals].ljust(decimals, "0")
    scaled = int(whole or "0") * 10**decimals + int(fraction or "0")
    return -scaled if negative else scaled


def format_fixed(value: int, decimals: int = POOL_DECIMALS) -> str:
    """Convert a scaled integer back to a decimal string.

    Trailing zeros of the fraction are removed, and so is a bare ".0"
    (format_fixed(10**18) == "1").
    """
    negative = value < 0
    whole, fraction = divmod(abs(value), 10**decimals)
    text = str(whole)
    if decimals > 0:
        fraction_str = str(fraction).rjust(decimals, "0").rstrip("0")
        if fraction_str:
            text = f"{text}.{fraction_str}"
    return f"-{text}" if negative else text


def compute_scaling_factor(decimals: int | None) -> int:
    """Fixed-point scaling factor that normalizes a token to 18 decimals.

    Args:
        decimals: Token decimals (0..18)

    Returns:
        ONE * 10^(18 - decimals), e.g. 10^30 for 6-decimal tokens

    Raises:
        MissingDecimals: If decimals is None
        UnsupportedDecimals: If decimals > 18
    """
    if decimals is None:
        raise MissingDecimals()
    if decimals > POOL_DECIMALS or decimals < 0:
        raise UnsupportedDecimals(decimals=decimals)
    return ONE * 10 ** (POOL_DECIMALS - decimals)


def upscale(amount: int, scaling_factor: int) -> int:
    """Scale a native amount to 18 decimals (rounding down)."""
    return fp.mul_down(amount, scaling_factor)


def upscale_array(amounts: list[int], scaling_factors: list[int]) -> list[int]:
    """Scale a list of native amounts with their per-token factors."""
    return [upscale(a, sf) for a, sf in zip(amounts, scaling_factors, strict=True)]


def downscale_down(amount: int, scaling_factor: int) -> int:
    """Scale an 18-decimal result back to native decimals, rounding down."""
    return fp.div_down(amount, scaling_factor)


def downscale_up(amount: int, scaling_factor: int) -> int:
    """Scale an 18-decimal result back to native decimals, rounding up."""
    return fp.div_up(amount, scaling_factor)


def _slippage_delta(amount: int, slippage_bps: int) -> int:
    if slippage_bps < 0:
        raise ValueError(f"Slippage must be non-negative, got {slippage_bps}")
    return amount * slippage_bps // DEFAULT_MATH_CONFIG.bps_per_one


def add_slippage(amount: int, slippage_bps: int) -> int:
    """Increase an amount by a slippage tolerance in basis points.

    Used for maximum inputs (e.g. max BPT in).
    """
    return amount + _slippage_delta(amount, slippage_bps)


def sub_slippage(amount: int, slippage_bps: int) -> int:
    """Decrease an amount by a slippage tolerance in basis points.

    Used for minimum outputs (e.g. min BPT out).
    """
    return amount - _slippage_delta(amount, slippage_bps)
