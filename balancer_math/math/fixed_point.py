"""Balancer FixedPoint math library.

18-decimal fixed-point arithmetic matching Balancer's FixedPoint.sol. All
values are non-negative integers scaled by 10^18, and every division
states its rounding direction:
https://github.com/balancer-labs/balancer-v2-monorepo/blob/master/pkg/solidity-utils/contracts/math/FixedPoint.sol

The 256-bit word of the EVM is enforced explicitly so that results (and
failures) match the on-chain contracts even though Python integers are
unbounded.
"""

from __future__ import annotations

from balancer_math.config import DEFAULT_MATH_CONFIG
from balancer_math.constants import FOUR, MAX_UINT256, ONE, TWO
from balancer_math.errors import AddOverflow, DivInternal, MulOverflow, SubOverflow, ZeroDivision
from balancer_math.math import log_exp

__all__ = [
    "add",
    "sub",
    "mul_down",
    "mul_up",
    "div_down",
    "div_up",
    "complement",
    "pow_down",
    "pow_up",
    "pow_up_v3",
]


def add(a: int, b: int) -> int:
    """Add two fixed-point values.

    Raises:
        AddOverflow: If the sum exceeds uint256
    """
    result = a + b
    if result > MAX_UINT256:
        raise AddOverflow(a=a, b=b)
    return result


def sub(a: int, b: int) -> int:
    """Subtract b from a.

    Raises:
        SubOverflow: If b > a
    """
    if b > a:
        raise SubOverflow(a=a, b=b)
    return a - b


def _checked_product(a: int, b: int) -> int:
    product = a * b
    # Inverse check from the Solidity source, plus the word bound it protects
    if not (a == 0 or product // a == b) or product > MAX_UINT256:
        raise MulOverflow(a=a, b=b)
    return product


def mul_down(a: int, b: int) -> int:
    """Multiply with floor rounding: (a * b) // 10^18"""
    return _checked_product(a, b) // ONE


def mul_up(a: int, b: int) -> int:
    """Multiply with ceiling rounding."""
    product = _checked_product(a, b)
    if product == 0:
        return 0
    return (product - 1) // ONE + 1


def _inflate(a: int, b: int) -> int:
    if b == 0:
        raise ZeroDivision(a=a, b=b)
    a_inflated = a * ONE
    if a_inflated > MAX_UINT256:
        raise DivInternal(a=a, b=b)
    return a_inflated


def div_down(a: int, b: int) -> int:
    """Divide with floor rounding: (a * 10^18) // b

    Raises:
        ZeroDivision: If b is zero
        DivInternal: If a * 10^18 exceeds uint256
    """
    a_inflated = _inflate(a, b)
    if a_inflated == 0:
        return 0
    return a_inflated // b


def div_up(a: int, b: int) -> int:
    """Divide with ceiling rounding: 1 + (a * 10^18 - 1) // b, or 0 when a == 0.

    Raises:
        ZeroDivision: If b is zero
        DivInternal: If a * 10^18 exceeds uint256
    """
    a_inflated = _inflate(a, b)
    if a_inflated == 0:
        return 0
    return (a_inflated - 1) // b + 1


def complement(x: int) -> int:
    """Return 1 - x, or 0 if x >= 1 (never negative)."""
    return ONE - x if x < ONE else 0


def _max_pow_error(raw: int, relative_error: int | None) -> int:
    if relative_error is None:
        relative_error = DEFAULT_MATH_CONFIG.max_pow_relative_error
    return mul_up(raw, relative_error) + 1


def pow_down(x: int, y: int, *, relative_error: int | None = None) -> int:
    """Compute x^y rounding down.

    The result is guaranteed not to exceed the true value: the raw LogExp
    result is reduced by its maximum relative error (1e-14 by default).
    """
    raw = log_exp.pow(x, y)
    max_error = _max_pow_error(raw, relative_error)
    if raw < max_error:
        return 0
    return raw - max_error


def pow_up(x: int, y: int, *, relative_error: int | None = None) -> int:
    """Compute x^y rounding up.

    The result is guaranteed not to be below the true value: the raw LogExp
    result is increased by its maximum relative error (1e-14 by default).
    """
    raw = log_exp.pow(x, y)
    return add(raw, _max_pow_error(raw, relative_error))


def pow_up_v3(x: int, y: int, *, relative_error: int | None = None) -> int:
    """Compute x^y rounding up, with exact shortcuts for exponents 1, 2 and 4.

    Later pool versions avoid the ln/exp round-trip for the exponents that
    occur in 50/50 and 80/20 pools.
    """
    if y == ONE:
        return x
    if y == TWO:
        return mul_up(x, x)
    if y == FOUR:
        square = mul_up(x, x)
        return mul_up(square, square)
    return pow_up(x, y, relative_error=relative_error)
