"""Checked integer arithmetic (Balancer's ``Math`` library).

Operations on unscaled non-negative integers that fail with a named
error instead of producing a value the EVM would reject:
- Sums and products beyond the 256-bit word raise AddOverflow/MulOverflow
- Subtraction underflow raises SubOverflow
- Division by zero raises ZeroDivision

Python integers never wrap, so the word bound is checked explicitly.

Usage pattern:
    from balancer_math.math import integer as m

    d_p = m.div(m.mul(m.mul(d_p, balance), n), invariant, round_up)
"""

from __future__ import annotations

from balancer_math.constants import MAX_UINT256
from balancer_math.errors import AddOverflow, MulOverflow, SubOverflow, ZeroDivision

__all__ = ["add", "sub", "mul", "div", "div_down", "div_up"]


def add(a: int, b: int) -> int:
    """Add two values.

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


def mul(a: int, b: int) -> int:
    """Multiply two values.

    Raises:
        MulOverflow: If the product exceeds uint256
    """
    product = a * b
    if not (a == 0 or product // a == b) or product > MAX_UINT256:
        raise MulOverflow(a=a, b=b)
    return product


def div_down(a: int, b: int) -> int:
    """Integer division rounding down.

    Raises:
        ZeroDivision: If b is zero
    """
    if b == 0:
        raise ZeroDivision(a=a, b=b)
    return a // b


def div_up(a: int, b: int) -> int:
    """Integer division rounding up.

    Raises:
        ZeroDivision: If b is zero
    """
    if b == 0:
        raise ZeroDivision(a=a, b=b)
    if a == 0:
        return 0
    return 1 + (a - 1) // b


def div(a: int, b: int, round_up: bool) -> int:
    """Integer division in the requested rounding direction."""
    return div_up(a, b) if round_up else div_down(a, b)
