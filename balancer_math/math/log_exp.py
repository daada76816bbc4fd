"""Balancer LogExpMath library.

Exponentiation and logarithm of 18-decimal fixed-point signed integers,
matching Balancer's on-chain LogExpMath.sol bit for bit:
https://github.com/balancer-labs/balancer-v2-monorepo/blob/master/pkg/solidity-utils/contracts/math/LogExpMath.sol

No floating point is used. Values are decomposed against a table of
precomputed powers of two (x_n) and their exponentials (a_n = e^x_n), and
the small remainder is handled by a Taylor series.
"""

from __future__ import annotations

from balancer_math.constants import ONE_18, ONE_20, ONE_36
from balancer_math.errors import (
    InvalidExponent,
    ProductOutOfBounds,
    XOutOfBounds,
    YOutOfBounds,
    ZeroDivision,
)

__all__ = [
    "pow",
    "exp",
    "ln",
    "log",
    "MAX_NATURAL_EXPONENT",
    "MIN_NATURAL_EXPONENT",
    "LN_36_LOWER_BOUND",
    "LN_36_UPPER_BOUND",
    "MILD_EXPONENT_BOUND",
]

# =============================================================================
# Constants (matching Solidity exactly)
# =============================================================================

MAX_NATURAL_EXPONENT = 130 * ONE_18  # e^130 is the max we can handle
MIN_NATURAL_EXPONENT = -41 * ONE_18  # e^-41 is close to zero

LN_36_LOWER_BOUND = ONE_18 - 10**17  # 0.9
LN_36_UPPER_BOUND = ONE_18 + 10**17  # 1.1

# 2^254 / ONE_20 - bounds the exponent to prevent overflow
MILD_EXPONENT_BOUND = 2**254 // ONE_20

# x_0 and x_1 are stored with 18 decimals, a_0 and a_1 without decimals
X0 = 128 * ONE_18  # 2^7
A0 = 38877084059945950922200000000000000000000000000000000000  # e^x0
X1 = 64 * ONE_18  # 2^6
A1 = 6235149080811616882910000000  # e^x1

# x_2 through x_11 and their exponentials are stored with 20 decimals
X_20 = (
    3_200_000_000_000_000_000_000,  # x2 = 2^5
    1_600_000_000_000_000_000_000,  # x3 = 2^4
    800_000_000_000_000_000_000,  # x4 = 2^3
    400_000_000_000_000_000_000,  # x5 = 2^2
    200_000_000_000_000_000_000,  # x6 = 2^1
    100_000_000_000_000_000_000,  # x7 = 2^0
    50_000_000_000_000_000_000,  # x8 = 2^-1
    25_000_000_000_000_000_000,  # x9 = 2^-2
    12_500_000_000_000_000_000,  # x10 = 2^-3
    6_250_000_000_000_000_000,  # x11 = 2^-4
)
A_20 = (
    7_896_296_018_268_069_516_100_000_000_000_000,  # e^32
    888_611_052_050_787_263_676_000_000,  # e^16
    298_095_798_704_172_827_474_000,  # e^8
    5_459_815_003_314_423_907_810,  # e^4
    738_905_609_893_065_022_723,  # e^2
    271_828_182_845_904_523_536,  # e^1
    164_872_127_070_012_814_685,  # e^0.5
    128_402_541_668_774_148_407,  # e^0.25
    113_314_845_306_682_631_683,  # e^0.125
    106_449_445_891_785_942_956,  # e^0.0625
)

# exp() only needs x2..x9; the remainder after x9 is small enough for the series
_EXP_TABLE_SIZE = 8


def _div_trunc(a: int, b: int) -> int:
    """Integer division with truncation toward zero (matching Solidity).

    Python's // operator rounds toward negative infinity, but Solidity
    truncates toward zero. This matters for negative numbers.

    Examples:
        Python: -7 // 3 = -3 (rounds toward -inf)
        Solidity: -7 / 3 = -2 (truncates toward zero)
    """
    if (a >= 0) == (b > 0):
        return a // b
    return -(abs(a) // abs(b))


def _mod_trunc(a: int, b: int) -> int:
    """Remainder with the sign of the dividend (Solidity's %)."""
    return a - _div_trunc(a, b) * b


# =============================================================================
# Core functions
# =============================================================================


def exp(x: int) -> int:
    """Compute e^x where x is 18-decimal fixed-point.

    Args:
        x: Exponent in 18-decimal fixed-point (can be negative).

    Returns:
        e^x as 18-decimal fixed-point integer.

    Raises:
        InvalidExponent: If x is outside [MIN_NATURAL_EXPONENT, MAX_NATURAL_EXPONENT]
    """
    if not (MIN_NATURAL_EXPONENT <= x <= MAX_NATURAL_EXPONENT):
        raise InvalidExponent(x=x)

    if x < 0:
        # e^-x = 1 / e^x; -x is positive so the recursion happens only once
        return (ONE_18 * ONE_18) // exp(-x)

    # First reduction uses 18 decimals since a0 is too large for 20
    if x >= X0:
        x -= X0
        first_an = A0
    elif x >= X1:
        x -= X1
        first_an = A1
    else:
        first_an = 1

    # Scale to 20 decimals for higher precision in the remaining steps
    x *= 100

    product = ONE_20
    for x_n, a_n in zip(X_20[:_EXP_TABLE_SIZE], A_20[:_EXP_TABLE_SIZE], strict=True):
        if x >= x_n:
            x -= x_n
            product = (product * a_n) // ONE_20

    # Taylor series: e^x = 1 + x + x^2/2! + x^3/3! + ... + x^12/12!
    series_sum = ONE_20
    term = x
    series_sum += term
    for i in range(2, 13):
        term = ((term * x) // ONE_20) // i
        series_sum += term

    return (((product * series_sum) // ONE_20) * first_an) // 100


def _ln(a: int) -> int:
    """Natural logarithm of a positive 18-decimal fixed-point value.

    After the a < 1 reflection every intermediate is positive, so floor
    division is identical to Solidity truncation here.
    """
    if a < ONE_18:
        # ln(a) = -ln(1/a)
        return -_ln((ONE_18 * ONE_18) // a)

    sum_val = 0
    if a >= A0 * ONE_18:
        a //= A0
        sum_val += X0
    if a >= A1 * ONE_18:
        a //= A1
        sum_val += X1

    # Scale up to 20 decimals
    sum_val *= 100
    a *= 100

    for x_n, a_n in zip(X_20, A_20, strict=True):
        if a >= a_n:
            a = (a * ONE_20) // a_n
            sum_val += x_n

    # ln(a) = 2 * arctanh(z) = 2 * (z + z^3/3 + z^5/5 + ...), z = (a-1)/(a+1)
    z = ((a - ONE_20) * ONE_20) // (a + ONE_20)
    z_squared = (z * z) // ONE_20

    num = z
    series_sum = num
    # 6 terms: z, z^3/3, ..., z^11/11
    for i in range(3, 12, 2):
        num = (num * z_squared) // ONE_20
        series_sum += num // i

    series_sum *= 2

    return (sum_val + series_sum) // 100


def _ln_36(x: int) -> int:
    """Natural logarithm with 36-decimal precision, for x close to one.

    Args:
        x: Value in 18-decimal fixed-point within (LN_36_LOWER_BOUND, LN_36_UPPER_BOUND)

    Returns:
        ln(x) as a 36-decimal fixed-point integer.
    """
    x *= ONE_18

    # z is negative when x < 1, so truncate like Solidity
    z = _div_trunc((x - ONE_36) * ONE_36, x + ONE_36)
    z_squared = _div_trunc(z * z, ONE_36)

    num = z
    series_sum = num
    # 8 terms: z, z^3/3, ..., z^15/15
    for i in range(3, 16, 2):
        num = _div_trunc(num * z_squared, ONE_36)
        series_sum += _div_trunc(num, i)

    return series_sum * 2


def ln(a: int) -> int:
    """Natural logarithm of a (18-decimal fixed-point, signed result).

    Raises:
        XOutOfBounds: If a is not positive
    """
    if a <= 0:
        raise XOutOfBounds(x=a)
    if LN_36_LOWER_BOUND < a < LN_36_UPPER_BOUND:
        return _div_trunc(_ln_36(a), ONE_18)
    return _ln(a)


def log(arg: int, base: int) -> int:
    """Logarithm of arg in the given base, both 18-decimal fixed-point."""
    if arg <= 0:
        raise XOutOfBounds(x=arg)
    if base <= 0:
        raise XOutOfBounds(x=base)

    if LN_36_LOWER_BOUND < base < LN_36_UPPER_BOUND:
        log_base = _ln_36(base)
    else:
        log_base = _ln(base) * ONE_18

    if LN_36_LOWER_BOUND < arg < LN_36_UPPER_BOUND:
        log_arg = _ln_36(arg)
    else:
        log_arg = _ln(arg) * ONE_18

    if log_base == 0:
        raise ZeroDivision(a=arg, b=base)

    return _div_trunc(log_arg * ONE_18, log_base)


def pow(x: int, y: int) -> int:  # noqa: A001
    """Compute x^y where both are 18-decimal fixed-point (non-negative).

    Args:
        x: Base (non-negative, below 2^255)
        y: Exponent (non-negative, below MILD_EXPONENT_BOUND)

    Returns:
        x^y as 18-decimal fixed-point

    Raises:
        XOutOfBounds: If x does not fit a signed 256-bit integer
        YOutOfBounds: If y exceeds MILD_EXPONENT_BOUND
        ProductOutOfBounds: If y * ln(x) is outside the exp() domain
    """
    if y == 0:
        # 0^0 is defined as 1, like the protocol
        return ONE_18
    if x == 0:
        return 0

    if x < 0 or x >> 255 != 0:
        raise XOutOfBounds(x=x)
    if y < 0 or y >= MILD_EXPONENT_BOUND:
        raise YOutOfBounds(y=y)

    if LN_36_LOWER_BOUND < x < LN_36_UPPER_BOUND:
        ln_36_x = _ln_36(x)
        # Split to keep the product within 256 bits
        logx_times_y = _div_trunc(ln_36_x, ONE_18) * y + _div_trunc(
            _mod_trunc(ln_36_x, ONE_18) * y, ONE_18
        )
    else:
        logx_times_y = _ln(x) * y
    logx_times_y = _div_trunc(logx_times_y, ONE_18)

    if not (MIN_NATURAL_EXPONENT <= logx_times_y <= MAX_NATURAL_EXPONENT):
        raise ProductOutOfBounds(x=x, y=y, product=logx_times_y)

    return exp(logx_times_y)
