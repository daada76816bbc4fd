"""Balancer error classes.

Every error carries a machine-readable ``kind`` and the operands that
triggered it, so callers can branch on the kind instead of parsing
messages. Arithmetic kinds map to Balancer V2 protocol error codes.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, ClassVar


class ErrorKind(str, Enum):
    """Kinds of failures raised by the math core."""

    # Arithmetic domain
    ADD_OVERFLOW = "AddOverflow"
    SUB_OVERFLOW = "SubOverflow"
    MUL_OVERFLOW = "MulOverflow"
    ZERO_DIVISION = "ZeroDivision"
    DIV_INTERNAL = "DivInternal"
    X_OUT_OF_BOUNDS = "XOutOfBounds"
    Y_OUT_OF_BOUNDS = "YOutOfBounds"
    PRODUCT_OUT_OF_BOUNDS = "ProductOutOfBounds"
    INVALID_EXPONENT = "InvalidExponent"
    ZERO_INVARIANT = "ZeroInvariant"

    # Convergence
    STABLE_INVARIANT_DIDNT_CONVERGE = "StableInvariantDidntConverge"
    STABLE_GET_BALANCE_DIDNT_CONVERGE = "StableGetBalanceDidntConverge"

    # Input validation
    INPUT_LENGTH_MISMATCH = "InputLengthMismatch"
    MISSING_DECIMALS = "MissingDecimals"
    UNSUPPORTED_DECIMALS = "UnsupportedDecimals"
    MISSING_AMP = "MissingAmp"
    MISSING_WEIGHT = "MissingWeight"
    INVALID_WEIGHTS = "InvalidWeights"
    MISSING_PRICE_RATE = "MissingPriceRate"
    TOKEN_MISMATCH = "TokenMismatch"
    UNSUPPORTED_POOL_TYPE = "UnsupportedPoolType"
    NOT_IMPLEMENTED_FOR_POOL_TYPE = "NotImplementedForPoolType"

    # Ratio limits
    MAX_IN_RATIO = "MaxInRatio"
    MAX_OUT_RATIO = "MaxOutRatio"


class BalancerError(Exception):
    """Base error for Balancer math operations.

    Attributes:
        kind: The ErrorKind of this failure
        operands: Values involved in the failed operation
    """

    kind: ClassVar[ErrorKind]

    def __init__(self, message: str | None = None, **operands: Any) -> None:
        self.operands: dict[str, Any] = operands
        if message is None:
            details = ", ".join(f"{k}={v}" for k, v in operands.items())
            message = f"{self.kind.value}({details})" if details else self.kind.value
        super().__init__(message)


# =============================================================================
# Arithmetic domain errors
# =============================================================================


class BalancerArithmeticError(BalancerError, ArithmeticError):
    """An arithmetic precondition was violated."""


class AddOverflow(BalancerArithmeticError):
    """Error 000: Sum exceeds the 256-bit word."""

    kind = ErrorKind.ADD_OVERFLOW


class SubOverflow(BalancerArithmeticError):
    """Error 001: Subtrahend is larger than minuend."""

    kind = ErrorKind.SUB_OVERFLOW


class MulOverflow(BalancerArithmeticError):
    """Error 003: Product fails the inverse check or exceeds the word."""

    kind = ErrorKind.MUL_OVERFLOW


class ZeroDivision(BalancerArithmeticError):
    """Error 004: Division by zero."""

    kind = ErrorKind.ZERO_DIVISION


class DivInternal(BalancerArithmeticError):
    """Error 005: Inflated dividend exceeds the word."""

    kind = ErrorKind.DIV_INTERNAL


class XOutOfBounds(BalancerArithmeticError):
    """Error 006: Base x is out of valid range."""

    kind = ErrorKind.X_OUT_OF_BOUNDS


class YOutOfBounds(BalancerArithmeticError):
    """Error 007: Exponent y exceeds MILD_EXPONENT_BOUND."""

    kind = ErrorKind.Y_OUT_OF_BOUNDS


class ProductOutOfBounds(BalancerArithmeticError):
    """Error 008: Result of y * ln(x) is outside valid range for exp."""

    kind = ErrorKind.PRODUCT_OUT_OF_BOUNDS


class InvalidExponent(BalancerArithmeticError):
    """Error 009: Exponent is outside [MIN_NATURAL_EXPONENT, MAX_NATURAL_EXPONENT]."""

    kind = ErrorKind.INVALID_EXPONENT


class ZeroInvariant(BalancerArithmeticError):
    """Error 311: Weighted invariant evaluated to zero."""

    kind = ErrorKind.ZERO_INVARIANT


# =============================================================================
# Convergence errors
# =============================================================================


class ConvergenceError(BalancerError):
    """An iterative solver exceeded its iteration budget."""


class StableInvariantDidntConverge(ConvergenceError):
    """Error 321: Newton iteration for stable invariant D did not converge."""

    kind = ErrorKind.STABLE_INVARIANT_DIDNT_CONVERGE


class StableGetBalanceDidntConverge(ConvergenceError):
    """Error 322: Newton iteration for stable balance Y did not converge."""

    kind = ErrorKind.STABLE_GET_BALANCE_DIDNT_CONVERGE


# =============================================================================
# Input validation errors
# =============================================================================


class PoolInputError(BalancerError, ValueError):
    """The pool snapshot or call arguments are incomplete or inconsistent."""


class InputLengthMismatch(PoolInputError):
    kind = ErrorKind.INPUT_LENGTH_MISMATCH


class MissingDecimals(PoolInputError):
    kind = ErrorKind.MISSING_DECIMALS


class UnsupportedDecimals(PoolInputError):
    """Tokens with more than 18 decimals cannot be upscaled."""

    kind = ErrorKind.UNSUPPORTED_DECIMALS


class MissingAmp(PoolInputError):
    kind = ErrorKind.MISSING_AMP


class MissingWeight(PoolInputError):
    kind = ErrorKind.MISSING_WEIGHT


class InvalidWeights(PoolInputError):
    """Normalized weights of a weighted pool do not sum to one."""

    kind = ErrorKind.INVALID_WEIGHTS


class MissingPriceRate(PoolInputError):
    kind = ErrorKind.MISSING_PRICE_RATE


class TokenMismatch(PoolInputError):
    kind = ErrorKind.TOKEN_MISMATCH


class UnsupportedPoolType(PoolInputError):
    kind = ErrorKind.UNSUPPORTED_POOL_TYPE


class NotImplementedForPoolType(PoolInputError):
    """Operation has no implementation for this pool family (e.g. Linear)."""

    kind = ErrorKind.NOT_IMPLEMENTED_FOR_POOL_TYPE


# =============================================================================
# Ratio-limit errors
# =============================================================================


class RatioLimitError(BalancerError):
    """A single operation would move the pool beyond a protocol bound."""


class MaxInRatio(RatioLimitError):
    """Error 304: Input amount exceeds 30% of balance_in."""

    kind = ErrorKind.MAX_IN_RATIO


class MaxOutRatio(RatioLimitError):
    """Error 305: Output amount exceeds 30% of balance_out."""

    kind = ErrorKind.MAX_OUT_RATIO
