"""Shared type definitions for pool snapshot models."""

from decimal import Decimal, InvalidOperation
from typing import Annotated, Any

from pydantic import BeforeValidator, Field


def validate_decimal_string(value: Any) -> str:
    """Validate that a value is a non-negative base-10 decimal string.

    Args:
        value: Value to validate (string, int or Decimal)

    Returns:
        The value as a decimal string

    Raises:
        ValueError: If value is not a finite non-negative decimal number
    """
    if isinstance(value, bool):
        raise ValueError(f"Decimal string must be string or number, got {type(value).__name__}")
    if isinstance(value, int | Decimal):
        value = str(value)
    if not isinstance(value, str):
        raise ValueError(f"Decimal string must be string or number, got {type(value).__name__}")

    try:
        parsed = Decimal(value.strip())
    except InvalidOperation as err:
        raise ValueError(f"Not a decimal number: '{value}'") from err

    if not parsed.is_finite():
        raise ValueError(f"Decimal string must be finite: '{value}'")
    if parsed < 0:
        raise ValueError(f"Decimal string cannot be negative: '{value}'")

    return value.strip()


# Human-readable non-negative number as a base-10 string (e.g. "1000.5")
DecimalString = Annotated[
    str,
    BeforeValidator(validate_decimal_string),
    Field(description="Non-negative base-10 decimal string"),
]

# Ethereum address (40 hex chars after 0x prefix)
Address = Annotated[str, Field(pattern=r"^0x[a-fA-F0-9]{40}$")]


def normalize_address(address: str) -> str:
    """Normalize an Ethereum address to lowercase with 0x prefix."""
    addr = address.lower()
    if not addr.startswith("0x"):
        addr = "0x" + addr
    return addr
