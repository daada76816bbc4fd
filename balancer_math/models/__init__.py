"""Pool snapshot models."""

from balancer_math.models.pool import Pool, PoolToken, PoolType, Price
from balancer_math.models.types import DecimalString, normalize_address

__all__ = ["Pool", "PoolToken", "PoolType", "Price", "DecimalString", "normalize_address"]
