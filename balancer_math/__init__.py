"""Balancer pool math - Python Implementation."""

from balancer_math.config import DEFAULT_MATH_CONFIG, MathConfig
from balancer_math.errors import BalancerError, ErrorKind
from balancer_math.liquidity import (
    Liquidity,
    PoolRepository,
    StaticPoolRepository,
    StaticTokenPriceRepository,
    TokenPriceRepository,
)
from balancer_math.models import Pool, PoolToken, PoolType, Price
from balancer_math.pool_api import ExitPoolAttributes, JoinPoolAttributes, PoolWithMethods

__version__ = "0.1.0"
__all__ = [
    "MathConfig",
    "DEFAULT_MATH_CONFIG",
    "BalancerError",
    "ErrorKind",
    "Pool",
    "PoolToken",
    "PoolType",
    "Price",
    "PoolWithMethods",
    "JoinPoolAttributes",
    "ExitPoolAttributes",
    "Liquidity",
    "PoolRepository",
    "TokenPriceRepository",
    "StaticPoolRepository",
    "StaticTokenPriceRepository",
    "__version__",
]
