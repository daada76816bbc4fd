"""Test helpers module for shared test utilities.

This module consolidates common test utilities to reduce duplication:
- constants: Token and pool addresses
- factories: Pool snapshot factory functions
"""

from tests.helpers.constants import (
    BAL,
    DAI,
    LINEAR_POOL,
    META_STABLE_POOL,
    PHANTOM_POOL,
    STABLE_POOL,
    TOKEN_DECIMALS,
    USDC,
    USDT,
    WEIGHTED_POOL,
    WETH,
    WSTETH,
)
from tests.helpers.factories import (
    make_linear_pool,
    make_meta_stable_pool,
    make_phantom_pool,
    make_pool,
    make_stable_pool,
    make_token,
    make_weighted_pool,
)

__all__ = [
    # Constants
    "WETH",
    "USDC",
    "DAI",
    "USDT",
    "BAL",
    "WSTETH",
    "TOKEN_DECIMALS",
    "WEIGHTED_POOL",
    "STABLE_POOL",
    "META_STABLE_POOL",
    "PHANTOM_POOL",
    "LINEAR_POOL",
    # Factories
    "make_token",
    "make_pool",
    "make_weighted_pool",
    "make_stable_pool",
    "make_meta_stable_pool",
    "make_phantom_pool",
    "make_linear_pool",
]
