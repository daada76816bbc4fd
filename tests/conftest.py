"""Pytest configuration and fixtures."""

import pytest

from balancer_math.models import Pool
from tests.helpers import (
    make_linear_pool,
    make_meta_stable_pool,
    make_phantom_pool,
    make_stable_pool,
    make_weighted_pool,
)


@pytest.fixture
def weighted_pool() -> Pool:
    """50/50 BAL/WETH pool, 1000 of each, 0.3% fee."""
    return make_weighted_pool()


@pytest.fixture
def feeless_weighted_pool() -> Pool:
    """50/50 BAL/WETH pool, 1000 of each, no fee."""
    return make_weighted_pool(swap_fee="0")


@pytest.fixture
def stable_pool() -> Pool:
    """DAI/USDC/USDT pool, 1M of each, amp 100."""
    return make_stable_pool()


@pytest.fixture
def meta_stable_pool() -> Pool:
    """wstETH/WETH pool with a 1.1 price rate on wstETH."""
    return make_meta_stable_pool()


@pytest.fixture
def phantom_pool() -> Pool:
    """DAI/USDC/USDT phantom stable pool holding its own BPT."""
    return make_phantom_pool()


@pytest.fixture
def linear_pool() -> Pool:
    """Aave linear pool."""
    return make_linear_pool()
