"""Tests for nested pool liquidity aggregation."""

import asyncio

import pytest

from balancer_math.errors import NotImplementedForPoolType, UnsupportedPoolType
from balancer_math.liquidity import Liquidity, StaticPoolRepository, StaticTokenPriceRepository
from balancer_math.models import Pool, Price
from tests.helpers import (
    BAL,
    DAI,
    PHANTOM_POOL,
    USDC,
    USDT,
    WEIGHTED_POOL,
    WETH,
    WSTETH,
    make_phantom_pool,
    make_pool,
    make_token,
)

PRICES = {
    BAL: Price(usd="5"),
    WETH: Price(usd="2000"),
    DAI: Price(usd="1"),
    USDC: Price(usd="1"),
    USDT: Price(usd="1"),
}


def get_liquidity(
    pool: Pool, pools: list[Pool] | None = None, prices: dict[str, Price] | None = None
) -> str:
    liquidity = Liquidity(
        StaticPoolRepository(pools or []),
        StaticTokenPriceRepository(PRICES if prices is None else prices),
    )
    return asyncio.run(liquidity.get_liquidity(pool))


class TestWeighted:
    def test_all_priced(self, weighted_pool):
        assert get_liquidity(weighted_pool) == "2005000"

    def test_missing_price_extrapolated(self, weighted_pool):
        assert get_liquidity(weighted_pool, prices={BAL: Price(usd="5")}) == "10000"

    def test_price_without_usd(self, weighted_pool):
        prices = {BAL: Price(usd="5"), WETH: Price(eth="1")}
        assert get_liquidity(weighted_pool, prices=prices) == "10000"


class TestStable:
    def test_stable(self, stable_pool):
        assert get_liquidity(stable_pool) == "3000000"

    def test_unpriced_token_at_average(self, stable_pool):
        prices = {DAI: Price(usd="1"), USDC: Price(usd="1.02")}
        assert get_liquidity(stable_pool, prices=prices) == "3030000"

    def test_meta_stable_uses_price_rate(self, meta_stable_pool):
        prices = {WETH: Price(usd="2000")}
        # wstETH (rate 1.1) valued at WETH's price: (10000 * 1.1 + 10000) * 2000
        assert get_liquidity(meta_stable_pool, prices=prices) == "42000000"

    def test_phantom_ignores_its_own_bpt(self, phantom_pool):
        assert get_liquidity(phantom_pool) == "3000000"


class TestNested:
    def test_sub_pool_share(self):
        """The parent holds 10% of the phantom pool's BPT."""
        sub_pool = make_phantom_pool()
        parent = make_pool(
            "Weighted",
            WEIGHTED_POOL,
            [
                make_token(WETH, "1000", weight="0.5"),
                make_token(PHANTOM_POOL, "300000", weight="0.5"),
            ],
        )
        assert get_liquidity(parent, pools=[sub_pool]) == "2300000"

    def test_sub_pool_failure_propagates(self, linear_pool):
        parent = make_pool(
            "Stable",
            WEIGHTED_POOL,
            [make_token(DAI, "1000"), make_token(linear_pool.address, "1000")],
            amp="100",
        )
        with pytest.raises(NotImplementedForPoolType):
            get_liquidity(parent, pools=[linear_pool])


class TestFailures:
    def test_linear(self, linear_pool):
        with pytest.raises(NotImplementedForPoolType):
            get_liquidity(linear_pool)

    def test_unsupported_pool_type(self, weighted_pool):
        pool = weighted_pool.model_copy(update={"pool_type": "FX"})
        with pytest.raises(UnsupportedPoolType):
            get_liquidity(pool)

    def test_price_repository_failure_propagates(self, weighted_pool):
        class FailingPrices:
            async def find(self, address: str) -> Price | None:
                raise RuntimeError("price source unavailable")

        liquidity = Liquidity(StaticPoolRepository(), FailingPrices())
        with pytest.raises(RuntimeError, match="price source unavailable"):
            asyncio.run(liquidity.get_liquidity(weighted_pool))


class TestRepositories:
    def test_pool_lookup_is_case_insensitive(self, weighted_pool):
        repository = StaticPoolRepository([weighted_pool])
        found = asyncio.run(repository.find_by_address(WEIGHTED_POOL.upper().replace("0X", "0x")))
        assert found is weighted_pool

    def test_unknown_price(self):
        repository = StaticTokenPriceRepository({})
        assert asyncio.run(repository.find(WSTETH)) is None
