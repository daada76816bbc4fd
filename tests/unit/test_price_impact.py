"""Tests for price impact calculations."""

import pytest

from balancer_math.constants import ONE
from balancer_math.errors import InputLengthMismatch, NotImplementedForPoolType
from balancer_math.pools.concerns import concerns_for
from balancer_math.pools.info import parse_pool_info
from balancer_math.pools.scaling import upscale_array
from balancer_math.price_impact import bpt_zero_price_impact, calc_price_impact


class TestBptZeroPriceImpact:
    def test_weighted(self, weighted_pool):
        """Balanced 50/50 pool with supply 2x balance: one BPT per token."""
        info = parse_pool_info(weighted_pool)
        assert bpt_zero_price_impact(info, [3 * ONE, 2 * ONE]) == 5 * ONE

    def test_stable_upscales_amounts(self, stable_pool):
        info = parse_pool_info(stable_pool)
        amounts = [1000 * ONE, 1000 * 10**6, 0]  # DAI, USDC (6 decimals), USDT
        assert bpt_zero_price_impact(info, amounts) == 2000 * ONE

    def test_phantom_excludes_bpt(self, phantom_pool):
        info = parse_pool_info(phantom_pool)
        assert bpt_zero_price_impact(info, [ONE, 10**6, 10**6]) == 3 * ONE

    def test_length_mismatch(self, weighted_pool):
        info = parse_pool_info(weighted_pool)
        with pytest.raises(InputLengthMismatch):
            bpt_zero_price_impact(info, [ONE])

    def test_phantom_length_counts_without_bpt(self, phantom_pool):
        info = parse_pool_info(phantom_pool)
        with pytest.raises(InputLengthMismatch):
            bpt_zero_price_impact(info, [0, ONE, 10**6, 10**6])

    def test_linear_not_implemented(self, linear_pool):
        info = parse_pool_info(linear_pool)
        with pytest.raises(NotImplementedForPoolType):
            bpt_zero_price_impact(info, [10**6, ONE])


class TestCalcPriceImpact:
    def test_join(self):
        assert calc_price_impact(99 * ONE, 100 * ONE) == ONE // 100

    def test_exit(self):
        assert calc_price_impact(101 * ONE, 100 * ONE, is_join=False) == ONE // 100

    def test_favorable_join_is_negative(self):
        """Negative impact is reported as is, not clamped."""
        assert calc_price_impact(110 * ONE, 100 * ONE) == -ONE // 10

    def test_favorable_exit_is_negative(self):
        assert calc_price_impact(90 * ONE, 100 * ONE, is_join=False) == -ONE // 10

    def test_small_single_sided_weighted_deposit(self, feeless_weighted_pool):
        """A deposit under 0.01% of the balance has less than 50 bps impact."""
        info = parse_pool_info(feeless_weighted_pool)
        amounts = [5 * ONE // 100, 0]
        bpt_out = concerns_for(info).bpt_out_given_exact_tokens_in(
            info, upscale_array(amounts, list(info.scaling_factors))
        )
        impact = calc_price_impact(bpt_out, bpt_zero_price_impact(info, amounts))
        assert 0 <= impact <= 5 * ONE // 10000
