"""Tests for stable pool math."""

import pytest

from balancer_math.config import MathConfig
from balancer_math.constants import ONE
from balancer_math.errors import (
    InputLengthMismatch,
    StableGetBalanceDidntConverge,
    StableInvariantDidntConverge,
    ZeroDivision,
)
from balancer_math.pools import stable_math

AMP = 100 * 1000  # A=100 with AMP_PRECISION
MILLION = 10**6 * ONE
BALANCED = [MILLION, MILLION, MILLION]
SUPPLY = 3 * MILLION
UNEVEN = [MILLION, 2 * MILLION, MILLION // 2]
DRAINED = [MILLION, MILLION, 0]


class TestInvariant:
    def test_equal_balances_converge_to_sum(self):
        assert stable_math.calculate_invariant(AMP, BALANCED, True) == 3 * MILLION

    def test_deterministic(self):
        first = stable_math.calculate_invariant(AMP, UNEVEN, True)
        second = stable_math.calculate_invariant(AMP, UNEVEN, True)
        assert first == second

    def test_larger_balance_increases_invariant(self):
        base = stable_math.calculate_invariant(AMP, BALANCED, False)
        bumped = stable_math.calculate_invariant(AMP, [MILLION, MILLION + ONE, MILLION], False)
        assert bumped > base

    def test_round_up_not_below_round_down(self):
        up = stable_math.calculate_invariant(AMP, UNEVEN, True)
        down = stable_math.calculate_invariant(AMP, UNEVEN, False)
        assert up >= down

    def test_uneven_invariant_below_sum(self):
        invariant = stable_math.calculate_invariant(AMP, UNEVEN, True)
        assert invariant < sum(UNEVEN)

    def test_empty_pool(self):
        assert stable_math.calculate_invariant(AMP, [0, 0, 0], True) == 0

    def test_iteration_budget(self):
        config = MathConfig(stable_max_iterations=1)
        with pytest.raises(StableInvariantDidntConverge):
            stable_math.calculate_invariant(AMP, UNEVEN, True, config=config)


class TestTokenBalance:
    def test_recovers_balance(self):
        invariant = stable_math.calculate_invariant(AMP, BALANCED, True)
        balance = stable_math.get_token_balance_given_invariant_and_all_other_balances(
            AMP, BALANCED, invariant, 0
        )
        assert abs(balance - MILLION) <= 10

    def test_iteration_budget(self):
        invariant = stable_math.calculate_invariant(AMP, UNEVEN, True)
        config = MathConfig(stable_max_iterations=1)
        with pytest.raises(StableGetBalanceDidntConverge):
            stable_math.get_token_balance_given_invariant_and_all_other_balances(
                AMP, UNEVEN, invariant, 2, config=config
            )

    def test_index_out_of_range(self):
        with pytest.raises(IndexError):
            stable_math.get_token_balance_given_invariant_and_all_other_balances(
                AMP, BALANCED, 3 * MILLION, 3
            )


class TestSwaps:
    def test_out_given_in_near_one_to_one(self):
        out = stable_math.calc_out_given_in(AMP, BALANCED, 0, 1, 1000 * ONE)
        assert 999 * ONE < out < 1000 * ONE

    def test_in_given_out_near_one_to_one(self):
        amount_in = stable_math.calc_in_given_out(AMP, BALANCED, 0, 1, 1000 * ONE)
        assert 1000 * ONE < amount_in < 1001 * ONE

    def test_same_token(self):
        with pytest.raises(ValueError):
            stable_math.calc_out_given_in(AMP, BALANCED, 1, 1, ONE)

    def test_index_out_of_range(self):
        with pytest.raises(IndexError):
            stable_math.calc_out_given_in(AMP, BALANCED, 0, 5, ONE)


class TestJoinExit:
    def test_proportional_join(self):
        bpt_out = stable_math.calc_bpt_out_given_exact_tokens_in(
            AMP, BALANCED, [1000 * ONE] * 3, SUPPLY, 0
        )
        assert bpt_out == 3000 * ONE

    def test_single_sided_join_pays_fee(self):
        amounts = [3000 * ONE, 0, 0]
        without_fee = stable_math.calc_bpt_out_given_exact_tokens_in(
            AMP, BALANCED, amounts, SUPPLY, 0
        )
        with_fee = stable_math.calc_bpt_out_given_exact_tokens_in(
            AMP, BALANCED, amounts, SUPPLY, ONE // 100
        )
        assert 0 < with_fee < without_fee

    def test_join_length_mismatch(self):
        with pytest.raises(InputLengthMismatch):
            stable_math.calc_bpt_out_given_exact_tokens_in(AMP, BALANCED, [ONE], SUPPLY, 0)

    def test_proportional_exit_exact_tokens_out(self):
        bpt_in = stable_math.calc_bpt_in_given_exact_tokens_out(
            AMP, BALANCED, [1000 * ONE] * 3, SUPPLY, 0
        )
        assert bpt_in == 3000 * ONE

    def test_single_sided_exit_pays_fee(self):
        amounts = [3000 * ONE, 0, 0]
        without_fee = stable_math.calc_bpt_in_given_exact_tokens_out(
            AMP, BALANCED, amounts, SUPPLY, 0
        )
        with_fee = stable_math.calc_bpt_in_given_exact_tokens_out(
            AMP, BALANCED, amounts, SUPPLY, ONE // 100
        )
        assert with_fee > without_fee

    def test_single_token_exit(self):
        out = stable_math.calc_token_out_given_exact_bpt_in(
            AMP, BALANCED, 0, 3000 * ONE, SUPPLY, 0
        )
        assert 2990 * ONE < out <= 3000 * ONE

    def test_proportional_exit(self):
        amounts = stable_math.calc_tokens_out_given_exact_bpt_in(BALANCED, 3000 * ONE, SUPPLY)
        assert amounts == [1000 * ONE] * 3


class TestSpotPrice:
    def test_balanced_bpt_spot_price(self):
        """Supply equal to the invariant prices each token at one BPT."""
        assert stable_math.calc_bpt_spot_price(AMP, BALANCED, SUPPLY, 0) == ONE

    def test_balanced_pair_without_fee(self):
        assert stable_math.calc_spot_price(AMP, BALANCED, 0, 1, 0) == ONE

    def test_fee_grosses_up_price(self):
        price = stable_math.calc_spot_price(AMP, BALANCED, 0, 1, 4 * ONE // 10000)
        assert price == 1000400160064025611  # ceil(1 / 0.9996)

    def test_scarce_token_costs_more(self):
        balances = [2 * MILLION, MILLION, MILLION]
        assert stable_math.calc_spot_price(AMP, balances, 0, 1, 0) > ONE
        assert stable_math.calc_spot_price(AMP, balances, 1, 0, 0) < ONE

    def test_bpt_spot_price_with_empty_balance(self):
        with pytest.raises(ZeroDivision):
            stable_math.calc_bpt_spot_price(AMP, DRAINED, SUPPLY, 0)

    def test_pair_price_with_empty_balance(self):
        with pytest.raises(ZeroDivision):
            stable_math.calc_spot_price(AMP, DRAINED, 0, 1, 0)
