"""Tests for fixed-point exp, ln and pow."""

import pytest

from balancer_math.constants import ONE
from balancer_math.errors import (
    InvalidExponent,
    ProductOutOfBounds,
    XOutOfBounds,
    YOutOfBounds,
    ZeroDivision,
)
from balancer_math.math import log_exp

E = 2718281828459045235


class TestExp:
    def test_exp_zero(self):
        assert log_exp.exp(0) == ONE

    def test_exp_one(self):
        assert log_exp.exp(ONE) == E

    def test_exp_negative(self):
        assert abs(log_exp.exp(-ONE) - 367879441171442321) <= 1

    def test_exp_large(self):
        """e^64 uses the 18-decimal table entry."""
        result = log_exp.exp(64 * ONE)
        assert abs(result - 6235149080811616882910000000 * ONE) < result // 10**15

    def test_exp_above_max(self):
        with pytest.raises(InvalidExponent):
            log_exp.exp(log_exp.MAX_NATURAL_EXPONENT + 1)

    def test_exp_below_min(self):
        with pytest.raises(InvalidExponent):
            log_exp.exp(log_exp.MIN_NATURAL_EXPONENT - 1)


class TestLn:
    def test_ln_one(self):
        assert log_exp.ln(ONE) == 0

    def test_ln_e(self):
        assert abs(log_exp.ln(E) - ONE) <= 10**4

    def test_ln_half_is_negative(self):
        assert abs(log_exp.ln(ONE // 2) + 693147180559945309) <= 10**4

    def test_ln_close_to_one_uses_high_precision(self):
        """ln(1.05) goes through the 36-decimal series."""
        assert abs(log_exp.ln(105 * ONE // 100) - 48790164169432003) <= 10

    @pytest.mark.parametrize("a", [0, -ONE])
    def test_ln_non_positive(self, a):
        with pytest.raises(XOutOfBounds):
            log_exp.ln(a)


class TestLog:
    def test_log_base_two(self):
        assert abs(log_exp.log(8 * ONE, 2 * ONE) - 3 * ONE) <= 10**4

    def test_log_base_one_fails(self):
        with pytest.raises(ZeroDivision):
            log_exp.log(5 * ONE, ONE)

    def test_log_non_positive_argument(self):
        with pytest.raises(XOutOfBounds):
            log_exp.log(0, 2 * ONE)


class TestPow:
    @pytest.mark.parametrize("x", [1, ONE // 2, ONE, 5 * ONE, 10**30])
    def test_zero_exponent_is_one(self, x):
        assert log_exp.pow(x, 0) == ONE

    @pytest.mark.parametrize("y", [1, ONE, 3 * ONE])
    def test_zero_base_is_zero(self, y):
        assert log_exp.pow(0, y) == 0

    @pytest.mark.parametrize("y", [1, ONE, 10 * ONE, 1000 * ONE])
    def test_base_one_is_one(self, y):
        assert log_exp.pow(ONE, y) == ONE

    def test_integer_power(self):
        assert abs(log_exp.pow(2 * ONE, 3 * ONE) - 8 * ONE) <= 10**5

    def test_square_root(self):
        assert abs(log_exp.pow(4 * ONE, ONE // 2) - 2 * ONE) <= 10**5

    def test_base_too_large(self):
        with pytest.raises(XOutOfBounds):
            log_exp.pow(2**255, ONE)

    def test_negative_base(self):
        with pytest.raises(XOutOfBounds):
            log_exp.pow(-1, ONE)

    def test_exponent_too_large(self):
        with pytest.raises(YOutOfBounds):
            log_exp.pow(2 * ONE, log_exp.MILD_EXPONENT_BOUND)

    def test_product_out_of_bounds(self):
        """ln(2) * 200 is above the largest natural exponent (130)."""
        with pytest.raises(ProductOutOfBounds):
            log_exp.pow(2 * ONE, 200 * ONE)
