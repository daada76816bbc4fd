"""Tests for pool snapshot models."""

from decimal import Decimal

import pytest
from pydantic import ValidationError

from balancer_math.models import Pool, PoolToken, Price, normalize_address
from tests.helpers import BAL, WEIGHTED_POOL, WETH, make_weighted_pool


class TestDecimalString:
    @pytest.mark.parametrize(
        "value,expected", [("1.5", "1.5"), (5, "5"), (Decimal("0.25"), "0.25")]
    )
    def test_accepted(self, value, expected):
        token = PoolToken(address=WETH, balance=value, decimals=18)
        assert token.balance == expected

    @pytest.mark.parametrize("value", ["-1", "abc", "NaN", "Infinity", True])
    def test_rejected(self, value):
        with pytest.raises(ValidationError):
            PoolToken(address=WETH, balance=value, decimals=18)

    def test_whitespace_stripped(self):
        token = PoolToken(address=WETH, balance=" 12.5 ", decimals=18)
        assert token.balance == "12.5"


class TestPoolToken:
    def test_invalid_address(self):
        with pytest.raises(ValidationError):
            PoolToken(address="0x1234", balance="1", decimals=18)

    def test_price_rate_alias(self):
        token = PoolToken.model_validate(
            {"address": WETH, "balance": "1", "decimals": 18, "priceRate": "1.05"}
        )
        assert token.price_rate == "1.05"

    def test_decimals_optional(self):
        assert PoolToken(address=WETH, balance="1").decimals is None


class TestPool:
    def test_token_addresses_normalized(self):
        pool = make_weighted_pool(tokens=(BAL.upper().replace("0X", "0x"), WETH))
        assert pool.token_addresses == [BAL, WETH]

    def test_get_token(self, weighted_pool):
        token = weighted_pool.get_token(WETH.upper().replace("0X", "0x"))
        assert token is not None
        assert normalize_address(token.address) == WETH

    def test_get_token_missing(self, weighted_pool):
        assert weighted_pool.get_token(WEIGHTED_POOL) is None

    def test_frozen(self, weighted_pool):
        with pytest.raises(ValidationError):
            weighted_pool.swap_fee = "0.5"

    def test_requires_pool_type(self):
        with pytest.raises(ValidationError):
            Pool.model_validate(
                {
                    "id": "0x01",
                    "address": WEIGHTED_POOL,
                    "swapFee": "0",
                    "totalShares": "1",
                    "tokens": [],
                }
            )


class TestPrice:
    def test_optional_fields(self):
        price = Price(usd="1.01")
        assert price.usd == "1.01"
        assert price.eth is None


class TestNormalizeAddress:
    def test_lowercases(self):
        assert normalize_address("0xABCDEF") == "0xabcdef"

    def test_adds_prefix(self):
        assert normalize_address("abcdef") == "0xabcdef"
