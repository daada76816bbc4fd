"""Per pool family capabilities.

Each pool family implements the same capability set on its parsed pool
info: join and exit amounts, spot prices, BPT spot prices (for price
impact) and liquidity totals. Inputs and outputs of the math methods are
upscaled 18-decimal integers.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Generic, TypeVar

import structlog

from balancer_math.constants import ONE
from balancer_math.errors import NotImplementedForPoolType, UnsupportedPoolType
from balancer_math.math import fixed_point as fp
from balancer_math.models.pool import PoolType

from . import stable_math, weighted_math
from .info import (
    LinearPoolInfo,
    MetaStablePoolInfo,
    PoolInfo,
    StablePhantomPoolInfo,
    StablePoolInfo,
    WeightedPoolInfo,
)

logger = structlog.get_logger()

InfoT = TypeVar("InfoT")


@dataclass(frozen=True)
class LiquidityToken:
    """A directly priced token taking part in a liquidity total.

    Attributes:
        address: Token address
        balance: Balance in 18-decimal fixed-point
        price: USD price in 18-decimal fixed-point, or None if unknown
        weight: Normalized weight (weighted pools only)
        price_rate: Price rate in 18-decimal fixed-point (ONE if not rated)
    """

    address: str
    balance: int
    price: int | None
    weight: int | None = None
    price_rate: int = ONE


def _weight_or_one(token: LiquidityToken) -> int:
    # Unweighted tokens count as a full share
    return ONE if token.weight is None else token.weight


class PoolConcerns(ABC, Generic[InfoT]):
    """Capability set of a pool family."""

    family: str

    @abstractmethod
    def bpt_out_given_exact_tokens_in(self, info: InfoT, amounts_in: list[int]) -> int:
        """BPT minted for an exact-tokens-in join."""
        ...

    @abstractmethod
    def bpt_in_given_exact_tokens_out(self, info: InfoT, amounts_out: list[int]) -> int:
        """BPT burned for an exact-tokens-out exit."""
        ...

    @abstractmethod
    def token_out_given_exact_bpt_in(self, info: InfoT, token_index: int, bpt_in: int) -> int:
        """Single-token exit amount for an exact BPT amount."""
        ...

    @abstractmethod
    def tokens_out_given_exact_bpt_in(self, info: InfoT, bpt_in: int) -> list[int]:
        """Proportional exit amounts for an exact BPT amount."""
        ...

    @abstractmethod
    def spot_price(self, info: InfoT, token_index_in: int, token_index_out: int) -> int:
        """Marginal price of token_out in units of token_in, fee included."""
        ...

    @abstractmethod
    def bpt_spot_price(self, info: InfoT, token_index: int) -> int:
        """BPT minted per unit of token at the margin."""
        ...

    @abstractmethod
    def calc_total_liquidity(self, tokens: list[LiquidityToken]) -> int:
        """USD value of the given tokens, 18-decimal fixed-point."""
        ...


class WeightedConcerns(PoolConcerns[WeightedPoolInfo]):
    """Weighted, Investment and LiquidityBootstrapping pools."""

    family = "Weighted"

    def bpt_out_given_exact_tokens_in(self, info: WeightedPoolInfo, amounts_in: list[int]) -> int:
        return weighted_math.calc_bpt_out_given_exact_tokens_in(
            list(info.balances), list(info.weights), amounts_in, info.total_shares, info.swap_fee
        )

    def bpt_in_given_exact_tokens_out(self, info: WeightedPoolInfo, amounts_out: list[int]) -> int:
        return weighted_math.calc_bpt_in_given_exact_tokens_out(
            list(info.balances), list(info.weights), amounts_out, info.total_shares, info.swap_fee
        )

    def token_out_given_exact_bpt_in(
        self, info: WeightedPoolInfo, token_index: int, bpt_in: int
    ) -> int:
        return weighted_math.calc_token_out_given_exact_bpt_in(
            info.balances[token_index],
            info.weights[token_index],
            bpt_in,
            info.total_shares,
            info.swap_fee,
        )

    def tokens_out_given_exact_bpt_in(self, info: WeightedPoolInfo, bpt_in: int) -> list[int]:
        return weighted_math.calc_tokens_out_given_exact_bpt_in(
            list(info.balances), bpt_in, info.total_shares
        )

    def spot_price(self, info: WeightedPoolInfo, token_index_in: int, token_index_out: int) -> int:
        return weighted_math.calc_spot_price(
            info.balances[token_index_in],
            info.weights[token_index_in],
            info.balances[token_index_out],
            info.weights[token_index_out],
            info.swap_fee,
        )

    def bpt_spot_price(self, info: WeightedPoolInfo, token_index: int) -> int:
        return weighted_math.calc_bpt_spot_price(
            info.total_shares, info.weights[token_index], info.balances[token_index]
        )

    def calc_total_liquidity(self, tokens: list[LiquidityToken]) -> int:
        """Value the priced tokens, then extrapolate to the full pool by weight."""
        sum_value = 0
        priced_weight = 0
        for token in tokens:
            if token.price is None:
                continue
            sum_value += token.balance * token.price
            priced_weight += _weight_or_one(token)

        if priced_weight == 0:
            return 0

        total_weight = sum(_weight_or_one(token) for token in tokens)
        # sum_value carries 36 decimals
        return sum_value * total_weight // priced_weight // ONE


class StableConcerns(PoolConcerns[StablePoolInfo]):
    """Stable pools; also the base for the rate-scaled stable families."""

    family = "Stable"

    def bpt_out_given_exact_tokens_in(self, info: StablePoolInfo, amounts_in: list[int]) -> int:
        return stable_math.calc_bpt_out_given_exact_tokens_in(
            info.amp, list(info.balances), amounts_in, info.total_shares, info.swap_fee
        )

    def bpt_in_given_exact_tokens_out(self, info: StablePoolInfo, amounts_out: list[int]) -> int:
        return stable_math.calc_bpt_in_given_exact_tokens_out(
            info.amp, list(info.balances), amounts_out, info.total_shares, info.swap_fee
        )

    def token_out_given_exact_bpt_in(
        self, info: StablePoolInfo, token_index: int, bpt_in: int
    ) -> int:
        return stable_math.calc_token_out_given_exact_bpt_in(
            info.amp, list(info.balances), token_index, bpt_in, info.total_shares, info.swap_fee
        )

    def tokens_out_given_exact_bpt_in(self, info: StablePoolInfo, bpt_in: int) -> list[int]:
        return stable_math.calc_tokens_out_given_exact_bpt_in(
            list(info.balances), bpt_in, info.total_shares
        )

    def spot_price(self, info: StablePoolInfo, token_index_in: int, token_index_out: int) -> int:
        return stable_math.calc_spot_price(
            info.amp, list(info.balances), token_index_in, token_index_out, info.swap_fee
        )

    def bpt_spot_price(self, info: StablePoolInfo, token_index: int) -> int:
        return stable_math.calc_bpt_spot_price(
            info.amp, list(info.balances), info.total_shares, token_index
        )

    def _effective_balance(self, token: LiquidityToken) -> int:
        return token.balance

    def calc_total_liquidity(self, tokens: list[LiquidityToken]) -> int:
        """Value the priced tokens; unpriced ones get their average price."""
        sum_balance = 0
        sum_value = 0
        for token in tokens:
            # Tokens without a price are valued in the second pass
            if token.price is None:
                continue
            balance = self._effective_balance(token)
            sum_value += balance * token.price
            sum_balance += balance

        if sum_balance == 0:
            return 0

        avg_price = sum_value // sum_balance
        for token in tokens:
            if token.price is not None:
                continue
            balance = self._effective_balance(token)
            sum_value += balance * avg_price
            sum_balance += balance

        return sum_value // ONE


class MetaStableConcerns(StableConcerns):
    """Meta-stable pools. Price rates are already folded into the scaling
    factors and balances of the parsed info, so the stable math applies as is.
    """

    family = "MetaStable"

    def _effective_balance(self, token: LiquidityToken) -> int:
        return fp.mul_down(token.balance, token.price_rate)


class StablePhantomConcerns(MetaStableConcerns):
    """Phantom (and composable) stable pools, with the BPT already removed."""

    family = "StablePhantom"


class LinearConcerns(PoolConcerns[LinearPoolInfo]):
    """Linear pools: no bonding-curve implementation, every capability fails."""

    family = "Linear"

    def _unsupported(self, operation: str) -> NotImplementedForPoolType:
        logger.warning("pool_operation_not_implemented", family=self.family, operation=operation)
        return NotImplementedForPoolType(pool_type=self.family, operation=operation)

    def bpt_out_given_exact_tokens_in(self, info: LinearPoolInfo, amounts_in: list[int]) -> int:
        raise self._unsupported("join")

    def bpt_in_given_exact_tokens_out(self, info: LinearPoolInfo, amounts_out: list[int]) -> int:
        raise self._unsupported("exit_exact_tokens_out")

    def token_out_given_exact_bpt_in(
        self, info: LinearPoolInfo, token_index: int, bpt_in: int
    ) -> int:
        raise self._unsupported("exit_exact_bpt_in")

    def tokens_out_given_exact_bpt_in(self, info: LinearPoolInfo, bpt_in: int) -> list[int]:
        raise self._unsupported("exit_exact_bpt_in")

    def spot_price(self, info: LinearPoolInfo, token_index_in: int, token_index_out: int) -> int:
        raise self._unsupported("spot_price")

    def bpt_spot_price(self, info: LinearPoolInfo, token_index: int) -> int:
        raise self._unsupported("price_impact")

    def calc_total_liquidity(self, tokens: list[LiquidityToken]) -> int:
        raise self._unsupported("liquidity")


WEIGHTED = WeightedConcerns()
STABLE = StableConcerns()
META_STABLE = MetaStableConcerns()
STABLE_PHANTOM = StablePhantomConcerns()
LINEAR = LinearConcerns()


def concerns_for(info: PoolInfo) -> PoolConcerns:  # type: ignore[type-arg]
    """Capabilities for a parsed pool."""
    match info:
        case WeightedPoolInfo():
            return WEIGHTED
        case StablePoolInfo():
            return STABLE
        case MetaStablePoolInfo():
            return META_STABLE
        case StablePhantomPoolInfo():
            return STABLE_PHANTOM
        case LinearPoolInfo():
            return LINEAR
    raise TypeError(f"Unknown pool info type: {type(info).__name__}")


def concerns_for_type(pool_type: PoolType) -> PoolConcerns:  # type: ignore[type-arg]
    """Capabilities for a pool type tag (used where no parsed info exists).

    Raises:
        UnsupportedPoolType: For pool types without a math implementation
    """
    match pool_type:
        case PoolType.WEIGHTED | PoolType.INVESTMENT | PoolType.LIQUIDITY_BOOTSTRAPPING:
            return WEIGHTED
        case PoolType.STABLE:
            return STABLE
        case PoolType.META_STABLE:
            return META_STABLE
        case PoolType.STABLE_PHANTOM | PoolType.COMPOSABLE_STABLE:
            return STABLE_PHANTOM
        case PoolType.LINEAR | PoolType.AAVE_LINEAR | PoolType.ERC4626_LINEAR:
            return LINEAR
        case PoolType.ELEMENT | PoolType.GYRO2 | PoolType.FX:
            raise UnsupportedPoolType(pool_type=pool_type.value)
