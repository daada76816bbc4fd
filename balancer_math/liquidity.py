"""Total liquidity of (possibly nested) pools in USD.

A pool's liquidity is the value of the tokens it holds. Tokens that are
themselves pool shares (BPT of another pool) are valued by recursing into
that pool and taking the held share of its liquidity; the remaining
tokens are priced through a price repository and summed with the pool
family's liquidity rule.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable
from typing import Protocol

import structlog

from balancer_math.constants import POOL_DECIMALS
from balancer_math.math import integer as m
from balancer_math.models.pool import Pool, PoolToken, Price
from balancer_math.models.types import normalize_address
from balancer_math.pools.concerns import LiquidityToken, concerns_for_type
from balancer_math.pools.info import pool_type_of
from balancer_math.pools.scaling import format_fixed, parse_fixed

logger = structlog.get_logger()


class PoolRepository(Protocol):
    """Source of pool snapshots, looked up by pool (BPT) address."""

    async def find_by_address(self, address: str) -> Pool | None:
        """Return the pool whose BPT has this address, or None."""
        ...


class TokenPriceRepository(Protocol):
    """Source of token prices."""

    async def find(self, address: str) -> Price | None:
        """Return the token's price, or None if it is unknown."""
        ...


class StaticPoolRepository:
    """In-memory PoolRepository over a fixed set of pools."""

    def __init__(self, pools: Iterable[Pool] = ()) -> None:
        self._pools = {normalize_address(pool.address): pool for pool in pools}

    async def find_by_address(self, address: str) -> Pool | None:
        return self._pools.get(normalize_address(address))


class StaticTokenPriceRepository:
    """In-memory TokenPriceRepository over a fixed price table."""

    def __init__(self, prices: dict[str, Price] | None = None) -> None:
        self._prices = {normalize_address(k): v for k, v in (prices or {}).items()}

    async def find(self, address: str) -> Price | None:
        return self._prices.get(normalize_address(address))


class Liquidity:
    """Computes pool liquidity from pool and price repositories.

    Lookups for the tokens of one pool run concurrently. Any failure, from
    a repository or from the math, propagates and no partial total is
    returned.
    """

    def __init__(self, pools: PoolRepository, token_prices: TokenPriceRepository) -> None:
        self.pools = pools
        self.token_prices = token_prices

    async def get_liquidity(self, pool: Pool) -> str:
        """Total liquidity of the pool as a USD decimal string.

        Raises:
            UnsupportedPoolType: If the pool (or a nested pool) has no math
                implementation
            NotImplementedForPoolType: For linear pools
        """
        return format_fixed(await self._liquidity(pool))

    async def _liquidity(self, pool: Pool) -> int:
        pool_address = normalize_address(pool.address)
        # Pre-minted BPT held by the pool itself is not liquidity
        tokens = [t for t in pool.tokens if normalize_address(t.address) != pool_address]

        sub_pools = await asyncio.gather(
            *(self.pools.find_by_address(token.address) for token in tokens)
        )
        nested = [(t, p) for t, p in zip(tokens, sub_pools, strict=True) if p is not None]
        direct = [t for t, p in zip(tokens, sub_pools, strict=True) if p is None]

        nested_values = await asyncio.gather(
            *(self._held_share(token, sub_pool) for token, sub_pool in nested)
        )
        prices = await asyncio.gather(*(self.token_prices.find(token.address) for token in direct))

        liquidity_tokens = [
            _liquidity_token(token, price) for token, price in zip(direct, prices, strict=True)
        ]
        concerns = concerns_for_type(pool_type_of(pool))
        token_liquidity = concerns.calc_total_liquidity(liquidity_tokens)

        total = sum(nested_values) + token_liquidity
        logger.debug(
            "pool_liquidity_calculated",
            pool_id=pool.id,
            pool_type=pool.pool_type,
            nested_pools=len(nested),
            priced_tokens=sum(1 for t in liquidity_tokens if t.price is not None),
            liquidity=total,
        )
        return total

    async def _held_share(self, token: PoolToken, sub_pool: Pool) -> int:
        """Liquidity of sub_pool scaled by the share of its BPT the parent holds."""
        sub_liquidity = await self._liquidity(sub_pool)
        total_shares = parse_fixed(sub_pool.total_shares, POOL_DECIMALS)
        held = parse_fixed(token.balance, POOL_DECIMALS)
        return m.div_down(m.mul(sub_liquidity, held), total_shares)


def _liquidity_token(token: PoolToken, price: Price | None) -> LiquidityToken:
    usd = price.usd if price is not None else None
    return LiquidityToken(
        address=normalize_address(token.address),
        balance=parse_fixed(token.balance, POOL_DECIMALS),
        price=parse_fixed(usd, POOL_DECIMALS) if usd is not None else None,
        weight=parse_fixed(token.weight, POOL_DECIMALS) if token.weight is not None else None,
        price_rate=parse_fixed(token.price_rate or "1", POOL_DECIMALS),
    )
