"""Parsed pool information per pool family.

Converts a Pool snapshot (decimal strings) into one immutable variant per
pool family, carrying only scaled integers. Every field a family needs is
validated here, before any math runs.
"""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from balancer_math.constants import AMP_PRECISION, ONE, POOL_DECIMALS, WEIGHT_SUM_TOLERANCE
from balancer_math.errors import (
    InvalidWeights,
    MissingAmp,
    MissingDecimals,
    MissingPriceRate,
    MissingWeight,
    TokenMismatch,
    UnsupportedPoolType,
)
from balancer_math.math import fixed_point as fp
from balancer_math.models.pool import Pool, PoolToken, PoolType
from balancer_math.models.types import normalize_address

from .scaling import compute_scaling_factor, parse_fixed, upscale

logger = structlog.get_logger()

_AMP_DECIMALS = len(str(AMP_PRECISION)) - 1


@dataclass(frozen=True)
class _PoolInfoBase:
    """Fields shared by every pool family.

    Attributes:
        pool_id: Balancer pool id
        address: Pool (and BPT) address, lowercase
        tokens: Token addresses in pool order, lowercase
        decimals: Token decimals
        scaling_factors: Fixed-point factors taking native amounts to 18
            decimals (price rates included where the family uses them)
        balances: Upscaled balances
        swap_fee: Swap fee, fixed-point
        total_shares: BPT supply, fixed-point
    """

    pool_id: str
    address: str
    tokens: tuple[str, ...]
    decimals: tuple[int, ...]
    scaling_factors: tuple[int, ...]
    balances: tuple[int, ...]
    swap_fee: int
    total_shares: int

    def index_of(self, token: str) -> int:
        """Position of a token in pool order.

        Raises:
            TokenMismatch: If the token is not in the pool
        """
        target = normalize_address(token)
        try:
            return self.tokens.index(target)
        except ValueError:
            raise TokenMismatch(token=token, pool_tokens=list(self.tokens)) from None


@dataclass(frozen=True)
class WeightedPoolInfo(_PoolInfoBase):
    weights: tuple[int, ...]


@dataclass(frozen=True)
class StablePoolInfo(_PoolInfoBase):
    amp: int


@dataclass(frozen=True)
class MetaStablePoolInfo(_PoolInfoBase):
    amp: int
    price_rates: tuple[int, ...]


@dataclass(frozen=True)
class StablePhantomPoolInfo(_PoolInfoBase):
    """Phantom stable pool with its own BPT removed from the token list.

    Attributes:
        bpt_index: Position the BPT held in the original token list, or None
    """

    amp: int
    price_rates: tuple[int, ...]
    bpt_index: int | None


@dataclass(frozen=True)
class LinearPoolInfo(_PoolInfoBase):
    pass


PoolInfo = (
    WeightedPoolInfo | StablePoolInfo | MetaStablePoolInfo | StablePhantomPoolInfo | LinearPoolInfo
)


def pool_type_of(pool: Pool) -> PoolType:
    """Resolve the pool's type tag.

    Raises:
        UnsupportedPoolType: If the tag is unknown
    """
    try:
        return PoolType(pool.pool_type)
    except ValueError:
        raise UnsupportedPoolType(pool_id=pool.id, pool_type=pool.pool_type) from None


def _ordered_tokens(pool: Pool) -> list[PoolToken]:
    ordered = []
    for address in pool.token_addresses:
        token = pool.get_token(address)
        if token is None:
            raise TokenMismatch(pool_id=pool.id, token=address)
        ordered.append(token)
    return ordered


def _parse_amp(pool: Pool) -> int:
    if pool.amp is None:
        raise MissingAmp(pool_id=pool.id)
    return parse_fixed(pool.amp, _AMP_DECIMALS)


def _parse_price_rates(pool: Pool, tokens: list[PoolToken]) -> list[int]:
    rates = []
    for token in tokens:
        if token.price_rate is None:
            raise MissingPriceRate(pool_id=pool.id, token=token.address)
        rates.append(parse_fixed(token.price_rate, POOL_DECIMALS))
    return rates


def _base_fields(
    pool: Pool, tokens: list[PoolToken], price_rates: list[int] | None = None
) -> dict[str, object]:
    decimals = []
    scaling_factors = []
    balances = []
    for i, token in enumerate(tokens):
        if token.decimals is None:
            raise MissingDecimals(pool_id=pool.id, token=token.address)
        scaling_factor = compute_scaling_factor(token.decimals)
        if price_rates is not None:
            scaling_factor = fp.mul_down(scaling_factor, price_rates[i])
        decimals.append(token.decimals)
        scaling_factors.append(scaling_factor)
        balances.append(upscale(parse_fixed(token.balance, token.decimals), scaling_factor))

    return {
        "pool_id": pool.id,
        "address": normalize_address(pool.address),
        "tokens": tuple(normalize_address(t.address) for t in tokens),
        "decimals": tuple(decimals),
        "scaling_factors": tuple(scaling_factors),
        "balances": tuple(balances),
        "swap_fee": parse_fixed(pool.swap_fee, POOL_DECIMALS),
        "total_shares": parse_fixed(pool.total_shares, POOL_DECIMALS),
    }


def _parse_weighted(pool: Pool) -> WeightedPoolInfo:
    tokens = _ordered_tokens(pool)
    weights = []
    for token in tokens:
        if token.weight is None:
            raise MissingWeight(pool_id=pool.id, token=token.address)
        weights.append(parse_fixed(token.weight, POOL_DECIMALS))
    if abs(sum(weights) - ONE) > WEIGHT_SUM_TOLERANCE * len(weights):
        raise InvalidWeights(pool_id=pool.id, weights=weights, total=sum(weights))
    fields = _base_fields(pool, tokens)
    return WeightedPoolInfo(**fields, weights=tuple(weights))  # type: ignore[arg-type]


def _parse_stable(pool: Pool) -> StablePoolInfo:
    amp = _parse_amp(pool)
    tokens = _ordered_tokens(pool)
    return StablePoolInfo(**_base_fields(pool, tokens), amp=amp)  # type: ignore[arg-type]


def _parse_meta_stable(pool: Pool) -> MetaStablePoolInfo:
    amp = _parse_amp(pool)
    tokens = _ordered_tokens(pool)
    rates = _parse_price_rates(pool, tokens)
    return MetaStablePoolInfo(
        **_base_fields(pool, tokens, rates),  # type: ignore[arg-type]
        amp=amp,
        price_rates=tuple(rates),
    )


def _parse_stable_phantom(pool: Pool) -> StablePhantomPoolInfo:
    amp = _parse_amp(pool)
    pool_address = normalize_address(pool.address)
    all_tokens = _ordered_tokens(pool)

    # The pool's own pre-minted BPT never takes part in the invariant
    bpt_index = None
    tokens = []
    for i, token in enumerate(all_tokens):
        if normalize_address(token.address) == pool_address:
            bpt_index = i
        else:
            tokens.append(token)

    rates = _parse_price_rates(pool, tokens)
    return StablePhantomPoolInfo(
        **_base_fields(pool, tokens, rates),  # type: ignore[arg-type]
        amp=amp,
        price_rates=tuple(rates),
        bpt_index=bpt_index,
    )


def _parse_linear(pool: Pool) -> LinearPoolInfo:
    pool_address = normalize_address(pool.address)
    tokens = [t for t in _ordered_tokens(pool) if normalize_address(t.address) != pool_address]
    return LinearPoolInfo(**_base_fields(pool, tokens))  # type: ignore[arg-type]


def parse_pool_info(pool: Pool) -> PoolInfo:
    """Validate a snapshot and convert it to its pool family's variant.

    Raises:
        UnsupportedPoolType: If the pool type has no math implementation
        MissingDecimals: If a token has no decimals
        UnsupportedDecimals: If a token has more than 18 decimals
        MissingWeight: If a weighted pool token has no weight
        InvalidWeights: If weighted pool weights do not sum to one
        MissingAmp: If a stable-family pool has no amplification parameter
        MissingPriceRate: If a meta-stable/phantom token has no price rate
        TokenMismatch: If tokens_list names a token the pool does not hold
    """
    pool_type = pool_type_of(pool)

    match pool_type:
        case PoolType.WEIGHTED | PoolType.INVESTMENT | PoolType.LIQUIDITY_BOOTSTRAPPING:
            info: PoolInfo = _parse_weighted(pool)
        case PoolType.STABLE:
            info = _parse_stable(pool)
        case PoolType.META_STABLE:
            info = _parse_meta_stable(pool)
        case PoolType.STABLE_PHANTOM | PoolType.COMPOSABLE_STABLE:
            info = _parse_stable_phantom(pool)
        case PoolType.LINEAR | PoolType.AAVE_LINEAR | PoolType.ERC4626_LINEAR:
            info = _parse_linear(pool)
        case PoolType.ELEMENT | PoolType.GYRO2 | PoolType.FX:
            raise UnsupportedPoolType(pool_id=pool.id, pool_type=pool.pool_type)

    logger.debug(
        "pool_info_parsed",
        pool_id=pool.id,
        pool_type=pool_type.value,
        family=type(info).__name__,
        token_count=len(info.tokens),
    )
    return info
