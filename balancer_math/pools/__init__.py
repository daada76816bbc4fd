"""Balancer pool families.

Provides snapshot parsing into per-family pool info, the weighted and
stable math, scaling helpers, and the per-family capability classes.

Usage:
    from balancer_math.pools import parse_pool_info, concerns_for

    info = parse_pool_info(pool)
    bpt_out = concerns_for(info).bpt_out_given_exact_tokens_in(info, upscaled_amounts)
"""

from .concerns import (
    LiquidityToken,
    PoolConcerns,
    concerns_for,
    concerns_for_type,
)
from .info import (
    LinearPoolInfo,
    MetaStablePoolInfo,
    PoolInfo,
    StablePhantomPoolInfo,
    StablePoolInfo,
    WeightedPoolInfo,
    parse_pool_info,
    pool_type_of,
)
from .scaling import (
    add_slippage,
    compute_scaling_factor,
    downscale_down,
    downscale_up,
    format_fixed,
    parse_fixed,
    sub_slippage,
    upscale,
    upscale_array,
)

__all__ = [
    # Parsing
    "PoolInfo",
    "WeightedPoolInfo",
    "StablePoolInfo",
    "MetaStablePoolInfo",
    "StablePhantomPoolInfo",
    "LinearPoolInfo",
    "parse_pool_info",
    "pool_type_of",
    # Capabilities
    "PoolConcerns",
    "LiquidityToken",
    "concerns_for",
    "concerns_for_type",
    # Scaling
    "parse_fixed",
    "format_fixed",
    "compute_scaling_factor",
    "upscale",
    "upscale_array",
    "downscale_down",
    "downscale_up",
    "add_slippage",
    "sub_slippage",
]
