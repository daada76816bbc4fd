"""Price impact of joins and exits.

Price impact compares the BPT a join mints (or an exit burns) with the BPT
the same token amounts would be worth at the pool's current marginal
prices. All values are 18-decimal fixed-point integers.
"""

from __future__ import annotations

import structlog

from balancer_math.constants import ONE
from balancer_math.errors import InputLengthMismatch
from balancer_math.math import fixed_point as fp
from balancer_math.pools.concerns import concerns_for
from balancer_math.pools.info import PoolInfo
from balancer_math.pools.scaling import upscale

logger = structlog.get_logger()


def bpt_zero_price_impact(info: PoolInfo, amounts: list[int]) -> int:
    """BPT equivalent of the given token amounts at constant spot prices.

    Args:
        info: Parsed pool
        amounts: Native (unscaled) amounts, one per pool token in pool order

    Returns:
        sum(bpt_spot_price_i * upscale(amount_i)), fixed-point

    Raises:
        InputLengthMismatch: If amounts does not have one entry per pool token
        NotImplementedForPoolType: For linear pools
    """
    if len(amounts) != len(info.tokens):
        raise InputLengthMismatch(amounts=len(amounts), tokens=len(info.tokens))

    concerns = concerns_for(info)
    total = 0
    for i, amount in enumerate(amounts):
        price = concerns.bpt_spot_price(info, i)
        total = fp.add(total, fp.mul_down(price, upscale(amount, info.scaling_factors[i])))
    return total


def calc_price_impact(bpt_amount: int, bpt_zero_impact: int, is_join: bool = True) -> int:
    """Price impact as a signed fixed-point fraction.

    Joins: ONE - bpt_amount / bpt_zero_impact.
    Exits: bpt_amount / bpt_zero_impact - ONE.

    Negative results mean the operation was favorable; they are not clamped.
    """
    ratio = fp.div_down(bpt_amount, bpt_zero_impact)
    impact = ONE - ratio if is_join else ratio - ONE
    logger.debug(
        "price_impact_calculated",
        bpt_amount=bpt_amount,
        bpt_zero_impact=bpt_zero_impact,
        is_join=is_join,
        impact=impact,
    )
    return impact
