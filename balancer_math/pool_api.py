"""Join, exit, spot price and price impact calculations on pool snapshots.

PoolWithMethods wraps a Pool snapshot and exposes the calculations a
transaction builder needs. Token amounts go in and come out as EVM-scale
integer strings (native token decimals); prices and price impact come out
as decimal strings. Slippage is given in basis points.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import cached_property

import structlog

from balancer_math.constants import ONE
from balancer_math.errors import InputLengthMismatch, TokenMismatch
from balancer_math.math import fixed_point as fp
from balancer_math.models.pool import Pool
from balancer_math.models.types import normalize_address
from balancer_math.pools.concerns import PoolConcerns, concerns_for
from balancer_math.pools.info import PoolInfo, parse_pool_info
from balancer_math.pools.scaling import (
    add_slippage,
    downscale_down,
    format_fixed,
    sub_slippage,
    upscale_array,
)
from balancer_math.price_impact import bpt_zero_price_impact, calc_price_impact

logger = structlog.get_logger()


@dataclass(frozen=True)
class JoinPoolAttributes:
    """Result of an exact-tokens-in join.

    Attributes:
        tokens_in: Token addresses in pool order
        amounts_in: Native amounts in pool order
        expected_bpt_out: BPT minted at current balances
        min_bpt_out: expected_bpt_out less slippage
        price_impact: Signed decimal fraction
    """

    tokens_in: list[str]
    amounts_in: list[str]
    expected_bpt_out: str
    min_bpt_out: str
    price_impact: str


@dataclass(frozen=True)
class ExitPoolAttributes:
    """Result of an exit, either exact-BPT-in or exact-tokens-out.

    Attributes:
        tokens_out: Token addresses in pool order
        expected_amounts_out: Native amounts paid out at current balances
        min_amounts_out: expected_amounts_out less slippage
        expected_bpt_in: BPT burned at current balances
        max_bpt_in: expected_bpt_in plus slippage
        price_impact: Signed decimal fraction
    """

    tokens_out: list[str]
    expected_amounts_out: list[str]
    min_amounts_out: list[str]
    expected_bpt_in: str
    max_bpt_in: str
    price_impact: str


def _parse_amount(amount: str | int) -> int:
    value = int(amount)
    if value < 0:
        raise ValueError(f"Amount cannot be negative: {amount!r}")
    return value


class PoolWithMethods:
    """A pool snapshot with its family's calculations attached.

    The snapshot is parsed (and validated) on first use, so a pool missing
    data its family needs fails before any arithmetic runs.
    """

    def __init__(self, pool: Pool) -> None:
        self.pool = pool

    @cached_property
    def info(self) -> PoolInfo:
        return parse_pool_info(self.pool)

    @property
    def concerns(self) -> PoolConcerns:  # type: ignore[type-arg]
        return concerns_for(self.info)

    def _order_amounts(self, tokens: list[str], amounts: list[str]) -> list[int]:
        """Validate token/amount pairs and return the amounts in pool order.

        Raises:
            InputLengthMismatch: If the lists differ in length from each other
                or from the pool's token count
            TokenMismatch: If the tokens are not exactly the pool's tokens
        """
        info = self.info
        if len(tokens) != len(amounts) or len(tokens) != len(info.tokens):
            raise InputLengthMismatch(
                tokens=len(tokens), amounts=len(amounts), pool_tokens=len(info.tokens)
            )

        by_token = {
            normalize_address(token): _parse_amount(amount)
            for token, amount in zip(tokens, amounts, strict=True)
        }
        if set(by_token) != set(info.tokens):
            raise TokenMismatch(tokens=tokens, pool_tokens=list(info.tokens))
        return [by_token[token] for token in info.tokens]

    def _price_impact(self, amounts: list[int], bpt_amount: int, is_join: bool) -> int:
        return calc_price_impact(bpt_amount, bpt_zero_price_impact(self.info, amounts), is_join)

    def build_join(
        self, tokens_in: list[str], amounts_in: list[str], slippage: str | int
    ) -> JoinPoolAttributes:
        """Exact-tokens-in join.

        Args:
            tokens_in: Token addresses, any order
            amounts_in: Native amounts matching tokens_in
            slippage: Tolerance in basis points applied to the BPT out
        """
        info = self.info
        amounts = self._order_amounts(tokens_in, amounts_in)
        upscaled = upscale_array(amounts, list(info.scaling_factors))

        expected_bpt_out = self.concerns.bpt_out_given_exact_tokens_in(info, upscaled)
        min_bpt_out = sub_slippage(expected_bpt_out, int(slippage))
        impact = self._price_impact(amounts, expected_bpt_out, is_join=True)

        logger.debug(
            "join_built",
            pool_id=info.pool_id,
            expected_bpt_out=expected_bpt_out,
            min_bpt_out=min_bpt_out,
        )
        return JoinPoolAttributes(
            tokens_in=list(info.tokens),
            amounts_in=[str(a) for a in amounts],
            expected_bpt_out=str(expected_bpt_out),
            min_bpt_out=str(min_bpt_out),
            price_impact=format_fixed(impact),
        )

    def build_exit_exact_bpt_in(
        self,
        bpt_in: str | int,
        slippage: str | int,
        single_token_max_out: str | None = None,
    ) -> ExitPoolAttributes:
        """Exit burning an exact BPT amount.

        Args:
            bpt_in: BPT amount, 18 decimals
            slippage: Tolerance in basis points applied to each amount out
            single_token_max_out: Take everything in this token; proportional
                exit if None
        """
        info = self.info
        bpt = _parse_amount(bpt_in)

        if single_token_max_out is None:
            upscaled_out = self.concerns.tokens_out_given_exact_bpt_in(info, bpt)
        else:
            index = info.index_of(single_token_max_out)
            upscaled_out = [0] * len(info.tokens)
            upscaled_out[index] = self.concerns.token_out_given_exact_bpt_in(info, index, bpt)

        expected = [
            downscale_down(amount, sf)
            for amount, sf in zip(upscaled_out, info.scaling_factors, strict=True)
        ]
        minimum = [sub_slippage(amount, int(slippage)) for amount in expected]
        impact = self._price_impact(expected, bpt, is_join=False)

        logger.debug(
            "exit_exact_bpt_in_built",
            pool_id=info.pool_id,
            bpt_in=bpt,
            single_token=single_token_max_out,
        )
        return ExitPoolAttributes(
            tokens_out=list(info.tokens),
            expected_amounts_out=[str(a) for a in expected],
            min_amounts_out=[str(a) for a in minimum],
            expected_bpt_in=str(bpt),
            max_bpt_in=str(bpt),
            price_impact=format_fixed(impact),
        )

    def build_exit_exact_tokens_out(
        self, tokens_out: list[str], amounts_out: list[str], slippage: str | int
    ) -> ExitPoolAttributes:
        """Exit withdrawing exact token amounts; slippage applies to the BPT in."""
        info = self.info
        amounts = self._order_amounts(tokens_out, amounts_out)
        upscaled = upscale_array(amounts, list(info.scaling_factors))

        expected_bpt_in = self.concerns.bpt_in_given_exact_tokens_out(info, upscaled)
        max_bpt_in = add_slippage(expected_bpt_in, int(slippage))
        impact = self._price_impact(amounts, expected_bpt_in, is_join=False)

        logger.debug(
            "exit_exact_tokens_out_built",
            pool_id=info.pool_id,
            expected_bpt_in=expected_bpt_in,
            max_bpt_in=max_bpt_in,
        )
        return ExitPoolAttributes(
            tokens_out=list(info.tokens),
            expected_amounts_out=[str(a) for a in amounts],
            min_amounts_out=[str(a) for a in amounts],
            expected_bpt_in=str(expected_bpt_in),
            max_bpt_in=str(max_bpt_in),
            price_impact=format_fixed(impact),
        )

    def calc_spot_price(self, token_in: str, token_out: str) -> str:
        """Price of token_out in units of token_in.

        Either side may be the pool's own BPT, in which case the price comes
        from the BPT spot price of the other token.
        """
        info = self.info
        if normalize_address(token_out) == info.address:
            bpt_price = self.concerns.bpt_spot_price(info, info.index_of(token_in))
            price = fp.div_up(ONE, bpt_price)
        elif normalize_address(token_in) == info.address:
            price = self.concerns.bpt_spot_price(info, info.index_of(token_out))
        else:
            price = self.concerns.spot_price(
                info, info.index_of(token_in), info.index_of(token_out)
            )
        return format_fixed(price)

    def calc_price_impact(
        self, amounts: list[str], bpt_amount: str | int, is_join: bool = True
    ) -> str:
        """Price impact of a join (or exit) of the given amounts.

        Args:
            amounts: Native amounts in pool order
            bpt_amount: BPT minted (join) or burned (exit), 18 decimals
            is_join: False for exits
        """
        impact = self._price_impact(
            [_parse_amount(a) for a in amounts], _parse_amount(bpt_amount), is_join
        )
        return format_fixed(impact)
