"""Balancer stable pool math.

Core math functions for stable (StableSwap/Curve-style) pools. Uses
Newton-Raphson iteration for the invariant and for solving a single
balance given the invariant.

All amplification parameters include AMP_PRECISION (A=100 is passed as
100_000). All balances are upscaled 18-decimal integers.

IMPORTANT: Every raw division goes through balancer_math.math.integer so
that overflow, underflow and division by zero fail the same way the
contracts revert.
"""

from __future__ import annotations

import structlog

from balancer_math.config import DEFAULT_MATH_CONFIG, MathConfig
from balancer_math.constants import AMP_PRECISION, ONE
from balancer_math.errors import (
    InputLengthMismatch,
    StableGetBalanceDidntConverge,
    StableInvariantDidntConverge,
    ZeroDivision,
)
from balancer_math.math import fixed_point as fp
from balancer_math.math import integer as m

logger = structlog.get_logger()


def calculate_invariant(
    amp: int,
    balances: list[int],
    round_up: bool,
    *,
    config: MathConfig = DEFAULT_MATH_CONFIG,
) -> int:
    """Calculate StableSwap invariant D using Newton-Raphson iteration.

    Uses Balancer's parameterization where the Newton-Raphson formula uses
    A*n (not A*n^n). The n^n factor is incorporated through the iterative
    P_D calculation.

    Algorithm:
        1. Initial guess: D = sum(balances)
        2. Iterate until |D_new - D_old| <= 1 wei
        3. Max iterations: 255

    The numerator terms and the final quotient round in the direction given
    by ``round_up``; the amp term of the denominator rounds the other way so
    the quotient as a whole moves in the requested direction.

    Args:
        amp: Amplification parameter (scaled by AMP_PRECISION=1000)
        balances: Upscaled token balances
        round_up: Rounding direction for the whole computation

    Returns:
        The invariant D (0 when every balance is zero)

    Raises:
        StableInvariantDidntConverge: If iteration doesn't converge
    """
    num_tokens = len(balances)

    sum_balances = 0
    for balance in balances:
        sum_balances = m.add(sum_balances, balance)
    if sum_balances == 0:
        return 0

    invariant = sum_balances
    amp_times_total = m.mul(amp, num_tokens)

    for _ in range(config.stable_max_iterations):
        # P_D = n^n * prod(balances) / D^(n-1), built up one balance at a time
        p_d = m.mul(balances[0], num_tokens)
        for balance in balances[1:]:
            p_d = m.div(m.mul(m.mul(p_d, balance), num_tokens), invariant, round_up)

        prev_invariant = invariant

        numerator = m.add(
            m.mul(m.mul(num_tokens, invariant), invariant),
            m.div(m.mul(m.mul(amp_times_total, sum_balances), p_d), AMP_PRECISION, round_up),
        )
        denominator = m.add(
            m.mul(num_tokens + 1, invariant),
            m.div(m.mul(amp_times_total - AMP_PRECISION, p_d), AMP_PRECISION, not round_up),
        )
        invariant = m.div(numerator, denominator, round_up)

        if abs(invariant - prev_invariant) <= 1:
            return invariant

    logger.warning(
        "stable_invariant_did_not_converge",
        amp=amp,
        num_tokens=num_tokens,
        iterations=config.stable_max_iterations,
    )
    raise StableInvariantDidntConverge(
        amp=amp, balances=balances, iterations=config.stable_max_iterations
    )


def get_token_balance_given_invariant_and_all_other_balances(
    amp: int,
    balances: list[int],
    invariant: int,
    token_index: int,
    *,
    config: MathConfig = DEFAULT_MATH_CONFIG,
) -> int:
    """Solve for balances[token_index] given D and all other balances.

    Rounds the result up overall, matching StableMath.sol.

    Raises:
        StableGetBalanceDidntConverge: If iteration doesn't converge
        IndexError: If token_index is out of range
    """
    num_tokens = len(balances)
    if not 0 <= token_index < num_tokens:
        raise IndexError(f"token_index {token_index} out of range for {num_tokens} tokens")

    amp_times_total = m.mul(amp, num_tokens)
    sum_balances = balances[0]
    p_d = m.mul(balances[0], num_tokens)
    for balance in balances[1:]:
        p_d = m.div_down(m.mul(m.mul(p_d, balance), num_tokens), invariant)
        sum_balances = m.add(sum_balances, balance)

    # Everything but the balance being solved for
    sum_balances = m.sub(sum_balances, balances[token_index])

    inv2 = m.mul(invariant, invariant)
    # c = inv2 / (ampTimesTotal * P_D) * AMP_PRECISION * balances[token_index]
    c = m.mul(
        m.mul(m.div_up(inv2, m.mul(amp_times_total, p_d)), AMP_PRECISION),
        balances[token_index],
    )
    # b = sum + invariant / ampTimesTotal * AMP_PRECISION
    b = m.add(sum_balances, m.mul(m.div_down(invariant, amp_times_total), AMP_PRECISION))

    # Initial approximation: y = (inv2 + c) / (invariant + b)
    token_balance = m.div_up(m.add(inv2, c), m.add(invariant, b))

    for _ in range(config.stable_max_iterations):
        prev_token_balance = token_balance
        # y = (y^2 + c) / (2y + b - D)
        token_balance = m.div_up(
            m.add(m.mul(token_balance, token_balance), c),
            m.sub(m.add(m.mul(token_balance, 2), b), invariant),
        )

        if abs(token_balance - prev_token_balance) <= 1:
            return token_balance

    logger.warning(
        "stable_get_balance_did_not_converge",
        amp=amp,
        token_index=token_index,
        iterations=config.stable_max_iterations,
    )
    raise StableGetBalanceDidntConverge(
        amp=amp, invariant=invariant, token_index=token_index
    )


def _check_pair(num_tokens: int, token_index_in: int, token_index_out: int) -> None:
    if not 0 <= token_index_in < num_tokens:
        raise IndexError(f"token_index_in {token_index_in} out of range for {num_tokens} tokens")
    if not 0 <= token_index_out < num_tokens:
        raise IndexError(f"token_index_out {token_index_out} out of range for {num_tokens} tokens")
    if token_index_in == token_index_out:
        raise ValueError("Cannot swap token with itself")


def calc_out_given_in(
    amp: int,
    balances: list[int],
    token_index_in: int,
    token_index_out: int,
    amount_in: int,
    *,
    config: MathConfig = DEFAULT_MATH_CONFIG,
) -> int:
    """Calculate output amount for a given input in a stable pool.

    Fee should be subtracted from amount_in BEFORE calling this function.
    Stable pools do not enforce ratio limits. One wei is withheld from the
    result as rounding protection.
    """
    _check_pair(len(balances), token_index_in, token_index_out)

    invariant = calculate_invariant(amp, balances, True, config=config)

    new_balances = list(balances)
    new_balances[token_index_in] = m.add(new_balances[token_index_in], amount_in)
    final_balance_out = get_token_balance_given_invariant_and_all_other_balances(
        amp, new_balances, invariant, token_index_out, config=config
    )

    return m.sub(m.sub(balances[token_index_out], final_balance_out), 1)


def calc_in_given_out(
    amp: int,
    balances: list[int],
    token_index_in: int,
    token_index_out: int,
    amount_out: int,
    *,
    config: MathConfig = DEFAULT_MATH_CONFIG,
) -> int:
    """Calculate input amount for a given output in a stable pool.

    Fee should be added to the result AFTER calling this function. One wei
    is added to the result as rounding protection.
    """
    _check_pair(len(balances), token_index_in, token_index_out)

    invariant = calculate_invariant(amp, balances, True, config=config)

    new_balances = list(balances)
    new_balances[token_index_out] = m.sub(new_balances[token_index_out], amount_out)
    final_balance_in = get_token_balance_given_invariant_and_all_other_balances(
        amp, new_balances, invariant, token_index_in, config=config
    )

    return m.add(m.sub(final_balance_in, balances[token_index_in]), 1)


def calc_bpt_out_given_exact_tokens_in(
    amp: int,
    balances: list[int],
    amounts_in: list[int],
    bpt_total_supply: int,
    swap_fee: int,
    *,
    config: MathConfig = DEFAULT_MATH_CONFIG,
) -> int:
    """BPT minted for an exact-tokens-in join.

    Each token's "weight" is its share of the summed balances; deposits
    beyond the proportional amount pay the swap fee.
    """
    if len(amounts_in) != len(balances):
        raise InputLengthMismatch(balances=len(balances), amounts_in=len(amounts_in))

    # BPT out, so we round down overall.
    sum_balances = 0
    for balance in balances:
        sum_balances = fp.add(sum_balances, balance)

    balance_ratios_with_fee = []
    invariant_ratio_with_fees = 0
    for balance, amount_in in zip(balances, amounts_in, strict=True):
        current_weight = fp.div_down(balance, sum_balances)
        ratio = fp.div_down(fp.add(balance, amount_in), balance)
        balance_ratios_with_fee.append(ratio)
        invariant_ratio_with_fees = fp.add(
            invariant_ratio_with_fees, fp.mul_down(ratio, current_weight)
        )

    new_balances = []
    for i, balance in enumerate(balances):
        if balance_ratios_with_fee[i] > invariant_ratio_with_fees:
            non_taxable_amount = fp.mul_down(balance, fp.sub(invariant_ratio_with_fees, ONE))
            taxable_amount = fp.sub(amounts_in[i], non_taxable_amount)
            amount_in_without_fee = fp.add(
                non_taxable_amount, fp.mul_down(taxable_amount, fp.sub(ONE, swap_fee))
            )
        else:
            amount_in_without_fee = amounts_in[i]
        new_balances.append(fp.add(balance, amount_in_without_fee))

    current_invariant = calculate_invariant(amp, balances, True, config=config)
    new_invariant = calculate_invariant(amp, new_balances, False, config=config)
    invariant_ratio = fp.div_down(new_invariant, current_invariant)

    if invariant_ratio > ONE:
        return fp.mul_down(bpt_total_supply, fp.sub(invariant_ratio, ONE))
    return 0


def calc_bpt_in_given_exact_tokens_out(
    amp: int,
    balances: list[int],
    amounts_out: list[int],
    bpt_total_supply: int,
    swap_fee: int,
    *,
    config: MathConfig = DEFAULT_MATH_CONFIG,
) -> int:
    """BPT burned for an exact-tokens-out exit."""
    if len(amounts_out) != len(balances):
        raise InputLengthMismatch(balances=len(balances), amounts_out=len(amounts_out))

    # BPT in, so we round up overall.
    sum_balances = 0
    for balance in balances:
        sum_balances = fp.add(sum_balances, balance)

    balance_ratios_without_fee = []
    invariant_ratio_without_fees = 0
    for balance, amount_out in zip(balances, amounts_out, strict=True):
        current_weight = fp.div_up(balance, sum_balances)
        ratio = fp.div_up(fp.sub(balance, amount_out), balance)
        balance_ratios_without_fee.append(ratio)
        invariant_ratio_without_fees = fp.add(
            invariant_ratio_without_fees, fp.mul_up(ratio, current_weight)
        )

    new_balances = []
    for i, balance in enumerate(balances):
        if invariant_ratio_without_fees > balance_ratios_without_fee[i]:
            non_taxable_amount = fp.mul_down(
                balance, fp.complement(invariant_ratio_without_fees)
            )
            taxable_amount = fp.sub(amounts_out[i], non_taxable_amount)
            amount_out_with_fee = fp.add(
                non_taxable_amount, fp.div_up(taxable_amount, fp.sub(ONE, swap_fee))
            )
        else:
            amount_out_with_fee = amounts_out[i]
        new_balances.append(fp.sub(balance, amount_out_with_fee))

    current_invariant = calculate_invariant(amp, balances, True, config=config)
    new_invariant = calculate_invariant(amp, new_balances, False, config=config)
    invariant_ratio = fp.div_down(new_invariant, current_invariant)

    return fp.mul_up(bpt_total_supply, fp.complement(invariant_ratio))


def calc_token_out_given_exact_bpt_in(
    amp: int,
    balances: list[int],
    token_index: int,
    bpt_amount_in: int,
    bpt_total_supply: int,
    swap_fee: int,
    *,
    config: MathConfig = DEFAULT_MATH_CONFIG,
) -> int:
    """Single-token exit: tokens paid out for an exact amount of BPT."""
    # Token out, so we round down overall.
    current_invariant = calculate_invariant(amp, balances, True, config=config)
    new_invariant = fp.mul_up(
        fp.div_up(fp.sub(bpt_total_supply, bpt_amount_in), bpt_total_supply),
        current_invariant,
    )

    new_balance = get_token_balance_given_invariant_and_all_other_balances(
        amp, balances, new_invariant, token_index, config=config
    )
    amount_out_without_fee = fp.sub(balances[token_index], new_balance)

    sum_balances = 0
    for balance in balances:
        sum_balances = fp.add(sum_balances, balance)

    # The proportional share of the withdrawal is fee-free; the rest is taxed
    current_weight = fp.div_down(balances[token_index], sum_balances)
    taxable_percentage = fp.complement(current_weight)
    taxable_amount = fp.mul_up(amount_out_without_fee, taxable_percentage)
    non_taxable_amount = fp.sub(amount_out_without_fee, taxable_amount)

    return fp.add(non_taxable_amount, fp.mul_down(taxable_amount, fp.sub(ONE, swap_fee)))


def calc_tokens_out_given_exact_bpt_in(
    balances: list[int],
    bpt_amount_in: int,
    bpt_total_supply: int,
) -> list[int]:
    """Proportional exit: each balance times the share of BPT burned (no fee)."""
    bpt_ratio = fp.div_down(bpt_amount_in, bpt_total_supply)
    return [fp.mul_down(balance, bpt_ratio) for balance in balances]


def _price_terms(
    amp: int, balances: list[int], invariant: int, token_index: int
) -> tuple[int, int]:
    """Partial derivatives of the invariant for the balance at token_index.

    Returns:
        (partial_x, minus_partial_d), both scaled by AMP_PRECISION * 10^18.
        The intermediate gamma term is negative for any amp above 1/n, so
        this works on signed integers.

    Raises:
        ZeroDivision: If any other balance (or the token count) is zero
    """
    num_tokens = len(balances)
    sum_others = 0
    d_p = m.div_down(invariant, num_tokens)
    for j, balance in enumerate(balances):
        if j != token_index:
            sum_others += balance
            d_p = m.div_down(d_p * invariant, num_tokens * balance)

    x = balances[token_index]
    alpha = amp * num_tokens
    beta = alpha * sum_others
    gamma = AMP_PRECISION - alpha
    partial_x = 2 * alpha * x + beta + gamma * invariant
    minus_partial_d = d_p * (num_tokens + 1) * AMP_PRECISION - gamma * x

    if minus_partial_d <= 0 or partial_x <= 0:
        raise ZeroDivision(a=partial_x, b=minus_partial_d)
    return partial_x, minus_partial_d


def calc_bpt_spot_price(
    amp: int,
    balances: list[int],
    bpt_supply: int,
    token_index: int,
    *,
    config: MathConfig = DEFAULT_MATH_CONFIG,
) -> int:
    """BPT minted per unit of token_index at the margin.

    Derived from the invariant's partial derivatives:
        price = (partial_x * bpt_supply / minus_partial_d) / D
    """
    invariant = calculate_invariant(amp, balances, True, config=config)
    partial_x, minus_partial_d = _price_terms(amp, balances, invariant, token_index)
    return fp.div_up(m.div_down(partial_x * bpt_supply, minus_partial_d), invariant)


def calc_spot_price(
    amp: int,
    balances: list[int],
    token_index_in: int,
    token_index_out: int,
    swap_fee: int,
    *,
    config: MathConfig = DEFAULT_MATH_CONFIG,
) -> int:
    """Marginal price of token_out in units of token_in, including the fee.

    The ratio of the two tokens' BPT spot prices, grossed up by the fee.
    """
    _check_pair(len(balances), token_index_in, token_index_out)

    invariant = calculate_invariant(amp, balances, True, config=config)
    partial_in, minus_d_in = _price_terms(amp, balances, invariant, token_index_in)
    partial_out, minus_d_out = _price_terms(amp, balances, invariant, token_index_out)

    price = m.div_up(partial_out * minus_d_in * ONE, minus_d_out * partial_in)
    return fp.div_up(price, fp.complement(swap_fee))
