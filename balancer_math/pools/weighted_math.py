"""Balancer weighted pool math.

Closed-form formulas for weighted product pools: swaps, joins, exits and
spot prices. All balances and amounts are upscaled 18-decimal integers;
weights are normalized fixed-point values summing to ONE.
"""

from __future__ import annotations

from balancer_math.config import DEFAULT_MATH_CONFIG, MathConfig
from balancer_math.constants import ONE
from balancer_math.errors import InputLengthMismatch, MaxInRatio, MaxOutRatio, ZeroInvariant
from balancer_math.math import fixed_point as fp


def _check_lengths(**arrays: list[int]) -> None:
    lengths = {name: len(values) for name, values in arrays.items()}
    if len(set(lengths.values())) > 1:
        raise InputLengthMismatch(**lengths)


def calculate_invariant(normalized_weights: list[int], balances: list[int]) -> int:
    """Weighted invariant: prod(balance_i ^ weight_i), rounded down.

    Raises:
        ZeroInvariant: If the product evaluates to zero
    """
    _check_lengths(weights=normalized_weights, balances=balances)

    invariant = ONE
    for weight, balance in zip(normalized_weights, balances, strict=True):
        invariant = fp.mul_down(invariant, fp.pow_down(balance, weight))

    if invariant <= 0:
        raise ZeroInvariant(balances=balances)
    return invariant


def calc_out_given_in(
    balance_in: int,
    weight_in: int,
    balance_out: int,
    weight_out: int,
    amount_in: int,
    *,
    config: MathConfig = DEFAULT_MATH_CONFIG,
) -> int:
    """Calculate output amount for a given input.

    Fee should be subtracted from amount_in BEFORE calling this function.

    Formula:
        amount_out = balance_out * (1 - (balance_in / (balance_in + amount_in))^(w_in / w_out))

    Raises:
        MaxInRatio: If amount_in > balance_in * max_in_ratio (30%)
    """
    if amount_in > fp.mul_down(balance_in, config.max_in_ratio):
        raise MaxInRatio(amount_in=amount_in, balance_in=balance_in)

    # Amount out, so round down overall. The power rounds up (so does the
    # base); since base <= 1 the exponent rounds down.
    denominator = fp.add(balance_in, amount_in)
    base = fp.div_up(balance_in, denominator)
    exponent = fp.div_down(weight_in, weight_out)
    power = fp.pow_up(base, exponent, relative_error=config.max_pow_relative_error)

    return fp.mul_down(balance_out, fp.complement(power))


def calc_in_given_out(
    balance_in: int,
    weight_in: int,
    balance_out: int,
    weight_out: int,
    amount_out: int,
    *,
    config: MathConfig = DEFAULT_MATH_CONFIG,
) -> int:
    """Calculate input amount for a given output.

    Fee should be added to the result AFTER calling this function.

    Formula:
        amount_in = balance_in * ((balance_out / (balance_out - amount_out))^(w_out / w_in) - 1)

    Raises:
        MaxOutRatio: If amount_out > balance_out * max_out_ratio (30%)
    """
    if amount_out > fp.mul_down(balance_out, config.max_out_ratio):
        raise MaxOutRatio(amount_out=amount_out, balance_out=balance_out)

    # Amount in, so round up overall. Since base >= 1 the exponent rounds up.
    base = fp.div_up(balance_out, fp.sub(balance_out, amount_out))
    exponent = fp.div_up(weight_out, weight_in)
    power = fp.pow_up(base, exponent, relative_error=config.max_pow_relative_error)

    # power >= 1 because the base is >= 1 and the power rounds up
    ratio = fp.sub(power, ONE)
    return fp.mul_up(balance_in, ratio)


def calc_bpt_out_given_exact_tokens_in(
    balances: list[int],
    normalized_weights: list[int],
    amounts_in: list[int],
    bpt_total_supply: int,
    swap_fee: int,
    *,
    config: MathConfig = DEFAULT_MATH_CONFIG,
) -> int:
    """BPT minted for an exact-tokens-in join.

    The part of each deposit that exceeds the pool-proportional amount is a
    swap in disguise, so the swap fee is charged on it.
    """
    _check_lengths(balances=balances, weights=normalized_weights, amounts_in=amounts_in)

    # BPT out, so we round down overall.
    balance_ratios_with_fee = []
    invariant_ratio_with_fees = 0
    for balance, weight, amount_in in zip(balances, normalized_weights, amounts_in, strict=True):
        ratio = fp.div_down(fp.add(balance, amount_in), balance)
        balance_ratios_with_fee.append(ratio)
        invariant_ratio_with_fees = fp.add(invariant_ratio_with_fees, fp.mul_down(ratio, weight))

    invariant_ratio = ONE
    for i, balance in enumerate(balances):
        if balance_ratios_with_fee[i] > invariant_ratio_with_fees:
            non_taxable_amount = fp.mul_down(balance, fp.sub(invariant_ratio_with_fees, ONE))
            taxable_amount = fp.sub(amounts_in[i], non_taxable_amount)
            amount_in_without_fee = fp.add(
                non_taxable_amount, fp.mul_down(taxable_amount, fp.complement(swap_fee))
            )
        else:
            amount_in_without_fee = amounts_in[i]

        balance_ratio = fp.div_down(fp.add(balance, amount_in_without_fee), balance)
        invariant_ratio = fp.mul_down(
            invariant_ratio,
            fp.pow_down(
                balance_ratio, normalized_weights[i], relative_error=config.max_pow_relative_error
            ),
        )

    if invariant_ratio >= ONE:
        return fp.mul_down(bpt_total_supply, fp.sub(invariant_ratio, ONE))
    return 0


def calc_bpt_in_given_exact_tokens_out(
    balances: list[int],
    normalized_weights: list[int],
    amounts_out: list[int],
    bpt_total_supply: int,
    swap_fee: int,
    *,
    config: MathConfig = DEFAULT_MATH_CONFIG,
) -> int:
    """BPT burned for an exact-tokens-out exit.

    Withdrawals beyond the pool-proportional amount pay the swap fee.
    """
    _check_lengths(balances=balances, weights=normalized_weights, amounts_out=amounts_out)

    # BPT in, so we round up overall.
    balance_ratios_without_fee = []
    invariant_ratio_without_fees = 0
    for balance, weight, amount_out in zip(balances, normalized_weights, amounts_out, strict=True):
        ratio = fp.div_up(fp.sub(balance, amount_out), balance)
        balance_ratios_without_fee.append(ratio)
        invariant_ratio_without_fees = fp.add(
            invariant_ratio_without_fees, fp.mul_up(ratio, weight)
        )

    invariant_ratio = ONE
    for i, balance in enumerate(balances):
        if invariant_ratio_without_fees > balance_ratios_without_fee[i]:
            non_taxable_amount = fp.mul_down(
                balance, fp.complement(invariant_ratio_without_fees)
            )
            taxable_amount = fp.sub(amounts_out[i], non_taxable_amount)
            amount_out_with_fee = fp.add(
                non_taxable_amount, fp.div_up(taxable_amount, fp.complement(swap_fee))
            )
        else:
            amount_out_with_fee = amounts_out[i]

        balance_ratio = fp.div_down(fp.sub(balance, amount_out_with_fee), balance)
        invariant_ratio = fp.mul_down(
            invariant_ratio,
            fp.pow_down(
                balance_ratio, normalized_weights[i], relative_error=config.max_pow_relative_error
            ),
        )

    return fp.mul_up(bpt_total_supply, fp.complement(invariant_ratio))


def calc_token_out_given_exact_bpt_in(
    balance: int,
    normalized_weight: int,
    bpt_amount_in: int,
    bpt_total_supply: int,
    swap_fee: int,
    *,
    config: MathConfig = DEFAULT_MATH_CONFIG,
) -> int:
    """Single-token exit: tokens paid out for an exact amount of BPT.

    Formula:
        amount_out = balance * (1 - ((supply - bpt_in) / supply)^(1 / weight))
    """
    # Token out, so we round down overall. The multiplication rounds down,
    # but the power rounds up (so the base rounds up).
    invariant_ratio = fp.div_up(fp.sub(bpt_total_supply, bpt_amount_in), bpt_total_supply)
    balance_ratio = fp.pow_up(
        invariant_ratio,
        fp.div_down(ONE, normalized_weight),
        relative_error=config.max_pow_relative_error,
    )

    amount_out_without_fee = fp.mul_down(balance, fp.complement(balance_ratio))

    # The proportional share of the withdrawal is fee-free; the rest is taxed
    taxable_percentage = fp.complement(normalized_weight)
    taxable_amount = fp.mul_up(amount_out_without_fee, taxable_percentage)
    non_taxable_amount = fp.sub(amount_out_without_fee, taxable_amount)

    return fp.add(non_taxable_amount, fp.mul_down(taxable_amount, fp.complement(swap_fee)))


def calc_tokens_out_given_exact_bpt_in(
    balances: list[int],
    bpt_amount_in: int,
    bpt_total_supply: int,
) -> list[int]:
    """Proportional exit: each balance times the share of BPT burned (no fee)."""
    # Tokens out, so we round down overall.
    bpt_ratio = fp.div_down(bpt_amount_in, bpt_total_supply)
    return [fp.mul_down(balance, bpt_ratio) for balance in balances]


def calc_spot_price(
    balance_in: int,
    weight_in: int,
    balance_out: int,
    weight_out: int,
    swap_fee: int,
) -> int:
    """Marginal price of token_out in units of token_in, including the fee.

    Formula:
        sp = (balance_in / weight_in) / (balance_out / weight_out) / (1 - fee)
    """
    numerator = fp.div_up(balance_in, weight_in)
    denominator = fp.div_down(balance_out, weight_out)
    return fp.div_up(fp.div_up(numerator, denominator), fp.complement(swap_fee))


def calc_bpt_spot_price(bpt_total_supply: int, normalized_weight: int, balance: int) -> int:
    """BPT minted per unit of token at the margin: supply * weight / balance."""
    return fp.div_down(fp.mul_down(bpt_total_supply, normalized_weight), balance)
