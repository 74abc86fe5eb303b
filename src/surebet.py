"""Stake distribution and profit math for N-way surebets.

This module provides pure functions that turn a set of decimal odds plus one
user-controlled quantity (the total stake or a single outcome's stake) into a
full stake distribution. At equilibrium every leg returns the same payout:
``stake_i * odds_i`` is equal for all i, so each stake is proportional to the
product of all *other* outcomes' odds.

Nothing here validates the betting domain. Zero, negative or degenerate odds
produce NaN or infinite figures which are returned as-is; callers must check
``math.isfinite`` before treating a result as a real arbitrage.
"""

import logging
import math
from typing import List, Optional, Sequence, Union

from .config import STAKE_FIELD_PREFIX, TOTAL_FIELD
from .models import Computed, FixedField, SurebetOutcome, SurebetResult, Unparseable
from .type_safety import (
    divide,
    format_fixed,
    format_whole,
    parse_number,
    round_half_up,
    validate_outcome_count,
)
from .validation import validate_fixed_field_text

logger = logging.getLogger('surebet')

NumberLike = Union[str, float, int]


def complementary_products(odds: Sequence[float]) -> List[float]:
    """Return, for each outcome, the product of every other outcome's odds.

    Examples:
        >>> complementary_products([2.0, 3.0, 4.0])
        [12.0, 8.0, 6.0]
    """
    products = []
    for i in range(len(odds)):
        product = 1.0
        for j, value in enumerate(odds):
            if j != i:
                product *= value
        products.append(product)
    return products


def _add_in_order(values: Sequence[float]) -> float:
    # Left-to-right float addition, no compensated summation
    total = values[0]
    for value in values[1:]:
        total += value
    return total


def _product(values: Sequence[float]) -> float:
    product = values[0]
    for value in values[1:]:
        product *= value
    return product


def stake_denominator(odds: Sequence[float]) -> float:
    """Sum of the complementary products, the normaliser for every stake.

    The product leaving out the last outcome is added first, then the others
    in outcome order, so the float result is the same as the fixed-arity
    formulas ``o1*o2 + o2*o3 + o1*o3`` (3-way) and
    ``o1*o2*o3 + o2*o3*o4 + o1*o3*o4 + o1*o2*o4`` (4-way).

    Examples:
        >>> stake_denominator([2.0, 2.0])
        4.0
        >>> stake_denominator([2.0, 3.0, 4.0])
        26.0
    """
    products = complementary_products(odds)
    return _add_in_order([products[-1]] + products[:-1])


def arbitrage_margin(odds: Sequence[float]) -> float:
    """Theoretical arbitrage margin in percent for a set of decimal odds.

    ``(product of all odds / denominator - 1) * 100``. It depends on the odds
    only, never on stakes or rounding. Equivalent to ``(1 / sum(1/odds) - 1)
    * 100`` for non-zero odds.

    Examples:
        >>> arbitrage_margin([2.0, 2.0])
        0.0
        >>> round(arbitrage_margin([2.0, 3.0, 4.0]), 4)
        -7.6923
        >>> round(arbitrage_margin([2.1, 2.1]), 2)
        5.0
    """
    return (divide(_product(odds), stake_denominator(odds)) - 1) * 100


def parse_fixed_field(text: str, outcome_count: int) -> FixedField:
    """Parse ``"total"`` or ``"stakeN"`` into a :class:`FixedField`.

    Raises:
        ValueError: If the tag is unknown or names a stake beyond the market

    Examples:
        >>> parse_fixed_field("total", 2).is_total
        True
        >>> parse_fixed_field("stake3", 4).stake_index
        3
    """
    if not validate_fixed_field_text(text, outcome_count):
        raise ValueError(f"Unknown fixed field {text!r} for a {outcome_count}-way market")

    if text == TOTAL_FIELD:
        return FixedField.total()
    return FixedField.stake(int(text[len(STAKE_FIELD_PREFIX):]))


def _unparseable(carried: SurebetResult, field: str) -> Unparseable:
    logger.debug(f"Surebet inputs not computable: unparseable {field}")
    return Unparseable(
        result=carried.model_copy(update={"profit": 0.0, "profit_percentage": 0.0}),
        field=field,
    )


def _stakes_for_total(total: float, odds: List[float], denominator: float) -> List[float]:
    stakes = []
    for i in range(len(odds)):
        weighted = total
        for j, value in enumerate(odds):
            if j != i:
                weighted *= value
        stakes.append(round_half_up(divide(weighted, denominator)))
    return stakes


def _stakes_for_fixed_stake(fixed_stake: float, fixed_index: int, odds: List[float]) -> List[float]:
    # Every derived leg pays the same as the fixed leg: stake_j * odds_j == stake_i * odds_i
    others_product = 1.0
    for k, value in enumerate(odds):
        if k != fixed_index:
            others_product *= value

    stakes = []
    for j in range(len(odds)):
        if j == fixed_index:
            stakes.append(fixed_stake)
            continue
        weighted = fixed_stake
        for k, value in enumerate(odds):
            if k != j:
                weighted *= value
        stakes.append(round_half_up(divide(weighted, others_product)))
    return stakes


def compute_surebet(
    odds: Sequence[NumberLike],
    fixed_field: FixedField,
    total_stake_text: NumberLike,
    stake_values: Sequence[float],
    previous: Optional[SurebetResult] = None,
) -> SurebetOutcome:
    """Compute the stake distribution, profit and margin for an N-way market.

    The quantity named by ``fixed_field`` is authoritative; every other stake
    (and the total, in stake modes) is derived from it.

    Total mode:
        ``stake_i = round(total * prod(odds_j, j != i) / D)`` with
        ``D = sum_k prod(odds_j, j != k)``. The reported total is the
        requested total, not the sum of the rounded stakes.

    Stake mode:
        The fixed stake is used verbatim (NaN propagates). Each other stake is
        ``round(stake_i * prod(odds_k, k != j) / prod(odds_k, k != i))``
        and the total is the sum of all stakes.

    In both modes ``profit = stake_1 * odds_1 - total`` and
    ``profit_percentage`` is :func:`arbitrage_margin` of the odds.

    Args:
        odds: Decimal odds per outcome, as text or numbers
        fixed_field: The user-controlled quantity
        total_stake_text: Total stake as entered (read in total mode only)
        stake_values: Current stake per outcome (the fixed one is read in stake mode)
        previous: Last result shown, carried forward when inputs are unparseable

    Returns:
        :class:`Computed` with a fresh result, or :class:`Unparseable` carrying
        ``previous`` (or the all-zero initial result) with profit figures zeroed

    Raises:
        ValueError: If fewer than two outcomes are given, the stake vector does
            not match the odds, or the fixed stake is outside the market

    Examples:
        >>> outcome = compute_surebet(["2.0", "3.0", "4.0"], FixedField.total(), "130", [0, 0, 0])
        >>> outcome.result.stakes
        (60.0, 40.0, 30.0)
        >>> outcome.result.profit
        -10.0
    """
    outcome_count = validate_outcome_count(len(odds))
    if len(stake_values) != outcome_count:
        raise ValueError(
            f"Expected {outcome_count} stake values, got {len(stake_values)}"
        )
    if not fixed_field.is_total and not 1 <= fixed_field.stake_index <= outcome_count:
        raise ValueError(
            f"Fixed field {fixed_field} is outside a {outcome_count}-way market"
        )

    carried = previous if previous is not None else SurebetResult.initial(outcome_count)

    parsed_odds = [parse_number(value) for value in odds]
    if any(math.isnan(value) for value in parsed_odds):
        return _unparseable(carried, "odds")

    denominator = stake_denominator(parsed_odds)
    profit_percentage = arbitrage_margin(parsed_odds)

    if fixed_field.is_total:
        total = parse_number(total_stake_text)
        if math.isnan(total):
            return _unparseable(carried, "total")

        stakes = _stakes_for_total(total, parsed_odds, denominator)
        total_text = format_whole(total)
    else:
        fixed_index = fixed_field.stake_index - 1
        fixed_stake = parse_number(stake_values[fixed_index])
        stakes = _stakes_for_fixed_stake(fixed_stake, fixed_index, parsed_odds)
        total = _add_in_order(stakes)
        total_text = format_whole(total)

    profit = stakes[0] * parsed_odds[0] - total

    logger.debug(
        f"{outcome_count}-way surebet ({fixed_field}): stakes={stakes} "
        f"total={total_text} profit={profit} margin={profit_percentage}"
    )

    return Computed(
        result=SurebetResult(
            stakes=tuple(stakes),
            total=total_text,
            profit=profit,
            profit_percentage=profit_percentage,
        )
    )


def is_arbitrage(result: SurebetResult) -> bool:
    """True when the margin is a finite, positive percentage."""
    return math.isfinite(result.profit_percentage) and result.profit_percentage > 0


def format_profit(profit: float) -> str:
    """Two-decimal profit text as shown beside the stake fields.

    Examples:
        >>> format_profit(-2.8)
        '-2.80'
        >>> format_profit(5)
        '5.00'
    """
    return format_fixed(float(profit), 2)
