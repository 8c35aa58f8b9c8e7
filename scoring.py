from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from expressions import Difficulty

CHALLENGE_TIMES = (3, 5, 8)

# Base points per question by seconds allowed; harder tiers pay more.
_BASE_POINTS = {8: Decimal(10), 5: Decimal(15), 3: Decimal(20)}
_DIFFICULTY_MULTIPLIER = {
    Difficulty.BARE: Decimal("0.7"),
    Difficulty.ADDITIVE: Decimal("1.0"),
    Difficulty.MULTIPLICATIVE: Decimal("1.4"),
}
_TERM_MULTIPLIER = {3: Decimal("1.25"), 4: Decimal("1.5")}
FLAT_POINTS = 10


def points(
    is_correct: bool,
    difficulty: Difficulty,
    time_budget: int,
    inner_difficulty: Difficulty,
    term_count: int,
) -> int:
    """
    Points awarded for one answer. Half-way products (15 x 0.7 = 10.5) round up.
    """
    if not is_correct:
        return 0
    if Difficulty(difficulty) != Difficulty.CHALLENGE:
        return FLAT_POINTS

    inner = Difficulty(inner_difficulty)
    base = _BASE_POINTS.get(time_budget, Decimal(10))
    diff_multiplier = _DIFFICULTY_MULTIPLIER.get(inner, Decimal("1.0"))

    term_multiplier = Decimal("1.0")
    if inner != Difficulty.BARE:
        term_multiplier = _TERM_MULTIPLIER.get(term_count, Decimal("1.0"))

    total = base * diff_multiplier * term_multiplier
    return int(total.quantize(Decimal(1), rounding=ROUND_HALF_UP))
