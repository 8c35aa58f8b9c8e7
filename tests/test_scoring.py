import pytest

from expressions import Difficulty
from scoring import points

C = Difficulty.CHALLENGE


def test_wrong_answer_scores_nothing():
    assert points(False, C, 3, Difficulty.MULTIPLICATIVE, 4) == 0
    assert points(False, Difficulty.ADDITIVE, 5, Difficulty.ADDITIVE, 2) == 0


@pytest.mark.parametrize(
    "difficulty", [Difficulty.BARE, Difficulty.ADDITIVE, Difficulty.MULTIPLICATIVE]
)
def test_flat_points_outside_challenge(difficulty):
    assert points(True, difficulty, 3, Difficulty.MULTIPLICATIVE, 4) == 10


@pytest.mark.parametrize(
    "time_budget,inner,terms,expected",
    [
        (3, Difficulty.MULTIPLICATIVE, 4, 42),  # 20 x 1.4 x 1.5
        (8, Difficulty.BARE, 2, 7),  # 10 x 0.7
        (3, Difficulty.BARE, 4, 14),  # term count ignored for bare
        (5, Difficulty.BARE, 2, 11),  # 10.5 rounds up
        (8, Difficulty.ADDITIVE, 3, 13),  # 12.5 rounds up
        (5, Difficulty.ADDITIVE, 2, 15),
        (5, Difficulty.MULTIPLICATIVE, 3, 26),  # 26.25
        (8, Difficulty.MULTIPLICATIVE, 3, 18),  # 17.5
    ],
)
def test_challenge_points(time_budget, inner, terms, expected):
    assert points(True, C, time_budget, inner, terms) == expected
