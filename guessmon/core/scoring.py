"""
Round scoring

Formula (correct answers only):
  delta = max(MIN_CORRECT_POINTS,
              base_score + 5 × time_remaining + 25 × streak_before - 20 × hints_used)

Rules:
  - Incorrect answer (or timeout): delta = 0, streak resets to 0
  - Correct answer: streak_before + 1
  - Milestone labels are cosmetic and never change the score
"""
from typing import NamedTuple, Optional


TIME_BONUS_PER_SECOND = 5
STREAK_BONUS = 25
HINT_PENALTY = 20
MIN_CORRECT_POINTS = 10

# Highest threshold first
MILESTONES = [
    (10, "LEGENDARY!"),
    (7, "SUPER EFFECTIVE!"),
    (5, "ON FIRE!"),
    (3, "GREAT!"),
]

# Minimum accuracy percentage -> rank title
RANKS = [
    (95, "POKÉMON MASTER"),
    (80, "ELITE FOUR"),
    (60, "GYM LEADER"),
    (40, "TRAINER"),
]
DEFAULT_RANK = "ROOKIE"


class RoundScore(NamedTuple):
    delta: int
    streak: int


def score_round(
    correct: bool,
    time_remaining: int,
    streak_before: int,
    hints_used: int,
    base_score: int,
) -> RoundScore:
    """
    Points and new streak for one resolved round

    Args:
        correct: Whether the guess matched
        time_remaining: Whole seconds left on the round timer
        streak_before: Consecutive correct rounds before this one
        hints_used: Hints taken this round
        base_score: Difficulty's base points

    Returns:
        RoundScore(delta, streak)

    Example:
        >>> score_round(True, 15, 2, 1, 100)
        RoundScore(delta=205, streak=3)
    """
    if not correct:
        return RoundScore(delta=0, streak=0)

    delta = (
        base_score
        + TIME_BONUS_PER_SECOND * time_remaining
        + STREAK_BONUS * streak_before
        - HINT_PENALTY * hints_used
    )
    return RoundScore(delta=max(MIN_CORRECT_POINTS, delta), streak=streak_before + 1)


def milestone_label(streak: int) -> Optional[str]:
    """Cosmetic streak label, or None below the lowest threshold"""
    for threshold, label in MILESTONES:
        if streak >= threshold:
            return label
    return None


def rank_title(accuracy: float) -> str:
    """
    Rank title for a finished session

    Args:
        accuracy: Fraction of correct rounds in [0.0, 1.0]
    """
    percentage = round(accuracy * 100)
    for threshold, title in RANKS:
        if percentage >= threshold:
            return title
    return DEFAULT_RANK
