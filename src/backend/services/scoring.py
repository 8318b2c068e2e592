"""
Scoring rules for majority prediction.

Pure functions shared by the vote and question engines and the stats helpers.
"""

import math
from datetime import date
from typing import Optional

from models.documents import VoteChoice


def round_half_up(value: float) -> int:
    """Round .5 away from zero for non-negative values (2.5 -> 3, not 2)."""
    return math.floor(value + 0.5)


def apply_vote(votes_a: int, votes_b: int, choice: VoteChoice) -> tuple[int, int, bool]:
    """
    Add one vote to a tally and decide whether the voter won.

    The voter wins only if their side is strictly ahead after their own vote
    is counted. A vote that ties the count loses; a vote that breaks a tie
    in its own favour wins.

    Returns:
        (new_votes_a, new_votes_b, won)
    """
    if choice == VoteChoice.A:
        new_a, new_b = votes_a + 1, votes_b
        return new_a, new_b, new_a > new_b

    new_a, new_b = votes_a, votes_b + 1
    return new_a, new_b, new_b > new_a


def split_percentages(votes_a: int, votes_b: int) -> tuple[int, int]:
    """
    Percentages for both sides that always sum to 100.

    Side A is rounded, side B is its complement. An empty tally is 50/50.
    """
    total = votes_a + votes_b
    if total == 0:
        return 50, 50
    percentage_a = round_half_up(votes_a / total * 100)
    return percentage_a, 100 - percentage_a


def next_streak(current_streak: int, best_streak: int, won: bool) -> tuple[int, int]:
    """Streak after a vote: +1 on a win, reset on a loss. Best is a running max."""
    new_streak = current_streak + 1 if won else 0
    return new_streak, max(best_streak, new_streak)


def questions_created_on(today: date, last_question_date: Optional[date], questions_created_today: int) -> int:
    """Questions already created today; the stored counter is stale on a new day."""
    if last_question_date != today:
        return 0
    return questions_created_today


def win_rate(votes_won: int, votes_cast: int) -> int:
    """Whole-number win percentage, 0 before the first vote."""
    if votes_cast <= 0:
        return 0
    return round_half_up(votes_won / votes_cast * 100)
