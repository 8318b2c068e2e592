"""
Tests for the scoring rules.
"""

from datetime import date

import pytest

from models.documents import VoteChoice
from services.scoring import (
    apply_vote,
    next_streak,
    questions_created_on,
    round_half_up,
    split_percentages,
    win_rate,
)


@pytest.mark.unit
class TestApplyVote:
    """Test the strict post-vote majority rule."""

    def test_breaking_a_tie_wins(self) -> None:
        assert apply_vote(3, 3, VoteChoice.A) == (4, 3, True)

    def test_creating_a_tie_loses(self) -> None:
        assert apply_vote(4, 3, VoteChoice.B) == (4, 4, False)

    def test_first_vote_on_empty_question_wins(self) -> None:
        assert apply_vote(0, 0, VoteChoice.B) == (0, 1, True)

    def test_minority_vote_loses(self) -> None:
        assert apply_vote(1, 5, VoteChoice.A) == (2, 5, False)

    def test_majority_vote_wins(self) -> None:
        assert apply_vote(1, 5, VoteChoice.B) == (1, 6, True)

    def test_accepts_plain_string_choice(self) -> None:
        assert apply_vote(0, 1, "a") == (1, 1, False)


@pytest.mark.unit
class TestSplitPercentages:
    """Test percentage rounding."""

    def test_one_third(self) -> None:
        assert split_percentages(1, 2) == (33, 67)

    def test_two_thirds(self) -> None:
        assert split_percentages(2, 1) == (67, 33)

    def test_half_rounds_up(self) -> None:
        # 1/8 = 12.5%
        assert split_percentages(1, 7) == (13, 87)

    def test_empty_tally(self) -> None:
        assert split_percentages(0, 0) == (50, 50)

    @pytest.mark.parametrize("votes_a,votes_b", [(1, 0), (0, 1), (1, 2), (5, 7), (13, 29), (999, 1)])
    def test_always_sums_to_100(self, votes_a: int, votes_b: int) -> None:
        percentage_a, percentage_b = split_percentages(votes_a, votes_b)
        assert percentage_a + percentage_b == 100
        assert 0 <= percentage_a <= 100

    def test_round_half_up(self) -> None:
        assert round_half_up(2.5) == 3
        assert round_half_up(2.49) == 2


@pytest.mark.unit
class TestStreaks:
    """Test streak bookkeeping."""

    def test_win_extends_streak(self) -> None:
        assert next_streak(2, 5, True) == (3, 5)

    def test_win_raises_best(self) -> None:
        assert next_streak(5, 5, True) == (6, 6)

    def test_loss_resets_streak_keeps_best(self) -> None:
        assert next_streak(4, 6, False) == (0, 6)

    def test_best_never_decreases(self) -> None:
        current, best = 0, 0
        for won in [True, True, False, True, False, False, True, True, True]:
            new_current, new_best = next_streak(current, best, won)
            assert new_best >= best
            assert new_best >= new_current
            current, best = new_current, new_best
        assert (current, best) == (3, 3)


@pytest.mark.unit
class TestQuota:
    """Test the daily creation counter."""

    def test_same_day_keeps_count(self) -> None:
        assert questions_created_on(date(2024, 6, 1), date(2024, 6, 1), 4) == 4

    def test_new_day_resets(self) -> None:
        assert questions_created_on(date(2024, 6, 2), date(2024, 6, 1), 5) == 0

    def test_never_created(self) -> None:
        assert questions_created_on(date(2024, 6, 1), None, 0) == 0


@pytest.mark.unit
class TestWinRate:
    """Test win rate."""

    def test_no_votes(self) -> None:
        assert win_rate(0, 0) == 0

    def test_rounds(self) -> None:
        assert win_rate(2, 3) == 67

    def test_all_won(self) -> None:
        assert win_rate(4, 4) == 100
