"""
Tests for the question creation engine.
"""

from datetime import date, datetime, timezone

import pytest

from db.ledger import question_ref, user_ref, vote_ref
from models.documents import VoteChoice
from schemas.question import QuestionCreate
from services.errors import DailyLimitReachedError, InsufficientScoreError, InvalidInputError, NotFoundError
from services.question_service import QuestionService, validate_question_input
from services.vote_service import VoteService

NOW = datetime(2024, 6, 1, 9, 0, tzinfo=timezone.utc)


def _question(initial_vote: str = "a", **overrides) -> QuestionCreate:
    fields = {"text": "Tea or coffee?", "option_a": "Tea", "option_b": "Coffee", "initial_vote": initial_vote}
    fields.update(overrides)
    return QuestionCreate(**fields)


@pytest.fixture
def question_service(ledger) -> QuestionService:
    return QuestionService(ledger, creation_cost=3, daily_limit=5, clock=lambda: NOW)


@pytest.mark.unit
class TestCreateQuestion:
    """Test question creation."""

    async def test_creates_question_with_seed_vote(self, ledger, question_service, make_user) -> None:
        await make_user("alice", score=5)

        question = await question_service.create_question("alice", _question("b"))

        stored = await ledger.get(question_ref(question.id))
        assert stored["text"] == "Tea or coffee?"
        assert stored["creator_uid"] == "alice"
        assert (stored["votes_a"], stored["votes_b"]) == (0, 1)
        assert stored["created_at"] == NOW

        seed = await ledger.get(vote_ref("alice", question.id))
        assert seed["choice"] == "b"
        assert seed["won"] is True

    async def test_charges_creation_cost(self, ledger, question_service, make_user) -> None:
        """Score conservation: score drops by exactly the cost."""
        await make_user("alice", score=7, questions_created=2)

        await question_service.create_question("alice", _question())

        user = await ledger.get(user_ref("alice"))
        assert user["score"] == 4
        assert user["questions_created"] == 3
        assert user["questions_created_today"] == 1
        assert user["last_question_date"] == date(2024, 6, 1)
        assert user["last_active"] == NOW

    async def test_seed_vote_does_not_touch_vote_stats(self, ledger, question_service, make_user) -> None:
        await make_user("alice", score=3)

        await question_service.create_question("alice", _question())

        user = await ledger.get(user_ref("alice"))
        assert user["score"] == 0
        assert user["votes_cast"] == 0
        assert user["votes_won"] == 0
        assert user["current_streak"] == 0

    async def test_insufficient_score(self, ledger, question_service, make_user) -> None:
        await make_user("alice", score=2)

        with pytest.raises(InsufficientScoreError) as exc_info:
            await question_service.create_question("alice", _question())

        assert exc_info.value.required == 3
        assert exc_info.value.available == 2
        assert exc_info.value.to_dict()["code"] == "insufficient_score"
        assert await ledger.count("questions") == 0
        assert (await ledger.get(user_ref("alice")))["score"] == 2

    async def test_daily_limit(self, ledger, question_service, make_user) -> None:
        await make_user(
            "alice",
            score=10,
            questions_created=5,
            questions_created_today=5,
            last_question_date=date(2024, 6, 1),
        )

        with pytest.raises(DailyLimitReachedError) as exc_info:
            await question_service.create_question("alice", _question())

        assert exc_info.value.limit == 5
        assert "5 questions per day" in exc_info.value.message
        assert (await ledger.get(user_ref("alice")))["score"] == 10

    async def test_daily_limit_resets_next_day(self, ledger, question_service, make_user) -> None:
        await make_user(
            "alice",
            score=10,
            questions_created=5,
            questions_created_today=5,
            last_question_date=date(2024, 5, 31),
        )

        await question_service.create_question("alice", _question())

        user = await ledger.get(user_ref("alice"))
        assert user["questions_created_today"] == 1
        assert user["questions_created"] == 6
        assert user["last_question_date"] == date(2024, 6, 1)

    async def test_limit_counts_up_within_day(self, ledger, make_user) -> None:
        service = QuestionService(ledger, creation_cost=1, daily_limit=2, clock=lambda: NOW)
        await make_user("alice", score=10)

        await service.create_question("alice", _question())
        await service.create_question("alice", _question())
        with pytest.raises(DailyLimitReachedError):
            await service.create_question("alice", _question())

        assert (await ledger.get(user_ref("alice")))["score"] == 8

    async def test_unknown_user(self, question_service) -> None:
        with pytest.raises(NotFoundError):
            await question_service.create_question("ghost", _question())

    async def test_end_to_end_scenario(self, ledger, question_service, make_user) -> None:
        """New player asks with all their points; an opponent ties it and loses."""
        await make_user("alice", score=3)
        await make_user("bob", score=3)

        question = await question_service.create_question("alice", _question("a"))
        assert (await ledger.get(user_ref("alice")))["score"] == 0

        result = await VoteService(ledger, clock=lambda: NOW).resolve_vote("bob", question.id, VoteChoice.B)

        assert (result.votes_a, result.votes_b) == (1, 1)
        assert result.won is False
        assert result.score == 3


@pytest.mark.unit
class TestValidateQuestionInput:
    """Test content validation."""

    def test_trims_whitespace(self) -> None:
        data = validate_question_input(_question(text="  Tea or coffee?  ", option_a=" Tea "))
        assert data.text == "Tea or coffee?"
        assert data.option_a == "Tea"

    def test_empty_text(self) -> None:
        with pytest.raises(InvalidInputError):
            validate_question_input(_question(text="   "))

    def test_empty_option(self) -> None:
        with pytest.raises(InvalidInputError):
            validate_question_input(_question(option_b=""))

    def test_text_too_long(self) -> None:
        with pytest.raises(InvalidInputError):
            validate_question_input(_question(text="x" * 281))

    def test_option_too_long(self) -> None:
        with pytest.raises(InvalidInputError):
            validate_question_input(_question(option_a="x" * 61))

    async def test_rejected_before_transaction(self, ledger, question_service, make_user) -> None:
        await make_user("alice", score=5)

        with pytest.raises(InvalidInputError):
            await question_service.create_question("alice", _question(text=""))

        assert (await ledger.get(user_ref("alice")))["score"] == 5
