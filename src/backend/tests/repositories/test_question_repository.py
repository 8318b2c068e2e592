"""
Tests for question repository and the unvoted-question feed.
"""

import pytest

from repositories.question_repository import QuestionRepository, decode_cursor, encode_cursor
from services.errors import InvalidInputError
from services.vote_service import VoteService


async def _feed_ids(repo: QuestionRepository, uid: str, page_size: int) -> list[list[str]]:
    """Walk the whole feed and return question ids page by page."""
    pages: list[list[str]] = []
    cursor = None
    while True:
        feed = await repo.get_unvoted_questions(uid, page_size=page_size, cursor=cursor)
        pages.append([q.id for q in feed.questions])
        if feed.next_cursor is None:
            return pages
        cursor = feed.next_cursor


@pytest.mark.unit
class TestUnvotedFeed:
    """Test feed paging."""

    async def test_newest_first(self, ledger, make_user, make_question) -> None:
        await make_user("alice")
        for _ in range(3):
            await make_question()

        feed = await QuestionRepository(ledger).get_unvoted_questions("alice", page_size=10)

        assert [q.id for q in feed.questions] == ["q003", "q002", "q001"]
        assert feed.next_cursor is None

    async def test_excludes_voted_questions(self, ledger, make_user, make_question) -> None:
        await make_user("alice")
        for _ in range(4):
            await make_question()
        await VoteService(ledger).resolve_vote("alice", "q003", "a")

        feed = await QuestionRepository(ledger).get_unvoted_questions("alice", page_size=10)

        assert [q.id for q in feed.questions] == ["q004", "q002", "q001"]

    async def test_paging_covers_every_unvoted_question_once(self, ledger, make_user, make_question) -> None:
        """Pages never skip or repeat, even with voted questions in between."""
        await make_user("alice")
        for _ in range(12):
            await make_question()

        service = VoteService(ledger)
        voted = {"q012", "q011", "q007", "q004", "q003"}
        for qid in voted:
            await service.resolve_vote("alice", qid, "b")

        pages = await _feed_ids(QuestionRepository(ledger), "alice", page_size=2)

        seen = [qid for page in pages for qid in page]
        expected = [f"q{n:03d}" for n in range(12, 0, -1) if f"q{n:03d}" not in voted]
        assert seen == expected
        assert all(len(page) <= 2 for page in pages)

    async def test_cursor_resumes_after_last_consumed(self, ledger, make_user, make_question) -> None:
        """
        A full page stops mid-batch; the next page starts right after the last
        question taken, not after the end of the batch.
        """
        await make_user("alice")
        for _ in range(6):
            await make_question()

        repo = QuestionRepository(ledger)
        first = await repo.get_unvoted_questions("alice", page_size=2)
        assert [q.id for q in first.questions] == ["q006", "q005"]
        assert first.next_cursor is not None

        second = await repo.get_unvoted_questions("alice", page_size=2, cursor=first.next_cursor)
        assert [q.id for q in second.questions] == ["q004", "q003"]

    async def test_all_voted_returns_empty(self, ledger, make_user, make_question) -> None:
        await make_user("alice")
        await make_question("only")
        await VoteService(ledger).resolve_vote("alice", "only", "a")

        feed = await QuestionRepository(ledger).get_unvoted_questions("alice", page_size=5)

        assert feed.questions == []
        assert feed.next_cursor is None

    async def test_invalid_cursor(self, ledger) -> None:
        with pytest.raises(InvalidInputError):
            await QuestionRepository(ledger).get_unvoted_questions("alice", cursor="not-a-cursor")


@pytest.mark.unit
class TestQuestionLookups:
    """Test single and per-creator lookups."""

    async def test_get_by_id(self, ledger, make_question) -> None:
        await make_question("q1", votes_a=2, votes_b=1)

        question = await QuestionRepository(ledger).get_by_id("q1")

        assert question is not None
        assert question.total_votes == 3
        assert await QuestionRepository(ledger).get_by_id("missing") is None

    async def test_get_user_questions(self, ledger, make_question) -> None:
        await make_question("q1", creator_uid="alice")
        await make_question("q2", creator_uid="bob")
        await make_question("q3", creator_uid="alice")

        questions = await QuestionRepository(ledger).get_user_questions("alice")

        assert [q.id for q in questions] == ["q3", "q1"]


@pytest.mark.unit
class TestCursorEncoding:
    """Test cursor helpers."""

    def test_decode_restores_position(self) -> None:
        from datetime import datetime, timezone

        from models.documents import QuestionDocument

        created_at = datetime(2024, 6, 1, 12, 30, 15, 123456, tzinfo=timezone.utc)
        question = QuestionDocument(id="abc", text="?", option_a="x", option_b="y", created_at=created_at)

        assert decode_cursor(encode_cursor(question)) == (created_at, "abc")

    @pytest.mark.parametrize("cursor", ["", "!!!", "bm90IGpzb24=", "e30="])
    def test_decode_rejects_garbage(self, cursor: str) -> None:
        with pytest.raises(InvalidInputError):
            decode_cursor(cursor)
