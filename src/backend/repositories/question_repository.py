"""
Question repository.

Serves the unvoted-question feed with keyset pagination, single questions
and the questions a user has created.
"""

import base64
import json
import logging
from datetime import datetime, timezone
from typing import Any, Optional

from db.ledger import QUESTIONS_COLLECTION, Filter, LedgerStore, question_ref
from models.documents import QuestionDocument
from repositories.vote_repository import VoteRepository
from schemas.question import QuestionFeed
from services.errors import InvalidInputError

logger = logging.getLogger(__name__)


def encode_cursor(question: QuestionDocument) -> str:
    """Opaque cursor pointing just past `question` in newest-first order."""
    payload = json.dumps({"created_at": question.created_at.isoformat(), "id": question.id})
    return base64.urlsafe_b64encode(payload.encode()).decode()


def decode_cursor(cursor: str) -> tuple[datetime, str]:
    """
    Decode a feed cursor into its `(created_at, id)` position.

    Raises:
        InvalidInputError: The cursor was not produced by encode_cursor
    """
    try:
        payload: dict[str, Any] = json.loads(base64.urlsafe_b64decode(cursor.encode()))
        created_at = datetime.fromisoformat(payload["created_at"])
        question_id = str(payload["id"])
    except (ValueError, KeyError, TypeError):
        raise InvalidInputError("Invalid cursor") from None

    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=timezone.utc)
    return created_at, question_id


class QuestionRepository:
    """Repository for question reads."""

    def __init__(self, ledger: LedgerStore):
        self.ledger = ledger
        self.votes = VoteRepository(ledger)

    async def get_by_id(self, question_id: str) -> Optional[QuestionDocument]:
        """Get a question by id (point read)."""
        data = await self.ledger.get(question_ref(question_id))
        if data is None:
            return None
        return QuestionDocument(**data)

    async def get_unvoted_questions(
        self,
        uid: str,
        page_size: int = 20,
        cursor: Optional[str] = None,
    ) -> QuestionFeed:
        """
        Newest-first page of questions `uid` has not voted on.

        Questions are scanned in batches of twice the page size and filtered
        against the user's vote records until the page is full or the
        questions run out. The returned cursor points at the last question
        consumed, so nothing unvoted is skipped between pages.
        """
        start_after = decode_cursor(cursor) if cursor else None
        voted = await self.votes.get_voted_question_ids(uid)
        batch_size = page_size * 2

        questions: list[QuestionDocument] = []
        last_seen: Optional[QuestionDocument] = None
        more = True

        while more and len(questions) < page_size:
            batch = await self.ledger.query(
                QUESTIONS_COLLECTION,
                order_by="created_at",
                descending=True,
                start_after=start_after,
                limit=batch_size,
            )
            more = len(batch) == batch_size

            for position, data in enumerate(batch, start=1):
                question = QuestionDocument(**data)
                last_seen = question
                if question.id not in voted:
                    questions.append(question)
                if len(questions) == page_size:
                    more = more or position < len(batch)
                    break

            if last_seen is not None:
                start_after = (last_seen.created_at, last_seen.id)

        next_cursor = encode_cursor(last_seen) if more and last_seen is not None else None
        return QuestionFeed(questions=questions, next_cursor=next_cursor)

    async def get_user_questions(self, uid: str, limit: int = 20) -> list[QuestionDocument]:
        """Questions created by `uid`, newest first."""
        results = await self.ledger.query(
            QUESTIONS_COLLECTION,
            filters=[Filter("creator_uid", "==", uid)],
            order_by="created_at",
            descending=True,
            limit=limit,
        )
        return [QuestionDocument(**r) for r in results]
