"""
Vote record repository.

Read-only: vote records are created by the vote and question transactions
and never changed afterwards.
"""

import logging

from db.ledger import VOTES_COLLECTION, Filter, LedgerStore, question_ref, vote_ref
from models.documents import QuestionDocument, VoteDocument
from schemas.vote import VoteHistoryItem

logger = logging.getLogger(__name__)


class VoteRepository:
    """Repository for vote record lookups."""

    def __init__(self, ledger: LedgerStore):
        self.ledger = ledger

    async def has_voted(self, uid: str, question_id: str) -> bool:
        """Check the composite-key vote record (point read)."""
        return await self.ledger.get(vote_ref(uid, question_id)) is not None

    async def get_voted_question_ids(self, uid: str) -> set[str]:
        """Ids of every question `uid` has voted on, including their own."""
        results = await self.ledger.query(VOTES_COLLECTION, filters=[Filter("uid", "==", uid)])
        return {r["question_id"] for r in results}

    async def get_vote_history(self, uid: str, limit: int = 50) -> list[VoteHistoryItem]:
        """
        A user's most recent votes, newest first, each with its question.

        Votes whose question can no longer be read are skipped.
        """
        results = await self.ledger.query(
            VOTES_COLLECTION,
            filters=[Filter("uid", "==", uid)],
            order_by="created_at",
            descending=True,
            limit=limit,
        )

        history: list[VoteHistoryItem] = []
        for data in results:
            vote = VoteDocument(**data)
            question_data = await self.ledger.get(question_ref(vote.question_id))
            if question_data is None:
                logger.warning(f"Vote {vote.id} references missing question {vote.question_id}")
                continue
            history.append(VoteHistoryItem(vote=vote, question=QuestionDocument(**question_data)))

        return history
