"""
Ledger document models for ThisOrThat.

These Pydantic models define the documents kept in the ledger store. The
same shapes are persisted by the in-memory store and by the SQL tables in
models/user.py, models/question.py and models/vote.py.

Collections:
- users: User accounts, score and stats (key: uid)
- questions: Binary questions with vote tallies (key: generated id)
- votes: One record per (uid, question) pair (key: "{uid}_{question_id}")
"""

from datetime import date, datetime, timezone
from enum import Enum
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, Field


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


# ============================================================================
# Enums
# ============================================================================


class VoteChoice(str, Enum):
    """The two sides of a question."""

    A = "a"
    B = "b"


# ============================================================================
# Base Document Model
# ============================================================================


class LedgerDocument(BaseModel):
    """
    Base class for ledger documents.

    Store-managed fields (such as the optimistic-concurrency version) are
    never part of the document and are dropped on load.
    """

    id: str = Field(default_factory=lambda: str(uuid4()))

    model_config = {
        "extra": "ignore",
        "use_enum_values": True,
    }


# ============================================================================
# User Documents
# ============================================================================


class UserDocument(LedgerDocument):
    """
    User account stored in the 'users' collection.

    Mutated by the vote and question-creation transactions only, apart from
    display name edits.
    """

    display_name: Optional[str] = None

    # Spendable currency: +1 per won vote, -QUESTION_CREATION_COST per question
    score: int = Field(0, ge=0)

    # Voting stats
    votes_cast: int = Field(0, ge=0)
    votes_won: int = Field(0, ge=0)
    current_streak: int = Field(0, ge=0)
    best_streak: int = Field(0, ge=0)

    # Question creation quota
    questions_created: int = Field(0, ge=0)
    questions_created_today: int = Field(0, ge=0)
    last_question_date: Optional[date] = None

    # Timestamps
    created_at: datetime = Field(default_factory=utc_now)
    last_active: Optional[datetime] = None


# ============================================================================
# Question Documents
# ============================================================================


class QuestionDocument(LedgerDocument):
    """
    Binary question stored in the 'questions' collection.

    votes_a and votes_b only ever grow, one step per vote record.
    """

    text: str
    option_a: str
    option_b: str
    votes_a: int = Field(0, ge=0)
    votes_b: int = Field(0, ge=0)
    created_at: datetime = Field(default_factory=utc_now)
    creator_uid: Optional[str] = None

    @property
    def total_votes(self) -> int:
        return self.votes_a + self.votes_b


# ============================================================================
# Vote Documents
# ============================================================================


class VoteDocument(LedgerDocument):
    """
    Immutable vote record stored in the 'votes' collection.

    Its existence is what marks a question as voted for a user; `won` is
    fixed when the vote is cast and never revisited.
    """

    uid: str
    question_id: str
    choice: VoteChoice
    won: bool
    created_at: datetime = Field(default_factory=utc_now)
