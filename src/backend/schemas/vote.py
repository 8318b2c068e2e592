"""
Vote-related Pydantic schemas.
"""

from pydantic import BaseModel, Field

from models.documents import QuestionDocument, VoteChoice, VoteDocument


class VoteCreate(BaseModel):
    """Schema for casting a vote."""

    choice: VoteChoice


class VoteResult(BaseModel):
    """
    Outcome of a resolved vote, rendered by the client.

    Tallies and percentages include the vote itself; percentage_b is always
    100 - percentage_a.
    """

    won: bool
    choice: VoteChoice
    votes_a: int
    votes_b: int
    percentage_a: int = Field(..., ge=0, le=100)
    percentage_b: int = Field(..., ge=0, le=100)

    # Streak and score after the vote, for the result screen
    previous_streak: int = 0
    new_streak: int = 0
    best_streak: int = 0
    score: int = 0

    model_config = {"use_enum_values": True}


class VoteStatus(BaseModel):
    """Whether the current user has voted on a question."""

    question_id: str
    has_voted: bool


class VoteHistoryItem(BaseModel):
    """A past vote together with the question it was cast on."""

    vote: VoteDocument
    question: QuestionDocument
