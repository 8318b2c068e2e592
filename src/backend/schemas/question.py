"""
Question-related Pydantic schemas.
"""

from typing import Optional

from pydantic import BaseModel, Field

from models.documents import QuestionDocument, VoteChoice


class QuestionCreate(BaseModel):
    """
    Schema for asking a new question.

    The creator's own vote is cast on `initial_vote` as part of creation.
    Content rules (non-empty, length limits) are enforced by QuestionService.
    """

    text: str
    option_a: str
    option_b: str
    initial_vote: VoteChoice


class QuestionFeed(BaseModel):
    """One page of questions the user has not voted on yet."""

    questions: list[QuestionDocument] = Field(default_factory=list)
    next_cursor: Optional[str] = Field(None, description="Opaque cursor for the next page, null when exhausted")
