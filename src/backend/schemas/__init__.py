"""Schemas module initialization."""

from schemas.auth import TokenResponse
from schemas.question import QuestionCreate, QuestionFeed
from schemas.user import DisplayNameUpdate, LeaderboardEntry, UserProfile, UserStats
from schemas.vote import VoteCreate, VoteHistoryItem, VoteResult, VoteStatus

__all__ = [
    "TokenResponse",
    "QuestionCreate",
    "QuestionFeed",
    "DisplayNameUpdate",
    "LeaderboardEntry",
    "UserProfile",
    "UserStats",
    "VoteCreate",
    "VoteHistoryItem",
    "VoteResult",
    "VoteStatus",
]
