"""
User-related Pydantic schemas.
"""

from typing import Optional

from pydantic import BaseModel, Field

from models.documents import UserDocument


class UserStats(BaseModel):
    """Derived player statistics."""

    score: int
    votes_cast: int
    votes_won: int
    win_rate: int = Field(..., description="Whole-number percentage of votes won")
    questions_created: int
    current_streak: int
    best_streak: int


class UserProfile(BaseModel):
    """The current user's account, stats and leaderboard rank."""

    user: UserDocument
    stats: UserStats
    rank: Optional[int] = None


class DisplayNameUpdate(BaseModel):
    """Schema for renaming the player."""

    display_name: str


class LeaderboardEntry(BaseModel):
    """A single entry on the leaderboard."""

    rank: int
    uid: str
    display_name: str
    score: int
    votes_won: int
    votes_cast: int
    win_rate: int
    current_streak: int
    best_streak: int
