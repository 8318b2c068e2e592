"""Database models module."""

from models.question import Question
from models.user import User
from models.vote import Vote

__all__ = [
    "User",
    "Question",
    "Vote",
]
