"""Repository modules for ledger access."""

from repositories.question_repository import QuestionRepository
from repositories.user_repository import UserRepository
from repositories.vote_repository import VoteRepository

__all__ = [
    "QuestionRepository",
    "VoteRepository",
    "UserRepository",
]
