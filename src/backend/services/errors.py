"""
Game errors raised by the vote and question engines.

Each error carries a stable `code` and a message that can be shown to the
player as-is. Precondition errors also carry the threshold that was violated.
"""

from typing import Any


class GameError(Exception):
    """Base exception for game rule failures. Nothing was written."""

    code = "game_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, Any]:
        return {"detail": self.message, "code": self.code}


class InvalidInputError(GameError):
    """Malformed input, rejected before any transaction starts."""

    code = "validation_error"


class AlreadyVotedError(GameError):
    """A vote record already exists for this user and question."""

    code = "already_voted"

    def __init__(self, uid: str, question_id: str):
        super().__init__("You have already voted on this question")
        self.uid = uid
        self.question_id = question_id


class NotFoundError(GameError):
    """The user account or question does not exist."""

    code = "not_found"

    def __init__(self, kind: str, identifier: str):
        super().__init__(f"{kind} not found")
        self.kind = kind
        self.identifier = identifier


class InsufficientScoreError(GameError):
    """Not enough points to pay for a new question."""

    code = "insufficient_score"

    def __init__(self, required: int, available: int):
        super().__init__(f"Need {required} points to ask a question")
        self.required = required
        self.available = available

    def to_dict(self) -> dict[str, Any]:
        return {**super().to_dict(), "required": self.required, "available": self.available}


class DailyLimitReachedError(GameError):
    """The daily question creation quota is used up."""

    code = "daily_limit_reached"

    def __init__(self, limit: int):
        super().__init__(f"Daily limit reached. You can only create {limit} questions per day.")
        self.limit = limit

    def to_dict(self) -> dict[str, Any]:
        return {**super().to_dict(), "limit": self.limit}


class TransientLedgerError(GameError):
    """
    The store kept reporting conflicts until the retry budget ran out.

    Safe to retry: had the transaction committed, the retry would fail with
    AlreadyVotedError instead of counting twice.
    """

    code = "transient"

    def __init__(self, message: str = "Something went wrong. Please try again."):
        super().__init__(message)
