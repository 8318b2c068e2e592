"""
Authentication-related Pydantic schemas.

Players start anonymously: the first call creates an account and returns a
bearer token bound to its uid.
"""

from pydantic import BaseModel

from models.documents import UserDocument


class TokenResponse(BaseModel):
    """JWT token response."""

    access_token: str
    token_type: str = "bearer"
    user: UserDocument
