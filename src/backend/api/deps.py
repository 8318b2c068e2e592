"""
Shared dependencies for API endpoints.

Includes:
- Bearer JWT authentication
- Engine construction on top of the request's ledger store
"""

from typing import Annotated

import structlog
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from core.security import decode_token
from models.documents import UserDocument
from repositories.provider import LedgerDep, get_user_repository
from repositories.user_repository import UserRepository
from services.question_service import QuestionService
from services.vote_service import VoteService

logger = structlog.get_logger(__name__)

# Security scheme
security = HTTPBearer()


# =============================================================================
# User Authentication (JWT-based)
# =============================================================================


async def get_current_uid(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(security)],
) -> str:
    """
    Extract the player's uid from the bearer token.

    Raises:
        HTTPException: If the token is invalid or has no subject.
    """
    payload = decode_token(credentials.credentials)

    if payload is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    uid = payload.get("sub")
    if not uid:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return uid


async def get_current_user(
    uid: Annotated[str, Depends(get_current_uid)],
    user_repo: Annotated[UserRepository, Depends(get_user_repository)],
) -> UserDocument:
    """Load the authenticated player's account."""
    user = await user_repo.get_by_id(uid)

    if user is None:
        logger.warning("token_for_unknown_user", uid=uid)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return user


# =============================================================================
# Engines
# =============================================================================


async def get_vote_service(ledger: LedgerDep) -> VoteService:
    return VoteService(ledger)


async def get_question_service(ledger: LedgerDep) -> QuestionService:
    return QuestionService(ledger)
