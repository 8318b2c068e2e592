"""
Authentication endpoints.

Players sign in anonymously: each call creates a new account with the
starting score and returns a bearer token bound to its uid.
"""

from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, status

from core.security import create_access_token
from repositories.provider import get_user_repository
from repositories.user_repository import UserRepository
from schemas.auth import TokenResponse

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.post("/anonymous", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
async def sign_in_anonymously(
    user_repo: Annotated[UserRepository, Depends(get_user_repository)],
) -> TokenResponse:
    """Create an anonymous player account and issue its access token."""
    user = await user_repo.create_anonymous()
    logger.info("anonymous_sign_in", uid=user.id)

    return TokenResponse(access_token=create_access_token(user.id), user=user)
