"""
Leaderboard endpoint.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from core.config import settings
from repositories.provider import get_user_repository
from repositories.user_repository import UserRepository
from schemas.user import LeaderboardEntry

router = APIRouter()


@router.get("", response_model=list[LeaderboardEntry])
async def get_leaderboard(
    user_repo: Annotated[UserRepository, Depends(get_user_repository)],
    limit: int = Query(default=settings.LEADERBOARD_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
) -> list[LeaderboardEntry]:
    """Get the top players by score. Public."""
    return await user_repo.get_leaderboard(limit=limit)
