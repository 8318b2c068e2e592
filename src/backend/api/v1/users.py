"""
User profile endpoints.

The current player's account, stats, rank, vote history and questions.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from api.deps import get_current_uid, get_current_user
from core.config import settings
from models.documents import QuestionDocument, UserDocument
from repositories.provider import get_question_repository, get_user_repository, get_vote_repository
from repositories.question_repository import QuestionRepository
from repositories.user_repository import UserRepository, get_user_stats
from repositories.vote_repository import VoteRepository
from schemas.user import DisplayNameUpdate, UserProfile
from schemas.vote import VoteHistoryItem

router = APIRouter()


@router.get("/me", response_model=UserProfile)
async def get_my_profile(
    current_user: Annotated[UserDocument, Depends(get_current_user)],
    user_repo: Annotated[UserRepository, Depends(get_user_repository)],
) -> UserProfile:
    """Get the current player's account, stats and leaderboard rank."""
    rank = await user_repo.get_user_rank(current_user.id)
    return UserProfile(user=current_user, stats=get_user_stats(current_user), rank=rank)


@router.patch("/me", response_model=UserDocument)
async def update_my_display_name(
    data: DisplayNameUpdate,
    uid: Annotated[str, Depends(get_current_uid)],
    user_repo: Annotated[UserRepository, Depends(get_user_repository)],
) -> UserDocument:
    """Rename the current player (1 to 30 characters)."""
    return await user_repo.update_display_name(uid, data.display_name)


@router.get("/me/votes", response_model=list[VoteHistoryItem])
async def get_my_votes(
    uid: Annotated[str, Depends(get_current_uid)],
    vote_repo: Annotated[VoteRepository, Depends(get_vote_repository)],
    limit: int = Query(default=settings.HISTORY_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
) -> list[VoteHistoryItem]:
    """Get the current player's most recent votes, newest first."""
    return await vote_repo.get_vote_history(uid, limit=limit)


@router.get("/me/questions", response_model=list[QuestionDocument])
async def get_my_questions(
    uid: Annotated[str, Depends(get_current_uid)],
    question_repo: Annotated[QuestionRepository, Depends(get_question_repository)],
    limit: int = Query(default=settings.QUESTIONS_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
) -> list[QuestionDocument]:
    """Get the questions the current player has asked, newest first."""
    return await question_repo.get_user_questions(uid, limit=limit)
