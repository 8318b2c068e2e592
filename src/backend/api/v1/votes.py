"""
Vote endpoints.

Voting on a question resolves the vote immediately: the response says
whether the player sided with the majority and carries the new tallies.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from api.deps import get_current_uid, get_vote_service
from repositories.provider import get_vote_repository
from repositories.vote_repository import VoteRepository
from schemas.vote import VoteCreate, VoteResult, VoteStatus
from services.vote_service import VoteService

router = APIRouter()


@router.post("/{question_id}/votes", response_model=VoteResult, status_code=status.HTTP_201_CREATED)
async def cast_vote(
    question_id: str,
    vote_data: VoteCreate,
    uid: Annotated[str, Depends(get_current_uid)],
    vote_service: Annotated[VoteService, Depends(get_vote_service)],
) -> VoteResult:
    """
    Vote on a question.

    Requirements:
    - User must be authenticated (enforced by dependency)
    - User cannot vote twice on the same question (409)

    The vote wins when the chosen side is strictly ahead once it is counted.
    """
    return await vote_service.resolve_vote(uid, question_id, vote_data.choice)


@router.get("/{question_id}/votes/me", response_model=VoteStatus)
async def get_vote_status(
    question_id: str,
    uid: Annotated[str, Depends(get_current_uid)],
    vote_repo: Annotated[VoteRepository, Depends(get_vote_repository)],
) -> VoteStatus:
    """Check whether the current player has voted on a question."""
    has_voted = await vote_repo.has_voted(uid, question_id)
    return VoteStatus(question_id=question_id, has_voted=has_voted)
