"""
Question endpoints.

The unvoted-question feed, asking a question and single-question lookup.
"""

from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query, status

from api.deps import get_current_uid, get_question_service
from core.config import settings
from models.documents import QuestionDocument
from repositories.provider import get_question_repository
from repositories.question_repository import QuestionRepository
from schemas.question import QuestionCreate, QuestionFeed
from services.errors import NotFoundError
from services.question_service import QuestionService

router = APIRouter()


@router.get("", response_model=QuestionFeed)
async def get_question_feed(
    uid: Annotated[str, Depends(get_current_uid)],
    question_repo: Annotated[QuestionRepository, Depends(get_question_repository)],
    limit: int = Query(default=settings.QUESTIONS_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    cursor: Optional[str] = Query(default=None),
) -> QuestionFeed:
    """
    Get the next page of questions the current player has not voted on.

    Pass `next_cursor` from the previous page as `cursor` to continue.
    """
    return await question_repo.get_unvoted_questions(uid, page_size=limit, cursor=cursor)


@router.post("", response_model=QuestionDocument, status_code=status.HTTP_201_CREATED)
async def create_question(
    data: QuestionCreate,
    uid: Annotated[str, Depends(get_current_uid)],
    question_service: Annotated[QuestionService, Depends(get_question_service)],
) -> QuestionDocument:
    """
    Ask a new question.

    Costs QUESTION_CREATION_COST points, counts against the daily limit and
    casts the creator's vote on `initial_vote`.
    """
    return await question_service.create_question(uid, data)


@router.get("/{question_id}", response_model=QuestionDocument)
async def get_question(
    question_id: str,
    uid: Annotated[str, Depends(get_current_uid)],
    question_repo: Annotated[QuestionRepository, Depends(get_question_repository)],
) -> QuestionDocument:
    """Get a single question with its current tallies."""
    question = await question_repo.get_by_id(question_id)
    if question is None:
        raise NotFoundError("Question", question_id)
    return question
