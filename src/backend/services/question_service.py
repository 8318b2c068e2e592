"""
Question creation engine.

Asking a question costs points and counts against a daily quota. Payment,
quota bookkeeping, the new question and the creator's seed vote are written
in one optimistic ledger transaction.
"""

from datetime import datetime, timezone
from typing import Callable, Optional
from uuid import uuid4

import structlog

from core.config import settings
from db.ledger import (
    Create,
    LedgerStore,
    RetriesExhaustedError,
    Snapshot,
    TransactionPlan,
    Update,
    question_ref,
    user_ref,
    vote_ref,
)
from models.documents import QuestionDocument, UserDocument, VoteChoice, VoteDocument
from schemas.question import QuestionCreate
from services.errors import (
    DailyLimitReachedError,
    InsufficientScoreError,
    InvalidInputError,
    NotFoundError,
    TransientLedgerError,
)
from services.scoring import questions_created_on

logger = structlog.get_logger(__name__)

MAX_TEXT_LENGTH = 280
MAX_OPTION_LENGTH = 60


def validate_question_input(data: QuestionCreate) -> QuestionCreate:
    """
    Trim and check question content before any transaction starts.

    Raises:
        InvalidInputError: Empty or over-long text or options
    """
    text = data.text.strip()
    option_a = data.option_a.strip()
    option_b = data.option_b.strip()

    if not text:
        raise InvalidInputError("Question text is required")
    if not option_a or not option_b:
        raise InvalidInputError("Both options are required")
    if len(text) > MAX_TEXT_LENGTH:
        raise InvalidInputError(f"Question text must be at most {MAX_TEXT_LENGTH} characters")
    if len(option_a) > MAX_OPTION_LENGTH or len(option_b) > MAX_OPTION_LENGTH:
        raise InvalidInputError(f"Options must be at most {MAX_OPTION_LENGTH} characters")

    return QuestionCreate(text=text, option_a=option_a, option_b=option_b, initial_vote=data.initial_vote)


def plan_question(
    snapshot: Snapshot,
    uid: str,
    question_id: str,
    data: QuestionCreate,
    now: datetime,
    creation_cost: int,
    daily_limit: int,
) -> TransactionPlan[QuestionDocument]:
    """
    Compute the writes for a new question from the creator's account snapshot.

    Raises:
        NotFoundError: The user does not exist
        InsufficientScoreError: score < creation_cost
        DailyLimitReachedError: daily_limit questions already created today
    """
    user_data = snapshot.get(user_ref(uid))
    if user_data is None:
        raise NotFoundError("User", uid)
    user = UserDocument(**user_data)

    if user.score < creation_cost:
        raise InsufficientScoreError(required=creation_cost, available=user.score)

    today = now.date()
    questions_today = questions_created_on(today, user.last_question_date, user.questions_created_today)
    if questions_today >= daily_limit:
        raise DailyLimitReachedError(limit=daily_limit)

    initial_vote = VoteChoice(data.initial_vote)
    question = QuestionDocument(
        id=question_id,
        text=data.text,
        option_a=data.option_a,
        option_b=data.option_b,
        votes_a=1 if initial_vote == VoteChoice.A else 0,
        votes_b=1 if initial_vote == VoteChoice.B else 0,
        created_at=now,
        creator_uid=uid,
    )

    # The seed vote is the only vote on the question, so it always wins
    seed_ref = vote_ref(uid, question_id)
    seed_vote = VoteDocument(
        id=seed_ref.id,
        uid=uid,
        question_id=question_id,
        choice=initial_vote,
        won=True,
        created_at=now,
    )

    return TransactionPlan(
        writes=[
            Create(question_ref(question_id), question.model_dump()),
            Create(seed_ref, seed_vote.model_dump()),
            Update(
                user_ref(uid),
                {
                    "score": user.score - creation_cost,
                    "questions_created": user.questions_created + 1,
                    "questions_created_today": questions_today + 1,
                    "last_question_date": today,
                    "last_active": now,
                },
            ),
        ],
        result=question,
    )


class QuestionService:
    """Creates questions against the ledger store."""

    def __init__(
        self,
        ledger: LedgerStore,
        creation_cost: Optional[int] = None,
        daily_limit: Optional[int] = None,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self.ledger = ledger
        self.creation_cost = settings.QUESTION_CREATION_COST if creation_cost is None else creation_cost
        self.daily_limit = settings.DAILY_QUESTION_LIMIT if daily_limit is None else daily_limit
        self.clock = clock

    async def create_question(self, uid: str, data: QuestionCreate) -> QuestionDocument:
        """
        Pay for and publish a new question, casting the creator's vote on it.

        The question id is generated once per call so that retried attempts
        create the same documents.

        Raises:
            InvalidInputError: Bad question content
            NotFoundError: Unknown user
            InsufficientScoreError: Not enough points
            DailyLimitReachedError: Daily quota used up
            TransientLedgerError: Conflicts outlasted the retry budget
        """
        data = validate_question_input(data)
        question_id = uuid4().hex
        now = self.clock()

        try:
            question = await self.ledger.run_transaction(
                [user_ref(uid)],
                lambda snapshot: plan_question(
                    snapshot,
                    uid,
                    question_id,
                    data,
                    now,
                    creation_cost=self.creation_cost,
                    daily_limit=self.daily_limit,
                ),
            )
        except RetriesExhaustedError as e:
            logger.error("question_transaction_exhausted", uid=uid, attempts=e.attempts)
            raise TransientLedgerError() from e

        logger.info("question_created", uid=uid, question_id=question.id, initial_vote=data.initial_vote)
        return question
