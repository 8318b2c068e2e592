"""
Vote resolution engine.

Resolves one vote as a single optimistic ledger transaction that reads the
voter's account, the question and the (uid, question) vote record, decides
win or loss, and writes the tally increment, the account update and the vote
record together. Nothing is written unless all three commit.
"""

from datetime import datetime, timezone
from typing import Callable, Union

import structlog

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
from schemas.vote import VoteResult
from services.errors import AlreadyVotedError, InvalidInputError, NotFoundError, TransientLedgerError
from services.scoring import apply_vote, next_streak, split_percentages

logger = structlog.get_logger(__name__)


def plan_vote(
    snapshot: Snapshot,
    uid: str,
    question_id: str,
    choice: VoteChoice,
    now: datetime,
) -> TransactionPlan[VoteResult]:
    """
    Compute the writes for one vote from a consistent snapshot.

    Raises:
        AlreadyVotedError: A vote record exists for (uid, question_id)
        NotFoundError: The user or the question does not exist
    """
    if snapshot.exists(vote_ref(uid, question_id)):
        raise AlreadyVotedError(uid, question_id)

    user_data = snapshot.get(user_ref(uid))
    if user_data is None:
        raise NotFoundError("User", uid)

    question_data = snapshot.get(question_ref(question_id))
    if question_data is None:
        raise NotFoundError("Question", question_id)

    user = UserDocument(**user_data)
    question = QuestionDocument(**question_data)

    new_a, new_b, won = apply_vote(question.votes_a, question.votes_b, choice)
    new_streak, new_best = next_streak(user.current_streak, user.best_streak, won)

    if choice == VoteChoice.A:
        tally_changes = {"votes_a": new_a}
    else:
        tally_changes = {"votes_b": new_b}

    user_changes = {
        "votes_cast": user.votes_cast + 1,
        "current_streak": new_streak,
        "best_streak": new_best,
        "last_active": now,
    }
    new_score = user.score
    if won:
        new_score = user.score + 1
        user_changes["score"] = new_score
        user_changes["votes_won"] = user.votes_won + 1

    ref = vote_ref(uid, question_id)
    vote = VoteDocument(id=ref.id, uid=uid, question_id=question_id, choice=choice, won=won, created_at=now)

    percentage_a, percentage_b = split_percentages(new_a, new_b)

    return TransactionPlan(
        writes=[
            Update(question_ref(question_id), tally_changes),
            Update(user_ref(uid), user_changes),
            Create(ref, vote.model_dump()),
        ],
        result=VoteResult(
            won=won,
            choice=choice,
            votes_a=new_a,
            votes_b=new_b,
            percentage_a=percentage_a,
            percentage_b=percentage_b,
            previous_streak=user.current_streak,
            new_streak=new_streak,
            best_streak=new_best,
            score=new_score,
        ),
    )


class VoteService:
    """Casts votes against the ledger store."""

    def __init__(self, ledger: LedgerStore, clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc)):
        self.ledger = ledger
        self.clock = clock

    async def resolve_vote(self, uid: str, question_id: str, choice: Union[VoteChoice, str]) -> VoteResult:
        """
        Cast `uid`'s vote on a question and score it.

        Concurrent votes on the same question are serialized by the store's
        conflict detection; a concurrent double submission by one user
        commits once and fails the rest with AlreadyVotedError.

        Raises:
            InvalidInputError: choice is not 'a' or 'b'
            AlreadyVotedError: The user already voted on this question
            NotFoundError: Unknown user or question
            TransientLedgerError: Conflicts outlasted the retry budget
        """
        try:
            choice = VoteChoice(choice)
        except ValueError:
            raise InvalidInputError("Choice must be 'a' or 'b'") from None

        now = self.clock()
        refs = [user_ref(uid), question_ref(question_id), vote_ref(uid, question_id)]

        try:
            result = await self.ledger.run_transaction(
                refs,
                lambda snapshot: plan_vote(snapshot, uid, question_id, choice, now),
            )
        except RetriesExhaustedError as e:
            logger.error("vote_transaction_exhausted", uid=uid, question_id=question_id, attempts=e.attempts)
            raise TransientLedgerError() from e

        logger.info(
            "vote_resolved",
            uid=uid,
            question_id=question_id,
            choice=result.choice,
            won=result.won,
            votes_a=result.votes_a,
            votes_b=result.votes_b,
        )
        return result
