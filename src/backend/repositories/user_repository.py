"""
User account repository.

Account bootstrap, display names, stats and the leaderboard. Score and
counters are never written here; they change only inside the vote and
question transactions.
"""

import logging
import random
from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4

from core.config import settings
from db.ledger import (
    USERS_COLLECTION,
    Create,
    Filter,
    LedgerStore,
    Snapshot,
    TransactionPlan,
    Update,
    user_ref,
)
from models.documents import UserDocument
from schemas.user import LeaderboardEntry, UserStats
from services.errors import InvalidInputError, NotFoundError
from services.scoring import win_rate

logger = logging.getLogger(__name__)

MAX_DISPLAY_NAME_LENGTH = 30

_NAME_ADJECTIVES = ["Swift", "Clever", "Lucky", "Bold", "Wise", "Quick", "Sharp", "Keen", "Bright", "Cool"]
_NAME_NOUNS = ["Fox", "Owl", "Wolf", "Bear", "Eagle", "Tiger", "Hawk", "Lion", "Raven", "Falcon"]


def generate_player_name(rng: Optional[random.Random] = None) -> str:
    """Random player name such as "SwiftFox42"."""
    rng = rng or random.Random()
    return f"{rng.choice(_NAME_ADJECTIVES)}{rng.choice(_NAME_NOUNS)}{rng.randrange(100)}"


def fallback_display_name(uid: str) -> str:
    return f"Player{uid[-4:]}"


def get_user_stats(user: UserDocument) -> UserStats:
    """Derived stats for the profile screen."""
    return UserStats(
        score=user.score,
        votes_cast=user.votes_cast,
        votes_won=user.votes_won,
        win_rate=win_rate(user.votes_won, user.votes_cast),
        questions_created=user.questions_created,
        current_streak=user.current_streak,
        best_streak=user.best_streak,
    )


class UserRepository:
    """Repository for user account operations."""

    def __init__(self, ledger: LedgerStore):
        self.ledger = ledger

    # ========================================================================
    # Read Operations
    # ========================================================================

    async def get_by_id(self, uid: str) -> Optional[UserDocument]:
        """Get a user by uid (point read)."""
        data = await self.ledger.get(user_ref(uid))
        if data is None:
            return None
        return UserDocument(**data)

    # ========================================================================
    # Write Operations
    # ========================================================================

    async def get_or_create(self, uid: str, starting_score: Optional[int] = None) -> UserDocument:
        """
        Return the account for `uid`, creating it on first authentication.

        New accounts start with STARTING_SCORE points, zeroed counters and a
        generated player name.
        """
        score = settings.STARTING_SCORE if starting_score is None else starting_score
        ref = user_ref(uid)

        def plan(snapshot: Snapshot) -> TransactionPlan[tuple[UserDocument, bool]]:
            existing = snapshot.get(ref)
            if existing is not None:
                return TransactionPlan(writes=[], result=(UserDocument(**existing), False))

            user = UserDocument(
                id=uid,
                display_name=generate_player_name(),
                score=score,
                created_at=datetime.now(timezone.utc),
            )
            return TransactionPlan(writes=[Create(ref, user.model_dump())], result=(user, True))

        user, created = await self.ledger.run_transaction([ref], plan)
        if created:
            logger.info(f"Created user {uid} ({user.display_name})")
        return user

    async def create_anonymous(self) -> UserDocument:
        """Create a fresh account under a newly issued uid."""
        return await self.get_or_create(uuid4().hex)

    async def update_display_name(self, uid: str, display_name: str) -> UserDocument:
        """
        Rename a player.

        Raises:
            InvalidInputError: Empty or longer than 30 characters
            NotFoundError: Unknown user
        """
        name = display_name.strip()
        if not name:
            raise InvalidInputError("Display name is required")
        if len(name) > MAX_DISPLAY_NAME_LENGTH:
            raise InvalidInputError(f"Display name must be at most {MAX_DISPLAY_NAME_LENGTH} characters")

        ref = user_ref(uid)

        def plan(snapshot: Snapshot) -> TransactionPlan[UserDocument]:
            data = snapshot.get(ref)
            if data is None:
                raise NotFoundError("User", uid)
            user = UserDocument(**{**data, "display_name": name})
            return TransactionPlan(writes=[Update(ref, {"display_name": name})], result=user)

        return await self.ledger.run_transaction([ref], plan)

    # ========================================================================
    # Leaderboard
    # ========================================================================

    async def get_leaderboard(self, limit: int = 50) -> list[LeaderboardEntry]:
        """Top accounts by score, highest first."""
        results = await self.ledger.query(
            USERS_COLLECTION,
            order_by="score",
            descending=True,
            limit=limit,
        )

        entries = []
        for position, data in enumerate(results, start=1):
            user = UserDocument(**data)
            entries.append(
                LeaderboardEntry(
                    rank=position,
                    uid=user.id,
                    display_name=user.display_name or fallback_display_name(user.id),
                    score=user.score,
                    votes_won=user.votes_won,
                    votes_cast=user.votes_cast,
                    win_rate=win_rate(user.votes_won, user.votes_cast),
                    current_streak=user.current_streak,
                    best_streak=user.best_streak,
                )
            )
        return entries

    async def get_user_rank(self, uid: str) -> Optional[int]:
        """1 + number of accounts with a strictly higher score, None for unknown users."""
        user = await self.get_by_id(uid)
        if user is None:
            return None

        higher = await self.ledger.count(USERS_COLLECTION, filters=[Filter("score", ">", user.score)])
        return higher + 1
