"""
Ledger and repository provider for dependency injection.

The ledger store is a process-wide singleton chosen by LEDGER_BACKEND.
Repositories and engines are cheap wrappers around it and are built per
request.

Usage:
    from repositories.provider import get_user_repository

    # In FastAPI dependencies:
    async def some_endpoint(
        user_repo: UserRepository = Depends(get_user_repository),
    ):
        user = await user_repo.get_by_id(uid)
"""

import logging
from typing import Annotated, Optional

from fastapi import Depends

from core.config import settings
from db.ledger import LedgerStore
from repositories.question_repository import QuestionRepository
from repositories.user_repository import UserRepository
from repositories.vote_repository import VoteRepository

logger = logging.getLogger(__name__)

# Global instance (lazy-initialized)
_ledger: Optional[LedgerStore] = None


# =============================================================================
# Ledger Store
# =============================================================================


def create_ledger_store() -> LedgerStore:
    """Build a ledger store for the configured backend."""
    if settings.LEDGER_BACKEND == "memory":
        from db.memory_ledger import MemoryLedgerStore

        logger.info("Using in-memory ledger store")
        return MemoryLedgerStore(
            max_attempts=settings.TRANSACTION_MAX_ATTEMPTS,
            retry_base_delay=settings.TRANSACTION_RETRY_BASE_DELAY,
        )

    from db.session import get_session_factory
    from db.sql_ledger import SqlLedgerStore

    logger.info("Using SQL ledger store")
    return SqlLedgerStore(
        get_session_factory(),
        max_attempts=settings.TRANSACTION_MAX_ATTEMPTS,
        retry_base_delay=settings.TRANSACTION_RETRY_BASE_DELAY,
    )


def get_ledger() -> LedgerStore:
    """Get or create the shared ledger store."""
    global _ledger

    if _ledger is None:
        _ledger = create_ledger_store()

    return _ledger


async def close_ledger() -> None:
    """
    Close the shared ledger store.

    Should be called during application shutdown.
    """
    global _ledger

    if _ledger is not None:
        await _ledger.close()
        _ledger = None


# =============================================================================
# FastAPI Dependencies
# =============================================================================


async def get_ledger_store() -> LedgerStore:
    """FastAPI dependency for the ledger store. Overridden in tests."""
    return get_ledger()


LedgerDep = Annotated[LedgerStore, Depends(get_ledger_store)]


async def get_user_repository(ledger: LedgerDep) -> UserRepository:
    return UserRepository(ledger)


async def get_question_repository(ledger: LedgerDep) -> QuestionRepository:
    return QuestionRepository(ledger)


async def get_vote_repository(ledger: LedgerDep) -> VoteRepository:
    return VoteRepository(ledger)
