"""
Pytest fixtures for ThisOrThat backend tests.
"""

import os
from collections.abc import AsyncGenerator, Awaitable, Callable
from datetime import datetime, timedelta, timezone
from typing import Any
from uuid import uuid4

import pytest
from httpx import ASGITransport, AsyncClient

# Set test environment variables before importing app
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-testing")
os.environ.setdefault("LEDGER_BACKEND", "memory")
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("DEBUG", "false")

BASE_TIME = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture(scope="session")
def anyio_backend() -> str:
    """Use asyncio backend for async tests."""
    return "asyncio"


@pytest.fixture
def ledger() -> Any:
    """Fresh in-memory ledger store without retry delays."""
    from db.memory_ledger import MemoryLedgerStore

    return MemoryLedgerStore(max_attempts=10, retry_base_delay=0)


@pytest.fixture
async def app(ledger: Any) -> AsyncGenerator[Any, None]:
    """FastAPI application wired to the test ledger."""
    from main import app as fastapi_app
    from repositories.provider import get_ledger_store

    fastapi_app.dependency_overrides[get_ledger_store] = lambda: ledger
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
async def client(app: Any) -> AsyncGenerator[AsyncClient, None]:
    """Create async test client."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest.fixture
def make_user(ledger: Any) -> Callable[..., Awaitable[dict[str, Any]]]:
    """Factory that stores a user document and returns its data."""
    from db.ledger import Create, TransactionPlan, user_ref
    from models.documents import UserDocument

    async def _make_user(uid: str | None = None, **fields: Any) -> dict[str, Any]:
        uid = uid or uuid4().hex
        data = UserDocument(id=uid, **{"display_name": f"Player{uid[-4:]}", "score": 3, **fields}).model_dump()
        ref = user_ref(uid)
        await ledger.run_transaction([ref], lambda snapshot: TransactionPlan(writes=[Create(ref, data)]))
        return data

    return _make_user


@pytest.fixture
def make_question(ledger: Any) -> Callable[..., Awaitable[dict[str, Any]]]:
    """
    Factory that stores a question document and returns its data.

    Questions made in sequence get increasing `created_at` unless given one.
    """
    from db.ledger import Create, TransactionPlan, question_ref
    from models.documents import QuestionDocument

    counter = {"n": 0}

    async def _make_question(question_id: str | None = None, **fields: Any) -> dict[str, Any]:
        counter["n"] += 1
        question_id = question_id or f"q{counter['n']:03d}"
        fields.setdefault("created_at", BASE_TIME + timedelta(minutes=counter["n"]))
        data = QuestionDocument(
            id=question_id,
            **{"text": "Cats or dogs?", "option_a": "Cats", "option_b": "Dogs", **fields},
        ).model_dump()
        ref = question_ref(question_id)
        await ledger.run_transaction([ref], lambda snapshot: TransactionPlan(writes=[Create(ref, data)]))
        return data

    return _make_question


@pytest.fixture
def auth_headers_for() -> Callable[[str], dict[str, str]]:
    """Build bearer headers for a uid."""
    from core.security import create_access_token

    def _headers(uid: str) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {create_access_token(uid)}",
            "Content-Type": "application/json",
        }

    return _headers
