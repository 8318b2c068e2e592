"""
SQL ledger store on SQLAlchemy async.

Each ledger collection maps onto one table with a `version` column. A
transaction attempt reads the snapshot and applies the writes inside one
database transaction:
- updates are conditional (`UPDATE ... WHERE id = :id AND version = :seen`)
  and bump the version;
- creates are plain inserts, so an existing primary key fails the commit;
- documents read but not written have their version re-checked.

A zero-row update, a duplicate key or a lock error is reported as a
TransactionConflict and the plan is retried from a fresh snapshot.
"""

import logging
import operator
from datetime import datetime, timezone
from typing import Any, Mapping, Optional, Sequence

from sqlalchemy import Table, and_, func, insert, or_, select, update
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from db.ledger import (
    FILTER_OPERATORS,
    QUESTIONS_COLLECTION,
    USERS_COLLECTION,
    VOTES_COLLECTION,
    BaseLedgerStore,
    Create,
    DocumentRef,
    Filter,
    LedgerError,
    PlanFn,
    Snapshot,
    T,
    TransactionConflict,
    Update,
    Write,
)
from models import Question, User, Vote

logger = logging.getLogger(__name__)

LEDGER_TABLES: dict[str, Table] = {
    USERS_COLLECTION: User.__table__,  # type: ignore[dict-item]
    QUESTIONS_COLLECTION: Question.__table__,  # type: ignore[dict-item]
    VOTES_COLLECTION: Vote.__table__,  # type: ignore[dict-item]
}


class SqlLedgerStore(BaseLedgerStore):
    """Ledger store backed by a relational database."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        tables: Optional[Mapping[str, Table]] = None,
        max_attempts: int = 5,
        retry_base_delay: float = 0.01,
    ):
        super().__init__(max_attempts=max_attempts, retry_base_delay=retry_base_delay)
        self._session_factory = session_factory
        self._tables = dict(tables or LEDGER_TABLES)

    def _table(self, collection: str) -> Table:
        try:
            return self._tables[collection]
        except KeyError:
            raise LedgerError(f"Unknown collection: {collection}") from None

    # ========================================================================
    # Transactions
    # ========================================================================

    async def _attempt(self, refs: tuple[DocumentRef, ...], plan: PlanFn[T]) -> T:
        async with self._session_factory() as session:
            try:
                async with session.begin():
                    versions: dict[DocumentRef, int] = {}
                    documents: dict[DocumentRef, Optional[dict[str, Any]]] = {}
                    for ref in refs:
                        versions[ref], documents[ref] = await self._read(session, ref)

                    outcome = plan(Snapshot(documents))
                    await self._commit(session, versions, outcome.writes)
            except (IntegrityError, OperationalError) as e:
                raise TransactionConflict(str(e.orig or e)) from e

        return outcome.result  # type: ignore[return-value]

    async def _read(self, session: AsyncSession, ref: DocumentRef) -> tuple[int, Optional[dict[str, Any]]]:
        table = self._table(ref.collection)
        result = await session.execute(select(table).where(table.c.id == ref.id))
        row = result.mappings().first()
        if row is None:
            return 0, None
        document = _to_document(row)
        return document.pop("version"), document

    async def _commit(
        self,
        session: AsyncSession,
        versions: dict[DocumentRef, int],
        writes: Sequence[Write],
    ) -> None:
        written: set[DocumentRef] = set()

        for write in writes:
            table = self._table(write.ref.collection)

            if isinstance(write, Create):
                values = {**write.data, "id": write.ref.id, "version": 1}
                await session.execute(insert(table).values(**values))

            elif isinstance(write, Update):
                seen = versions.get(write.ref)
                if not seen:
                    raise LedgerError(f"Update of {write.ref} requires it to be read and present")
                result = await session.execute(
                    update(table)
                    .where(table.c.id == write.ref.id, table.c.version == seen)
                    .values(**write.changes, version=seen + 1)
                )
                if _rowcount(result) != 1:
                    raise TransactionConflict(f"{write.ref.collection}/{write.ref.id} changed since version {seen}")

            written.add(write.ref)

        # Documents only read must still be at the version the plan saw
        for ref, seen in versions.items():
            if ref in written:
                continue
            table = self._table(ref.collection)
            current = await session.scalar(select(table.c.version).where(table.c.id == ref.id))
            if (current or 0) != seen:
                raise TransactionConflict(f"{ref.collection}/{ref.id} changed since version {seen}")

    # ========================================================================
    # Reads
    # ========================================================================

    async def get(self, ref: DocumentRef) -> Optional[dict[str, Any]]:
        """Point read outside of a transaction."""
        async with self._session_factory() as session:
            _, document = await self._read(session, ref)
        return document

    async def query(
        self,
        collection: str,
        *,
        filters: Sequence[Filter] = (),
        order_by: Optional[str] = None,
        descending: bool = False,
        start_after: Optional[tuple[Any, str]] = None,
        limit: Optional[int] = None,
    ) -> list[dict[str, Any]]:
        """
        Filter, order and page rows of a collection.

        Ordering is by `order_by` with id as tie-break; `start_after` is the
        `(value, id)` key of the last row already seen (keyset pagination).
        """
        table = self._table(collection)
        stmt = select(table).where(*_where(table, filters))

        if order_by is not None:
            column = table.c[order_by]
            if start_after is not None:
                value, last_id = start_after
                past = operator.lt if descending else operator.gt
                stmt = stmt.where(or_(past(column, value), and_(column == value, past(table.c.id, last_id))))
            if descending:
                stmt = stmt.order_by(column.desc(), table.c.id.desc())
            else:
                stmt = stmt.order_by(column.asc(), table.c.id.asc())
        elif start_after is not None:
            raise LedgerError("start_after requires order_by")

        if limit is not None:
            stmt = stmt.limit(limit)

        async with self._session_factory() as session:
            result = await session.execute(stmt)
            rows = result.mappings().all()

        documents = []
        for row in rows:
            document = _to_document(row)
            document.pop("version")
            documents.append(document)
        return documents

    async def count(self, collection: str, *, filters: Sequence[Filter] = ()) -> int:
        table = self._table(collection)
        stmt = select(func.count()).select_from(table).where(*_where(table, filters))
        async with self._session_factory() as session:
            return int(await session.scalar(stmt) or 0)

    # ========================================================================
    # Lifecycle
    # ========================================================================

    async def initialize(self) -> None:
        from db.session import init_db

        await init_db()

    async def close(self) -> None:
        from db.session import close_db

        await close_db()


def _where(table: Table, filters: Sequence[Filter]) -> list[Any]:
    return [FILTER_OPERATORS[f.op](table.c[f.field], f.value) for f in filters]


def _rowcount(result: Any) -> int:
    """Safely get rowcount from result."""
    return getattr(result, "rowcount", 0) or 0


def _to_document(row: Mapping[str, Any]) -> dict[str, Any]:
    """Row to document dict. SQLite drops tzinfo, so naive timestamps are UTC."""
    document = dict(row)
    for key, value in document.items():
        if isinstance(value, datetime) and value.tzinfo is None:
            document[key] = value.replace(tzinfo=timezone.utc)
    return document
