"""
In-memory ledger store.

Documents live in per-collection dicts together with a version counter.
Reads yield to the event loop, so concurrent transactions interleave the way
they would against a networked store; the commit step validates versions and
applies writes without yielding, which makes it a compare-and-swap.

Used for tests and for local runs with LEDGER_BACKEND=memory.
"""

import asyncio
import copy
import logging
from collections import defaultdict
from typing import Any, NamedTuple, Optional, Sequence

from db.ledger import (
    FILTER_OPERATORS,
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

logger = logging.getLogger(__name__)


class _Entry(NamedTuple):
    version: int
    data: dict[str, Any]


class MemoryLedgerStore(BaseLedgerStore):
    """Ledger store backed by process memory."""

    def __init__(self, max_attempts: int = 5, retry_base_delay: float = 0.01):
        super().__init__(max_attempts=max_attempts, retry_base_delay=retry_base_delay)
        self._collections: defaultdict[str, dict[str, _Entry]] = defaultdict(dict)

    # ========================================================================
    # Transactions
    # ========================================================================

    async def _attempt(self, refs: tuple[DocumentRef, ...], plan: PlanFn[T]) -> T:
        versions: dict[DocumentRef, int] = {}
        documents: dict[DocumentRef, Optional[dict[str, Any]]] = {}

        for ref in refs:
            await asyncio.sleep(0)
            versions[ref] = self._version(ref)
            documents[ref] = self._copy(ref)

        outcome = plan(Snapshot(documents))
        self._commit(versions, outcome.writes)
        return outcome.result  # type: ignore[return-value]

    def _commit(self, versions: dict[DocumentRef, int], writes: Sequence[Write]) -> None:
        """Validate the read set and apply writes. Must not await."""
        for ref, seen in versions.items():
            current = self._version(ref)
            if current != seen:
                raise TransactionConflict(f"{ref.collection}/{ref.id} changed (version {seen} -> {current})")

        for write in writes:
            exists = write.ref.id in self._collections[write.ref.collection]
            if isinstance(write, Create) and exists:
                raise TransactionConflict(f"{write.ref.collection}/{write.ref.id} already exists")
            if isinstance(write, Update) and write.ref not in versions:
                raise LedgerError(f"Update of {write.ref} outside the read set")
            if isinstance(write, Update) and not exists:
                raise LedgerError(f"Update of missing document {write.ref}")

        for write in writes:
            documents = self._collections[write.ref.collection]
            if isinstance(write, Create):
                documents[write.ref.id] = _Entry(1, copy.deepcopy(write.data))
            else:
                entry = documents[write.ref.id]
                merged = {**entry.data, **copy.deepcopy(write.changes)}
                documents[write.ref.id] = _Entry(entry.version + 1, merged)

    def _version(self, ref: DocumentRef) -> int:
        entry = self._collections[ref.collection].get(ref.id)
        return entry.version if entry else 0

    def _copy(self, ref: DocumentRef) -> Optional[dict[str, Any]]:
        entry = self._collections[ref.collection].get(ref.id)
        return copy.deepcopy(entry.data) if entry else None

    # ========================================================================
    # Reads
    # ========================================================================

    async def get(self, ref: DocumentRef) -> Optional[dict[str, Any]]:
        """Point read outside of a transaction."""
        await asyncio.sleep(0)
        return self._copy(ref)

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
        Filter, order and page documents of a collection.

        Ordering is by `order_by` with the document id as tie-break;
        `start_after` is the `(value, id)` key of the last item already seen.
        """
        await asyncio.sleep(0)
        items = [entry.data for entry in self._collections[collection].values() if _matches(entry.data, filters)]

        if order_by is not None:
            items.sort(key=lambda item: (item[order_by], item["id"]), reverse=descending)
            if start_after is not None:
                past = FILTER_OPERATORS["<" if descending else ">"]
                items = [item for item in items if past((item[order_by], item["id"]), start_after)]
        elif start_after is not None:
            raise LedgerError("start_after requires order_by")

        if limit is not None:
            items = items[:limit]
        return copy.deepcopy(items)

    async def count(self, collection: str, *, filters: Sequence[Filter] = ()) -> int:
        await asyncio.sleep(0)
        return sum(1 for entry in self._collections[collection].values() if _matches(entry.data, filters))


def _matches(data: dict[str, Any], filters: Sequence[Filter]) -> bool:
    for f in filters:
        value = data.get(f.field)
        if value is None or not FILTER_OPERATORS[f.op](value, f.value):
            return False
    return True
