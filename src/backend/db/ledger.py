"""
Ledger store abstraction shared by the in-memory and SQL backends.

A ledger transaction is a plan: a pure function that receives a snapshot of
the documents it asked for and returns the writes to commit together with the
value handed back to the caller. The store reads the snapshot, runs the plan
and commits every write atomically, but only if none of the documents in the
read set changed in the meantime. On conflict the whole plan is re-run
against a fresh snapshot, so a plan must never have side effects.

Usage:
    def plan(snapshot: Snapshot) -> TransactionPlan[int]:
        user = snapshot.get(user_ref(uid))
        return TransactionPlan(
            writes=[Update(user_ref(uid), {"score": user["score"] + 1})],
            result=user["score"] + 1,
        )

    new_score = await ledger.run_transaction([user_ref(uid)], plan)
"""

import asyncio
import logging
import operator
from dataclasses import dataclass, field
from typing import Any, Callable, Generic, Mapping, NamedTuple, Optional, Protocol, Sequence, TypeVar, Union

logger = logging.getLogger(__name__)

# Collection names
USERS_COLLECTION = "users"
QUESTIONS_COLLECTION = "questions"
VOTES_COLLECTION = "votes"

T = TypeVar("T")

# Comparison operators understood by query filters. Both backends apply the
# same callables: to plain values in memory, to columns in SQL.
FILTER_OPERATORS: dict[str, Callable[[Any, Any], Any]] = {
    "==": operator.eq,
    "!=": operator.ne,
    "<": operator.lt,
    "<=": operator.le,
    ">": operator.gt,
    ">=": operator.ge,
}


class LedgerError(Exception):
    """Base exception for ledger store failures."""

    pass


class TransactionConflict(LedgerError):
    """A document in the read set changed before the commit."""

    pass


class RetriesExhaustedError(LedgerError):
    """A transaction kept conflicting until the attempt budget ran out."""

    def __init__(self, attempts: int):
        super().__init__(f"Transaction still conflicting after {attempts} attempts")
        self.attempts = attempts


class DocumentRef(NamedTuple):
    """Address of a single document."""

    collection: str
    id: str


def user_ref(uid: str) -> DocumentRef:
    return DocumentRef(USERS_COLLECTION, uid)


def question_ref(question_id: str) -> DocumentRef:
    return DocumentRef(QUESTIONS_COLLECTION, question_id)


def vote_ref(uid: str, question_id: str) -> DocumentRef:
    """Vote records use the composite key `${uid}_${question_id}`."""
    return DocumentRef(VOTES_COLLECTION, f"{uid}_{question_id}")


class Create(NamedTuple):
    """Insert a new document. Conflicts if the document already exists."""

    ref: DocumentRef
    data: dict[str, Any]


class Update(NamedTuple):
    """Merge `changes` into an existing document from the read set."""

    ref: DocumentRef
    changes: dict[str, Any]


Write = Union[Create, Update]


class Filter(NamedTuple):
    """A `field <op> value` query predicate."""

    field: str
    op: str
    value: Any


@dataclass(frozen=True)
class Snapshot:
    """Documents of the read set as of the start of one attempt."""

    documents: Mapping[DocumentRef, Optional[dict[str, Any]]]

    def get(self, ref: DocumentRef) -> Optional[dict[str, Any]]:
        """Return the document data, or None if it does not exist."""
        if ref not in self.documents:
            raise KeyError(f"{ref} was not part of the transaction read set")
        return self.documents[ref]

    def exists(self, ref: DocumentRef) -> bool:
        return self.get(ref) is not None


@dataclass
class TransactionPlan(Generic[T]):
    """Writes to commit atomically plus the value returned to the caller."""

    writes: list[Write] = field(default_factory=list)
    result: Optional[T] = None


PlanFn = Callable[[Snapshot], TransactionPlan[T]]


class LedgerStore(Protocol):
    """Protocol defining ledger store operations."""

    async def run_transaction(self, refs: Sequence[DocumentRef], plan: PlanFn[T]) -> T: ...

    async def get(self, ref: DocumentRef) -> Optional[dict[str, Any]]: ...

    async def query(
        self,
        collection: str,
        *,
        filters: Sequence[Filter] = (),
        order_by: Optional[str] = None,
        descending: bool = False,
        start_after: Optional[tuple[Any, str]] = None,
        limit: Optional[int] = None,
    ) -> list[dict[str, Any]]: ...

    async def count(self, collection: str, *, filters: Sequence[Filter] = ()) -> int: ...

    async def initialize(self) -> None: ...

    async def close(self) -> None: ...


class BaseLedgerStore:
    """
    Retry loop shared by the ledger backends.

    Subclasses implement `_attempt`, which must either commit every write of
    the plan or raise without having written anything. Only
    `TransactionConflict` is retried; any other exception raised by the plan
    (domain errors such as "already voted") propagates on the first attempt.
    """

    def __init__(self, max_attempts: int = 5, retry_base_delay: float = 0.01):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.max_attempts = max_attempts
        self.retry_base_delay = retry_base_delay

    async def run_transaction(self, refs: Sequence[DocumentRef], plan: PlanFn[T]) -> T:
        """Run `plan` optimistically, retrying on conflict with exponential backoff."""
        read_set = tuple(dict.fromkeys(refs))

        for attempt in range(1, self.max_attempts + 1):
            try:
                return await self._attempt(read_set, plan)
            except TransactionConflict as e:
                if attempt == self.max_attempts:
                    logger.error(f"Transaction on {len(read_set)} documents gave up after {attempt} attempts: {e}")
                    raise RetriesExhaustedError(attempt) from e

                delay = self.retry_base_delay * (2 ** (attempt - 1))
                logger.debug(f"Transaction conflict (attempt {attempt}/{self.max_attempts}), retrying in {delay}s: {e}")
                await asyncio.sleep(delay)

        raise AssertionError("unreachable")  # pragma: no cover

    async def _attempt(self, refs: tuple[DocumentRef, ...], plan: PlanFn[T]) -> T:
        raise NotImplementedError

    async def initialize(self) -> None:
        """Prepare the backing storage. No-op unless overridden."""

    async def close(self) -> None:
        """Release backend resources. No-op unless overridden."""
