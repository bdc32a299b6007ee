"""
Document Store contract

A collection/document database with:
- get-one and equality queries with ordering
- batched writes (all-or-nothing)
- transactions: optimistic reads, buffered writes, re-run on conflict

Documents live at ``{collection}/{id}``; sub-collections nest under a
document path, e.g. ``screenings/{id}/seats/{seat_id}``.
"""

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable, Iterable, Mapping, Sequence
from enum import StrEnum
from typing import Any, Optional, TypeVar

import attrs


T = TypeVar('T')

FieldFilter = tuple[str, Any]


class StoreErrorCode(StrEnum):
    RESOURCE_EXHAUSTED = 'resource-exhausted'
    UNAVAILABLE = 'unavailable'
    PERMISSION_DENIED = 'permission-denied'
    ABORTED = 'aborted'
    NOT_FOUND = 'not-found'
    FAILED_PRECONDITION = 'failed-precondition'
    UNKNOWN = 'unknown'


class DocumentStoreError(Exception):
    """Raised by store implementations; ``code`` follows the Firestore code names"""

    def __init__(self, message: str, *, code: str = StoreErrorCode.UNKNOWN) -> None:
        self.message = message
        self.code = code
        super().__init__(message)


class TransactionConflict(Exception):
    """A document read inside a transaction changed before commit"""


@attrs.frozen
class DocumentRef:
    collection: str
    id: str

    @property
    def path(self) -> str:
        return f'{self.collection}/{self.id}'

    def child(self, collection: str, id: str) -> 'DocumentRef':
        return DocumentRef(collection=f'{self.path}/{collection}', id=id)


@attrs.frozen
class DocumentSnapshot:
    ref: DocumentRef
    data: Optional[dict[str, Any]] = None

    @property
    def id(self) -> str:
        return self.ref.id

    @property
    def exists(self) -> bool:
        return self.data is not None

    def get(self, field: str, default: Any = None) -> Any:
        return (self.data or {}).get(field, default)


class WriteKind(StrEnum):
    SET = 'set'
    UPDATE = 'update'
    DELETE = 'delete'


@attrs.frozen
class WriteOp:
    kind: WriteKind
    ref: DocumentRef
    data: Optional[dict[str, Any]] = None


class BufferedWrites:
    """Write buffer shared by batches and transactions"""

    def __init__(self) -> None:
        self.writes: list[WriteOp] = []

    def set(self, ref: DocumentRef, data: Mapping[str, Any]) -> None:
        self.writes.append(WriteOp(kind=WriteKind.SET, ref=ref, data=dict(data)))

    def update(self, ref: DocumentRef, data: Mapping[str, Any]) -> None:
        self.writes.append(WriteOp(kind=WriteKind.UPDATE, ref=ref, data=dict(data)))

    def delete(self, ref: DocumentRef) -> None:
        self.writes.append(WriteOp(kind=WriteKind.DELETE, ref=ref))


class WriteBatch(BufferedWrites, ABC):
    @abstractmethod
    async def commit(self) -> None:
        pass


class Transaction(BufferedWrites, ABC):
    async def get(self, ref: DocumentRef) -> DocumentSnapshot:
        if self.writes:
            raise DocumentStoreError(
                'Transactions require all reads to be executed before all writes',
                code=StoreErrorCode.FAILED_PRECONDITION,
            )
        return await self._get(ref)

    @abstractmethod
    async def _get(self, ref: DocumentRef) -> DocumentSnapshot:
        pass


class DocumentStore(ABC):
    max_attempts: int

    @abstractmethod
    async def get(self, ref: DocumentRef) -> DocumentSnapshot:
        pass

    @abstractmethod
    async def query(
        self,
        collection: str,
        *,
        filters: Sequence[FieldFilter] = (),
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> list[DocumentSnapshot]:
        pass

    @abstractmethod
    def batch(self) -> WriteBatch:
        pass

    @abstractmethod
    async def run_transaction(self, fn: Callable[[Transaction], Awaitable[T]]) -> T:
        """
        Run ``fn`` inside a transaction and commit its buffered writes.

        ``fn`` is re-run from scratch when a document it read was modified
        before commit, up to ``max_attempts`` times. Exceptions raised by
        ``fn`` abort the transaction without retry.
        """


def resolve_writes(
    writes: Iterable[WriteOp],
    lookup: Callable[[DocumentRef], Optional[dict[str, Any]]],
) -> dict[str, tuple[DocumentRef, Optional[dict[str, Any]]]]:
    """
    Fold buffered writes into the final state of every touched document.

    Returns ``{path: (ref, data)}`` where ``data`` is None for deletions.
    Raises ``not-found`` when updating a document that does not exist.
    """
    staged: dict[str, tuple[DocumentRef, Optional[dict[str, Any]]]] = {}
    for op in writes:
        if op.kind == WriteKind.SET:
            staged[op.ref.path] = (op.ref, dict(op.data or {}))
        elif op.kind == WriteKind.UPDATE:
            current = staged[op.ref.path][1] if op.ref.path in staged else lookup(op.ref)
            if current is None:
                raise DocumentStoreError(
                    f'No document to update: {op.ref.path}', code=StoreErrorCode.NOT_FOUND
                )
            staged[op.ref.path] = (op.ref, {**current, **(op.data or {})})
        else:
            staged[op.ref.path] = (op.ref, None)
    return staged


def filter_and_sort(
    snapshots: Iterable[DocumentSnapshot],
    *,
    filters: Sequence[FieldFilter],
    order_by: Optional[str],
    descending: bool,
) -> list[DocumentSnapshot]:
    matched = [
        snapshot
        for snapshot in snapshots
        if snapshot.exists and all(snapshot.get(field) == value for field, value in filters)
    ]
    if order_by is None:
        return matched
    # Documents missing the ordering field are excluded, as in Firestore
    ordered = [snapshot for snapshot in matched if snapshot.get(order_by) is not None]
    return sorted(ordered, key=lambda snapshot: snapshot.get(order_by), reverse=descending)
