"""
In-memory Document Store

Process-local implementation of the store contract for local development
and tests. Every document carries a version; a transaction records the
version of each document it reads and its commit is rejected when any of
them moved, which re-runs the transaction function.

Reads yield to the event loop so concurrent transactions interleave the way
they would against a remote store.
"""

from collections.abc import Awaitable, Callable, Sequence
import copy
from typing import Any, Optional

import anyio.lowlevel
import attrs

from src.platform.document_store.document_store import (
    DocumentRef,
    DocumentSnapshot,
    DocumentStore,
    DocumentStoreError,
    FieldFilter,
    StoreErrorCode,
    T,
    Transaction,
    TransactionConflict,
    WriteBatch,
    WriteOp,
    filter_and_sort,
    resolve_writes,
)
from src.platform.logging.loguru_io import Logger


@attrs.define
class _StoredDocument:
    ref: DocumentRef
    version: int
    data: dict[str, Any]


class InMemoryDocumentStore(DocumentStore):
    def __init__(self, *, max_attempts: int = 5) -> None:
        self.max_attempts = max_attempts
        self._documents: dict[str, _StoredDocument] = {}
        self._version = 0
        self.committed_writes = 0

    def _snapshot(self, ref: DocumentRef) -> DocumentSnapshot:
        stored = self._documents.get(ref.path)
        return DocumentSnapshot(ref=ref, data=copy.deepcopy(stored.data) if stored else None)

    def _lookup(self, ref: DocumentRef) -> Optional[dict[str, Any]]:
        stored = self._documents.get(ref.path)
        return stored.data if stored else None

    def version_of(self, ref: DocumentRef) -> int:
        stored = self._documents.get(ref.path)
        return stored.version if stored else 0

    def apply(self, writes: Sequence[WriteOp]) -> None:
        """Apply a write set atomically: validation happens before any mutation."""
        staged = resolve_writes(writes, self._lookup)
        self._version += 1
        for path, (ref, data) in staged.items():
            if data is None:
                self._documents.pop(path, None)
            else:
                self._documents[path] = _StoredDocument(
                    ref=ref, version=self._version, data=copy.deepcopy(data)
                )
        self.committed_writes += len(writes)

    async def get(self, ref: DocumentRef) -> DocumentSnapshot:
        await anyio.lowlevel.checkpoint()
        return self._snapshot(ref)

    async def query(
        self,
        collection: str,
        *,
        filters: Sequence[FieldFilter] = (),
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> list[DocumentSnapshot]:
        await anyio.lowlevel.checkpoint()
        snapshots = [
            self._snapshot(stored.ref)
            for stored in self._documents.values()
            if stored.ref.collection == collection
        ]
        return filter_and_sort(
            snapshots, filters=filters, order_by=order_by, descending=descending
        )

    def batch(self) -> WriteBatch:
        return _InMemoryWriteBatch(self)

    async def run_transaction(self, fn: Callable[[Transaction], Awaitable[T]]) -> T:
        for attempt in range(1, self.max_attempts + 1):
            transaction = _InMemoryTransaction(self)
            result = await fn(transaction)
            await anyio.lowlevel.checkpoint()
            try:
                transaction.commit()
                return result
            except TransactionConflict:
                Logger.base.debug(
                    f'[IN-MEMORY STORE] Transaction conflict, retrying (attempt {attempt})'
                )
        raise DocumentStoreError(
            f'Transaction aborted after {self.max_attempts} attempts due to contention',
            code=StoreErrorCode.ABORTED,
        )


class _InMemoryWriteBatch(WriteBatch):
    def __init__(self, store: InMemoryDocumentStore) -> None:
        super().__init__()
        self._store = store

    async def commit(self) -> None:
        await anyio.lowlevel.checkpoint()
        self._store.apply(self.writes)


class _InMemoryTransaction(Transaction):
    def __init__(self, store: InMemoryDocumentStore) -> None:
        super().__init__()
        self._store = store
        self._read_versions: dict[str, tuple[DocumentRef, int]] = {}

    async def _get(self, ref: DocumentRef) -> DocumentSnapshot:
        await anyio.lowlevel.checkpoint()
        self._read_versions[ref.path] = (ref, self._store.version_of(ref))
        return self._store._snapshot(ref)

    def commit(self) -> None:
        for ref, version in self._read_versions.values():
            if self._store.version_of(ref) != version:
                raise TransactionConflict(ref.path)
        self._store.apply(self.writes)
