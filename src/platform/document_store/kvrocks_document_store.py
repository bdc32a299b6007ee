"""
Kvrocks Document Store

Key layout (all keys carry KVROCKS_KEY_PREFIX):
- ``doc:{collection}/{id}``  -> orjson document body
- ``col:{collection}``       -> set of document ids in the collection

Transactions use optimistic locking: every read WATCHes its key, writes are
queued after MULTI and applied by EXEC. A WatchError means another client
touched a watched key, so the whole transaction function runs again.
"""

from collections.abc import Awaitable, Callable, Iterator, Sequence
from contextlib import contextmanager
from typing import Any, Optional

import orjson
from redis.asyncio import Redis
from redis.asyncio.client import Pipeline
from redis.exceptions import (
    AuthenticationError,
    ConnectionError as RedisConnectionError,
    NoPermissionError,
    ResponseError,
    TimeoutError as RedisTimeoutError,
    WatchError,
)

from src.platform.document_store.document_store import (
    DocumentRef,
    DocumentSnapshot,
    DocumentStore,
    DocumentStoreError,
    FieldFilter,
    StoreErrorCode,
    T,
    Transaction,
    WriteBatch,
    WriteOp,
    WriteKind,
    filter_and_sort,
    resolve_writes,
)
from src.platform.logging.loguru_io import Logger


_EXHAUSTED_MARKERS = ('OOM', 'maxmemory', 'max number of clients')


@contextmanager
def translate_redis_errors() -> Iterator[None]:
    """Map redis-py failures onto store error codes the quota guard understands."""
    try:
        yield
    except WatchError:
        raise
    except AuthenticationError as e:
        raise DocumentStoreError(str(e), code=StoreErrorCode.PERMISSION_DENIED) from e
    except NoPermissionError as e:
        raise DocumentStoreError(str(e), code=StoreErrorCode.PERMISSION_DENIED) from e
    except (RedisConnectionError, RedisTimeoutError) as e:
        raise DocumentStoreError(
            f'Kvrocks network error: {e}', code=StoreErrorCode.UNAVAILABLE
        ) from e
    except ResponseError as e:
        if any(marker in str(e) for marker in _EXHAUSTED_MARKERS):
            raise DocumentStoreError(str(e), code=StoreErrorCode.RESOURCE_EXHAUSTED) from e
        raise DocumentStoreError(str(e), code=StoreErrorCode.UNKNOWN) from e


def _loads(raw: Optional[str | bytes]) -> Optional[dict[str, Any]]:
    return orjson.loads(raw) if raw else None


class KvrocksDocumentStore(DocumentStore):
    def __init__(
        self,
        *,
        client_factory: Callable[[], Redis],
        key_prefix: str = '',
        max_attempts: int = 5,
    ) -> None:
        self._client_factory = client_factory
        self.key_prefix = key_prefix
        self.max_attempts = max_attempts

    @property
    def client(self) -> Redis:
        return self._client_factory()

    def doc_key(self, ref: DocumentRef) -> str:
        return f'{self.key_prefix}doc:{ref.path}'

    def collection_key(self, collection: str) -> str:
        return f'{self.key_prefix}col:{collection}'

    async def get(self, ref: DocumentRef) -> DocumentSnapshot:
        with translate_redis_errors():
            raw = await self.client.get(self.doc_key(ref))
        return DocumentSnapshot(ref=ref, data=_loads(raw))

    async def query(
        self,
        collection: str,
        *,
        filters: Sequence[FieldFilter] = (),
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> list[DocumentSnapshot]:
        with translate_redis_errors():
            ids = sorted(await self.client.smembers(self.collection_key(collection)))
            if not ids:
                return []
            refs = [DocumentRef(collection=collection, id=doc_id) for doc_id in ids]
            raws = await self.client.mget([self.doc_key(ref) for ref in refs])
        snapshots = [DocumentSnapshot(ref=ref, data=_loads(raw)) for ref, raw in zip(refs, raws)]
        return filter_and_sort(
            snapshots, filters=filters, order_by=order_by, descending=descending
        )

    def batch(self) -> WriteBatch:
        return _KvrocksWriteBatch(self)

    async def run_transaction(self, fn: Callable[[Transaction], Awaitable[T]]) -> T:
        with translate_redis_errors():
            async with self.client.pipeline(transaction=True) as pipe:
                for attempt in range(1, self.max_attempts + 1):
                    await pipe.reset()
                    transaction = _KvrocksTransaction(self, pipe)
                    result = await fn(transaction)
                    try:
                        await transaction.commit()
                        return result
                    except WatchError:
                        Logger.base.debug(
                            f'[KVROCKS STORE] Watched key changed, retrying (attempt {attempt})'
                        )
        raise DocumentStoreError(
            f'Transaction aborted after {self.max_attempts} attempts due to contention',
            code=StoreErrorCode.ABORTED,
        )

    async def execute_writes(
        self,
        pipe: Pipeline,
        writes: Sequence[WriteOp],
        known: dict[str, Optional[dict[str, Any]]],
    ) -> None:
        """
        Queue ``writes`` after MULTI and EXEC them.

        ``known`` holds the documents already read (and WATCHed) by the caller.
        Update targets that were not read are WATCHed and fetched first.
        """
        for op in writes:
            if op.kind == WriteKind.UPDATE and op.ref.path not in known:
                key = self.doc_key(op.ref)
                await pipe.watch(key)
                known[op.ref.path] = _loads(await pipe.get(key))

        staged = resolve_writes(writes, lambda ref: known.get(ref.path))

        pipe.multi()
        for ref, data in staged.values():
            if data is None:
                pipe.delete(self.doc_key(ref))
                pipe.srem(self.collection_key(ref.collection), ref.id)
            else:
                pipe.set(self.doc_key(ref), orjson.dumps(data))
                pipe.sadd(self.collection_key(ref.collection), ref.id)
        await pipe.execute()


class _KvrocksWriteBatch(WriteBatch):
    def __init__(self, store: KvrocksDocumentStore) -> None:
        super().__init__()
        self._store = store

    async def commit(self) -> None:
        with translate_redis_errors():
            async with self._store.client.pipeline(transaction=True) as pipe:
                for _ in range(self._store.max_attempts):
                    await pipe.reset()
                    try:
                        await self._store.execute_writes(pipe, self.writes, {})
                        return
                    except WatchError:
                        continue
        raise DocumentStoreError(
            'Batch aborted due to contention on updated documents', code=StoreErrorCode.ABORTED
        )


class _KvrocksTransaction(Transaction):
    def __init__(self, store: KvrocksDocumentStore, pipe: Pipeline) -> None:
        super().__init__()
        self._store = store
        self._pipe = pipe
        self._known: dict[str, Optional[dict[str, Any]]] = {}

    async def _get(self, ref: DocumentRef) -> DocumentSnapshot:
        key = self._store.doc_key(ref)
        await self._pipe.watch(key)
        data = _loads(await self._pipe.get(key))
        self._known[ref.path] = data
        return DocumentSnapshot(ref=ref, data=data)

    async def commit(self) -> None:
        await self._store.execute_writes(self._pipe, self.writes, dict(self._known))
