from unittest.mock import AsyncMock

import orjson
import pytest
from redis.exceptions import (
    AuthenticationError,
    ConnectionError as RedisConnectionError,
    ResponseError,
    TimeoutError as RedisTimeoutError,
    WatchError,
)

from src.platform.document_store.document_store import (
    DocumentRef,
    DocumentStoreError,
    StoreErrorCode,
)
from src.platform.document_store.kvrocks_document_store import (
    KvrocksDocumentStore,
    translate_redis_errors,
)
from src.platform.document_store.quota_guard import ErrorKind, QuotaGuard


@pytest.mark.unit
class TestTranslateRedisErrors:
    @pytest.mark.parametrize(
        'raised, code',
        [
            (RedisConnectionError('Connection refused'), StoreErrorCode.UNAVAILABLE),
            (RedisTimeoutError('Timeout reading from socket'), StoreErrorCode.UNAVAILABLE),
            (AuthenticationError('invalid password'), StoreErrorCode.PERMISSION_DENIED),
            (
                ResponseError("OOM command not allowed when used memory > 'maxmemory'"),
                StoreErrorCode.RESOURCE_EXHAUSTED,
            ),
            (ResponseError('max number of clients reached'), StoreErrorCode.RESOURCE_EXHAUSTED),
            (ResponseError('WRONGTYPE Operation against a key'), StoreErrorCode.UNKNOWN),
        ],
    )
    def test_maps_redis_failures_to_store_codes(
        self, raised: Exception, code: StoreErrorCode
    ) -> None:
        with pytest.raises(DocumentStoreError) as exc_info:
            with translate_redis_errors():
                raise raised

        assert exc_info.value.code == code
        assert exc_info.value.__cause__ is raised

    def test_watch_error_passes_through_for_retry(self) -> None:
        with pytest.raises(WatchError):
            with translate_redis_errors():
                raise WatchError('watched key changed')

    def test_translated_errors_feed_the_quota_guard(self) -> None:
        with pytest.raises(DocumentStoreError) as exc_info:
            with translate_redis_errors():
                raise ResponseError('OOM command not allowed')

        assert QuotaGuard.classify(exc_info.value) == ErrorKind.QUOTA_EXCEEDED


@pytest.mark.unit
class TestKvrocksReads:
    @pytest.fixture
    def client(self) -> AsyncMock:
        return AsyncMock()

    @pytest.fixture
    def kv_store(self, client: AsyncMock) -> KvrocksDocumentStore:
        return KvrocksDocumentStore(client_factory=lambda: client, key_prefix='test_')

    def test_key_layout(self, kv_store: KvrocksDocumentStore) -> None:
        seat = DocumentRef('screenings', 's1').child('seats', 'A1')

        assert kv_store.doc_key(seat) == 'test_doc:screenings/s1/seats/A1'
        assert kv_store.collection_key(seat.collection) == 'test_col:screenings/s1/seats'

    @pytest.mark.asyncio
    async def test_get_decodes_document(
        self, kv_store: KvrocksDocumentStore, client: AsyncMock
    ) -> None:
        client.get.return_value = orjson.dumps({'availableSeats': 50}).decode()

        snapshot = await kv_store.get(DocumentRef('screenings', 's1'))

        client.get.assert_awaited_once_with('test_doc:screenings/s1')
        assert snapshot.get('availableSeats') == 50

    @pytest.mark.asyncio
    async def test_query_skips_dangling_members_and_filters(
        self, kv_store: KvrocksDocumentStore, client: AsyncMock
    ) -> None:
        client.smembers.return_value = {'s2', 's1', 's3'}
        client.mget.return_value = [
            orjson.dumps({'movieId': '550', 'date': '2026-10-19'}).decode(),
            None,
            orjson.dumps({'movieId': '13', 'date': '2026-10-19'}).decode(),
        ]

        snapshots = await kv_store.query('screenings', filters=[('movieId', '550')])

        client.mget.assert_awaited_once_with(
            ['test_doc:screenings/s1', 'test_doc:screenings/s2', 'test_doc:screenings/s3']
        )
        assert [snapshot.id for snapshot in snapshots] == ['s1']

    @pytest.mark.asyncio
    async def test_empty_collection_skips_mget(
        self, kv_store: KvrocksDocumentStore, client: AsyncMock
    ) -> None:
        client.smembers.return_value = set()

        assert await kv_store.query('bookings') == []
        client.mget.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_connection_failure_is_unavailable(
        self, kv_store: KvrocksDocumentStore, client: AsyncMock
    ) -> None:
        client.get.side_effect = RedisConnectionError('Connection refused')

        with pytest.raises(DocumentStoreError) as exc_info:
            await kv_store.get(DocumentRef('screenings', 's1'))

        assert exc_info.value.code == StoreErrorCode.UNAVAILABLE
        assert 'network' in exc_info.value.message
