"""
Unit tests for InMemoryDocumentStore

Tests:
- get / query with filters and ordering
- batch atomicity
- transaction read-before-write rule
- optimistic conflict detection and re-run
"""

import anyio
import pytest

from src.platform.document_store.document_store import (
    DocumentRef,
    DocumentStoreError,
    StoreErrorCode,
    Transaction,
)
from src.platform.document_store.in_memory_document_store import InMemoryDocumentStore


COUNTER = DocumentRef(collection='counters', id='c1')


@pytest.mark.unit
class TestReadsAndQueries:
    @pytest.mark.asyncio
    async def test_missing_document_snapshot_does_not_exist(
        self, store: InMemoryDocumentStore
    ) -> None:
        snapshot = await store.get(DocumentRef(collection='screenings', id='nope'))

        assert snapshot.exists is False
        assert snapshot.id == 'nope'
        assert snapshot.get('availableSeats', 7) == 7

    @pytest.mark.asyncio
    async def test_query_filters_and_orders_descending(
        self, store: InMemoryDocumentStore
    ) -> None:
        batch = store.batch()
        batch.set(DocumentRef('bookings', 'b1'), {'userId': 'u1', 'bookingDate': '2026-10-01'})
        batch.set(DocumentRef('bookings', 'b2'), {'userId': 'u1', 'bookingDate': '2026-10-03'})
        batch.set(DocumentRef('bookings', 'b3'), {'userId': 'u2', 'bookingDate': '2026-10-02'})
        batch.set(DocumentRef('bookings', 'b4'), {'userId': 'u1'})
        await batch.commit()

        snapshots = await store.query(
            'bookings', filters=[('userId', 'u1')], order_by='bookingDate', descending=True
        )

        # b4 lacks the ordering field and is left out
        assert [snapshot.id for snapshot in snapshots] == ['b2', 'b1']

    @pytest.mark.asyncio
    async def test_sub_collection_query_is_scoped_to_parent(
        self, store: InMemoryDocumentStore
    ) -> None:
        parent_1 = DocumentRef('screenings', 's1')
        parent_2 = DocumentRef('screenings', 's2')
        batch = store.batch()
        batch.set(parent_1.child('seats', 'A1'), {'isAvailable': True})
        batch.set(parent_2.child('seats', 'A1'), {'isAvailable': False})
        await batch.commit()

        snapshots = await store.query('screenings/s1/seats')

        assert len(snapshots) == 1
        assert snapshots[0].get('isAvailable') is True

    @pytest.mark.asyncio
    async def test_snapshots_are_copies(self, store: InMemoryDocumentStore) -> None:
        batch = store.batch()
        batch.set(COUNTER, {'value': 1})
        await batch.commit()

        snapshot = await store.get(COUNTER)
        snapshot.data['value'] = 99  # type: ignore[index]

        assert (await store.get(COUNTER)).get('value') == 1


@pytest.mark.unit
class TestBatch:
    @pytest.mark.asyncio
    async def test_update_of_missing_document_rejects_whole_batch(
        self, store: InMemoryDocumentStore
    ) -> None:
        batch = store.batch()
        batch.set(COUNTER, {'value': 1})
        batch.update(DocumentRef('counters', 'missing'), {'value': 2})

        with pytest.raises(DocumentStoreError) as exc_info:
            await batch.commit()

        assert exc_info.value.code == StoreErrorCode.NOT_FOUND
        assert (await store.get(COUNTER)).exists is False
        assert store.committed_writes == 0

    @pytest.mark.asyncio
    async def test_update_merges_fields_and_delete_removes(
        self, store: InMemoryDocumentStore
    ) -> None:
        other = DocumentRef('counters', 'c2')
        batch = store.batch()
        batch.set(COUNTER, {'value': 1, 'label': 'x'})
        batch.set(other, {'value': 5})
        await batch.commit()

        batch = store.batch()
        batch.update(COUNTER, {'value': 2})
        batch.delete(other)
        await batch.commit()

        assert (await store.get(COUNTER)).data == {'value': 2, 'label': 'x'}
        assert (await store.get(other)).exists is False


@pytest.mark.unit
class TestTransaction:
    @pytest.mark.asyncio
    async def test_read_after_write_is_rejected(self, store: InMemoryDocumentStore) -> None:
        async def fn(transaction: Transaction) -> None:
            transaction.set(COUNTER, {'value': 1})
            await transaction.get(COUNTER)

        with pytest.raises(DocumentStoreError) as exc_info:
            await store.run_transaction(fn)

        assert exc_info.value.code == StoreErrorCode.FAILED_PRECONDITION
        assert (await store.get(COUNTER)).exists is False

    @pytest.mark.asyncio
    async def test_exception_in_function_discards_writes_without_retry(
        self, store: InMemoryDocumentStore
    ) -> None:
        calls = 0

        async def fn(transaction: Transaction) -> None:
            nonlocal calls
            calls += 1
            await transaction.get(COUNTER)
            transaction.set(COUNTER, {'value': 1})
            raise ValueError('boom')

        with pytest.raises(ValueError):
            await store.run_transaction(fn)

        assert calls == 1
        assert (await store.get(COUNTER)).exists is False

    @pytest.mark.asyncio
    async def test_concurrent_increments_are_serialized_by_retry(
        self, store: InMemoryDocumentStore
    ) -> None:
        batch = store.batch()
        batch.set(COUNTER, {'value': 0})
        await batch.commit()

        async def increment(transaction: Transaction) -> None:
            snapshot = await transaction.get(COUNTER)
            transaction.update(COUNTER, {'value': snapshot.get('value') + 1})

        async with anyio.create_task_group() as tg:
            for _ in range(3):
                tg.start_soon(store.run_transaction, increment)

        assert (await store.get(COUNTER)).get('value') == 3

    @pytest.mark.asyncio
    async def test_gives_up_with_aborted_after_max_attempts(self) -> None:
        store = InMemoryDocumentStore(max_attempts=2)
        batch = store.batch()
        batch.set(COUNTER, {'value': 0})
        await batch.commit()
        attempts = 0

        async def always_conflicting(transaction: Transaction) -> None:
            nonlocal attempts
            attempts += 1
            await transaction.get(COUNTER)
            # Another writer slips in between the read and the commit
            interfering = store.batch()
            interfering.update(COUNTER, {'value': attempts})
            await interfering.commit()
            transaction.update(COUNTER, {'value': -1})

        with pytest.raises(DocumentStoreError) as exc_info:
            await store.run_transaction(always_conflicting)

        assert exc_info.value.code == StoreErrorCode.ABORTED
        assert attempts == 2
        assert (await store.get(COUNTER)).get('value') == 2
