"""
Unit tests for CreateBookingUseCase over the in-memory store

Tests:
- capacity bookkeeping and seat flags after a booking
- conflicts on taken seats, sequential and concurrent
- not-found screening / seat
- store failures mapped to ServiceUnavailableError
"""

import asyncio
from datetime import datetime, timezone
from typing import Any, List
from unittest.mock import AsyncMock

import pytest

from src.platform.document_store.document_store import DocumentStoreError, StoreErrorCode
from src.platform.document_store.in_memory_document_store import InMemoryDocumentStore
from src.platform.document_store.quota_guard import (
    WRITE_QUOTA_MESSAGE,
    WRITE_UNAVAILABLE_MESSAGE,
    QuotaGuard,
)
from src.platform.exception.exceptions import (
    ConflictError,
    DomainError,
    NotFoundError,
    ServiceUnavailableError,
)
from src.service.cinema.app.command.create_booking_use_case import CreateBookingUseCase
from src.service.cinema.domain.entity.booking_entity import Booking
from src.service.cinema.domain.enum.booking_status import BookingStatus
from src.service.cinema.driven_adapter.repo.booking_command_repo_impl import (
    BookingCommandRepoImpl,
)
from src.service.cinema.driven_adapter.repo.document_mapper import (
    booking_ref,
    screening_ref,
    seat_ref,
)


BOOKED_AT = datetime(2026, 10, 19, 9, 30, tzinfo=timezone.utc)


@pytest.fixture
def booking_repo(store: InMemoryDocumentStore) -> BookingCommandRepoImpl:
    return BookingCommandRepoImpl(store=store, clock=lambda: BOOKED_AT)


@pytest.fixture
def use_case(booking_repo: BookingCommandRepoImpl, quota_guard: QuotaGuard) -> CreateBookingUseCase:
    return CreateBookingUseCase(booking_command_repo=booking_repo, quota_guard=quota_guard)


async def book(
    use_case: CreateBookingUseCase, seats: List[str], *, user_id: str = 'user-1', **extra: Any
) -> Booking:
    return await use_case.create_booking(
        user_id=user_id,
        screening_id=extra.pop('screening_id', 'screening-1'),
        seats=seats,
        movie_id='550',
        movie_title='Fight Club',
        screening_date='2026-10-19',
        screening_time='18:15',
        total_price=25 * len(seats),
        **extra,
    )


async def available_seats(store: InMemoryDocumentStore, screening_id: str = 'screening-1') -> int:
    return (await store.get(screening_ref(screening_id))).get('availableSeats')


async def seat_is_available(store: InMemoryDocumentStore, seat_id: str) -> bool:
    return (await store.get(seat_ref('screening-1', seat_id))).get('isAvailable')


@pytest.mark.unit
class TestCreateBooking:
    @pytest.mark.asyncio
    async def test_booking_two_seats_takes_them_and_decrements_capacity(
        self, use_case: CreateBookingUseCase, store: InMemoryDocumentStore, seed_screening
    ) -> None:
        await seed_screening(available_seats=50)

        booking = await book(use_case, ['A1', 'A2'])

        assert await available_seats(store) == 48
        assert await seat_is_available(store, 'A1') is False
        assert await seat_is_available(store, 'A2') is False
        assert await seat_is_available(store, 'A3') is True

        stored = await store.get(booking_ref(booking.id))
        assert stored.get('status') == 'confirmed'
        assert stored.get('seats') == ['A1', 'A2']
        assert stored.get('bookingDate') == BOOKED_AT
        assert booking.booking_date == BOOKED_AT

    @pytest.mark.asyncio
    async def test_explicit_pending_status_is_stored(
        self, use_case: CreateBookingUseCase, seed_screening
    ) -> None:
        await seed_screening()

        booking = await book(use_case, ['C7'], status=BookingStatus.PENDING)

        assert booking.status == BookingStatus.PENDING

    @pytest.mark.asyncio
    async def test_taken_seat_conflicts_and_leaves_state_untouched(
        self, use_case: CreateBookingUseCase, store: InMemoryDocumentStore, seed_screening
    ) -> None:
        await seed_screening(available_seats=50)
        await book(use_case, ['A1', 'A2'])

        with pytest.raises(ConflictError, match='Seat A1 is no longer available.'):
            await book(use_case, ['A1', 'A3'], user_id='user-2')

        assert await available_seats(store) == 48
        assert await seat_is_available(store, 'A3') is True

    @pytest.mark.asyncio
    async def test_overlapping_concurrent_bookings_one_wins(
        self, use_case: CreateBookingUseCase, store: InMemoryDocumentStore, seed_screening
    ) -> None:
        await seed_screening(available_seats=50)

        results = await asyncio.gather(
            book(use_case, ['A5', 'A6'], user_id='user-1'),
            book(use_case, ['A6', 'A7'], user_id='user-2'),
            return_exceptions=True,
        )

        successes = [result for result in results if isinstance(result, Booking)]
        conflicts = [result for result in results if isinstance(result, ConflictError)]
        assert len(successes) == 1
        assert len(conflicts) == 1
        assert conflicts[0].message == 'Seat A6 is no longer available.'
        assert await available_seats(store) == 48

        loser_only_seat = 'A7' if successes[0].seats == ['A5', 'A6'] else 'A5'
        assert await seat_is_available(store, loser_only_seat) is True

    @pytest.mark.asyncio
    async def test_disjoint_concurrent_bookings_both_succeed(
        self, use_case: CreateBookingUseCase, store: InMemoryDocumentStore, seed_screening
    ) -> None:
        await seed_screening(available_seats=50)

        results = await asyncio.gather(
            book(use_case, ['B1', 'B2'], user_id='user-1'),
            book(use_case, ['B3'], user_id='user-2'),
            book(use_case, ['B4', 'B5', 'B6'], user_id='user-3'),
        )

        assert len({booking.id for booking in results}) == 3
        assert await available_seats(store) == 50 - 6

    @pytest.mark.asyncio
    async def test_not_enough_available_seats(
        self, use_case: CreateBookingUseCase, seed_screening
    ) -> None:
        await seed_screening(available_seats=1)

        with pytest.raises(ConflictError, match='Not enough available seats.'):
            await book(use_case, ['D1', 'D2'])

    @pytest.mark.asyncio
    async def test_missing_screening(self, use_case: CreateBookingUseCase) -> None:
        with pytest.raises(NotFoundError, match='Screening nope does not exist'):
            await book(use_case, ['A1'], screening_id='nope')

    @pytest.mark.asyncio
    async def test_missing_seat_writes_nothing(
        self, use_case: CreateBookingUseCase, store: InMemoryDocumentStore, seed_screening
    ) -> None:
        await seed_screening(available_seats=50)
        writes_before = store.committed_writes

        with pytest.raises(NotFoundError, match='Seat Z99 does not exist'):
            await book(use_case, ['A1', 'Z99'])

        assert store.committed_writes == writes_before
        assert await seat_is_available(store, 'A1') is True

    @pytest.mark.asyncio
    async def test_invalid_input_never_reaches_the_store(self, quota_guard: QuotaGuard) -> None:
        repo = AsyncMock()
        use_case = CreateBookingUseCase(booking_command_repo=repo, quota_guard=quota_guard)

        with pytest.raises(DomainError):
            await book(use_case, [])

        repo.create_with_seat_reservation.assert_not_awaited()


@pytest.mark.unit
class TestCreateBookingStoreFailures:
    @pytest.fixture
    def repo(self) -> AsyncMock:
        return AsyncMock()

    @pytest.fixture
    def failing_use_case(self, repo: AsyncMock, quota_guard: QuotaGuard) -> CreateBookingUseCase:
        return CreateBookingUseCase(booking_command_repo=repo, quota_guard=quota_guard)

    @pytest.mark.asyncio
    async def test_quota_exceeded(
        self, failing_use_case: CreateBookingUseCase, repo: AsyncMock
    ) -> None:
        repo.create_with_seat_reservation.side_effect = DocumentStoreError(
            'Resource exhausted', code=StoreErrorCode.RESOURCE_EXHAUSTED
        )

        with pytest.raises(ServiceUnavailableError) as exc_info:
            await book(failing_use_case, ['A1'])

        assert exc_info.value.message == WRITE_QUOTA_MESSAGE

    @pytest.mark.asyncio
    async def test_store_unreachable(
        self, failing_use_case: CreateBookingUseCase, repo: AsyncMock
    ) -> None:
        repo.create_with_seat_reservation.side_effect = DocumentStoreError(
            'Kvrocks network error: Connection refused', code=StoreErrorCode.UNAVAILABLE
        )

        with pytest.raises(ServiceUnavailableError) as exc_info:
            await book(failing_use_case, ['A1'])

        assert exc_info.value.message == WRITE_UNAVAILABLE_MESSAGE

    @pytest.mark.asyncio
    async def test_unclassified_error_propagates_unchanged(
        self, failing_use_case: CreateBookingUseCase, repo: AsyncMock
    ) -> None:
        error = DocumentStoreError('Transaction aborted', code=StoreErrorCode.ABORTED)
        repo.create_with_seat_reservation.side_effect = error

        with pytest.raises(DocumentStoreError) as exc_info:
            await book(failing_use_case, ['A1'])

        assert exc_info.value is error
