from unittest.mock import AsyncMock

import pytest
import pytest_asyncio

from src.platform.document_store.document_store import DocumentStoreError, StoreErrorCode
from src.platform.document_store.in_memory_document_store import InMemoryDocumentStore
from src.platform.document_store.quota_guard import WRITE_QUOTA_MESSAGE, QuotaGuard
from src.platform.exception.exceptions import (
    DomainError,
    ForbiddenError,
    NotFoundError,
    ServiceUnavailableError,
)
from src.service.cinema.app.command.cancel_booking_use_case import CancelBookingUseCase
from src.service.cinema.app.command.create_booking_use_case import CreateBookingUseCase
from src.service.cinema.domain.entity.booking_entity import Booking
from src.service.cinema.domain.enum.booking_status import BookingStatus
from src.service.cinema.driven_adapter.repo.booking_command_repo_impl import (
    BookingCommandRepoImpl,
)
from src.service.cinema.driven_adapter.repo.document_mapper import screening_ref, seat_ref


@pytest.fixture
def booking_repo(store: InMemoryDocumentStore) -> BookingCommandRepoImpl:
    return BookingCommandRepoImpl(store=store)


@pytest.fixture
def cancel_use_case(
    booking_repo: BookingCommandRepoImpl, quota_guard: QuotaGuard
) -> CancelBookingUseCase:
    return CancelBookingUseCase(booking_command_repo=booking_repo, quota_guard=quota_guard)


@pytest_asyncio.fixture
async def existing_booking(
    booking_repo: BookingCommandRepoImpl, quota_guard: QuotaGuard, seed_screening
) -> Booking:
    await seed_screening(available_seats=50)
    create = CreateBookingUseCase(booking_command_repo=booking_repo, quota_guard=quota_guard)
    return await create.create_booking(
        user_id='user-1',
        screening_id='screening-1',
        seats=['E4', 'E5'],
        movie_id='550',
        movie_title='Fight Club',
        screening_date='2026-10-19',
        screening_time='20:30',
        total_price=56,
    )


@pytest.mark.unit
class TestCancelBooking:
    @pytest.mark.asyncio
    async def test_flips_status_and_keeps_seats_sold(
        self,
        cancel_use_case: CancelBookingUseCase,
        booking_repo: BookingCommandRepoImpl,
        store: InMemoryDocumentStore,
        existing_booking: Booking,
    ) -> None:
        cancelled = await cancel_use_case.execute(booking_id=existing_booking.id, user_id='user-1')

        assert cancelled.status == BookingStatus.CANCELLED
        reloaded = await booking_repo.get_by_id(booking_id=existing_booking.id)
        assert reloaded is not None
        assert reloaded.status == BookingStatus.CANCELLED
        assert reloaded.seats == ['E4', 'E5']
        assert (await store.get(screening_ref('screening-1'))).get('availableSeats') == 48
        assert (await store.get(seat_ref('screening-1', 'E4'))).get('isAvailable') is False

    @pytest.mark.asyncio
    async def test_other_users_booking_is_forbidden(
        self, cancel_use_case: CancelBookingUseCase, existing_booking: Booking
    ) -> None:
        with pytest.raises(ForbiddenError):
            await cancel_use_case.execute(booking_id=existing_booking.id, user_id='user-2')

    @pytest.mark.asyncio
    async def test_second_cancel_is_rejected(
        self, cancel_use_case: CancelBookingUseCase, existing_booking: Booking
    ) -> None:
        await cancel_use_case.execute(booking_id=existing_booking.id, user_id='user-1')

        with pytest.raises(DomainError, match='Booking already cancelled'):
            await cancel_use_case.execute(booking_id=existing_booking.id, user_id='user-1')

    @pytest.mark.asyncio
    async def test_missing_booking(self, cancel_use_case: CancelBookingUseCase) -> None:
        with pytest.raises(NotFoundError, match='Booking not found'):
            await cancel_use_case.execute(booking_id='nope', user_id='user-1')

    @pytest.mark.asyncio
    async def test_quota_exceeded_on_update(
        self, quota_guard: QuotaGuard, existing_booking: Booking
    ) -> None:
        repo = AsyncMock()
        repo.get_by_id.return_value = existing_booking
        repo.update_status.side_effect = DocumentStoreError(
            'Quota exceeded', code=StoreErrorCode.RESOURCE_EXHAUSTED
        )
        use_case = CancelBookingUseCase(booking_command_repo=repo, quota_guard=quota_guard)

        with pytest.raises(ServiceUnavailableError) as exc_info:
            await use_case.execute(booking_id=existing_booking.id, user_id='user-1')

        assert exc_info.value.message == WRITE_QUOTA_MESSAGE
