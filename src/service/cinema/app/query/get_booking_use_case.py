from typing import Optional, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.document_store.quota_guard import QuotaGuard
from src.platform.exception.exceptions import ForbiddenError
from src.platform.logging.loguru_io import Logger
from src.service.cinema.app.interface.i_booking_query_repo import IBookingQueryRepo
from src.service.cinema.domain.entity.booking_entity import Booking


class GetBookingUseCase:
    def __init__(self, *, booking_query_repo: IBookingQueryRepo, quota_guard: QuotaGuard):
        self.booking_query_repo = booking_query_repo
        self.quota_guard = quota_guard

    @classmethod
    @inject
    def depends(
        cls,
        booking_query_repo: IBookingQueryRepo = Depends(Provide[Container.booking_query_repo]),
        quota_guard: QuotaGuard = Depends(Provide[Container.quota_guard]),
    ) -> Self:
        return cls(booking_query_repo=booking_query_repo, quota_guard=quota_guard)

    @Logger.io
    async def get_booking(self, *, booking_id: str, user_id: str) -> Optional[Booking]:
        """None when the booking is absent or the store is degraded."""
        try:
            booking = await self.booking_query_repo.get_by_id(booking_id=booking_id)
        except Exception as e:
            if self.quota_guard.should_use_fallback(e):
                Logger.base.warning(f'⚠️ [QUOTA] Cannot fetch booking {booking_id}, degrading')
                return None
            raise

        if booking and booking.user_id != user_id:
            raise ForbiddenError('Only the owner can view this booking')
        return booking
