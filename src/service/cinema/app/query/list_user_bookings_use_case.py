from typing import List, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.document_store.quota_guard import QuotaGuard
from src.platform.logging.loguru_io import Logger
from src.service.cinema.app.interface.i_booking_query_repo import IBookingQueryRepo
from src.service.cinema.domain.entity.booking_entity import Booking


class ListUserBookingsUseCase:
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
    async def list_user_bookings(self, *, user_id: str) -> List[Booking]:
        """Newest first. Empty when the store is degraded."""
        try:
            return await self.booking_query_repo.list_by_user(user_id=user_id)
        except Exception as e:
            if self.quota_guard.should_use_fallback(e):
                Logger.base.warning(f'⚠️ [QUOTA] Cannot list bookings of user {user_id}, degrading')
                return []
            raise
