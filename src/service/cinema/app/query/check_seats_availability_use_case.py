from typing import List, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.document_store.quota_guard import QuotaGuard
from src.platform.logging.loguru_io import Logger
from src.service.cinema.app.dto.seat_availability_dto import SeatAvailabilityResult
from src.service.cinema.app.interface.i_seat_repo import ISeatRepo


class CheckSeatsAvailabilityUseCase:
    """
    Advisory pre-check before booking.

    Plain reads outside any transaction: the answer can be stale by the time
    the booking commits, which re-validates every seat.
    """

    def __init__(self, *, seat_repo: ISeatRepo, quota_guard: QuotaGuard):
        self.seat_repo = seat_repo
        self.quota_guard = quota_guard

    @classmethod
    @inject
    def depends(
        cls,
        seat_repo: ISeatRepo = Depends(Provide[Container.seat_repo]),
        quota_guard: QuotaGuard = Depends(Provide[Container.quota_guard]),
    ) -> Self:
        return cls(seat_repo=seat_repo, quota_guard=quota_guard)

    @Logger.io
    async def execute(self, *, screening_id: str, seat_ids: List[str]) -> SeatAvailabilityResult:
        try:
            seats = await self.seat_repo.get_many(screening_id=screening_id, seat_ids=seat_ids)
        except Exception as e:
            status = self.quota_guard.check_quota_status(e)
            Logger.base.warning(
                f'⚠️ [AVAILABILITY] Check failed for screening {screening_id} ({status.kind}), '
                f'reporting every seat unavailable'
            )
            return SeatAvailabilityResult(available=[], unavailable=list(seat_ids))

        result = SeatAvailabilityResult()
        for seat_id in seat_ids:
            seat = seats.get(seat_id)
            if seat is not None and seat.is_available:
                result.available.append(seat_id)
            else:
                result.unavailable.append(seat_id)
        return result
