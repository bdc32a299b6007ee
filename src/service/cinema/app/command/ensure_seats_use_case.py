from typing import List, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.document_store.quota_guard import QuotaGuard
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.booking_metrics import metrics
from src.service.cinema.app.interface.i_seat_repo import ISeatRepo
from src.service.cinema.domain.entity.seat_entity import Seat
from src.service.cinema.domain.seat_generator import generate_seats


class EnsureSeatsUseCase:
    """
    Lazy seat provisioning for a screening.

    Persisted seats win. Without any, the deterministic layout is generated
    and written in one transaction that leaves seats written meanwhile
    untouched. When the store fails, the generated layout is returned without
    being persisted.
    """

    def __init__(self, *, seat_repo: ISeatRepo, quota_guard: QuotaGuard) -> None:
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
    async def execute(self, *, screening_id: str) -> List[Seat]:
        try:
            seats = await self.seat_repo.list_for_screening(screening_id=screening_id)
            if seats:
                metrics.record_provisioning(target='seats', outcome='cached')
                return seats

            Logger.base.info(f'💺 [PROVISION] Generating seats for screening {screening_id}')
            seats = await self.seat_repo.create_missing(
                screening_id=screening_id, seats=generate_seats(screening_id)
            )
            metrics.record_provisioning(target='seats', outcome='created')
            return seats

        except Exception as e:
            status = self.quota_guard.check_quota_status(e)
            metrics.record_provisioning(target='seats', outcome='failed')
            Logger.base.warning(
                f'⚠️ [PROVISION] Seat provisioning failed for screening {screening_id} '
                f'({status.kind}), serving generated layout: {e}'
            )
            return generate_seats(screening_id)
