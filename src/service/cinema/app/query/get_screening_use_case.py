from typing import Optional, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.document_store.quota_guard import QuotaGuard
from src.platform.logging.loguru_io import Logger
from src.service.cinema.app.interface.i_screening_repo import IScreeningRepo
from src.service.cinema.domain.entity.screening_entity import Screening


class GetScreeningUseCase:
    def __init__(self, *, screening_repo: IScreeningRepo, quota_guard: QuotaGuard):
        self.screening_repo = screening_repo
        self.quota_guard = quota_guard

    @classmethod
    @inject
    def depends(
        cls,
        screening_repo: IScreeningRepo = Depends(Provide[Container.screening_repo]),
        quota_guard: QuotaGuard = Depends(Provide[Container.quota_guard]),
    ) -> Self:
        return cls(screening_repo=screening_repo, quota_guard=quota_guard)

    @Logger.io
    async def get_screening(self, *, screening_id: str) -> Optional[Screening]:
        try:
            return await self.screening_repo.get_by_id(screening_id=screening_id)
        except Exception as e:
            if self.quota_guard.should_use_fallback(e):
                Logger.base.warning(f'⚠️ [QUOTA] Cannot fetch screening {screening_id}, degrading')
                return None
            raise
