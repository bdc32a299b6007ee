from collections.abc import Callable
from datetime import date, datetime, timezone
import random
from typing import List, Optional, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
import uuid_utils

from src.platform.config.di import Container
from src.platform.document_store.quota_guard import QuotaGuard
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.booking_metrics import metrics
from src.service.cinema.app.interface.i_screening_repo import IScreeningRepo
from src.service.cinema.domain.entity.screening_entity import Screening
from src.service.cinema.domain.screening_schedule import build_screenings


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


def new_screening_id() -> str:
    return str(uuid_utils.uuid7())


class EnsureScreeningsUseCase:
    """
    Lazy screening provisioning for a movie.

    Flow:
    1. Query every screening of the movie
    2. Keep the ones dated today or later; return them when any remain (no writes)
    3. Otherwise delete the stale ones (one batch) and create a fresh
       3-day x 4-showtime schedule (another batch)

    The delete and create batches are each atomic but not atomic together.
    Any failure is logged and yields an empty list.
    """

    def __init__(
        self,
        *,
        screening_repo: IScreeningRepo,
        quota_guard: QuotaGuard,
        today: Callable[[], date] = utc_today,
        rng: Optional[random.Random] = None,
        id_factory: Callable[[], str] = new_screening_id,
    ) -> None:
        self.screening_repo = screening_repo
        self.quota_guard = quota_guard
        self._today = today
        self._rng = rng or random.Random()
        self._id_factory = id_factory

    @classmethod
    @inject
    def depends(
        cls,
        screening_repo: IScreeningRepo = Depends(Provide[Container.screening_repo]),
        quota_guard: QuotaGuard = Depends(Provide[Container.quota_guard]),
    ) -> Self:
        return cls(screening_repo=screening_repo, quota_guard=quota_guard)

    @Logger.io
    async def execute(self, *, movie_id: str) -> List[Screening]:
        try:
            existing = await self.screening_repo.list_by_movie(movie_id=movie_id)
            today = self._today()

            upcoming = [screening for screening in existing if screening.is_upcoming(today)]
            if upcoming:
                metrics.record_provisioning(target='screenings', outcome='cached')
                return upcoming

            Logger.base.info(
                f'🗓️ [PROVISION] Screenings for movie {movie_id} are stale or missing, regenerating'
            )
            if existing:
                await self.screening_repo.delete_many(
                    screening_ids=[screening.id for screening in existing]
                )
                Logger.base.info(f'🗑️ [PROVISION] Deleted {len(existing)} stale screenings')

            screenings = build_screenings(
                movie_id=movie_id, today=today, rng=self._rng, id_factory=self._id_factory
            )
            await self.screening_repo.create_many(screenings=screenings)
            metrics.record_provisioning(target='screenings', outcome='created')
            Logger.base.info(
                f'✅ [PROVISION] Created {len(screenings)} screenings for movie {movie_id}'
            )
            return screenings

        except Exception as e:
            status = self.quota_guard.check_quota_status(e)
            metrics.record_provisioning(target='screenings', outcome='failed')
            Logger.base.error(
                f'❌ [PROVISION] Screening provisioning failed for movie {movie_id} '
                f'({status.kind}): {e}'
            )
            return []
