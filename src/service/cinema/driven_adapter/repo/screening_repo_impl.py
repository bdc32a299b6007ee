from typing import List, Optional

from src.platform.document_store.document_store import DocumentStore
from src.platform.logging.loguru_io import Logger
from src.service.cinema.app.interface.i_screening_repo import IScreeningRepo
from src.service.cinema.domain.entity.screening_entity import Screening
from src.service.cinema.driven_adapter.repo.document_mapper import (
    SCREENINGS,
    screening_from_snapshot,
    screening_ref,
    screening_to_document,
)


class ScreeningRepoImpl(IScreeningRepo):
    def __init__(self, *, store: DocumentStore) -> None:
        self.store = store

    @Logger.io
    async def get_by_id(self, *, screening_id: str) -> Optional[Screening]:
        snapshot = await self.store.get(screening_ref(screening_id))
        return screening_from_snapshot(snapshot) if snapshot.exists else None

    @Logger.io
    async def list_by_movie(self, *, movie_id: str) -> List[Screening]:
        snapshots = await self.store.query(SCREENINGS, filters=[('movieId', movie_id)])
        return [screening_from_snapshot(snapshot) for snapshot in snapshots]

    @Logger.io
    async def list_by_date(self, *, date: str) -> List[Screening]:
        snapshots = await self.store.query(SCREENINGS, filters=[('date', date)])
        return [screening_from_snapshot(snapshot) for snapshot in snapshots]

    @Logger.io
    async def delete_many(self, *, screening_ids: List[str]) -> None:
        batch = self.store.batch()
        for screening_id in screening_ids:
            batch.delete(screening_ref(screening_id))
        await batch.commit()

    @Logger.io
    async def create_many(self, *, screenings: List[Screening]) -> None:
        batch = self.store.batch()
        for screening in screenings:
            batch.set(screening_ref(screening.id), screening_to_document(screening))
        await batch.commit()
