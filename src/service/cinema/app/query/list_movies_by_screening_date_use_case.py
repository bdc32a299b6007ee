from typing import Dict, List, Self

import anyio
from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.logging.loguru_io import Logger
from src.service.cinema.app.interface.i_movie_catalog import IMovieCatalog
from src.service.cinema.app.interface.i_screening_repo import IScreeningRepo
from src.service.cinema.domain.entity.movie_entity import Movie


MAX_MOVIES_PER_DATE = 12


class ListMoviesByScreeningDateUseCase:
    """
    Movies that have at least one screening on a given date.

    Distinct movie ids (first-seen order, at most 12) are fetched from the
    catalog concurrently; a movie whose lookup fails is skipped.
    """

    def __init__(self, *, screening_repo: IScreeningRepo, movie_catalog: IMovieCatalog):
        self.screening_repo = screening_repo
        self.movie_catalog = movie_catalog

    @classmethod
    @inject
    def depends(
        cls,
        screening_repo: IScreeningRepo = Depends(Provide[Container.screening_repo]),
        movie_catalog: IMovieCatalog = Depends(Provide[Container.movie_catalog]),
    ) -> Self:
        return cls(screening_repo=screening_repo, movie_catalog=movie_catalog)

    @Logger.io
    async def execute(self, *, date: str) -> List[Movie]:
        screenings = await self.screening_repo.list_by_date(date=date)
        if not screenings:
            Logger.base.info(f'🎬 [MOVIES-BY-DATE] No screenings on {date}')
            return []

        movie_ids = list(dict.fromkeys(screening.movie_id for screening in screenings))
        movie_ids = movie_ids[:MAX_MOVIES_PER_DATE]

        found: Dict[str, Movie] = {}

        async def fetch(movie_id: str) -> None:
            try:
                found[movie_id] = await self.movie_catalog.get_movie_by_id(movie_id=movie_id)
            except Exception as e:
                Logger.base.warning(f'⚠️ [MOVIES-BY-DATE] Skipping movie {movie_id}: {e}')

        async with anyio.create_task_group() as tg:
            for movie_id in movie_ids:
                tg.start_soon(fetch, movie_id)

        return [found[movie_id] for movie_id in movie_ids if movie_id in found]
