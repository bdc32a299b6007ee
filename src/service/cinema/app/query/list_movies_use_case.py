from typing import List, Optional, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.logging.loguru_io import Logger
from src.service.cinema.app.interface.i_movie_catalog import IMovieCatalog, MovieFilters
from src.service.cinema.domain.entity.movie_entity import Genre, Movie


class ListMoviesUseCase:
    def __init__(self, *, movie_catalog: IMovieCatalog):
        self.movie_catalog = movie_catalog

    @classmethod
    @inject
    def depends(
        cls,
        movie_catalog: IMovieCatalog = Depends(Provide[Container.movie_catalog]),
    ) -> Self:
        return cls(movie_catalog=movie_catalog)

    @Logger.io
    async def list_movies(self, *, filters: Optional[MovieFilters] = None) -> List[Movie]:
        """Popular movies unless any filter or search query is set."""
        if filters is None or filters == MovieFilters():
            return await self.movie_catalog.get_popular_movies()
        return await self.movie_catalog.get_movies_with_filters(filters=filters)

    @Logger.io
    async def list_genres(self) -> List[Genre]:
        return await self.movie_catalog.get_genres()

    @Logger.io
    async def get_movie(self, *, movie_id: str) -> Movie:
        return await self.movie_catalog.get_movie_by_id(movie_id=movie_id)
