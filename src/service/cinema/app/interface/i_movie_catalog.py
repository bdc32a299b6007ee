from abc import ABC, abstractmethod
from typing import List, Literal, Optional

import attrs

from src.service.cinema.domain.entity.movie_entity import Genre, Movie


SortKey = Literal['popularity.desc', 'vote_average.desc', 'release_date.desc', 'title.asc']


@attrs.define
class MovieFilters:
    genre: Optional[int] = None
    year: Optional[int] = None
    sort_by: Optional[SortKey] = None
    search_query: Optional[str] = None


class IMovieCatalog(ABC):
    """Read-only third-party movie catalog"""

    @abstractmethod
    async def get_popular_movies(self) -> List[Movie]:
        pass

    @abstractmethod
    async def get_movies_with_filters(self, *, filters: MovieFilters) -> List[Movie]:
        pass

    @abstractmethod
    async def get_genres(self) -> List[Genre]:
        pass

    @abstractmethod
    async def get_movie_by_id(self, *, movie_id: str) -> Movie:
        pass
