from typing import List, Optional

import attrs
from fastapi import APIRouter, Depends, Query

from src.platform.logging.loguru_io import Logger
from src.service.cinema.app.command.ensure_screenings_use_case import EnsureScreeningsUseCase
from src.service.cinema.app.interface.i_movie_catalog import MovieFilters, SortKey
from src.service.cinema.app.query.list_movies_by_screening_date_use_case import (
    ListMoviesByScreeningDateUseCase,
)
from src.service.cinema.app.query.list_movies_use_case import ListMoviesUseCase
from src.service.cinema.driving_adapter.http_controller.schema.movie_schema import (
    GenreResponse,
    MovieResponse,
)
from src.service.cinema.driving_adapter.http_controller.schema.screening_schema import (
    ScreeningResponse,
)


router = APIRouter()


@router.get('', response_model=List[MovieResponse])
@Logger.io
async def list_movies(
    genre: Optional[int] = None,
    year: Optional[int] = None,
    sort_by: Optional[SortKey] = None,
    query: Optional[str] = Query(default=None, min_length=1),
    use_case: ListMoviesUseCase = Depends(ListMoviesUseCase.depends),
) -> List[MovieResponse]:
    movies = await use_case.list_movies(
        filters=MovieFilters(genre=genre, year=year, sort_by=sort_by, search_query=query)
    )
    return [MovieResponse(**attrs.asdict(movie)) for movie in movies]


@router.get('/genres', response_model=List[GenreResponse])
@Logger.io
async def list_genres(
    use_case: ListMoviesUseCase = Depends(ListMoviesUseCase.depends),
) -> List[GenreResponse]:
    genres = await use_case.list_genres()
    return [GenreResponse(id=genre.id, name=genre.name) for genre in genres]


@router.get('/by_date/{date}', response_model=List[MovieResponse])
@Logger.io
async def list_movies_by_screening_date(
    date: str,
    use_case: ListMoviesByScreeningDateUseCase = Depends(ListMoviesByScreeningDateUseCase.depends),
) -> List[MovieResponse]:
    movies = await use_case.execute(date=date)
    return [MovieResponse(**attrs.asdict(movie)) for movie in movies]


@router.get('/{movie_id}')
@Logger.io
async def get_movie(
    movie_id: str,
    use_case: ListMoviesUseCase = Depends(ListMoviesUseCase.depends),
) -> MovieResponse:
    movie = await use_case.get_movie(movie_id=movie_id)
    return MovieResponse(**attrs.asdict(movie))


@router.get('/{movie_id}/screenings', response_model=List[ScreeningResponse])
@Logger.io
async def list_screenings_for_movie(
    movie_id: str,
    use_case: EnsureScreeningsUseCase = Depends(EnsureScreeningsUseCase.depends),
) -> List[ScreeningResponse]:
    """Screenings from today on, provisioned on first request."""
    screenings = await use_case.execute(movie_id=movie_id)
    return [ScreeningResponse(**attrs.asdict(screening)) for screening in screenings]
