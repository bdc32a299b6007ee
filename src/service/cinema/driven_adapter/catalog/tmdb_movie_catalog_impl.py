"""
TMDb Movie Catalog

Thin read-only client for https://developer.themoviedb.org/reference
"""

import math
from typing import Any, Dict, List, Optional

import httpx

from src.platform.exception.exceptions import MovieCatalogError
from src.platform.logging.loguru_io import Logger
from src.service.cinema.app.interface.i_movie_catalog import IMovieCatalog, MovieFilters
from src.service.cinema.domain.entity.movie_entity import Genre, Movie


POPULAR_LIMIT = 12
PLACEHOLDER_IMAGE_URL = 'https://via.placeholder.com/500x750?text=No+Image'


def format_runtime(runtime: Optional[int]) -> str:
    if not runtime:
        return 'N/A'
    return f'{runtime // 60}h {runtime % 60}min'


def scale_rating(vote_average: Optional[float]) -> int:
    # 0-10 score halved, half-up rounding
    return math.floor((vote_average or 0) / 2 + 0.5)


def map_api_movie(api_movie: Dict[str, Any], *, image_base_url: str) -> Movie:
    genres = api_movie.get('genres')
    poster_path = api_movie.get('poster_path')
    return Movie(
        id=str(api_movie['id']),
        title=api_movie.get('title', ''),
        description=api_movie.get('overview', ''),
        duration=format_runtime(api_movie.get('runtime')),
        genre=', '.join(genre['name'] for genre in genres) if genres else 'N/A',
        image_url=f'{image_base_url}{poster_path}' if poster_path else PLACEHOLDER_IMAGE_URL,
        rating=scale_rating(api_movie.get('vote_average')),
    )


class TmdbMovieCatalogImpl(IMovieCatalog):
    def __init__(
        self,
        *,
        api_key: str,
        base_url: str,
        image_base_url: str,
        language: str = 'pl-PL',
        timeout: float = 10.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.api_key = api_key
        self.image_base_url = image_base_url
        self.language = language
        self.http_client = http_client or httpx.AsyncClient(base_url=base_url, timeout=timeout)

    async def aclose(self) -> None:
        await self.http_client.aclose()

    async def _get_json(
        self, path: str, *, params: Optional[Dict[str, Any]] = None, failure: str
    ) -> Dict[str, Any]:
        query: Dict[str, Any] = {'api_key': self.api_key, 'language': self.language}
        if params:
            query.update(params)

        try:
            response = await self.http_client.get(path, params=query)
        except httpx.HTTPError as e:
            raise MovieCatalogError(f'{failure}: {e}') from e

        if response.is_error:
            Logger.base.warning(
                f'⚠️ [TMDB] {path} answered {response.status_code}: {response.text[:200]}'
            )
            raise MovieCatalogError(failure)
        return response.json()

    def _map(self, api_movies: List[Dict[str, Any]]) -> List[Movie]:
        return [map_api_movie(movie, image_base_url=self.image_base_url) for movie in api_movies]

    @Logger.io
    async def get_popular_movies(self) -> List[Movie]:
        data = await self._get_json(
            '/movie/popular', params={'page': 1}, failure='Failed to fetch movies from TMDb'
        )
        return self._map(data['results'][:POPULAR_LIMIT])

    @Logger.io
    async def get_movies_with_filters(self, *, filters: MovieFilters) -> List[Movie]:
        params: Dict[str, Any] = {
            'include_adult': 'false',
            'include_video': 'false',
            'page': 1,
        }
        if filters.search_query:
            path = '/search/movie'
            params['query'] = filters.search_query
        else:
            path = '/discover/movie'
            if filters.genre:
                params['with_genres'] = filters.genre
            if filters.year:
                params['primary_release_year'] = filters.year
            if filters.sort_by:
                params['sort_by'] = filters.sort_by

        data = await self._get_json(
            path, params=params, failure='Failed to fetch movies with filters from TMDb'
        )
        return self._map(data['results'])

    @Logger.io
    async def get_genres(self) -> List[Genre]:
        data = await self._get_json('/genre/movie/list', failure='Failed to fetch genres from TMDb')
        return [Genre(id=genre['id'], name=genre['name']) for genre in data['genres']]

    @Logger.io
    async def get_movie_by_id(self, *, movie_id: str) -> Movie:
        data = await self._get_json(
            f'/movie/{movie_id}', failure='Failed to fetch movie details from TMDb'
        )
        return map_api_movie(data, image_base_url=self.image_base_url)
