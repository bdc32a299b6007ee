from typing import List

from pydantic import BaseModel, ConfigDict


class MovieResponse(BaseModel):
    model_config = ConfigDict(
        json_schema_extra={
            'example': {
                'id': '550',
                'title': 'Fight Club',
                'description': 'A ticking-time-bomb insomniac...',
                'duration': '2h 19min',
                'genre': 'Drama, Thriller',
                'image_url': 'https://image.tmdb.org/t/p/w500/pB8BM7pdSp6B6Ih7QZ4DrQ3PmJK.jpg',
                'rating': 4,
            }
        }
    )

    id: str
    title: str
    description: str
    duration: str
    genre: str
    image_url: str
    rating: int


class GenreResponse(BaseModel):
    id: int
    name: str


class MovieListResponse(BaseModel):
    movies: List[MovieResponse]
