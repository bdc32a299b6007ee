from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class BookingCreateRequest(BaseModel):
    screening_id: str
    seats: List[str] = Field(min_length=1)
    movie_id: str
    movie_title: str
    movie_image_url: Optional[str] = None
    screening_date: str
    screening_time: str
    total_price: int = Field(ge=0)
    status: Optional[Literal['pending', 'confirmed']] = None

    class Config:
        json_schema_extra = {
            'example': {
                'screening_id': '0192f0c1-7b7e-7c3a-9d2e-3b1f5a6c7d8e',
                'seats': ['A1', 'A2'],
                'movie_id': '550',
                'movie_title': 'Fight Club',
                'screening_date': '2026-10-19',
                'screening_time': '18:15',
                'total_price': 56,
            }
        }


class BookingCreatedResponse(BaseModel):
    id: str


class BookingResponse(BaseModel):
    model_config = ConfigDict(
        json_schema_extra={
            'example': {
                'id': '0192f0c2-1a2b-7c3d-8e4f-5a6b7c8d9e0f',
                'user_id': 'user-42',
                'screening_id': '0192f0c1-7b7e-7c3a-9d2e-3b1f5a6c7d8e',
                'movie_id': '550',
                'movie_title': 'Fight Club',
                'movie_image_url': None,
                'screening_date': '2026-10-19',
                'screening_time': '18:15',
                'seats': ['A1', 'A2'],
                'total_price': 56,
                'status': 'confirmed',
                'booking_date': '2026-10-19T09:30:00Z',
            }
        }
    )

    id: str
    user_id: str
    screening_id: str
    movie_id: str
    movie_title: str
    movie_image_url: Optional[str] = None
    screening_date: str
    screening_time: str
    seats: List[str]
    total_price: int
    status: str
    booking_date: Optional[datetime] = None


class CancelBookingResponse(BaseModel):
    id: str
    status: str
