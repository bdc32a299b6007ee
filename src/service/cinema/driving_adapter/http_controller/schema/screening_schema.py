from typing import List

from pydantic import BaseModel, ConfigDict, Field


class ScreeningResponse(BaseModel):
    model_config = ConfigDict(
        json_schema_extra={
            'example': {
                'id': '0192f0c1-7b7e-7c3a-9d2e-3b1f5a6c7d8e',
                'movie_id': '550',
                'date': '2026-10-19',
                'time': '18:15',
                'hall': 'B',
                'price': 28,
                'available_seats': 57,
                'total_seats': 100,
            }
        }
    )

    id: str
    movie_id: str
    date: str
    time: str
    hall: str
    price: int
    available_seats: int
    total_seats: int


class SeatResponse(BaseModel):
    id: str
    row: str
    number: int
    is_available: bool
    is_selected: bool = False


class SeatAvailabilityRequest(BaseModel):
    seat_ids: List[str] = Field(min_length=1)

    class Config:
        json_schema_extra = {'example': {'seat_ids': ['A1', 'A2']}}


class SeatAvailabilityResponse(BaseModel):
    available: List[str]
    unavailable: List[str]
    all_available: bool
