from datetime import date

import attrs

from src.platform.exception.exceptions import DomainError


@attrs.define
class Screening:
    id: str
    movie_id: str
    date: str  # ISO YYYY-MM-DD
    time: str  # HH:MM
    hall: str
    price: int
    available_seats: int
    total_seats: int

    def __attrs_post_init__(self) -> None:
        if not 0 <= self.available_seats <= self.total_seats:
            raise DomainError(
                f'available_seats must be between 0 and {self.total_seats}, '
                f'got {self.available_seats}'
            )

    def is_upcoming(self, today: date) -> bool:
        # ISO dates sort lexicographically in calendar order
        return bool(self.date) and self.date >= today.isoformat()
