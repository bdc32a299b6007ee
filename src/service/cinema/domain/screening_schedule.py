from collections.abc import Callable
from datetime import date, timedelta
import random
from typing import List

from src.service.cinema.domain.entity.screening_entity import Screening


DAYS_AHEAD = 3
SHOWTIMES = ('16:00', '18:15', '20:30', '22:15')
HALLS = ('A', 'B', 'C', 'D')
PRICES = (25, 28)
TOTAL_SEATS = 100
MIN_INITIAL_AVAILABLE = 30
MAX_INITIAL_AVAILABLE = 80  # exclusive


def build_screenings(
    *,
    movie_id: str,
    today: date,
    rng: random.Random,
    id_factory: Callable[[], str],
) -> List[Screening]:
    """Fresh schedule: today plus the following days, every showtime once per day."""
    screenings: List[Screening] = []
    for day_offset in range(DAYS_AHEAD):
        day = (today + timedelta(days=day_offset)).isoformat()
        for showtime in SHOWTIMES:
            screenings.append(
                Screening(
                    id=id_factory(),
                    movie_id=movie_id,
                    date=day,
                    time=showtime,
                    hall=rng.choice(HALLS),
                    price=rng.choice(PRICES),
                    available_seats=rng.randrange(MIN_INITIAL_AVAILABLE, MAX_INITIAL_AVAILABLE),
                    total_seats=TOTAL_SEATS,
                )
            )
    return screenings
