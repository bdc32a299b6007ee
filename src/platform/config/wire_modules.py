"""
Wire Modules Configuration

Modules whose ``depends`` classmethods resolve ``Provide[Container.xxx]``.
Shared between production and test environments.
"""

from types import ModuleType

from src.service.cinema.app.command import (
    cancel_booking_use_case,
    create_booking_use_case,
    ensure_screenings_use_case,
    ensure_seats_use_case,
)
from src.service.cinema.app.query import (
    check_seats_availability_use_case,
    get_booking_use_case,
    get_screening_use_case,
    list_movies_by_screening_date_use_case,
    list_movies_use_case,
    list_user_bookings_use_case,
)


WIRE_MODULES: list[ModuleType] = [
    create_booking_use_case,
    cancel_booking_use_case,
    ensure_screenings_use_case,
    ensure_seats_use_case,
    check_seats_availability_use_case,
    get_booking_use_case,
    get_screening_use_case,
    list_user_bookings_use_case,
    list_movies_use_case,
    list_movies_by_screening_date_use_case,
]
