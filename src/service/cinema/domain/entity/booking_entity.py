from datetime import datetime
from typing import List, Optional

import attrs

from src.platform.exception.exceptions import DomainError
from src.platform.logging.loguru_io import Logger
from src.service.cinema.domain.enum.booking_status import BookingStatus


@attrs.define
class Booking:
    id: str
    user_id: str
    screening_id: str
    movie_id: str
    movie_title: str
    screening_date: str
    screening_time: str
    seats: List[str]
    total_price: int
    status: BookingStatus = BookingStatus.CONFIRMED
    movie_image_url: Optional[str] = None
    booking_date: Optional[datetime] = None  # assigned when the reservation commits

    @classmethod
    @Logger.io
    def create(
        cls,
        *,
        id: str,
        user_id: str,
        screening_id: str,
        movie_id: str,
        movie_title: str,
        screening_date: str,
        screening_time: str,
        seats: List[str],
        total_price: int,
        movie_image_url: Optional[str] = None,
        status: Optional[BookingStatus] = None,
    ) -> 'Booking':
        if not user_id:
            raise DomainError('user_id is required')
        if not screening_id:
            raise DomainError('screening_id is required')
        if not seats:
            raise DomainError('At least one seat must be selected')
        if len(set(seats)) != len(seats):
            raise DomainError('Seat list contains duplicates')
        if total_price < 0:
            raise DomainError('total_price must not be negative')
        if status == BookingStatus.CANCELLED:
            raise DomainError('A booking cannot be created as cancelled')

        return cls(
            id=id,
            user_id=user_id,
            screening_id=screening_id,
            movie_id=movie_id,
            movie_title=movie_title,
            movie_image_url=movie_image_url,
            screening_date=screening_date,
            screening_time=screening_time,
            seats=list(seats),
            total_price=total_price,
            status=status or BookingStatus.CONFIRMED,
        )

    @Logger.io
    def cancel(self) -> 'Booking':
        """
        Flip the booking to CANCELLED.

        Seats stay sold: the reservation is not rolled back on the screening.

        Raises:
            DomainError: When the booking is already cancelled
        """
        if self.status == BookingStatus.CANCELLED:
            raise DomainError('Booking already cancelled')
        return attrs.evolve(self, status=BookingStatus.CANCELLED)
