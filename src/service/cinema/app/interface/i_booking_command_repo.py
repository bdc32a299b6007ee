from abc import ABC, abstractmethod
from typing import Optional

from src.service.cinema.domain.entity.booking_entity import Booking


class IBookingCommandRepo(ABC):
    """Repository interface for booking write operations"""

    @abstractmethod
    async def create_with_seat_reservation(self, *, booking: Booking) -> Booking:
        """
        Reserve the booking's seats and persist the booking atomically.

        Reads the screening and every requested seat, validates them, then
        decrements the screening counter, marks the seats unavailable and
        writes the booking, all in one store transaction.

        Returns:
            The booking with its booking_date set

        Raises:
            NotFoundError: Screening or seat document missing
            ConflictError: Seat already taken or not enough seats left
        """
        pass

    @abstractmethod
    async def get_by_id(self, *, booking_id: str) -> Optional[Booking]:
        pass

    @abstractmethod
    async def update_status(self, *, booking: Booking) -> None:
        pass
