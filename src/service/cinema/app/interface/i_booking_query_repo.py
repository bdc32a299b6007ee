from abc import ABC, abstractmethod
from typing import List, Optional

from src.service.cinema.domain.entity.booking_entity import Booking


class IBookingQueryRepo(ABC):
    """Repository interface for booking read operations"""

    @abstractmethod
    async def get_by_id(self, *, booking_id: str) -> Optional[Booking]:
        pass

    @abstractmethod
    async def list_by_user(self, *, user_id: str) -> List[Booking]:
        """Newest booking first"""
        pass
