from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from src.service.cinema.domain.entity.seat_entity import Seat


class ISeatRepo(ABC):
    """Repository interface for the seat map of a screening"""

    @abstractmethod
    async def list_for_screening(self, *, screening_id: str) -> List[Seat]:
        pass

    @abstractmethod
    async def create_missing(self, *, screening_id: str, seats: List[Seat]) -> List[Seat]:
        """
        Transactionally persist the seats that do not exist yet.

        Existing seat documents are never overwritten; the returned map holds the
        stored state for those and the given seat for the rest.
        """
        pass

    @abstractmethod
    async def get_many(
        self, *, screening_id: str, seat_ids: List[str]
    ) -> Dict[str, Optional[Seat]]:
        """Non-transactional point reads; missing seats map to None"""
        pass
