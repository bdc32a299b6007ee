from abc import ABC, abstractmethod
from typing import List, Optional

from src.service.cinema.domain.entity.screening_entity import Screening


class IScreeningRepo(ABC):
    """Repository interface for screening documents"""

    @abstractmethod
    async def get_by_id(self, *, screening_id: str) -> Optional[Screening]:
        pass

    @abstractmethod
    async def list_by_movie(self, *, movie_id: str) -> List[Screening]:
        pass

    @abstractmethod
    async def list_by_date(self, *, date: str) -> List[Screening]:
        pass

    @abstractmethod
    async def delete_many(self, *, screening_ids: List[str]) -> None:
        """Delete all given screenings in one all-or-nothing batch"""
        pass

    @abstractmethod
    async def create_many(self, *, screenings: List[Screening]) -> None:
        """Create all given screenings in one all-or-nothing batch"""
        pass
