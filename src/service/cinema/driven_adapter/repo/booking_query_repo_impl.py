from typing import List, Optional

from src.platform.document_store.document_store import DocumentStore
from src.platform.logging.loguru_io import Logger
from src.service.cinema.app.interface.i_booking_query_repo import IBookingQueryRepo
from src.service.cinema.domain.entity.booking_entity import Booking
from src.service.cinema.driven_adapter.repo.document_mapper import (
    BOOKINGS,
    booking_from_snapshot,
    booking_ref,
)


class BookingQueryRepoImpl(IBookingQueryRepo):
    def __init__(self, *, store: DocumentStore) -> None:
        self.store = store

    @Logger.io
    async def get_by_id(self, *, booking_id: str) -> Optional[Booking]:
        snapshot = await self.store.get(booking_ref(booking_id))
        return booking_from_snapshot(snapshot) if snapshot.exists else None

    @Logger.io
    async def list_by_user(self, *, user_id: str) -> List[Booking]:
        snapshots = await self.store.query(
            BOOKINGS,
            filters=[('userId', user_id)],
            order_by='bookingDate',
            descending=True,
        )
        return [booking_from_snapshot(snapshot) for snapshot in snapshots]
