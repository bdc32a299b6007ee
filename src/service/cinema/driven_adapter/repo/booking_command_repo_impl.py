from datetime import datetime, timezone
from typing import Callable, Optional

import attrs

from src.platform.document_store.document_store import DocumentStore, Transaction
from src.platform.exception.exceptions import ConflictError, NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.cinema.app.interface.i_booking_command_repo import IBookingCommandRepo
from src.service.cinema.domain.entity.booking_entity import Booking
from src.service.cinema.driven_adapter.repo.document_mapper import (
    booking_from_snapshot,
    booking_ref,
    booking_to_document,
    screening_ref,
    seat_ref,
)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class BookingCommandRepoImpl(IBookingCommandRepo):
    def __init__(
        self, *, store: DocumentStore, clock: Callable[[], datetime] = _utc_now
    ) -> None:
        self.store = store
        self._clock = clock

    @Logger.io
    async def create_with_seat_reservation(self, *, booking: Booking) -> Booking:
        screening_doc = screening_ref(booking.screening_id)
        seat_docs = [seat_ref(booking.screening_id, seat_id) for seat_id in booking.seats]

        async def reserve(transaction: Transaction) -> Booking:
            # Read phase: every read is issued before the first write is staged
            screening_snap = await transaction.get(screening_doc)
            seat_snaps = [await transaction.get(ref) for ref in seat_docs]

            # Validate
            if not screening_snap.exists:
                raise NotFoundError(f'Screening {booking.screening_id} does not exist')
            for seat_snap in seat_snaps:
                if not seat_snap.exists:
                    raise NotFoundError(f'Seat {seat_snap.id} does not exist')
                if not seat_snap.get('isAvailable'):
                    raise ConflictError(f'Seat {seat_snap.id} is no longer available.')

            available_seats = screening_snap.get('availableSeats', 0)
            if available_seats < len(booking.seats):
                raise ConflictError('Not enough available seats.')

            # Write phase
            transaction.update(
                screening_doc, {'availableSeats': available_seats - len(booking.seats)}
            )
            for ref in seat_docs:
                transaction.update(ref, {'isAvailable': False})

            committed = attrs.evolve(booking, booking_date=self._clock())
            transaction.set(booking_ref(booking.id), booking_to_document(committed))
            return committed

        committed_booking = await self.store.run_transaction(reserve)
        Logger.base.info(
            f'🎟️ [BOOKING] Reserved {len(booking.seats)} seats {booking.seats} '
            f'on screening {booking.screening_id} as booking {booking.id}'
        )
        return committed_booking

    @Logger.io
    async def get_by_id(self, *, booking_id: str) -> Optional[Booking]:
        snapshot = await self.store.get(booking_ref(booking_id))
        return booking_from_snapshot(snapshot) if snapshot.exists else None

    @Logger.io
    async def update_status(self, *, booking: Booking) -> None:
        batch = self.store.batch()
        batch.update(booking_ref(booking.id), {'status': booking.status.value})
        await batch.commit()
