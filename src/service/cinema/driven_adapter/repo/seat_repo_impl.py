from typing import Dict, List, Optional

from src.platform.document_store.document_store import DocumentStore, Transaction
from src.platform.logging.loguru_io import Logger
from src.service.cinema.app.interface.i_seat_repo import ISeatRepo
from src.service.cinema.domain.entity.seat_entity import Seat
from src.service.cinema.driven_adapter.repo.document_mapper import (
    seat_from_snapshot,
    seat_ref,
    seat_to_document,
    seats_collection,
)


class SeatRepoImpl(ISeatRepo):
    def __init__(self, *, store: DocumentStore) -> None:
        self.store = store

    @Logger.io
    async def list_for_screening(self, *, screening_id: str) -> List[Seat]:
        snapshots = await self.store.query(seats_collection(screening_id))
        seats = [seat_from_snapshot(snapshot) for snapshot in snapshots]
        return sorted(seats, key=lambda seat: (seat.row, seat.number))

    @Logger.io
    async def create_missing(self, *, screening_id: str, seats: List[Seat]) -> List[Seat]:
        async def provision(transaction: Transaction) -> List[Seat]:
            # Read phase: a seat written since the caller's listing is kept as stored
            snapshots = [await transaction.get(seat_ref(screening_id, seat.id)) for seat in seats]

            result: List[Seat] = []
            created = 0
            for seat, snapshot in zip(seats, snapshots):
                if snapshot.exists:
                    result.append(seat_from_snapshot(snapshot))
                else:
                    transaction.set(snapshot.ref, seat_to_document(seat))
                    result.append(seat)
                    created += 1

            Logger.base.info(
                f'💺 [SEATS] Screening {screening_id}: {created} created, '
                f'{len(seats) - created} already present'
            )
            return result

        return await self.store.run_transaction(provision)

    @Logger.io
    async def get_many(
        self, *, screening_id: str, seat_ids: List[str]
    ) -> Dict[str, Optional[Seat]]:
        results: Dict[str, Optional[Seat]] = {}
        for seat_id in seat_ids:
            snapshot = await self.store.get(seat_ref(screening_id, seat_id))
            results[seat_id] = seat_from_snapshot(snapshot) if snapshot.exists else None
        return results
