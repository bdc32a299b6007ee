import time
from typing import List, Optional, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace
import uuid_utils

from src.platform.config.di import Container
from src.platform.document_store.quota_guard import QuotaGuard
from src.platform.exception.exceptions import ConflictError, CustomBaseError, NotFoundError
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.booking_metrics import metrics
from src.service.cinema.app.interface.i_booking_command_repo import IBookingCommandRepo
from src.service.cinema.domain.entity.booking_entity import Booking
from src.service.cinema.domain.enum.booking_status import BookingStatus


class CreateBookingUseCase:
    """
    Create booking use case - seat reservation and booking in one store transaction

    Flow:
    1. Generate UUID7 booking_id and validate the booking aggregate
    2. Read screening + seats, validate, stage writes (repo transaction)
    3. Store commits atomically or re-runs step 2 on optimistic conflict
    4. Return the committed booking (booking_date assigned at commit)

    Two concurrent callers on overlapping seats: one commits, the other
    gets ConflictError naming the first seat already taken.
    """

    def __init__(
        self,
        *,
        booking_command_repo: IBookingCommandRepo,
        quota_guard: QuotaGuard,
    ) -> None:
        self.booking_command_repo = booking_command_repo
        self.quota_guard = quota_guard
        self.tracer = trace.get_tracer(__name__)

    @classmethod
    @inject
    def depends(
        cls,
        booking_command_repo: IBookingCommandRepo = Depends(
            Provide[Container.booking_command_repo]
        ),
        quota_guard: QuotaGuard = Depends(Provide[Container.quota_guard]),
    ) -> Self:
        return cls(booking_command_repo=booking_command_repo, quota_guard=quota_guard)

    @Logger.io
    async def create_booking(
        self,
        *,
        user_id: str,
        screening_id: str,
        seats: List[str],
        movie_id: str,
        movie_title: str,
        screening_date: str,
        screening_time: str,
        total_price: int,
        movie_image_url: Optional[str] = None,
        status: Optional[BookingStatus] = None,
    ) -> Booking:
        """
        Raises:
            DomainError: Invalid booking input (no seats, duplicates, ...)
            NotFoundError: Screening or one of the seats does not exist
            ConflictError: A seat is already taken or not enough seats remain
            ServiceUnavailableError: Store quota exhausted or unreachable
        """
        booking_id = str(uuid_utils.uuid7())

        with self.tracer.start_as_current_span(
            'use_case.create_booking',
            attributes={
                'booking.id': booking_id,
                'screening.id': screening_id,
                'booking.seat_count': len(seats),
            },
        ):
            booking = Booking.create(
                id=booking_id,
                user_id=user_id,
                screening_id=screening_id,
                movie_id=movie_id,
                movie_title=movie_title,
                movie_image_url=movie_image_url,
                screening_date=screening_date,
                screening_time=screening_time,
                seats=seats,
                total_price=total_price,
                status=status,
            )

            start = time.perf_counter()
            try:
                committed = await self.booking_command_repo.create_with_seat_reservation(
                    booking=booking
                )
            except NotFoundError:
                metrics.record_booking(result='not_found', duration=time.perf_counter() - start)
                raise
            except ConflictError:
                metrics.record_booking(result='conflict', duration=time.perf_counter() - start)
                raise
            except CustomBaseError:
                metrics.record_booking(result='error', duration=time.perf_counter() - start)
                raise
            except Exception as e:
                duration = time.perf_counter() - start
                if (write_error := self.quota_guard.write_error_for(e, action='create booking')):
                    metrics.record_booking(result='unavailable', duration=duration)
                    raise write_error from e
                metrics.record_booking(result='error', duration=duration)
                raise

            metrics.record_booking(
                result='success', duration=time.perf_counter() - start, seats=len(seats)
            )
            Logger.base.info(
                f'✅ [CREATE-BOOKING] Booking {booking_id} committed for user {user_id}, '
                f'screening {screening_id}, seats {seats}'
            )
            return committed
