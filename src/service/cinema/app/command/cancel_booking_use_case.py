from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.document_store.quota_guard import QuotaGuard
from src.platform.exception.exceptions import CustomBaseError, ForbiddenError, NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.cinema.app.interface.i_booking_command_repo import IBookingCommandRepo
from src.service.cinema.domain.entity.booking_entity import Booking


class CancelBookingUseCase:
    """
    Flip a booking to CANCELLED.

    Seats and the screening's available_seats are left untouched.
    """

    def __init__(
        self,
        *,
        booking_command_repo: IBookingCommandRepo,
        quota_guard: QuotaGuard,
    ) -> None:
        self.booking_command_repo = booking_command_repo
        self.quota_guard = quota_guard

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
    async def execute(self, *, booking_id: str, user_id: str) -> Booking:
        try:
            booking = await self.booking_command_repo.get_by_id(booking_id=booking_id)
            if not booking:
                raise NotFoundError('Booking not found')

            if booking.user_id != user_id:
                raise ForbiddenError('Only the owner can cancel this booking')

            cancelled = booking.cancel()
            await self.booking_command_repo.update_status(booking=cancelled)
        except CustomBaseError:
            raise
        except Exception as e:
            if (write_error := self.quota_guard.write_error_for(e, action='cancel booking')):
                raise write_error from e
            raise

        Logger.base.info(f'🚫 [CANCEL] Booking {booking_id} cancelled by user {user_id}')
        return cancelled
