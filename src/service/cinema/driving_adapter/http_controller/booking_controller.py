from typing import List

from fastapi import APIRouter, Depends, status
from opentelemetry import trace

from src.platform.exception.exceptions import NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.cinema.app.command.cancel_booking_use_case import CancelBookingUseCase
from src.service.cinema.app.command.create_booking_use_case import CreateBookingUseCase
from src.service.cinema.app.query.get_booking_use_case import GetBookingUseCase
from src.service.cinema.app.query.list_user_bookings_use_case import ListUserBookingsUseCase
from src.service.cinema.domain.entity.booking_entity import Booking
from src.service.cinema.domain.entity.user_entity import UserIdentity
from src.service.cinema.domain.enum.booking_status import BookingStatus
from src.service.cinema.driving_adapter.http_controller.auth.current_user import (
    get_current_user,
)
from src.service.cinema.driving_adapter.http_controller.schema.booking_schema import (
    BookingCreateRequest,
    BookingCreatedResponse,
    BookingResponse,
    CancelBookingResponse,
)


router = APIRouter()
tracer = trace.get_tracer(__name__)


def to_booking_response(booking: Booking) -> BookingResponse:
    return BookingResponse(
        id=booking.id,
        user_id=booking.user_id,
        screening_id=booking.screening_id,
        movie_id=booking.movie_id,
        movie_title=booking.movie_title,
        movie_image_url=booking.movie_image_url,
        screening_date=booking.screening_date,
        screening_time=booking.screening_time,
        seats=booking.seats,
        total_price=booking.total_price,
        status=booking.status.value,
        booking_date=booking.booking_date,
    )


@router.get('/my_booking', response_model=List[BookingResponse])
@Logger.io
async def list_my_bookings(
    current_user: UserIdentity = Depends(get_current_user),
    use_case: ListUserBookingsUseCase = Depends(ListUserBookingsUseCase.depends),
) -> List[BookingResponse]:
    bookings = await use_case.list_user_bookings(user_id=current_user.id)
    return [to_booking_response(booking) for booking in bookings]


@router.post('', status_code=status.HTTP_201_CREATED)
@Logger.io
async def create_booking(
    request: BookingCreateRequest,
    current_user: UserIdentity = Depends(get_current_user),
    booking_use_case: CreateBookingUseCase = Depends(CreateBookingUseCase.depends),
) -> BookingCreatedResponse:
    with tracer.start_as_current_span('controller.create_booking') as span:
        span.set_attribute('screening_id', request.screening_id)
        span.set_attribute('user_id', current_user.id)

        booking = await booking_use_case.create_booking(
            user_id=current_user.id,
            screening_id=request.screening_id,
            seats=request.seats,
            movie_id=request.movie_id,
            movie_title=request.movie_title,
            movie_image_url=request.movie_image_url,
            screening_date=request.screening_date,
            screening_time=request.screening_time,
            total_price=request.total_price,
            status=BookingStatus(request.status) if request.status else None,
        )

        span.set_attribute('booking.id', booking.id)
        return BookingCreatedResponse(id=booking.id)


@router.get('/{booking_id}')
@Logger.io
async def get_booking(
    booking_id: str,
    current_user: UserIdentity = Depends(get_current_user),
    use_case: GetBookingUseCase = Depends(GetBookingUseCase.depends),
) -> BookingResponse:
    booking = await use_case.get_booking(booking_id=booking_id, user_id=current_user.id)
    if not booking:
        raise NotFoundError('Booking not found')
    return to_booking_response(booking)


@router.patch('/{booking_id}', status_code=status.HTTP_200_OK)
@Logger.io
async def cancel_booking(
    booking_id: str,
    current_user: UserIdentity = Depends(get_current_user),
    use_case: CancelBookingUseCase = Depends(CancelBookingUseCase.depends),
) -> CancelBookingResponse:
    booking = await use_case.execute(booking_id=booking_id, user_id=current_user.id)
    return CancelBookingResponse(id=booking.id, status=booking.status.value)
