from typing import List

import attrs
from fastapi import APIRouter, Depends

from src.platform.exception.exceptions import NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.cinema.app.command.ensure_seats_use_case import EnsureSeatsUseCase
from src.service.cinema.app.query.check_seats_availability_use_case import (
    CheckSeatsAvailabilityUseCase,
)
from src.service.cinema.app.query.get_screening_use_case import GetScreeningUseCase
from src.service.cinema.driving_adapter.http_controller.schema.screening_schema import (
    ScreeningResponse,
    SeatAvailabilityRequest,
    SeatAvailabilityResponse,
    SeatResponse,
)


router = APIRouter()


@router.get('/{screening_id}')
@Logger.io
async def get_screening(
    screening_id: str,
    use_case: GetScreeningUseCase = Depends(GetScreeningUseCase.depends),
) -> ScreeningResponse:
    screening = await use_case.get_screening(screening_id=screening_id)
    if not screening:
        raise NotFoundError('Screening not found')
    return ScreeningResponse(**attrs.asdict(screening))


@router.get('/{screening_id}/seats', response_model=List[SeatResponse])
@Logger.io
async def list_seats(
    screening_id: str,
    use_case: EnsureSeatsUseCase = Depends(EnsureSeatsUseCase.depends),
) -> List[SeatResponse]:
    seats = await use_case.execute(screening_id=screening_id)
    return [SeatResponse(**attrs.asdict(seat)) for seat in seats]


@router.post('/{screening_id}/seats/availability')
@Logger.io
async def check_seats_availability(
    screening_id: str,
    request: SeatAvailabilityRequest,
    use_case: CheckSeatsAvailabilityUseCase = Depends(CheckSeatsAvailabilityUseCase.depends),
) -> SeatAvailabilityResponse:
    result = await use_case.execute(screening_id=screening_id, seat_ids=request.seat_ids)
    return SeatAvailabilityResponse(
        available=result.available,
        unavailable=result.unavailable,
        all_available=result.all_available,
    )
