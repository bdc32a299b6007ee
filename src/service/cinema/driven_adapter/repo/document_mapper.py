"""Entity <-> document conversion. Documents keep the camelCase field names of the stored data."""

from datetime import datetime
from typing import Any, Optional

from src.platform.document_store.document_store import DocumentRef, DocumentSnapshot
from src.service.cinema.domain.entity.booking_entity import Booking
from src.service.cinema.domain.entity.screening_entity import Screening
from src.service.cinema.domain.entity.seat_entity import Seat
from src.service.cinema.domain.enum.booking_status import BookingStatus


SCREENINGS = 'screenings'
SEATS = 'seats'
BOOKINGS = 'bookings'


def screening_ref(screening_id: str) -> DocumentRef:
    return DocumentRef(collection=SCREENINGS, id=screening_id)


def seat_ref(screening_id: str, seat_id: str) -> DocumentRef:
    return screening_ref(screening_id).child(SEATS, seat_id)


def seats_collection(screening_id: str) -> str:
    return f'{screening_ref(screening_id).path}/{SEATS}'


def booking_ref(booking_id: str) -> DocumentRef:
    return DocumentRef(collection=BOOKINGS, id=booking_id)


def screening_to_document(screening: Screening) -> dict[str, Any]:
    return {
        'movieId': screening.movie_id,
        'date': screening.date,
        'time': screening.time,
        'hall': screening.hall,
        'price': screening.price,
        'availableSeats': screening.available_seats,
        'totalSeats': screening.total_seats,
    }


def screening_from_snapshot(snapshot: DocumentSnapshot) -> Screening:
    data = snapshot.data or {}
    return Screening(
        id=snapshot.id,
        movie_id=data['movieId'],
        date=data.get('date', ''),
        time=data.get('time', ''),
        hall=data.get('hall', ''),
        price=data.get('price', 0),
        available_seats=data.get('availableSeats', 0),
        total_seats=data.get('totalSeats', 0),
    )


def seat_to_document(seat: Seat) -> dict[str, Any]:
    return {'row': seat.row, 'number': seat.number, 'isAvailable': seat.is_available}


def seat_from_snapshot(snapshot: DocumentSnapshot) -> Seat:
    data = snapshot.data or {}
    return Seat(
        id=snapshot.id,
        row=data['row'],
        number=data['number'],
        is_available=bool(data.get('isAvailable', False)),
    )


def booking_to_document(booking: Booking) -> dict[str, Any]:
    return {
        'userId': booking.user_id,
        'screeningId': booking.screening_id,
        'movieId': booking.movie_id,
        'movieTitle': booking.movie_title,
        'movieImageUrl': booking.movie_image_url,
        'screeningDate': booking.screening_date,
        'screeningTime': booking.screening_time,
        'seats': list(booking.seats),
        'totalPrice': booking.total_price,
        'bookingDate': booking.booking_date,
        'status': booking.status.value,
    }


def _to_datetime(value: Any) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value))


def booking_from_snapshot(snapshot: DocumentSnapshot) -> Booking:
    data = snapshot.data or {}
    return Booking(
        id=snapshot.id,
        user_id=data['userId'],
        screening_id=data['screeningId'],
        movie_id=data.get('movieId', ''),
        movie_title=data.get('movieTitle', ''),
        movie_image_url=data.get('movieImageUrl'),
        screening_date=data.get('screeningDate', ''),
        screening_time=data.get('screeningTime', ''),
        seats=list(data.get('seats', [])),
        total_price=data.get('totalPrice', 0),
        booking_date=_to_datetime(data.get('bookingDate')),
        status=BookingStatus(data.get('status', BookingStatus.CONFIRMED)),
    )
