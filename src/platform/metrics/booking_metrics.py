from typing import TYPE_CHECKING

from prometheus_client import Counter, Histogram


if TYPE_CHECKING:
    from src.platform.document_store.quota_guard import QuotaStatus


class BookingMetrics:
    """
    Cinema booking core metrics

    Tracks the reservation transaction, lazy provisioning and store
    degradation events.
    """

    def __init__(self) -> None:
        # ========== Booking Transaction Metrics ==========
        self.booking_requests = Counter(
            'cinema_booking_requests_total',
            'Total booking attempts',
            ['result'],  # result: success/conflict/not_found/unavailable/error
        )

        self.booking_duration = Histogram(
            'cinema_booking_duration_seconds',
            'Booking transaction duration',
            buckets=[0.01, 0.05, 0.1, 0.2, 0.5, 1.0, 2.0, 5.0],
        )

        self.booked_seats = Counter('cinema_booked_seats_total', 'Seats sold by bookings')

        # ========== Provisioning Metrics ==========
        self.provisioning_runs = Counter(
            'cinema_provisioning_runs_total',
            'Lazy provisioning runs',
            ['target', 'outcome'],  # target: screenings/seats, outcome: cached/created/failed
        )

        # ========== Store Degradation Metrics ==========
        self.store_errors = Counter(
            'cinema_store_errors_total',
            'Classified document store errors',
            ['kind'],
        )

    def record_booking(self, *, result: str, duration: float, seats: int = 0) -> None:
        self.booking_requests.labels(result=result).inc()
        self.booking_duration.observe(duration)
        if seats:
            self.booked_seats.inc(seats)

    def record_provisioning(self, *, target: str, outcome: str) -> None:
        self.provisioning_runs.labels(target=target, outcome=outcome).inc()

    def record_store_error(self, *, kind: str) -> None:
        self.store_errors.labels(kind=kind).inc()

    def record_quota_status(self, status: 'QuotaStatus') -> None:
        self.record_store_error(kind=status.kind.value)


# Global metrics instance
metrics = BookingMetrics()
