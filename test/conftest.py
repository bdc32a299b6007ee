"""
Test Configuration and Fixtures

- Environment setup before any application module reads settings
- In-memory document store and quota guard fixtures
- Screening / seat seeding helpers shared by use case and API tests
"""

# =============================================================================
# Environment setup MUST happen before any other imports: settings and the
# loguru sinks are built at import time
# =============================================================================
import os
from pathlib import Path


def _early_setup_test_environment() -> None:
    test_log_dir = Path(__file__).parent / 'test_log'
    test_log_dir.mkdir(exist_ok=True)
    os.environ['TEST_LOG_DIR'] = str(test_log_dir)

    os.environ['DOCUMENT_STORE_BACKEND'] = 'memory'
    os.environ.setdefault('TMDB_API_KEY', 'test-api-key')
    os.environ.setdefault('KVROCKS_KEY_PREFIX', 'test_')


_early_setup_test_environment()

from collections.abc import Awaitable, Callable  # noqa: E402

import pytest  # noqa: E402

from src.platform.document_store.in_memory_document_store import (  # noqa: E402
    InMemoryDocumentStore,
)
from src.platform.document_store.quota_guard import QuotaGuard, QuotaState  # noqa: E402
from src.service.cinema.domain.entity.screening_entity import Screening  # noqa: E402
from src.service.cinema.domain.seat_generator import ROWS, SEATS_PER_ROW  # noqa: E402
from src.service.cinema.driven_adapter.repo.document_mapper import (  # noqa: E402
    screening_ref,
    screening_to_document,
    seat_ref,
)


class FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore(max_attempts=5)


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def quota_guard(fake_clock: FakeClock) -> QuotaGuard:
    return QuotaGuard(state=QuotaState(), clock=fake_clock)


SeedScreening = Callable[..., Awaitable[Screening]]


@pytest.fixture
def seed_screening(store: InMemoryDocumentStore) -> SeedScreening:
    """Persist a screening plus a fully available 8x12 seat map."""

    async def _seed(
        screening_id: str = 'screening-1',
        *,
        movie_id: str = '550',
        date: str = '2026-10-19',
        time: str = '18:15',
        available_seats: int = 50,
        unavailable: tuple[str, ...] = (),
    ) -> Screening:
        screening = Screening(
            id=screening_id,
            movie_id=movie_id,
            date=date,
            time=time,
            hall='A',
            price=25,
            available_seats=available_seats,
            total_seats=100,
        )
        batch = store.batch()
        batch.set(screening_ref(screening_id), screening_to_document(screening))
        for row in ROWS:
            for number in range(1, SEATS_PER_ROW + 1):
                seat_id = f'{row}{number}'
                batch.set(
                    seat_ref(screening_id, seat_id),
                    {'row': row, 'number': number, 'isAvailable': seat_id not in unavailable},
                )
        await batch.commit()
        return screening

    return _seed
