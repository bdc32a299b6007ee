"""
Startup smoke tests: settings from the shipped env file, the real DI
container and the production app, with no provider overrides.
"""

from pathlib import Path

from fastapi.testclient import TestClient
from prometheus_client import REGISTRY
import pytest

from src.platform.config.core_setting import Settings
from src.platform.document_store.document_store import DocumentStoreError, StoreErrorCode
from src.platform.document_store.in_memory_document_store import InMemoryDocumentStore


ENV_EXAMPLE = Path(__file__).resolve().parents[3] / '.env.example'


def store_error_count(kind: str) -> float:
    return REGISTRY.get_sample_value('cinema_store_errors_total', {'kind': kind}) or 0.0


@pytest.mark.unit
class TestSettings:
    def test_loads_shipped_env_example(self) -> None:
        settings = Settings(_env_file=ENV_EXAMPLE)  # type: ignore

        assert settings.BACKEND_CORS_ORIGINS == ['http://localhost:5173']
        assert settings.KVROCKS_KEY_PREFIX
        assert settings.QUOTA_MAX_ERRORS == 3

    def test_cors_origins_accept_comma_separated_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv('BACKEND_CORS_ORIGINS', 'http://a.test, http://b.test')

        assert Settings(_env_file=None).BACKEND_CORS_ORIGINS == [  # type: ignore
            'http://a.test',
            'http://b.test',
        ]

    def test_cors_origins_accept_json_list_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv('BACKEND_CORS_ORIGINS', '["http://a.test"]')

        assert Settings(_env_file=None).BACKEND_CORS_ORIGINS == ['http://a.test']  # type: ignore


@pytest.mark.unit
class TestContainer:
    def test_builds_and_shares_one_store(self) -> None:
        from src.platform.config.di import Container

        container = Container()

        store = container.document_store()
        assert isinstance(store, InMemoryDocumentStore)
        assert container.seat_repo().store is store
        assert container.booking_command_repo().store is store
        assert container.quota_guard() is container.quota_guard()

    def test_quota_guard_reports_to_metrics(self) -> None:
        from src.platform.config.di import Container

        guard = Container().quota_guard()
        before = store_error_count('unavailable')

        guard.check_quota_status(
            DocumentStoreError('connection refused', code=StoreErrorCode.UNAVAILABLE)
        )

        assert store_error_count('unavailable') == before + 1


@pytest.mark.integration
class TestApplicationStartup:
    def test_production_app_serves_requests(self) -> None:
        from src.platform.config.di import container
        from test.test_app import app

        container.reset_singletons()
        try:
            with TestClient(app) as client:
                health = client.get('/health')
                metrics = client.get('/metrics')
                seats = client.get('/api/screening/smoke-screening/seats')
        finally:
            container.reset_singletons()

        assert health.status_code == 200
        assert metrics.status_code == 200
        assert 'cinema_booking_requests_total' in metrics.text
        assert len(seats.json()) == 96
