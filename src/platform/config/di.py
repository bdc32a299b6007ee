"""
https://python-dependency-injector.ets-labs.org/index.html
https://python-dependency-injector.ets-labs.org/examples/fastapi-sqlalchemy.html
"""

from dependency_injector import containers, providers

from src.platform.config.core_setting import Settings, settings
from src.platform.document_store.in_memory_document_store import InMemoryDocumentStore
from src.platform.document_store.kvrocks_document_store import KvrocksDocumentStore
from src.platform.document_store.quota_guard import QuotaGuard, QuotaState
from src.platform.metrics.booking_metrics import metrics
from src.platform.state.kvrocks_client import kvrocks_client
from src.service.cinema.driven_adapter.catalog.tmdb_movie_catalog_impl import (
    TmdbMovieCatalogImpl,
)
from src.service.cinema.driven_adapter.repo.booking_command_repo_impl import (
    BookingCommandRepoImpl,
)
from src.service.cinema.driven_adapter.repo.booking_query_repo_impl import BookingQueryRepoImpl
from src.service.cinema.driven_adapter.repo.screening_repo_impl import ScreeningRepoImpl
from src.service.cinema.driven_adapter.repo.seat_repo_impl import SeatRepoImpl


class Container(containers.DeclarativeContainer):
    # Configuration
    config_service = providers.Singleton(Settings)

    # Document store: in-memory for local dev and tests, Kvrocks in deployments
    document_store = providers.Selector(
        providers.Object(settings.DOCUMENT_STORE_BACKEND),
        memory=providers.Singleton(
            InMemoryDocumentStore,
            max_attempts=settings.TRANSACTION_MAX_ATTEMPTS,
        ),
        kvrocks=providers.Singleton(
            KvrocksDocumentStore,
            client_factory=providers.Object(kvrocks_client.get_client),
            key_prefix=settings.KVROCKS_KEY_PREFIX,
            max_attempts=settings.TRANSACTION_MAX_ATTEMPTS,
        ),
    )

    # Quota counter shared by every use case of this process
    quota_state = providers.Singleton(QuotaState)
    quota_guard = providers.Singleton(
        QuotaGuard,
        state=quota_state,
        max_quota_errors=settings.QUOTA_MAX_ERRORS,
        reset_interval_seconds=settings.QUOTA_RESET_INTERVAL_SECONDS,
        on_status=providers.Object(metrics.record_quota_status),
    )

    # Repositories (stateless - share the store handle)
    screening_repo = providers.Singleton(ScreeningRepoImpl, store=document_store)
    seat_repo = providers.Singleton(SeatRepoImpl, store=document_store)
    booking_command_repo = providers.Singleton(BookingCommandRepoImpl, store=document_store)
    booking_query_repo = providers.Singleton(BookingQueryRepoImpl, store=document_store)

    # Third-party movie catalog
    movie_catalog = providers.Singleton(
        TmdbMovieCatalogImpl,
        api_key=settings.TMDB_API_KEY.get_secret_value(),
        base_url=settings.TMDB_BASE_URL,
        image_base_url=settings.TMDB_IMAGE_BASE_URL,
        language=settings.TMDB_LANGUAGE,
        timeout=settings.TMDB_TIMEOUT_SECONDS,
    )


container = Container()


def setup() -> None:
    container.config_service()
    container.quota_guard()


def cleanup() -> None:
    container.reset_singletons()
