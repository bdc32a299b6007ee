"""
Production FastAPI Application

Cinema booking API with lazy provisioning over the configured document store.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from functools import partial

import anyio
from fastapi import FastAPI
from fastapi.responses import RedirectResponse

from src.platform.app_factory import create_app
from src.platform.config.core_setting import settings
from src.platform.config.di import cleanup, container, setup
from src.platform.config.wire_modules import WIRE_MODULES
from src.platform.document_store.quota_guard import QuotaGuard
from src.platform.logging.loguru_io import Logger
from src.platform.observability.tracing import TracingConfig
from src.platform.state.kvrocks_client import kvrocks_client


async def run_quota_reset_loop(guard: QuotaGuard, *, interval: float) -> None:
    """Periodic counter reset, independent of incoming failures."""
    while True:
        await anyio.sleep(interval)
        guard.tick()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application lifespan: startup and shutdown."""
    Logger.base.info('🚀 [Cinema Booking] Starting up...')

    tracing = TracingConfig(service_name='cinema-booking')
    tracing.setup()
    Logger.base.info('📊 [Cinema Booking] OpenTelemetry tracing configured')

    container.wire(modules=WIRE_MODULES)
    setup()
    Logger.base.info('🔌 [Cinema Booking] Dependency injection wired')

    if settings.DOCUMENT_STORE_BACKEND == 'kvrocks':
        tracing.instrument_redis()
        await kvrocks_client.initialize()
        Logger.base.info('📡 [Cinema Booking] Kvrocks document store ready')
    else:
        Logger.base.warning('🧪 [Cinema Booking] Using the in-memory document store')

    async with anyio.create_task_group() as tg:
        tg.start_soon(
            partial(run_quota_reset_loop, interval=settings.QUOTA_RESET_INTERVAL_SECONDS),
            container.quota_guard(),
        )
        Logger.base.info('✅ [Cinema Booking] Ready to serve requests')

        yield

        Logger.base.info('🛑 [Cinema Booking] Shutting down...')
        tg.cancel_scope.cancel()

    await container.movie_catalog().aclose()

    if settings.DOCUMENT_STORE_BACKEND == 'kvrocks':
        await kvrocks_client.disconnect()
        Logger.base.info('📡 [Cinema Booking] Kvrocks disconnected')

    tracing.shutdown()
    cleanup()
    container.unwire()
    Logger.base.info('👋 [Cinema Booking] Shutdown complete')


app = create_app(lifespan=lifespan)


@app.get('/')
async def root() -> RedirectResponse:
    return RedirectResponse(url='/docs')
