"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from datakeeper.application.services import BackupScheduler
from datakeeper.application.services.event_bus import ALL_EVENTS
from datakeeper.config import get_settings
from datakeeper.infrastructure.database import Base, engine
from datakeeper.infrastructure.dependencies import (
    backup_service_scope,
    get_event_bus,
    get_recovery_scanner,
    get_sse_manager,
    get_storage_areas,
)
from datakeeper.infrastructure.logging.log_config import setup_logging
from datakeeper.presentation.api.router import router as api_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan — create tables, open storage, start the backup scheduler."""
    settings = get_settings()
    setup_logging()

    # 1. Create all database tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    # 2. Open the storage areas and report what survived the restart
    areas = get_storage_areas()
    scanner = get_recovery_scanner()
    logger.info(
        "Storage ready (%d local keys) — company data: %s, clients: %s",
        len(areas.local.keys()),
        scanner.has_any_data("company"),
        scanner.has_any_data("clients"),
    )

    # 3. Relay bus events to SSE clients
    sse = get_sse_manager()
    sse.attach(get_event_bus(), ALL_EVENTS)

    # 4. Start the backup scheduler
    scheduler: BackupScheduler | None = None
    if settings.auto_backup_enabled:
        scheduler = BackupScheduler(
            service_factory=backup_service_scope,
            check_interval=settings.backup_check_interval_seconds,
        )
        await scheduler.start()

    yield

    # Shutdown
    if scheduler is not None:
        await scheduler.stop()
    await sse.shutdown()
    await engine.dispose()


def create_app() -> FastAPI:
    """Factory function that builds and configures the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_title,
        version=settings.app_version,
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Mount API routes
    app.include_router(api_router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "datakeeper.main:app",
        host="0.0.0.0",
        port=8020,
        reload=True,
    )
