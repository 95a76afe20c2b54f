"""Backup Scheduler — asyncio daemon that creates a backup whenever one is due."""

import asyncio
import logging
from collections.abc import Callable
from contextlib import AbstractAsyncContextManager

from datakeeper.application.services.backup_service import BackupService

logger = logging.getLogger(__name__)

BackupServiceFactory = Callable[[], AbstractAsyncContextManager[BackupService]]


class BackupScheduler:
    """Periodically checks ``BackupService.is_backup_due`` and runs a backup.

    Runs as an asyncio.Task inside FastAPI's lifespan. Each check builds its
    own service through ``service_factory`` (an async context manager) so
    database sessions are scoped to one tick.
    """

    def __init__(self, service_factory: BackupServiceFactory, check_interval: float = 3600):
        self._service_factory = service_factory
        self._check_interval = check_interval
        self._running = False
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._running

    async def start(self) -> None:
        """Start the scheduling loop."""
        self._running = True
        self._task = asyncio.create_task(self._loop())
        logger.info("BackupScheduler started (checking every %ss)", self._check_interval)

    async def stop(self) -> None:
        """Gracefully stop the scheduling loop."""
        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        logger.info("BackupScheduler stopped")

    async def _loop(self) -> None:
        while self._running:
            try:
                await self.run_once()
            except asyncio.CancelledError:
                break
            except Exception:
                logger.exception("BackupScheduler check failed")

            await asyncio.sleep(self._check_interval)

    async def run_once(self) -> bool:
        """Create a backup if one is due. Returns True if a backup was made."""
        async with self._service_factory() as service:
            if not service.is_backup_due():
                return False
            metadata = await service.create_backup()
        logger.info("Scheduled backup %s finished with status %s", metadata.id, metadata.status.value)
        return True

