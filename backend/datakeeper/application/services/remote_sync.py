"""Best-effort push of a category to the remote backend after a local save."""

import logging
from dataclasses import dataclass
from typing import Any

from datakeeper.application.interfaces import RemoteDataClient
from datakeeper.application.services.event_bus import EventBus
from datakeeper.application.services.redundant_writer import WriteResult
from datakeeper.domain.entities import VersionEntry
from datakeeper.domain.exceptions import RemoteBackendError

logger = logging.getLogger(__name__)


@dataclass
class SaveResult:
    """Outcome of a save: local fan-out, history entry and server sync."""

    data: Any
    write: WriteResult
    version: VersionEntry | None
    remote_synced: bool


async def push_to_remote(
    remote: RemoteDataClient | None, bus: EventBus, category: str, data: Any
) -> bool:
    """Save to the server once. A failure is logged and notified, never raised."""
    if remote is None:
        return False
    try:
        await remote.save(category, data)
    except RemoteBackendError as exc:
        logger.warning("Could not sync %s to %s: %s", category, remote.backend_name, exc)
        bus.notify(
            "Sync failed",
            f"Your {category} data was saved on this device but not to the server.",
            variant="destructive",
        )
        return False
    logger.debug("Synced %s to %s", category, remote.backend_name)
    return True
