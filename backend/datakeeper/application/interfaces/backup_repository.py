"""Abstract repository interface (port) for cloud copies of backups."""

from abc import ABC, abstractmethod
from typing import Any

from datakeeper.domain.entities import BackupMetadata


class BackupRepository(ABC):
    """Port for the cloud backup store — implemented in the infrastructure layer."""

    @abstractmethod
    async def save(self, metadata: BackupMetadata, payload: dict[str, Any]) -> None:
        """Store a backup payload with its metadata."""
        ...

    @abstractmethod
    async def get_payload(self, backup_id: str) -> dict[str, Any] | None:
        """Return the stored payload, or None if absent."""
        ...

    @abstractmethod
    async def delete(self, backup_id: str) -> bool:
        """Delete a backup. Returns True if deleted, False if not found."""
        ...

    @abstractmethod
    async def prune(self, keep: int) -> list[str]:
        """Delete all but the newest ``keep`` backups; return the deleted ids."""
        ...
