"""Abstract remote backend interface (port) for per-category entity copies."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Any


@dataclass
class RemoteSnapshot:
    """The server copy of a category, in local (camelCase) representation."""

    data: Any
    updated_at: datetime | None


class RemoteDataClient(ABC):
    """Port for the remote backend — implemented in the infrastructure layer.

    Implementations convert between the local camelCase representation and
    the remote snake_case one, and raise ``RemoteBackendError`` on failure.
    """

    @property
    @abstractmethod
    def backend_name(self) -> str:
        ...

    @abstractmethod
    async def fetch(self, category: str) -> RemoteSnapshot | None:
        """Return the newest server copy of a category, or None."""
        ...

    @abstractmethod
    async def save(self, category: str, data: Any) -> RemoteSnapshot:
        """Create or replace the server copy of a category."""
        ...

    @abstractmethod
    async def delete(self, category: str) -> bool:
        """Delete the server copy. Returns True if something was deleted."""
        ...
