"""Abstract repository interface (port) for version history persistence."""

from abc import ABC, abstractmethod

from datakeeper.domain.entities import VersionEntry


class VersionHistoryRepository(ABC):
    """Append-only store of VersionEntry rows — no update or delete."""

    @abstractmethod
    async def append(self, entry: VersionEntry) -> VersionEntry:
        """Persist a new entry and return it."""
        ...

    @abstractmethod
    async def get_by_id(self, category: str, version_id: str) -> VersionEntry | None:
        """Retrieve a single entry of a category by its id."""
        ...

    @abstractmethod
    async def get_latest(self, category: str) -> VersionEntry | None:
        """The entry with the highest version number, if any."""
        ...

    @abstractmethod
    async def list_for_category(
        self, category: str, *, skip: int = 0, limit: int = 50
    ) -> list[VersionEntry]:
        """Entries of a category, newest first."""
        ...
