"""In-memory storage area — the session-scoped store, lost on process restart."""

import logging

from datakeeper.application.interfaces import StorageArea
from datakeeper.domain.exceptions import StorageQuotaExceededError

logger = logging.getLogger(__name__)


def entries_size(entries: dict[str, str]) -> int:
    """Size accounting shared by all areas: characters of keys plus values."""
    return sum(len(k) + len(v) for k, v in entries.items())


class MemoryStorageArea(StorageArea):
    """Infrastructure adapter for a process-lifetime key/value area."""

    def __init__(self, name: str = "session", quota_bytes: int | None = None):
        self._name = name
        self._quota = quota_bytes or None
        self._entries: dict[str, str] = {}

    @property
    def name(self) -> str:
        return self._name

    def get_item(self, key: str) -> str | None:
        return self._entries.get(key)

    def set_item(self, key: str, value: str) -> None:
        if self._quota is not None:
            candidate = {**self._entries, key: value}
            if entries_size(candidate) > self._quota:
                raise StorageQuotaExceededError(
                    self._name, key, f"quota of {self._quota} exceeded"
                )
        self._entries[key] = value

    def remove_item(self, key: str) -> None:
        self._entries.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._entries)

    def clear(self) -> None:
        self._entries.clear()
        logger.debug("Cleared storage area %s", self._name)
