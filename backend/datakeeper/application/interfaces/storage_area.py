"""Abstract storage area interface (port) — a synchronous string key/value store."""

from abc import ABC, abstractmethod


class StorageArea(ABC):
    """Port for a browser-storage-like area; implemented in the infrastructure layer.

    Values are opaque strings (callers store JSON). Every call is
    synchronous. Implementations raise ``StorageQuotaExceededError`` when a
    write does not fit and ``StorageUnavailableError`` when the backing
    medium cannot be used.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Short label used in logs and error messages."""
        ...

    @abstractmethod
    def get_item(self, key: str) -> str | None:
        """Return the stored string, or None if the key is absent."""
        ...

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """Store a string under key, replacing any previous value."""
        ...

    @abstractmethod
    def remove_item(self, key: str) -> None:
        """Remove key; a missing key is not an error."""
        ...

    @abstractmethod
    def keys(self) -> list[str]:
        """All keys currently stored."""
        ...

    @abstractmethod
    def clear(self) -> None:
        """Remove every key."""
        ...
