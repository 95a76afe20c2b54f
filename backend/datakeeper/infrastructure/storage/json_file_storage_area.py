"""Persistent storage area backed by a single JSON file on disk.

Storage layout:
    <storage_dir>/<name>.json    — {"key": "<serialized value>", ...}

The whole mapping is rewritten on every change (write to a temp file, then
replace), so a crash mid-write leaves the previous file intact.
"""

import json
import logging
import os
from pathlib import Path

from datakeeper.application.interfaces import StorageArea
from datakeeper.domain.exceptions import StorageQuotaExceededError, StorageUnavailableError
from datakeeper.infrastructure.storage.memory_storage_area import entries_size

logger = logging.getLogger(__name__)


class JsonFileStorageArea(StorageArea):
    """Infrastructure adapter for the long-lived local key/value area."""

    def __init__(self, path: str | Path, name: str = "local", quota_bytes: int | None = None):
        self._path = Path(path)
        self._name = name
        self._quota = quota_bytes or None
        self._entries = self._load()

    @property
    def name(self) -> str:
        return self._name

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> dict[str, str]:
        """Read the backing file, returning {} if missing or corrupt."""
        if not self._path.exists():
            return {}
        try:
            raw = json.loads(self._path.read_text("utf-8"))
        except (OSError, ValueError):
            logger.warning("Could not read storage file %s — starting empty", self._path)
            return {}
        if not isinstance(raw, dict):
            logger.warning("Storage file %s is not a JSON object — starting empty", self._path)
            return {}
        return {str(k): v for k, v in raw.items() if isinstance(v, str)}

    def _flush(self, entries: dict[str, str], key: str) -> None:
        tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(json.dumps(entries), encoding="utf-8")
            os.replace(tmp_path, self._path)
        except OSError as exc:
            raise StorageUnavailableError(self._name, key, str(exc)) from exc

    def get_item(self, key: str) -> str | None:
        return self._entries.get(key)

    def set_item(self, key: str, value: str) -> None:
        candidate = {**self._entries, key: value}
        if self._quota is not None and entries_size(candidate) > self._quota:
            raise StorageQuotaExceededError(self._name, key, f"quota of {self._quota} exceeded")
        self._flush(candidate, key)
        self._entries = candidate

    def remove_item(self, key: str) -> None:
        if key not in self._entries:
            return
        candidate = {k: v for k, v in self._entries.items() if k != key}
        self._flush(candidate, key)
        self._entries = candidate

    def keys(self) -> list[str]:
        return list(self._entries)

    def clear(self) -> None:
        self._flush({}, "*")
        self._entries = {}
        logger.info("Cleared storage area %s (%s)", self._name, self._path)
