"""Domain entities for stored copies of an entity and how one is chosen."""

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class DataCategory(str, Enum):
    """Logical entity categories that are persisted redundantly."""

    COMPANY = "company"
    CLIENTS = "clients"


class VersionSource(str, Enum):
    """Where a stored copy of an entity came from."""

    LOCAL = "local"
    SERVER = "server"
    BACKUP = "backup"


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an ISO-8601 string (or epoch millis) into an aware datetime.

    Returns None for anything unparseable; callers treat that as "oldest".
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    elif isinstance(value, str):
        text = value.strip()
        if text.isdigit():
            return datetime.fromtimestamp(int(text) / 1000, tz=timezone.utc)
        try:
            parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            return None
    else:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass
class StoredEnvelope:
    """One candidate copy of an entity: ``{data, timestamp, source}``.

    No envelope is authoritative by construction; authority is assigned by
    the scan order or by an explicit resolution.
    """

    data: Any
    timestamp: datetime | None
    source: VersionSource

    def sort_key(self) -> float:
        """Unknown timestamps sort before every known one."""
        if self.timestamp is None:
            return float("-inf")
        return self.timestamp.timestamp()


@dataclass
class ConflictResolutionOptions:
    """Which candidate should win. Checked in declaration order."""

    prefer_local: bool = False
    prefer_server: bool = False
    prefer_backup: bool = False
    prefer_newer: bool = False
    manual: bool = False
