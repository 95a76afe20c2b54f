"""Domain entities for point-in-time backups of all categories."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any
from uuid import uuid4

DATA_STRUCTURE_VERSION = "1"


class BackupStatus(str, Enum):
    COMPLETE = "complete"
    PARTIAL = "partial"
    FAILED = "failed"


class BackupLocation(str, Enum):
    LOCAL = "local"
    CLOUD = "cloud"


def new_backup_id() -> str:
    stamp = int(datetime.now(timezone.utc).timestamp() * 1000)
    return f"backup_{stamp}_{uuid4().hex[:7]}"


@dataclass
class BackupMetadata:
    """Describes one backup; the payload itself is stored separately."""

    id: str = field(default_factory=new_backup_id)
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    categories: list[str] = field(default_factory=list)
    size: int = 0
    hash: str = ""
    status: BackupStatus = BackupStatus.COMPLETE
    error_details: str | None = None
    locations: list[BackupLocation] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "timestamp": self.timestamp.isoformat(),
            "categories": list(self.categories),
            "size": self.size,
            "hash": self.hash,
            "status": self.status.value,
            "errorDetails": self.error_details,
            "locations": [loc.value for loc in self.locations],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BackupMetadata":
        return cls(
            id=data["id"],
            timestamp=datetime.fromisoformat(data["timestamp"]),
            categories=list(data.get("categories") or []),
            size=int(data.get("size") or 0),
            hash=data.get("hash") or "",
            status=BackupStatus(data.get("status", BackupStatus.COMPLETE.value)),
            error_details=data.get("errorDetails"),
            locations=[BackupLocation(loc) for loc in data.get("locations") or []],
        )


@dataclass
class RestoreResult:
    """Outcome of restoring a backup, per category."""

    backup_id: str
    restored: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return bool(self.restored)
