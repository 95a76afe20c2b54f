"""Domain entity — one event in a category's append-only version history."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

DEFAULT_VERSION_DESCRIPTION = "Data updated"


@dataclass
class VersionEntry:
    """A snapshot of the full entity data plus a summary of what changed.

    Restoring an older entry appends a new entry whose
    ``restored_from_version`` points back at it; nothing is ever deleted.
    """

    category: str
    version: int
    data: Any
    changed_fields: list[str] = field(default_factory=list)
    description: str = DEFAULT_VERSION_DESCRIPTION
    user_name: str | None = None
    restored_from_version: int | None = None
    id: str = field(default_factory=lambda: str(uuid4()))
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def is_restore(self) -> bool:
        return self.restored_from_version is not None
