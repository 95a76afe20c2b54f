"""Known storage keys per category — the informal schema of the redundant store.

Every category lists the slots it is written to and the order in which they
are scanned back: primary → alternate → persistent → backup → session.
"""

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from datakeeper.application.interfaces import StorageArea
from datakeeper.domain.entities import (
    DataCategory,
    empty_roster_data,
    is_valid_client_data,
    is_valid_company_data,
)


class StorageScope(str, Enum):
    LOCAL = "local"
    SESSION = "session"


class SlotRole(str, Enum):
    PRIMARY = "primary"
    ALTERNATE = "alternate"
    PERSISTENT = "persistent"
    BACKUP = "backup"
    SESSION = "session"


_ROLE_PRIORITY = {
    SlotRole.PRIMARY: 0,
    SlotRole.ALTERNATE: 1,
    SlotRole.PERSISTENT: 2,
    SlotRole.BACKUP: 3,
    SlotRole.SESSION: 4,
}


@dataclass(frozen=True)
class StorageSlot:
    scope: StorageScope
    key: str
    role: SlotRole

    @property
    def label(self) -> str:
        return f"{self.scope.value}:{self.key}"


@dataclass(frozen=True)
class CategoryLayout:
    """Slots, staleness key, validity predicate and default of one category."""

    category: DataCategory
    slots: tuple[StorageSlot, ...]
    updated_at_key: str
    is_valid: Callable[[Any], bool]
    default_factory: Callable[[], Any]

    @property
    def scan_order(self) -> list[StorageSlot]:
        # sorted() is stable, so declaration order holds within a role
        return sorted(self.slots, key=lambda slot: _ROLE_PRIORITY[slot.role])

    @property
    def primary(self) -> StorageSlot:
        return self.scan_order[0]


class StorageAreas:
    """The storage areas available to the writer and scanner, by scope."""

    def __init__(self, local: StorageArea, session: StorageArea):
        self._areas = {StorageScope.LOCAL: local, StorageScope.SESSION: session}

    def for_scope(self, scope: StorageScope) -> StorageArea:
        return self._areas[scope]

    @property
    def local(self) -> StorageArea:
        return self._areas[StorageScope.LOCAL]

    @property
    def session(self) -> StorageArea:
        return self._areas[StorageScope.SESSION]


def _local(key: str, role: SlotRole) -> StorageSlot:
    return StorageSlot(StorageScope.LOCAL, key, role)


COMPANY_LAYOUT = CategoryLayout(
    category=DataCategory.COMPANY,
    slots=(
        _local("companyDetails", SlotRole.PRIMARY),
        _local("publicCompanyDetails", SlotRole.ALTERNATE),
        _local("persistentCompanyData", SlotRole.PERSISTENT),
        _local("companyData_permanent", SlotRole.PERSISTENT),
        _local("mzb_company_data", SlotRole.PERSISTENT),
        _local("companyDetails_backup", SlotRole.BACKUP),
        StorageSlot(StorageScope.SESSION, "tempCompanyData", SlotRole.SESSION),
    ),
    updated_at_key="company_last_updated",
    is_valid=is_valid_company_data,
    default_factory=lambda: {"name": "", "contactEmail": "", "contactPhone": "", "address": ""},
)

_CLIENTS_KEY = "mok-mzansi-books-clients"

CLIENTS_LAYOUT = CategoryLayout(
    category=DataCategory.CLIENTS,
    slots=(
        _local(_CLIENTS_KEY, SlotRole.PRIMARY),
        _local(f"{_CLIENTS_KEY}-alt1", SlotRole.ALTERNATE),
        _local(f"{_CLIENTS_KEY}-alt2", SlotRole.ALTERNATE),
        _local(f"{_CLIENTS_KEY}-persistent", SlotRole.PERSISTENT),
        _local(f"{_CLIENTS_KEY}-backup", SlotRole.BACKUP),
        _local(f"{_CLIENTS_KEY}-emergency-backup", SlotRole.BACKUP),
        _local("mokClients", SlotRole.BACKUP),
        StorageSlot(StorageScope.SESSION, f"{_CLIENTS_KEY}-session", SlotRole.SESSION),
    ),
    updated_at_key="clients_last_updated",
    is_valid=is_valid_client_data,
    default_factory=empty_roster_data,
)

LAYOUTS: dict[DataCategory, CategoryLayout] = {
    DataCategory.COMPANY: COMPANY_LAYOUT,
    DataCategory.CLIENTS: CLIENTS_LAYOUT,
}


def get_layout(category: DataCategory | str) -> CategoryLayout:
    return LAYOUTS[DataCategory(category)]
