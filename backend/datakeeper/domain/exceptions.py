"""Domain-specific exceptions — framework-independent."""


class EntityNotFoundError(Exception):
    """Raised when a requested entity does not exist."""

    def __init__(self, entity_type: str, entity_id: int | str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} with id '{entity_id}' not found")


class DuplicateEntityError(Exception):
    """Raised when attempting to create a duplicate entity."""

    def __init__(self, entity_type: str, field: str, value: str):
        self.entity_type = entity_type
        self.field = field
        self.value = value
        super().__init__(f"{entity_type} with {field}='{value}' already exists")


class InvalidEntityError(Exception):
    """Raised when an entity cannot be serialized for storage."""


# ── Storage area errors ─────────────────────────────────────────────


class StorageError(Exception):
    """Base class for failures of a single storage area operation."""

    def __init__(self, area: str, key: str, message: str):
        self.area = area
        self.key = key
        self.message = message
        super().__init__(f"[{area}] {key}: {message}")


class StorageQuotaExceededError(StorageError):
    """Raised when a write would push a storage area over its byte quota."""


class StorageUnavailableError(StorageError):
    """Raised when a storage area cannot be read or flushed."""


class StorageWriteError(Exception):
    """Raised when a redundant write failed on every slot of a category."""

    def __init__(self, category: str, failed_keys: list[str]):
        self.category = category
        self.failed_keys = failed_keys
        super().__init__(
            f"Failed to save {category} data to any storage location "
            f"({len(failed_keys)} attempted)"
        )


# ── Remote backend errors ───────────────────────────────────────────


class RemoteBackendError(Exception):
    """Raised when the remote backend returns an error.

    Backend-agnostic — works for the SQL table store and the Supabase REST API.
    """

    def __init__(self, backend: str, status_code: int, message: str):
        self.backend = backend
        self.status_code = status_code
        self.message = message
        super().__init__(f"[{backend}] {status_code}: {message}")


# ── Reconciliation errors ───────────────────────────────────────────


class ConflictResolutionError(Exception):
    """Raised when a conflict could not be resolved; prior state is kept."""

    def __init__(self, category: str, message: str):
        self.category = category
        self.message = message
        super().__init__(f"Could not resolve {category} conflict: {message}")


class VersionHistoryError(Exception):
    """Raised when the version history store cannot be read or appended to."""

    def __init__(self, category: str, message: str):
        self.category = category
        self.message = message
        super().__init__(f"Version history for {category} unavailable: {message}")


class VersionRestoreError(Exception):
    """Raised when restoring a historical version failed; history is unchanged."""

    def __init__(self, category: str, version_id: str, message: str):
        self.category = category
        self.version_id = version_id
        self.message = message
        super().__init__(f"Could not restore {category} version '{version_id}': {message}")


class BackupNotAvailableError(Exception):
    """Raised when a backup is listed in history but its data is gone."""

    def __init__(self, backup_id: str):
        self.backup_id = backup_id
        super().__init__(f"Backup '{backup_id}' data not found in any location")
