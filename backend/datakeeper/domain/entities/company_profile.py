"""Domain entity — the company profile shown on invoices, quotes and settings."""

import hashlib
from dataclasses import asdict, dataclass, field, fields
from datetime import datetime, timezone
from typing import Any

from datakeeper.domain.field_names import to_camel_case, to_snake_case

REDACTED = "[REDACTED]"

# camelCase keys whose values must never reach a log line
_SENSITIVE_KEYS = (
    "contactEmail",
    "contactPhone",
    "vatNumber",
    "taxNumber",
    "csdRegistrationNumber",
)

# Older saves used the short names
_LEGACY_ALIASES = {
    "email": "contactEmail",
    "phone": "contactPhone",
}


@dataclass
class CompanyProfile:
    """Singleton per account. Image fields hold data URLs or storage references."""

    name: str
    contact_email: str = ""
    contact_phone: str = ""
    address: str = ""
    address_line2: str | None = None
    city: str | None = None
    province: str | None = None
    postal_code: str | None = None
    country: str | None = None
    vat_number: str | None = None
    registration_number: str | None = None
    tax_number: str | None = None
    csd_registration_number: str | None = None
    website: str | None = None
    industry: str | None = None
    director_first_name: str | None = None
    director_last_name: str | None = None
    banking_details: str | None = None
    logo: str | None = None
    stamp: str | None = None
    signature: str | None = None
    id: str | None = None
    created_at: str | None = None
    updated_at: str | None = None
    extra: dict[str, Any] = field(default_factory=dict, repr=False)

    def touch(self) -> None:
        """Refresh updated_at (and created_at on first save)."""
        now = datetime.now(timezone.utc).isoformat()
        if self.created_at is None:
            self.created_at = now
        self.updated_at = now

    def to_dict(self) -> dict[str, Any]:
        """Local (camelCase) representation. Unknown keys read earlier are kept."""
        data = dict(self.extra)
        for key, value in asdict(self).items():
            if key == "extra":
                continue
            data[to_camel_case(key)] = value
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CompanyProfile":
        known = {f.name for f in fields(cls)} - {"extra"}
        values: dict[str, Any] = {}
        extra: dict[str, Any] = {}

        for key, value in data.items():
            if key in _LEGACY_ALIASES:
                continue
            snake = to_snake_case(key)
            if snake in known:
                values[snake] = value
            else:
                extra[key] = value

        for legacy, current in _LEGACY_ALIASES.items():
            snake = to_snake_case(current)
            if not values.get(snake) and data.get(legacy):
                values[snake] = data[legacy]

        values.setdefault("name", "")
        return cls(**values, extra=extra)

    def redacted(self) -> dict[str, Any]:
        """Copy of to_dict() safe for logging."""
        return redact_company_data(self.to_dict())

    def checksum(self) -> str:
        """SHA-256 over the identifying fields, used to detect tampering."""
        parts = [
            self.name or "",
            self.registration_number or "",
            self.contact_email or "",
            self.contact_phone or "",
            self.address or "",
        ]
        return hashlib.sha256("|".join(parts).encode("utf-8")).hexdigest()

    def verify_integrity(self, stored_checksum: str) -> bool:
        if not stored_checksum:
            return False
        return self.checksum() == stored_checksum


def is_valid_company_data(value: Any) -> bool:
    """Minimal shape check: a mapping with a non-empty ``name``."""
    if not isinstance(value, dict):
        return False
    name = value.get("name")
    return isinstance(name, str) and bool(name.strip())


def redact_company_data(data: dict[str, Any] | None) -> dict[str, Any] | None:
    if data is None:
        return None
    sanitized = dict(data)
    for key in _SENSITIVE_KEYS:
        if sanitized.get(key):
            sanitized[key] = REDACTED
    return sanitized
