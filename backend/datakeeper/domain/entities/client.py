"""Domain entities for the client roster — companies, individuals and vendors."""

from dataclasses import asdict, dataclass, field, fields
from datetime import datetime, timezone
from enum import Enum
from typing import Any, ClassVar
from uuid import uuid4

from datakeeper.domain.exceptions import DuplicateEntityError, EntityNotFoundError
from datakeeper.domain.field_names import to_camel_case, to_snake_case


class ClientType(str, Enum):
    """Discriminant stored in every client record under ``type``."""

    COMPANY = "company"
    INDIVIDUAL = "individual"
    VENDOR = "vendor"


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(kw_only=True)
class BaseClient:
    """Fields shared by all client shapes."""

    client_type: ClassVar[ClientType]

    name: str
    id: str = field(default_factory=lambda: str(uuid4()))
    email: str = ""
    phone: str = ""
    address: str = ""
    address_line2: str | None = None
    city: str = ""
    province: str = ""
    postal_code: str = ""
    credit: float = 0.0
    outstanding: float = 0.0
    overdue: float = 0.0
    last_interaction: str | None = None
    created_at: str = field(default_factory=_now_iso)
    updated_at: str = field(default_factory=_now_iso)

    def touch(self) -> None:
        self.updated_at = _now_iso()

    def to_dict(self) -> dict[str, Any]:
        data = {to_camel_case(k): v for k, v in asdict(self).items()}
        data["type"] = self.client_type.value
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BaseClient":
        known = {f.name for f in fields(cls)}
        values = {}
        for key, value in data.items():
            snake = to_snake_case(key)
            if snake in known:
                values[snake] = value
        values.setdefault("name", "")
        return cls(**values)


@dataclass(kw_only=True)
class CompanyClient(BaseClient):
    client_type: ClassVar[ClientType] = ClientType.COMPANY

    contact_person: str = ""
    vat_number: str = ""
    registration_number: str = ""


@dataclass(kw_only=True)
class IndividualClient(BaseClient):
    client_type: ClassVar[ClientType] = ClientType.INDIVIDUAL

    first_name: str = ""
    last_name: str = ""


@dataclass(kw_only=True)
class VendorClient(BaseClient):
    client_type: ClassVar[ClientType] = ClientType.VENDOR

    contact_person: str = ""
    vendor_category: str = ""
    vendor_code: str | None = None


_CLIENT_CLASSES: dict[ClientType, type[BaseClient]] = {
    ClientType.COMPANY: CompanyClient,
    ClientType.INDIVIDUAL: IndividualClient,
    ClientType.VENDOR: VendorClient,
}


def client_from_dict(data: dict[str, Any], client_type: ClientType | None = None) -> BaseClient:
    """Build the right client shape from its ``type`` discriminant."""
    resolved = client_type or ClientType(data.get("type", ClientType.COMPANY.value))
    return _CLIENT_CLASSES[resolved].from_dict(data)


@dataclass
class ClientRoster:
    """All clients of an account, grouped by type and keyed by id within a group.

    Serialized as ``{"companies": [...], "individuals": [...], "vendors": [...]}``.
    """

    companies: list[CompanyClient] = field(default_factory=list)
    individuals: list[IndividualClient] = field(default_factory=list)
    vendors: list[VendorClient] = field(default_factory=list)

    def _bucket(self, client_type: ClientType) -> list:
        client_type = ClientType(client_type)
        if client_type is ClientType.COMPANY:
            return self.companies
        if client_type is ClientType.INDIVIDUAL:
            return self.individuals
        return self.vendors

    def find(self, client_id: str, client_type: ClientType) -> BaseClient | None:
        for client in self._bucket(client_type):
            if client.id == client_id:
                return client
        return None

    def add(self, client: BaseClient) -> None:
        if self.find(client.id, client.client_type) is not None:
            raise DuplicateEntityError("Client", "id", client.id)
        self._bucket(client.client_type).append(client)

    def update(self, client: BaseClient) -> None:
        bucket = self._bucket(client.client_type)
        for index, existing in enumerate(bucket):
            if existing.id == client.id:
                bucket[index] = client
                return
        raise EntityNotFoundError("Client", client.id)

    def remove(self, client_id: str, client_type: ClientType) -> BaseClient:
        bucket = self._bucket(client_type)
        for index, existing in enumerate(bucket):
            if existing.id == client_id:
                return bucket.pop(index)
        raise EntityNotFoundError("Client", client_id)

    def all_clients(self) -> list[BaseClient]:
        return [*self.companies, *self.individuals, *self.vendors]

    def count(self) -> int:
        return len(self.companies) + len(self.individuals) + len(self.vendors)

    def is_empty(self) -> bool:
        return self.count() == 0

    def to_dict(self) -> dict[str, list[dict[str, Any]]]:
        return {
            "companies": [c.to_dict() for c in self.companies],
            "individuals": [c.to_dict() for c in self.individuals],
            "vendors": [c.to_dict() for c in self.vendors],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ClientRoster":
        return cls(
            companies=[CompanyClient.from_dict(c) for c in data.get("companies") or []],
            individuals=[IndividualClient.from_dict(c) for c in data.get("individuals") or []],
            vendors=[VendorClient.from_dict(c) for c in data.get("vendors") or []],
        )


def empty_roster_data() -> dict[str, list]:
    return {"companies": [], "individuals": [], "vendors": []}


def is_valid_client_data(value: Any) -> bool:
    """A roster mapping with the three groups as lists and at least one client."""
    if not isinstance(value, dict):
        return False
    groups = [value.get("companies"), value.get("individuals"), value.get("vendors")]
    if not all(isinstance(group, list) for group in groups):
        return False
    return any(groups)
