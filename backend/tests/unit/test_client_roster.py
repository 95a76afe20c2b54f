"""Unit tests for the client roster entities."""

import pytest

from datakeeper.domain.entities import (
    ClientRoster,
    ClientType,
    CompanyClient,
    IndividualClient,
    VendorClient,
    client_from_dict,
    empty_roster_data,
    is_valid_client_data,
)
from datakeeper.domain.exceptions import DuplicateEntityError, EntityNotFoundError


def test_client_from_dict_uses_type_discriminant():
    client = client_from_dict({"type": "vendor", "name": "Paper Supplies", "vendorCategory": "office"})
    assert isinstance(client, VendorClient)
    assert client.vendor_category == "office"
    assert client.to_dict()["type"] == "vendor"


def test_add_find_update_remove():
    roster = ClientRoster()
    client = CompanyClient(name="Acme Co", contact_person="Thandi")
    roster.add(client)

    assert roster.find(client.id, ClientType.COMPANY) is client
    assert roster.find(client.id, "company") is client
    assert roster.find(client.id, ClientType.VENDOR) is None

    renamed = CompanyClient(id=client.id, name="Acme Holdings")
    roster.update(renamed)
    assert roster.companies[0].name == "Acme Holdings"

    removed = roster.remove(client.id, ClientType.COMPANY)
    assert removed.name == "Acme Holdings"
    assert roster.is_empty()


def test_duplicate_and_missing_clients_raise():
    roster = ClientRoster()
    client = IndividualClient(name="Sipho Dlamini", first_name="Sipho", last_name="Dlamini")
    roster.add(client)

    with pytest.raises(DuplicateEntityError):
        roster.add(client)
    with pytest.raises(EntityNotFoundError):
        roster.remove("missing", ClientType.INDIVIDUAL)
    with pytest.raises(EntityNotFoundError):
        roster.update(IndividualClient(id="missing", name="Nobody"))


def test_roster_serialization_round_trip():
    roster = ClientRoster()
    roster.add(CompanyClient(name="Acme Co"))
    roster.add(IndividualClient(name="Sipho Dlamini"))
    roster.add(VendorClient(name="Paper Supplies"))

    data = roster.to_dict()
    assert is_valid_client_data(data)
    assert ClientRoster.from_dict(data).to_dict() == data
    assert ClientRoster.from_dict(data).count() == 3


def test_validity_rejects_empty_or_malformed_rosters():
    assert not is_valid_client_data(empty_roster_data())
    assert not is_valid_client_data({"companies": [{"name": "x"}]})
    assert not is_valid_client_data("not a roster")
