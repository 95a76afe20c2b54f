"""Unit tests for the CompanyProfile entity."""

from datakeeper.domain.entities import CompanyProfile, is_valid_company_data, redact_company_data
from datakeeper.domain.entities.company_profile import REDACTED


def test_round_trip_keeps_unknown_keys():
    data = {"name": "Acme Co", "contactEmail": "a@acme.test", "brandColour": "#C03232"}
    profile = CompanyProfile.from_dict(data)

    assert profile.contact_email == "a@acme.test"
    assert profile.extra == {"brandColour": "#C03232"}
    assert profile.to_dict()["brandColour"] == "#C03232"
    assert profile.to_dict()["contactEmail"] == "a@acme.test"


def test_legacy_email_and_phone_are_mapped():
    profile = CompanyProfile.from_dict({"name": "Acme Co", "email": "old@acme.test", "phone": "011"})
    assert profile.contact_email == "old@acme.test"
    assert profile.contact_phone == "011"
    assert "email" not in profile.to_dict()


def test_touch_sets_created_once():
    profile = CompanyProfile(name="Acme Co")
    profile.touch()
    created = profile.created_at
    profile.touch()
    assert profile.created_at == created
    assert profile.updated_at is not None


def test_validity_requires_a_name():
    assert is_valid_company_data({"name": "Acme Co"})
    assert not is_valid_company_data({"name": "   "})
    assert not is_valid_company_data({"contactEmail": "a@acme.test"})
    assert not is_valid_company_data(["Acme Co"])
    assert not is_valid_company_data(None)


def test_redaction_hides_contact_and_tax_fields():
    profile = CompanyProfile(name="Acme Co", contact_email="a@acme.test", vat_number="4123")
    redacted = profile.redacted()
    assert redacted["name"] == "Acme Co"
    assert redacted["contactEmail"] == REDACTED
    assert redacted["vatNumber"] == REDACTED
    assert redact_company_data(None) is None


def test_checksum_detects_changes():
    profile = CompanyProfile(name="Acme Co", contact_email="a@acme.test")
    checksum = profile.checksum()
    assert profile.verify_integrity(checksum)

    profile.contact_email = "b@acme.test"
    assert not profile.verify_integrity(checksum)
    assert not profile.verify_integrity("")
