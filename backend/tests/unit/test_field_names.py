"""Unit tests for camelCase ↔ snake_case key conversion."""

from datakeeper.domain.field_names import keys_to_camel, keys_to_snake, to_camel_case, to_snake_case


def test_single_names():
    assert to_snake_case("contactEmail") == "contact_email"
    assert to_snake_case("addressLine2") == "address_line2"
    assert to_snake_case("name") == "name"
    assert to_camel_case("csd_registration_number") == "csdRegistrationNumber"
    assert to_camel_case("_meta") == "_meta"


def test_nested_conversion_leaves_values_alone():
    local = {
        "companyName": "Acme Co",
        "bankingDetails": {"accountNumber": "123", "branchCode": "0001"},
        "companies": [{"contactPerson": "Thandi", "vatNumber": "4123"}],
        "notes": "keepCamelInValues",
    }
    remote = keys_to_snake(local)
    assert remote == {
        "company_name": "Acme Co",
        "banking_details": {"account_number": "123", "branch_code": "0001"},
        "companies": [{"contact_person": "Thandi", "vat_number": "4123"}],
        "notes": "keepCamelInValues",
    }
    assert keys_to_camel(remote) == local


def test_irregular_camel_keys_survive_the_round_trip():
    local = {"logoURL": "https://cdn.acme.test/logo.png", "vatID": "4123", "contactEmail": "a@acme.test"}
    remote = keys_to_snake(local)

    assert remote == {
        "logoURL": "https://cdn.acme.test/logo.png",
        "vatID": "4123",
        "contact_email": "a@acme.test",
    }
    assert keys_to_camel(remote) == local
