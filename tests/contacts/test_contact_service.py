from __future__ import annotations

from datetime import datetime

import pytest

from src.print_today_epos.print_today_epos.core.exceptions import NotFoundError, ValidationError

NOW = datetime(2026, 3, 2, 10, 0)


def _contact(**overrides) -> dict:
    data = {"name": "Jane Smith", "phone": "07700 900123", "email": "jane@acme.co.uk", "company_name": "Acme Ltd"}
    data.update(overrides)
    return data


def test_add_and_list(container):
    svc = container.contact_service
    svc.add(_contact(), now=NOW)
    svc.add(_contact(name="Raj Patel", email="raj@bravo.cafe", company_name="Bravo Cafe"), now=datetime(2026, 3, 3))

    assert [c.name for c in svc.list_contacts()] == ["Raj Patel", "Jane Smith"]
    assert [c.name for c in svc.list_contacts("acme")] == ["Jane Smith"]


@pytest.mark.parametrize("overrides", [{"name": ""}, {"phone": " "}, {"email": "not-an-email"}])
def test_invalid_contacts_are_rejected(container, overrides):
    with pytest.raises(ValidationError):
        container.contact_service.add(_contact(**overrides), now=NOW)


def test_update_contact(container):
    contact = container.contact_service.add(_contact(), now=NOW)

    updated = container.contact_service.update(contact.id, _contact(city="Leeds"))

    assert updated.city == "Leeds"
    assert updated.created_at == NOW


def test_update_missing_contact(container):
    with pytest.raises(NotFoundError):
        container.contact_service.update("missing", _contact())


def test_bulk_add_skips_invalid_rows(container):
    count = container.contact_service.bulk_add(
        [_contact(), _contact(email="bad"), "not a row", _contact(name="Raj Patel")],
        now=NOW,
    )

    assert count == 2
    assert len(container.contact_service.list_contacts()) == 2


def test_bulk_add_requires_rows(container):
    with pytest.raises(ValidationError, match="No contacts provided."):
        container.contact_service.bulk_add([])
