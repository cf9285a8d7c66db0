from __future__ import annotations

from datetime import datetime
from decimal import Decimal

import pytest

from src.print_today_epos.print_today_epos.common.financials import LineItem, compute_invoice_totals
from src.print_today_epos.print_today_epos.core.enums import DiscountType, InvoiceStatus
from src.print_today_epos.print_today_epos.core.exceptions import NotFoundError, ValidationError

NOW = datetime(2026, 3, 2, 10, 0)

ITEMS = [
    {"description": "Banner", "quantity": 1, "price": 100, "vat_applied": True},
    {"description": "Design", "quantity": 1, "price": 50},
]


@pytest.fixture
def profile(container):
    return container.invoice_service.save_company_profile(
        {"name": "Print Today", "email": "hello@printtoday.co.uk", "bank_details": "00-00-00 12345678"},
        now=NOW,
    )


def _invoice(container, profile, **overrides):
    data = {"company_profile_id": profile.id, "client_name": "Acme Ltd", "items": ITEMS}
    data.update(overrides)
    return container.invoice_service.save_invoice(data, now=NOW)


def test_invoice_numbers_use_their_own_counter(container, profile):
    container.job_sheet_service.create(
        {"operator": "PTM", "client_name": "Acme Ltd", "items": ITEMS}, now=NOW
    )

    first = _invoice(container, profile)
    second = _invoice(container, profile)

    assert first.invoice_id == "Inv-00001"
    assert second.invoice_id == "Inv-00002"


def test_new_invoice_defaults(container, profile):
    invoice = _invoice(container, profile)

    assert invoice.status == InvoiceStatus.DRAFT
    assert invoice.date == NOW
    assert invoice.due_date == datetime(2026, 4, 1, 10, 0)
    assert invoice.sub_total == Decimal("150.00")
    assert invoice.vat_amount == Decimal("20.00")
    assert invoice.total_amount == Decimal("170.00")


@pytest.mark.parametrize(
    "discount_type, value, discount, vat, total",
    [
        (DiscountType.PERCENTAGE, Decimal("10"), "15.00", "18.00", "153.00"),
        (DiscountType.AMOUNT, Decimal("30"), "30.00", "16.00", "136.00"),
        (DiscountType.AMOUNT, Decimal("0"), "0.00", "20.00", "170.00"),
    ],
)
def test_discount_is_spread_before_vat(discount_type, value, discount, vat, total):
    items = [
        LineItem("Banner", Decimal("1"), Decimal("100.00"), vat_applied=True),
        LineItem("Design", Decimal("1"), Decimal("50.00")),
    ]

    totals = compute_invoice_totals(items, discount_type, value)

    assert totals.discount_amount == Decimal(discount)
    assert totals.sub_total_after_discount == Decimal("150.00") - Decimal(discount)
    assert totals.vat_amount == Decimal(vat)
    assert totals.total_amount == Decimal(total)


@pytest.mark.parametrize(
    "overrides",
    [
        {"discount_type": "percentage", "discount_value": 120},
        {"discount_value": 500},
        {"client_name": ""},
        {"items": []},
        {"due_date": "2026-03-01T00:00:00"},
        {"status": "Overdue"},
    ],
)
def test_invalid_invoices_are_rejected(container, profile, overrides):
    with pytest.raises(ValidationError):
        _invoice(container, profile, **overrides)


def test_unknown_company_profile(container):
    with pytest.raises(NotFoundError):
        container.invoice_service.save_invoice(
            {"company_profile_id": "missing", "client_name": "Acme Ltd", "items": ITEMS}, now=NOW
        )


def test_editing_keeps_the_invoice_number(container, profile):
    invoice = _invoice(container, profile)

    edited = container.invoice_service.save_invoice(
        {"company_profile_id": profile.id, "client_name": "Bravo Cafe", "items": ITEMS[:1]},
        id=invoice.id,
        now=NOW,
    )

    assert edited.invoice_id == invoice.invoice_id
    assert edited.client_name == "Bravo Cafe"
    assert edited.total_amount == Decimal("120.00")


def test_mark_paid_and_filter(container, profile):
    paid = _invoice(container, profile)
    _invoice(container, profile)

    container.invoice_service.set_status(paid.id, "Paid")

    assert [i.id for i in container.invoice_service.list_invoices(status="Paid")] == [paid.id]
    assert len(container.invoice_service.list_invoices()) == 2


def test_profile_with_invoices_cannot_be_deleted(container, profile):
    invoice = _invoice(container, profile)

    with pytest.raises(ValidationError):
        container.invoice_service.delete_company_profile(profile.id)

    container.invoice_service.delete(invoice.id)
    container.invoice_service.delete_company_profile(profile.id)

    assert container.invoice_service.list_company_profiles() == []


def test_update_company_profile(container, profile):
    updated = container.invoice_service.save_company_profile(
        {"name": "Print Today Ltd", "website": "printtoday.co.uk"}, id=profile.id
    )

    assert updated.name == "Print Today Ltd"
    assert updated.website == "printtoday.co.uk"
    assert updated.email is None
    assert updated.created_at == NOW
