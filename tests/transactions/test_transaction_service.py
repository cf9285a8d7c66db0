from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

import pytest

from src.print_today_epos.print_today_epos.core.enums import PaymentStatus, TransactionType
from src.print_today_epos.print_today_epos.core.exceptions import NotFoundError, ValidationError

NOW = datetime(2026, 3, 2, 10, 0)


def _tx(container, **overrides):
    data = {
        "client_name": "Walk-in",
        "amount": 100,
        "payment_method": "Cash",
        "operator": "PTM",
    }
    data.update(overrides)
    return container.transaction_service.create(data, now=NOW)


def _sheet(container, **overrides):
    data = {
        "operator": "PTM",
        "client_name": "Acme Ltd",
        "items": [{"description": "Posters", "quantity": 10, "price": 100}],
    }
    data.update(overrides)
    return container.job_sheet_service.create(data, now=NOW)


def test_create_applies_vat_and_defaults_paid_to_total(container):
    tx = _tx(container, vat_applied=True)

    assert tx.transaction_id == "TID0001"
    assert tx.type == TransactionType.NON_INVOICING
    assert tx.total_amount == Decimal("120.00")
    assert tx.paid_amount == Decimal("120.00")
    assert tx.due_amount == Decimal("0.00")
    assert tx.admin_checked is False


def test_partial_paid_amount_leaves_due(container):
    tx = _tx(container, paid_amount="40")

    assert tx.due_amount == Decimal("60.00")


@pytest.mark.parametrize("overrides", [{"amount": 0}, {"client_name": ""}, {"payment_method": "Cheque"}])
def test_invalid_transactions(container, overrides):
    with pytest.raises(ValidationError):
        _tx(container, **overrides)


def test_linked_transaction_updates_job_balance(container):
    sheet = _sheet(container)

    _tx(container, amount=60, jid=sheet.job_id)

    refreshed = container.job_sheet_service.get(sheet.id)
    assert refreshed.paid_amount == Decimal("60.00")
    assert refreshed.payment_status == PaymentStatus.PARTIALLY_PAID


def test_moving_a_transaction_refreshes_both_jobs(container):
    first = _sheet(container)
    second = _sheet(container, client_name="Bravo Cafe")
    tx = _tx(container, amount=100, jid=first.job_id)

    container.transaction_service.update(
        tx.id,
        {"client_name": "Walk-in", "amount": 100, "payment_method": "Cash", "operator": "PTM", "jid": second.job_id},
        now=NOW,
    )

    assert container.job_sheet_service.get(first.id).payment_status == PaymentStatus.UNPAID
    assert container.job_sheet_service.get(second.id).payment_status == PaymentStatus.PAID


def test_bulk_delete_counts_only_existing(container):
    a = _tx(container)
    b = _tx(container)

    assert container.transaction_service.bulk_delete([a.id, b.id, "missing"]) == 2
    with pytest.raises(ValidationError):
        container.transaction_service.bulk_delete([])


def test_checking_removes_from_pending(container):
    a = _tx(container)
    b = _tx(container)
    c = _tx(container)

    checked = container.transaction_service.mark_checked(a.id)
    count = container.transaction_service.bulk_mark_checked([b.id, "missing"])

    assert checked.admin_checked is True
    assert checked.checked_by == "admin"
    assert count == 1
    assert container.transaction_service.get(b.id).checked_by == "admin (bulk)"
    assert [t.id for t in container.transaction_service.pending()] == [c.id]


def test_search_by_text_and_method(container):
    _tx(container, client_name="Acme Ltd", job_description="Business cards")
    _tx(container, client_name="Bravo Cafe", payment_method="Card Payment")

    assert [t.client_name for t in container.transaction_service.search("cards")] == ["Acme Ltd"]
    assert [t.client_name for t in container.transaction_service.search(payment_method="Card Payment")] == [
        "Bravo Cafe"
    ]


def test_report_fills_invoice_number_from_job_sheet(container):
    sheet = _sheet(container, ir_number="IR-12")
    _tx(container, jid=sheet.job_id, date="2026-03-01T12:00:00")
    _tx(container, invoice_number="INV-9", date="2026-03-02T12:00:00")
    _tx(container, date="2026-02-01T12:00:00")

    rows = container.transaction_service.report(start=date(2026, 3, 1), end=date(2026, 3, 31))

    assert [r["invoice_number"] for r in rows] == ["INV-9", "IR-12"]
    by_day = container.transaction_service.report(term="2026-03-01")
    assert [r["transaction"].jid for r in by_day] == [sheet.job_id]


def test_report_rejects_reversed_range(container):
    with pytest.raises(ValidationError):
        container.transaction_service.report(start=date(2026, 3, 5), end=date(2026, 3, 1))


def test_till_stats(container):
    _tx(container, amount=10, payment_method="Cash", date="2026-03-02T09:00:00")
    _tx(container, amount=20, payment_method="Card Payment", date="2026-03-02T11:00:00")
    _tx(container, amount=30, payment_method="ST Bank Transfer", date="2026-03-01T11:00:00")
    _tx(container, amount=40, payment_method="Cash", type="invoicing", date="2026-03-02T11:00:00")

    stats = container.transaction_service.till_stats(today=date(2026, 3, 2))

    assert stats.daily_sales == Decimal("30.00")
    assert stats.cash_total == Decimal("10.00")
    assert stats.card_total == Decimal("20.00")
    assert stats.bank_total == Decimal("30.00")


def test_list_recent_by_type(container):
    _tx(container, type="invoicing")
    _tx(container)

    invoicing = container.transaction_service.list_recent("invoicing")

    assert [t.type for t in invoicing] == [TransactionType.INVOICING]


def test_get_missing_transaction(container):
    with pytest.raises(NotFoundError):
        container.transaction_service.get("missing")
