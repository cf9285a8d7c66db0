from __future__ import annotations

from datetime import datetime
from decimal import Decimal

import pytest

from src.print_today_epos.print_today_epos.core.enums import PaymentMethod, PaymentStatus, TransactionType
from src.print_today_epos.print_today_epos.core.exceptions import (
    NotFoundError,
    OverpaymentRejected,
    ValidationError,
)

NOW = datetime(2026, 3, 2, 10, 0)


@pytest.fixture
def sheet(container):
    return container.job_sheet_service.create(
        {
            "operator": "PTM",
            "client_name": "Acme Ltd",
            "invoice_number": "INV-77",
            "items": [
                {"description": "Flyers A5", "quantity": 500, "price": 50, "vat_applied": True},
                {"description": "Design", "quantity": 1, "price": 20},
            ],
        },
        now=NOW,
    )


def test_partial_then_full_payment(container, sheet):
    payments = container.payment_service

    tx = payments.record_payment(sheet.id, "30", "Cash", "PTRK", now=NOW)
    after_first = container.job_sheet_service.get(sheet.id)

    assert tx.transaction_id == "TID0001"
    assert tx.type == TransactionType.NON_INVOICING
    assert tx.jid == sheet.job_id
    assert tx.paid_amount == Decimal("30.00")
    assert tx.due_amount == Decimal("50.00")
    assert tx.total_amount == Decimal("80.00")
    assert tx.invoice_number == "INV-77"
    assert tx.payment_method == PaymentMethod.CASH
    assert after_first.paid_amount == Decimal("30.00")
    assert after_first.due_amount == Decimal("50.00")
    assert after_first.payment_status == PaymentStatus.PARTIALLY_PAID

    payments.record_payment(sheet.id, Decimal("50"), "Card Payment", "PTRK", now=NOW)
    after_second = container.job_sheet_service.get(sheet.id)

    assert after_second.paid_amount == Decimal("80.00")
    assert after_second.due_amount == Decimal("0.00")
    assert after_second.payment_status == PaymentStatus.PAID


def test_overpayment_is_rejected_without_side_effects(container, sheet):
    with pytest.raises(OverpaymentRejected):
        container.payment_service.record_payment(sheet.id, "80.01", "Cash", "PTM", now=NOW)

    assert container.transactions_repo.list_for_job(sheet.job_id) == []
    assert container.job_sheet_service.get(sheet.id).payment_status == PaymentStatus.UNPAID


def test_payment_after_full_settlement_is_rejected(container, sheet):
    container.payment_service.record_payment(sheet.id, "80", "Cash", "PTM", now=NOW)

    with pytest.raises(OverpaymentRejected):
        container.payment_service.record_payment(sheet.id, "1", "Cash", "PTM", now=NOW)


@pytest.mark.parametrize("amount", ["0", "-5", "abc", None])
def test_non_positive_amounts_are_rejected(container, sheet, amount):
    with pytest.raises(ValidationError):
        container.payment_service.record_payment(sheet.id, amount, "Cash", "PTM", now=NOW)


def test_unknown_method_is_rejected(container, sheet):
    with pytest.raises(ValidationError):
        container.payment_service.record_payment(sheet.id, "10", "Cheque", "PTM", now=NOW)


def test_payment_for_missing_sheet(container):
    with pytest.raises(NotFoundError):
        container.payment_service.record_payment("missing", "10", "Cash", "PTM", now=NOW)


def test_refresh_of_unknown_job_returns_none(container):
    assert container.payment_service.refresh_job_payment("JID0404") is None


def test_deleting_a_payment_reopens_the_balance(container, sheet):
    tx = container.payment_service.record_payment(sheet.id, "80", "Cash", "PTM", now=NOW)

    container.transaction_service.delete(tx.id)
    reopened = container.job_sheet_service.get(sheet.id)

    assert reopened.paid_amount == Decimal("0.00")
    assert reopened.due_amount == Decimal("80.00")
    assert reopened.payment_status == PaymentStatus.UNPAID
