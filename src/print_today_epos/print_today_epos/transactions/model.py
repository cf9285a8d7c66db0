from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any, Mapping, Optional

from ..common.datetime_utils import to_datetime
from ..common.financials import to_money
from ..common.validators import optional_text, require_enum, require_non_empty, require_non_negative, require_positive
from ..core.constants import VAT_RATE
from ..core.enums import Operator, PaymentMethod, TransactionType
from ..core.exceptions import ValidationError


@dataclass(frozen=True)
class Transaction:
    """Domain entity: one till or invoicing payment."""

    id: str
    transaction_id: str
    type: TransactionType
    date: datetime
    client_name: str
    amount: Decimal
    vat_applied: bool
    total_amount: Decimal
    paid_amount: Decimal
    due_amount: Decimal
    payment_method: PaymentMethod
    operator: Operator
    job_description: Optional[str] = None
    invoice_number: Optional[str] = None
    jid: Optional[str] = None
    reference: Optional[str] = None
    admin_checked: bool = False
    checked_by: Optional[str] = None
    created_at: Optional[datetime] = None
    version: int = 1


@dataclass(frozen=True)
class TransactionDraft:
    type: TransactionType
    date: datetime
    client_name: str
    amount: Decimal
    vat_applied: bool
    total_amount: Decimal
    paid_amount: Decimal
    due_amount: Decimal
    payment_method: PaymentMethod
    operator: Operator
    job_description: Optional[str] = None
    invoice_number: Optional[str] = None
    jid: Optional[str] = None
    reference: Optional[str] = None


@dataclass(frozen=True)
class TillStats:
    daily_sales: Decimal
    cash_total: Decimal
    card_total: Decimal
    bank_total: Decimal


def parse_transaction_draft(payload: Mapping[str, Any], *, now: datetime) -> TransactionDraft:
    if not isinstance(payload, Mapping):
        raise ValidationError("Payload must be an object.")

    raw_type = payload.get("type")
    try:
        date = to_datetime(payload.get("date")) or now
    except (TypeError, ValueError):
        raise ValidationError("Invalid date.")

    amount = to_money(require_positive(payload.get("amount"), "Amount"))
    vat_applied = bool(payload.get("vat_applied", False))
    total = to_money(amount + (amount * VAT_RATE if vat_applied else 0))

    raw_paid = payload.get("paid_amount")
    paid = to_money(require_non_negative(raw_paid, "Paid amount")) if raw_paid not in (None, "") else total

    return TransactionDraft(
        type=require_enum(raw_type, TransactionType, "type") if raw_type else TransactionType.NON_INVOICING,
        date=date,
        client_name=require_non_empty(payload.get("client_name"), "Client name"),
        amount=amount,
        vat_applied=vat_applied,
        total_amount=total,
        paid_amount=paid,
        due_amount=total - paid,
        payment_method=require_enum(payload.get("payment_method"), PaymentMethod, "payment method"),
        operator=require_enum(payload.get("operator"), Operator, "operator"),
        job_description=optional_text(payload.get("job_description")),
        invoice_number=optional_text(payload.get("invoice_number")),
        jid=optional_text(payload.get("jid")),
        reference=optional_text(payload.get("reference")),
    )


def new_transaction(draft: TransactionDraft, *, transaction_id: str, now: datetime) -> Transaction:
    return Transaction(
        id="",
        transaction_id=transaction_id,
        type=draft.type,
        date=draft.date,
        client_name=draft.client_name,
        amount=draft.amount,
        vat_applied=draft.vat_applied,
        total_amount=draft.total_amount,
        paid_amount=draft.paid_amount,
        due_amount=draft.due_amount,
        payment_method=draft.payment_method,
        operator=draft.operator,
        job_description=draft.job_description,
        invoice_number=draft.invoice_number,
        jid=draft.jid,
        reference=draft.reference,
        admin_checked=False,
        checked_by=None,
        created_at=now,
    )
