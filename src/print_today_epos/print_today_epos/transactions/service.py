from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Iterable, Mapping, Optional, Sequence

import structlog

from ..common.datetime_utils import parse_iso_date
from ..common.financials import to_money
from ..common.validators import require_enum
from ..core.constants import COUNTER_TRANSACTIONS, DEFAULT_TRANSACTION_SEARCH_WINDOW, TRANSACTION_ID_FORMAT
from ..core.enums import BANK_PAYMENT_METHODS, PaymentMethod, TransactionType
from ..core.exceptions import NotFoundError, ValidationError
from ..jobs.payments import PaymentService
from ..jobs.repository import JobSheetRepository
from ..sequences.generator import SequenceGenerator
from .model import TillStats, Transaction, new_transaction, parse_transaction_draft
from .repository import TransactionRepository

log = structlog.get_logger(__name__)


class TransactionService:
    def __init__(
        self,
        transactions: TransactionRepository,
        job_sheets: JobSheetRepository,
        sequences: SequenceGenerator,
        payments: PaymentService,
    ):
        self._transactions = transactions
        self._job_sheets = job_sheets
        self._sequences = sequences
        self._payments = payments

    def get(self, id: str) -> Transaction:
        tx = self._transactions.get(id)
        if not tx:
            raise NotFoundError("Transaction not found.")
        return tx

    def create(self, payload: Mapping[str, Any], *, now: datetime | None = None) -> Transaction:
        now = now or datetime.now()
        draft = parse_transaction_draft(payload, now=now)
        transaction_id = self._sequences.next_human_id(COUNTER_TRANSACTIONS, TRANSACTION_ID_FORMAT)
        created = self._transactions.create(new_transaction(draft, transaction_id=transaction_id, now=now))
        log.info(
            "transaction_created",
            transaction_id=transaction_id,
            type=draft.type.value,
            paid=str(draft.paid_amount),
            jid=draft.jid,
        )
        if created.jid:
            self._payments.refresh_job_payment(created.jid)
        return created

    def update(self, id: str, payload: Mapping[str, Any], *, now: datetime | None = None) -> Transaction:
        now = now or datetime.now()
        original = self.get(id)
        draft = parse_transaction_draft(payload, now=now)

        saved = self._transactions.save(
            replace(
                original,
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
            )
        )
        log.info("transaction_updated", transaction_id=original.transaction_id)

        if original.jid and original.jid != saved.jid:
            self._payments.refresh_job_payment(original.jid)
        if saved.jid:
            self._payments.refresh_job_payment(saved.jid)
        return saved

    def delete(self, id: str) -> None:
        tx = self.get(id)
        self._transactions.delete(tx.id)
        log.info("transaction_deleted", transaction_id=tx.transaction_id)
        if tx.jid:
            self._payments.refresh_job_payment(tx.jid)

    def bulk_delete(self, ids: Iterable[str]) -> int:
        ids = [i for i in (ids or []) if i]
        if not ids:
            raise ValidationError("No transaction IDs provided.")

        deleted = 0
        jids: set[str] = set()
        for id in ids:
            tx = self._transactions.get(id)
            if not tx:
                continue
            if self._transactions.delete(tx.id):
                deleted += 1
                if tx.jid:
                    jids.add(tx.jid)
        for jid in sorted(jids):
            self._payments.refresh_job_payment(jid)
        log.info("transactions_bulk_deleted", requested=len(ids), deleted=deleted)
        return deleted

    def mark_checked(self, id: str, *, checked_by: str = "admin") -> Transaction:
        tx = self.get(id)
        saved = self._transactions.save(replace(tx, admin_checked=True, checked_by=checked_by))
        log.info("transaction_checked", transaction_id=tx.transaction_id, checked_by=checked_by)
        return saved

    def bulk_mark_checked(self, ids: Iterable[str], *, checked_by: str = "admin (bulk)") -> int:
        ids = [i for i in (ids or []) if i]
        if not ids:
            raise ValidationError("No transaction IDs provided.")

        checked = 0
        for id in ids:
            tx = self._transactions.get(id)
            if not tx:
                continue
            self._transactions.save(replace(tx, admin_checked=True, checked_by=checked_by))
            checked += 1
        log.info("transactions_bulk_checked", requested=len(ids), checked=checked)
        return checked

    def pending(self) -> Sequence[Transaction]:
        return list(self._transactions.list_pending())

    def list_recent(self, type_: Any = None, *, limit: int = 20) -> Sequence[Transaction]:
        if type_:
            t = require_enum(type_, TransactionType, "type")
            txs = [tx for tx in self._transactions.list_recent() if tx.type == t]
            return txs[:limit]
        return list(self._transactions.list_recent(limit))

    def search(self, term: str = "", *, payment_method: Any = None) -> Sequence[Transaction]:
        """Filter the most recent transactions by free text and payment method."""

        method = require_enum(payment_method, PaymentMethod, "payment method") if payment_method else None
        txs = list(self._transactions.list_recent(DEFAULT_TRANSACTION_SEARCH_WINDOW))
        if method:
            txs = [t for t in txs if t.payment_method == method]
        needle = (term or "").strip().lower()
        if needle:
            txs = [
                t
                for t in txs
                if any(
                    needle in (value or "").lower()
                    for value in (t.transaction_id, t.client_name, t.job_description, t.jid)
                )
            ]
        return txs

    def report(
        self,
        *,
        term: str = "",
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> list[dict]:
        """Transactions in the date range, newest first, with the invoice number
        filled in from the linked job sheet when the transaction has none.

        A `term` that parses as YYYY-MM-DD matches that day instead of text.
        """

        if start and end and end < start:
            raise ValidationError("End date cannot be before start date.")

        txs = sorted(self._transactions.list_recent(), key=lambda t: t.date, reverse=True)
        if start:
            txs = [t for t in txs if t.date.date() >= start]
        if end:
            txs = [t for t in txs if t.date.date() <= end]

        needle = (term or "").strip()
        if needle:
            try:
                day = parse_iso_date(needle)
            except ValueError:
                day = None
            if day:
                txs = [t for t in txs if t.date.date() == day]
            else:
                low = needle.lower()
                txs = [
                    t
                    for t in txs
                    if any(low in (v or "").lower() for v in (t.transaction_id, t.jid, t.client_name))
                ]

        sheets: dict[str, Any] = {}
        rows: list[dict] = []
        for t in txs:
            invoice_number = t.invoice_number
            if not invoice_number and t.jid:
                if t.jid not in sheets:
                    sheets[t.jid] = self._job_sheets.get_by_job_id(t.jid)
                sheet = sheets[t.jid]
                if sheet:
                    invoice_number = sheet.invoice_number or sheet.ir_number
            rows.append({"transaction": t, "invoice_number": invoice_number or ""})
        return rows

    def till_stats(self, *, today: date | None = None) -> TillStats:
        today = today or datetime.now().date()
        daily = cash = card = bank = Decimal("0")
        for t in self._transactions.list_by_type(TransactionType.NON_INVOICING.value):
            if t.date.date() == today:
                daily += t.paid_amount
            if t.payment_method == PaymentMethod.CASH:
                cash += t.paid_amount
            elif t.payment_method == PaymentMethod.CARD_PAYMENT:
                card += t.paid_amount
            elif t.payment_method in BANK_PAYMENT_METHODS:
                bank += t.paid_amount
        return TillStats(
            daily_sales=to_money(daily),
            cash_total=to_money(cash),
            card_total=to_money(card),
            bank_total=to_money(bank),
        )
