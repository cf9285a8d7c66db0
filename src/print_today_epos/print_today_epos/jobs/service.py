from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from decimal import Decimal
from typing import Any, Mapping, Optional, Sequence

import structlog

from ..common.financials import compute_totals, derive_payment_status
from ..common.validators import require_enum
from ..core.constants import (
    COUNTER_JOB_SHEETS,
    DEFAULT_SEARCH_LIMIT,
    JOB_SHEET_ID_FORMAT,
    SYSTEM_OPERATOR,
)
from ..core.enums import AuditAction, JobSheetStatus, Operator, PaymentStatus, QuotationStatus
from ..core.exceptions import NotFoundError
from ..history.model import AuditEntry
from ..history.tracker import append_entries, changes_to_entries, diff
from ..quotations.repository import QuotationRepository
from ..sequences.generator import SequenceGenerator
from ..transactions.repository import TransactionRepository
from .draft import SHEET_TRACKED_FIELDS, SheetDraft, matches_term, parse_sheet_draft, tracked_values
from .model import DashboardStats, JobSheet
from .payments import PaymentService
from .repository import JobSheetRepository

log = structlog.get_logger(__name__)


class JobSheetService:
    def __init__(
        self,
        job_sheets: JobSheetRepository,
        transactions: TransactionRepository,
        quotations: QuotationRepository,
        sequences: SequenceGenerator,
        payments: PaymentService,
    ):
        self._job_sheets = job_sheets
        self._transactions = transactions
        self._quotations = quotations
        self._sequences = sequences
        self._payments = payments

    def parse(self, payload: Mapping[str, Any], *, now: datetime) -> SheetDraft:
        return parse_sheet_draft(payload, status_cls=JobSheetStatus, default_status=JobSheetStatus.HOLD, now=now)

    def get(self, id: str) -> JobSheet:
        sheet = self._job_sheets.get(id)
        if not sheet:
            raise NotFoundError("Job Sheet not found.")
        return sheet

    def get_by_job_id(self, job_id: str) -> Optional[JobSheet]:
        if not job_id:
            return None
        return self._job_sheets.get_by_job_id(job_id)

    def create(self, payload: Mapping[str, Any], *, now: datetime | None = None) -> JobSheet:
        now = now or datetime.now()
        return self.create_from_draft(self.parse(payload, now=now), now=now)

    def create_from_draft(self, draft: SheetDraft, *, now: datetime | None = None) -> JobSheet:
        now = now or datetime.now()
        totals = compute_totals(draft.items)
        job_id = self._sequences.next_human_id(COUNTER_JOB_SHEETS, JOB_SHEET_ID_FORMAT)

        sheet = self._job_sheets.create(
            JobSheet(
                id="",
                job_id=job_id,
                date=draft.date,
                operator=draft.operator,
                client_name=draft.client_name,
                company_name=draft.company_name,
                client_details=draft.client_details,
                items=draft.items,
                sub_total=totals.sub_total,
                vat_amount=totals.vat_amount,
                total_amount=totals.total_amount,
                paid_amount=Decimal("0.00"),
                due_amount=totals.total_amount,
                status=draft.status,
                payment_status=PaymentStatus.UNPAID,
                type=draft.type,
                special_note=draft.special_note,
                ir_number=draft.ir_number,
                invoice_number=draft.invoice_number,
                delivery_by=draft.delivery_by,
                tid=draft.tid,
                created_at=now,
                history=(
                    AuditEntry(
                        timestamp=now,
                        operator=draft.operator.value,
                        action=AuditAction.CREATED,
                        details=f"Job sheet created by {draft.operator.value}.",
                    ),
                ),
            )
        )
        log.info("job_sheet_created", job_id=job_id, operator=draft.operator.value, total=str(totals.total_amount))

        if draft.tid and self._link_transaction(draft.tid, job_id):
            return self._payments.refresh_job_payment(job_id) or sheet
        return sheet

    def update(
        self,
        id: str,
        payload: Mapping[str, Any],
        *,
        actor: Any,
        now: datetime | None = None,
    ) -> JobSheet:
        now = now or datetime.now()
        changed_by = require_enum(actor, Operator, "operator")
        sheet = self.get(id)
        draft = parse_sheet_draft(payload, status_cls=JobSheetStatus, default_type=sheet.type)

        totals = compute_totals(draft.items)
        due = totals.total_amount - sheet.paid_amount
        messages = diff(tracked_values(sheet), tracked_values(draft), SHEET_TRACKED_FIELDS)
        entries = changes_to_entries(messages, operator=changed_by.value, now=now)

        saved = self._job_sheets.save(
            replace(
                sheet,
                date=draft.date,
                operator=draft.operator,
                client_name=draft.client_name,
                company_name=draft.company_name,
                client_details=draft.client_details,
                items=draft.items,
                sub_total=totals.sub_total,
                vat_amount=totals.vat_amount,
                total_amount=totals.total_amount,
                due_amount=due,
                payment_status=derive_payment_status(sheet.paid_amount, totals.total_amount),
                status=draft.status,
                type=draft.type,
                special_note=draft.special_note,
                ir_number=draft.ir_number,
                invoice_number=draft.invoice_number,
                delivery_by=draft.delivery_by,
                tid=draft.tid,
                history=append_entries(sheet.history, entries),
            )
        )
        log.info("job_sheet_updated", job_id=sheet.job_id, actor=changed_by.value, changes=len(entries))

        relinked = False
        if sheet.tid and sheet.tid != draft.tid:
            relinked = self._unlink_transaction(sheet.tid, sheet.job_id) or relinked
        if draft.tid and draft.tid != sheet.tid:
            relinked = self._link_transaction(draft.tid, sheet.job_id) or relinked
        if relinked:
            return self._payments.refresh_job_payment(sheet.job_id) or saved
        return saved

    def _link_transaction(self, transaction_id: str, job_id: str) -> bool:
        tx = self._transactions.get_by_transaction_id(transaction_id)
        if not tx:
            log.warning("linked_transaction_missing", transaction_id=transaction_id, job_id=job_id)
            return False
        previous = tx.jid
        self._transactions.set_job(tx.id, job_id)
        if previous and previous != job_id:
            log.info("transaction_moved", transaction_id=transaction_id, from_job=previous, to_job=job_id)
            self._payments.refresh_job_payment(previous)
        return True

    def _unlink_transaction(self, transaction_id: str, job_id: str) -> bool:
        tx = self._transactions.get_by_transaction_id(transaction_id)
        if not tx or tx.jid != job_id:
            return False
        self._transactions.set_job(tx.id, None)
        return True

    def search(
        self,
        term: str = "",
        *,
        status: Any = None,
        payment_status: Any = None,
        operator: Any = None,
        return_all: bool = False,
    ) -> Sequence[JobSheet]:
        st = require_enum(status, JobSheetStatus, "status") if status else None
        pst = require_enum(payment_status, PaymentStatus, "payment status") if payment_status else None
        op = require_enum(operator, Operator, "operator") if operator else None

        sheets = list(self._job_sheets.list_recent())
        if st:
            sheets = [s for s in sheets if s.status == st]
        if pst:
            sheets = [s for s in sheets if s.payment_status == pst]
        if op:
            sheets = [s for s in sheets if s.operator == op]
        if term:
            sheets = [s for s in sheets if matches_term(s.job_id, s, term)]

        if term or st or pst or op or return_all:
            return sheets
        return sheets[:DEFAULT_SEARCH_LIMIT]

    def delete(self, id: str, *, now: datetime | None = None) -> None:
        """Hard delete; references from quotations and transactions are cleared."""

        now = now or datetime.now()
        sheet = self.get(id)

        quotation = self._quotations.get_by_jid(sheet.job_id)
        if quotation:
            self._quotations.save(
                replace(
                    quotation,
                    jid=None,
                    status=QuotationStatus.HOLD,
                    history=append_entries(
                        quotation.history,
                        [
                            AuditEntry(
                                timestamp=now,
                                operator=SYSTEM_OPERATOR,
                                action=AuditAction.UNLOCKED,
                                details=(
                                    f"Linked Job Sheet {sheet.job_id} was deleted. "
                                    "Quotation is now unlocked and editable."
                                ),
                            )
                        ],
                    ),
                )
            )
            log.info("quotation_unlocked", quotation_id=quotation.quotation_id, job_id=sheet.job_id)

        for tx in self._transactions.list_for_job(sheet.job_id):
            self._transactions.set_job(tx.id, None)

        self._job_sheets.delete(sheet.id)
        log.info("job_sheet_deleted", job_id=sheet.job_id)

    def dashboard_stats(self) -> DashboardStats:
        jobs = {s.value: 0 for s in JobSheetStatus}
        for sheet in self._job_sheets.list_recent():
            jobs[sheet.status.value] += 1
        quotes = {s.value: 0 for s in QuotationStatus}
        for q in self._quotations.list_recent():
            quotes[q.status.value] += 1
        return DashboardStats(job_sheets=jobs, quotations=quotes)
