from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from decimal import Decimal
from typing import Any, Mapping, Optional, Sequence

import structlog

from ..common.financials import compute_totals, derive_payment_status
from ..common.validators import require_enum
from ..core.constants import COUNTER_QUOTATIONS, DEFAULT_SEARCH_LIMIT, QUOTATION_ID_FORMAT
from ..core.enums import AuditAction, JobSheetStatus, JobSheetType, Operator, PaymentStatus, QuotationStatus
from ..core.exceptions import (
    AlreadyConverted,
    ConcurrentModificationError,
    NotFoundError,
    PersistenceError,
    SourceNotFound,
    ValidationError,
)
from ..history.model import AuditEntry
from ..history.tracker import append_entries, changes_to_entries, diff
from ..jobs.draft import SHEET_TRACKED_FIELDS, SheetDraft, matches_term, parse_sheet_draft, tracked_values
from ..jobs.model import JobSheet
from ..jobs.service import JobSheetService
from ..sequences.generator import SequenceGenerator
from .model import Quotation
from .repository import QuotationRepository

log = structlog.get_logger(__name__)


class QuotationService:
    def __init__(
        self,
        quotations: QuotationRepository,
        job_sheets: JobSheetService,
        sequences: SequenceGenerator,
    ):
        self._quotations = quotations
        self._job_sheets = job_sheets
        self._sequences = sequences

    def _parse(self, payload: Mapping[str, Any], *, now: datetime) -> SheetDraft:
        return parse_sheet_draft(
            payload,
            status_cls=QuotationStatus,
            default_status=QuotationStatus.SENT,
            now=now,
            default_type=JobSheetType.QUOTATION,
        )

    def get(self, id: str) -> Quotation:
        quotation = self._quotations.get(id)
        if not quotation:
            raise NotFoundError("Quotation not found.")
        return quotation

    def get_by_quotation_id(self, quotation_id: str) -> Optional[Quotation]:
        if not quotation_id:
            return None
        return self._quotations.get_by_quotation_id(quotation_id)

    def create(self, payload: Mapping[str, Any], *, now: datetime | None = None) -> Quotation:
        now = now or datetime.now()
        draft = self._parse(payload, now=now)
        totals = compute_totals(draft.items)
        quotation_id = self._sequences.next_human_id(COUNTER_QUOTATIONS, QUOTATION_ID_FORMAT)

        quotation = self._quotations.create(
            Quotation(
                id="",
                quotation_id=quotation_id,
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
                        details=f"Quotation created by {draft.operator.value}.",
                    ),
                ),
            )
        )
        log.info("quotation_created", quotation_id=quotation_id, operator=draft.operator.value)
        return quotation

    def update(
        self,
        id: str,
        payload: Mapping[str, Any],
        *,
        actor: Any,
        now: datetime | None = None,
    ) -> Quotation:
        now = now or datetime.now()
        changed_by = require_enum(actor, Operator, "operator")
        quotation = self.get(id)
        if quotation.jid:
            raise ValidationError(
                f"Quotation {quotation.quotation_id} was converted to {quotation.jid} and can no longer be edited."
            )
        draft = parse_sheet_draft(payload, status_cls=QuotationStatus, default_type=quotation.type)

        totals = compute_totals(draft.items)
        messages = diff(tracked_values(quotation), tracked_values(draft), SHEET_TRACKED_FIELDS)
        entries = changes_to_entries(messages, operator=changed_by.value, now=now)

        saved = self._quotations.save(
            replace(
                quotation,
                date=draft.date,
                operator=draft.operator,
                client_name=draft.client_name,
                company_name=draft.company_name,
                client_details=draft.client_details,
                items=draft.items,
                sub_total=totals.sub_total,
                vat_amount=totals.vat_amount,
                total_amount=totals.total_amount,
                due_amount=totals.total_amount - quotation.paid_amount,
                payment_status=derive_payment_status(quotation.paid_amount, totals.total_amount),
                status=draft.status,
                type=draft.type,
                special_note=draft.special_note,
                ir_number=draft.ir_number,
                invoice_number=draft.invoice_number,
                delivery_by=draft.delivery_by,
                tid=draft.tid,
                history=append_entries(quotation.history, entries),
            )
        )
        log.info("quotation_updated", quotation_id=quotation.quotation_id, actor=changed_by.value, changes=len(entries))
        return saved

    def search(
        self,
        term: str = "",
        *,
        status: Any = None,
        operator: Any = None,
        return_all: bool = False,
    ) -> Sequence[Quotation]:
        st = require_enum(status, QuotationStatus, "status") if status else None
        op = require_enum(operator, Operator, "operator") if operator else None

        quotations = list(self._quotations.list_recent())
        if st:
            quotations = [q for q in quotations if q.status == st]
        if op:
            quotations = [q for q in quotations if q.operator == op]
        if term:
            quotations = [q for q in quotations if matches_term(q.quotation_id, q, term)]

        if term or st or op or return_all:
            return quotations
        return quotations[:DEFAULT_SEARCH_LIMIT]

    def delete(self, id: str) -> None:
        quotation = self.get(id)
        self._quotations.delete(quotation.id)
        log.info("quotation_deleted", quotation_id=quotation.quotation_id)

    def convert_to_job_sheet(self, id: str, *, now: datetime | None = None) -> JobSheet:
        """Create a job sheet from the quotation and lock the quotation to it."""

        now = now or datetime.now()
        quotation = self._quotations.get(id)
        if not quotation:
            raise SourceNotFound("Quotation not found.")
        if quotation.jid:
            raise AlreadyConverted(f"Quotation {quotation.quotation_id} was already converted to {quotation.jid}.")

        note = f"Converted from Quotation {quotation.quotation_id}."
        if quotation.special_note:
            note = f"{note}\n\n{quotation.special_note}"

        sheet = self._job_sheets.create_from_draft(
            SheetDraft(
                operator=quotation.operator,
                date=now,
                client_name=quotation.client_name,
                company_name=quotation.company_name,
                client_details=quotation.client_details,
                items=quotation.items,
                status=JobSheetStatus.HOLD,
                type=JobSheetType.INVOICE,
                special_note=note,
                delivery_by=quotation.delivery_by,
            ),
            now=now,
        )

        try:
            self._quotations.save(
                replace(
                    quotation,
                    status=QuotationStatus.APPROVED,
                    jid=sheet.job_id,
                    history=append_entries(
                        quotation.history,
                        [
                            AuditEntry(
                                timestamp=now,
                                operator=quotation.operator.value,
                                action=AuditAction.CONVERTED,
                                details=f"Converted to Job Sheet {sheet.job_id}.",
                            )
                        ],
                    ),
                )
            )
        except PersistenceError as exc:
            self._job_sheets.delete(sheet.id, now=now)
            log.warning(
                "quotation_conversion_rolled_back",
                quotation_id=quotation.quotation_id,
                job_id=sheet.job_id,
                error=str(exc),
            )
            if isinstance(exc, ConcurrentModificationError):
                current = self._quotations.get(id)
                if current and current.jid:
                    raise AlreadyConverted(
                        f"Quotation {quotation.quotation_id} was already converted to {current.jid}."
                    )
            raise

        log.info("quotation_converted", quotation_id=quotation.quotation_id, job_id=sheet.job_id)
        return sheet
