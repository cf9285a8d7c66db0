from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

import structlog

from ..common.financials import derive_payment_status, to_money
from ..common.validators import optional_text, require_enum, require_positive
from ..core.constants import COUNTER_TRANSACTIONS, TRANSACTION_ID_FORMAT
from ..core.enums import Operator, PaymentMethod, TransactionType
from ..core.exceptions import NotFoundError, OverpaymentRejected
from ..sequences.generator import SequenceGenerator
from ..transactions.model import Transaction, TransactionDraft, new_transaction
from ..transactions.repository import TransactionRepository
from .model import JobSheet
from .repository import JobSheetRepository

log = structlog.get_logger(__name__)


class PaymentService:
    """Keeps a job sheet's paid/due/payment status in line with its transactions."""

    def __init__(
        self,
        job_sheets: JobSheetRepository,
        transactions: TransactionRepository,
        sequences: SequenceGenerator,
    ):
        self._job_sheets = job_sheets
        self._transactions = transactions
        self._sequences = sequences

    def paid_for(self, job_id: str) -> Decimal:
        return to_money(sum((t.paid_amount for t in self._transactions.list_for_job(job_id)), Decimal("0")))

    def refresh_job_payment(self, job_id: str) -> Optional[JobSheet]:
        """Recompute paid/due/status from the linked transactions.

        Returns None when no job sheet carries `job_id`.
        """

        sheet = self._job_sheets.get_by_job_id(job_id)
        if not sheet:
            log.warning("payment_refresh_job_missing", job_id=job_id)
            return None

        paid = self.paid_for(job_id)
        due = sheet.total_amount - paid
        status = derive_payment_status(paid, sheet.total_amount)
        if (paid, due, status) == (sheet.paid_amount, sheet.due_amount, sheet.payment_status):
            return sheet

        updated = self._job_sheets.update_payment_summary(
            sheet.id, paid_amount=paid, due_amount=due, payment_status=status
        )
        log.info("job_payment_refreshed", job_id=job_id, paid=str(paid), due=str(due), status=status.value)
        return updated

    def record_payment(
        self,
        job_sheet_id: str,
        amount: Any,
        method: Any,
        operator: Any,
        *,
        reference: Optional[str] = None,
        now: datetime | None = None,
    ) -> Transaction:
        now = now or datetime.now()
        value = to_money(require_positive(amount, "Payment amount"))
        pay_method = require_enum(method, PaymentMethod, "payment method")
        op = require_enum(operator, Operator, "operator")

        sheet = self._job_sheets.get(job_sheet_id)
        if not sheet:
            raise NotFoundError("Job Sheet not found.")
        if value > sheet.due_amount:
            raise OverpaymentRejected(
                f"Payment of {value} exceeds the amount due ({sheet.due_amount}) on {sheet.job_id}."
            )

        draft = TransactionDraft(
            type=TransactionType.NON_INVOICING,
            date=now,
            client_name=sheet.client_name,
            amount=sheet.sub_total,
            vat_applied=sheet.vat_amount > 0,
            total_amount=sheet.total_amount,
            paid_amount=value,
            due_amount=sheet.due_amount - value,
            payment_method=pay_method,
            operator=op,
            job_description=", ".join(i.description for i in sheet.items) or None,
            invoice_number=sheet.invoice_number,
            jid=sheet.job_id,
            reference=optional_text(reference),
        )
        transaction_id = self._sequences.next_human_id(COUNTER_TRANSACTIONS, TRANSACTION_ID_FORMAT)
        created = self._transactions.create(new_transaction(draft, transaction_id=transaction_id, now=now))

        refreshed = self.refresh_job_payment(sheet.job_id)
        if refreshed and refreshed.paid_amount > refreshed.total_amount:
            # Another payment landed between the due check and this write.
            self._transactions.delete(created.id)
            self.refresh_job_payment(sheet.job_id)
            log.warning("payment_rolled_back", job_id=sheet.job_id, transaction_id=transaction_id)
            raise OverpaymentRejected(f"Payment would exceed the total of {sheet.job_id}.")

        log.info(
            "payment_recorded",
            job_id=sheet.job_id,
            transaction_id=transaction_id,
            amount=str(value),
            method=pay_method.value,
        )
        return created
