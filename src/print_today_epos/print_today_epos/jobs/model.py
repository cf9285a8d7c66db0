from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional

from ..common.financials import LineItem
from ..core.enums import JobSheetStatus, JobSheetType, Operator, PaymentStatus
from ..history.model import AuditEntry


@dataclass(frozen=True)
class JobSheet:
    """Domain entity: a customer job with priced line items and payments."""

    id: str
    job_id: str
    date: datetime
    operator: Operator
    client_name: str
    items: tuple[LineItem, ...]
    sub_total: Decimal
    vat_amount: Decimal
    total_amount: Decimal
    paid_amount: Decimal
    due_amount: Decimal
    status: JobSheetStatus
    payment_status: PaymentStatus
    type: JobSheetType
    company_name: Optional[str] = None
    client_details: Optional[str] = None
    special_note: Optional[str] = None
    ir_number: Optional[str] = None
    invoice_number: Optional[str] = None
    delivery_by: Optional[datetime] = None
    tid: Optional[str] = None
    created_at: Optional[datetime] = None
    history: tuple[AuditEntry, ...] = ()
    version: int = 1


@dataclass(frozen=True)
class DashboardStats:
    job_sheets: dict[str, int]
    quotations: dict[str, int]
