from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional

from ..common.financials import LineItem
from ..core.enums import DiscountType, InvoiceStatus


@dataclass(frozen=True)
class CompanyProfile:
    """Letterhead an invoice is issued under."""

    id: str
    name: str
    address: Optional[str] = None
    email: Optional[str] = None
    website: Optional[str] = None
    logo_url: Optional[str] = None
    bank_details: Optional[str] = None
    created_at: Optional[datetime] = None
    version: int = 1


@dataclass(frozen=True)
class Invoice:
    id: str
    invoice_id: str
    company_profile_id: str
    client_name: str
    client_address: Optional[str]
    date: datetime
    due_date: datetime
    items: tuple[LineItem, ...]
    sub_total: Decimal
    discount_type: DiscountType
    discount_value: Decimal
    discount_amount: Decimal
    sub_total_after_discount: Decimal
    vat_amount: Decimal
    total_amount: Decimal
    status: InvoiceStatus
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    version: int = 1
