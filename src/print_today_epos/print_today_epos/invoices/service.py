from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timedelta
from typing import Any, Mapping, Optional, Sequence

import structlog

from ..common.datetime_utils import to_datetime
from ..common.financials import compute_invoice_totals, parse_line_items
from ..common.validators import optional_text, require_enum, require_non_empty, require_non_negative
from ..core.constants import COUNTER_INVOICES, INVOICE_ID_FORMAT, INVOICE_PAYMENT_TERMS_DAYS
from ..core.enums import DiscountType, InvoiceStatus
from ..core.exceptions import NotFoundError, ValidationError
from ..sequences.generator import SequenceGenerator
from .model import CompanyProfile, Invoice
from .repository import CompanyProfileRepository, InvoiceRepository

log = structlog.get_logger(__name__)


def _optional_datetime(value: Any, field_name: str) -> Optional[datetime]:
    try:
        return to_datetime(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid {field_name}.")


class InvoiceService:
    """Invoice generator: company profiles and the invoices issued under them."""

    def __init__(self, invoices: InvoiceRepository, profiles: CompanyProfileRepository, sequences: SequenceGenerator):
        self._invoices = invoices
        self._profiles = profiles
        self._sequences = sequences

    # --- company profiles ---

    def get_company_profile(self, id: str) -> CompanyProfile:
        profile = self._profiles.get(id)
        if not profile:
            raise NotFoundError("Company profile not found.")
        return profile

    def list_company_profiles(self) -> Sequence[CompanyProfile]:
        return list(self._profiles.list_recent())

    def save_company_profile(
        self,
        payload: Mapping[str, Any],
        *,
        id: Optional[str] = None,
        now: datetime | None = None,
    ) -> CompanyProfile:
        now = now or datetime.now()
        fields = dict(
            name=require_non_empty(payload.get("name"), "Company name"),
            address=optional_text(payload.get("address")),
            email=optional_text(payload.get("email")),
            website=optional_text(payload.get("website")),
            logo_url=optional_text(payload.get("logo_url")),
            bank_details=optional_text(payload.get("bank_details")),
        )

        if id:
            saved = self._profiles.save(replace(self.get_company_profile(id), **fields))
            log.info("company_profile_updated", profile_id=id)
            return saved

        created = self._profiles.create(CompanyProfile(id="", created_at=now, **fields))
        log.info("company_profile_created", profile_id=created.id, name=created.name)
        return created

    def delete_company_profile(self, id: str) -> None:
        profile = self.get_company_profile(id)
        if self._invoices.list_recent(company_profile_id=profile.id):
            raise ValidationError("Could not delete profile. Invoices are still associated with it.")
        self._profiles.delete(profile.id)
        log.info("company_profile_deleted", profile_id=id)

    # --- invoices ---

    def get(self, id: str) -> Invoice:
        invoice = self._invoices.get(id)
        if not invoice:
            raise NotFoundError("Invoice not found.")
        return invoice

    def list_invoices(self, *, status: Any = None) -> Sequence[Invoice]:
        st = require_enum(status, InvoiceStatus, "status") if status else None
        invoices = list(self._invoices.list_recent())
        if st:
            invoices = [i for i in invoices if i.status == st]
        return invoices

    def _parse(self, payload: Mapping[str, Any], *, now: datetime) -> dict:
        if not isinstance(payload, Mapping):
            raise ValidationError("Payload must be an object.")

        profile = self.get_company_profile(require_non_empty(payload.get("company_profile_id"), "Company profile"))
        items = parse_line_items(payload.get("items"))
        raw_discount_type = payload.get("discount_type")
        discount_type = (
            require_enum(raw_discount_type, DiscountType, "discount type") if raw_discount_type else DiscountType.AMOUNT
        )
        discount_value = require_non_negative(payload.get("discount_value") or 0, "Discount")
        totals = compute_invoice_totals(items, discount_type, discount_value)

        date = _optional_datetime(payload.get("date"), "date") or now
        due_date = _optional_datetime(payload.get("due_date"), "due date") or (
            date + timedelta(days=INVOICE_PAYMENT_TERMS_DAYS)
        )
        if due_date < date:
            raise ValidationError("Due date cannot be before the invoice date.")

        raw_status = payload.get("status")
        return dict(
            company_profile_id=profile.id,
            client_name=require_non_empty(payload.get("client_name"), "Client name"),
            client_address=optional_text(payload.get("client_address")),
            date=date,
            due_date=due_date,
            items=items,
            sub_total=totals.sub_total,
            discount_type=discount_type,
            discount_value=discount_value,
            discount_amount=totals.discount_amount,
            sub_total_after_discount=totals.sub_total_after_discount,
            vat_amount=totals.vat_amount,
            total_amount=totals.total_amount,
            status=require_enum(raw_status, InvoiceStatus, "status") if raw_status else InvoiceStatus.DRAFT,
            notes=optional_text(payload.get("notes")),
        )

    def save_invoice(
        self,
        payload: Mapping[str, Any],
        *,
        id: Optional[str] = None,
        now: datetime | None = None,
    ) -> Invoice:
        """Create an invoice, or replace the fields of an existing one.

        New invoices take the next `Inv-00001` style number; edits keep theirs.
        """

        now = now or datetime.now()
        fields = self._parse(payload, now=now)

        if id:
            saved = self._invoices.save(replace(self.get(id), **fields))
            log.info("invoice_updated", invoice_id=saved.invoice_id, total=str(saved.total_amount))
            return saved

        invoice_id = self._sequences.next_human_id(COUNTER_INVOICES, INVOICE_ID_FORMAT)
        created = self._invoices.create(Invoice(id="", invoice_id=invoice_id, created_at=now, **fields))
        log.info("invoice_created", invoice_id=invoice_id, total=str(created.total_amount))
        return created

    def set_status(self, id: str, status: Any) -> Invoice:
        new_status = require_enum(status, InvoiceStatus, "status")
        invoice = self.get(id)
        saved = self._invoices.save(replace(invoice, status=new_status))
        log.info("invoice_status_changed", invoice_id=invoice.invoice_id, status=new_status.value)
        return saved

    def delete(self, id: str) -> None:
        invoice = self.get(id)
        self._invoices.delete(invoice.id)
        log.info("invoice_deleted", invoice_id=invoice.invoice_id)
