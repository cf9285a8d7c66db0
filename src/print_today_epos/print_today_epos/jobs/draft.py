"""Validated input shared by job sheets and quotations.

Both entities carry the same client, line-item and scheduling fields; only
the status vocabulary differs, so parsing takes the status enum as an argument.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Mapping, Optional, Type

from ..common.datetime_utils import to_datetime
from ..common.financials import LineItem, parse_line_items
from ..common.validators import optional_text, require_enum, require_non_empty
from ..core.enums import JobSheetType, Operator
from ..core.exceptions import ValidationError
from ..history.tracker import TrackedField, day_key, day_or, items_key, text_or


@dataclass(frozen=True)
class SheetDraft:
    operator: Operator
    date: datetime
    client_name: str
    items: tuple[LineItem, ...]
    status: Enum
    type: JobSheetType
    company_name: Optional[str] = None
    client_details: Optional[str] = None
    special_note: Optional[str] = None
    ir_number: Optional[str] = None
    invoice_number: Optional[str] = None
    delivery_by: Optional[datetime] = None
    tid: Optional[str] = None


def _optional_datetime(value: Any, field_name: str) -> Optional[datetime]:
    try:
        return to_datetime(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid {field_name}.")


def parse_sheet_draft(
    payload: Mapping[str, Any],
    *,
    status_cls: Type[Enum],
    default_status: Optional[Enum] = None,
    now: Optional[datetime] = None,
    default_type: JobSheetType = JobSheetType.INVOICE,
) -> SheetDraft:
    """Parse a create or full-update payload.

    Without `default_status` and `now` (updates), status and date must be sent.
    """
    if not isinstance(payload, Mapping):
        raise ValidationError("Payload must be an object.")

    raw_status = payload.get("status")
    raw_type = payload.get("type")
    raw_items = payload.get("items", payload.get("job_items"))

    if not raw_status and default_status is None:
        raise ValidationError("Status is required.")
    sheet_date = _optional_datetime(payload.get("date"), "date") or now
    if sheet_date is None:
        raise ValidationError("Date is required.")

    return SheetDraft(
        operator=require_enum(payload.get("operator"), Operator, "operator"),
        date=sheet_date,
        client_name=require_non_empty(payload.get("client_name"), "Client name"),
        items=parse_line_items(raw_items),
        status=require_enum(raw_status, status_cls, "status") if raw_status else default_status,
        type=require_enum(raw_type, JobSheetType, "type") if raw_type else default_type,
        company_name=optional_text(payload.get("company_name")),
        client_details=optional_text(payload.get("client_details")),
        special_note=optional_text(payload.get("special_note")),
        ir_number=optional_text(payload.get("ir_number")),
        invoice_number=optional_text(payload.get("invoice_number")),
        delivery_by=_optional_datetime(payload.get("delivery_by"), "delivery date"),
        tid=optional_text(payload.get("tid")),
    )


SHEET_TRACKED_FIELDS = (
    TrackedField("operator", "Operator"),
    TrackedField("date", "Date", formatter=day_or("N/A"), key=day_key),
    TrackedField("status", "Status"),
    TrackedField("delivery_by", "Delivery date", formatter=day_or("N/A"), key=day_key),
    TrackedField("type", "Type"),
    TrackedField("tid", "Transaction ID", formatter=text_or("none"), key=lambda v: v or None),
    TrackedField("items", "Items", key=items_key, summary="Job items, quantities, or prices were modified."),
)


def tracked_values(obj: Any, tracked_fields=SHEET_TRACKED_FIELDS) -> dict:
    return {f.name: getattr(obj, f.name) for f in tracked_fields}


def matches_term(human_id: str, obj: Any, term: str) -> bool:
    """Free-text match on human id, client, company and item descriptions."""
    needle = term.strip().lower()
    if not needle:
        return True
    haystack = [human_id, obj.client_name, obj.company_name or ""]
    haystack.extend(item.description for item in obj.items)
    return any(needle in (value or "").lower() for value in haystack)
