from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from src.print_today_epos.print_today_epos.common.financials import LineItem
from src.print_today_epos.print_today_epos.core.enums import AuditAction, JobSheetStatus
from src.print_today_epos.print_today_epos.history.model import (
    AuditEntry,
    history_from_documents,
    history_to_documents,
)
from src.print_today_epos.print_today_epos.history.tracker import (
    append_entries,
    changes_to_entries,
    diff,
    newest_first,
    note_entry,
)
from src.print_today_epos.print_today_epos.jobs.draft import SHEET_TRACKED_FIELDS

NOW = datetime(2026, 3, 2, 10, 0)


def _item(price: str) -> LineItem:
    return LineItem(description="Flyers", quantity=Decimal("100"), price=Decimal(price))


def test_diff_reports_each_changed_field():
    old = {"status": JobSheetStatus.HOLD, "date": datetime(2026, 3, 1, 9, 0), "tid": None}
    new = {"status": JobSheetStatus.STUDIO, "date": datetime(2026, 3, 2), "tid": "TID0004"}

    messages = diff(old, new, SHEET_TRACKED_FIELDS)

    assert messages == [
        "Date changed from '01/03/2026' to '02/03/2026'.",
        "Status changed from 'Hold' to 'Studio'.",
        "Transaction ID changed from 'none' to 'TID0004'.",
    ]


def test_same_day_with_different_time_is_not_a_change():
    old = {"date": datetime(2026, 3, 2, 9, 0)}
    new = {"date": datetime(2026, 3, 2, 15, 30)}

    assert diff(old, new, SHEET_TRACKED_FIELDS) == []


def test_items_are_summarised():
    old = {"items": (_item("50.00"),)}
    new = {"items": (_item("55.00"),)}

    assert diff(old, new, SHEET_TRACKED_FIELDS) == ["Job items, quantities, or prices were modified."]


def test_fields_missing_from_new_values_are_skipped():
    old = {"status": JobSheetStatus.HOLD, "operator": "PTM"}

    assert diff(old, {}, SHEET_TRACKED_FIELDS) == []


def test_changes_can_be_combined_into_one_entry():
    entries = changes_to_entries(["A changed.", "B changed."], operator="PTM", now=NOW, combine=True)

    assert len(entries) == 1
    assert entries[0].details == "A changed. B changed."
    assert entries[0].action == AuditAction.UPDATED


def test_append_entries_returns_new_history():
    original = (AuditEntry(NOW, "PTM", AuditAction.CREATED, "Created."),)

    updated = append_entries(original, [note_entry("  call back  ", operator="PTRK", now=NOW), None])

    assert len(original) == 1
    assert updated[0] == original[0]
    assert updated[1].details == "call back"
    assert updated[1].action == AuditAction.NOTE_ADDED


def test_blank_note_produces_no_entry():
    assert note_entry("   ", operator="PTM", now=NOW) is None


def test_newest_first_orders_by_timestamp():
    history = (
        AuditEntry(datetime(2026, 3, 1), "PTM", AuditAction.CREATED, "first"),
        AuditEntry(datetime(2026, 3, 3), "PTM", AuditAction.UPDATED, "third"),
        AuditEntry(None, "PTM", AuditAction.UPDATED, "undated"),
        AuditEntry(datetime(2026, 3, 2), "PTM", AuditAction.UPDATED, "second"),
    )

    assert [e.details for e in newest_first(history)] == ["third", "second", "first", "undated"]


def test_stored_history_keeps_unknown_values():
    raw = [
        {"timestamp": "not-a-date", "operator": "PTM", "action": "Archived", "details": "x"},
        {"timestamp": "2026-03-02T10:00:00", "operator": "PTM", "action": "Created", "details": "y"},
        "garbage",
    ]

    entries = history_from_documents(raw)

    assert len(entries) == 3
    assert entries[0].timestamp is None
    assert entries[0].action == "Archived"
    assert entries[1].action == AuditAction.CREATED
    assert entries[1].timestamp == NOW
    assert history_to_documents(entries) == raw
