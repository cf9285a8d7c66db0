from __future__ import annotations

from datetime import datetime
from decimal import Decimal

import pytest

from src.print_today_epos.print_today_epos.core.exceptions import (
    ConcurrentModificationError,
    DocumentNotFoundError,
)
from src.print_today_epos.print_today_epos.database.memory_store import InMemoryDocumentStore


@pytest.fixture
def store():
    return InMemoryDocumentStore()


def test_create_and_get_encode_money_and_timestamps(store):
    doc = store.create("jobSheets", {"total": Decimal("80.00"), "date": datetime(2026, 3, 2, 9, 0)})

    loaded = store.get("jobSheets", doc.doc_id)

    assert loaded.version == 1
    assert loaded.data == {"total": "80.00", "date": "2026-03-02T09:00:00"}


def test_update_merges_and_bumps_version(store):
    doc = store.create("tasks", {"status": "To Do", "details": "Print"})

    updated = store.update("tasks", doc.doc_id, {"status": "Done"}, expected_version=1)

    assert updated.version == 2
    assert updated.data == {"status": "Done", "details": "Print"}


def test_stale_version_is_rejected(store):
    doc = store.create("tasks", {"status": "To Do"})
    store.update("tasks", doc.doc_id, {"status": "In Progress"})

    with pytest.raises(ConcurrentModificationError):
        store.update("tasks", doc.doc_id, {"status": "Done"}, expected_version=1)

    assert store.get("tasks", doc.doc_id).data["status"] == "In Progress"


def test_update_of_missing_document(store):
    with pytest.raises(DocumentNotFoundError):
        store.update("tasks", "nope", {"status": "Done"})


def test_query_filters_orders_and_limits(store):
    store.create("transactions", {"type": "invoicing", "created_at": "2026-03-01T10:00:00"})
    store.create("transactions", {"type": "non-invoicing", "created_at": "2026-03-03T10:00:00"})
    store.create("transactions", {"type": "non-invoicing", "created_at": "2026-03-02T10:00:00"})
    store.create("transactions", {"type": "non-invoicing"})

    docs = store.query("transactions", where={"type": "non-invoicing"}, order_by="created_at", descending=True)

    assert [d.data.get("created_at") for d in docs] == ["2026-03-03T10:00:00", "2026-03-02T10:00:00", None]
    assert len(store.query("transactions", limit=2)) == 2


def test_query_rejects_unsafe_field_names(store):
    with pytest.raises(ValueError):
        store.query("tasks", where={"status; DROP": "x"})


def test_delete(store):
    doc = store.create("tasks", {"status": "To Do"})

    assert store.delete("tasks", doc.doc_id) is True
    assert store.delete("tasks", doc.doc_id) is False
    assert store.get("tasks", doc.doc_id) is None


def test_counters_start_at_one_per_name(store):
    assert store.increment_counter("jobSheets") == 1
    assert store.increment_counter("jobSheets") == 2
    assert store.increment_counter("quotations") == 1
