from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from decimal import Decimal

import pytest

from src.print_today_epos.print_today_epos.core.enums import (
    AuditAction,
    JobSheetStatus,
    JobSheetType,
    QuotationStatus,
)
from src.print_today_epos.print_today_epos.core.exceptions import (
    AlreadyConverted,
    SourceNotFound,
    ValidationError,
)
from src.print_today_epos.print_today_epos.quotations.service import QuotationService

NOW = datetime(2026, 3, 2, 10, 0)


def _payload(**overrides) -> dict:
    data = {
        "operator": "PTMGH",
        "date": "2026-03-02T09:00:00",
        "client_name": "Acme Ltd",
        "company_name": "Acme Group",
        "special_note": "Deliver to rear entrance",
        "items": [
            {"description": "Banner 2m", "quantity": 1, "price": 100, "vat_applied": True},
        ],
    }
    data.update(overrides)
    return data


class RacingQuotations:
    """Lets a competing conversion land between the read and the write."""

    def __init__(self, inner):
        self._inner = inner
        self._raced = False

    def __getattr__(self, name):
        return getattr(self._inner, name)

    def save(self, quotation):
        if not self._raced:
            self._raced = True
            current = self._inner.get(quotation.id)
            self._inner.save(replace(current, jid="JID9999", status=QuotationStatus.APPROVED))
        return self._inner.save(quotation)


def test_create_defaults(container):
    quotation = container.quotation_service.create(_payload(), now=NOW)

    assert quotation.quotation_id == "QU0001"
    assert quotation.status == QuotationStatus.SENT
    assert quotation.type == JobSheetType.QUOTATION
    assert quotation.total_amount == Decimal("120.00")
    assert quotation.jid is None
    assert quotation.history[0].details == "Quotation created by PTMGH."


def test_quotation_numbers_do_not_follow_job_sheets(container):
    container.job_sheet_service.create(_payload(), now=NOW)
    container.job_sheet_service.create(_payload(), now=NOW)

    quotation = container.quotation_service.create(_payload(), now=NOW)

    assert quotation.quotation_id == "QU0001"


def test_convert_creates_job_sheet_and_locks_quotation(container):
    quotation = container.quotation_service.create(_payload(), now=NOW)

    sheet = container.quotation_service.convert_to_job_sheet(quotation.id, now=NOW)
    converted = container.quotation_service.get(quotation.id)

    assert sheet.job_id == "JID0001"
    assert sheet.status == JobSheetStatus.HOLD
    assert sheet.type == JobSheetType.INVOICE
    assert sheet.client_name == "Acme Ltd"
    assert sheet.total_amount == Decimal("120.00")
    assert sheet.special_note == "Converted from Quotation QU0001.\n\nDeliver to rear entrance"
    assert converted.status == QuotationStatus.APPROVED
    assert converted.jid == "JID0001"
    assert converted.history[-1].action == AuditAction.CONVERTED
    assert converted.history[-1].details == "Converted to Job Sheet JID0001."


def test_second_conversion_is_rejected(container):
    quotation = container.quotation_service.create(_payload(), now=NOW)
    container.quotation_service.convert_to_job_sheet(quotation.id, now=NOW)

    with pytest.raises(AlreadyConverted):
        container.quotation_service.convert_to_job_sheet(quotation.id, now=NOW)

    assert len(container.job_sheet_service.search(return_all=True)) == 1


def test_converting_a_missing_quotation(container):
    with pytest.raises(SourceNotFound):
        container.quotation_service.convert_to_job_sheet("missing", now=NOW)

    assert container.job_sheet_service.search(return_all=True) == []


def test_converted_quotation_cannot_be_edited(container):
    quotation = container.quotation_service.create(_payload(), now=NOW)
    container.quotation_service.convert_to_job_sheet(quotation.id, now=NOW)

    with pytest.raises(ValidationError):
        container.quotation_service.update(quotation.id, _payload(client_name="Other"), actor="PTM", now=NOW)


def test_deleting_the_job_sheet_unlocks_the_quotation(container):
    quotation = container.quotation_service.create(_payload(), now=NOW)
    sheet = container.quotation_service.convert_to_job_sheet(quotation.id, now=NOW)

    container.job_sheet_service.delete(sheet.id, now=NOW)
    unlocked = container.quotation_service.get(quotation.id)

    assert unlocked.jid is None
    assert unlocked.status == QuotationStatus.HOLD
    assert unlocked.history[-1].action == AuditAction.UNLOCKED
    assert unlocked.history[-1].operator == "System"
    assert "JID0001" in unlocked.history[-1].details

    again = container.quotation_service.convert_to_job_sheet(quotation.id, now=NOW)
    assert again.job_id == "JID0002"


def test_concurrent_conversion_rolls_back_the_new_sheet(container):
    quotation = container.quotation_service.create(_payload(), now=NOW)
    racing = QuotationService(RacingQuotations(container.quotations_repo), container.job_sheet_service, container.sequences)

    with pytest.raises(AlreadyConverted):
        racing.convert_to_job_sheet(quotation.id, now=NOW)

    assert container.job_sheets_repo.get_by_job_id("JID0001") is None
    assert container.quotation_service.get(quotation.id).jid == "JID9999"


def test_update_records_changes(container):
    quotation = container.quotation_service.create(_payload(), now=NOW)

    updated = container.quotation_service.update(
        quotation.id, _payload(status="WFR"), actor="PTASAD", now=NOW
    )

    assert updated.status == QuotationStatus.WFR
    assert updated.history[-1].details == "Status changed from 'Sent' to 'WFR'."
    assert updated.history[-1].operator == "PTASAD"


def test_search_by_id_and_client(container):
    first = container.quotation_service.create(_payload(), now=NOW)
    container.quotation_service.create(_payload(client_name="Bravo Cafe", company_name=None), now=NOW)

    assert [q.quotation_id for q in container.quotation_service.search("qu0001")] == [first.quotation_id]
    assert len(container.quotation_service.search("cafe")) == 1
    assert len(container.quotation_service.search(status="Sent")) == 2
