from __future__ import annotations

from dataclasses import replace
from typing import Any, Mapping, Optional, Sequence

from ..common.datetime_utils import to_datetime
from ..core.constants import COLLECTION_TIME_RECORDS
from ..core.enums import Operator, TimeRecordStatus
from ..database.document_store import DocumentStore, StoredDocument
from .model import BreakPeriod, TimeRecord
from .repository import TimeRecordRepository


def _to_document(record: TimeRecord) -> dict:
    return {
        "operator": record.operator.value,
        "date": record.date,
        "clock_in_time": record.clock_in_time,
        "clock_out_time": record.clock_out_time,
        "status": record.status.value,
        "breaks": [{"start_time": b.start_time, "end_time": b.end_time} for b in record.breaks],
        "total_work_duration": record.total_work_duration,
        "total_break_duration": record.total_break_duration,
    }


def _breaks_from(raw: Any) -> tuple[BreakPeriod, ...]:
    out: list[BreakPeriod] = []
    for b in raw or []:
        start = to_datetime(b.get("start_time"))
        if start is None:
            continue
        out.append(BreakPeriod(start_time=start, end_time=to_datetime(b.get("end_time"))))
    return tuple(out)


def _optional_int(value: Any) -> Optional[int]:
    return int(value) if value is not None else None


def _from_document(doc: StoredDocument) -> TimeRecord:
    d: Mapping[str, Any] = doc.data
    return TimeRecord(
        record_id=doc.doc_id,
        operator=Operator(d["operator"]),
        date=str(d["date"]),
        clock_in_time=to_datetime(d["clock_in_time"]),
        clock_out_time=to_datetime(d.get("clock_out_time")),
        status=TimeRecordStatus(d["status"]),
        breaks=_breaks_from(d.get("breaks")),
        total_work_duration=_optional_int(d.get("total_work_duration")),
        total_break_duration=_optional_int(d.get("total_break_duration")),
        version=doc.version,
    )


def _latest_first(records: list[TimeRecord]) -> list[TimeRecord]:
    return sorted(records, key=lambda r: r.clock_in_time, reverse=True)


class DocumentTimeRecordRepository(TimeRecordRepository):
    def __init__(self, store: DocumentStore):
        self._store = store

    def get(self, record_id: str) -> Optional[TimeRecord]:
        doc = self._store.get(COLLECTION_TIME_RECORDS, record_id)
        return _from_document(doc) if doc else None

    def list_for_operator_and_date(self, operator: str, day: str) -> Sequence[TimeRecord]:
        docs = self._store.query(COLLECTION_TIME_RECORDS, where={"operator": operator, "date": day})
        return _latest_first([_from_document(d) for d in docs])

    def list_for_date(self, day: str) -> Sequence[TimeRecord]:
        docs = self._store.query(COLLECTION_TIME_RECORDS, where={"date": day})
        return _latest_first([_from_document(d) for d in docs])

    def list_between(self, start_day: Optional[str], end_day: Optional[str]) -> Sequence[TimeRecord]:
        docs = self._store.query(COLLECTION_TIME_RECORDS, order_by="clock_in_time", descending=True)
        records = [_from_document(d) for d in docs]
        # YYYY-MM-DD strings order the same way as the dates they encode.
        if start_day:
            records = [r for r in records if r.date >= start_day]
        if end_day:
            records = [r for r in records if r.date <= end_day]
        return _latest_first(records)

    def create(self, record: TimeRecord) -> TimeRecord:
        doc = self._store.create(COLLECTION_TIME_RECORDS, _to_document(record), doc_id=record.record_id or None)
        return replace(record, record_id=doc.doc_id, version=doc.version)

    def save(self, record: TimeRecord) -> TimeRecord:
        doc = self._store.update(
            COLLECTION_TIME_RECORDS,
            record.record_id,
            _to_document(record),
            expected_version=record.version,
        )
        return _from_document(doc)

    def delete(self, record_id: str) -> bool:
        return self._store.delete(COLLECTION_TIME_RECORDS, record_id)
