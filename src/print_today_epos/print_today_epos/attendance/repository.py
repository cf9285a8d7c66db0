from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import TimeRecord


class TimeRecordRepository(Protocol):
    def get(self, record_id: str) -> Optional[TimeRecord]:
        raise NotImplementedError

    def list_for_operator_and_date(self, operator: str, day: str) -> Sequence[TimeRecord]:
        """All records of one operator for one day, latest clock-in first."""

        raise NotImplementedError

    def list_for_date(self, day: str) -> Sequence[TimeRecord]:
        raise NotImplementedError

    def list_between(self, start_day: Optional[str], end_day: Optional[str]) -> Sequence[TimeRecord]:
        """Records whose day falls in the inclusive range, latest clock-in first."""

        raise NotImplementedError

    def create(self, record: TimeRecord) -> TimeRecord:
        """Persist a new record; the returned copy carries the store id and version.

        A non-empty `record.record_id` is used as the id and raises
        DocumentExistsError when that id is taken.
        """

        raise NotImplementedError

    def save(self, record: TimeRecord) -> TimeRecord:
        """Write `record` if the stored version still equals `record.version`."""

        raise NotImplementedError

    def delete(self, record_id: str) -> bool:
        raise NotImplementedError
