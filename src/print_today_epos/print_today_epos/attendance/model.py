from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import Operator, TimeRecordStatus


@dataclass(frozen=True)
class BreakPeriod:
    start_time: datetime
    end_time: Optional[datetime] = None

    @property
    def is_open(self) -> bool:
        return self.end_time is None


@dataclass(frozen=True)
class TimeRecord:
    """Domain entity: one operator's attendance for one calendar day.

    `date` is fixed at creation (YYYY-MM-DD of the clock-in). Totals stay None
    until the record is closed or written through the admin paths.
    """

    record_id: str
    operator: Operator
    date: str
    clock_in_time: datetime
    clock_out_time: Optional[datetime]
    status: TimeRecordStatus
    breaks: tuple[BreakPeriod, ...] = ()
    total_work_duration: Optional[int] = None
    total_break_duration: Optional[int] = None
    version: int = 1

    @property
    def open_break(self) -> Optional[BreakPeriod]:
        for b in self.breaks:
            if b.is_open:
                return b
        return None


@dataclass(frozen=True)
class TimeRecordView:
    """Read-model for status displays; durations are whole minutes as of `as_of`."""

    record: TimeRecord
    as_of: datetime
    elapsed_minutes: int
    completed_break_minutes: int
    current_break_minutes: int
    work_minutes: int
