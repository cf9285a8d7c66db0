from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from typing import Any, Iterable, Mapping, Optional, Sequence

import structlog

from ..common.datetime_utils import day_string, to_datetime
from ..common.validators import require_enum
from ..core.enums import Operator, TimeRecordStatus
from ..core.exceptions import (
    ConcurrentModificationError,
    DocumentExistsError,
    NotFoundError,
    ValidationError,
)
from .model import BreakPeriod, TimeRecord, TimeRecordView
from .repository import TimeRecordRepository
from .state_machine import (
    AttendanceEvent,
    AttendanceState,
    compute_totals,
    live_view,
    state_of,
    status_for,
    transition,
    validate_structure,
)

log = structlog.get_logger(__name__)

CLOCK_IN_ATTEMPTS = 5


def _next_slot(operator: Operator, day: str, records: Iterable[TimeRecord]) -> int:
    prefix = f"{operator.value}:{day}:"
    taken = [
        int(r.record_id[len(prefix):])
        for r in records
        if r.record_id.startswith(prefix) and r.record_id[len(prefix):].isdigit()
    ]
    return max(taken, default=0) + 1


def parse_breaks(raw: Any) -> tuple[BreakPeriod, ...]:
    """Accept BreakPeriod objects or {"start_time", "end_time"} mappings."""

    out: list[BreakPeriod] = []
    for b in raw or []:
        if isinstance(b, BreakPeriod):
            out.append(b)
            continue
        if not isinstance(b, Mapping):
            raise ValidationError("Each break must be an object.")
        try:
            start = to_datetime(b.get("start_time", b.get("startTime")))
            end = to_datetime(b.get("end_time", b.get("endTime")))
        except (TypeError, ValueError):
            raise ValidationError("Invalid break time.")
        if start is None:
            raise ValidationError("Break start time is required.")
        out.append(BreakPeriod(start_time=start, end_time=end))
    return tuple(out)


def _require_time(value: Any, field_name: str) -> datetime:
    try:
        parsed = to_datetime(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid {field_name}.")
    if parsed is None:
        raise ValidationError(f"{field_name} is required.")
    return parsed


def _optional_time(value: Any, field_name: str) -> Optional[datetime]:
    try:
        return to_datetime(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid {field_name}.")


class AttendanceService:
    def __init__(self, records: TimeRecordRepository):
        self._records = records

    def _get_or_raise(self, record_id: str) -> TimeRecord:
        record = self._records.get(record_id)
        if not record:
            raise NotFoundError("Time record not found.")
        return record

    def clock_in(self, operator: Any, *, now: datetime | None = None) -> TimeRecord:
        now = now or datetime.now()
        op = require_enum(operator, Operator, "operator")
        day = day_string(now)

        # Record ids are "{operator}:{day}:{n}". Two callers racing for the same
        # n collide in the store and the loser re-reads the day.
        slot = 0
        for _ in range(CLOCK_IN_ATTEMPTS):
            records = self._records.list_for_operator_and_date(op.value, day)
            active = next((r for r in records if r.status != TimeRecordStatus.CLOCKED_OUT), None)
            next_state = transition(state_of(active), AttendanceEvent.CLOCK_IN)
            slot = max(slot + 1, _next_slot(op, day, records))
            try:
                record = self._records.create(
                    TimeRecord(
                        record_id=f"{op.value}:{day}:{slot}",
                        operator=op,
                        date=day,
                        clock_in_time=now,
                        clock_out_time=None,
                        status=status_for(next_state),
                    )
                )
            except DocumentExistsError:
                log.info("clock_in_slot_taken", operator=op.value, slot=slot)
                continue
            log.info("clock_in", operator=op.value, record_id=record.record_id)
            return record
        raise ConcurrentModificationError(f"Could not clock in {op.value}: too many concurrent attempts.")

    def start_break(self, record_id: str, *, now: datetime | None = None) -> TimeRecord:
        now = now or datetime.now()
        record = self._get_or_raise(record_id)
        next_state = transition(state_of(record), AttendanceEvent.START_BREAK)

        saved = self._records.save(
            replace(
                record,
                status=status_for(next_state),
                breaks=record.breaks + (BreakPeriod(start_time=now),),
            )
        )
        log.info("break_started", operator=saved.operator.value, record_id=record_id)
        return saved

    def end_break(self, record_id: str, *, now: datetime | None = None) -> TimeRecord:
        now = now or datetime.now()
        record = self._get_or_raise(record_id)
        next_state = transition(state_of(record), AttendanceEvent.END_BREAK)

        breaks = tuple(replace(b, end_time=now) if b.is_open else b for b in record.breaks)
        saved = self._records.save(replace(record, status=status_for(next_state), breaks=breaks))
        log.info("break_ended", operator=saved.operator.value, record_id=record_id)
        return saved

    def clock_out(self, record_id: str, *, now: datetime | None = None) -> TimeRecord:
        now = now or datetime.now()
        record = self._get_or_raise(record_id)
        next_state = transition(state_of(record), AttendanceEvent.CLOCK_OUT)

        work, brk = compute_totals(record.clock_in_time, now, record.breaks)
        saved = self._records.save(
            replace(
                record,
                status=status_for(next_state),
                clock_out_time=now,
                total_work_duration=work,
                total_break_duration=brk,
            )
        )
        log.info(
            "clock_out",
            operator=saved.operator.value,
            record_id=record_id,
            work_minutes=work,
            break_minutes=brk,
        )
        return saved

    def get_operator_status(self, operator: Any, *, as_of: datetime | None = None) -> Optional[TimeRecordView]:
        """Latest record of the day for `operator`, with live durations."""

        as_of = as_of or datetime.now()
        op = require_enum(operator, Operator, "operator")
        records = self._records.list_for_operator_and_date(op.value, day_string(as_of))
        if not records:
            return None
        return live_view(records[0], as_of)

    def get_live_statuses(self, *, as_of: datetime | None = None) -> dict[Operator, AttendanceState]:
        as_of = as_of or datetime.now()
        latest: dict[Operator, TimeRecord] = {}
        for r in self._records.list_for_date(day_string(as_of)):
            if r.operator not in latest or r.clock_in_time > latest[r.operator].clock_in_time:
                latest[r.operator] = r
        return {op: state_of(latest.get(op)) for op in Operator}

    def _build_checked(
        self,
        *,
        clock_in_time: Any,
        clock_out_time: Any,
        breaks: Any,
        status: Any,
    ) -> tuple[datetime, Optional[datetime], tuple[BreakPeriod, ...], TimeRecordStatus, Optional[int], Optional[int]]:
        cin = _require_time(clock_in_time, "Clock-in time")
        cout = _optional_time(clock_out_time, "Clock-out time")
        parsed_breaks = parse_breaks(breaks)
        if status is None or status == "":
            if cout is not None:
                st = TimeRecordStatus.CLOCKED_OUT
            elif any(b.is_open for b in parsed_breaks):
                st = TimeRecordStatus.ON_BREAK
            else:
                st = TimeRecordStatus.CLOCKED_IN
        else:
            st = require_enum(status, TimeRecordStatus, "status")

        validate_structure(clock_in_time=cin, clock_out_time=cout, breaks=parsed_breaks, status=st)

        work: Optional[int] = None
        brk: Optional[int] = None
        if cout is not None:
            work, brk = compute_totals(cin, cout, parsed_breaks)
        return cin, cout, parsed_breaks, st, work, brk

    def admin_update_record(
        self,
        record_id: str,
        *,
        clock_in_time: Any,
        clock_out_time: Any = None,
        breaks: Iterable[Any] = (),
        status: Any = None,
    ) -> TimeRecord:
        """Direct override of times, breaks and status; no transition guards."""

        record = self._get_or_raise(record_id)
        cin, cout, parsed_breaks, st, work, brk = self._build_checked(
            clock_in_time=clock_in_time, clock_out_time=clock_out_time, breaks=breaks, status=status
        )
        saved = self._records.save(
            replace(
                record,
                clock_in_time=cin,
                clock_out_time=cout,
                breaks=parsed_breaks,
                status=st,
                total_work_duration=work,
                total_break_duration=brk,
            )
        )
        log.info("time_record_overridden", record_id=record_id, operator=saved.operator.value, status=st.value)
        return saved

    def create_manual_record(
        self,
        operator: Any,
        *,
        clock_in_time: Any,
        clock_out_time: Any = None,
        breaks: Iterable[Any] = (),
        status: Any = None,
    ) -> TimeRecord:
        """Back-dated record; skips the one-active-record-per-day guard."""

        op = require_enum(operator, Operator, "operator")
        cin, cout, parsed_breaks, st, work, brk = self._build_checked(
            clock_in_time=clock_in_time, clock_out_time=clock_out_time, breaks=breaks, status=status
        )
        record = self._records.create(
            TimeRecord(
                record_id="",
                operator=op,
                date=day_string(cin),
                clock_in_time=cin,
                clock_out_time=cout,
                status=st,
                breaks=parsed_breaks,
                total_work_duration=work,
                total_break_duration=brk,
            )
        )
        log.info("time_record_created_manually", record_id=record.record_id, operator=op.value)
        return record

    def list_records(
        self,
        *,
        start_date: date | None = None,
        end_date: date | None = None,
        operator: Any = None,
    ) -> Sequence[TimeRecord]:
        if start_date and end_date and end_date < start_date:
            raise ValidationError("End date cannot be before start date.")
        records = self._records.list_between(
            day_string(start_date) if start_date else None,
            day_string(end_date) if end_date else None,
        )
        if operator:
            op = require_enum(operator, Operator, "operator")
            records = [r for r in records if r.operator == op]
        return list(records)

    def delete_record(self, record_id: str) -> None:
        if not self._records.delete(record_id):
            raise NotFoundError("Time record not found.")
        log.info("time_record_deleted", record_id=record_id)
