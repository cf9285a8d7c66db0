"""Attendance transitions and duration arithmetic.

The day's state for an operator is derived from their active record; the
legal moves are listed in TRANSITIONS and every other (state, event) pair is
rejected with the exception registered in REJECTIONS.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Iterable, Optional

from ..common.datetime_utils import whole_minutes
from ..core.enums import TimeRecordStatus
from ..core.exceptions import (
    AlreadyClockedIn,
    AlreadyClockedOut,
    AlreadyOnBreak,
    CannotClockOutWhileOnBreak,
    NotOnBreak,
    StateTransitionError,
    ValidationError,
)
from .model import BreakPeriod, TimeRecord, TimeRecordView


class AttendanceState(str, Enum):
    NOT_CLOCKED_IN = "not-clocked-in"
    CLOCKED_IN = "clocked-in"
    ON_BREAK = "on-break"
    CLOCKED_OUT = "clocked-out"


class AttendanceEvent(str, Enum):
    CLOCK_IN = "clock-in"
    START_BREAK = "start-break"
    END_BREAK = "end-break"
    CLOCK_OUT = "clock-out"


S = AttendanceState
E = AttendanceEvent

TRANSITIONS: dict[tuple[AttendanceState, AttendanceEvent], AttendanceState] = {
    (S.NOT_CLOCKED_IN, E.CLOCK_IN): S.CLOCKED_IN,
    (S.CLOCKED_IN, E.START_BREAK): S.ON_BREAK,
    (S.CLOCKED_IN, E.CLOCK_OUT): S.CLOCKED_OUT,
    (S.ON_BREAK, E.END_BREAK): S.CLOCKED_IN,
    # A closed day does not block a fresh record for the same day.
    (S.CLOCKED_OUT, E.CLOCK_IN): S.CLOCKED_IN,
}

REJECTIONS: dict[tuple[AttendanceState, AttendanceEvent], tuple[type[StateTransitionError], str]] = {
    (S.NOT_CLOCKED_IN, E.START_BREAK): (StateTransitionError, "You are not clocked in."),
    (S.NOT_CLOCKED_IN, E.END_BREAK): (StateTransitionError, "You are not clocked in."),
    (S.NOT_CLOCKED_IN, E.CLOCK_OUT): (StateTransitionError, "You are not clocked in."),
    (S.CLOCKED_IN, E.CLOCK_IN): (AlreadyClockedIn, "You are already clocked in for today."),
    (S.CLOCKED_IN, E.END_BREAK): (NotOnBreak, "You are not on a break."),
    (S.ON_BREAK, E.CLOCK_IN): (AlreadyClockedIn, "You are already clocked in for today."),
    (S.ON_BREAK, E.START_BREAK): (AlreadyOnBreak, "You are already on a break."),
    (S.ON_BREAK, E.CLOCK_OUT): (CannotClockOutWhileOnBreak, "Please end your break before clocking out."),
    (S.CLOCKED_OUT, E.START_BREAK): (AlreadyClockedOut, "You have already clocked out."),
    (S.CLOCKED_OUT, E.END_BREAK): (AlreadyClockedOut, "You have already clocked out."),
    (S.CLOCKED_OUT, E.CLOCK_OUT): (AlreadyClockedOut, "You have already clocked out."),
}


def transition(state: AttendanceState, event: AttendanceEvent) -> AttendanceState:
    target = TRANSITIONS.get((state, event))
    if target is not None:
        return target
    exc_cls, message = REJECTIONS.get((state, event), (StateTransitionError, "Action not allowed."))
    raise exc_cls(message)


def state_of(record: Optional[TimeRecord]) -> AttendanceState:
    if record is None:
        return AttendanceState.NOT_CLOCKED_IN
    return AttendanceState(record.status.value)


def status_for(state: AttendanceState) -> TimeRecordStatus:
    return TimeRecordStatus(state.value)


def completed_break_minutes(breaks: Iterable[BreakPeriod]) -> int:
    return sum(whole_minutes(b.start_time, b.end_time) for b in breaks if b.end_time is not None)


def compute_totals(clock_in: datetime, clock_out: datetime, breaks: Iterable[BreakPeriod]) -> tuple[int, int]:
    """(total_work_duration, total_break_duration) in whole minutes, floored at zero."""
    break_minutes = max(0, completed_break_minutes(breaks))
    work_minutes = max(0, whole_minutes(clock_in, clock_out) - break_minutes)
    return work_minutes, break_minutes


def live_view(record: TimeRecord, as_of: datetime) -> TimeRecordView:
    if record.status == TimeRecordStatus.CLOCKED_OUT:
        work = record.total_work_duration
        brk = record.total_break_duration
        if work is None or brk is None:
            work, brk = compute_totals(record.clock_in_time, record.clock_out_time or as_of, record.breaks)
        end = record.clock_out_time or as_of
        return TimeRecordView(
            record=record,
            as_of=as_of,
            elapsed_minutes=max(0, whole_minutes(record.clock_in_time, end)),
            completed_break_minutes=brk,
            current_break_minutes=0,
            work_minutes=work,
        )

    elapsed = max(0, whole_minutes(record.clock_in_time, as_of))
    completed = completed_break_minutes(record.breaks)
    open_break = record.open_break
    current = max(0, whole_minutes(open_break.start_time, as_of)) if open_break else 0
    return TimeRecordView(
        record=record,
        as_of=as_of,
        elapsed_minutes=elapsed,
        completed_break_minutes=completed,
        current_break_minutes=current,
        work_minutes=max(0, elapsed - completed - current),
    )


def validate_structure(
    *,
    clock_in_time: datetime,
    clock_out_time: Optional[datetime],
    breaks: Iterable[BreakPeriod],
    status: TimeRecordStatus,
) -> None:
    """Shape checks for records written outside the transition table."""

    breaks = list(breaks)
    open_breaks = [b for b in breaks if b.is_open]
    if len(open_breaks) > 1:
        raise ValidationError("A record can have at most one open break.")
    for b in breaks:
        if b.end_time is not None and b.end_time < b.start_time:
            raise ValidationError("Break end time cannot be before its start time.")
        if b.start_time < clock_in_time:
            raise ValidationError("Breaks cannot start before clock-in.")
    if clock_out_time is not None and clock_out_time < clock_in_time:
        raise ValidationError("Clock-out time cannot be before clock-in time.")

    if status == TimeRecordStatus.ON_BREAK and not open_breaks:
        raise ValidationError("Status 'on-break' requires an open break.")
    if status != TimeRecordStatus.ON_BREAK and open_breaks:
        raise ValidationError("An open break is only allowed while on break.")
    if status == TimeRecordStatus.CLOCKED_OUT and clock_out_time is None:
        raise ValidationError("Status 'clocked-out' requires a clock-out time.")
    if status != TimeRecordStatus.CLOCKED_OUT and clock_out_time is not None:
        raise ValidationError("Only a clocked-out record can have a clock-out time.")
