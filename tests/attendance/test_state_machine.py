from __future__ import annotations

from datetime import datetime

import pytest

from src.print_today_epos.print_today_epos.attendance.model import BreakPeriod, TimeRecord
from src.print_today_epos.print_today_epos.attendance.state_machine import (
    AttendanceEvent,
    AttendanceState,
    compute_totals,
    live_view,
    state_of,
    transition,
    validate_structure,
)
from src.print_today_epos.print_today_epos.core.enums import Operator, TimeRecordStatus
from src.print_today_epos.print_today_epos.core.exceptions import (
    AlreadyClockedIn,
    AlreadyClockedOut,
    AlreadyOnBreak,
    CannotClockOutWhileOnBreak,
    NotOnBreak,
    StateTransitionError,
    ValidationError,
)

S = AttendanceState
E = AttendanceEvent


def _dt(hour: int, minute: int = 0) -> datetime:
    return datetime(2026, 3, 2, hour, minute)


@pytest.mark.parametrize(
    "state,event,expected",
    [
        (S.NOT_CLOCKED_IN, E.CLOCK_IN, S.CLOCKED_IN),
        (S.CLOCKED_IN, E.START_BREAK, S.ON_BREAK),
        (S.ON_BREAK, E.END_BREAK, S.CLOCKED_IN),
        (S.CLOCKED_IN, E.CLOCK_OUT, S.CLOCKED_OUT),
        (S.CLOCKED_OUT, E.CLOCK_IN, S.CLOCKED_IN),
    ],
)
def test_legal_transitions(state, event, expected):
    assert transition(state, event) == expected


@pytest.mark.parametrize(
    "state,event,exc",
    [
        (S.CLOCKED_IN, E.CLOCK_IN, AlreadyClockedIn),
        (S.ON_BREAK, E.CLOCK_IN, AlreadyClockedIn),
        (S.ON_BREAK, E.START_BREAK, AlreadyOnBreak),
        (S.CLOCKED_IN, E.END_BREAK, NotOnBreak),
        (S.ON_BREAK, E.CLOCK_OUT, CannotClockOutWhileOnBreak),
        (S.CLOCKED_OUT, E.CLOCK_OUT, AlreadyClockedOut),
        (S.CLOCKED_OUT, E.START_BREAK, AlreadyClockedOut),
        (S.NOT_CLOCKED_IN, E.CLOCK_OUT, StateTransitionError),
    ],
)
def test_illegal_transitions_raise_specific_errors(state, event, exc):
    with pytest.raises(exc):
        transition(state, event)


def test_state_of_missing_record_is_not_clocked_in():
    assert state_of(None) == S.NOT_CLOCKED_IN


def test_totals_subtract_completed_breaks():
    breaks = (BreakPeriod(start_time=_dt(12), end_time=_dt(12, 30)),)

    work, brk = compute_totals(_dt(9), _dt(17), breaks)

    assert (work, brk) == (450, 30)


def test_totals_are_floored_at_zero():
    breaks = (BreakPeriod(start_time=_dt(9), end_time=_dt(9, 30)),)

    work, brk = compute_totals(_dt(9), _dt(9, 10), breaks)

    assert work == 0
    assert brk == 30


def test_live_view_counts_the_open_break():
    record = TimeRecord(
        record_id="r1",
        operator=Operator.PTM,
        date="2026-03-02",
        clock_in_time=_dt(9),
        clock_out_time=None,
        status=TimeRecordStatus.ON_BREAK,
        breaks=(
            BreakPeriod(start_time=_dt(10), end_time=_dt(10, 15)),
            BreakPeriod(start_time=_dt(12)),
        ),
    )

    view = live_view(record, _dt(12, 10))

    assert view.elapsed_minutes == 190
    assert view.completed_break_minutes == 15
    assert view.current_break_minutes == 10
    assert view.work_minutes == 165


def test_live_view_of_closed_record_uses_stored_totals():
    record = TimeRecord(
        record_id="r1",
        operator=Operator.PTM,
        date="2026-03-02",
        clock_in_time=_dt(9),
        clock_out_time=_dt(17),
        status=TimeRecordStatus.CLOCKED_OUT,
        total_work_duration=450,
        total_break_duration=30,
    )

    view = live_view(record, _dt(22))

    assert view.work_minutes == 450
    assert view.current_break_minutes == 0


@pytest.mark.parametrize(
    "kwargs",
    [
        # two open breaks
        dict(
            clock_out_time=None,
            breaks=[BreakPeriod(_dt(10)), BreakPeriod(_dt(11))],
            status=TimeRecordStatus.ON_BREAK,
        ),
        # break ends before it starts
        dict(
            clock_out_time=_dt(17),
            breaks=[BreakPeriod(_dt(12), _dt(11))],
            status=TimeRecordStatus.CLOCKED_OUT,
        ),
        # break before clock-in
        dict(
            clock_out_time=_dt(17),
            breaks=[BreakPeriod(_dt(8), _dt(8, 30))],
            status=TimeRecordStatus.CLOCKED_OUT,
        ),
        dict(clock_out_time=_dt(8), breaks=[], status=TimeRecordStatus.CLOCKED_OUT),
        dict(clock_out_time=None, breaks=[], status=TimeRecordStatus.ON_BREAK),
        dict(clock_out_time=None, breaks=[BreakPeriod(_dt(10))], status=TimeRecordStatus.CLOCKED_IN),
        dict(clock_out_time=None, breaks=[], status=TimeRecordStatus.CLOCKED_OUT),
        # still open but carries a clock-out time
        dict(clock_out_time=_dt(17), breaks=[], status=TimeRecordStatus.CLOCKED_IN),
        dict(clock_out_time=_dt(17), breaks=[BreakPeriod(_dt(12))], status=TimeRecordStatus.ON_BREAK),
    ],
)
def test_validate_structure_rejects_inconsistent_records(kwargs):
    with pytest.raises(ValidationError):
        validate_structure(clock_in_time=_dt(9), **kwargs)


def test_validate_structure_accepts_a_consistent_day():
    validate_structure(
        clock_in_time=_dt(9),
        clock_out_time=_dt(17),
        breaks=[BreakPeriod(_dt(12), _dt(12, 30))],
        status=TimeRecordStatus.CLOCKED_OUT,
    )
