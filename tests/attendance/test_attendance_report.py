from __future__ import annotations

from datetime import date, datetime

from src.print_today_epos.print_today_epos.attendance.model import TimeRecord
from src.print_today_epos.print_today_epos.attendance.report import AttendanceReportService
from src.print_today_epos.print_today_epos.core.enums import Operator, TimeRecordStatus


class FakeAttendanceService:
    def __init__(self, records):
        self._records = records
        self.last_args = None

    def list_records(self, *, start_date=None, end_date=None, operator=None):
        self.last_args = {"start_date": start_date, "end_date": end_date, "operator": operator}
        return self._records


def _closed(record_id, operator, day, work, brk):
    return TimeRecord(
        record_id=record_id,
        operator=operator,
        date=f"2026-03-{day:02d}",
        clock_in_time=datetime(2026, 3, day, 9, 0),
        clock_out_time=datetime(2026, 3, day, 17, 0),
        status=TimeRecordStatus.CLOCKED_OUT,
        total_work_duration=work,
        total_break_duration=brk,
    )


def test_report_rows_and_summary():
    records = [
        _closed("a", Operator.PTM, 2, 450, 30),
        _closed("b", Operator.PTM, 3, 480, 0),
        _closed("c", Operator.PTRK, 2, 300, 60),
    ]
    svc = AttendanceReportService(FakeAttendanceService(records))

    report = svc.build_report(start=date(2026, 3, 1), end=date(2026, 3, 31))

    assert report.rows[0]["worked_hours"] == "07:30"
    assert report.rows[0]["break_hours"] == "00:30"
    assert report.rows[0]["clock_in"] == "09:00"
    assert report.summary[0]["operator"] == "PTM"
    assert report.summary[0]["total_hours"] == "15:30"
    assert report.summary[0]["days"] == 2
    assert report.summary[1]["operator"] == "PTRK"


def test_open_record_counts_as_zero():
    open_record = TimeRecord(
        record_id="x",
        operator=Operator.PTASH,
        date="2026-03-02",
        clock_in_time=datetime(2026, 3, 2, 9, 0),
        clock_out_time=None,
        status=TimeRecordStatus.CLOCKED_IN,
    )
    svc = AttendanceReportService(FakeAttendanceService([open_record]))

    report = svc.build_report()

    assert report.rows[0]["clock_out"] == "-"
    assert report.rows[0]["complete"] is False
    assert report.summary[0]["total_minutes"] == 0


def test_report_forwards_operator_filter():
    fake = FakeAttendanceService([])
    svc = AttendanceReportService(fake)

    svc.build_report(start=date(2026, 3, 1), end=date(2026, 3, 31), operator="PTM")

    assert fake.last_args["operator"] == "PTM"
    assert fake.last_args["start_date"] == date(2026, 3, 1)
