from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Optional

from ..common.datetime_utils import format_hours
from ..core.enums import TimeRecordStatus
from .service import AttendanceService


@dataclass(frozen=True)
class ReportData:
    rows: list[dict]
    summary: list[dict]


class AttendanceReportService:
    def __init__(self, attendance: AttendanceService):
        self._attendance = attendance

    def build_report(
        self,
        *,
        start: Optional[date] = None,
        end: Optional[date] = None,
        operator: Any = None,
    ) -> ReportData:
        records = self._attendance.list_records(start_date=start, end_date=end, operator=operator)

        summary_map: dict[str, dict] = {}
        out_rows: list[dict] = []

        for r in records:
            # Open records have no totals yet and count as zero.
            minutes = int(r.total_work_duration or 0)
            break_minutes = int(r.total_break_duration or 0)

            out_rows.append(
                {
                    "record_id": r.record_id,
                    "operator": r.operator.value,
                    "date": r.date,
                    "clock_in": r.clock_in_time.strftime("%H:%M"),
                    "clock_out": r.clock_out_time.strftime("%H:%M") if r.clock_out_time else "-",
                    "break_hours": format_hours(break_minutes),
                    "worked_hours": format_hours(minutes),
                    "status": r.status.value,
                    "complete": r.status == TimeRecordStatus.CLOCKED_OUT,
                }
            )

            s = summary_map.get(r.operator.value)
            if not s:
                s = {"operator": r.operator.value, "days": 0, "total_minutes": 0}
                summary_map[r.operator.value] = s
            s["days"] += 1
            s["total_minutes"] += minutes

        summary = [
            {
                "operator": s["operator"],
                "days": s["days"],
                "total_minutes": s["total_minutes"],
                "total_hours": format_hours(s["total_minutes"]),
            }
            for s in summary_map.values()
        ]
        summary.sort(key=lambda x: x["total_minutes"], reverse=True)
        return ReportData(rows=out_rows, summary=summary)
