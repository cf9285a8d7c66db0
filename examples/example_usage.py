"""Example: drive the service layer directly (no Flask).

Uses the in-memory store, so nothing is written to MySQL.
"""

from datetime import datetime

from src.print_today_epos.print_today_epos.container import build_container
from src.print_today_epos.print_today_epos.logging_config import setup_logging


def main():
    setup_logging("WARNING")
    container = build_container(backend="memory")

    record = container.attendance_service.clock_in("PTM", now=datetime(2026, 3, 2, 9, 0))
    container.attendance_service.start_break(record.record_id, now=datetime(2026, 3, 2, 12, 0))
    container.attendance_service.end_break(record.record_id, now=datetime(2026, 3, 2, 12, 30))
    closed = container.attendance_service.clock_out(record.record_id, now=datetime(2026, 3, 2, 17, 0))
    print("worked", closed.total_work_duration, "min, break", closed.total_break_duration, "min")

    sheet = container.job_sheet_service.create(
        {
            "operator": "PTM",
            "client_name": "Acme Ltd",
            "items": [
                {"description": "Flyers A5", "quantity": 500, "price": 50, "vat_applied": True},
                {"description": "Design", "quantity": 1, "price": 20},
            ],
        }
    )
    print(sheet.job_id, "total", sheet.total_amount)

    container.payment_service.record_payment(sheet.id, "30", "Cash", "PTM")
    print(container.job_sheet_service.get(sheet.id).payment_status.value)


if __name__ == "__main__":
    main()
