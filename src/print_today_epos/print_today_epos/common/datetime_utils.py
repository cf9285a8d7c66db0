from __future__ import annotations

from datetime import date, datetime, time
from typing import Any, Optional


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def day_string(value: datetime | date) -> str:
    """Calendar day key stored on time records (YYYY-MM-DD)."""
    return value.strftime("%Y-%m-%d")


def to_datetime(value: Any) -> Optional[datetime]:
    """Normalize timestamps read from the store or a request body.

    Accepts:
    - datetime.datetime (returned as-is, timezone info dropped to local naive)
    - datetime.date (midnight)
    - ISO-8601 strings ('2026-02-01T09:00:00', '2026-02-01', trailing 'Z')
    - store timestamp mappings ({"seconds": ..., "nanoseconds": ...})
    """

    if value is None or value == "":
        return None

    if isinstance(value, datetime):
        if value.tzinfo is not None:
            return value.astimezone().replace(tzinfo=None)
        return value

    if isinstance(value, date):
        return datetime.combine(value, time.min)

    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            raise ValueError(f"Invalid timestamp string: {value!r}")
        return to_datetime(parsed)

    if isinstance(value, dict) and "seconds" in value:
        seconds = float(value["seconds"]) + float(value.get("nanoseconds", 0)) / 1e9
        return datetime.fromtimestamp(seconds)

    raise TypeError(f"Unsupported timestamp value type: {type(value)!r}")


def whole_minutes(start: datetime, end: datetime) -> int:
    """Whole minutes between two instants, truncated toward zero."""
    return int((end - start).total_seconds() / 60)


def format_day(value: Optional[datetime | date], *, empty: str = "N/A") -> str:
    """Human date used in history messages (dd/mm/yyyy)."""
    if value is None:
        return empty
    return value.strftime("%d/%m/%Y")


def format_hours(minutes: int) -> str:
    minutes = max(int(minutes), 0)
    return f"{minutes // 60:02d}:{minutes % 60:02d}"
