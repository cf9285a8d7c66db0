from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import JobSheet


class JobSheetRepository(Protocol):
    def get(self, id: str) -> Optional[JobSheet]:
        raise NotImplementedError

    def get_by_job_id(self, job_id: str) -> Optional[JobSheet]:
        raise NotImplementedError

    def list_recent(self, limit: Optional[int] = None) -> Sequence[JobSheet]:
        """Newest first by creation time."""

        raise NotImplementedError

    def create(self, sheet: JobSheet) -> JobSheet:
        raise NotImplementedError

    def save(self, sheet: JobSheet) -> JobSheet:
        """Compare-and-swap write against `sheet.version`."""

        raise NotImplementedError

    def delete(self, id: str) -> bool:
        raise NotImplementedError

    def update_payment_summary(self, id: str, *, paid_amount, due_amount, payment_status) -> JobSheet:
        """Overwrite only the derived payment fields (no version check)."""

        raise NotImplementedError
