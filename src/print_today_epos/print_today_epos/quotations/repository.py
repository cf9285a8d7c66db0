from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Quotation


class QuotationRepository(Protocol):
    def get(self, id: str) -> Optional[Quotation]:
        raise NotImplementedError

    def get_by_quotation_id(self, quotation_id: str) -> Optional[Quotation]:
        raise NotImplementedError

    def get_by_jid(self, job_id: str) -> Optional[Quotation]:
        """The quotation converted into job sheet `job_id`, if any."""

        raise NotImplementedError

    def list_recent(self, limit: Optional[int] = None) -> Sequence[Quotation]:
        raise NotImplementedError

    def create(self, quotation: Quotation) -> Quotation:
        raise NotImplementedError

    def save(self, quotation: Quotation) -> Quotation:
        raise NotImplementedError

    def delete(self, id: str) -> bool:
        raise NotImplementedError
