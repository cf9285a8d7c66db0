from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import CompanyProfile, Invoice


class CompanyProfileRepository(Protocol):
    def get(self, id: str) -> Optional[CompanyProfile]:
        raise NotImplementedError

    def list_recent(self) -> Sequence[CompanyProfile]:
        raise NotImplementedError

    def create(self, profile: CompanyProfile) -> CompanyProfile:
        raise NotImplementedError

    def save(self, profile: CompanyProfile) -> CompanyProfile:
        raise NotImplementedError

    def delete(self, id: str) -> bool:
        raise NotImplementedError


class InvoiceRepository(Protocol):
    def get(self, id: str) -> Optional[Invoice]:
        raise NotImplementedError

    def list_recent(self, *, company_profile_id: Optional[str] = None) -> Sequence[Invoice]:
        raise NotImplementedError

    def create(self, invoice: Invoice) -> Invoice:
        raise NotImplementedError

    def save(self, invoice: Invoice) -> Invoice:
        """Write `invoice` if the stored version still equals `invoice.version`."""

        raise NotImplementedError

    def delete(self, id: str) -> bool:
        raise NotImplementedError
