from __future__ import annotations

from dataclasses import replace
from decimal import Decimal
from typing import Optional, Sequence

from ..common.datetime_utils import to_datetime
from ..common.financials import line_items_from_documents, line_items_to_documents, to_money
from ..core.constants import COLLECTION_COMPANY_PROFILES, COLLECTION_INVOICES
from ..core.enums import DiscountType, InvoiceStatus
from ..database.document_store import DocumentStore, StoredDocument
from .model import CompanyProfile, Invoice
from .repository import CompanyProfileRepository, InvoiceRepository


def _profile_to_document(p: CompanyProfile) -> dict:
    return {
        "name": p.name,
        "address": p.address,
        "email": p.email,
        "website": p.website,
        "logo_url": p.logo_url,
        "bank_details": p.bank_details,
        "created_at": p.created_at,
    }


def _profile_from_document(doc: StoredDocument) -> CompanyProfile:
    d = doc.data
    return CompanyProfile(
        id=doc.doc_id,
        name=str(d.get("name") or ""),
        address=d.get("address"),
        email=d.get("email"),
        website=d.get("website"),
        logo_url=d.get("logo_url"),
        bank_details=d.get("bank_details"),
        created_at=to_datetime(d.get("created_at")),
        version=doc.version,
    )


def _invoice_to_document(i: Invoice) -> dict:
    return {
        "invoice_id": i.invoice_id,
        "company_profile_id": i.company_profile_id,
        "client_name": i.client_name,
        "client_address": i.client_address,
        "date": i.date,
        "due_date": i.due_date,
        "items": line_items_to_documents(i.items),
        "sub_total": i.sub_total,
        "discount_type": i.discount_type.value,
        "discount_value": i.discount_value,
        "discount_amount": i.discount_amount,
        "sub_total_after_discount": i.sub_total_after_discount,
        "vat_amount": i.vat_amount,
        "total_amount": i.total_amount,
        "status": i.status.value,
        "notes": i.notes,
        "created_at": i.created_at,
    }


def _invoice_from_document(doc: StoredDocument) -> Invoice:
    d = doc.data
    return Invoice(
        id=doc.doc_id,
        invoice_id=str(d["invoice_id"]),
        company_profile_id=str(d.get("company_profile_id") or ""),
        client_name=str(d.get("client_name") or ""),
        client_address=d.get("client_address"),
        date=to_datetime(d["date"]),
        due_date=to_datetime(d["due_date"]),
        items=line_items_from_documents(d.get("items")),
        sub_total=to_money(d.get("sub_total")),
        discount_type=DiscountType(d.get("discount_type") or DiscountType.AMOUNT.value),
        discount_value=Decimal(str(d.get("discount_value") or 0)),
        discount_amount=to_money(d.get("discount_amount")),
        sub_total_after_discount=to_money(d.get("sub_total_after_discount")),
        vat_amount=to_money(d.get("vat_amount")),
        total_amount=to_money(d.get("total_amount")),
        status=InvoiceStatus(d.get("status") or InvoiceStatus.DRAFT.value),
        notes=d.get("notes"),
        created_at=to_datetime(d.get("created_at")),
        version=doc.version,
    )


class DocumentCompanyProfileRepository(CompanyProfileRepository):
    def __init__(self, store: DocumentStore):
        self._store = store

    def get(self, id: str) -> Optional[CompanyProfile]:
        doc = self._store.get(COLLECTION_COMPANY_PROFILES, id)
        return _profile_from_document(doc) if doc else None

    def list_recent(self) -> Sequence[CompanyProfile]:
        docs = self._store.query(COLLECTION_COMPANY_PROFILES, order_by="created_at", descending=True)
        return [_profile_from_document(d) for d in docs]

    def create(self, profile: CompanyProfile) -> CompanyProfile:
        doc = self._store.create(COLLECTION_COMPANY_PROFILES, _profile_to_document(profile))
        return replace(profile, id=doc.doc_id, version=doc.version)

    def save(self, profile: CompanyProfile) -> CompanyProfile:
        doc = self._store.update(
            COLLECTION_COMPANY_PROFILES,
            profile.id,
            _profile_to_document(profile),
            expected_version=profile.version,
        )
        return _profile_from_document(doc)

    def delete(self, id: str) -> bool:
        return self._store.delete(COLLECTION_COMPANY_PROFILES, id)


class DocumentInvoiceRepository(InvoiceRepository):
    def __init__(self, store: DocumentStore):
        self._store = store

    def get(self, id: str) -> Optional[Invoice]:
        doc = self._store.get(COLLECTION_INVOICES, id)
        return _invoice_from_document(doc) if doc else None

    def list_recent(self, *, company_profile_id: Optional[str] = None) -> Sequence[Invoice]:
        where = {"company_profile_id": company_profile_id} if company_profile_id else None
        docs = self._store.query(COLLECTION_INVOICES, where=where, order_by="created_at", descending=True)
        return [_invoice_from_document(d) for d in docs]

    def create(self, invoice: Invoice) -> Invoice:
        doc = self._store.create(COLLECTION_INVOICES, _invoice_to_document(invoice))
        return replace(invoice, id=doc.doc_id, version=doc.version)

    def save(self, invoice: Invoice) -> Invoice:
        doc = self._store.update(
            COLLECTION_INVOICES,
            invoice.id,
            _invoice_to_document(invoice),
            expected_version=invoice.version,
        )
        return _invoice_from_document(doc)

    def delete(self, id: str) -> bool:
        return self._store.delete(COLLECTION_INVOICES, id)
