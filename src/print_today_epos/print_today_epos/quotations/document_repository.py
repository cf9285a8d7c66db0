from __future__ import annotations

from dataclasses import replace
from typing import Optional, Sequence

from ..common.datetime_utils import to_datetime
from ..common.financials import line_items_from_documents, line_items_to_documents, to_money
from ..core.constants import COLLECTION_QUOTATIONS
from ..core.enums import JobSheetType, Operator, PaymentStatus, QuotationStatus
from ..database.document_store import DocumentStore, StoredDocument
from ..history.model import history_from_documents, history_to_documents
from .model import Quotation
from .repository import QuotationRepository


def _to_document(q: Quotation) -> dict:
    return {
        "quotation_id": q.quotation_id,
        "date": q.date,
        "operator": q.operator.value,
        "client_name": q.client_name,
        "company_name": q.company_name,
        "client_details": q.client_details,
        "items": line_items_to_documents(q.items),
        "sub_total": q.sub_total,
        "vat_amount": q.vat_amount,
        "total_amount": q.total_amount,
        "paid_amount": q.paid_amount,
        "due_amount": q.due_amount,
        "status": q.status.value,
        "payment_status": q.payment_status.value,
        "type": q.type.value,
        "special_note": q.special_note,
        "ir_number": q.ir_number,
        "invoice_number": q.invoice_number,
        "delivery_by": q.delivery_by,
        "tid": q.tid,
        "jid": q.jid,
        "created_at": q.created_at,
        "history": history_to_documents(q.history),
    }


def _from_document(doc: StoredDocument) -> Quotation:
    d = doc.data
    return Quotation(
        id=doc.doc_id,
        quotation_id=str(d["quotation_id"]),
        date=to_datetime(d["date"]),
        operator=Operator(d["operator"]),
        client_name=str(d.get("client_name") or ""),
        company_name=d.get("company_name"),
        client_details=d.get("client_details"),
        items=line_items_from_documents(d.get("items")),
        sub_total=to_money(d.get("sub_total")),
        vat_amount=to_money(d.get("vat_amount")),
        total_amount=to_money(d.get("total_amount")),
        paid_amount=to_money(d.get("paid_amount")),
        due_amount=to_money(d.get("due_amount")),
        status=QuotationStatus(d["status"]),
        payment_status=PaymentStatus(d.get("payment_status") or PaymentStatus.UNPAID.value),
        type=JobSheetType(d.get("type") or JobSheetType.QUOTATION.value),
        special_note=d.get("special_note"),
        ir_number=d.get("ir_number"),
        invoice_number=d.get("invoice_number"),
        delivery_by=to_datetime(d.get("delivery_by")),
        tid=d.get("tid"),
        jid=d.get("jid"),
        created_at=to_datetime(d.get("created_at")),
        history=history_from_documents(d.get("history")),
        version=doc.version,
    )


class DocumentQuotationRepository(QuotationRepository):
    def __init__(self, store: DocumentStore):
        self._store = store

    def get(self, id: str) -> Optional[Quotation]:
        doc = self._store.get(COLLECTION_QUOTATIONS, id)
        return _from_document(doc) if doc else None

    def get_by_quotation_id(self, quotation_id: str) -> Optional[Quotation]:
        docs = self._store.query(COLLECTION_QUOTATIONS, where={"quotation_id": quotation_id}, limit=1)
        return _from_document(docs[0]) if docs else None

    def get_by_jid(self, job_id: str) -> Optional[Quotation]:
        docs = self._store.query(COLLECTION_QUOTATIONS, where={"jid": job_id}, limit=1)
        return _from_document(docs[0]) if docs else None

    def list_recent(self, limit: Optional[int] = None) -> Sequence[Quotation]:
        docs = self._store.query(COLLECTION_QUOTATIONS, order_by="created_at", descending=True, limit=limit)
        return [_from_document(d) for d in docs]

    def create(self, quotation: Quotation) -> Quotation:
        doc = self._store.create(COLLECTION_QUOTATIONS, _to_document(quotation))
        return replace(quotation, id=doc.doc_id, version=doc.version)

    def save(self, quotation: Quotation) -> Quotation:
        doc = self._store.update(
            COLLECTION_QUOTATIONS,
            quotation.id,
            _to_document(quotation),
            expected_version=quotation.version,
        )
        return _from_document(doc)

    def delete(self, id: str) -> bool:
        return self._store.delete(COLLECTION_QUOTATIONS, id)
