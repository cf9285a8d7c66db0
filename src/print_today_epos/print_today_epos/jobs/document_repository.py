from __future__ import annotations

from dataclasses import replace
from typing import Optional, Sequence

from ..common.datetime_utils import to_datetime
from ..common.financials import line_items_from_documents, line_items_to_documents, to_money
from ..core.constants import COLLECTION_JOB_SHEETS
from ..core.enums import JobSheetStatus, JobSheetType, Operator, PaymentStatus
from ..database.document_store import DocumentStore, StoredDocument
from ..history.model import history_from_documents, history_to_documents
from .model import JobSheet
from .repository import JobSheetRepository


def _to_document(s: JobSheet) -> dict:
    return {
        "job_id": s.job_id,
        "date": s.date,
        "operator": s.operator.value,
        "client_name": s.client_name,
        "company_name": s.company_name,
        "client_details": s.client_details,
        "items": line_items_to_documents(s.items),
        "sub_total": s.sub_total,
        "vat_amount": s.vat_amount,
        "total_amount": s.total_amount,
        "paid_amount": s.paid_amount,
        "due_amount": s.due_amount,
        "status": s.status.value,
        "payment_status": s.payment_status.value,
        "type": s.type.value,
        "special_note": s.special_note,
        "ir_number": s.ir_number,
        "invoice_number": s.invoice_number,
        "delivery_by": s.delivery_by,
        "tid": s.tid,
        "created_at": s.created_at,
        "history": history_to_documents(s.history),
    }


def _from_document(doc: StoredDocument) -> JobSheet:
    d = doc.data
    return JobSheet(
        id=doc.doc_id,
        job_id=str(d["job_id"]),
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
        status=JobSheetStatus(d["status"]),
        payment_status=PaymentStatus(d.get("payment_status") or PaymentStatus.UNPAID.value),
        type=JobSheetType(d.get("type") or JobSheetType.INVOICE.value),
        special_note=d.get("special_note"),
        ir_number=d.get("ir_number"),
        invoice_number=d.get("invoice_number"),
        delivery_by=to_datetime(d.get("delivery_by")),
        tid=d.get("tid"),
        created_at=to_datetime(d.get("created_at")),
        history=history_from_documents(d.get("history")),
        version=doc.version,
    )


class DocumentJobSheetRepository(JobSheetRepository):
    def __init__(self, store: DocumentStore):
        self._store = store

    def get(self, id: str) -> Optional[JobSheet]:
        doc = self._store.get(COLLECTION_JOB_SHEETS, id)
        return _from_document(doc) if doc else None

    def get_by_job_id(self, job_id: str) -> Optional[JobSheet]:
        docs = self._store.query(COLLECTION_JOB_SHEETS, where={"job_id": job_id}, limit=1)
        return _from_document(docs[0]) if docs else None

    def list_recent(self, limit: Optional[int] = None) -> Sequence[JobSheet]:
        docs = self._store.query(COLLECTION_JOB_SHEETS, order_by="created_at", descending=True, limit=limit)
        return [_from_document(d) for d in docs]

    def create(self, sheet: JobSheet) -> JobSheet:
        doc = self._store.create(COLLECTION_JOB_SHEETS, _to_document(sheet))
        return replace(sheet, id=doc.doc_id, version=doc.version)

    def save(self, sheet: JobSheet) -> JobSheet:
        doc = self._store.update(COLLECTION_JOB_SHEETS, sheet.id, _to_document(sheet), expected_version=sheet.version)
        return _from_document(doc)

    def delete(self, id: str) -> bool:
        return self._store.delete(COLLECTION_JOB_SHEETS, id)

    def update_payment_summary(self, id: str, *, paid_amount, due_amount, payment_status) -> JobSheet:
        doc = self._store.update(
            COLLECTION_JOB_SHEETS,
            id,
            {"paid_amount": paid_amount, "due_amount": due_amount, "payment_status": payment_status.value},
        )
        return _from_document(doc)
