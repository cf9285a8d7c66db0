from __future__ import annotations

from dataclasses import replace
from typing import Optional, Sequence

from ..common.datetime_utils import to_datetime
from ..common.financials import to_money
from ..core.constants import COLLECTION_TRANSACTIONS
from ..core.enums import Operator, PaymentMethod, TransactionType
from ..database.document_store import DocumentStore, StoredDocument
from .model import Transaction
from .repository import TransactionRepository


def _to_document(t: Transaction) -> dict:
    return {
        "transaction_id": t.transaction_id,
        "type": t.type.value,
        "date": t.date,
        "client_name": t.client_name,
        "job_description": t.job_description,
        "invoice_number": t.invoice_number,
        "jid": t.jid,
        "amount": t.amount,
        "vat_applied": t.vat_applied,
        "total_amount": t.total_amount,
        "paid_amount": t.paid_amount,
        "due_amount": t.due_amount,
        "payment_method": t.payment_method.value,
        "reference": t.reference,
        "operator": t.operator.value,
        "admin_checked": t.admin_checked,
        "checked_by": t.checked_by,
        "created_at": t.created_at,
    }


def _from_document(doc: StoredDocument) -> Transaction:
    d = doc.data
    return Transaction(
        id=doc.doc_id,
        transaction_id=str(d["transaction_id"]),
        type=TransactionType(d["type"]),
        date=to_datetime(d["date"]),
        client_name=str(d.get("client_name") or ""),
        job_description=d.get("job_description"),
        invoice_number=d.get("invoice_number"),
        jid=d.get("jid"),
        amount=to_money(d.get("amount")),
        vat_applied=bool(d.get("vat_applied", False)),
        total_amount=to_money(d.get("total_amount")),
        paid_amount=to_money(d.get("paid_amount")),
        due_amount=to_money(d.get("due_amount")),
        payment_method=PaymentMethod(d["payment_method"]),
        reference=d.get("reference"),
        operator=Operator(d["operator"]),
        admin_checked=bool(d.get("admin_checked", False)),
        checked_by=d.get("checked_by"),
        created_at=to_datetime(d.get("created_at")),
        version=doc.version,
    )


class DocumentTransactionRepository(TransactionRepository):
    def __init__(self, store: DocumentStore):
        self._store = store

    def get(self, id: str) -> Optional[Transaction]:
        doc = self._store.get(COLLECTION_TRANSACTIONS, id)
        return _from_document(doc) if doc else None

    def get_by_transaction_id(self, transaction_id: str) -> Optional[Transaction]:
        docs = self._store.query(COLLECTION_TRANSACTIONS, where={"transaction_id": transaction_id}, limit=1)
        return _from_document(docs[0]) if docs else None

    def list_for_job(self, job_id: str) -> Sequence[Transaction]:
        docs = self._store.query(COLLECTION_TRANSACTIONS, where={"jid": job_id})
        return [_from_document(d) for d in docs]

    def list_recent(self, limit: Optional[int] = None) -> Sequence[Transaction]:
        docs = self._store.query(COLLECTION_TRANSACTIONS, order_by="created_at", descending=True, limit=limit)
        return [_from_document(d) for d in docs]

    def list_pending(self) -> Sequence[Transaction]:
        docs = self._store.query(COLLECTION_TRANSACTIONS, where={"admin_checked": False}, order_by="created_at")
        return [_from_document(d) for d in docs]

    def list_by_type(self, type_: str) -> Sequence[Transaction]:
        docs = self._store.query(COLLECTION_TRANSACTIONS, where={"type": type_})
        return [_from_document(d) for d in docs]

    def create(self, transaction: Transaction) -> Transaction:
        doc = self._store.create(COLLECTION_TRANSACTIONS, _to_document(transaction))
        return replace(transaction, id=doc.doc_id, version=doc.version)

    def save(self, transaction: Transaction) -> Transaction:
        doc = self._store.update(
            COLLECTION_TRANSACTIONS,
            transaction.id,
            _to_document(transaction),
            expected_version=transaction.version,
        )
        return _from_document(doc)

    def set_job(self, id: str, job_id: Optional[str]) -> Transaction:
        return _from_document(self._store.update(COLLECTION_TRANSACTIONS, id, {"jid": job_id}))

    def delete(self, id: str) -> bool:
        return self._store.delete(COLLECTION_TRANSACTIONS, id)
