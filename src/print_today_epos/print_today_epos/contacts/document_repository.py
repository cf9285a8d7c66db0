from __future__ import annotations

from dataclasses import replace
from typing import Optional, Sequence

from ..common.datetime_utils import to_datetime
from ..core.constants import COLLECTION_CONTACTS
from ..database.document_store import DocumentStore, StoredDocument
from .model import Contact
from .repository import ContactRepository

_TEXT_FIELDS = ("name", "phone", "email", "company_name", "street", "city", "state", "zip")


def _to_document(c: Contact) -> dict:
    doc = {name: getattr(c, name) for name in _TEXT_FIELDS}
    doc["created_at"] = c.created_at
    return doc


def _from_document(doc: StoredDocument) -> Contact:
    d = doc.data
    return Contact(
        id=doc.doc_id,
        name=str(d.get("name") or ""),
        phone=str(d.get("phone") or ""),
        email=str(d.get("email") or ""),
        company_name=d.get("company_name"),
        street=d.get("street"),
        city=d.get("city"),
        state=d.get("state"),
        zip=d.get("zip"),
        created_at=to_datetime(d.get("created_at")),
        version=doc.version,
    )


class DocumentContactRepository(ContactRepository):
    def __init__(self, store: DocumentStore):
        self._store = store

    def get(self, id: str) -> Optional[Contact]:
        doc = self._store.get(COLLECTION_CONTACTS, id)
        return _from_document(doc) if doc else None

    def list_recent(self) -> Sequence[Contact]:
        docs = self._store.query(COLLECTION_CONTACTS, order_by="created_at", descending=True)
        return [_from_document(d) for d in docs]

    def create(self, contact: Contact) -> Contact:
        doc = self._store.create(COLLECTION_CONTACTS, _to_document(contact))
        return replace(contact, id=doc.doc_id, version=doc.version)

    def save(self, contact: Contact) -> Contact:
        doc = self._store.update(COLLECTION_CONTACTS, contact.id, _to_document(contact), expected_version=contact.version)
        return _from_document(doc)
