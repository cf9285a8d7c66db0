from __future__ import annotations

from typing import Optional

from ..common.datetime_utils import to_datetime
from ..core.constants import COLLECTION_NOTICES, CURRENT_NOTICE_ID
from ..core.exceptions import DocumentExistsError, DocumentNotFoundError
from ..database.document_store import DocumentStore, StoredDocument
from .model import Notice
from .repository import NoticeRepository


def _to_document(n: Notice) -> dict:
    return {"content": n.content, "updated_at": n.updated_at, "updated_by": n.updated_by}


def _from_document(doc: StoredDocument) -> Notice:
    d = doc.data
    return Notice(
        id=doc.doc_id,
        content=str(d.get("content") or ""),
        updated_at=to_datetime(d.get("updated_at")),
        updated_by=str(d.get("updated_by") or ""),
    )


class DocumentNoticeRepository(NoticeRepository):
    def __init__(self, store: DocumentStore):
        self._store = store

    def get_current(self) -> Optional[Notice]:
        doc = self._store.get(COLLECTION_NOTICES, CURRENT_NOTICE_ID)
        return _from_document(doc) if doc else None

    def put_current(self, notice: Notice) -> Notice:
        # Last write wins; the notice carries no history.
        body = _to_document(notice)
        try:
            return _from_document(self._store.update(COLLECTION_NOTICES, CURRENT_NOTICE_ID, body))
        except DocumentNotFoundError:
            pass
        try:
            return _from_document(self._store.create(COLLECTION_NOTICES, body, doc_id=CURRENT_NOTICE_ID))
        except DocumentExistsError:
            return _from_document(self._store.update(COLLECTION_NOTICES, CURRENT_NOTICE_ID, body))
