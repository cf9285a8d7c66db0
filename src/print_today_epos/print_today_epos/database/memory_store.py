from __future__ import annotations

import threading
import uuid
from typing import Any, Mapping, Optional, Sequence

from ..core.exceptions import ConcurrentModificationError, DocumentExistsError, DocumentNotFoundError
from .document_store import (
    DocumentStore,
    StoredDocument,
    check_field_name,
    decode_document,
    encode_document,
    encode_value,
)


class InMemoryDocumentStore(DocumentStore):
    """Process-local store used for development and tests.

    Bodies are kept JSON-encoded so reads go through the same decoding path as
    the MySQL store.
    """

    def __init__(self):
        self._lock = threading.RLock()
        self._collections: dict[str, dict[str, tuple[str, int]]] = {}
        self._counters: dict[str, int] = {}

    def _bucket(self, collection: str) -> dict[str, tuple[str, int]]:
        return self._collections.setdefault(collection, {})

    def get(self, collection: str, doc_id: str) -> Optional[StoredDocument]:
        with self._lock:
            row = self._bucket(collection).get(doc_id)
            if not row:
                return None
            body, version = row
            return StoredDocument(doc_id=doc_id, data=decode_document(body), version=version)

    def create(self, collection: str, data: Mapping[str, Any], *, doc_id: Optional[str] = None) -> StoredDocument:
        doc_id = doc_id or uuid.uuid4().hex
        body = encode_document(data)
        with self._lock:
            bucket = self._bucket(collection)
            if doc_id in bucket:
                raise DocumentExistsError(f"{collection}/{doc_id} already exists")
            bucket[doc_id] = (body, 1)
        return StoredDocument(doc_id=doc_id, data=decode_document(body), version=1)

    def update(
        self,
        collection: str,
        doc_id: str,
        changes: Mapping[str, Any],
        *,
        expected_version: Optional[int] = None,
    ) -> StoredDocument:
        with self._lock:
            bucket = self._bucket(collection)
            row = bucket.get(doc_id)
            if not row:
                raise DocumentNotFoundError(f"{collection}/{doc_id} does not exist")
            body, version = row
            if expected_version is not None and expected_version != version:
                raise ConcurrentModificationError(
                    f"{collection}/{doc_id} changed (expected v{expected_version}, found v{version})"
                )
            merged = decode_document(body)
            merged.update(decode_document(encode_document(changes)))
            new_body = encode_document(merged)
            bucket[doc_id] = (new_body, version + 1)
            return StoredDocument(doc_id=doc_id, data=decode_document(new_body), version=version + 1)

    def delete(self, collection: str, doc_id: str) -> bool:
        with self._lock:
            return self._bucket(collection).pop(doc_id, None) is not None

    def query(
        self,
        collection: str,
        *,
        where: Optional[Mapping[str, Any]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> Sequence[StoredDocument]:
        filters = {check_field_name(k): encode_value(v) for k, v in (where or {}).items()}
        with self._lock:
            docs = [
                StoredDocument(doc_id=doc_id, data=decode_document(body), version=version)
                for doc_id, (body, version) in self._bucket(collection).items()
            ]

        docs = [d for d in docs if all(d.data.get(k) == v for k, v in filters.items())]

        if order_by:
            check_field_name(order_by)
            present = [d for d in docs if d.data.get(order_by) is not None]
            missing = [d for d in docs if d.data.get(order_by) is None]
            present.sort(key=lambda d: d.data[order_by], reverse=descending)
            docs = present + missing

        if limit is not None:
            docs = docs[: int(limit)]
        return docs

    def increment_counter(self, name: str) -> int:
        with self._lock:
            value = self._counters.get(name, 0) + 1
            self._counters[name] = value
            return value
