from __future__ import annotations

import json
import uuid
from typing import Any, Mapping, Optional, Sequence

import mysql.connector

from ..core.exceptions import (
    ConcurrentModificationError,
    DocumentExistsError,
    DocumentNotFoundError,
    PersistenceError,
)
from .connection import DatabaseConnection
from .document_store import (
    DocumentStore,
    StoredDocument,
    check_field_name,
    decode_document,
    encode_document,
    encode_value,
)
from .mysql_base import db_cursor, fetchall, fetchone


def _json_path(name: str) -> str:
    return f"$.{check_field_name(name)}"


class MySQLDocumentStore(DocumentStore):
    """Documents kept as JSON bodies in a single `documents` table.

    Counters live in `counters` and are bumped with LAST_INSERT_ID(expr), which
    makes increment-and-read a single atomic statement per connection.
    """

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, collection: str, doc_id: str) -> Optional[StoredDocument]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT doc_id, body, version FROM documents WHERE collection=%s AND doc_id=%s",
                (collection, doc_id),
            )
            r = fetchone(cur)
            if not r:
                return None
            return StoredDocument(doc_id=r["doc_id"], data=decode_document(r["body"]), version=int(r["version"]))

    def create(self, collection: str, data: Mapping[str, Any], *, doc_id: Optional[str] = None) -> StoredDocument:
        doc_id = doc_id or uuid.uuid4().hex
        body = encode_document(data)
        with db_cursor(self._conn_factory) as (_, cur):
            try:
                cur.execute(
                    """
                    INSERT INTO documents(collection, doc_id, body, version)
                    VALUES(%s,%s,%s,1)
                    """,
                    (collection, doc_id, body),
                )
            except mysql.connector.IntegrityError as exc:
                raise DocumentExistsError(f"{collection}/{doc_id} already exists") from exc
        return StoredDocument(doc_id=doc_id, data=decode_document(body), version=1)

    def update(
        self,
        collection: str,
        doc_id: str,
        changes: Mapping[str, Any],
        *,
        expected_version: Optional[int] = None,
    ) -> StoredDocument:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT body, version FROM documents
                WHERE collection=%s AND doc_id=%s
                FOR UPDATE
                """,
                (collection, doc_id),
            )
            r = fetchone(cur)
            if not r:
                raise DocumentNotFoundError(f"{collection}/{doc_id} does not exist")

            version = int(r["version"])
            if expected_version is not None and expected_version != version:
                raise ConcurrentModificationError(
                    f"{collection}/{doc_id} changed (expected v{expected_version}, found v{version})"
                )

            merged = decode_document(r["body"])
            merged.update(decode_document(encode_document(changes)))
            body = encode_document(merged)
            cur.execute(
                """
                UPDATE documents
                SET body=%s, version=version+1
                WHERE collection=%s AND doc_id=%s
                """,
                (body, collection, doc_id),
            )
            return StoredDocument(doc_id=doc_id, data=decode_document(body), version=version + 1)

    def delete(self, collection: str, doc_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM documents WHERE collection=%s AND doc_id=%s", (collection, doc_id))
            return cur.rowcount > 0

    def query(
        self,
        collection: str,
        *,
        where: Optional[Mapping[str, Any]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> Sequence[StoredDocument]:
        clauses = ["collection=%s"]
        params: list[object] = [collection]

        for name, value in (where or {}).items():
            path = _json_path(name)
            plain = encode_value(value)
            if plain is None:
                clauses.append(
                    "(JSON_EXTRACT(body, %s) IS NULL OR JSON_TYPE(JSON_EXTRACT(body, %s))='NULL')"
                )
                params.extend([path, path])
            else:
                clauses.append("JSON_EXTRACT(body, %s) = CAST(%s AS JSON)")
                params.extend([path, json.dumps(plain)])

        sql = f"SELECT doc_id, body, version FROM documents WHERE {' AND '.join(clauses)}"
        if order_by:
            sql += f" ORDER BY JSON_EXTRACT(body, %s) {'DESC' if descending else 'ASC'}"
            params.append(_json_path(order_by))
        if limit is not None:
            sql += " LIMIT %s"
            params.append(int(limit))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            rows = fetchall(cur)
            return [
                StoredDocument(doc_id=r["doc_id"], data=decode_document(r["body"]), version=int(r["version"]))
                for r in rows
            ]

    def increment_counter(self, name: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO counters(name, count) VALUES(%s, LAST_INSERT_ID(1))
                ON DUPLICATE KEY UPDATE count = LAST_INSERT_ID(count + 1)
                """,
                (name,),
            )
            cur.execute("SELECT LAST_INSERT_ID() AS value")
            r = fetchone(cur)
            if not r or not r.get("value"):
                raise PersistenceError(f"Counter {name!r} could not be incremented")
            return int(r["value"])
