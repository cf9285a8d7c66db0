from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Mapping, Optional, Protocol, Sequence

FIELD_NAME_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


@dataclass(frozen=True)
class StoredDocument:
    """A document as returned by the store: id, decoded body and revision."""

    doc_id: str
    data: dict = field(default_factory=dict)
    version: int = 1


class DocumentStore(Protocol):
    """Minimal document-store contract consumed by the repositories.

    Writes are single-document atomic. `update` merges top-level fields and,
    when `expected_version` is given, fails with ConcurrentModificationError if
    the stored revision differs.
    """

    def get(self, collection: str, doc_id: str) -> Optional[StoredDocument]:
        raise NotImplementedError

    def create(self, collection: str, data: Mapping[str, Any], *, doc_id: Optional[str] = None) -> StoredDocument:
        """Insert a new document.

        A caller-chosen `doc_id` that already exists raises DocumentExistsError,
        so the id can serve as a uniqueness claim.
        """

        raise NotImplementedError

    def update(
        self,
        collection: str,
        doc_id: str,
        changes: Mapping[str, Any],
        *,
        expected_version: Optional[int] = None,
    ) -> StoredDocument:
        raise NotImplementedError

    def delete(self, collection: str, doc_id: str) -> bool:
        raise NotImplementedError

    def query(
        self,
        collection: str,
        *,
        where: Optional[Mapping[str, Any]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> Sequence[StoredDocument]:
        raise NotImplementedError

    def increment_counter(self, name: str) -> int:
        """Atomically increment the named counter and return the new value."""

        raise NotImplementedError


def check_field_name(name: str) -> str:
    if not FIELD_NAME_RE.match(name or ""):
        raise ValueError(f"Invalid document field name: {name!r}")
    return name


def _encode_value(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    raise TypeError(f"Cannot store value of type {type(value)!r}")


def encode_document(data: Mapping[str, Any]) -> str:
    """Serialize a document body; timestamps become ISO strings, money becomes strings."""
    return json.dumps(dict(data), default=_encode_value, sort_keys=True)


def decode_document(body: Any) -> dict:
    if isinstance(body, (bytes, bytearray)):
        body = body.decode("utf-8")
    if isinstance(body, str):
        return json.loads(body)
    return dict(body or {})


def encode_value(value: Any) -> Any:
    """Plain JSON form of a single value (used for equality filters)."""
    return json.loads(json.dumps(value, default=_encode_value))
