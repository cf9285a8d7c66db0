from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Any, Iterable, Mapping, Sequence

import structlog

from ..common.validators import optional_text, require_email, require_non_empty
from ..core.exceptions import NotFoundError, ValidationError
from .model import Contact
from .repository import ContactRepository

log = structlog.get_logger(__name__)


def parse_contact(payload: Mapping[str, Any]) -> dict:
    if not isinstance(payload, Mapping):
        raise ValidationError("Contact must be an object.")
    return dict(
        name=require_non_empty(payload.get("name"), "Name"),
        phone=require_non_empty(payload.get("phone"), "Phone number"),
        email=require_email(payload.get("email")),
        company_name=optional_text(payload.get("company_name")),
        street=optional_text(payload.get("street")),
        city=optional_text(payload.get("city")),
        state=optional_text(payload.get("state")),
        zip=optional_text(payload.get("zip")),
    )


class ContactService:
    def __init__(self, contacts: ContactRepository):
        self._contacts = contacts

    def get(self, id: str) -> Contact:
        contact = self._contacts.get(id)
        if not contact:
            raise NotFoundError("Contact not found.")
        return contact

    def list_contacts(self, term: str = "") -> Sequence[Contact]:
        contacts = list(self._contacts.list_recent())
        needle = (term or "").strip().lower()
        if needle:
            contacts = [
                c for c in contacts
                if any(needle in (v or "").lower() for v in (c.name, c.company_name, c.email, c.phone))
            ]
        return contacts

    def add(self, payload: Mapping[str, Any], *, now: datetime | None = None) -> Contact:
        now = now or datetime.now()
        contact = self._contacts.create(Contact(id="", created_at=now, **parse_contact(payload)))
        log.info("contact_added", contact_id=contact.id)
        return contact

    def update(self, id: str, payload: Mapping[str, Any]) -> Contact:
        fields = parse_contact(payload)
        saved = self._contacts.save(replace(self.get(id), **fields))
        log.info("contact_updated", contact_id=id)
        return saved

    def bulk_add(self, rows: Iterable[Any], *, now: datetime | None = None) -> int:
        """Import many contacts; rows that fail validation are skipped.

        Returns the number of contacts created.
        """

        rows = list(rows or [])
        if not rows:
            raise ValidationError("No contacts provided.")

        now = now or datetime.now()
        created = 0
        skipped = 0
        for row in rows:
            try:
                fields = parse_contact(row)
            except ValidationError:
                skipped += 1
                continue
            self._contacts.create(Contact(id="", created_at=now, **fields))
            created += 1
        log.info("contacts_imported", created=created, skipped=skipped)
        return created
