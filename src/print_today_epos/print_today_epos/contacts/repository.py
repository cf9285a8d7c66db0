from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Contact


class ContactRepository(Protocol):
    def get(self, id: str) -> Optional[Contact]:
        raise NotImplementedError

    def list_recent(self) -> Sequence[Contact]:
        raise NotImplementedError

    def create(self, contact: Contact) -> Contact:
        raise NotImplementedError

    def save(self, contact: Contact) -> Contact:
        raise NotImplementedError
