from __future__ import annotations

import structlog

from ..core.exceptions import PersistenceError
from ..database.document_store import DocumentStore

log = structlog.get_logger(__name__)


def format_human_id(prefix: str, number: int, width: int) -> str:
    """Render a counter value as a human id, e.g. ("JID", 7, 4) -> "JID0007".

    Numbers wider than `width` are kept in full.
    """

    return f"{prefix}{int(number):0{int(width)}d}"


class SequenceGenerator:
    """Issues per-name, strictly increasing integers.

    The increment and the read happen in one atomic store operation, so two
    concurrent callers never receive the same number. Numbers are never
    reused, even when the entity that consumed one is later deleted.
    """

    def __init__(self, store: DocumentStore):
        self._store = store

    def next_id(self, counter_name: str) -> int:
        if not counter_name:
            raise ValueError("counter_name is required")
        try:
            value = int(self._store.increment_counter(counter_name))
        except PersistenceError:
            log.warning("sequence_increment_failed", counter=counter_name)
            raise
        log.info("sequence_issued", counter=counter_name, value=value)
        return value

    def next_human_id(self, counter_name: str, id_format: tuple[str, int]) -> str:
        prefix, width = id_format
        return format_human_id(prefix, self.next_id(counter_name), width)
