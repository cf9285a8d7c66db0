from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Mapping, Optional, Union

from ..common.datetime_utils import to_datetime
from ..core.enums import AuditAction


@dataclass(frozen=True)
class AuditEntry:
    """One attributed change on an entity's history. Never mutated once appended.

    `action` is a free-form label; the known ones parse to AuditAction.
    Entries loaded from storage keep their stored form in `raw` and are written
    back exactly as they were read.
    """

    timestamp: Optional[datetime]
    operator: str
    action: Union[AuditAction, str]
    details: str
    raw: Any = field(default=None, compare=False, repr=False)

    def to_document(self) -> Any:
        if self.raw is not None:
            return self.raw
        return {
            "timestamp": self.timestamp,
            "operator": self.operator,
            "action": getattr(self.action, "value", self.action),
            "details": self.details,
        }

    @classmethod
    def from_document(cls, raw: Any) -> "AuditEntry":
        if not isinstance(raw, Mapping):
            return cls(timestamp=None, operator="", action="", details="", raw=raw)

        label = str(raw.get("action") or "")
        try:
            action: Union[AuditAction, str] = AuditAction(label)
        except ValueError:
            action = label
        try:
            timestamp = to_datetime(raw.get("timestamp"))
        except (TypeError, ValueError):
            timestamp = None
        return cls(
            timestamp=timestamp,
            operator=str(raw.get("operator") or ""),
            action=action,
            details=str(raw.get("details") or ""),
            raw=raw,
        )


def history_from_documents(raw_history: Any) -> tuple[AuditEntry, ...]:
    if not isinstance(raw_history, (list, tuple)):
        return ()
    return tuple(AuditEntry.from_document(r) for r in raw_history)


def history_to_documents(history: tuple[AuditEntry, ...]) -> list:
    return [e.to_document() for e in history]
