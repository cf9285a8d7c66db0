"""Declarative field diffing for entity histories.

A TrackedField describes how to compare one field (`key`) and how to render
its old/new values in a history message (`formatter`, `template`). Fields with
a `summary` emit that fixed message instead of the old/new values, which is
how line items are reported.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Iterable, Mapping, Optional, Sequence

from ..common.datetime_utils import day_string, format_day, to_datetime
from ..core.enums import AuditAction
from .model import AuditEntry

DEFAULT_TEMPLATE = "{label} changed from '{old}' to '{new}'."


def _plain(value: Any) -> str:
    if value is None:
        return ""
    return str(getattr(value, "value", value))


def _identity(value: Any) -> Any:
    return getattr(value, "value", value)


@dataclass(frozen=True)
class TrackedField:
    name: str
    label: str
    formatter: Callable[[Any], str] = _plain
    key: Callable[[Any], Any] = _identity
    summary: Optional[str] = None
    template: str = DEFAULT_TEMPLATE

    def changed(self, old: Any, new: Any) -> bool:
        return self.key(old) != self.key(new)

    def describe(self, old: Any, new: Any) -> str:
        if self.summary:
            return self.summary
        return self.template.format(label=self.label, old=self.formatter(old), new=self.formatter(new))


def day_key(value: Any) -> Optional[str]:
    if value is None:
        return None
    return day_string(value)


def day_or(empty: str) -> Callable[[Any], str]:
    def fmt(value: Any) -> str:
        return format_day(value, empty=empty)

    return fmt


def text_or(empty: str) -> Callable[[Any], str]:
    def fmt(value: Any) -> str:
        return _plain(value) or empty

    return fmt


def items_key(items: Any) -> list:
    return [item.to_dict() if hasattr(item, "to_dict") else dict(item) for item in (items or [])]


def diff(old: Mapping[str, Any], new: Mapping[str, Any], tracked_fields: Sequence[TrackedField]) -> list[str]:
    """One message per tracked field whose value differs.

    Fields absent from `new` are treated as unchanged (partial updates).
    """

    messages: list[str] = []
    for f in tracked_fields:
        if f.name not in new:
            continue
        before = old.get(f.name)
        after = new.get(f.name)
        if f.changed(before, after):
            messages.append(f.describe(before, after))
    return messages


def changes_to_entries(
    messages: Iterable[str],
    *,
    operator: str,
    now: datetime,
    action: AuditAction = AuditAction.UPDATED,
    combine: bool = False,
) -> list[AuditEntry]:
    messages = [m for m in messages if m]
    if not messages:
        return []
    if combine:
        return [AuditEntry(timestamp=now, operator=operator, action=action, details=" ".join(messages))]
    return [AuditEntry(timestamp=now, operator=operator, action=action, details=m) for m in messages]


def note_entry(note: Optional[str], *, operator: str, now: datetime) -> Optional[AuditEntry]:
    text = (note or "").strip()
    if not text:
        return None
    return AuditEntry(timestamp=now, operator=operator, action=AuditAction.NOTE_ADDED, details=text)


def append_entries(history: Iterable[AuditEntry], entries: Iterable[Optional[AuditEntry]]) -> tuple[AuditEntry, ...]:
    """Return a new history with `entries` appended; the input is left untouched."""
    return tuple(history) + tuple(e for e in entries if e is not None)


def _sort_key(entry: AuditEntry) -> datetime:
    try:
        return to_datetime(entry.timestamp) or datetime.min
    except (TypeError, ValueError):
        return datetime.min


def newest_first(history: Iterable[AuditEntry]) -> list[AuditEntry]:
    return sorted(history, key=_sort_key, reverse=True)
