from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Any, Mapping, Optional, Sequence

import structlog

from ..common.datetime_utils import to_datetime
from ..common.validators import require_enum, require_non_empty
from ..core.constants import COUNTER_TASKS, DEFAULT_TASK_LIST_LIMIT, TASK_ID_FORMAT
from ..core.enums import AuditAction, Operator, TaskStatus
from ..core.exceptions import NotFoundError, ValidationError
from ..history.model import AuditEntry
from ..history.tracker import TrackedField, append_entries, changes_to_entries, day_key, day_or, diff, note_entry
from ..sequences.generator import SequenceGenerator
from .model import Task, TaskType
from .repository import TaskRepository, TaskTypeRepository

log = structlog.get_logger(__name__)

TASK_TRACKED_FIELDS = (
    TrackedField("type", "Type", template='{label} changed from "{old}" to "{new}".'),
    TrackedField("details", "Details", summary="Details were updated."),
    TrackedField("assigned_to", "Assignee", template="{label} changed from {old} to {new}."),
    TrackedField(
        "completion_date",
        "Due date",
        formatter=day_or("none"),
        key=day_key,
        template="{label} changed from {old} to {new}.",
    ),
)


def _optional_datetime(value: Any) -> Optional[datetime]:
    try:
        return to_datetime(value)
    except (TypeError, ValueError):
        raise ValidationError("Invalid completion date.")


class TaskService:
    def __init__(self, tasks: TaskRepository, task_types: TaskTypeRepository, sequences: SequenceGenerator):
        self._tasks = tasks
        self._task_types = task_types
        self._sequences = sequences

    def list_task_types(self) -> Sequence[TaskType]:
        return list(self._task_types.list_all())

    def add_task_type(self, name: Any) -> TaskType:
        clean = require_non_empty(name, "Task type name")
        if self._task_types.get_by_name(clean):
            raise ValidationError("This type already exists.")
        created = self._task_types.create(clean)
        log.info("task_type_added", name=clean)
        return created

    def get(self, id: str) -> Task:
        task = self._tasks.get(id)
        if not task:
            raise NotFoundError("Task not found.")
        return task

    def create(self, payload: Mapping[str, Any], *, now: datetime | None = None) -> Task:
        now = now or datetime.now()
        created_by = require_enum(payload.get("created_by"), Operator, "operator")
        assigned_to = require_enum(payload.get("assigned_to"), Operator, "assignee")
        raw_status = payload.get("status")

        task_type = require_non_empty(payload.get("type"), "Task type")
        details = require_non_empty(payload.get("details"), "Details")
        status = require_enum(raw_status, TaskStatus, "status") if raw_status else TaskStatus.TODO
        completion_date = _optional_datetime(payload.get("completion_date"))

        task_id = self._sequences.next_human_id(COUNTER_TASKS, TASK_ID_FORMAT)
        task = self._tasks.create(
            Task(
                id="",
                task_id=task_id,
                type=task_type,
                details=details,
                created_by=created_by,
                assigned_to=assigned_to,
                status=status,
                completion_date=completion_date,
                created_at=now,
                history=(
                    AuditEntry(
                        timestamp=now,
                        operator=created_by.value,
                        action=AuditAction.CREATED,
                        details=f"Task created and assigned to {assigned_to.value}.",
                    ),
                ),
            )
        )
        log.info("task_created", task_id=task_id, assigned_to=assigned_to.value)
        return task

    def update(
        self,
        id: str,
        payload: Mapping[str, Any],
        *,
        operator: Any,
        note: Optional[str] = None,
        now: datetime | None = None,
    ) -> Task:
        """Partial update: only keys present in `payload` are changed.

        Field changes are logged as one combined entry; a note gets its own entry.
        """

        now = now or datetime.now()
        actor = require_enum(operator, Operator, "operator")
        task = self.get(id)

        changes: dict[str, Any] = {}
        if payload.get("type"):
            changes["type"] = require_non_empty(payload["type"], "Task type")
        if payload.get("details"):
            changes["details"] = require_non_empty(payload["details"], "Details")
        if payload.get("assigned_to"):
            changes["assigned_to"] = require_enum(payload["assigned_to"], Operator, "assignee")
        if "completion_date" in payload:
            changes["completion_date"] = _optional_datetime(payload["completion_date"])

        current = {f.name: getattr(task, f.name) for f in TASK_TRACKED_FIELDS}
        messages = diff(current, changes, TASK_TRACKED_FIELDS)
        entries = changes_to_entries(messages, operator=actor.value, now=now, combine=True)
        entries.append(note_entry(note, operator=actor.value, now=now))

        saved = self._tasks.save(replace(task, **changes, history=append_entries(task.history, entries)))
        log.info("task_updated", task_id=task.task_id, actor=actor.value, changes=len(messages))
        return saved

    def update_status(self, id: str, status: Any, *, operator: Any, now: datetime | None = None) -> Task:
        now = now or datetime.now()
        actor = require_enum(operator, Operator, "operator")
        new_status = require_enum(status, TaskStatus, "status")
        task = self.get(id)

        entry = AuditEntry(
            timestamp=now,
            operator=actor.value,
            action=AuditAction.STATUS_CHANGE,
            details=f"Status changed from {task.status.value} to {new_status.value}.",
        )
        saved = self._tasks.save(replace(task, status=new_status, history=append_entries(task.history, [entry])))
        log.info("task_status_changed", task_id=task.task_id, status=new_status.value)
        return saved

    def list_tasks(self, *, term: str = "", assigned_to: Any = None) -> Sequence[Task]:
        assignee = require_enum(assigned_to, Operator, "assignee") if assigned_to else None
        limit = None if (term or assignee) else DEFAULT_TASK_LIST_LIMIT
        tasks = list(self._tasks.list_recent(assigned_to=assignee.value if assignee else None, limit=limit))

        needle = (term or "").strip().lower()
        if needle:
            tasks = [t for t in tasks if any(needle in v.lower() for v in (t.task_id, t.details, t.type))]
        return tasks

    def delete(self, id: str) -> None:
        task = self.get(id)
        self._tasks.delete(task.id)
        log.info("task_deleted", task_id=task.task_id)
