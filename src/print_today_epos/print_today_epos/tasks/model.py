from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import Operator, TaskStatus
from ..history.model import AuditEntry


@dataclass(frozen=True)
class TaskType:
    id: str
    name: str


@dataclass(frozen=True)
class Task:
    id: str
    task_id: str
    type: str
    details: str
    created_by: Operator
    assigned_to: Operator
    status: TaskStatus
    completion_date: Optional[datetime] = None
    created_at: Optional[datetime] = None
    history: tuple[AuditEntry, ...] = ()
    version: int = 1
