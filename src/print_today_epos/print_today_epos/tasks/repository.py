from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Task, TaskType


class TaskRepository(Protocol):
    def get(self, id: str) -> Optional[Task]:
        raise NotImplementedError

    def list_recent(self, *, assigned_to: Optional[str] = None, limit: Optional[int] = None) -> Sequence[Task]:
        raise NotImplementedError

    def create(self, task: Task) -> Task:
        raise NotImplementedError

    def save(self, task: Task) -> Task:
        raise NotImplementedError

    def delete(self, id: str) -> bool:
        raise NotImplementedError


class TaskTypeRepository(Protocol):
    def list_all(self) -> Sequence[TaskType]:
        raise NotImplementedError

    def get_by_name(self, name: str) -> Optional[TaskType]:
        raise NotImplementedError

    def create(self, name: str) -> TaskType:
        raise NotImplementedError
