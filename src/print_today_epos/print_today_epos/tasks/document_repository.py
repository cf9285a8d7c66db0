from __future__ import annotations

from dataclasses import replace
from typing import Optional, Sequence

from ..common.datetime_utils import to_datetime
from ..core.constants import COLLECTION_TASK_TYPES, COLLECTION_TASKS
from ..core.enums import Operator, TaskStatus
from ..database.document_store import DocumentStore, StoredDocument
from ..history.model import history_from_documents, history_to_documents
from .model import Task, TaskType
from .repository import TaskRepository, TaskTypeRepository


def _to_document(t: Task) -> dict:
    return {
        "task_id": t.task_id,
        "type": t.type,
        "details": t.details,
        "created_by": t.created_by.value,
        "assigned_to": t.assigned_to.value,
        "status": t.status.value,
        "completion_date": t.completion_date,
        "created_at": t.created_at,
        "history": history_to_documents(t.history),
    }


def _from_document(doc: StoredDocument) -> Task:
    d = doc.data
    return Task(
        id=doc.doc_id,
        task_id=str(d["task_id"]),
        type=str(d.get("type") or ""),
        details=str(d.get("details") or ""),
        created_by=Operator(d["created_by"]),
        assigned_to=Operator(d["assigned_to"]),
        status=TaskStatus(d.get("status") or TaskStatus.TODO.value),
        completion_date=to_datetime(d.get("completion_date")),
        created_at=to_datetime(d.get("created_at")),
        history=history_from_documents(d.get("history")),
        version=doc.version,
    )


class DocumentTaskRepository(TaskRepository):
    def __init__(self, store: DocumentStore):
        self._store = store

    def get(self, id: str) -> Optional[Task]:
        doc = self._store.get(COLLECTION_TASKS, id)
        return _from_document(doc) if doc else None

    def list_recent(self, *, assigned_to: Optional[str] = None, limit: Optional[int] = None) -> Sequence[Task]:
        where = {"assigned_to": assigned_to} if assigned_to else None
        docs = self._store.query(COLLECTION_TASKS, where=where, order_by="created_at", descending=True, limit=limit)
        return [_from_document(d) for d in docs]

    def create(self, task: Task) -> Task:
        doc = self._store.create(COLLECTION_TASKS, _to_document(task))
        return replace(task, id=doc.doc_id, version=doc.version)

    def save(self, task: Task) -> Task:
        doc = self._store.update(COLLECTION_TASKS, task.id, _to_document(task), expected_version=task.version)
        return _from_document(doc)

    def delete(self, id: str) -> bool:
        return self._store.delete(COLLECTION_TASKS, id)


class DocumentTaskTypeRepository(TaskTypeRepository):
    def __init__(self, store: DocumentStore):
        self._store = store

    def list_all(self) -> Sequence[TaskType]:
        docs = self._store.query(COLLECTION_TASK_TYPES, order_by="name")
        return [TaskType(id=d.doc_id, name=str(d.data["name"])) for d in docs]

    def get_by_name(self, name: str) -> Optional[TaskType]:
        docs = self._store.query(COLLECTION_TASK_TYPES, where={"name": name}, limit=1)
        return TaskType(id=docs[0].doc_id, name=str(docs[0].data["name"])) if docs else None

    def create(self, name: str) -> TaskType:
        doc = self._store.create(COLLECTION_TASK_TYPES, {"name": name})
        return TaskType(id=doc.doc_id, name=name)
