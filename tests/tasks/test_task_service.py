from __future__ import annotations

from datetime import datetime

import pytest

from src.print_today_epos.print_today_epos.core.enums import AuditAction, Operator, TaskStatus
from src.print_today_epos.print_today_epos.core.exceptions import NotFoundError, ValidationError

NOW = datetime(2026, 3, 2, 10, 0)


def _new_task(container, **overrides):
    data = {
        "type": "Design",
        "details": "Mock up the spring menu",
        "created_by": "PTM",
        "assigned_to": "PTRK",
    }
    data.update(overrides)
    return container.task_service.create(data, now=NOW)


def test_create_task(container):
    task = _new_task(container)
    second = _new_task(container)

    assert task.task_id == "TSK001"
    assert second.task_id == "TSK002"
    assert task.status == TaskStatus.TODO
    assert task.assigned_to == Operator.PTRK
    assert task.history[0].action == AuditAction.CREATED
    assert task.history[0].details == "Task created and assigned to PTRK."


def test_create_requires_details(container):
    with pytest.raises(ValidationError):
        _new_task(container, details="")


def test_task_types_are_unique_and_sorted(container):
    svc = container.task_service
    svc.add_task_type("Printing")
    svc.add_task_type("Delivery")

    with pytest.raises(ValidationError, match="This type already exists."):
        svc.add_task_type("Printing")

    assert [t.name for t in svc.list_task_types()] == ["Delivery", "Printing"]


def test_update_logs_combined_changes_and_note(container):
    task = _new_task(container)

    updated = container.task_service.update(
        task.id,
        {"type": "Print", "assigned_to": "PTM"},
        operator="PTASH",
        note="Client called, wants it by Friday",
        now=NOW,
    )

    assert updated.type == "Print"
    assert updated.assigned_to == Operator.PTM
    assert updated.details == task.details
    assert [(e.action, e.details) for e in updated.history[1:]] == [
        (AuditAction.UPDATED, 'Type changed from "Design" to "Print". Assignee changed from PTRK to PTM.'),
        (AuditAction.NOTE_ADDED, "Client called, wants it by Friday"),
    ]


def test_due_date_changes_are_logged(container):
    task = _new_task(container)

    updated = container.task_service.update(
        task.id, {"completion_date": "2026-03-10"}, operator="PTM", now=NOW
    )

    assert updated.completion_date == datetime(2026, 3, 10)
    assert updated.history[-1].details == "Due date changed from none to 10/03/2026."


def test_details_change_is_summarised(container):
    task = _new_task(container)

    updated = container.task_service.update(task.id, {"details": "New brief"}, operator="PTM", now=NOW)

    assert updated.history[-1].details == "Details were updated."


def test_update_without_changes_keeps_history(container):
    task = _new_task(container)

    updated = container.task_service.update(task.id, {"type": "Design"}, operator="PTM", note="  ", now=NOW)

    assert len(updated.history) == 1


def test_status_change(container):
    task = _new_task(container)

    updated = container.task_service.update_status(task.id, "Done", operator="PTRK", now=NOW)

    assert updated.status == TaskStatus.DONE
    assert updated.history[-1].action == AuditAction.STATUS_CHANGE
    assert updated.history[-1].details == "Status changed from To Do to Done."


def test_list_tasks_filters(container):
    _new_task(container)
    _new_task(container, details="Collect vinyl order", assigned_to="PTASAD")

    assert len(container.task_service.list_tasks()) == 2
    assert [t.task_id for t in container.task_service.list_tasks(term="vinyl")] == ["TSK002"]
    assert [t.task_id for t in container.task_service.list_tasks(term="tsk001")] == ["TSK001"]
    assert [t.task_id for t in container.task_service.list_tasks(assigned_to="PTASAD")] == ["TSK002"]


def test_delete_task(container):
    task = _new_task(container)
    container.task_service.delete(task.id)

    with pytest.raises(NotFoundError):
        container.task_service.get(task.id)
