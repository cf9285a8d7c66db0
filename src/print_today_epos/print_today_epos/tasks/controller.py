from __future__ import annotations

from flask import Flask, request

from ..common.responses import api_action, json_body, ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    service = container.task_service

    @app.route("/api/task-types", methods=["GET"], endpoint="api_task_types_list")
    @api_action
    def api_task_types_list():
        return ok("Task types loaded.", task_types=service.list_task_types())

    @app.route("/api/task-types", methods=["POST"], endpoint="api_task_types_add")
    @api_action
    def api_task_types_add():
        return ok("Task type added.", 201, task_type=service.add_task_type(json_body().get("name")))

    @app.route("/api/tasks", methods=["GET"], endpoint="api_tasks_list")
    @api_action
    def api_tasks_list():
        tasks = service.list_tasks(
            term=request.args.get("q", ""),
            assigned_to=request.args.get("assigned_to") or None,
        )
        return ok("Tasks loaded.", tasks=tasks)

    @app.route("/api/tasks", methods=["POST"], endpoint="api_tasks_create")
    @api_action
    def api_tasks_create():
        return ok("Task created successfully.", 201, task=service.create(json_body()))

    @app.route("/api/tasks/<id>", methods=["PUT"], endpoint="api_tasks_update")
    @api_action
    def api_tasks_update(id: str):
        data = json_body()
        changes = {k: v for k, v in data.items() if k not in {"operator", "note"}}
        task = service.update(id, changes, operator=data.get("operator"), note=data.get("note"))
        return ok("Task updated.", task=task)

    @app.route("/api/tasks/<id>/status", methods=["POST"], endpoint="api_tasks_status")
    @api_action
    def api_tasks_status(id: str):
        data = json_body()
        task = service.update_status(id, data.get("status"), operator=data.get("operator"))
        return ok("Task status updated.", task=task)

    @app.route("/api/tasks/<id>", methods=["DELETE"], endpoint="api_tasks_delete")
    @api_action
    def api_tasks_delete(id: str):
        service.delete(id)
        return ok("Task deleted.")
