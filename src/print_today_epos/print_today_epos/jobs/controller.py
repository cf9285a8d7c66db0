from __future__ import annotations

from flask import Flask, request

from ..common.responses import api_action, json_body, ok
from ..container import Container
from ..history.tracker import newest_first


def _sheet_payload(sheet) -> dict:
    return {"job_sheet": sheet, "history": newest_first(sheet.history)}


def register(app: Flask, container: Container) -> None:
    service = container.job_sheet_service

    @app.route("/api/job-sheets", methods=["GET"], endpoint="api_job_sheets_search")
    @api_action
    def api_job_sheets_search():
        sheets = service.search(
            request.args.get("q", ""),
            status=request.args.get("status") or None,
            payment_status=request.args.get("payment_status") or None,
            operator=request.args.get("operator") or None,
            return_all=request.args.get("all") == "1",
        )
        return ok("Job sheets loaded.", job_sheets=sheets)

    @app.route("/api/job-sheets", methods=["POST"], endpoint="api_job_sheets_create")
    @api_action
    def api_job_sheets_create():
        sheet = service.create(json_body())
        return ok("Job sheet added successfully.", 201, **_sheet_payload(sheet))

    @app.route("/api/job-sheets/stats", methods=["GET"], endpoint="api_job_sheets_stats")
    @api_action
    def api_job_sheets_stats():
        return ok("Dashboard stats loaded.", stats=service.dashboard_stats())

    @app.route("/api/job-sheets/by-job-id/<job_id>", methods=["GET"], endpoint="api_job_sheets_by_job_id")
    @api_action
    def api_job_sheets_by_job_id(job_id: str):
        sheet = service.get_by_job_id(job_id)
        if not sheet:
            return ok("No job sheet with that ID.", job_sheet=None)
        return ok("Job sheet loaded.", **_sheet_payload(sheet))

    @app.route("/api/job-sheets/<id>", methods=["GET"], endpoint="api_job_sheets_get")
    @api_action
    def api_job_sheets_get(id: str):
        return ok("Job sheet loaded.", **_sheet_payload(service.get(id)))

    @app.route("/api/job-sheets/<id>", methods=["PUT"], endpoint="api_job_sheets_update")
    @api_action
    def api_job_sheets_update(id: str):
        data = json_body()
        sheet = service.update(id, data, actor=data.get("changed_by") or data.get("operator"))
        return ok("Job sheet updated successfully.", **_sheet_payload(sheet))

    @app.route("/api/job-sheets/<id>", methods=["DELETE"], endpoint="api_job_sheets_delete")
    @api_action
    def api_job_sheets_delete(id: str):
        service.delete(id)
        return ok("Job sheet deleted successfully.")

    @app.route("/api/job-sheets/<id>/payments", methods=["POST"], endpoint="api_job_sheets_payment")
    @api_action
    def api_job_sheets_payment(id: str):
        data = json_body()
        tx = container.payment_service.record_payment(
            id,
            data.get("amount"),
            data.get("payment_method"),
            data.get("operator"),
            reference=data.get("reference"),
        )
        return ok("Payment recorded.", 201, transaction=tx, job_sheet=service.get(id))
