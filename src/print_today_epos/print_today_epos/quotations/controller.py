from __future__ import annotations

from flask import Flask, request

from ..common.responses import api_action, json_body, ok
from ..container import Container
from ..history.tracker import newest_first


def register(app: Flask, container: Container) -> None:
    service = container.quotation_service

    @app.route("/api/quotations", methods=["GET"], endpoint="api_quotations_search")
    @api_action
    def api_quotations_search():
        quotations = service.search(
            request.args.get("q", ""),
            status=request.args.get("status") or None,
            operator=request.args.get("operator") or None,
            return_all=request.args.get("all") == "1",
        )
        return ok("Quotations loaded.", quotations=quotations)

    @app.route("/api/quotations", methods=["POST"], endpoint="api_quotations_create")
    @api_action
    def api_quotations_create():
        quotation = service.create(json_body())
        return ok("Quotation added successfully.", 201, quotation=quotation)

    @app.route("/api/quotations/<id>", methods=["GET"], endpoint="api_quotations_get")
    @api_action
    def api_quotations_get(id: str):
        quotation = service.get(id)
        return ok("Quotation loaded.", quotation=quotation, history=newest_first(quotation.history))

    @app.route("/api/quotations/<id>", methods=["PUT"], endpoint="api_quotations_update")
    @api_action
    def api_quotations_update(id: str):
        data = json_body()
        quotation = service.update(id, data, actor=data.get("changed_by") or data.get("operator"))
        return ok("Quotation updated successfully.", quotation=quotation)

    @app.route("/api/quotations/<id>", methods=["DELETE"], endpoint="api_quotations_delete")
    @api_action
    def api_quotations_delete(id: str):
        service.delete(id)
        return ok("Quotation deleted successfully.")

    @app.route("/api/quotations/<id>/convert", methods=["POST"], endpoint="api_quotations_convert")
    @api_action
    def api_quotations_convert(id: str):
        sheet = service.convert_to_job_sheet(id)
        return ok(f"Job Sheet {sheet.job_id} created successfully.", 201, job_sheet=sheet)
