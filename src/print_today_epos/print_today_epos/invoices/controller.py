from __future__ import annotations

from flask import Flask, request

from ..common.responses import api_action, json_body, ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    service = container.invoice_service

    @app.route("/api/company-profiles", methods=["GET"], endpoint="api_company_profiles_list")
    @api_action
    def api_company_profiles_list():
        return ok("Company profiles loaded.", company_profiles=service.list_company_profiles())

    @app.route("/api/company-profiles", methods=["POST"], endpoint="api_company_profiles_create")
    @api_action
    def api_company_profiles_create():
        profile = service.save_company_profile(json_body())
        return ok("Company profile saved.", 201, company_profile=profile)

    @app.route("/api/company-profiles/<id>", methods=["PUT"], endpoint="api_company_profiles_update")
    @api_action
    def api_company_profiles_update(id: str):
        profile = service.save_company_profile(json_body(), id=id)
        return ok("Company profile saved.", company_profile=profile)

    @app.route("/api/company-profiles/<id>", methods=["DELETE"], endpoint="api_company_profiles_delete")
    @api_action
    def api_company_profiles_delete(id: str):
        service.delete_company_profile(id)
        return ok("Company profile deleted.")

    @app.route("/api/invoices", methods=["GET"], endpoint="api_invoices_list")
    @api_action
    def api_invoices_list():
        return ok("Invoices loaded.", invoices=service.list_invoices(status=request.args.get("status") or None))

    @app.route("/api/invoices", methods=["POST"], endpoint="api_invoices_create")
    @api_action
    def api_invoices_create():
        return ok("Invoice saved.", 201, invoice=service.save_invoice(json_body()))

    @app.route("/api/invoices/<id>", methods=["GET"], endpoint="api_invoices_get")
    @api_action
    def api_invoices_get(id: str):
        invoice = service.get(id)
        return ok(
            "Invoice loaded.",
            invoice=invoice,
            company_profile=service.get_company_profile(invoice.company_profile_id),
        )

    @app.route("/api/invoices/<id>", methods=["PUT"], endpoint="api_invoices_update")
    @api_action
    def api_invoices_update(id: str):
        return ok("Invoice saved.", invoice=service.save_invoice(json_body(), id=id))

    @app.route("/api/invoices/<id>/status", methods=["POST"], endpoint="api_invoices_status")
    @api_action
    def api_invoices_status(id: str):
        invoice = service.set_status(id, json_body().get("status"))
        return ok("Invoice status updated.", invoice=invoice)

    @app.route("/api/invoices/<id>", methods=["DELETE"], endpoint="api_invoices_delete")
    @api_action
    def api_invoices_delete(id: str):
        service.delete(id)
        return ok("Invoice deleted.")
