from __future__ import annotations

from flask import Flask, request

from ..common.responses import api_action, json_body, ok
from ..container import Container
from ..core.exceptions import ValidationError


def register(app: Flask, container: Container) -> None:
    service = container.contact_service

    @app.route("/api/contacts", methods=["GET"], endpoint="api_contacts_list")
    @api_action
    def api_contacts_list():
        return ok("Contacts loaded.", contacts=service.list_contacts(request.args.get("q", "")))

    @app.route("/api/contacts", methods=["POST"], endpoint="api_contacts_add")
    @api_action
    def api_contacts_add():
        return ok("Contact saved successfully.", 201, contact=service.add(json_body()))

    @app.route("/api/contacts/<id>", methods=["PUT"], endpoint="api_contacts_update")
    @api_action
    def api_contacts_update(id: str):
        return ok("Contact updated successfully.", contact=service.update(id, json_body()))

    @app.route("/api/contacts/bulk", methods=["POST"], endpoint="api_contacts_bulk")
    @api_action
    def api_contacts_bulk():
        rows = json_body().get("contacts")
        if rows is not None and not isinstance(rows, list):
            raise ValidationError("contacts must be a list.")
        count = service.bulk_add(rows or [])
        return ok(f"Successfully imported {count} contacts.", 201, imported=count)
