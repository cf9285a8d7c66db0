from __future__ import annotations

from flask import Flask

from ..common.responses import admin_required, api_action, json_body, ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    service = container.notice_service

    @app.route("/api/notices/current", methods=["GET"], endpoint="api_notices_current")
    @api_action
    def api_notices_current():
        return ok("Notice loaded.", notice=service.get_current())

    @app.route("/api/notices/current", methods=["PUT"], endpoint="api_notices_save")
    @api_action
    @admin_required
    def api_notices_save():
        data = json_body()
        notice = service.save(data.get("content"), data.get("operator"))
        return ok("Notice updated successfully.", notice=notice)
