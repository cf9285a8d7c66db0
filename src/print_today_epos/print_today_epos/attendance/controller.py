from __future__ import annotations

from flask import Flask, request, session
from werkzeug.security import check_password_hash

from ..common.responses import (
    ADMIN_SESSION_KEY,
    admin_required,
    api_action,
    json_body,
    ok,
    query_date,
)
from ..core.exceptions import AuthorizationError
from ..container import Container


def register(app: Flask, container: Container) -> None:
    service = container.attendance_service

    @app.route("/api/attendance/clock-in", methods=["POST"], endpoint="api_clock_in")
    @api_action
    def api_clock_in():
        data = json_body()
        record = service.clock_in(data.get("operator"))
        return ok("Clocked in successfully.", 201, record=record)

    @app.route("/api/attendance/<record_id>/start-break", methods=["POST"], endpoint="api_start_break")
    @api_action
    def api_start_break(record_id: str):
        return ok("Break started.", record=service.start_break(record_id))

    @app.route("/api/attendance/<record_id>/end-break", methods=["POST"], endpoint="api_end_break")
    @api_action
    def api_end_break(record_id: str):
        return ok("Break ended.", record=service.end_break(record_id))

    @app.route("/api/attendance/<record_id>/clock-out", methods=["POST"], endpoint="api_clock_out")
    @api_action
    def api_clock_out(record_id: str):
        return ok("Clocked out successfully.", record=service.clock_out(record_id))

    @app.route("/api/attendance/status/<operator>", methods=["GET"], endpoint="api_operator_status")
    @api_action
    def api_operator_status(operator: str):
        view = service.get_operator_status(operator)
        if view is None:
            return ok("Not clocked in today.", state="not-clocked-in", status=None)
        return ok("Status loaded.", state=view.record.status.value, status=view)

    @app.route("/api/attendance/live", methods=["GET"], endpoint="api_live_statuses")
    @api_action
    def api_live_statuses():
        statuses = service.get_live_statuses()
        return ok("Live statuses loaded.", statuses={op.value: st.value for op, st in statuses.items()})

    @app.route("/api/attendance/report", methods=["GET"], endpoint="api_attendance_report")
    @api_action
    def api_attendance_report():
        data = container.attendance_report_service.build_report(
            start=query_date("start"),
            end=query_date("end"),
            operator=request.args.get("operator") or None,
        )
        return ok("Report ready.", rows=data.rows, summary=data.summary)

    @app.route("/api/admin/unlock", methods=["POST"], endpoint="api_admin_unlock")
    @api_action
    def api_admin_unlock():
        pin = str(json_body().get("pin") or "")
        pin_hash = app.config.get("ADMIN_PIN_HASH")
        if not pin or not pin_hash or not check_password_hash(pin_hash, pin):
            session.pop(ADMIN_SESSION_KEY, None)
            raise AuthorizationError("Incorrect PIN.")
        session[ADMIN_SESSION_KEY] = True
        return ok("Admin unlocked.")

    @app.route("/api/admin/lock", methods=["POST"], endpoint="api_admin_lock")
    @api_action
    def api_admin_lock():
        session.pop(ADMIN_SESSION_KEY, None)
        return ok("Admin locked.")

    @app.route("/api/admin/time-records/<record_id>", methods=["PUT"], endpoint="api_admin_update_record")
    @api_action
    @admin_required
    def api_admin_update_record(record_id: str):
        data = json_body()
        record = service.admin_update_record(
            record_id,
            clock_in_time=data.get("clock_in_time"),
            clock_out_time=data.get("clock_out_time"),
            breaks=data.get("breaks") or [],
            status=data.get("status"),
        )
        return ok("Time record updated.", record=record)

    @app.route("/api/admin/time-records", methods=["POST"], endpoint="api_admin_create_record")
    @api_action
    @admin_required
    def api_admin_create_record():
        data = json_body()
        record = service.create_manual_record(
            data.get("operator"),
            clock_in_time=data.get("clock_in_time"),
            clock_out_time=data.get("clock_out_time"),
            breaks=data.get("breaks") or [],
            status=data.get("status"),
        )
        return ok("Manual time record created.", 201, record=record)

    @app.route("/api/admin/time-records/<record_id>", methods=["DELETE"], endpoint="api_admin_delete_record")
    @api_action
    @admin_required
    def api_admin_delete_record(record_id: str):
        service.delete_record(record_id)
        return ok("Time record deleted.")
