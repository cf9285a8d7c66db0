from __future__ import annotations

from flask import Flask, request

from ..common.responses import admin_required, api_action, json_body, ok, query_date, query_int
from ..container import Container


def register(app: Flask, container: Container) -> None:
    service = container.transaction_service

    @app.route("/api/transactions", methods=["GET"], endpoint="api_transactions_search")
    @api_action
    def api_transactions_search():
        term = request.args.get("q", "")
        method = request.args.get("payment_method") or None
        if term or method:
            txs = service.search(term, payment_method=method)
        else:
            txs = service.list_recent(request.args.get("type") or None, limit=query_int("limit", 20))
        return ok("Transactions loaded.", transactions=txs)

    @app.route("/api/transactions", methods=["POST"], endpoint="api_transactions_create")
    @api_action
    def api_transactions_create():
        return ok("Transaction added successfully.", 201, transaction=service.create(json_body()))

    @app.route("/api/transactions/pending", methods=["GET"], endpoint="api_transactions_pending")
    @api_action
    @admin_required
    def api_transactions_pending():
        return ok("Pending transactions loaded.", transactions=service.pending())

    @app.route("/api/transactions/report", methods=["GET"], endpoint="api_transactions_report")
    @api_action
    def api_transactions_report():
        rows = service.report(
            term=request.args.get("q", ""),
            start=query_date("start"),
            end=query_date("end"),
        )
        return ok("Report ready.", rows=rows)

    @app.route("/api/transactions/till-stats", methods=["GET"], endpoint="api_transactions_till_stats")
    @api_action
    def api_transactions_till_stats():
        return ok("Till stats loaded.", stats=service.till_stats())

    @app.route("/api/transactions/bulk-delete", methods=["POST"], endpoint="api_transactions_bulk_delete")
    @api_action
    @admin_required
    def api_transactions_bulk_delete():
        deleted = service.bulk_delete(json_body().get("ids") or [])
        return ok(f"{deleted} transaction(s) deleted successfully.", deleted=deleted)

    @app.route("/api/transactions/bulk-check", methods=["POST"], endpoint="api_transactions_bulk_check")
    @api_action
    @admin_required
    def api_transactions_bulk_check():
        checked = service.bulk_mark_checked(json_body().get("ids") or [])
        return ok(f"{checked} transaction(s) marked as checked.", checked=checked)

    @app.route("/api/transactions/<id>", methods=["PUT"], endpoint="api_transactions_update")
    @api_action
    def api_transactions_update(id: str):
        return ok("Transaction updated successfully.", transaction=service.update(id, json_body()))

    @app.route("/api/transactions/<id>", methods=["DELETE"], endpoint="api_transactions_delete")
    @api_action
    @admin_required
    def api_transactions_delete(id: str):
        service.delete(id)
        return ok("Transaction deleted successfully.")

    @app.route("/api/transactions/<id>/check", methods=["POST"], endpoint="api_transactions_check")
    @api_action
    @admin_required
    def api_transactions_check(id: str):
        return ok("Transaction marked as checked.", transaction=service.mark_checked(id))
