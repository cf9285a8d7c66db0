from __future__ import annotations

import importlib
import uuid
from pathlib import Path

import structlog
from dotenv import load_dotenv
from flask import Flask, g, request

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .contacts.controller import register as register_contacts
from .container import Container, build_container
from .database.bootstrap import apply_schema, list_tables
from .invoices.controller import register as register_invoices
from .jobs.controller import register as register_jobs
from .logging_config import setup_logging
from .notices.controller import register as register_notices
from .quotations.controller import register as register_quotations
from .tasks.controller import register as register_tasks
from .transactions.controller import register as register_transactions

log = structlog.get_logger(__name__)


def _register_request_id(app: Flask) -> None:
    @app.before_request
    def bind_request_id():
        g.request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=g.request_id)

    @app.after_request
    def add_request_id(response):
        response.headers["X-Request-ID"] = getattr(g, "request_id", "")
        return response


def create_app(container: Container | None = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    setup_logging(getattr(settings, "LOG_LEVEL", None))

    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.config["ADMIN_PIN_HASH"] = getattr(settings, "ADMIN_PIN_HASH", None)

    db_config = getattr(settings, "DB_CONFIG")
    backend = getattr(settings, "STORE_BACKEND", "mysql")
    log.info(
        "app_starting",
        settings=settings_module,
        backend=backend,
        db=f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')}",
    )

    if container is None and backend == "mysql" and bool(getattr(settings, "AUTO_INIT_DB", False)):
        schema_path = Path(__file__).resolve().parents[3] / "database" / "schema.sql"
        apply_schema(db_config, schema_path=schema_path)
        log.info("schema_ready", tables=len(list_tables(db_config)))

    container = container or build_container(db_config=db_config, backend=backend)
    app.extensions["epos_container"] = container

    _register_request_id(app)
    register_attendance(app, container)
    register_jobs(app, container)
    register_quotations(app, container)
    register_tasks(app, container)
    register_transactions(app, container)
    register_invoices(app, container)
    register_contacts(app, container)
    register_notices(app, container)

    return app
