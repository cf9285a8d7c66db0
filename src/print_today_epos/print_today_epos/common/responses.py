"""JSON response helpers shared by the Flask controllers."""

from __future__ import annotations

from datetime import date
from functools import wraps
from typing import Any, Optional

import structlog
from flask import jsonify, request, session

from ..core.exceptions import (
    AuthorizationError,
    DocumentNotFoundError,
    DomainError,
    NotFoundError,
    PersistenceError,
    SourceNotFound,
    ValidationError,
)
from .datetime_utils import parse_iso_date
from .serialization import to_jsonable

log = structlog.get_logger(__name__)

ADMIN_SESSION_KEY = "admin_unlocked"


def ok(message: str, code: int = 200, **payload: Any):
    body = {"success": True, "message": message}
    body.update(to_jsonable(payload))
    return jsonify(body), code


def fail(message: str, code: int = 400):
    return jsonify({"success": False, "message": message}), code


def json_body() -> dict:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object.")
    return data


def query_date(name: str) -> Optional[date]:
    value = (request.args.get(name) or "").strip()
    if not value:
        return None
    try:
        return parse_iso_date(value)
    except ValueError:
        raise ValidationError(f"Invalid {name} (expected YYYY-MM-DD).")


def query_int(name: str, default: Optional[int] = None) -> Optional[int]:
    value = (request.args.get(name) or "").strip()
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        raise ValidationError(f"Invalid {name}.")


def api_action(view):
    """Turn service exceptions into `{"success": false, "message": ...}` responses."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        try:
            return view(*args, **kwargs)
        except AuthorizationError as e:
            return fail(str(e), 403)
        except (NotFoundError, SourceNotFound, DocumentNotFoundError) as e:
            return fail(str(e), 404)
        except DomainError as e:
            log.info("request_rejected", endpoint=request.endpoint, error=type(e).__name__, message=str(e))
            return fail(str(e), 400)
        except PersistenceError:
            log.exception("persistence_failure", endpoint=request.endpoint)
            return fail("The operation could not be saved. Please try again.", 500)
        except Exception:
            log.exception("unexpected_failure", endpoint=request.endpoint)
            return fail("Unexpected server error.", 500)

    return wrapper


def admin_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if not session.get(ADMIN_SESSION_KEY):
            raise AuthorizationError("Admin access is locked.")
        return view(*args, **kwargs)

    return wrapper
