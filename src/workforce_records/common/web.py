"""Helpers shared by the JSON controllers.

The identity provider sits in front of this service and forwards the caller's
identity in request headers; they are trusted as-is.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from decimal import Decimal
from functools import wraps
from typing import Any, Optional

from flask import jsonify, request

from ..core.access import Caller
from ..core.constants import CALLER_ID_HEADER, CALLER_ROLE_HEADER
from ..core.enums import Role
from ..core.exceptions import (
    AttendanceStateError,
    AlreadyProcessedError,
    AuthenticationError,
    AuthorizationError,
    DomainError,
    NotFoundError,
    StorageConflictError,
)

logger = logging.getLogger(__name__)

# Checked in order; the first matching class wins.
_STATUS_BY_ERROR: tuple[tuple[type[DomainError], int], ...] = (
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (NotFoundError, 404),
    (AttendanceStateError, 409),
    (AlreadyProcessedError, 409),
    (StorageConflictError, 409),
)


def http_status_for(error: DomainError) -> int:
    for cls, status in _STATUS_BY_ERROR:
        if isinstance(error, cls):
            return status
    return 400


def current_caller() -> Caller:
    raw_id = (request.headers.get(CALLER_ID_HEADER) or "").strip()
    raw_role = (request.headers.get(CALLER_ROLE_HEADER) or "").strip().lower()
    if not raw_id or not raw_role:
        raise AuthenticationError("Missing caller identity")
    try:
        return Caller(user_id=int(raw_id), role=Role(raw_role))
    except ValueError:
        raise AuthenticationError("Malformed caller identity")


def json_body() -> dict:
    body = request.get_json(silent=True)
    return body if isinstance(body, dict) else {}


def jsonable(value: Any) -> Any:
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat(timespec="seconds")
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [jsonable(v) for v in value]
    return value


def ok(data: Any, status: int = 200, *, message: Optional[str] = None):
    payload: dict[str, Any] = {"success": True, "data": jsonable(data)}
    if isinstance(data, (list, tuple)):
        payload["count"] = len(data)
    if message:
        payload["message"] = message
    return jsonify(payload), status


def fail(error: DomainError):
    payload = {
        "success": False,
        "error": {"code": error.code, "message": str(error), "retryable": error.retryable},
    }
    return jsonify(payload), http_status_for(error)


def api_view(view):
    """Run a view, turning domain errors into structured JSON failures."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        try:
            return view(*args, **kwargs)
        except DomainError as e:
            if isinstance(e, StorageConflictError):
                logger.warning("%s %s: %s", request.method, request.path, e)
            return fail(e)
        except Exception:
            logger.exception("unhandled error in %s %s", request.method, request.path)
            return jsonify({"success": False, "error": {"code": "SERVER_ERROR", "message": "Server error"}}), 500

    return wrapper
