from __future__ import annotations

import logging

from flask import jsonify

from ..core.exceptions import DeviceError, InvalidTransition, NotFoundError, PersistenceError, ValidationError

logger = logging.getLogger(__name__)

_STATUS = (
    (ValidationError, 400),
    (NotFoundError, 404),
    (DeviceError, 409),
    (InvalidTransition, 409),
    (PersistenceError, 503),
)


def ok(data=None, status: int = 200, **extra):
    body = {"success": True, "data": data}
    body.update(extra)
    return jsonify(body), status


def fail(message: str, status: int, **extra):
    body = {"success": False, "message": message}
    body.update(extra)
    return jsonify(body), status


def error_response(e: Exception):
    """Map a raised exception to a JSON error. Unknown errors become a generic 500."""
    for exc_type, status in _STATUS:
        if isinstance(e, exc_type):
            return fail(str(e), status)
    logger.exception("Unhandled error in request")
    return fail("Internal server error", 500)
