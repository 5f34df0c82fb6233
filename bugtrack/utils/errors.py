"""In-band API errors.

The transport status stays 200 and the failure travels in the body as
``{"error": <message>, "code": <ERR_*>}``; clients look for the ``error``
key rather than the status code.

    from bugtrack.utils.errors import api_error, E

    return api_error(E.NOT_FOUND, "Bug not found")
"""

from __future__ import annotations

from flask import jsonify

IN_BAND_STATUS = 200


class E:
    """Error codes carried in the ``code`` field."""

    AUTH_MISSING = "ERR_AUTH_MISSING"
    AUTH_INVALID = "ERR_AUTH_INVALID"
    VALIDATION_REQUIRED = "ERR_VALIDATION_REQUIRED"
    VALIDATION_INVALID = "ERR_VALIDATION_INVALID"
    NOT_FOUND = "ERR_NOT_FOUND"
    CONFLICT_DUPLICATE = "ERR_CONFLICT_DUPLICATE"
    METHOD_NOT_ALLOWED = "ERR_METHOD_NOT_ALLOWED"
    DATABASE = "ERR_DATABASE"
    INTERNAL = "ERR_INTERNAL"


def api_error(code: str, message: str, *, status: int | None = None,
              details: dict | None = None):
    """Build ``(response, status)`` for a failed request.

    ``details`` (field-level validation info) is only included when
    non-empty. ``status`` overrides the in-band 200 for the few routes
    that must signal failure at the transport level (health probes).
    """
    body = {"error": message, "code": code}
    if details:
        body["details"] = details
    return jsonify(body), status or IN_BAND_STATUS
