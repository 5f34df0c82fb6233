"""
Identity gate — verifies the bearer token on every protected API call.

Protected paths are everything under ``/api/`` except the prefixes in
``PUBLIC_PREFIXES``. Failures are answered in-band (HTTP 200 with an
``error`` body), never with 401:

    no Authorization header        → {"error": "Missing token"}
    malformed / bad signature / exp → {"error": "Invalid token"}

On success the caller is exposed as ``g.current_user_id`` (int).
"""

import logging

import jwt as pyjwt
from flask import g, request

from bugtrack.core.exceptions import AuthenticationError
from bugtrack.services.jwt_service import decode_access_token
from bugtrack.utils.errors import E, api_error

logger = logging.getLogger(__name__)

PUBLIC_PREFIXES = (
    "/api/auth/login",
    "/api/auth/register",
    "/api/health",
)


def _is_protected(path: str) -> bool:
    if not path.startswith("/api/"):
        return False
    return not any(path.startswith(p) for p in PUBLIC_PREFIXES)


def resolve_bearer(auth_header: str | None) -> int:
    """Return the user id carried by an ``Authorization`` header value.

    Raises:
        AuthenticationError: header absent or token rejected.
    """
    if not auth_header:
        raise AuthenticationError("Missing token", code=E.AUTH_MISSING)

    parts = auth_header.split(" ", 1)
    token = parts[1].strip() if len(parts) == 2 else ""
    if not token:
        raise AuthenticationError("Invalid token", code=E.AUTH_INVALID)

    try:
        claims = decode_access_token(token)
        user_id = int(claims["sub"])
    except (pyjwt.InvalidTokenError, KeyError, TypeError, ValueError) as exc:
        logger.debug("Rejected bearer token: %s", exc)
        raise AuthenticationError("Invalid token", code=E.AUTH_INVALID) from exc

    return user_id


def init_jwt_middleware(app):
    """Register the identity gate as a before_request hook."""

    @app.before_request
    def _jwt_auth():
        g.current_user_id = None

        if request.method == "OPTIONS" or not _is_protected(request.path):
            return None

        try:
            g.current_user_id = resolve_bearer(request.headers.get("Authorization"))
        except AuthenticationError as exc:
            return api_error(exc.code, str(exc))
        return None
