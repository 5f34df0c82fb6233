"""
Bearer tokens for the identity gate.

Tokens are HS256-signed with ``JWT_SECRET_KEY`` (``SECRET_KEY`` when unset)
and live ``JWT_ACCESS_EXPIRES`` seconds. Claims:

    sub    user id, as a string
    email  optional, informational only
    type   always "access"
    iat / exp / jti
"""

import uuid
from datetime import datetime, timedelta, timezone

import jwt
from flask import current_app

ALGORITHM = "HS256"
TOKEN_TYPE = "access"


def _signing_key() -> str:
    cfg = current_app.config
    return cfg.get("JWT_SECRET_KEY") or cfg["SECRET_KEY"]


def generate_access_token(user_id: int, email: str | None = None) -> str:
    issued = datetime.now(timezone.utc)
    lifetime = timedelta(seconds=current_app.config.get("JWT_ACCESS_EXPIRES", 86400))
    claims = {
        "sub": str(user_id),
        "type": TOKEN_TYPE,
        "iat": issued,
        "exp": issued + lifetime,
        "jti": uuid.uuid4().hex,
    }
    if email:
        claims["email"] = email
    return jwt.encode(claims, _signing_key(), algorithm=ALGORITHM)


def decode_access_token(token: str) -> dict:
    """Verify signature, expiry and token type; return the claims.

    Raises:
        jwt.InvalidTokenError: any verification failure (expired tokens
            raise the ``ExpiredSignatureError`` subclass).
    """
    claims = jwt.decode(
        token, _signing_key(), algorithms=[ALGORITHM],
        options={"require": ["sub", "exp"]},
    )
    if claims.get("type") != TOKEN_TYPE:
        raise jwt.InvalidTokenError("not an access token")
    return claims
