"""
User Service — registration, credential checks and lookups.
"""

import logging

from email_validator import EmailNotValidError, validate_email
from flask import current_app

from bugtrack.core.exceptions import AuthenticationError, ConflictError, ValidationError
from bugtrack.models import db
from bugtrack.models.user import User
from bugtrack.utils.crypto import hash_password, verify_password
from bugtrack.utils.errors import E

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email/password"


def _normalize_email(email: str) -> str:
    email = (email or "").strip()
    if not email:
        raise ValidationError("Email is required", code=E.VALIDATION_REQUIRED)
    try:
        valid = validate_email(email, check_deliverability=False)
    except EmailNotValidError as e:
        raise ValidationError(f"Invalid email: {e}", details={"email": str(e)})
    return valid.normalized.lower()


def get_user_by_email(email: str) -> User | None:
    return User.query.filter_by(email=email).first()


def register_user(name: str, email: str, password: str) -> User:
    """Create a user with a bcrypt-hashed password.

    Raises:
        ValidationError: email malformed or password missing.
        ConflictError: a user with this email already exists.
    """
    email = _normalize_email(email)
    if not password:
        raise ValidationError("Password is required", code=E.VALIDATION_REQUIRED)

    if get_user_by_email(email):
        raise ConflictError("User", "email", email, message="Email already exists")

    rounds = current_app.config.get("BCRYPT_ROUNDS", 12)
    user = User(
        name=(name or "").strip() or None,
        email=email,
        password_hash=hash_password(password, rounds=rounds),
    )
    db.session.add(user)
    db.session.commit()
    logger.info("Registered user %s", user.id, extra={"user_id": user.id})
    return user


def authenticate_user(email: str, password: str) -> User:
    """Return the user matching the credentials.

    Unknown email and wrong password produce the same error so the
    response does not reveal which accounts exist.
    """
    email = (email or "").strip().lower()
    user = get_user_by_email(email) if email else None
    if user is None or not verify_password(password, user.password_hash):
        raise AuthenticationError(INVALID_CREDENTIALS, code=E.AUTH_INVALID)
    return user


def list_users() -> list[User]:
    return User.query.order_by(User.id).all()


def user_names(user_ids) -> dict:
    """Map each known id in ``user_ids`` to the user's display name."""
    ids = [uid for uid in user_ids if isinstance(uid, int)]
    if not ids:
        return {}
    rows = db.session.query(User.id, User.name).filter(User.id.in_(ids)).all()
    return {uid: name for uid, name in rows}
