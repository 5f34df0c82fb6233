"""
Application-wide exception hierarchy.

Services raise these types; ``create_app`` registers one handler per type
that turns it into the in-band error body described in
``bugtrack.utils.errors``. Callers branch on the type, never on the
message text.

Usage:
    from bugtrack.core.exceptions import NotFoundError, ValidationError

    raise NotFoundError(resource="Bug", resource_id=42)
    raise ValidationError("Title is required", details={"title": "missing"})
"""


class NotFoundError(Exception):
    """Raised when a requested resource does not exist.

    Args:
        resource: Human-readable entity name (e.g. "Bug", "User").
        resource_id: The PK that was looked up.
    """

    def __init__(self, resource: str, resource_id: int | str | None = None) -> None:
        self.resource = resource
        self.resource_id = resource_id
        msg = f"{resource}"
        if resource_id is not None:
            msg += f" id={resource_id}"
        msg += " not found"
        super().__init__(msg)


class ValidationError(Exception):
    """Raised when input is missing or malformed.

    Args:
        message: Human-readable explanation of what failed.
        details: Optional field-level breakdown.
        code: Machine-readable code; defaults to ``ERR_VALIDATION_INVALID``.
    """

    def __init__(self, message: str, details: dict | None = None,
                 code: str = "ERR_VALIDATION_INVALID") -> None:
        self.details = details or {}
        self.code = code
        super().__init__(message)


class ConflictError(Exception):
    """Raised when an operation would duplicate a value that must be unique.

    ``message`` overrides the generated text when the caller needs the
    historical wording (e.g. "Email already exists").
    """

    def __init__(self, resource: str, field: str, value: str | None = None,
                 message: str | None = None) -> None:
        self.resource = resource
        self.field = field
        self.value = value
        super().__init__(message or f"{resource} with {field}={value!r} already exists")


class AuthenticationError(Exception):
    """Raised when a credential is absent, malformed or rejected.

    Args:
        message: Text returned to the client ("Missing token", ...).
        code: ``ERR_AUTH_MISSING`` or ``ERR_AUTH_INVALID``.
    """

    def __init__(self, message: str, code: str = "ERR_AUTH_INVALID") -> None:
        self.code = code
        super().__init__(message)
