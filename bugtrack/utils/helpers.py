"""Shared helpers for services and blueprints.

get_or_raise:   primary-key lookup raising NotFoundError
parse_datetime: lenient timestamp parsing (ISO strings, epoch millis)
as_utc:         normalise stored datetimes (SQLite drops tzinfo)
coerce_id:      reference ids arrive as ints or numeric strings
"""

import logging
from datetime import datetime, timezone

from bugtrack.core.exceptions import NotFoundError
from bugtrack.models import db

logger = logging.getLogger(__name__)


def get_or_raise(model, pk, label=None):
    """Fetch a model instance by primary key or raise NotFoundError."""
    obj = db.session.get(model, pk) if pk is not None else None
    if obj is None:
        raise NotFoundError(resource=label or model.__name__, resource_id=pk)
    return obj


def as_utc(value):
    """Return ``value`` as an aware UTC datetime; naive values are assumed UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def now_utc():
    return datetime.now(timezone.utc)


def parse_datetime(value):
    """Parse a client-supplied timestamp into an aware UTC datetime.

    Accepts datetime objects, ISO-8601 strings (a trailing ``Z`` is
    allowed) and epoch milliseconds. Returns None for empty or
    unparseable input.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return as_utc(value)
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value / 1000.0, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return as_utc(datetime.fromisoformat(text))
    except ValueError:
        logger.debug("Unparseable timestamp %r", value)
        return None


def coerce_id(value):
    """Convert a reference id to int; None for empty input.

    Non-numeric values are returned unchanged so the caller's store write
    decides what happens with them.
    """
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return value


def epoch_ms(value=None) -> int:
    """Milliseconds since the epoch for ``value`` (default: now)."""
    return int(as_utc(value or now_utc()).timestamp() * 1000)
