"""
Bug Tracker
Bug Service — bug CRUD and the resolution audit trail.

Bug writes follow the store's permissive contract: updates and deletes
against a missing id succeed without effect, and no field other than
``priority`` is validated server-side. Resolution rows are insert-only.
"""

import logging

from bugtrack.core.result import OperationResult
from bugtrack.models import db
from bugtrack.models.bug import (
    BUG_PRIORITIES,
    DEFAULT_PRIORITY,
    UPDATABLE_FIELDS,
    Bug,
    Resolution,
)
from bugtrack.services.notification import NotificationService
from bugtrack.utils.helpers import coerce_id, get_or_raise, now_utc, parse_datetime

logger = logging.getLogger(__name__)

_ID_FIELDS = {"project_id", "assignee_id", "resolved_by"}


def normalize_priority(value, *, fallback=DEFAULT_PRIORITY):
    """Return ``value`` if it is a known priority, else ``fallback``.

    Keeps the priority histogram summing to the bug count.
    """
    if value in BUG_PRIORITIES:
        return value
    if value not in (None, ""):
        logger.warning("Unknown bug priority %r, using %r", value, fallback)
    return fallback


# ═══════════════════════════════════════════════════════════════
# Bugs
# ═══════════════════════════════════════════════════════════════

def create_bug(data: dict, reporter_id) -> OperationResult:
    """Create an open bug and notify its assignee, if any.

    Returns an OperationResult whose value is the serialised bug; the live
    notification push is recorded as the ``realtime`` side outcome.
    """
    bug = Bug(
        title=data.get("title"),
        description=data.get("description") or "",
        priority=normalize_priority(data.get("priority")),
        status="open",
        project_id=coerce_id(data.get("project_id")),
        reporter_id=reporter_id,
        assignee_id=coerce_id(data.get("assignee_id")),
    )
    db.session.add(bug)
    db.session.commit()
    logger.info("Bug %s reported by user %s", bug.id, reporter_id,
                extra={"bug_id": bug.id, "user_id": reporter_id})

    result = OperationResult.success(bug.to_dict())
    NotificationService.notify_assignment(bug, result)
    return result


def list_bugs(*, project_id=None, status=None, assignee_id=None) -> list[Bug]:
    q = Bug.query
    if project_id is not None:
        q = q.filter(Bug.project_id == project_id)
    if status:
        q = q.filter(Bug.status == status)
    if assignee_id is not None:
        q = q.filter(Bug.assignee_id == assignee_id)
    return q.order_by(Bug.id).all()


def get_bug(bug_id) -> Bug:
    return get_or_raise(Bug, bug_id)


def build_update_values(data: dict) -> dict:
    """Translate a partial-update payload into column values.

    Unknown keys are ignored, reference ids are coerced to int where
    possible, ``resolved_at`` is parsed into a datetime, and an unknown
    priority is dropped from the update.
    """
    values = {}
    for field in UPDATABLE_FIELDS:
        if field not in data:
            continue
        value = data[field]
        if field in _ID_FIELDS:
            value = coerce_id(value)
        elif field == "resolved_at":
            value = parse_datetime(value)
        elif field == "priority":
            if value not in BUG_PRIORITIES:
                logger.warning("Ignoring unknown priority %r in bug update", value)
                continue
        values[field] = value
    return values


def apply_update(bug_id, values: dict) -> int:
    """Write ``values`` to bug ``bug_id``; returns the number of rows matched."""
    if not values:
        return 0
    matched = (
        Bug.query.filter(Bug.id == bug_id)
        .update(values, synchronize_session=False)
    )
    db.session.commit()
    if not matched:
        logger.debug("Update matched no bug", extra={"bug_id": bug_id})
    return matched


def delete_bug(bug_id) -> int:
    """Hard-delete a bug; its Resolution rows are left in place."""
    deleted = Bug.query.filter(Bug.id == bug_id).delete(synchronize_session=False)
    db.session.commit()
    if deleted:
        logger.info("Bug %s deleted", bug_id, extra={"bug_id": bug_id})
    return deleted


# ═══════════════════════════════════════════════════════════════
# Resolution audit trail
# ═══════════════════════════════════════════════════════════════

def append_resolution(bug_id, *, resolution, resolved_by, created_at=None) -> Resolution:
    """Insert one audit row. The bug is not required to exist."""
    entry = Resolution(
        bug_id=bug_id,
        resolved_by=resolved_by,
        resolution=resolution,
        created_at=created_at or now_utc(),
    )
    db.session.add(entry)
    db.session.commit()
    return entry


def list_resolutions(bug_id) -> list[Resolution]:
    """Audit rows for ``bug_id``, most recent first."""
    return (
        Resolution.query.filter(Resolution.bug_id == bug_id)
        .order_by(Resolution.created_at.desc(), Resolution.id.desc())
        .all()
    )
