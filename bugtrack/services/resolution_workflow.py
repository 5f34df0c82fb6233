"""
Bug Tracker
Resolution Workflow — PUT /api/bugs/<id>.

Sequence for one request (no lock, no enclosing transaction):

    1. apply the partial update to the bug            (primary, committed)
    2. if status == "closed" and a resolution text is
       present, append one Resolution audit row        (side: "audit")
    3. recompute the analytics snapshot and broadcast
       it to every connection                          (side: "analytics")

A database error in step 1 is answered in-band and skips steps 2 and 3.
Steps 2 and 3 never fail the request: errors are logged and recorded on
the returned OperationResult, which then reports ``degraded``. Two
concurrent closes of the same bug each append a row and each broadcast.
"""

import logging

from sqlalchemy.exc import SQLAlchemyError

from bugtrack.core.result import OperationResult
from bugtrack.models import db
from bugtrack.services import analytics, bug_service
from bugtrack.services.realtime import get_hub
from bugtrack.utils.errors import E
from bugtrack.utils.helpers import coerce_id, parse_datetime

logger = logging.getLogger(__name__)

CLOSED = "closed"


def audit_text(data: dict) -> str | None:
    """Resolution text to audit for this payload, or None when no row is due."""
    if data.get("status") != CLOSED:
        return None
    resolution = data.get("resolution")
    if not resolution:
        return None
    return resolution if isinstance(resolution, str) else str(resolution)


def update_bug(bug_id, data: dict, caller_id) -> OperationResult:
    """Run the update → audit → analytics sequence for one request.

    Args:
        bug_id: Target bug; a missing bug makes step 1 a no-op.
        data: Partial update payload.
        caller_id: Authenticated user, credited when the payload names no
            resolver.

    Returns:
        OperationResult with value ``{"success": True}``, or a failure
        (``ERR_DATABASE``) when the bug row itself could not be written.
    """
    values = bug_service.build_update_values(data)
    try:
        bug_service.apply_update(bug_id, values)
    except SQLAlchemyError as exc:
        db.session.rollback()
        logger.error("Failed to update bug %s: %s", bug_id, exc, extra={"bug_id": bug_id})
        return OperationResult.failure("Failed to update bug", code=E.DATABASE)

    result = OperationResult.success({"success": True})

    credited = None
    text = audit_text(data)
    if text is not None:
        resolver = coerce_id(data.get("resolved_by")) or caller_id
        try:
            bug_service.append_resolution(
                bug_id,
                resolution=text,
                resolved_by=resolver,
                created_at=parse_datetime(data.get("resolved_at")),
            )
        except SQLAlchemyError as exc:
            db.session.rollback()
            logger.warning("Failed to create resolution audit record for bug %s: %s",
                           bug_id, exc, extra={"bug_id": bug_id})
            result.record("audit", ok=False, detail=str(exc))
        else:
            credited = resolver
            result.record("audit", ok=True)

    _push_analytics(result, caller_id, credited, bug_id)
    return result


def _push_analytics(result: OperationResult, caller_id, credited, bug_id) -> None:
    try:
        payload = analytics.push_payload(caller_id, credited)
        delivered = get_hub().broadcast(analytics.ANALYSIS_EVENT, payload)
    except Exception as exc:
        db.session.rollback()
        logger.warning("Failed to compute/emit analytics after bug %s update: %s",
                       bug_id, exc, extra={"bug_id": bug_id}, exc_info=True)
        result.record("analytics", ok=False, detail=str(exc))
        return
    result.record("analytics", ok=delivered,
                  detail=None if delivered else "broadcast failed")
