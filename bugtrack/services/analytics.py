"""
Bug Tracker
Analytics Aggregator — resolution statistics.

Snapshot fields (camelCase, consumed by the browser client as-is):

    totalResolved     count of all Resolution rows ever written
    totalResolvedBy   Resolution rows credited to the requesting user
    avgResolutionMs   mean of (bug.resolved_at - resolution.created_at)
                      over resolutions whose bug still exists and has a
                      resolved_at; 0 when there are none. Not clamped,
                      so inconsistent client timestamps can make it
                      negative.
    topSolvers        up to TOP_SOLVER_LIMIT {name, count}, count desc
    priorityCounts    {high, medium, low} over current bugs, any status

The push variant adds ``solved`` (always 1), ``resolvedByUserId`` and
``timestamp`` (epoch ms). All queries are read-only.
"""

import logging
import math

from sqlalchemy import func

from bugtrack.models import db
from bugtrack.models.bug import BUG_PRIORITIES, Bug, Resolution
from bugtrack.services.user_service import user_names
from bugtrack.utils.helpers import as_utc, epoch_ms

logger = logging.getLogger(__name__)

TOP_SOLVER_LIMIT = 6
AVERAGE_BATCH_SIZE = 1000
UNKNOWN_SOLVER = "Unknown"
ANALYSIS_EVENT = "analysis"


def total_resolved() -> int:
    return db.session.query(func.count(Resolution.id)).scalar() or 0


def total_resolved_by(user_id) -> int:
    if user_id is None:
        return 0
    return (
        db.session.query(func.count(Resolution.id))
        .filter(Resolution.resolved_by == user_id)
        .scalar()
        or 0
    )


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def average_resolution_ms() -> int:
    """Mean audit-to-closure latency in milliseconds (see module docstring).

    Rows are streamed in batches of ``AVERAGE_BATCH_SIZE`` so memory stays
    flat as the audit log grows.
    """
    rows = (
        db.session.query(Bug.resolved_at, Resolution.created_at)
        .select_from(Resolution)
        .join(Bug, Bug.id == Resolution.bug_id)
        .filter(Bug.resolved_at.isnot(None))
        .filter(Resolution.created_at.isnot(None))
        .yield_per(AVERAGE_BATCH_SIZE)
    )
    total_ms = 0.0
    count = 0
    for resolved_at, created_at in rows:
        total_ms += (as_utc(resolved_at) - as_utc(created_at)).total_seconds() * 1000
        count += 1
    if not count:
        return 0
    return _round_half_up(total_ms / count)


def top_solvers(limit: int = TOP_SOLVER_LIMIT) -> list[dict]:
    """Leaderboard of resolvers by audit-row count.

    Ties keep the order in which each resolver first appeared. A resolver
    id with no matching user is shown as the raw id; a missing id as
    ``"Unknown"``.
    """
    count_col = func.count(Resolution.id).label("count")
    rows = (
        db.session.query(Resolution.resolved_by, count_col)
        .group_by(Resolution.resolved_by)
        .order_by(count_col.desc(), func.min(Resolution.id))
        .limit(limit)
        .all()
    )
    names = user_names(resolver for resolver, _ in rows)

    leaderboard = []
    for resolver, count in rows:
        name = names.get(resolver)
        if not name:
            name = str(resolver) if resolver is not None else UNKNOWN_SOLVER
        leaderboard.append({"name": name, "count": count})
    return leaderboard


def priority_counts() -> dict:
    """Bug count per priority over every current bug."""
    counts = {p: 0 for p in BUG_PRIORITIES}
    rows = db.session.query(Bug.priority, func.count(Bug.id)).group_by(Bug.priority).all()
    for priority, count in rows:
        if priority in counts:
            counts[priority] = count
        else:
            logger.warning("Bug priority %r outside %s ignored in histogram",
                           priority, BUG_PRIORITIES)
    return counts


def summary(requesting_user_id) -> dict:
    """Pull variant: the snapshot for one requester."""
    return {
        "totalResolved": total_resolved(),
        "totalResolvedBy": total_resolved_by(requesting_user_id),
        "avgResolutionMs": average_resolution_ms(),
        "topSolvers": top_solvers(),
        "priorityCounts": priority_counts(),
    }


def push_payload(requesting_user_id, resolved_by_user_id=None) -> dict:
    """Push variant: the snapshot plus event metadata."""
    payload = {"solved": 1}
    payload.update(summary(requesting_user_id))
    payload["resolvedByUserId"] = resolved_by_user_id
    payload["timestamp"] = epoch_ms()
    return payload
