"""
Reporting — bug status summary for GET /api/reports/summary.

Plain counts over current bugs; unrelated to the resolution audit trail.
"""

from sqlalchemy import func

from bugtrack.models import db
from bugtrack.models.bug import Bug


def bug_summary() -> dict:
    total = db.session.query(func.count(Bug.id)).scalar() or 0
    open_count = db.session.query(func.count(Bug.id)).filter(Bug.status == "open").scalar() or 0
    closed = db.session.query(func.count(Bug.id)).filter(Bug.status == "closed").scalar() or 0

    rows = (
        db.session.query(Bug.priority, func.count(Bug.id))
        .group_by(Bug.priority)
        .order_by(Bug.priority)
        .all()
    )
    return {
        "total": total,
        "open": open_count,
        "closed": closed,
        "byPriority": [{"priority": p, "count": c} for p, c in rows],
    }
