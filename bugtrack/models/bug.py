"""
Bug Tracker
Bug domain model and its resolution audit trail.

Models:
    - Bug: trackable issue with an open/closed lifecycle
    - Resolution: append-only audit entry for one resolution attempt

Reference columns are plain integers without foreign keys: deleting a bug
leaves its Resolution rows in place, and a bug may point at a project or
user that no longer exists.
"""

from datetime import datetime, timezone

from bugtrack.models import db


# ── Constants ────────────────────────────────────────────────────────────────

BUG_PRIORITIES = ("high", "medium", "low")
DEFAULT_PRIORITY = "medium"

# Fields a partial update may touch.
UPDATABLE_FIELDS = (
    "title", "description", "status", "priority", "project_id",
    "assignee_id", "resolution", "resolved_by", "resolved_at",
)


def _iso(value):
    return value.isoformat() if value else None


class Bug(db.Model):
    __tablename__ = "bugs"

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(300))
    description = db.Column(db.Text, default="")
    status = db.Column(db.String(20), default="open", index=True)
    priority = db.Column(db.String(20), default=DEFAULT_PRIORITY, index=True)

    project_id = db.Column(db.Integer, nullable=True, index=True)
    reporter_id = db.Column(db.Integer, nullable=True)
    assignee_id = db.Column(db.Integer, nullable=True, index=True)

    # Set together when a bug is closed with a fix note.
    resolution = db.Column(db.Text, default="")
    resolved_by = db.Column(db.Integer, nullable=True)
    resolved_at = db.Column(db.DateTime(timezone=True), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    def to_dict(self):
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "status": self.status,
            "priority": self.priority,
            "project_id": self.project_id,
            "reporter_id": self.reporter_id,
            "assignee_id": self.assignee_id,
            "resolution": self.resolution or "",
            "resolved_by": self.resolved_by,
            "resolved_at": _iso(self.resolved_at),
            "created_at": _iso(self.created_at),
        }

    def __repr__(self):
        return f"<Bug {self.id}: {(self.title or '')[:40]} [{self.status}]>"


class Resolution(db.Model):
    """
    Audit entry describing one attempt to resolve a bug.

    Rows are only ever inserted. Several rows per bug are legal, including
    duplicates produced by concurrent close requests.
    """

    __tablename__ = "resolutions"

    id = db.Column(db.Integer, primary_key=True)
    bug_id = db.Column(db.Integer, nullable=True, index=True)
    resolved_by = db.Column(db.Integer, nullable=True, index=True)
    resolution = db.Column(db.Text, default="")
    created_at = db.Column(
        db.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), index=True,
    )

    def to_dict(self):
        return {
            "id": self.id,
            "bug_id": self.bug_id,
            "resolved_by": self.resolved_by,
            "resolution": self.resolution,
            "created_at": _iso(self.created_at),
        }

    def __repr__(self):
        return f"<Resolution {self.id}: bug {self.bug_id} by {self.resolved_by}>"
