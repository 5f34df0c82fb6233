"""
Bug Tracker
Notification model.

Rows are created server-side when a bug is assigned. ``is_read`` exists
in the schema but no endpoint sets it.
"""

from datetime import datetime, timezone

from bugtrack.models import db


class Notification(db.Model):
    __tablename__ = "notifications"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, nullable=True, index=True, comment="Target users.id, not enforced")
    message = db.Column(db.Text, default="")
    is_read = db.Column(db.Boolean, default=False)
    created_at = db.Column(db.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    def to_dict(self):
        return {
            "id": self.id,
            "user_id": self.user_id,
            "message": self.message,
            "read": bool(self.is_read),
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f"<Notification {self.id} -> user {self.user_id}>"
