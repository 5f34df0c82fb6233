"""
Bug Tracker
User model.

The password is only ever stored as a bcrypt hash; ``to_dict`` never
exposes it.
"""

from datetime import datetime, timezone

from bugtrack.models import db


class User(db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200))
    # Uniqueness is checked at registration, not by a constraint.
    email = db.Column(db.String(200), nullable=False, index=True)
    password_hash = db.Column(db.String(256))
    role = db.Column(db.String(20), default="user")
    created_at = db.Column(db.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "role": self.role,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f"<User {self.id}: {self.email}>"
