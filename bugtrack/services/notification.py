"""
Bug Tracker
Notification Service — assignment fanout.

A bug assignment produces two deliveries:
  1. a persisted Notification row for the assignee (polled via
     GET /api/notifications)
  2. an ephemeral ``notification`` event to each live session of the
     assignee, best-effort and at-most-once
"""

import logging

from bugtrack.core.result import OperationResult
from bugtrack.models import db
from bugtrack.models.notification import Notification
from bugtrack.services.realtime import get_hub

logger = logging.getLogger(__name__)

NOTIFICATION_EVENT = "notification"


class NotificationService:
    """Stateless service class for notification operations."""

    # ── Create ────────────────────────────────────────────────────────────

    @staticmethod
    def create(*, user_id, message) -> Notification:
        """Persist one notification row (committed)."""
        notif = Notification(user_id=user_id, message=message)
        db.session.add(notif)
        db.session.commit()
        return notif

    @staticmethod
    def notify_assignment(bug, result: OperationResult | None = None) -> Notification | None:
        """Fan out an assignment notice for ``bug`` to its assignee.

        No-op when the bug has no assignee. The row write propagates
        errors; the live push only records a side outcome on ``result``.
        """
        if not bug.assignee_id:
            return None

        notif = NotificationService.create(
            user_id=bug.assignee_id,
            message=f"You were assigned bug: {bug.title}",
        )
        delivered = get_hub().emit_to_user(
            bug.assignee_id, NOTIFICATION_EVENT,
            {"message": f"New bug assigned: {bug.title}", "bug_id": bug.id},
        )
        if result is not None:
            result.record("realtime", ok=delivered,
                          detail=None if delivered else "notification push failed")
        return notif

    # ── Query ─────────────────────────────────────────────────────────────

    @staticmethod
    def list_for_user(user_id) -> list[Notification]:
        """Notifications addressed to ``user_id``, newest first."""
        return (
            Notification.query.filter_by(user_id=user_id)
            .order_by(Notification.created_at.desc(), Notification.id.desc())
            .all()
        )

