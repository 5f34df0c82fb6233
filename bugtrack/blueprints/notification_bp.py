"""
Notification blueprint.

    GET /api/notifications — the caller's notifications, newest first
"""

from flask import Blueprint, jsonify

from bugtrack.blueprints import current_user_id
from bugtrack.services.notification import NotificationService

notification_bp = Blueprint("notifications", __name__, url_prefix="/api")


@notification_bp.route("/notifications", methods=["GET"])
def list_notifications():
    notes = NotificationService.list_for_user(current_user_id())
    return jsonify([n.to_dict() for n in notes])
