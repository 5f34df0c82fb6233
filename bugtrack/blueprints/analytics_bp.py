"""
Analytics & reporting blueprint.

Endpoints:
    GET /api/analytics/summary  — resolution snapshot for the caller
    GET /api/reports/summary    — total / open / closed + priority breakdown
"""

import logging

from flask import Blueprint, jsonify
from sqlalchemy.exc import SQLAlchemyError

from bugtrack.blueprints import current_user_id
from bugtrack.models import db
from bugtrack.services import analytics
from bugtrack.services.reporting import bug_summary
from bugtrack.utils.errors import E, api_error

logger = logging.getLogger(__name__)

analytics_bp = Blueprint("analytics", __name__, url_prefix="/api")


@analytics_bp.route("/analytics/summary", methods=["GET"])
def analytics_summary():
    try:
        snapshot = analytics.summary(current_user_id())
    except SQLAlchemyError:
        logger.exception("Failed to compute analytics")
        db.session.rollback()
        return api_error(E.DATABASE, "Failed to compute analytics")
    return jsonify(snapshot)


@analytics_bp.route("/reports/summary", methods=["GET"])
def reports_summary():
    return jsonify(bug_summary())
