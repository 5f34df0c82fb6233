"""
Health probes, reachable without a token.

    GET /api/health        readiness ping
    GET /api/health/live   database round-trip plus real-time connection counts;
                           503 when the database is unreachable
"""

import logging
import time

from flask import Blueprint, jsonify
from sqlalchemy.exc import SQLAlchemyError

from bugtrack.models import db
from bugtrack.services.realtime import get_hub

logger = logging.getLogger(__name__)

health_bp = Blueprint("health", __name__, url_prefix="/api/health")


@health_bp.route("", methods=["GET"])
def ready():
    return jsonify({"status": "ok", "app": "Bug Tracker"})


def _probe_database() -> dict:
    started = time.perf_counter()
    try:
        db.session.execute(db.text("SELECT 1"))
    except SQLAlchemyError as exc:
        db.session.rollback()
        logger.error("Database probe failed: %s", exc)
        return {"status": "error", "detail": str(exc)}
    return {"status": "ok", "latency_ms": round((time.perf_counter() - started) * 1000, 1)}


@health_bp.route("/live", methods=["GET"])
def live():
    database = _probe_database()
    registry = get_hub().registry
    healthy = database["status"] == "ok"
    body = {
        "status": "healthy" if healthy else "degraded",
        "checks": {
            "database": database,
            "realtime": {
                "connections": registry.connection_count,
                "users": registry.user_count,
            },
        },
    }
    return jsonify(body), 200 if healthy else 503
