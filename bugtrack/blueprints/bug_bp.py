"""
Bug Tracker
Bug blueprint — bug CRUD, the resolution workflow and the audit trail.

Endpoints:
    POST   /api/bugs                      — report a bug (notifies assignee)
    GET    /api/bugs                      — list; ?project_id= ?status= ?assignee_id=
    GET    /api/bugs/<id>                 — single bug
    PUT    /api/bugs/<id>                 — partial update + audit + analytics push
    DELETE /api/bugs/<id>                 — hard delete (audit rows kept)
    POST   /api/bugs/<id>/resolutions     — append an audit row directly
    GET    /api/bugs/<id>/resolutions     — audit rows, newest first
"""

import logging

from flask import Blueprint, jsonify, request

from bugtrack.blueprints import current_user_id, int_arg, json_body
from bugtrack.services import bug_service
from bugtrack.services.resolution_workflow import update_bug
from bugtrack.utils.helpers import coerce_id

logger = logging.getLogger(__name__)

bug_bp = Blueprint("bugs", __name__, url_prefix="/api/bugs")


# ── Bugs ─────────────────────────────────────────────────────────────────────

@bug_bp.route("", methods=["POST"])
def create_bug():
    """Body: { title, description, priority, project_id, assignee_id }"""
    result = bug_service.create_bug(json_body(), reporter_id=current_user_id())
    return result.to_response()


@bug_bp.route("", methods=["GET"])
def list_bugs():
    bugs = bug_service.list_bugs(
        project_id=int_arg("project_id"),
        status=request.args.get("status") or None,
        assignee_id=int_arg("assignee_id"),
    )
    return jsonify([b.to_dict() for b in bugs])


@bug_bp.route("/<int:bug_id>", methods=["GET"])
def get_bug(bug_id):
    return jsonify(bug_service.get_bug(bug_id).to_dict())


@bug_bp.route("/<int:bug_id>", methods=["PUT"])
def put_bug(bug_id):
    """Apply a partial update; answers ``{"success": true}`` even when the
    audit append or the analytics push failed (see resolution_workflow)."""
    result = update_bug(bug_id, json_body(), current_user_id())
    if result.degraded:
        failed = [s.name for s in result.side_outcomes if not s.ok]
        logger.info("Bug %s update completed with failed side steps: %s",
                    bug_id, ", ".join(failed), extra={"bug_id": bug_id})
    return result.to_response()


@bug_bp.route("/<int:bug_id>", methods=["DELETE"])
def delete_bug(bug_id):
    bug_service.delete_bug(bug_id)
    return jsonify({"success": True})


# ── Resolution audit trail ───────────────────────────────────────────────────

@bug_bp.route("/<int:bug_id>/resolutions", methods=["POST"])
def create_resolution(bug_id):
    """Body: { resolution, resolved_by } — resolved_by defaults to the caller."""
    data = json_body()
    entry = bug_service.append_resolution(
        bug_id,
        resolution=data.get("resolution"),
        resolved_by=coerce_id(data.get("resolved_by")) or current_user_id(),
    )
    return jsonify(entry.to_dict())


@bug_bp.route("/<int:bug_id>/resolutions", methods=["GET"])
def list_resolutions(bug_id):
    return jsonify([r.to_dict() for r in bug_service.list_resolutions(bug_id)])
