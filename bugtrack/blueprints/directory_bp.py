"""
Directory Blueprint — users and projects.

  GET  /api/users     — all users (no password hashes)
  GET  /api/projects  — all projects
  POST /api/projects  — create a project owned by the caller
"""

from flask import Blueprint, jsonify

from bugtrack.blueprints import current_user_id, json_body
from bugtrack.services.project_service import create_project, list_projects
from bugtrack.services.user_service import list_users

directory_bp = Blueprint("directory", __name__, url_prefix="/api")


@directory_bp.route("/users", methods=["GET"])
def get_users():
    return jsonify([u.to_dict() for u in list_users()])


@directory_bp.route("/projects", methods=["GET"])
def get_projects():
    return jsonify([p.to_dict() for p in list_projects()])


@directory_bp.route("/projects", methods=["POST"])
def post_project():
    data = json_body()
    project = create_project(
        name=data.get("name"),
        description=data.get("description"),
        owner_id=current_user_id(),
    )
    return jsonify(project.to_dict())
