"""
Auth Blueprint — credential endpoints.

  POST /api/auth/register  — name + email + password → {user, token}
  POST /api/auth/login     — email + password → {user, token}

Failures come back in-band, e.g. ``{"error": "Email already exists"}``.
"""

from flask import Blueprint, jsonify

from bugtrack.blueprints import json_body
from bugtrack.services.jwt_service import generate_access_token
from bugtrack.services.user_service import authenticate_user, register_user

auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


def _session_payload(user):
    return {
        "user": user.to_dict(),
        "token": generate_access_token(user.id, user.email),
        "token_type": "Bearer",
    }


@auth_bp.route("/register", methods=["POST"])
def register():
    """Body: { "name": "...", "email": "...", "password": "..." }"""
    data = json_body()
    user = register_user(data.get("name"), data.get("email"), data.get("password"))
    return jsonify(_session_payload(user))


@auth_bp.route("/login", methods=["POST"])
def login():
    """Body: { "email": "...", "password": "..." }"""
    data = json_body()
    user = authenticate_user(data.get("email"), data.get("password"))
    return jsonify(_session_payload(user))
