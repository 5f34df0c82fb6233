"""
Bug Tracker
Blueprint registry.
"""

from flask import g, request


def current_user_id():
    """Authenticated caller id set by the identity gate."""
    return getattr(g, "current_user_id", None)


def json_body() -> dict:
    """Request JSON as a dict; anything else becomes ``{}``."""
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def int_arg(name):
    return request.args.get(name, type=int)
