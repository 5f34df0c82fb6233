"""
Bug Tracker
Flask Application Factory.

Usage:
    from bugtrack import create_app
    app = create_app()           # defaults to APP_ENV or "development"
    app = create_app("testing")  # explicit config
"""

import logging
import os

from flask import Flask, current_app, request, send_from_directory
from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_migrate import Migrate

from bugtrack.config import config
from bugtrack.core.exceptions import (
    AuthenticationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from bugtrack.middleware.jwt_auth import init_jwt_middleware
from bugtrack.middleware.logging_config import configure_logging
from bugtrack.middleware.rate_limiter import init_rate_limits
from bugtrack.middleware.timing import init_request_timing
from bugtrack.models import db
from bugtrack.services.realtime import init_realtime, socketio
from bugtrack.utils.errors import E, api_error

logger = logging.getLogger(__name__)

migrate = Migrate()
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[],                     # auth blueprint only
)

__all__ = ["create_app", "db", "socketio"]


def _register_error_handlers(app):
    """Map service exceptions and HTTP errors onto in-band error bodies."""

    @app.errorhandler(AuthenticationError)
    def _auth_error(exc):
        return api_error(exc.code, str(exc))

    @app.errorhandler(ValidationError)
    def _validation_error(exc):
        return api_error(exc.code, str(exc), details=exc.details or None)

    @app.errorhandler(ConflictError)
    def _conflict_error(exc):
        return api_error(E.CONFLICT_DUPLICATE, str(exc))

    @app.errorhandler(NotFoundError)
    def _not_found_error(exc):
        return api_error(E.NOT_FOUND, f"{exc.resource} not found")

    @app.errorhandler(404)
    def _not_found(e):
        if request.path.startswith("/api/"):
            return api_error(E.NOT_FOUND, "Not found", details={"path": request.path})
        return _spa_index()

    @app.errorhandler(405)
    def _method_not_allowed(e):
        return api_error(E.METHOD_NOT_ALLOWED, "Method not allowed")

    @app.errorhandler(500)
    def _server_error(e):
        original = getattr(e, "original_exception", None) or e
        logger.error("Unhandled error on %s %s: %s", request.method, request.path,
                     original, exc_info=original)
        db.session.rollback()
        if request.path.startswith("/api/"):
            return api_error(E.INTERNAL, "Internal server error")
        return "<h1>500 — Internal Server Error</h1>", 500


def _spa_index():
    return send_from_directory(current_app.template_folder, "index.html")


def create_app(config_name=None):
    """
    Create and configure the Flask application.

    Args:
        config_name: One of "development", "testing", "production".
                     Defaults to the APP_ENV env var, or "development".

    Returns:
        Configured Flask application instance (SocketIO attached).
    """
    if config_name is None:
        config_name = os.getenv("APP_ENV", "development")

    app = Flask(
        __name__,
        instance_relative_config=True,
        static_folder="../static",
        template_folder="../templates",
    )
    app.config.from_object(config[config_name]())

    # ── Logging (must be first) ──────────────────────────────────────────
    configure_logging(app)
    if not app.config.get("JWT_SECRET_KEY"):
        app.logger.warning("JWT_SECRET not set — signing tokens with SECRET_KEY")

    # ── Extensions ───────────────────────────────────────────────────────
    db.init_app(app)
    migrate.init_app(app, db)
    limiter.init_app(app)
    cors_origins = app.config.get("CORS_ORIGINS", "*")
    if cors_origins and cors_origins != "*":
        CORS(app, origins=[o.strip() for o in cors_origins.split(",") if o.strip()])
    else:
        CORS(app)
    init_realtime(app)

    # ── Middleware ───────────────────────────────────────────────────────
    init_request_timing(app)
    init_jwt_middleware(app)

    # ── Models ───────────────────────────────────────────────────────────
    from bugtrack.models import bug as _bug_models                    # noqa: F401
    from bugtrack.models import notification as _notification_models  # noqa: F401
    from bugtrack.models import project as _project_models            # noqa: F401
    from bugtrack.models import user as _user_models                  # noqa: F401

    if app.config["SQLALCHEMY_DATABASE_URI"].startswith("sqlite:///") and not app.testing:
        os.makedirs(app.instance_path, exist_ok=True)

    with app.app_context():
        try:
            db.create_all()
        except Exception as e:
            app.logger.warning("db.create_all() failed: %s", e)

    # ── Blueprints ───────────────────────────────────────────────────────
    from bugtrack.blueprints.analytics_bp import analytics_bp
    from bugtrack.blueprints.auth_bp import auth_bp
    from bugtrack.blueprints.bug_bp import bug_bp
    from bugtrack.blueprints.directory_bp import directory_bp
    from bugtrack.blueprints.health_bp import health_bp
    from bugtrack.blueprints.notification_bp import notification_bp

    app.register_blueprint(auth_bp)
    app.register_blueprint(directory_bp)
    app.register_blueprint(bug_bp)
    app.register_blueprint(analytics_bp)
    app.register_blueprint(notification_bp)
    app.register_blueprint(health_bp)

    init_rate_limits(app, limiter)
    _register_error_handlers(app)

    # ── Single-page client ───────────────────────────────────────────────
    @app.route("/")
    def index():
        return _spa_index()

    return app
