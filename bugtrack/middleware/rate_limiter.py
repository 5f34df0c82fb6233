"""
Rate limiting for credential endpoints.

The Limiter instance is created in ``bugtrack/__init__.py`` with no
default limits; this module applies the configured limit to the auth
blueprint and exempts health checks. Disabled in testing mode.
"""

import logging

logger = logging.getLogger(__name__)


def init_rate_limits(app, limiter):
    """Apply ``AUTH_RATE_LIMIT`` (per remote IP) to the auth blueprint."""

    if app.config.get("TESTING"):
        app.logger.info("Rate limiter disabled (TESTING=True)")
        return

    auth_limit = app.config.get("AUTH_RATE_LIMIT", "20/minute")
    bp = app.blueprints.get("auth")
    if bp:
        limiter.limit(auth_limit)(bp)

    bp = app.blueprints.get("health")
    if bp:
        limiter.exempt(bp)

    app.logger.info("Rate limiter configured — auth: %s", auth_limit)
