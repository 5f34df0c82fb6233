"""
WSGI / SocketIO entry point.

Usage:
    python wsgi.py                 # dev server with WebSocket support
    flask --app wsgi db migrate    # Flask-Migrate against the models
"""

import logging
import os

from bugtrack import create_app, socketio

app = create_app()
logger = logging.getLogger(__name__)


if __name__ == "__main__":
    port = int(os.getenv("PORT", "4000"))
    host = os.getenv("HOST", "0.0.0.0")
    logger.info("Bug Tracker listening on %s:%s", host, port)
    socketio.run(app, host=host, port=port, debug=app.debug,
                 allow_unsafe_werkzeug=True)
