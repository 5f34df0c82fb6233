"""
Real-time delivery over Flask-SocketIO.

Two scopes exist:
  - per user:  every socket session that sent ``identify {userId}``
  - global:    every connected socket

``ConnectionRegistry`` is the explicit user → sessions map (replacing
ambient socket rooms); ``RealtimeHub`` pairs it with the SocketIO server
and is stored on ``app.extensions["realtime"]``.

Delivery is best-effort and at-most-once: emit errors are logged and
reported to the caller as ``False``; nothing is queued or retried.

Usage:
    from bugtrack.services.realtime import get_hub

    get_hub().emit_to_user(7, "notification", {"message": "..."})
    get_hub().broadcast("analysis", payload)
"""

import logging
import threading

from flask import current_app, request
from flask_socketio import SocketIO

logger = logging.getLogger(__name__)

socketio = SocketIO()

EXTENSION_KEY = "realtime"


class ConnectionRegistry:
    """Thread-safe map of user id → set of socket session ids."""

    def __init__(self):
        self._by_user: dict[int, set[str]] = {}
        self._by_sid: dict[str, int] = {}
        self._lock = threading.Lock()

    def add(self, user_id: int, sid: str) -> None:
        """Associate ``sid`` with ``user_id``; a re-identify moves the session."""
        with self._lock:
            previous = self._by_sid.get(sid)
            if previous is not None and previous != user_id:
                self._discard(previous, sid)
            self._by_sid[sid] = user_id
            self._by_user.setdefault(user_id, set()).add(sid)

    def remove(self, sid: str) -> int | None:
        """Drop ``sid``; returns the user it belonged to, if any."""
        with self._lock:
            user_id = self._by_sid.pop(sid, None)
            if user_id is not None:
                self._discard(user_id, sid)
            return user_id

    def _discard(self, user_id, sid):
        sids = self._by_user.get(user_id)
        if sids is None:
            return
        sids.discard(sid)
        if not sids:
            del self._by_user[user_id]

    def sessions_for(self, user_id: int) -> set[str]:
        with self._lock:
            return set(self._by_user.get(user_id, ()))

    @property
    def connection_count(self) -> int:
        with self._lock:
            return len(self._by_sid)

    @property
    def user_count(self) -> int:
        with self._lock:
            return len(self._by_user)

    def clear(self) -> None:
        with self._lock:
            self._by_user.clear()
            self._by_sid.clear()


class RealtimeHub:
    """Emits events to a user's sessions or to every connection."""

    def __init__(self, server: SocketIO, registry: ConnectionRegistry | None = None):
        self.server = server
        self.registry = registry or ConnectionRegistry()

    def emit_to_user(self, user_id, event: str, payload: dict) -> bool:
        """Deliver ``event`` to each session registered for ``user_id``.

        Returns False when an emit raised; zero sessions is a success.
        """
        sids = self.registry.sessions_for(user_id)
        ok = True
        for sid in sids:
            try:
                self.server.emit(event, payload, to=sid)
            except Exception as exc:
                ok = False
                logger.warning("Failed to emit %s to session %s: %s", event, sid,
                               exc, extra={"event": event, "user_id": user_id})
        logger.debug("Emitted %s to user %s (%d sessions)", event, user_id, len(sids))
        return ok

    def broadcast(self, event: str, payload: dict) -> bool:
        """Deliver ``event`` to every connected client."""
        try:
            self.server.emit(event, payload)
        except Exception as exc:
            logger.warning("Failed to broadcast %s: %s", event, exc, extra={"event": event})
            return False
        return True


def get_hub() -> RealtimeHub:
    """Return the hub bound to the current app."""
    return current_app.extensions[EXTENSION_KEY]


def _coerce_user_id(data):
    raw = (data or {}).get("userId") if isinstance(data, dict) else None
    if raw is None or raw == "":
        return None
    try:
        return int(raw)
    except (TypeError, ValueError):
        return None


def init_realtime(app):
    """Bind SocketIO to ``app`` and attach a fresh hub to it."""
    socketio.init_app(
        app,
        async_mode=app.config.get("SOCKETIO_ASYNC_MODE", "threading"),
        cors_allowed_origins=app.config.get("CORS_ORIGINS", "*") or "*",
        logger=False,
        engineio_logger=False,
    )
    hub = RealtimeHub(socketio)
    app.extensions[EXTENSION_KEY] = hub
    return hub


# Handlers resolve the hub through the app that owns the connection.

@socketio.on("identify")
def handle_identify(data):
    user_id = _coerce_user_id(data)
    if user_id is None:
        logger.debug("Ignoring identify without a usable userId: %r", data)
        return
    get_hub().registry.add(user_id, request.sid)
    logger.debug("Session %s identified as user %s", request.sid, user_id)
    socketio.emit("identified", {"userId": user_id}, to=request.sid)


@socketio.on("disconnect")
def handle_disconnect(*_args):
    user_id = get_hub().registry.remove(request.sid)
    if user_id is not None:
        logger.debug("Session %s of user %s disconnected", request.sid, user_id)
