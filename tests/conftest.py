"""
Shared pytest fixtures for the Bug Tracker test suite.

Provides:
    - app: Flask application (session-scoped, "testing" config)
    - _setup_db: Database table creation/teardown (session-scoped)
    - session: Per-test app context + table recreate (autouse)
    - client: Flask test client (function-scoped)
    - alice / bob: registered users with bearer headers
    - socket_client: Flask-SocketIO test client factory
"""

import pytest

from bugtrack import create_app, socketio
from bugtrack.models import db as _db


# ── App & DB fixtures ────────────────────────────────────────────────────


@pytest.fixture(scope="session")
def app():
    """Create the Flask application once per test session."""
    return create_app("testing")


@pytest.fixture(scope="session")
def _setup_db(app):
    """Create all tables at session start, drop at end."""
    with app.app_context():
        _db.create_all()
    yield
    with app.app_context():
        _db.drop_all()


@pytest.fixture(autouse=True)
def session(app, _setup_db):
    """Per-test: open app context, rollback after test, recreate tables."""
    with app.app_context():
        yield
        _db.session.rollback()
        _db.drop_all()
        _db.create_all()
        app.extensions["realtime"].registry.clear()


@pytest.fixture()
def client(app):
    """Flask test client."""
    return app.test_client()


# ── Users ────────────────────────────────────────────────────────────────


def _register(client, name, email, password="s3cret-pass"):
    """Register through the API and return {user, token, headers}."""
    res = client.post("/api/auth/register", json={
        "name": name, "email": email, "password": password,
    })
    assert res.status_code == 200
    body = res.get_json()
    assert "error" not in body, body
    body["headers"] = {"Authorization": f"Bearer {body['token']}"}
    return body


@pytest.fixture()
def make_user(client):
    """Factory: make_user("Carol", "carol@bugtrack.io") → {user, token, headers}."""
    return lambda name, email, password="s3cret-pass": _register(client, name, email, password)


@pytest.fixture()
def alice(make_user):
    return make_user("Alice", "alice@bugtrack.io")


@pytest.fixture()
def bob(make_user):
    return make_user("Bob", "bob@bugtrack.io")


@pytest.fixture()
def auth_headers(alice):
    return alice["headers"]


# ── Real-time ────────────────────────────────────────────────────────────


@pytest.fixture()
def socket_client(app):
    """Factory for connected SocketIO test clients; all are closed on teardown."""
    clients = []

    def _connect():
        c = socketio.test_client(app)
        assert c.is_connected()
        clients.append(c)
        return c

    yield _connect
    for c in clients:
        if c.is_connected():
            c.disconnect()
