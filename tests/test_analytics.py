"""
Bug Tracker
Tests — analytics aggregator and the end-to-end resolution scenario.

Covers:
    1. Zero-row defaults
    2. avgResolutionMs definition (audit creation → bug closure, unclamped)
    3. topSolvers grouping, ordering, limit and name fallback
    4. priorityCounts over current bugs
    5. Push vs pull payload shapes
"""

from datetime import datetime, timedelta, timezone

from bugtrack.models import db
from bugtrack.models.bug import Bug, Resolution
from bugtrack.models.notification import Notification
from bugtrack.services import analytics

T0 = datetime(2026, 4, 1, 9, 0, tzinfo=timezone.utc)


def _bug(priority="medium", status="open", resolved_at=None):
    b = Bug(title=f"{priority} bug", priority=priority, status=status, resolved_at=resolved_at)
    db.session.add(b)
    db.session.flush()
    return b


def _resolution(bug_id, resolved_by, created_at=T0, text="fixed"):
    r = Resolution(bug_id=bug_id, resolved_by=resolved_by, resolution=text, created_at=created_at)
    db.session.add(r)
    db.session.flush()
    return r


# ═══════════════════════════════════════════════════════════════════════════
#  Empty store
# ═══════════════════════════════════════════════════════════════════════════

class TestEmptyStore:
    def test_summary_defaults(self):
        assert analytics.summary(1) == {
            "totalResolved": 0,
            "totalResolvedBy": 0,
            "avgResolutionMs": 0,
            "topSolvers": [],
            "priorityCounts": {"high": 0, "medium": 0, "low": 0},
        }

    def test_endpoint_defaults(self, client, auth_headers):
        body = client.get("/api/analytics/summary", headers=auth_headers).get_json()
        assert body["avgResolutionMs"] == 0
        assert body["topSolvers"] == []
        assert "solved" not in body and "timestamp" not in body

    def test_endpoint_requires_token(self, client):
        body = client.get("/api/analytics/summary").get_json()
        assert body["error"] == "Missing token"


# ═══════════════════════════════════════════════════════════════════════════
#  Average resolution latency
# ═══════════════════════════════════════════════════════════════════════════

class TestAverageResolution:
    def test_average_of_closure_minus_audit_time(self):
        b1 = _bug(resolved_at=T0 + timedelta(seconds=10))
        b2 = _bug(resolved_at=T0 + timedelta(seconds=20))
        _resolution(b1.id, 1, created_at=T0)
        _resolution(b2.id, 1, created_at=T0)
        assert analytics.average_resolution_ms() == 15000

    def test_bugs_without_resolved_at_are_excluded(self):
        b1 = _bug(resolved_at=T0 + timedelta(seconds=4))
        b2 = _bug(resolved_at=None)
        _resolution(b1.id, 1)
        _resolution(b2.id, 1, created_at=T0 - timedelta(days=3))
        assert analytics.average_resolution_ms() == 4000

    def test_orphaned_resolutions_are_excluded(self):
        b1 = _bug(resolved_at=T0 + timedelta(seconds=2))
        _resolution(b1.id, 1)
        _resolution(9999, 1, created_at=T0 - timedelta(days=1))
        assert analytics.average_resolution_ms() == 2000

    def test_negative_average_is_not_clamped(self):
        b = _bug(resolved_at=T0)
        _resolution(b.id, 1, created_at=T0 + timedelta(milliseconds=1500))
        assert analytics.average_resolution_ms() == -1500

    def test_rounds_to_whole_milliseconds(self):
        b1 = _bug(resolved_at=T0 + timedelta(milliseconds=1))
        b2 = _bug(resolved_at=T0 + timedelta(milliseconds=2))
        _resolution(b1.id, 1)
        _resolution(b2.id, 1)
        assert analytics.average_resolution_ms() == 2  # 1.5 rounds half up

    def test_average_spans_several_batches(self, monkeypatch):
        monkeypatch.setattr(analytics, "AVERAGE_BATCH_SIZE", 2)
        for seconds in (1, 2, 3, 4, 5):
            b = _bug(resolved_at=T0 + timedelta(seconds=seconds))
            _resolution(b.id, 1)
        assert analytics.average_resolution_ms() == 3000

    def test_close_via_api_with_same_timestamps_is_zero(self, client, alice):
        b = _bug(priority="low")
        db.session.commit()
        client.put(f"/api/bugs/{b.id}", headers=alice["headers"], json={
            "status": "closed", "resolution": "fixed", "resolved_at": "2026-04-01T09:00:00Z",
        })
        body = client.get("/api/analytics/summary", headers=alice["headers"]).get_json()
        assert body["avgResolutionMs"] == 0
        assert body["totalResolved"] == 1


# ═══════════════════════════════════════════════════════════════════════════
#  Leaderboard
# ═══════════════════════════════════════════════════════════════════════════

class TestTopSolvers:
    def test_same_user_across_bugs_counted_once(self, alice):
        uid = alice["user"]["id"]
        _resolution(_bug().id, uid)
        _resolution(_bug().id, uid)
        assert analytics.top_solvers() == [{"name": "Alice", "count": 2}]

    def test_sorted_by_count_desc(self, alice, bob):
        a, b = alice["user"]["id"], bob["user"]["id"]
        _resolution(1, a)
        _resolution(2, b)
        _resolution(3, b)
        assert analytics.top_solvers() == [
            {"name": "Bob", "count": 2},
            {"name": "Alice", "count": 1},
        ]

    def test_limited_to_six(self):
        for resolver in range(100, 110):
            _resolution(1, resolver)
        _resolution(1, 105)
        board = analytics.top_solvers()
        assert len(board) == 6
        assert board[0] == {"name": "105", "count": 2}

    def test_unknown_user_shows_raw_id(self):
        _resolution(1, 4242)
        assert analytics.top_solvers() == [{"name": "4242", "count": 1}]

    def test_missing_resolver_shows_unknown(self):
        _resolution(1, None)
        assert analytics.top_solvers() == [{"name": "Unknown", "count": 1}]

    def test_user_without_name_shows_raw_id(self, make_user):
        u = make_user("", "noname@bugtrack.io")
        _resolution(1, u["user"]["id"])
        assert analytics.top_solvers() == [{"name": str(u["user"]["id"]), "count": 1}]


# ═══════════════════════════════════════════════════════════════════════════
#  Priority histogram & per-user totals
# ═══════════════════════════════════════════════════════════════════════════

class TestCounts:
    def test_priority_counts_sum_to_bug_count(self):
        for p in ("high", "high", "low", "medium", "medium", "medium"):
            _bug(priority=p, status="closed" if p == "low" else "open")
        counts = analytics.priority_counts()
        assert counts == {"high": 2, "medium": 3, "low": 1}
        assert sum(counts.values()) == Bug.query.count()

    def test_total_resolved_by_requester(self, alice, bob):
        a, b = alice["user"]["id"], bob["user"]["id"]
        _resolution(1, a)
        _resolution(2, a)
        _resolution(3, b)
        assert analytics.total_resolved() == 3
        assert analytics.total_resolved_by(a) == 2
        assert analytics.total_resolved_by(b) == 1
        assert analytics.total_resolved_by(None) == 0

    def test_pull_uses_requesting_identity(self, client, alice, bob):
        _resolution(1, bob["user"]["id"])
        db.session.commit()
        body = client.get("/api/analytics/summary", headers=alice["headers"]).get_json()
        assert body["totalResolved"] == 1
        assert body["totalResolvedBy"] == 0
        body = client.get("/api/analytics/summary", headers=bob["headers"]).get_json()
        assert body["totalResolvedBy"] == 1


class TestPushPayload:
    def test_push_payload_shape(self, alice):
        payload = analytics.push_payload(alice["user"]["id"], alice["user"]["id"])
        assert payload["solved"] == 1
        assert payload["resolvedByUserId"] == alice["user"]["id"]
        assert isinstance(payload["timestamp"], int)
        assert set(analytics.summary(alice["user"]["id"])) < set(payload)


# ═══════════════════════════════════════════════════════════════════════════
#  End-to-end scenario
# ═══════════════════════════════════════════════════════════════════════════

class TestResolutionScenario:
    def test_report_assign_close_and_summarise(self, client, alice, bob):
        uid = bob["user"]["id"]
        before = client.get("/api/analytics/summary", headers=alice["headers"]).get_json()

        created = client.post("/api/bugs", headers=alice["headers"], json={
            "title": "Checkout 500", "priority": "high", "assignee_id": uid,
        }).get_json()
        assert Notification.query.filter_by(user_id=uid).count() == 1

        high_after_create = client.get(
            "/api/analytics/summary", headers=alice["headers"]).get_json()["priorityCounts"]["high"]
        assert high_after_create == before["priorityCounts"]["high"] + 1

        ack = client.put(f"/api/bugs/{created['id']}", headers=alice["headers"], json={
            "status": "closed", "resolution": "fixed", "resolved_by": uid,
        }).get_json()
        assert ack == {"success": True}

        rows = Resolution.query.filter_by(bug_id=created["id"]).all()
        assert [r.resolved_by for r in rows] == [uid]

        after = client.get("/api/analytics/summary", headers=alice["headers"]).get_json()
        assert after["totalResolved"] >= 1
        assert after["priorityCounts"]["high"] == high_after_create
        assert after["topSolvers"] == [{"name": "Bob", "count": 1}]
