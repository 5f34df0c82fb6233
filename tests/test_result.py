"""
Bug Tracker
Tests — OperationResult and the in-band error contract.
"""

from bugtrack.core.result import OperationResult, SideOutcome


class TestOperationResult:
    def test_success_is_ok_and_clean(self):
        result = OperationResult.success({"success": True})
        assert result.ok
        assert not result.degraded
        assert result.side_outcomes == []

    def test_failed_side_step_degrades(self):
        result = OperationResult.success({"success": True})
        result.record("audit", ok=True)
        result.record("analytics", ok=False, detail="broadcast failed")
        assert result.ok
        assert result.degraded
        assert result.outcome("analytics") == SideOutcome("analytics", False, "broadcast failed")

    def test_outcome_returns_latest(self):
        result = OperationResult.success()
        result.record("realtime", ok=False)
        result.record("realtime", ok=True)
        assert result.outcome("realtime").ok is True
        assert result.outcome("audit") is None

    def test_failure_is_never_degraded(self):
        result = OperationResult.failure("boom", code="ERR_DATABASE")
        result.record("audit", ok=False)
        assert not result.ok
        assert not result.degraded

    def test_to_response_success(self, app):
        with app.test_request_context():
            res = OperationResult.success({"id": 3}).to_response()
            assert res.get_json() == {"id": 3}

    def test_to_response_failure_is_in_band(self, app):
        with app.test_request_context():
            res, status = OperationResult.failure("Bug not found", code="ERR_NOT_FOUND").to_response()
            assert status == 200
            assert res.get_json() == {"error": "Bug not found", "code": "ERR_NOT_FOUND"}
