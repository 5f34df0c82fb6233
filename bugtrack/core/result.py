"""
Operation outcomes with best-effort side steps.

A mutating request has one primary effect (e.g. the bug row update) and
may trigger follow-up steps whose failure must not undo or fail the
primary effect (audit append, analytics push). ``OperationResult`` keeps
both so callers and tests can tell a clean success from a degraded one
without inspecting log output.

Usage:
    result = OperationResult.success({"success": True})
    result.record("audit", ok=False, detail="database is locked")
    result.ok         # True  — primary effect succeeded
    result.degraded   # True  — a side step failed
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from flask import jsonify

from bugtrack.utils.errors import E, api_error


@dataclass(frozen=True)
class SideOutcome:
    """Result of one best-effort step."""

    name: str
    ok: bool
    detail: str | None = None


@dataclass
class OperationResult:
    value: Any = None
    error: str | None = None
    code: str | None = None
    side_outcomes: list[SideOutcome] = field(default_factory=list)

    @classmethod
    def success(cls, value: Any = None) -> "OperationResult":
        return cls(value=value)

    @classmethod
    def failure(cls, message: str, code: str = E.INTERNAL) -> "OperationResult":
        return cls(error=message, code=code)

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def degraded(self) -> bool:
        return self.ok and any(not s.ok for s in self.side_outcomes)

    def record(self, name: str, ok: bool, detail: str | None = None) -> SideOutcome:
        outcome = SideOutcome(name=name, ok=ok, detail=detail)
        self.side_outcomes.append(outcome)
        return outcome

    def outcome(self, name: str) -> SideOutcome | None:
        """Return the last recorded side outcome called ``name``."""
        for s in reversed(self.side_outcomes):
            if s.name == name:
                return s
        return None

    def to_response(self):
        """Render as a Flask response using the in-band error contract."""
        if not self.ok:
            return api_error(self.code or E.INTERNAL, self.error)
        return jsonify(self.value)
