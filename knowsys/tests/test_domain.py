"""Tests for domain records and the error taxonomy."""

from knowsys.domain.entry import PlanEntry, PlanStatus, SessionEntry
from knowsys.domain.result import CreateResult, MutationResult, SearchResult
from knowsys.errors import (
    AmbiguousMatchError,
    InvalidEnumError,
    NotFoundError,
    UsageError,
)


class TestEntries:
    def test_plan_entry_round_trip(self):
        entry = PlanEntry(
            id="PLAN_a",
            title="A",
            author="alice",
            status=PlanStatus.ACTIVE,
            file="PLAN_a.md",
            topics=["x"],
            created="2026-01-01",
            updated="2026-01-02",
        )

        data = entry.to_dict()

        assert data["status"] == "ACTIVE"
        assert PlanEntry.from_dict(data) == entry

    def test_session_entry_defaults(self):
        entry = SessionEntry.from_dict(
            {"date": "2026-01-01", "title": "S", "file": "sessions/2026-01-01-session.md"}
        )

        assert entry.status == "in-progress"
        assert entry.plan is None
        assert entry.topics == []


class TestResults:
    def test_mutation_result_uses_camel_case_path(self):
        result = MutationResult(True, "/kb/PLAN_a.md", "Updated plan: PLAN_a.md", ["Added topic: x"])

        assert result.to_dict() == {
            "updated": True,
            "filePath": "/kb/PLAN_a.md",
            "message": "Updated plan: PLAN_a.md",
            "changes": ["Added topic: x"],
        }

    def test_create_result(self):
        data = CreateResult(False, "/kb/x.md", "Plan already exists").to_dict()

        assert data["created"] is False
        assert data["metadata"] == {}

    def test_search_result(self):
        data = SearchResult(kind="plan", file="PLAN_a.md", snippet="hit", score=0.8, line=3).to_dict()

        assert data == {"kind": "plan", "file": "PLAN_a.md", "snippet": "hit", "score": 0.8, "line": 3}


class TestErrors:
    """Test error messages and structured output."""

    def test_not_found_with_suggestions(self):
        error = NotFoundError("Plan not found: y", target="y", suggestions=["PLAN_x", "PLAN_z"])

        assert str(error) == "Plan not found: y. Did you mean one of: PLAN_x, PLAN_z?"
        assert error.to_dict() == {
            "type": "NotFound",
            "message": str(error),
            "target": "y",
            "suggestions": ["PLAN_x", "PLAN_z"],
        }

    def test_not_found_without_suggestions(self):
        assert str(NotFoundError("Missing")) == "Missing"

    def test_ambiguous(self):
        error = AmbiguousMatchError("twice", pattern="TODO", line_numbers=[3, 9])

        assert error.to_dict()["line_numbers"] == [3, 9]
        assert error.kind == "Ambiguous"

    def test_invalid_enum(self):
        error = InvalidEnumError("status", "DONE", PlanStatus.values())

        assert str(error) == (
            "Invalid status: DONE. Must be one of: ACTIVE, PAUSED, PLANNED, COMPLETE, CANCELLED"
        )
        assert isinstance(error, ValueError)

    def test_usage_error_is_value_error(self):
        assert isinstance(UsageError("bad"), ValueError)
        assert UsageError("bad").to_dict() == {"type": "UsageError", "message": "bad"}
