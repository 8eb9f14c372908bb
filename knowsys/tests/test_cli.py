"""Tests for CLI commands."""

from __future__ import annotations

import json

import pytest
from click.testing import CliRunner

from knowsys.cli import cli


@pytest.fixture
def run(knowledge_root, monkeypatch):
    monkeypatch.delenv("KNOWSYS_ROOT", raising=False)
    monkeypatch.delenv("KNOWSYS_LOG_LEVEL", raising=False)
    runner = CliRunner()

    def _run(*args):
        return runner.invoke(cli, ["--root", str(knowledge_root), *args])

    return _run


class TestReadCommands:
    """Test scan, rebuild and query commands."""

    def test_scan(self, run):
        result = run("scan")

        assert result.exit_code == 0
        assert "✓ Found 4 files: 2 sessions, 1 plans, 1 learned" in result.output

    def test_rebuild_index(self, run):
        result = run("rebuild-index")

        assert result.exit_code == 0
        assert "✓ Index rebuilt: 1 plans, 2 sessions, 1 learned" in result.output

    def test_query_plans_json(self, run):
        result = run("--json", "query-plans", "--status", "active")

        data = json.loads(result.output)
        assert result.exit_code == 0
        assert data["count"] == 1
        assert data["plans"][0]["id"] == "PLAN_x"

    def test_query_plans_invalid_status(self, run):
        result = run("query-plans", "--status", "DONE")

        assert result.exit_code != 0
        assert "✗ Invalid status: DONE" in result.output

    def test_query_sessions(self, run):
        result = run("query-sessions", "--date-after", "2025-12-31")

        lines = result.output.splitlines()
        assert result.exit_code == 0
        assert lines[0] == "✓ 2 session(s)"
        assert lines[1].startswith("  2026-01-02 Search tuning")

    def test_search(self, run):
        result = run("search", "validation strategy")

        assert result.exit_code == 0
        assert '1 match(es) for "validation strategy"' in result.output
        assert "sessions/2026-01-02-session.md" in result.output

    def test_search_empty_query(self, run):
        result = run("search", "")

        assert result.exit_code != 0
        assert "✗ Search query cannot be empty" in result.output


class TestWriteCommands:
    """Test update and create commands."""

    def test_update_session(self, run, knowledge_root):
        result = run(
            "update-session",
            "--date",
            "2026-01-01",
            "--append-section",
            "Notes",
            "--content",
            "Fixed bug",
        )

        assert result.exit_code == 0
        assert "✓ Updated session: 2026-01-01-session.md" in result.output
        assert "  - Appended section: ## Notes" in result.output
        text = (knowledge_root / "sessions" / "2026-01-01-session.md").read_text()
        assert text.endswith("## Notes\nFixed bug\n")

    def test_update_plan_json(self, run):
        result = run("--json", "update-plan", "x", "--add-topic", "cli")

        data = json.loads(result.output)
        assert data["updated"] is True
        assert data["changes"][0] == "Added topic: cli"
        assert data["filePath"].endswith("PLAN_x.md")

    def test_update_missing_plan(self, run):
        result = run("update-plan", "y", "--wip")

        assert result.exit_code != 0
        assert "✗ Plan not found: y" in result.output
        assert "  - PLAN_x" in result.output

    def test_update_missing_plan_json(self, run):
        result = run("--json", "update-plan", "y", "--wip")

        data = json.loads(result.output)
        assert result.exit_code == 1
        assert data["type"] == "NotFound"
        assert "PLAN_x" in data["suggestions"]

    def test_content_without_section(self, run):
        result = run("update-session", "--date", "2026-01-01", "--content", "orphan")

        assert result.exit_code != 0
        assert "✗ content requires a section option" in result.output

    def test_create_session(self, run, knowledge_root):
        result = run("create-session", "Kickoff", "--topic", "planning", "--date", "2026-02-03")

        assert result.exit_code == 0
        assert "✓ Created session: 2026-02-03-session.md" in result.output
        assert (knowledge_root / "sessions" / "2026-02-03-session.md").exists()

    def test_create_existing_session(self, run):
        result = run("create-session", "Again", "--date", "2026-01-01")

        assert result.exit_code == 0
        assert "! Session already exists" in result.output

    def test_create_plan(self, run, knowledge_root):
        result = run("create-plan", "Cache layer", "--author", "alice", "--status", "active")

        assert result.exit_code == 0
        assert "✓ Created plan: PLAN_cache_layer" in result.output
        assert (knowledge_root / "PLAN_cache_layer.md").exists()


def test_bad_config_path(tmp_path):
    result = CliRunner().invoke(cli, ["--config", str(tmp_path / "missing.yaml"), "scan"])

    assert result.exit_code != 0
    assert "✗ Configuration error" in result.output


def test_config_file_sets_root(tmp_path, knowledge_root, monkeypatch):
    monkeypatch.delenv("KNOWSYS_ROOT", raising=False)
    cfg = tmp_path / "knowsys.yaml"
    cfg.write_text(f"knowledge_root: {knowledge_root}\n", encoding="utf-8")

    result = CliRunner().invoke(cli, ["--config", str(cfg), "scan"])

    assert result.exit_code == 0
    assert "✓ Found 4 files" in result.output
