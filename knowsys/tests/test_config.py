from pathlib import Path

import pytest

from knowsys.config import AppConfig, load_config, load_env_overrides, resolve_path, resolve_root


def test_defaults():
    config = load_config(None)

    assert config.knowledge_root == ".aiknowsys"
    assert config.scan.sessions_dir == "sessions"
    assert config.scan.plan_prefix == "PLAN_"
    assert config.index.snapshot_name == "context-index.json"
    assert config.index.auto_rebuild is True
    assert config.query.default_session_days == 7
    assert config.logging.level == "WARNING"


def test_yaml_partial_override(tmp_path):
    cfg = tmp_path / "knowsys.yaml"
    cfg.write_text(
        """
knowledge_root: docs/knowledge
scan:
  sessions_dir: journal
search:
  fuzzy_threshold: 70
""",
        encoding="utf-8",
    )

    config = load_config(cfg)

    assert config.knowledge_root == "docs/knowledge"
    assert config.scan.sessions_dir == "journal"
    assert config.scan.plans_dir == "plans"
    assert config.search.fuzzy_threshold == 70
    assert config.search.snippet_chars == 160


def test_json_config(tmp_path):
    cfg = tmp_path / "knowsys.json"
    cfg.write_text('{"index": {"auto_rebuild": false}}', encoding="utf-8")

    assert load_config(cfg).index.auto_rebuild is False


def test_empty_yaml_gives_defaults(tmp_path):
    cfg = tmp_path / "empty.yaml"
    cfg.write_text("", encoding="utf-8")

    assert load_config(cfg) == AppConfig()


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "nope.yaml")


def test_non_mapping(tmp_path):
    cfg = tmp_path / "list.yaml"
    cfg.write_text("- a\n- b\n", encoding="utf-8")

    with pytest.raises(ValueError):
        load_config(cfg)


def test_unknown_key_is_rejected(tmp_path):
    cfg = tmp_path / "typo.yaml"
    cfg.write_text("scan:\n  session_dir: journal\n", encoding="utf-8")

    with pytest.raises(ValueError, match="session_dir"):
        load_config(cfg)


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("KNOWSYS_ROOT", "/srv/knowledge")
    monkeypatch.setenv("KNOWSYS_LOG_LEVEL", "DEBUG")

    config = load_env_overrides(AppConfig())

    assert config.knowledge_root == "/srv/knowledge"
    assert config.logging.level == "DEBUG"


def test_env_overrides_absent(monkeypatch):
    monkeypatch.delenv("KNOWSYS_ROOT", raising=False)
    monkeypatch.delenv("KNOWSYS_LOG_LEVEL", raising=False)

    assert load_env_overrides(AppConfig()) == AppConfig()


def test_resolve_root(tmp_path):
    assert resolve_root(AppConfig(), tmp_path) == (tmp_path / ".aiknowsys").resolve()
    assert resolve_path("/abs/root", tmp_path) == Path("/abs/root")
