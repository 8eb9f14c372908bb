from __future__ import annotations

from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any
import json
import os

import yaml


@dataclass(frozen=True)
class ScanConfig:
    sessions_dir: str = "sessions"
    plans_dir: str = "plans"
    learned_dir: str = "learned"
    plan_prefix: str = "PLAN_"
    extensions: list[str] = field(default_factory=lambda: [".md"])
    ignored_names: list[str] = field(
        default_factory=lambda: ["README.md", "CURRENT_PLAN.md"]
    )


@dataclass(frozen=True)
class IndexConfig:
    snapshot_name: str = "context-index.json"
    auto_rebuild: bool = True
    rebuild_budget_seconds: float = 1.0


@dataclass(frozen=True)
class SearchConfig:
    fuzzy_threshold: float = 80.0
    snippet_chars: int = 160
    default_limit: int | None = None


@dataclass(frozen=True)
class QueryConfig:
    default_session_days: int = 7


@dataclass(frozen=True)
class LoggingConfig:
    level: str = "WARNING"


@dataclass(frozen=True)
class AppConfig:
    knowledge_root: str = ".aiknowsys"
    scan: ScanConfig = field(default_factory=ScanConfig)
    index: IndexConfig = field(default_factory=IndexConfig)
    search: SearchConfig = field(default_factory=SearchConfig)
    query: QueryConfig = field(default_factory=QueryConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def _coalesce(base: dict[str, Any], updates: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in updates.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _coalesce(merged[key], value)
        else:
            merged[key] = value
    return merged


def _from_dict(data: dict[str, Any]) -> AppConfig:
    return AppConfig(
        knowledge_root=data.get("knowledge_root", ".aiknowsys"),
        scan=ScanConfig(**data.get("scan", {})),
        index=IndexConfig(**data.get("index", {})),
        search=SearchConfig(**data.get("search", {})),
        query=QueryConfig(**data.get("query", {})),
        logging=LoggingConfig(**data.get("logging", {})),
    )


def load_config(path: str | Path | None) -> AppConfig:
    if path is None:
        return AppConfig()

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config not found: {path}")

    raw = path.read_text(encoding="utf-8")
    if path.suffix.lower() in {".json"}:
        data = json.loads(raw)
    else:
        data = yaml.safe_load(raw) or {}

    if not isinstance(data, dict):
        raise ValueError(f"Config must be a mapping: {path}")

    merged = _coalesce(asdict(AppConfig()), data)
    try:
        return _from_dict(merged)
    except TypeError as exc:
        raise ValueError(f"Invalid config {path}: {exc}") from exc


def load_env_overrides(config: AppConfig) -> AppConfig:
    """Apply KNOWSYS_ROOT and KNOWSYS_LOG_LEVEL on top of a loaded config."""
    data = asdict(config)
    env_root = os.getenv("KNOWSYS_ROOT")
    if env_root:
        data["knowledge_root"] = env_root
    env_level = os.getenv("KNOWSYS_LOG_LEVEL")
    if env_level:
        data["logging"]["level"] = env_level
    return _from_dict(data)


def resolve_path(value: str, base: Path | None = None) -> Path:
    path = Path(value)
    if path.is_absolute():
        return path
    base = base or Path.cwd()
    return (base / path).resolve()


def resolve_root(config: AppConfig, base: Path | None = None) -> Path:
    """Resolve the knowledge root once so it can be passed down explicitly."""
    return resolve_path(config.knowledge_root, base)
