"""Query/search façade.

Stateless functions over an explicit knowledge root. Each call builds its own
:class:`IndexStore`, runs the staleness check and returns plain dicts ready
for JSON output.
"""

from __future__ import annotations

from pathlib import Path

from knowsys.config import AppConfig
from knowsys.mutation import create_plan, create_session, update_plan, update_session
from knowsys.pipeline.scanner import FileScanner
from knowsys.storage.index_store import IndexStore, PlanFilter, SessionFilter


def query_plans(
    root: str | Path,
    status: str | None = None,
    author: str | None = None,
    topic: str | None = None,
    updated_after: str | None = None,
    updated_before: str | None = None,
    config: AppConfig | None = None,
) -> dict:
    """Query plans by status, author, topic and update date.

    Returns:
        {"count": int, "plans": [plan dicts]}
    """
    filters = PlanFilter(
        status=status,
        author=author,
        topic=topic,
        updated_after=updated_after,
        updated_before=updated_before,
    )
    plans = IndexStore(root, config).query_plans(filters)
    return {"count": len(plans), "plans": [plan.to_dict() for plan in plans]}


def query_sessions(
    root: str | Path,
    date: str | None = None,
    date_after: str | None = None,
    date_before: str | None = None,
    topic: str | None = None,
    plan: str | None = None,
    days: int | None = None,
    config: AppConfig | None = None,
) -> dict:
    """Query sessions, newest first.

    Without any date filter the last ``query.default_session_days`` days
    are returned.

    Returns:
        {"count": int, "sessions": [session dicts]}
    """
    config = config or AppConfig()
    filters = SessionFilter(
        date=date,
        date_after=date_after,
        date_before=date_before,
        topic=topic,
        plan=plan,
        days=days,
    )
    if not filters.has_date_filter:
        filters.days = config.query.default_session_days

    sessions = IndexStore(root, config).query_sessions(filters)
    sessions.sort(key=lambda session: (session.date, session.file), reverse=True)
    return {"count": len(sessions), "sessions": [session.to_dict() for session in sessions]}


def search_context(
    root: str | Path,
    query: str,
    scope: str = "all",
    limit: int | None = None,
    config: AppConfig | None = None,
) -> dict:
    """Full-text search.

    Returns:
        {"query": str, "scope": str, "count": int, "matches": [result dicts]}
    """
    matches = IndexStore(root, config).search(query, scope=scope, limit=limit)
    return {
        "query": query,
        "scope": scope,
        "count": len(matches),
        "matches": [match.to_dict() for match in matches],
    }


def rebuild_index(root: str | Path, config: AppConfig | None = None) -> dict:
    return IndexStore(root, config).rebuild().to_dict()


def scan_root(root: str | Path, config: AppConfig | None = None) -> dict:
    config = config or AppConfig()
    return FileScanner(config.scan).scan(root).to_dict()


__all__ = [
    "query_plans",
    "query_sessions",
    "search_context",
    "rebuild_index",
    "scan_root",
    "create_plan",
    "create_session",
    "update_plan",
    "update_session",
]
