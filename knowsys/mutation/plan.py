"""Plan entry points: update and create."""

from __future__ import annotations

import os
from pathlib import Path

from knowsys.config import AppConfig
from knowsys.domain.entry import PlanStatus
from knowsys.domain.result import CreateResult, MutationResult
from knowsys.errors import DocumentIOError, InvalidEnumError, UsageError
from knowsys.log import get_logger
from knowsys.mutation.engine import MutationEngine
from knowsys.mutation.request import UpdateRequest
from knowsys.pipeline.frontmatter import stringify
from knowsys.storage.index_store import IndexStore, plan_key
from knowsys.utils import atomic_write_text, slugify, today_iso

logger = get_logger(__name__)

MIN_TITLE_LENGTH = 3

STATUS_EMOJIS = {
    PlanStatus.PLANNED: "📋",
    PlanStatus.ACTIVE: "🎯",
    PlanStatus.PAUSED: "🔄",
    PlanStatus.COMPLETE: "✅",
    PlanStatus.CANCELLED: "❌",
}


def update_plan(
    root: str | Path,
    plan_id: str,
    request: UpdateRequest,
    config: AppConfig | None = None,
) -> MutationResult:
    """Update a plan by id (``PLAN_`` prefix optional)."""
    engine = MutationEngine(root, config)
    return engine.update_plan(plan_id, request)


def default_author() -> str:
    return os.getenv("USER") or os.getenv("USERNAME") or "unknown"


def _plan_body(title: str, status: PlanStatus, created: str, author: str) -> str:
    return (
        f"# {title}\n"
        "\n"
        f"**Status:** {STATUS_EMOJIS[status]} {status.value}\n"
        f"**Created:** {created}\n"
        f"**Author:** {author}\n"
        "\n"
        "## Goal\n"
        "\n"
        "## Implementation Steps\n"
        "\n"
        "## Progress\n"
    )


def create_plan(
    root: str | Path,
    title: str,
    author: str | None = None,
    topics: list[str] | None = None,
    status: str = PlanStatus.PLANNED.value,
    plan_id: str | None = None,
    config: AppConfig | None = None,
) -> CreateResult:
    """Create ``PLAN_<id>.md`` from the minimal template.

    The id defaults to the slugified title. Never overwrites.

    Raises:
        UsageError: If the title is too short or the id is invalid
        InvalidEnumError: If the status is unknown
    """
    title = (title or "").strip()
    if len(title) < MIN_TITLE_LENGTH:
        raise UsageError(f"Plan title must be at least {MIN_TITLE_LENGTH} characters")

    candidate = (status or "").strip().upper()
    if candidate not in PlanStatus.values():
        raise InvalidEnumError("status", status, PlanStatus.values())
    plan_status = PlanStatus(candidate)

    config = config or AppConfig()
    prefix = config.scan.plan_prefix
    key = plan_key(plan_id) if plan_id else slugify(title)
    if not key or "/" in key or "\\" in key:
        raise UsageError(f"Invalid plan id: {plan_id!r}")
    full_id = f"{prefix}{key}"

    root = Path(root)
    path = root / f"{full_id}.md"
    if path.exists():
        return CreateResult(created=False, file_path=str(path), message="Plan already exists")

    author = (author or "").strip() or default_author()
    created = today_iso()
    frontmatter = {
        "id": full_id,
        "title": title,
        "status": plan_status.value,
        "author": author,
        "created": created,
        "topics": list(topics or []),
    }
    if plan_status == PlanStatus.ACTIVE:
        frontmatter["started"] = created

    try:
        atomic_write_text(path, stringify(frontmatter, _plan_body(title, plan_status, created, author)))
    except OSError as exc:
        raise DocumentIOError(f"Cannot write {path.name}: {exc.strerror or exc}", str(path)) from exc
    logger.info("Created plan %s", path.name)

    IndexStore(root, config).rebuild()
    return CreateResult(
        created=True,
        file_path=str(path),
        message=f"Created plan: {full_id}",
        metadata={
            "id": full_id,
            "title": title,
            "status": plan_status.value,
            "author": author,
            "topics": list(topics or []),
        },
    )
