"""Session entry points: update and create."""

from __future__ import annotations

from datetime import date as date_cls
from pathlib import Path

from knowsys.config import AppConfig
from knowsys.domain.entry import SessionStatus
from knowsys.domain.result import CreateResult, MutationResult
from knowsys.errors import DocumentIOError, UsageError
from knowsys.log import get_logger
from knowsys.mutation.engine import MutationEngine
from knowsys.mutation.request import UpdateRequest
from knowsys.pipeline.frontmatter import stringify
from knowsys.storage.index_store import IndexStore
from knowsys.utils import atomic_write_text, is_iso_date, today_iso

logger = get_logger(__name__)

MIN_TITLE_LENGTH = 3


def update_session(
    root: str | Path,
    request: UpdateRequest,
    date: str | None = None,
    config: AppConfig | None = None,
) -> MutationResult:
    """Update the session for ``date`` (today when omitted)."""
    engine = MutationEngine(root, config)
    return engine.update_session(date or today_iso(), request)


def _session_body(title: str, session_date: str) -> str:
    formatted = date_cls.fromisoformat(session_date).strftime("%b %d, %Y")
    return (
        f"# Session: {title} ({formatted})\n"
        "\n"
        "## Goal\n"
        "\n"
        "## Changes\n"
        "\n"
        "## Notes for Next Session\n"
    )


def create_session(
    root: str | Path,
    title: str,
    topics: list[str] | None = None,
    plan: str | None = None,
    date: str | None = None,
    config: AppConfig | None = None,
) -> CreateResult:
    """Create ``sessions/<date>-session.md`` from the minimal template.

    Never overwrites: an existing file yields ``created=False``.

    Raises:
        UsageError: If the title is shorter than 3 characters or the date
            is malformed
    """
    title = (title or "").strip()
    if len(title) < MIN_TITLE_LENGTH:
        raise UsageError(f"Session title must be at least {MIN_TITLE_LENGTH} characters")
    session_date = date or today_iso()
    if not is_iso_date(session_date):
        raise UsageError(f"Invalid date format: {session_date}. Expected YYYY-MM-DD")

    root = Path(root)
    config = config or AppConfig()
    path = root / config.scan.sessions_dir / f"{session_date}-session.md"
    if path.exists():
        return CreateResult(created=False, file_path=str(path), message="Session already exists")

    frontmatter = {"date": session_date, "topics": list(topics or [])}
    if plan:
        frontmatter["plan"] = plan
    frontmatter["files"] = []
    frontmatter["status"] = SessionStatus.IN_PROGRESS.value

    try:
        atomic_write_text(path, stringify(frontmatter, _session_body(title, session_date)))
    except OSError as exc:
        raise DocumentIOError(f"Cannot write {path.name}: {exc.strerror or exc}", str(path)) from exc
    logger.info("Created session %s", path.name)

    IndexStore(root, config).rebuild()
    return CreateResult(
        created=True,
        file_path=str(path),
        message=f"Created session: {path.name}",
        metadata={
            "date": session_date,
            "title": title,
            "topics": list(topics or []),
            "plan": plan,
        },
    )
