"""Mutation requests and shortcut desugaring.

Callers fill in an :class:`UpdateRequest`, possibly using the ``done``,
``wip`` and ``append`` shortcuts. :func:`normalize` validates it and turns it
into a :class:`CanonicalUpdate`: at most one status change, idempotent list
additions and a single body operation with an explicit placement.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from knowsys.domain.document import DocumentKind
from knowsys.domain.entry import PlanStatus, SessionStatus
from knowsys.errors import InvalidEnumError, UsageError
from knowsys.utils import today_iso

SESSION_APPEND_HEADING = "## Update"
PROGRESS_HEADING = "## Progress"


class Placement(str, Enum):
    APPEND_SECTION = "append_section"
    PREPEND_SECTION = "prepend_section"
    INSERT_AFTER = "insert_after"
    INSERT_BEFORE = "insert_before"


@dataclass
class UpdateRequest:
    """Everything a caller may ask of a single-document update."""

    add_topic: str | None = None
    add_file: str | None = None
    set_status: str | None = None
    content: str | None = None
    append_section: str | None = None
    prepend_section: str | None = None
    insert_after: str | None = None
    insert_before: str | None = None
    append_file: str | None = None
    done: bool = False
    wip: bool = False
    append: str | None = None


@dataclass(frozen=True)
class CanonicalUpdate:
    """Desugared update the engine works on.

    Attributes:
        placement: Body operation mode (None when only frontmatter changes)
        heading: Section heading for append/prepend, or the heading of the
            inserted block for insert_after/insert_before
        pattern: Anchor text for insert_after/insert_before
        content: Inline content to place
        append_file: Path of a file whose text is placed after ``content``
        progress_note: Whether the content is a dated plan progress note
    """

    add_topic: str | None = None
    add_file: str | None = None
    set_status: str | None = None
    placement: Placement | None = None
    heading: str | None = None
    pattern: str | None = None
    content: str = ""
    append_file: str | None = None
    progress_note: bool = False

    @property
    def has_body_op(self) -> bool:
        return self.placement is not None


def normalize_heading(heading: str) -> str:
    heading = heading.strip()
    if not heading.startswith("#"):
        heading = f"## {heading}"
    return heading


def resolve_append_file(value: str, root: Path) -> Path | None:
    """Find a file named by ``append``/``append_file``.

    Relative paths are tried against the project directory (the parent of
    the knowledge root), then against the knowledge root itself.
    """
    path = Path(value).expanduser()
    candidates = [path] if path.is_absolute() else [root.parent / path, root / path]
    for candidate in candidates:
        if candidate.is_file():
            return candidate
    return None


def looks_like_file(value: str) -> bool:
    return "/" in value or value.endswith(".md")


def _validate_status(kind: DocumentKind, value: str) -> str:
    if kind == DocumentKind.PLAN:
        candidate = value.strip().upper()
        valid = PlanStatus.values()
    else:
        candidate = value.strip().lower()
        valid = SessionStatus.values()
    if candidate not in valid:
        raise InvalidEnumError("status", value, valid)
    return candidate


def _shortcut_status(request: UpdateRequest, kind: DocumentKind) -> str | None:
    if request.done and request.wip:
        raise UsageError("Cannot use done and wip together")

    if kind == DocumentKind.PLAN:
        done_value, wip_value = PlanStatus.COMPLETE.value, PlanStatus.ACTIVE.value
    else:
        done_value, wip_value = SessionStatus.COMPLETE.value, SessionStatus.IN_PROGRESS.value

    shortcut = done_value if request.done else wip_value if request.wip else None
    explicit = _validate_status(kind, request.set_status) if request.set_status else None

    if shortcut and explicit and shortcut != explicit:
        flag = "done" if request.done else "wip"
        raise UsageError(f"{flag} conflicts with set_status {request.set_status}")
    return explicit or shortcut


def _count_progress_headings(body: str) -> tuple[int, int]:
    headings = sum(1 for line in body.splitlines() if line.strip() == PROGRESS_HEADING)
    return headings, body.count(PROGRESS_HEADING)


def normalize(
    request: UpdateRequest,
    kind: DocumentKind,
    root: str | Path,
    body: str = "",
) -> CanonicalUpdate:
    """Validate a request and desugar its shortcuts.

    Args:
        request: Caller request
        kind: SESSION or PLAN
        root: Knowledge root (for resolving ``append`` file paths)
        body: Current document body (used to place plan progress notes)

    Raises:
        UsageError: For contradictory or incomplete requests
        InvalidEnumError: For an unknown status
    """
    root = Path(root)
    status = _shortcut_status(request, kind)

    content = request.content
    append_file = request.append_file
    append_section = request.append_section
    insert_after = request.insert_after
    progress_note = False

    if request.append is not None:
        if content is not None or append_file is not None:
            raise UsageError("append cannot be combined with content or append_file")
        explicit_placement = any(
            value is not None
            for value in (append_section, request.prepend_section, insert_after, request.insert_before)
        )

        if kind == DocumentKind.PLAN:
            content = f"**{today_iso()}:** {request.append}"
            progress_note = True
            if not explicit_placement:
                headings, occurrences = _count_progress_headings(body)
                if headings == 1 and occurrences == 1:
                    insert_after = PROGRESS_HEADING
                else:
                    append_section = PROGRESS_HEADING
        else:
            if looks_like_file(request.append) and resolve_append_file(request.append, root):
                append_file = request.append
            else:
                content = request.append
            if not explicit_placement:
                append_section = SESSION_APPEND_HEADING

    placements = {
        Placement.APPEND_SECTION: append_section,
        Placement.PREPEND_SECTION: request.prepend_section,
        Placement.INSERT_AFTER: insert_after,
        Placement.INSERT_BEFORE: request.insert_before,
    }
    chosen = {mode: value for mode, value in placements.items() if value is not None}
    for mode, value in chosen.items():
        if not value.strip():
            raise UsageError(f"{mode.value} cannot be empty")

    placement = None
    heading = None
    pattern = None
    if chosen:
        inserts = [mode for mode in (Placement.INSERT_AFTER, Placement.INSERT_BEFORE) if mode in chosen]
        if len(inserts) > 1:
            raise UsageError("Use only one of insert_after and insert_before")
        if inserts:
            if Placement.PREPEND_SECTION in chosen:
                raise UsageError("prepend_section cannot be combined with insert_after/insert_before")
            placement = inserts[0]
            pattern = chosen[placement]
            if Placement.APPEND_SECTION in chosen:
                heading = normalize_heading(chosen[Placement.APPEND_SECTION])
        else:
            if len(chosen) > 1:
                raise UsageError("Use only one of append_section and prepend_section")
            placement, value = next(iter(chosen.items()))
            heading = normalize_heading(value)

    has_content = content is not None or append_file is not None
    if has_content and placement is None:
        raise UsageError(
            "content requires a section option "
            "(append_section, prepend_section, insert_after, or insert_before)"
        )
    if placement in (Placement.INSERT_AFTER, Placement.INSERT_BEFORE) and not has_content:
        raise UsageError(f"{placement.value} requires content or append_file")

    return CanonicalUpdate(
        add_topic=request.add_topic.strip() if request.add_topic else None,
        add_file=request.add_file.strip() if request.add_file else None,
        set_status=status,
        placement=placement,
        heading=heading,
        pattern=pattern,
        content=content or "",
        append_file=append_file,
        progress_note=progress_note,
    )
