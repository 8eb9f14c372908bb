"""Turn parsed documents into index entries.

Every field is taken from frontmatter first, then from the body conventions
the markdown templates use (``**Status:**`` lines, ``# Session:`` headings,
links to ``PLAN_*.md``), then from defaults. Problems that do not stop an
entry from being built are collected in :attr:`Extractor.warnings`.
"""

from __future__ import annotations

import re

from knowsys.config import ScanConfig
from knowsys.domain.document import Document, FrontmatterValue
from knowsys.domain.entry import (
    LearnedEntry,
    PlanEntry,
    PlanStatus,
    PointerEntry,
    SessionEntry,
    SessionStatus,
)
from knowsys.utils import is_iso_date, mtime_iso

_heading_re = re.compile(r"^#[ \t]+(.+?)[ \t]*$", re.MULTILINE)
_session_heading_re = re.compile(r"^#[ \t]+Session:[ \t]*(.+?)[ \t]*\(", re.MULTILINE)
_status_line_re = re.compile(r"^\*\*Status:\*\*[ \t]*(.*)$", re.MULTILINE)
_status_word_re = re.compile(r"[A-Za-z][A-Za-z_-]*")
_date_prefix_re = re.compile(r"^(\d{4}-\d{2}-\d{2})")
_plan_link_re = re.compile(r"(PLAN_[A-Za-z0-9_.-]+?)\.md")


def coerce_list(value: FrontmatterValue) -> list[str]:
    """Accept a YAML list or a single scalar; drop empty items."""
    if value is None:
        return []
    if isinstance(value, list):
        return [str(item) for item in value if item is not None and str(item) != ""]
    if isinstance(value, dict):
        return []
    text = str(value)
    return [text] if text else []


def scalar_text(value: FrontmatterValue) -> str:
    """String form of a scalar frontmatter value ('' for lists, mappings, null)."""
    if value is None or isinstance(value, (list, dict)):
        return ""
    return str(value).strip()


def _body_field(body: str, name: str) -> str:
    match = re.search(rf"^\*\*{re.escape(name)}:\*\*[ \t]*(.+?)[ \t]*$", body, re.MULTILINE)
    return match.group(1) if match else ""


def first_heading(body: str) -> str:
    match = _heading_re.search(body)
    return match.group(1) if match else ""


def body_status(body: str) -> str:
    """Status word of a ``**Status:** <emoji> WORD`` line ('' if none)."""
    match = _status_line_re.search(body)
    if not match:
        return ""
    word = _status_word_re.search(match.group(1))
    return word.group(0) if word else ""


class Extractor:
    """Build index entries from documents, collecting non-fatal warnings."""

    def __init__(self, config: ScanConfig | None = None):
        self._config = config or ScanConfig()
        self.warnings: list[str] = []

    def _warn(self, document: Document, message: str) -> None:
        self.warnings.append(f"{document.relative_path}: {message}")

    def _plan_status(self, document: Document) -> PlanStatus:
        raw = scalar_text(document.frontmatter.get("status")) or body_status(document.body)
        if not raw:
            return PlanStatus.PLANNED
        candidate = raw.upper()
        if candidate in PlanStatus.values():
            return PlanStatus(candidate)
        self._warn(document, f"unknown plan status {raw!r}, using {PlanStatus.PLANNED.value}")
        return PlanStatus.PLANNED

    def pointer(self, document: Document) -> PointerEntry:
        fm = document.frontmatter
        author = scalar_text(fm.get("author"))
        if not author:
            stem = document.stem
            author = stem[len("active-"):] if stem.startswith("active-") else stem

        plan_id = scalar_text(fm.get("plan"))
        if not plan_id:
            link = _plan_link_re.search(document.body)
            plan_id = link.group(1) if link else ""

        status = scalar_text(fm.get("status")) or body_status(document.body)
        return PointerEntry(
            author=author,
            file=document.relative_path,
            plan_id=plan_id,
            status=status,
        )

    def plan(
        self,
        document: Document,
        mtime: float,
        pointer_author: str = "",
    ) -> PlanEntry:
        fm = document.frontmatter
        plan_id = document.stem

        author = scalar_text(fm.get("author")) or pointer_author or "unknown"
        modified = mtime_iso(mtime)
        created = scalar_text(fm.get("created")) or _body_field(document.body, "Created") or modified
        updated = (
            scalar_text(fm.get("updated"))
            or scalar_text(fm.get("last-updated"))
            or _body_field(document.body, "Updated")
            or modified
        )

        return PlanEntry(
            id=plan_id,
            title=scalar_text(fm.get("title")) or first_heading(document.body) or plan_id,
            author=author,
            status=self._plan_status(document),
            file=document.relative_path,
            topics=coerce_list(fm.get("topics")),
            created=created,
            updated=updated,
        )

    def session(self, document: Document, mtime: float) -> SessionEntry | None:
        """Session entry, or None when no date can be found."""
        fm = document.frontmatter
        date = scalar_text(fm.get("date"))
        if date and not is_iso_date(date):
            self._warn(document, f"invalid session date {date!r}")
            date = ""
        if not date:
            prefix = _date_prefix_re.match(document.stem)
            if prefix and is_iso_date(prefix.group(1)):
                date = prefix.group(1)
        if not date:
            self._warn(document, "session has no date, skipped")
            return None

        heading = _session_heading_re.search(document.body)
        title = (
            scalar_text(fm.get("title"))
            or (heading.group(1) if heading else "")
            or first_heading(document.body)
            or "Session"
        )

        status = scalar_text(fm.get("status")).lower() or SessionStatus.IN_PROGRESS.value
        if status not in SessionStatus.values():
            self._warn(document, f"unknown session status {status!r}")
            status = SessionStatus.IN_PROGRESS.value

        plan = scalar_text(fm.get("plan")) or None
        return SessionEntry(
            date=date,
            title=title,
            file=document.relative_path,
            topics=coerce_list(fm.get("topics")),
            plan=plan,
            status=status,
            updated=scalar_text(fm.get("updated")) or mtime_iso(mtime),
        )

    def learned(self, document: Document) -> LearnedEntry:
        fm = document.frontmatter
        category = scalar_text(fm.get("category"))
        if not category:
            parts = document.relative_path.split("/")
            # learned/<category>/<file>.md
            if len(parts) > 2 and parts[0] == self._config.learned_dir:
                category = parts[1]
        keywords = coerce_list(fm.get("keywords")) or coerce_list(fm.get("triggers"))

        return LearnedEntry(
            title=scalar_text(fm.get("title")) or first_heading(document.body) or document.stem,
            category=category or "general",
            file=document.relative_path,
            keywords=keywords,
        )
