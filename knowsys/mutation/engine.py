"""Single-document mutation engine.

One call touches exactly one document: locate, parse, apply frontmatter and
body changes in memory, then write once and rebuild the index. Every check
runs before the write, so a failing call leaves the file untouched.
"""

from __future__ import annotations

import copy
from pathlib import Path

from knowsys.config import AppConfig
from knowsys.domain.document import DocumentKind, Frontmatter
from knowsys.domain.entry import PlanStatus, SessionStatus
from knowsys.domain.result import MutationResult
from knowsys.errors import (
    AmbiguousMatchError,
    DocumentIOError,
    FrontmatterParseError,
    NotFoundError,
    UsageError,
)
from knowsys.log import get_logger
from knowsys.mutation import sections
from knowsys.mutation.request import (
    CanonicalUpdate,
    Placement,
    UpdateRequest,
    normalize,
    resolve_append_file,
)
from knowsys.pipeline.extract import body_status, scalar_text
from knowsys.pipeline.frontmatter import ParsedDocument, parse, read_text, roundtrips, stringify
from knowsys.storage.index_store import IndexStore, plan_key
from knowsys.utils import atomic_write_text, is_iso_date, today_iso

logger = get_logger(__name__)


class MutationEngine:
    """Apply validated updates to session and plan files."""

    def __init__(
        self,
        root: str | Path,
        config: AppConfig | None = None,
        store: IndexStore | None = None,
    ):
        self.root = Path(root)
        self._config = config or AppConfig()
        self.store = store or IndexStore(self.root, self._config)

    # Lookup

    def locate_session(self, date: str) -> Path:
        """Find the session file for a date.

        Raises:
            UsageError: If the date is malformed
            AmbiguousMatchError: If several files start with the date
            NotFoundError: If no file does
        """
        if not is_iso_date(date):
            raise UsageError(f"Invalid date format: {date}. Expected YYYY-MM-DD")

        sessions_dir = self.root / self._config.scan.sessions_dir
        exact = sessions_dir / f"{date}-session.md"
        if exact.is_file():
            return exact

        candidates = sorted(sessions_dir.glob(f"{date}*.md")) if sessions_dir.is_dir() else []
        if len(candidates) == 1:
            return candidates[0]
        if len(candidates) > 1:
            names = [path.name for path in candidates]
            raise AmbiguousMatchError(
                f"Several session files for {date}: {', '.join(names)}",
                pattern=date,
                candidates=names,
            )

        dates = sorted({entry.date for entry in self.store.query_sessions()}, reverse=True)
        raise NotFoundError(
            f"No session file found for date: {date}",
            target=date,
            suggestions=self.store.suggest(date, dates),
        )

    def locate_plan(self, plan_id: str) -> Path:
        """Find a plan file by id; the ``PLAN_`` prefix is optional."""
        key = plan_key(plan_id or "")
        if not key or "/" in key or "\\" in key:
            raise UsageError(f"Invalid plan id: {plan_id!r}")

        path = self.root / f"{self._config.scan.plan_prefix}{key}.md"
        if path.is_file():
            return path

        ids = [entry.id for entry in self.store.query_plans()]
        raise NotFoundError(
            f"Plan not found: {plan_id}",
            target=plan_id,
            suggestions=self.store.suggest(f"{self._config.scan.plan_prefix}{key}", ids),
        )

    # Update

    def _read(self, path: Path) -> ParsedDocument:
        try:
            text = read_text(path, strict=True)
        except UnicodeDecodeError as exc:
            raise DocumentIOError(f"Cannot update {path.name}: not valid UTF-8", str(path)) from exc
        except OSError as exc:
            raise DocumentIOError(f"Cannot read {path.name}: {exc.strerror or exc}", str(path)) from exc

        parsed = parse(text)
        if parsed.errors:
            raise FrontmatterParseError(
                f"Cannot update {path.name}: frontmatter could not be parsed",
                path=str(path),
                errors=parsed.errors,
            )
        return parsed

    def _current_status(self, kind: DocumentKind, frontmatter: Frontmatter, body: str) -> str:
        raw = scalar_text(frontmatter.get("status"))
        if kind == DocumentKind.PLAN:
            return (raw or body_status(body) or PlanStatus.PLANNED.value).upper()
        return raw.lower() or SessionStatus.IN_PROGRESS.value

    def _add_to_list(self, path: Path, frontmatter: Frontmatter, key: str, value: str) -> bool:
        current = frontmatter.get(key)
        if current is None:
            items = []
        elif isinstance(current, str):
            items = [current] if current else []
        elif isinstance(current, list) and all(isinstance(item, str) for item in current):
            items = list(current)
        else:
            raise FrontmatterParseError(
                f"Cannot add to {key} in {path.name}: expected a list of strings",
                path=str(path),
                errors=[f"{key}: {type(current).__name__} value"],
            )
        if value in items:
            return False
        frontmatter[key] = [*items, value]
        return True

    def _apply_frontmatter(
        self,
        kind: DocumentKind,
        path: Path,
        frontmatter: Frontmatter,
        body: str,
        update: CanonicalUpdate,
        changes: list[str],
    ) -> str | None:
        """Apply list additions and the status change; return the new status if changed."""
        if update.add_topic and self._add_to_list(path, frontmatter, "topics", update.add_topic):
            changes.append(f"Added topic: {update.add_topic}")
        if update.add_file and self._add_to_list(path, frontmatter, "files", update.add_file):
            changes.append(f"Added file: {update.add_file}")

        if update.set_status:
            current = self._current_status(kind, frontmatter, body)
            if current != update.set_status:
                frontmatter["status"] = update.set_status
                changes.append(f"Status changed: {current} → {update.set_status}")
                return update.set_status
        return None

    def _content(self, update: CanonicalUpdate, changes: list[str]) -> str:
        content = update.content
        if update.append_file:
            path = resolve_append_file(update.append_file, self.root)
            if path is None:
                raise DocumentIOError(f"File not found: {update.append_file}", update.append_file)
            try:
                file_text = read_text(path, strict=True)
            except UnicodeDecodeError as exc:
                raise DocumentIOError(
                    f"Cannot read {update.append_file}: not valid UTF-8", str(path)
                ) from exc
            except OSError as exc:
                raise DocumentIOError(
                    f"Cannot read {update.append_file}: {exc.strerror or exc}", str(path)
                ) from exc
            file_text = file_text.replace("\r\n", "\n").strip("\n")
            content = f"{content}\n\n{file_text}" if content else file_text
            changes.append(f"Appended content from file: {update.append_file}")
        return content

    def _apply_body(
        self,
        parsed: ParsedDocument,
        update: CanonicalUpdate,
        changes: list[str],
    ) -> str:
        if not update.has_body_op:
            return parsed.body

        content = self._content(update, changes)
        body = parsed.body
        if update.placement == Placement.APPEND_SECTION:
            new_body = sections.append_section(body, update.heading, content)
            changes.append(f"Appended section: {update.heading}")
        elif update.placement == Placement.PREPEND_SECTION:
            new_body = sections.prepend_section(body, update.heading, content)
            changes.append(f"Prepended section: {update.heading}")
        elif update.placement == Placement.INSERT_AFTER:
            new_body = sections.insert_after(
                body, update.pattern, content, update.heading, parsed.body_line
            )
            changes.append(f"Inserted content after: {update.pattern}")
        else:
            new_body = sections.insert_before(
                body, update.pattern, content, update.heading, parsed.body_line
            )
            changes.append(f"Inserted content before: {update.pattern}")

        if update.progress_note:
            changes[-1] = "Added progress note"
        return new_body

    def _plan_bookkeeping(
        self,
        frontmatter: Frontmatter,
        new_status: str | None,
        changes: list[str],
    ) -> None:
        today = today_iso()
        if new_status == PlanStatus.ACTIVE.value and not frontmatter.get("started"):
            frontmatter["started"] = today
            changes.append(f"Set started: {today}")
        if (
            new_status in (PlanStatus.COMPLETE.value, PlanStatus.CANCELLED.value)
            and not frontmatter.get("completed")
        ):
            frontmatter["completed"] = today
            changes.append(f"Set completed: {today}")
        frontmatter["updated"] = today

    def update(self, kind: DocumentKind, path: Path, request: UpdateRequest) -> MutationResult:
        """Apply ``request`` to the document at ``path``.

        Returns:
            MutationResult; ``updated`` is False (and nothing is written)
            when the request already matches the document

        Raises:
            KnowsysError: Any validation, lookup, parse or I/O failure
        """
        parsed = self._read(path)
        update = normalize(request, kind, self.root, body=parsed.body)

        frontmatter = copy.deepcopy(parsed.frontmatter)
        changes: list[str] = []
        new_status = self._apply_frontmatter(kind, path, frontmatter, parsed.body, update, changes)
        body = self._apply_body(parsed, update, changes)

        if frontmatter == parsed.frontmatter and body == parsed.body:
            logger.debug("No changes for %s", path.name)
            return MutationResult(
                updated=False,
                file_path=str(path),
                message="No changes needed",
                changes=[],
            )

        if kind == DocumentKind.PLAN:
            self._plan_bookkeeping(frontmatter, new_status, changes)

        if not roundtrips(frontmatter, body):
            raise FrontmatterParseError(
                f"Cannot update {path.name}: frontmatter would not survive a rewrite",
                path=str(path),
            )

        try:
            atomic_write_text(path, stringify(frontmatter, body))
        except OSError as exc:
            raise DocumentIOError(f"Cannot write {path.name}: {exc.strerror or exc}", str(path)) from exc
        logger.info("Updated %s: %s", path.name, "; ".join(changes))

        self.store.rebuild()

        label = "plan" if kind == DocumentKind.PLAN else "session"
        return MutationResult(
            updated=True,
            file_path=str(path),
            message=f"Updated {label}: {path.name}",
            changes=changes,
        )

    def update_session(self, date: str, request: UpdateRequest) -> MutationResult:
        return self.update(DocumentKind.SESSION, self.locate_session(date), request)

    def update_plan(self, plan_id: str, request: UpdateRequest) -> MutationResult:
        return self.update(DocumentKind.PLAN, self.locate_plan(plan_id), request)
