"""Derived, disposable index over a knowledge root.

The index is a JSON snapshot (``context-index.json``) rebuilt wholesale from
the markdown files. It is never edited in place: a rebuild produces a new
snapshot which is written atomically and then swapped into memory.
"""

from __future__ import annotations

import json
import time
from dataclasses import dataclass, field
from datetime import date, timedelta
from pathlib import Path
from typing import Callable, Iterable

from rapidfuzz import fuzz, process

from knowsys.config import AppConfig
from knowsys.domain.document import DocumentKind, ScanResult
from knowsys.domain.entry import (
    LearnedEntry,
    PlanEntry,
    PlanStatus,
    PointerEntry,
    SessionEntry,
)
from knowsys.domain.result import RebuildStats, SearchResult
from knowsys.errors import InvalidEnumError, UsageError
from knowsys.log import get_logger
from knowsys.pipeline.extract import Extractor
from knowsys.pipeline.frontmatter import read_document, read_text
from knowsys.pipeline.scanner import FileScanner
from knowsys.pipeline.staleness import is_stale, newest_mtime
from knowsys.storage.scoring import RelevanceScorer, default_scorer
from knowsys.utils import atomic_write_text, date_part, is_iso_date, now_iso

logger = get_logger(__name__)

SNAPSHOT_VERSION = 1
SEARCH_SCOPES = ("all", "plans", "sessions", "learned")


@dataclass
class IndexSnapshot:
    """One complete, immutable-by-convention index generation."""

    version: int = SNAPSHOT_VERSION
    rebuilt_at: str = ""
    watermark: float = 0.0
    files: list[str] = field(default_factory=list)
    plans: list[PlanEntry] = field(default_factory=list)
    sessions: list[SessionEntry] = field(default_factory=list)
    learned: list[LearnedEntry] = field(default_factory=list)
    pointers: list[PointerEntry] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "version": self.version,
            "rebuilt_at": self.rebuilt_at,
            "watermark": self.watermark,
            "files": list(self.files),
            "plans": [entry.to_dict() for entry in self.plans],
            "sessions": [entry.to_dict() for entry in self.sessions],
            "learned": [entry.to_dict() for entry in self.learned],
            "pointers": [entry.to_dict() for entry in self.pointers],
            "errors": list(self.errors),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "IndexSnapshot":
        return cls(
            version=data["version"],
            rebuilt_at=data.get("rebuilt_at", ""),
            watermark=float(data["watermark"]),
            files=list(data["files"]),
            plans=[PlanEntry.from_dict(item) for item in data.get("plans", [])],
            sessions=[SessionEntry.from_dict(item) for item in data.get("sessions", [])],
            learned=[LearnedEntry.from_dict(item) for item in data.get("learned", [])],
            pointers=[PointerEntry.from_dict(item) for item in data.get("pointers", [])],
            errors=list(data.get("errors", [])),
        )


def _check_date(name: str, value: str | None) -> None:
    if value is not None and not is_iso_date(value):
        raise UsageError(f"Invalid {name} format: {value}. Expected YYYY-MM-DD")


def plan_key(plan_id: str) -> str:
    """Normalize a plan reference: drop a ``.md`` suffix and the ``PLAN_`` prefix."""
    key = plan_id.strip()
    if key.endswith(".md"):
        key = key[:-3]
    if key.startswith("PLAN_"):
        key = key[len("PLAN_"):]
    return key


@dataclass
class PlanFilter:
    """AND-combined plan filters; ``None`` means "any"."""

    status: str | PlanStatus | None = None
    author: str | None = None
    topic: str | None = None
    updated_after: str | None = None
    updated_before: str | None = None

    def __post_init__(self):
        if self.status is not None and not isinstance(self.status, PlanStatus):
            candidate = str(self.status).strip().upper()
            if candidate not in PlanStatus.values():
                raise InvalidEnumError("status", self.status, PlanStatus.values())
            self.status = PlanStatus(candidate)
        _check_date("updatedAfter", self.updated_after)
        _check_date("updatedBefore", self.updated_before)


@dataclass
class SessionFilter:
    """AND-combined session filters.

    ``days`` is sugar for ``date_after = today - days``; an explicit
    ``date_after`` takes precedence.
    """

    date: str | None = None
    date_after: str | None = None
    date_before: str | None = None
    topic: str | None = None
    plan: str | None = None
    days: int | None = None

    def __post_init__(self):
        _check_date("date", self.date)
        _check_date("dateAfter", self.date_after)
        _check_date("dateBefore", self.date_before)
        if self.days is not None and self.days < 0:
            raise UsageError(f"Invalid days: {self.days}. Must be zero or positive")

    @property
    def has_date_filter(self) -> bool:
        return any(v is not None for v in (self.date, self.date_after, self.date_before, self.days))

    def effective_date_after(self, today: date | None = None) -> str | None:
        if self.date_after is not None:
            return self.date_after
        if self.days is not None:
            today = today or date.today()
            return (today - timedelta(days=self.days)).isoformat()
        return None


class IndexStore:
    """Context index for one knowledge root.

    Manages the snapshot file, the staleness check run before every read,
    plan/session queries and full-text search.
    """

    def __init__(
        self,
        root: str | Path,
        config: AppConfig | None = None,
        scorer_factory: Callable[[str], RelevanceScorer] = default_scorer,
    ):
        """Initialize the store.

        Args:
            root: Knowledge root directory (already resolved by the caller)
            config: Application config (defaults when omitted)
            scorer_factory: Builds a relevance scorer for a query
        """
        self.root = Path(root)
        self._config = config or AppConfig()
        self._scorer_factory = scorer_factory
        self._snapshot: IndexSnapshot | None = None

    @property
    def snapshot_path(self) -> Path:
        return self.root / self._config.index.snapshot_name

    @property
    def snapshot(self) -> IndexSnapshot | None:
        return self._snapshot

    def scan(self) -> ScanResult:
        return FileScanner(self._config.scan).scan(self.root)

    # Snapshot lifecycle

    def load(self) -> IndexSnapshot | None:
        """Load the snapshot file; None when missing, corrupt or outdated."""
        path = self.snapshot_path
        if not path.exists():
            return None
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            snapshot = IndexSnapshot.from_dict(data)
        except (OSError, ValueError, KeyError, TypeError) as exc:
            logger.debug("Discarding unreadable index snapshot %s: %s", path, exc)
            return None
        if snapshot.version != SNAPSHOT_VERSION:
            logger.debug("Discarding index snapshot version %s", snapshot.version)
            return None
        return snapshot

    def rebuild(self, scan: ScanResult | None = None) -> RebuildStats:
        """Rescan, parse and extract every document, then swap in a new snapshot."""
        started = time.perf_counter()
        scan = scan or self.scan()
        extractor = Extractor(self._config.scan)
        errors = list(scan.errors)
        problems: list[str] = []

        documents = []
        for info in scan.files():
            try:
                document = read_document(info)
            except OSError as exc:
                problems.append(f"Error reading {info.filename}: {exc.strerror or exc}")
                continue
            problems.extend(f"{info.relative_path}: {error}" for error in document.errors)
            documents.append((info, document))

        pointers = [
            extractor.pointer(document)
            for _, document in documents
            if document.kind == DocumentKind.POINTER
        ]
        pointer_authors = {plan_key(p.plan_id): p.author for p in pointers if p.plan_id}

        plans: list[PlanEntry] = []
        sessions: list[SessionEntry] = []
        learned: list[LearnedEntry] = []
        for info, document in documents:
            if document.kind == DocumentKind.PLAN:
                author = pointer_authors.get(plan_key(document.stem), "")
                plans.append(extractor.plan(document, info.mtime, author))
            elif document.kind == DocumentKind.SESSION:
                entry = extractor.session(document, info.mtime)
                if entry is not None:
                    sessions.append(entry)
            elif document.kind == DocumentKind.LEARNED:
                learned.append(extractor.learned(document))

        problems.extend(extractor.warnings)
        snapshot = IndexSnapshot(
            rebuilt_at=now_iso(),
            watermark=newest_mtime(scan),
            files=sorted(info.relative_path for info in scan.files()),
            plans=plans,
            sessions=sessions,
            learned=learned,
            pointers=pointers,
            errors=errors + problems,
        )
        self._write(snapshot)
        self._snapshot = snapshot

        duration = time.perf_counter() - started
        for problem in problems:
            logger.warning("Index: %s", problem)
        logger.info(
            "Rebuilt index: %d plans, %d sessions, %d learned, %d pointers in %.3fs",
            len(plans),
            len(sessions),
            len(learned),
            len(pointers),
            duration,
        )
        budget = self._config.index.rebuild_budget_seconds
        if duration > budget:
            logger.warning("Index rebuild took %.3fs (budget %.3fs)", duration, budget)

        return RebuildStats(
            plans=len(plans),
            sessions=len(sessions),
            learned=len(learned),
            pointers=len(pointers),
            errors=list(snapshot.errors),
            duration=round(duration, 6),
        )

    def _write(self, snapshot: IndexSnapshot) -> None:
        if not self.root.is_dir():
            logger.debug("Knowledge root %s does not exist; snapshot kept in memory", self.root)
            return
        try:
            atomic_write_text(self.snapshot_path, json.dumps(snapshot.to_dict(), indent=2) + "\n")
        except OSError as exc:
            logger.warning("Could not write index snapshot %s: %s", self.snapshot_path, exc)

    def is_stale(self, scan: ScanResult | None = None) -> bool:
        snapshot = self._snapshot or self.load()
        return is_stale(snapshot, scan or self.scan())

    def ensure_fresh(self, force: bool = False) -> bool:
        """Run the staleness check and rebuild when needed.

        Args:
            force: Rebuild unconditionally

        Returns:
            True if a rebuild happened
        """
        if force:
            self.rebuild()
            return True

        if self._snapshot is None:
            self._snapshot = self.load()
        if self._snapshot is None:
            logger.debug("No index snapshot at %s, rebuilding", self.snapshot_path)
            self.rebuild()
            return True

        if not self._config.index.auto_rebuild:
            return False

        scan = self.scan()
        if is_stale(self._snapshot, scan):
            self.rebuild(scan)
            return True
        return False

    # Queries

    def _fuzzy_equal(self, query: str, value: str) -> bool:
        if query.lower() == value.lower():
            return True
        return fuzz.ratio(query.lower(), value.lower()) >= self._config.search.fuzzy_threshold

    def _topic_match(self, topic: str, topics: Iterable[str], title: str) -> bool:
        needle = topic.lower()
        candidates = [*topics, title]
        if any(needle in candidate.lower() for candidate in candidates):
            return True
        threshold = self._config.search.fuzzy_threshold
        return any(
            fuzz.partial_ratio(needle, candidate.lower()) >= threshold
            for candidate in candidates
            if candidate
        )

    def query_plans(self, filters: PlanFilter | None = None) -> list[PlanEntry]:
        filters = filters or PlanFilter()
        self.ensure_fresh()

        plans = list(self._snapshot.plans)
        if filters.status is not None:
            plans = [p for p in plans if p.status == filters.status]
        if filters.author:
            plans = [p for p in plans if self._fuzzy_equal(filters.author, p.author)]
        if filters.topic:
            plans = [p for p in plans if self._topic_match(filters.topic, p.topics, p.title)]
        if filters.updated_after:
            plans = [p for p in plans if date_part(p.updated) > filters.updated_after]
        if filters.updated_before:
            plans = [p for p in plans if date_part(p.updated) < filters.updated_before]
        return plans

    def query_sessions(self, filters: SessionFilter | None = None) -> list[SessionEntry]:
        filters = filters or SessionFilter()
        self.ensure_fresh()

        sessions = list(self._snapshot.sessions)
        if filters.date:
            sessions = [s for s in sessions if s.date == filters.date]
        date_after = filters.effective_date_after()
        if date_after:
            sessions = [s for s in sessions if s.date > date_after]
        if filters.date_before:
            sessions = [s for s in sessions if s.date < filters.date_before]
        if filters.topic:
            sessions = [s for s in sessions if self._topic_match(filters.topic, s.topics, s.title)]
        if filters.plan:
            wanted = plan_key(filters.plan)
            sessions = [s for s in sessions if s.plan and plan_key(s.plan) == wanted]
        return sessions

    def suggest(self, target: str, choices: Iterable[str], limit: int = 3) -> list[str]:
        """Close matches for a missing document key."""
        matches = process.extract(
            target,
            list(choices),
            scorer=fuzz.WRatio,
            limit=limit,
            score_cutoff=60,
        )
        return [choice for choice, _score, _index in matches]

    # Search

    def _candidates(self, scope: str) -> list[tuple[str, str]]:
        snapshot = self._snapshot
        candidates: list[tuple[str, str]] = []
        if scope in ("all", "plans"):
            candidates += [("plan", entry.file) for entry in snapshot.plans]
        if scope in ("all", "sessions"):
            candidates += [("session", entry.file) for entry in snapshot.sessions]
        if scope in ("all", "learned"):
            candidates += [("learned", entry.file) for entry in snapshot.learned]
        return candidates

    def search(self, query: str, scope: str = "all", limit: int | None = None) -> list[SearchResult]:
        """Full-text search ranked by relevance.

        Args:
            query: Words or phrase to look for
            scope: One of all, plans, sessions, learned
            limit: Maximum number of results (config default when None)

        Returns:
            Results sorted by score, ties in index order

        Raises:
            UsageError: If the query is empty
            InvalidEnumError: If the scope is unknown
        """
        if not query or not query.strip():
            raise UsageError("Search query cannot be empty")
        if scope not in SEARCH_SCOPES:
            raise InvalidEnumError("scope", scope, SEARCH_SCOPES)

        self.ensure_fresh()
        scorer = self._scorer_factory(query)
        snippet_chars = self._config.search.snippet_chars

        results: list[SearchResult] = []
        for kind, relative in self._candidates(scope):
            try:
                text = read_text(self.root / relative).replace("\r\n", "\n")
            except OSError as exc:
                logger.warning("Search skipped %s: %s", relative, exc)
                continue
            match = scorer.score(text)
            if match is None:
                continue
            snippet = match.text.strip()
            if len(snippet) > snippet_chars:
                snippet = snippet[: snippet_chars - 3].rstrip() + "..."
            results.append(
                SearchResult(
                    kind=kind,
                    file=relative,
                    snippet=snippet,
                    score=match.score,
                    line=match.line + 1,
                )
            )

        # sort is stable, so ties keep index order
        results.sort(key=lambda result: -result.score)
        limit = limit if limit is not None else self._config.search.default_limit
        if limit is not None:
            results = results[:limit]
        return results
