"""Result records returned by queries and mutations."""

from __future__ import annotations

from dataclasses import dataclass, asdict, field


@dataclass(frozen=True, slots=True)
class SearchResult:
    """One ranked search hit (ephemeral, never persisted).

    Attributes:
        kind: Source document kind
        file: Path relative to the knowledge root
        snippet: Matched line, trimmed
        line: 1-based line number of the snippet, if known
        score: Relevance in [0.0, 1.0], higher is better
    """

    kind: str
    file: str
    snippet: str
    score: float
    line: int | None = None

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class MutationResult:
    """Outcome of a single-document mutation."""

    updated: bool
    file_path: str
    message: str
    changes: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "updated": self.updated,
            "filePath": self.file_path,
            "message": self.message,
            "changes": list(self.changes),
        }


@dataclass
class CreateResult:
    """Outcome of creating a new session or plan file."""

    created: bool
    file_path: str
    message: str
    metadata: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "created": self.created,
            "filePath": self.file_path,
            "message": self.message,
            "metadata": dict(self.metadata),
        }


@dataclass
class RebuildStats:
    plans: int = 0
    sessions: int = 0
    learned: int = 0
    pointers: int = 0
    errors: list[str] = field(default_factory=list)
    duration: float = 0.0

    def to_dict(self) -> dict:
        return asdict(self)
