"""Document entity and scan records."""

from __future__ import annotations

from dataclasses import dataclass, asdict, field
from enum import Enum
from typing import Dict, List, Union

Scalar = Union[str, int, float, bool, None]
FrontmatterValue = Union[Scalar, List[Scalar], Dict[str, "FrontmatterValue"]]
Frontmatter = Dict[str, FrontmatterValue]

_SCALAR_TYPES = (str, int, float, bool, type(None))


def check_frontmatter(mapping: object, _path: str = "") -> list[str]:
    """Validate a loaded mapping against the frontmatter value union.

    Args:
        mapping: Object produced by the YAML loader

    Returns:
        List of problems (empty when the mapping is well formed)
    """
    if not isinstance(mapping, dict):
        return [f"{_path or 'frontmatter'}: expected a mapping, got {type(mapping).__name__}"]

    problems = []
    for key, value in mapping.items():
        where = f"{_path}.{key}" if _path else str(key)
        if not isinstance(key, str):
            problems.append(f"{where}: keys must be strings")
            continue
        if isinstance(value, _SCALAR_TYPES):
            continue
        if isinstance(value, list):
            for index, item in enumerate(value):
                if not isinstance(item, _SCALAR_TYPES):
                    problems.append(f"{where}[{index}]: list items must be scalars")
            continue
        if isinstance(value, dict):
            problems.extend(check_frontmatter(value, where))
            continue
        problems.append(f"{where}: unsupported value type {type(value).__name__}")
    return problems


class DocumentKind(str, Enum):
    SESSION = "session"
    PLAN = "plan"
    LEARNED = "learned"
    POINTER = "pointer"


@dataclass(frozen=True, slots=True)
class FileInfo:
    """A classified markdown file found by the scanner.

    Attributes:
        filename: Base name of the file
        path: Absolute path
        relative_path: POSIX path relative to the knowledge root
        size: File size in bytes
        mtime: Modification time (seconds since epoch)
        kind: Document kind from path/filename conventions
    """

    filename: str
    path: str
    relative_path: str
    size: int
    mtime: float
    kind: DocumentKind

    def to_dict(self) -> dict:
        data = asdict(self)
        data["kind"] = self.kind.value
        return data


@dataclass
class ScanResult:
    """Categorized output of one scan of a knowledge root."""

    sessions: list[FileInfo] = field(default_factory=list)
    plans: list[FileInfo] = field(default_factory=list)
    learned: list[FileInfo] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.sessions) + len(self.plans) + len(self.learned)

    def files(self) -> list[FileInfo]:
        """All classified files: plans, sessions, learned."""
        return [*self.plans, *self.sessions, *self.learned]

    def to_dict(self) -> dict:
        return {
            "sessions": [info.to_dict() for info in self.sessions],
            "plans": [info.to_dict() for info in self.plans],
            "learned": [info.to_dict() for info in self.learned],
            "total": self.total,
            "errors": list(self.errors),
        }


@dataclass(frozen=True, slots=True)
class Document:
    """Immutable markdown document: frontmatter plus body.

    Attributes:
        path: Absolute file path
        relative_path: Path relative to the knowledge root
        size: File size in bytes
        kind: Document kind
        frontmatter: Ordered frontmatter mapping ({} when absent)
        body: Raw text after the frontmatter block
        errors: Non-fatal frontmatter parse problems
    """

    path: str
    relative_path: str
    size: int
    kind: DocumentKind
    frontmatter: Frontmatter = field(default_factory=dict)
    body: str = ""
    errors: tuple[str, ...] = ()

    @property
    def stem(self) -> str:
        name = self.relative_path.rsplit("/", 1)[-1]
        return name[:-3] if name.endswith(".md") else name
