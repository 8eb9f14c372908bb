"""Domain entities for the context index.

This module contains the data structures shared by the scanner, the index
store and the mutation engine.
"""

from knowsys.domain.document import (
    Document,
    DocumentKind,
    FileInfo,
    Frontmatter,
    FrontmatterValue,
    ScanResult,
    check_frontmatter,
)
from knowsys.domain.entry import (
    LearnedEntry,
    PlanEntry,
    PlanStatus,
    PointerEntry,
    SessionEntry,
    SessionStatus,
)
from knowsys.domain.result import CreateResult, MutationResult, RebuildStats, SearchResult

__all__ = [
    "Document",
    "DocumentKind",
    "FileInfo",
    "Frontmatter",
    "FrontmatterValue",
    "ScanResult",
    "check_frontmatter",
    "LearnedEntry",
    "PlanEntry",
    "PlanStatus",
    "PointerEntry",
    "SessionEntry",
    "SessionStatus",
    "CreateResult",
    "MutationResult",
    "RebuildStats",
    "SearchResult",
]
