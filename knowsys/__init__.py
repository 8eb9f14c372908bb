"""Context index and mutation engine for markdown knowledge roots."""

__version__ = "0.1.0"

# Domain entities
from knowsys.domain.document import Document, FileInfo, ScanResult
from knowsys.domain.entry import LearnedEntry, PlanEntry, PlanStatus, SessionEntry, SessionStatus

# Errors
from knowsys.errors import (
    AmbiguousMatchError,
    DocumentIOError,
    FrontmatterParseError,
    InvalidEnumError,
    KnowsysError,
    NotFoundError,
    UsageError,
)

# Storage
from knowsys.storage.index_store import IndexStore, PlanFilter, SessionFilter

# Pipeline components
from knowsys.pipeline.frontmatter import parse, stringify
from knowsys.pipeline.scanner import FileScanner, scan

# Mutation
from knowsys.mutation import MutationEngine, UpdateRequest

# Facade
from knowsys.facade import (
    create_plan,
    create_session,
    query_plans,
    query_sessions,
    rebuild_index,
    scan_root,
    search_context,
    update_plan,
    update_session,
)

# CLI
from knowsys.cli import main

__all__ = [
    # Domain
    "Document",
    "FileInfo",
    "ScanResult",
    "LearnedEntry",
    "PlanEntry",
    "PlanStatus",
    "SessionEntry",
    "SessionStatus",
    # Errors
    "AmbiguousMatchError",
    "DocumentIOError",
    "FrontmatterParseError",
    "InvalidEnumError",
    "KnowsysError",
    "NotFoundError",
    "UsageError",
    # Storage
    "IndexStore",
    "PlanFilter",
    "SessionFilter",
    # Pipeline
    "parse",
    "stringify",
    "FileScanner",
    "scan",
    # Mutation
    "MutationEngine",
    "UpdateRequest",
    # Facade
    "create_plan",
    "create_session",
    "query_plans",
    "query_sessions",
    "rebuild_index",
    "scan_root",
    "search_context",
    "update_plan",
    "update_session",
    # CLI
    "main",
]
