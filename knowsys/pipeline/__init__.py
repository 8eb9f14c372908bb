"""Indexing pipeline: codec, scanner, extraction and staleness."""

from knowsys.pipeline.extract import Extractor, coerce_list
from knowsys.pipeline.frontmatter import (
    ParsedDocument,
    parse,
    read_document,
    roundtrips,
    stringify,
)
from knowsys.pipeline.scanner import FileScanner, scan
from knowsys.pipeline.staleness import is_stale, newest_mtime

__all__ = [
    # Codec
    "ParsedDocument",
    "parse",
    "read_document",
    "roundtrips",
    "stringify",
    # Scanning
    "FileScanner",
    "scan",
    # Extraction
    "Extractor",
    "coerce_list",
    # Staleness
    "is_stale",
    "newest_mtime",
]
