"""Section-aware edits of a markdown body.

All functions are pure: they take a body string and return a new one.
Pattern lookups never guess; a pattern must occur exactly once.
"""

from __future__ import annotations

import re

from knowsys.errors import AmbiguousMatchError, NotFoundError

_section_heading_re = re.compile(r"^#{1,2}\s", re.MULTILINE)


def _block(heading: str | None, content: str) -> str:
    content = content.strip("\n")
    if heading and content:
        return f"{heading}\n{content}"
    return heading or content


def append_section(body: str, heading: str, content: str = "") -> str:
    """Add a section at the end of the body."""
    block = _block(heading, content)
    base = body.rstrip()
    if not base:
        return f"{block}\n"
    return f"{base}\n\n{block}\n"


def prepend_section(body: str, heading: str, content: str = "") -> str:
    """Add a section at the start of the body, followed by a blank line."""
    block = _block(heading, content)
    rest = body.lstrip("\n")
    if not rest.strip():
        return f"{block}\n"
    return f"{block}\n\n{rest}"


def find_pattern(body: str, pattern: str, body_line: int = 1) -> int:
    """Locate the single occurrence of ``pattern`` in ``body``.

    Args:
        body: Document body
        pattern: Literal text to find
        body_line: File line number of the first body line

    Returns:
        Character offset of the match

    Raises:
        NotFoundError: If the pattern does not occur
        AmbiguousMatchError: If it occurs more than once; ``line_numbers``
            holds each distinct file line with an occurrence
    """
    offsets = []
    start = body.find(pattern)
    while start != -1:
        offsets.append(start)
        start = body.find(pattern, start + 1)

    if not offsets:
        raise NotFoundError(f"Pattern not found: {pattern}", target=pattern)
    if len(offsets) > 1:
        lines = sorted({body.count("\n", 0, offset) + body_line for offset in offsets})
        raise AmbiguousMatchError(
            f'Pattern "{pattern}" found {len(offsets)} times at lines: '
            f"{', '.join(str(line) for line in lines)}. Please be more specific.",
            pattern=pattern,
            line_numbers=lines,
        )
    return offsets[0]


def insert_after(
    body: str,
    pattern: str,
    content: str,
    heading: str | None = None,
    body_line: int = 1,
) -> str:
    """Insert at the end of the section that contains ``pattern``.

    The section ends at the next ``#`` or ``##`` heading after the pattern's
    line, or at the end of the body.
    """
    offset = find_pattern(body, pattern, body_line)
    line_end = body.find("\n", offset + len(pattern))
    if line_end == -1:
        section_end = len(body)
    else:
        next_heading = _section_heading_re.search(body, line_end + 1)
        section_end = next_heading.start() if next_heading else len(body)

    before = body[:section_end].rstrip("\n")
    after = body[section_end:]
    separator = "\n\n" if heading else "\n"
    result = f"{before}{separator}{_block(heading, content)}\n"
    if after:
        result += f"\n{after}"
    return result


def insert_before(
    body: str,
    pattern: str,
    content: str,
    heading: str | None = None,
    body_line: int = 1,
) -> str:
    """Insert immediately before the line that contains ``pattern``."""
    offset = find_pattern(body, pattern, body_line)
    line_start = body.rfind("\n", 0, offset) + 1
    return f"{body[:line_start]}{_block(heading, content)}\n\n{body[line_start:]}"
