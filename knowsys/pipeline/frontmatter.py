"""Markdown frontmatter codec.

A document may start with a YAML block delimited by two ``---`` lines. Only
the first two such lines are delimiters; anything after the second one is
body, even if it contains more ``---`` lines. When the YAML is broken the
body is still recovered from the closing delimiter's position.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import yaml

from knowsys.domain.document import Document, FileInfo, Frontmatter, check_frontmatter

DELIMITER = "---"
_TIMESTAMP_TAG = "tag:yaml.org,2002:timestamp"


def _without_timestamps(resolvers: dict) -> dict:
    return {
        first: [(tag, regexp) for tag, regexp in entries if tag != _TIMESTAMP_TAG]
        for first, entries in resolvers.items()
    }


class FrontmatterLoader(yaml.SafeLoader):
    """SafeLoader that keeps date-looking scalars as strings."""


FrontmatterLoader.yaml_implicit_resolvers = _without_timestamps(
    yaml.SafeLoader.yaml_implicit_resolvers
)


class FrontmatterDumper(yaml.SafeDumper):
    """SafeDumper that indents block lists under their key."""

    def increase_indent(self, flow=False, indentless=False):
        return super().increase_indent(flow, False)


FrontmatterDumper.yaml_implicit_resolvers = _without_timestamps(
    yaml.SafeDumper.yaml_implicit_resolvers
)


def _represent_str(dumper: yaml.SafeDumper, value: str) -> yaml.ScalarNode:
    style = "|" if "\n" in value else None
    return dumper.represent_scalar("tag:yaml.org,2002:str", value, style=style)


FrontmatterDumper.add_representer(str, _represent_str)


@dataclass(frozen=True)
class ParsedDocument:
    """Output of :func:`parse`.

    Attributes:
        frontmatter: Parsed mapping ({} when absent or unparseable)
        body: Text after the closing delimiter (whole text if no block)
        errors: Non-fatal problems found in the frontmatter
        body_line: 1-based file line number where the body starts
        has_frontmatter: Whether a delimited block was found
    """

    frontmatter: Frontmatter = field(default_factory=dict)
    body: str = ""
    errors: tuple[str, ...] = ()
    body_line: int = 1
    has_frontmatter: bool = False


def _is_delimiter(line: str) -> bool:
    return line.rstrip() == DELIMITER


def parse(text: str) -> ParsedDocument:
    """Split a markdown document into frontmatter and body.

    Args:
        text: Raw file text (``\\n`` or ``\\r\\n`` line endings)

    Returns:
        ParsedDocument with best-effort frontmatter and the located body
    """
    if text.startswith("\ufeff"):
        text = text[1:]
    text = text.replace("\r\n", "\n")

    lines = text.splitlines(keepends=True)
    if not lines or not _is_delimiter(lines[0]):
        return ParsedDocument(body=text)

    closing = next((i for i in range(1, len(lines)) if _is_delimiter(lines[i])), None)
    if closing is None:
        return ParsedDocument(
            body=text,
            errors=("unterminated frontmatter block: missing closing '---'",),
        )

    yaml_text = "".join(lines[1:closing])
    body = "".join(lines[closing + 1:])
    body_line = closing + 2

    try:
        loaded = yaml.load(yaml_text, Loader=FrontmatterLoader)
    except yaml.YAMLError as exc:
        message = " ".join(str(exc).split())
        return ParsedDocument(
            body=body,
            errors=(f"invalid YAML frontmatter: {message}",),
            body_line=body_line,
            has_frontmatter=True,
        )

    if loaded is None:
        loaded = {}
    problems = check_frontmatter(loaded)
    if problems:
        return ParsedDocument(
            body=body,
            errors=tuple(problems),
            body_line=body_line,
            has_frontmatter=True,
        )

    return ParsedDocument(
        frontmatter=loaded,
        body=body,
        body_line=body_line,
        has_frontmatter=True,
    )


def dump_frontmatter(frontmatter: Frontmatter) -> str:
    """Render a frontmatter mapping as YAML (no delimiters)."""
    return yaml.dump(
        frontmatter,
        Dumper=FrontmatterDumper,
        sort_keys=False,
        default_flow_style=False,
        allow_unicode=True,
        width=4096,
    )


def stringify(frontmatter: Frontmatter, body: str) -> str:
    """Inverse of :func:`parse`. An empty mapping yields the body alone."""
    if not frontmatter:
        return body
    return f"{DELIMITER}\n{dump_frontmatter(frontmatter)}{DELIMITER}\n{body}"


def roundtrips(frontmatter: Frontmatter, body: str) -> bool:
    """Check that stringify -> parse reproduces the frontmatter and body."""
    parsed = parse(stringify(frontmatter, body))
    return (
        not parsed.errors
        and parsed.frontmatter == frontmatter
        and parsed.body.strip() == body.strip()
    )


def read_text(path: str | Path, strict: bool = False) -> str:
    """Read UTF-8 text; undecodable bytes are replaced unless ``strict``."""
    return Path(path).read_text(encoding="utf-8", errors="strict" if strict else "replace")


def read_document(info: FileInfo) -> Document:
    """Read and parse a scanned file.

    Raises:
        OSError: If the file cannot be read
    """
    parsed = parse(read_text(info.path))
    return Document(
        path=info.path,
        relative_path=info.relative_path,
        size=info.size,
        kind=info.kind,
        frontmatter=parsed.frontmatter,
        body=parsed.body,
        errors=parsed.errors,
    )
