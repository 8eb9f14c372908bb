"""Error taxonomy for the context index and mutation engine.

Every error the core raises on purpose derives from :class:`KnowsysError` and
carries a ``kind`` plus the structured data a caller needs to build a short,
actionable message (close matches, line numbers, valid values).
"""

from __future__ import annotations

from typing import Any, Iterable


class KnowsysError(Exception):
    """Base class for all knowsys errors."""

    kind = "Error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def details(self) -> dict[str, Any]:
        """Extra structured fields for this error kind."""
        return {}

    def to_dict(self) -> dict[str, Any]:
        """Convert error to a dictionary for structured output."""
        data = {"type": self.kind, "message": self.message}
        data.update(self.details())
        return data


class NotFoundError(KnowsysError):
    """A referenced document or pattern does not exist."""

    kind = "NotFound"

    def __init__(self, message: str, target: str = "", suggestions: Iterable[str] = ()):
        self.target = target
        self.suggestions = list(suggestions)
        if self.suggestions:
            message = f"{message}. Did you mean one of: {', '.join(self.suggestions)}?"
        super().__init__(message)

    def details(self) -> dict[str, Any]:
        return {"target": self.target, "suggestions": self.suggestions}


class AmbiguousMatchError(KnowsysError):
    """A pattern or lookup key matched more than one location."""

    kind = "Ambiguous"

    def __init__(
        self,
        message: str,
        pattern: str = "",
        line_numbers: Iterable[int] = (),
        candidates: Iterable[str] = (),
    ):
        super().__init__(message)
        self.pattern = pattern
        self.line_numbers = list(line_numbers)
        self.candidates = list(candidates)

    def details(self) -> dict[str, Any]:
        return {
            "pattern": self.pattern,
            "line_numbers": self.line_numbers,
            "candidates": self.candidates,
        }


class InvalidEnumError(KnowsysError, ValueError):
    """A value outside a closed set (status, scope)."""

    kind = "InvalidEnum"

    def __init__(self, field: str, value: Any, valid: Iterable[str]):
        self.field = field
        self.value = value
        self.valid = list(valid)
        super().__init__(
            f"Invalid {field}: {value}. Must be one of: {', '.join(self.valid)}"
        )

    def details(self) -> dict[str, Any]:
        return {"field": self.field, "value": self.value, "valid": self.valid}


class UsageError(KnowsysError, ValueError):
    """The caller broke the contract of an operation."""

    kind = "UsageError"


class DocumentIOError(KnowsysError):
    """Filesystem failure on a specific path."""

    kind = "IOError"

    def __init__(self, message: str, path: str):
        super().__init__(message)
        self.path = path

    def details(self) -> dict[str, Any]:
        return {"path": self.path}


class FrontmatterParseError(KnowsysError):
    """Frontmatter could not be parsed or safely written back."""

    kind = "ParseError"

    def __init__(self, message: str, path: str = "", errors: Iterable[str] = ()):
        super().__init__(message)
        self.path = path
        self.errors = list(errors)

    def details(self) -> dict[str, Any]:
        return {"path": self.path, "errors": self.errors}
