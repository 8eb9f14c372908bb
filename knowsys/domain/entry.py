"""Index entries: queryable projections of documents."""

from __future__ import annotations

from dataclasses import dataclass, asdict, field
from enum import Enum


class PlanStatus(str, Enum):
    ACTIVE = "ACTIVE"
    PAUSED = "PAUSED"
    PLANNED = "PLANNED"
    COMPLETE = "COMPLETE"
    CANCELLED = "CANCELLED"

    @classmethod
    def values(cls) -> list[str]:
        return [member.value for member in cls]


class SessionStatus(str, Enum):
    IN_PROGRESS = "in-progress"
    COMPLETE = "complete"
    ABANDONED = "abandoned"

    @classmethod
    def values(cls) -> list[str]:
        return [member.value for member in cls]


@dataclass(frozen=True, slots=True)
class PlanEntry:
    """Plan metadata extracted from a PLAN_*.md file.

    Attributes:
        id: Plan identifier (file stem, e.g. "PLAN_auth_rework")
        title: Plan title
        author: Plan owner
        status: Lifecycle status
        topics: Topics/tags
        created: Creation date or timestamp
        updated: Last-updated date or timestamp
        file: Path relative to the knowledge root
    """

    id: str
    title: str
    author: str
    status: PlanStatus
    file: str
    topics: list[str] = field(default_factory=list)
    created: str = ""
    updated: str = ""

    def to_dict(self) -> dict:
        data = asdict(self)
        data["status"] = self.status.value
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "PlanEntry":
        return cls(
            id=data["id"],
            title=data["title"],
            author=data["author"],
            status=PlanStatus(data["status"]),
            file=data["file"],
            topics=list(data.get("topics", [])),
            created=data.get("created", ""),
            updated=data.get("updated", ""),
        )


@dataclass(frozen=True, slots=True)
class SessionEntry:
    """Session metadata extracted from a sessions/*.md file."""

    date: str
    title: str
    file: str
    topics: list[str] = field(default_factory=list)
    plan: str | None = None
    status: str = SessionStatus.IN_PROGRESS.value
    updated: str = ""

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "SessionEntry":
        return cls(
            date=data["date"],
            title=data["title"],
            file=data["file"],
            topics=list(data.get("topics", [])),
            plan=data.get("plan"),
            status=data.get("status", SessionStatus.IN_PROGRESS.value),
            updated=data.get("updated", ""),
        )


@dataclass(frozen=True, slots=True)
class LearnedEntry:
    """Learned pattern metadata."""

    title: str
    category: str
    file: str
    keywords: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "LearnedEntry":
        return cls(
            title=data["title"],
            category=data["category"],
            file=data["file"],
            keywords=list(data.get("keywords", [])),
        )


@dataclass(frozen=True, slots=True)
class PointerEntry:
    """Active-plan pointer (plans/active-<author>.md)."""

    author: str
    file: str
    plan_id: str = ""
    status: str = ""

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "PointerEntry":
        return cls(
            author=data["author"],
            file=data["file"],
            plan_id=data.get("plan_id", ""),
            status=data.get("status", ""),
        )
