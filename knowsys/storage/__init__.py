"""Index storage and relevance scoring."""

from knowsys.storage.index_store import (
    IndexSnapshot,
    IndexStore,
    PlanFilter,
    SessionFilter,
)
from knowsys.storage.scoring import BucketScorer, RelevanceScorer

__all__ = [
    "IndexSnapshot",
    "IndexStore",
    "PlanFilter",
    "SessionFilter",
    "BucketScorer",
    "RelevanceScorer",
]
