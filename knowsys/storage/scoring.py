"""Relevance scoring for full-text search.

Scoring is a strategy: the index store only relies on the ranking contract
that a whole-phrase match beats an all-words match, which beats a
some-words match, which beats a substring-only match.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Protocol

_word_re = re.compile(r"\w+", re.UNICODE)

PHRASE = 1.0
ALL_WORDS = 0.8
SOME_WORDS = 0.5
PARTIAL = 0.3


def tokenize(text: str) -> list[str]:
    """Lowercased word tokens, duplicates removed, order kept."""
    seen: dict[str, None] = {}
    for word in _word_re.findall(text.lower()):
        seen.setdefault(word, None)
    return list(seen)


@dataclass(frozen=True)
class LineMatch:
    """Best match of a query in a text.

    Attributes:
        score: Relevance in [0.0, 1.0]
        line: 0-based index of the best line in the text
        text: Content of that line
    """

    score: float
    line: int
    text: str


class RelevanceScorer(Protocol):
    query: str

    def score(self, text: str) -> LineMatch | None:
        """Score a whole document; None when it does not match at all."""
        ...


class BucketScorer:
    """Coarse four-bucket scorer (phrase / all words / some words / partial)."""

    def __init__(self, query: str):
        self.query = query.strip()
        self.words = tokenize(self.query)
        if len(self.words) > 1:
            phrase = r"\s+".join(re.escape(word) for word in self.words)
            self._phrase = re.compile(rf"\b{phrase}\b", re.IGNORECASE)
        else:
            self._phrase = None
        self._word_patterns = [
            re.compile(rf"\b{re.escape(word)}\b", re.IGNORECASE) for word in self.words
        ]
        self._needle = self.query.lower()

    def _bucket(self, text: str) -> float:
        if self._phrase is not None and self._phrase.search(text):
            return PHRASE
        present = sum(1 for pattern in self._word_patterns if pattern.search(text))
        if present and present == len(self._word_patterns) and len(self._word_patterns) > 1:
            return ALL_WORDS
        if present:
            return SOME_WORDS
        lowered = text.lower()
        if self._needle and self._needle in lowered:
            return PARTIAL
        if any(word in lowered for word in self.words):
            return PARTIAL
        return 0.0

    def score(self, text: str) -> LineMatch | None:
        document_score = self._bucket(text)
        if document_score == 0.0:
            return None

        best = LineMatch(score=0.0, line=0, text="")
        for index, line in enumerate(text.splitlines()):
            line_score = self._bucket(line)
            if line_score > best.score:
                best = LineMatch(score=line_score, line=index, text=line)
                if line_score == PHRASE:
                    break

        return LineMatch(score=max(document_score, best.score), line=best.line, text=best.text)


def default_scorer(query: str) -> RelevanceScorer:
    return BucketScorer(query)
