"""Tests for full-text search and relevance scoring."""

import pytest

from knowsys.config import AppConfig, SearchConfig
from knowsys.errors import InvalidEnumError, UsageError
from knowsys.storage.index_store import IndexStore
from knowsys.storage.scoring import (
    ALL_WORDS,
    PARTIAL,
    PHRASE,
    SOME_WORDS,
    BucketScorer,
    LineMatch,
    tokenize,
)


class TestBucketScorer:
    """Test the four relevance buckets."""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("we picked a validation strategy today", PHRASE),
            ("Validation   Strategy", PHRASE),
            ("a strategy for validation", ALL_WORDS),
            ("only validation here", SOME_WORDS),
            ("input validations", PARTIAL),
        ],
    )
    def test_buckets(self, text, expected):
        match = BucketScorer("validation strategy").score(text)

        assert match.score == expected

    def test_no_match(self):
        assert BucketScorer("validation").score("nothing relevant") is None

    def test_single_word_is_not_all_words(self):
        assert BucketScorer("retry").score("retry later").score == SOME_WORDS

    def test_best_line_is_reported(self):
        text = "intro\nbeta only\nalpha beta gamma\n"

        match = BucketScorer("beta gamma").score(text)

        assert match.line == 2
        assert match.text == "alpha beta gamma"

    def test_tokenize_dedupes_and_lowercases(self):
        assert tokenize("Auth auth, API!") == ["auth", "api"]


class TestSearch:
    """Test IndexStore.search over real files."""

    def test_phrase_outranks_single_word(self, knowledge_root, write):
        write(
            knowledge_root,
            "sessions/2026-01-03-session.md",
            "---\ndate: 2026-01-03\n---\n# Session\n\nMore validation needed.\n",
        )

        results = IndexStore(knowledge_root).search("validation strategy")

        assert [(r.file, r.score) for r in results] == [
            ("sessions/2026-01-02-session.md", 1.0),
            ("sessions/2026-01-03-session.md", 0.5),
        ]
        assert results[0].kind == "session"
        assert "validation strategy" in results[0].snippet

    def test_line_number_is_one_based_within_file(self, make_file):
        make_file("learned/tip.md", "---\ntitle: Tip\n---\n# Tip\n\nuse the needle\n")

        result = IndexStore(make_file.root).search("needle")[0]

        assert result.line == 6
        assert result.snippet == "use the needle"

    def test_ties_keep_index_order(self, make_file):
        make_file("PLAN_a.md", "# A\nneedle\n")
        make_file("sessions/2026-01-01-session.md", "# S\nneedle\n")
        make_file("learned/l.md", "# L\nneedle\n")

        results = IndexStore(make_file.root).search("needle")

        assert [r.kind for r in results] == ["plan", "session", "learned"]

    def test_scope_restricts_results(self, make_file):
        make_file("PLAN_a.md", "# A\nneedle\n")
        make_file("learned/l.md", "# L\nneedle\n")

        results = IndexStore(make_file.root).search("needle", scope="learned")

        assert [r.file for r in results] == ["learned/l.md"]

    def test_limit(self, make_file):
        for name in ("a", "b", "c"):
            make_file(f"PLAN_{name}.md", "# P\nneedle\n")

        assert len(IndexStore(make_file.root).search("needle", limit=2)) == 2

    def test_long_snippet_is_truncated(self, make_file):
        make_file("PLAN_a.md", "# A\n" + "needle " * 20 + "\n")
        config = AppConfig(search=SearchConfig(snippet_chars=20))

        snippet = IndexStore(make_file.root, config).search("needle")[0].snippet

        assert len(snippet) <= 20
        assert snippet.endswith("...")

    def test_no_matches(self, knowledge_root):
        assert IndexStore(knowledge_root).search("kubernetes") == []

    @pytest.mark.parametrize("query", ["", "   "])
    def test_empty_query(self, knowledge_root, query):
        with pytest.raises(UsageError, match="Search query cannot be empty"):
            IndexStore(knowledge_root).search(query)

    def test_unknown_scope(self, knowledge_root):
        with pytest.raises(InvalidEnumError) as exc_info:
            IndexStore(knowledge_root).search("auth", scope="docs")

        assert exc_info.value.valid == ["all", "plans", "sessions", "learned"]

    def test_custom_scorer(self, knowledge_root):
        class Everything:
            def __init__(self, query):
                self.query = query

            def score(self, text):
                return LineMatch(score=0.1, line=0, text=text.splitlines()[0])

        results = IndexStore(knowledge_root, scorer_factory=Everything).search("anything")

        assert len(results) == 4
        assert {r.score for r in results} == {0.1}
