"""Tests for section-aware body edits."""

import pytest

from knowsys.errors import AmbiguousMatchError, NotFoundError
from knowsys.mutation.sections import (
    append_section,
    find_pattern,
    insert_after,
    insert_before,
    prepend_section,
)

BODY = "# Session\n\n## Goal\nship it\n\n## Changes\nnone yet\n"


class TestAppendPrepend:
    def test_append_section(self):
        body = "# Session: Auth rework (Jan 01, 2026)\n\n## Goal\nx\n"

        result = append_section(body, "## Notes", "Fixed bug")

        assert result.endswith("## Notes\nFixed bug\n")
        assert result == "# Session: Auth rework (Jan 01, 2026)\n\n## Goal\nx\n\n## Notes\nFixed bug\n"

    def test_append_to_empty_body(self):
        assert append_section("", "## Notes", "first") == "## Notes\nfirst\n"

    def test_append_heading_only(self):
        assert append_section("text\n", "## Empty") == "text\n\n## Empty\n"

    def test_trailing_blank_lines_collapse(self):
        assert append_section("text\n\n\n", "## A", "b") == "text\n\n## A\nb\n"

    def test_prepend_section(self):
        result = prepend_section("# Title\n", "## Top", "first")

        assert result == "## Top\nfirst\n\n# Title\n"

    def test_prepend_to_empty_body(self):
        assert prepend_section("", "## Top", "first") == "## Top\nfirst\n"


class TestFindPattern:
    def test_single_occurrence(self):
        assert find_pattern(BODY, "## Goal") == BODY.index("## Goal")

    def test_missing_pattern(self):
        with pytest.raises(NotFoundError) as exc_info:
            find_pattern(BODY, "## Nowhere")

        assert exc_info.value.target == "## Nowhere"

    def test_ambiguous_reports_file_lines(self):
        body = "intro\nTODO\nmiddle\nTODO\n"

        with pytest.raises(AmbiguousMatchError) as exc_info:
            find_pattern(body, "TODO", body_line=7)

        assert exc_info.value.line_numbers == [8, 10]
        assert str(exc_info.value) == (
            'Pattern "TODO" found 2 times at lines: 8, 10. Please be more specific.'
        )

    def test_repeats_on_one_line_are_reported_once(self):
        with pytest.raises(AmbiguousMatchError) as exc_info:
            find_pattern("x aaa\n", "aa", body_line=5)

        assert exc_info.value.line_numbers == [5]
        assert "found 2 times at lines: 5." in str(exc_info.value)


class TestInsertAfter:
    """Test insertion at the end of the section holding the pattern."""

    def test_inserts_before_next_heading(self):
        result = insert_after(BODY, "## Goal", "and test it")

        assert result == "# Session\n\n## Goal\nship it\nand test it\n\n## Changes\nnone yet\n"

    def test_inserted_block_with_heading(self):
        result = insert_after(BODY, "## Goal", "details", heading="### Note")

        assert result == (
            "# Session\n\n## Goal\nship it\n\n### Note\ndetails\n\n## Changes\nnone yet\n"
        )

    def test_last_section_appends_at_end(self):
        result = insert_after(BODY, "none yet", "more")

        assert result == "# Session\n\n## Goal\nship it\n\n## Changes\nnone yet\nmore\n"

    def test_deeper_headings_stay_inside_section(self):
        body = "## Goal\n### Detail\nx\n## Next\n"

        result = insert_after(body, "## Goal", "added")

        assert result == "## Goal\n### Detail\nx\nadded\n\n## Next\n"

    def test_pattern_on_last_line_without_newline(self):
        assert insert_after("end line", "end", "added") == "end line\nadded\n"

    def test_ambiguous_pattern_is_not_guessed(self):
        with pytest.raises(AmbiguousMatchError):
            insert_after("a x\nb x\n", "x", "new")


class TestInsertBefore:
    def test_inserts_before_pattern_line(self):
        result = insert_before(BODY, "## Changes", "wedge")

        assert result == "# Session\n\n## Goal\nship it\n\nwedge\n\n## Changes\nnone yet\n"

    def test_mid_line_pattern_uses_line_start(self):
        result = insert_before("first\nsome beta text\n", "beta", "new")

        assert result == "first\nnew\n\nsome beta text\n"

    def test_with_heading(self):
        result = insert_before("## A\n", "## A", "body", heading="## Before")

        assert result == "## Before\nbody\n\n## A\n"
