"""Tests for code/document boundary classification and fenced blocks."""

import pytest

from tokenchunk.chunking.boundaries import (
    CodeBoundary,
    DocBoundary,
    FencedBlock,
    block_containing,
    classify_code_line,
    classify_doc_line,
    find_code_boundary,
    find_doc_boundary,
    find_fenced_blocks,
)

pytestmark = pytest.mark.unit


class TestCodeClassifier:
    """Rules are applied in priority order against trimmed lines."""

    def test_strength_order(self):
        assert (
            CodeBoundary.NONE
            < CodeBoundary.SINGLE_LINE_COMMENT
            < CodeBoundary.SEMICOLON
            < CodeBoundary.CLOSE_BRACE
            < CodeBoundary.BLANK_LINE
            < CodeBoundary.MULTI_LINE_COMMENT_END
            < CodeBoundary.DOUBLE_BLANK_LINE
            < CodeBoundary.FUNCTION_END
            < CodeBoundary.IMPORT_BLOCK_END
        )

    def test_double_blank_line(self):
        assert classify_code_line("  ", "", "x") == CodeBoundary.DOUBLE_BLANK_LINE
        assert classify_code_line("", None, "x") == CodeBoundary.DOUBLE_BLANK_LINE

    def test_import_block_end(self):
        assert classify_code_line("import os", None, "x = 1") == CodeBoundary.IMPORT_BLOCK_END
        assert classify_code_line("from a import b", None, "def f():") == CodeBoundary.IMPORT_BLOCK_END

    def test_import_followed_by_import_or_blank_is_not_block_end(self):
        assert classify_code_line("import os", None, "import sys") == CodeBoundary.NONE
        assert classify_code_line("import a;", None, "") == CodeBoundary.SEMICOLON

    @pytest.mark.parametrize(
        "next_line",
        [
            "",
            None,
            "function g() {",
            "class B {",
            "export default x;",
            "const y = 2;",
            "async function h() {",
            "def f():",
            "public void run() {",
            "private int n;",
            "@Override",
        ],
    )
    def test_function_end(self, next_line):
        assert classify_code_line("}", "  return x;", next_line) == CodeBoundary.FUNCTION_END
        assert classify_code_line("  };", "  a: 1", next_line) == CodeBoundary.FUNCTION_END

    def test_close_brace(self):
        assert classify_code_line("}", "x;", "else {") == CodeBoundary.CLOSE_BRACE

    def test_blank_line(self):
        assert classify_code_line("", "x;", "y") == CodeBoundary.BLANK_LINE

    def test_multi_line_comment_end(self):
        assert classify_code_line(" * done */", "/**", "x") == CodeBoundary.MULTI_LINE_COMMENT_END

    @pytest.mark.parametrize("line", ["// note", "# note", " * continued"])
    def test_single_line_comment(self, line):
        assert classify_code_line(line, "x", "y") == CodeBoundary.SINGLE_LINE_COMMENT

    def test_semicolon_and_none(self):
        assert classify_code_line("x = 1;", "a", "b") == CodeBoundary.SEMICOLON
        assert classify_code_line("x = 1", "a", "b") == CodeBoundary.NONE


class TestFindCodeBoundary:
    def test_later_boundary_wins_tie(self):
        lines = ["a;", "b;", "c"]
        assert find_code_boundary(lines, 0, 3) == 1

    def test_stronger_earlier_boundary_replaces_best(self):
        lines = ["x = {", "}", "y;"]
        assert find_code_boundary(lines, 0, 3) == 1

    def test_function_end_returns_immediately(self):
        lines = ["}", "", "function g() {", "  a;"]
        assert find_code_boundary(lines, 0, 4) == 0

    def test_below_minimum_is_ignored(self):
        lines = ["// c", "x"]
        assert find_code_boundary(lines, 0, 2) is None
        assert find_code_boundary(lines, 0, 2, CodeBoundary.SINGLE_LINE_COMMENT) == 0

    def test_minimum_blank_line(self):
        lines = ["a;", "b;", "", "c;"]
        assert find_code_boundary(lines, 0, 4, CodeBoundary.BLANK_LINE) == 2

    def test_empty_range(self):
        assert find_code_boundary(["a;"], 1, 1) is None


class TestDocClassifier:
    def test_strength_order(self):
        assert (
            DocBoundary.NONE
            < DocBoundary.LIST_ITEM
            < DocBoundary.PARAGRAPH
            < DocBoundary.CODE_BLOCK_END
            < DocBoundary.HORIZONTAL_RULE
            < DocBoundary.HEADING
        )

    @pytest.mark.parametrize("line", ["# Title", "## Sub", "###### Deep"])
    def test_heading(self, line):
        assert classify_doc_line(line, None) == DocBoundary.HEADING

    def test_heading_needs_whitespace_and_at_most_six_marks(self):
        assert classify_doc_line("#hashtag", None) == DocBoundary.NONE
        assert classify_doc_line("####### seven", None) == DocBoundary.NONE

    @pytest.mark.parametrize("line", ["---", "*****", "___"])
    def test_horizontal_rule(self, line):
        assert classify_doc_line(line, "text") == DocBoundary.HORIZONTAL_RULE

    def test_code_block_end_requires_non_blank_previous(self):
        assert classify_doc_line("```", "print(1)") == DocBoundary.CODE_BLOCK_END
        assert classify_doc_line("~~~", "x") == DocBoundary.CODE_BLOCK_END
        assert classify_doc_line("```python", "") == DocBoundary.NONE

    def test_paragraph(self):
        assert classify_doc_line("", "text") == DocBoundary.PARAGRAPH
        assert classify_doc_line("", "") == DocBoundary.NONE

    @pytest.mark.parametrize("line", ["- item", "* item", "+ item", "12. item"])
    def test_list_item(self, line):
        assert classify_doc_line(line, "") == DocBoundary.LIST_ITEM


class TestFencedBlocks:
    def test_find_blocks(self):
        lines = ["a", "```", "b", "```", "c", "~~~", "d"]
        assert find_fenced_blocks(lines) == [FencedBlock(1, 3), FencedBlock(5, 6)]

    def test_unterminated_block_closes_at_last_line(self):
        lines = ["intro", "```js", "let x = 1;", "more"]
        assert find_fenced_blocks(lines) == [FencedBlock(1, 3)]

    def test_no_blocks(self):
        assert find_fenced_blocks([]) == []
        assert find_fenced_blocks(["plain", "text"]) == []

    def test_block_containing(self):
        blocks = [FencedBlock(1, 3), FencedBlock(5, 6)]
        assert block_containing(1, blocks) == FencedBlock(1, 3)
        assert block_containing(3, blocks) == FencedBlock(1, 3)
        assert block_containing(4, blocks) is None
        assert block_containing(6, blocks) == FencedBlock(5, 6)


class TestFindDocBoundary:
    def test_lines_inside_blocks_are_skipped(self):
        lines = ["text", "", "```", "x", "", "```", "tail"]
        blocks = find_fenced_blocks(lines)
        assert find_doc_boundary(lines, 0, 7, blocks) == 1

    def test_heading_returns_line_before(self):
        lines = ["a", "b", "# H", "c"]
        assert find_doc_boundary(lines, 0, 4, []) == 1

    def test_heading_on_first_line_returns_itself(self):
        lines = ["# H", "a"]
        assert find_doc_boundary(lines, 0, 2, []) == 0

    def test_strongest_wins(self):
        lines = ["- one", "", "---", "- two"]
        assert find_doc_boundary(lines, 0, 4, []) == 2

    def test_nothing_found(self):
        assert find_doc_boundary(["a", "b"], 0, 2, []) is None
