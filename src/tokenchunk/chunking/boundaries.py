"""
Boundary detection for code and document chunking.

Both classifiers rank a line by how good a cut point it is. Higher values
are better break points; searches scan backward so later boundaries win ties.
"""

import re
from enum import IntEnum
from typing import List, NamedTuple, Optional, Sequence


class CodeBoundary(IntEnum):
    """Break-point strength for program-like text, weakest first."""

    NONE = 0
    SINGLE_LINE_COMMENT = 1
    SEMICOLON = 2
    CLOSE_BRACE = 3
    BLANK_LINE = 4
    MULTI_LINE_COMMENT_END = 5
    DOUBLE_BLANK_LINE = 6
    FUNCTION_END = 7
    IMPORT_BLOCK_END = 8


class DocBoundary(IntEnum):
    """Break-point strength for prose and markdown, weakest first."""

    NONE = 0
    LIST_ITEM = 1
    PARAGRAPH = 2
    CODE_BLOCK_END = 3
    HORIZONTAL_RULE = 4
    HEADING = 5


class FencedBlock(NamedTuple):
    """Inclusive 0-based line range of a fenced code block."""

    start: int
    end: int


IMPORT_PREFIXES = ("import ", "from ")
DECLARATION_PREFIXES = (
    "function ",
    "class ",
    "export ",
    "const ",
    "async ",
    "def ",
    "public ",
    "private ",
    "@",
)
LINE_COMMENT_PREFIXES = ("//", "#", "*")
FENCE_MARKERS = ("```", "~~~")

_HEADING_RE = re.compile(r"^#{1,6}\s")
_RULE_RE = re.compile(r"^(-{3,}|\*{3,}|_{3,})$")
_LIST_ITEM_RE = re.compile(r"^[-*+]\s|^\d+\.\s")


def _is_import(trimmed: str) -> bool:
    return trimmed.startswith(IMPORT_PREFIXES)


def classify_code_line(
    line: str, prev_line: Optional[str], next_line: Optional[str]
) -> CodeBoundary:
    """Rank a line of code as a potential chunk end."""
    trimmed = line.strip()
    prev_trimmed = (prev_line or "").strip()
    next_trimmed = (next_line or "").strip()

    if not trimmed and not prev_trimmed:
        return CodeBoundary.DOUBLE_BLANK_LINE

    if _is_import(trimmed) and next_trimmed and not _is_import(next_trimmed):
        return CodeBoundary.IMPORT_BLOCK_END

    if trimmed in ("}", "};"):
        if not next_trimmed or next_trimmed.startswith(DECLARATION_PREFIXES):
            return CodeBoundary.FUNCTION_END
        return CodeBoundary.CLOSE_BRACE

    if not trimmed:
        return CodeBoundary.BLANK_LINE

    if trimmed.endswith("*/"):
        return CodeBoundary.MULTI_LINE_COMMENT_END

    if trimmed.startswith(LINE_COMMENT_PREFIXES):
        return CodeBoundary.SINGLE_LINE_COMMENT

    if trimmed.endswith(";"):
        return CodeBoundary.SEMICOLON

    return CodeBoundary.NONE


def find_code_boundary(
    lines: Sequence[str],
    search_start: int,
    search_end: int,
    min_strength: CodeBoundary = CodeBoundary.SEMICOLON,
) -> Optional[int]:
    """
    Find the best code boundary in ``[search_start, search_end)``.

    Scans backward from the end. A boundary at FUNCTION_END or above is
    returned at once; weaker ones only replace the current best when
    strictly stronger.

    Returns:
        0-based line index, or None if nothing reaches ``min_strength``
    """
    best_line: Optional[int] = None
    best_strength = CodeBoundary.NONE

    for i in range(search_end - 1, search_start - 1, -1):
        prev_line = lines[i - 1] if i > 0 else None
        next_line = lines[i + 1] if i < len(lines) - 1 else None
        strength = classify_code_line(lines[i], prev_line, next_line)

        if strength < min_strength:
            continue
        if strength >= CodeBoundary.FUNCTION_END:
            return i
        if strength > best_strength or (strength == best_strength and best_line is None):
            best_strength = strength
            best_line = i

    return best_line


def is_fence(line: str) -> bool:
    """Check whether a line opens or closes a fenced code block."""
    return line.strip().startswith(FENCE_MARKERS)


def classify_doc_line(line: str, prev_line: Optional[str]) -> DocBoundary:
    """Rank a line of prose/markdown as a potential chunk end."""
    trimmed = line.strip()
    prev_trimmed = (prev_line or "").strip()

    if _HEADING_RE.match(trimmed):
        return DocBoundary.HEADING
    if _RULE_RE.match(trimmed):
        return DocBoundary.HORIZONTAL_RULE
    if is_fence(trimmed) and prev_trimmed:
        return DocBoundary.CODE_BLOCK_END
    if not trimmed and prev_trimmed:
        return DocBoundary.PARAGRAPH
    if _LIST_ITEM_RE.match(trimmed):
        return DocBoundary.LIST_ITEM
    return DocBoundary.NONE


def find_fenced_blocks(lines: Sequence[str]) -> List[FencedBlock]:
    """Locate fenced code blocks; an unterminated block ends at the last line."""
    blocks: List[FencedBlock] = []
    block_start: Optional[int] = None

    for i, line in enumerate(lines):
        if not is_fence(line):
            continue
        if block_start is None:
            block_start = i
        else:
            blocks.append(FencedBlock(block_start, i))
            block_start = None

    if block_start is not None:
        blocks.append(FencedBlock(block_start, len(lines) - 1))

    return blocks


def block_containing(
    line_index: int, blocks: Sequence[FencedBlock]
) -> Optional[FencedBlock]:
    """Return the fenced block that contains ``line_index``, if any."""
    for block in blocks:
        if block.start <= line_index <= block.end:
            return block
    return None


def find_doc_boundary(
    lines: Sequence[str],
    search_start: int,
    search_end: int,
    blocks: Sequence[FencedBlock],
) -> Optional[int]:
    """
    Find the best document boundary in ``[search_start, search_end)``.

    Lines inside fenced blocks are never proposed. A heading ends the search
    and yields the line before it, so the heading opens the next chunk.
    """
    best_line: Optional[int] = None
    best_strength = DocBoundary.NONE

    for i in range(search_end - 1, search_start - 1, -1):
        if block_containing(i, blocks):
            continue

        prev_line = lines[i - 1] if i > 0 else None
        strength = classify_doc_line(lines[i], prev_line)

        if strength >= DocBoundary.HEADING:
            return i - 1 if i > 0 else i
        if strength > best_strength:
            best_strength = strength
            best_line = i

    return best_line
