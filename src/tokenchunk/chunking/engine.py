"""
Sliding-window chunking engine for code and documents.

Each pass grows a window up to the token/line budget, backs off to the best
boundary near its end, emits the chunk, then restarts with a bounded overlap.
"""

from __future__ import annotations

import math
from typing import Any, Dict, List, NamedTuple, Optional, Sequence

from ..core.logging import log
from .boundaries import (
    CodeBoundary,
    FencedBlock,
    block_containing,
    find_code_boundary,
    find_doc_boundary,
    find_fenced_blocks,
)
from .limits import DOCUMENT_LIMITS, ChunkConfig, ChunkLimits, normalize_limits
from .tokens import TokenIndex, Tokenizer, build_token_index, split_lines

CODE_SEARCH_FRACTION = 0.3
DOC_SEARCH_FRACTION = 0.4
CODE_OVERLAP_LINE_FRACTION = 0.25
OVERLAP_BOUNDARY_RADIUS = 3

DOCUMENT_EXTENSIONS = frozenset(
    ["md", "markdown", "mdx", "txt", "rst", "adoc", "asciidoc"]
)


class Chunk(NamedTuple):
    """A contiguous run of lines with its token span."""

    content: str
    line_start: int  # 1-based, inclusive
    line_end: int  # 1-based, inclusive
    token_start: int
    token_end: int

    @property
    def token_count(self) -> int:
        return self.token_end - self.token_start

    @property
    def line_count(self) -> int:
        return self.line_end - self.line_start + 1

    def to_dict(self) -> Dict[str, Any]:
        return self._asdict()


def _make_chunk(lines: Sequence[str], index: TokenIndex, first: int, last: int) -> Chunk:
    return Chunk(
        content="\n".join(lines[first : last + 1]),
        line_start=first + 1,
        line_end=last + 1,
        token_start=index.starts[first],
        token_end=index.ends[last],
    )


def _search_start(start_line: int, window_end: int, fraction: float) -> int:
    return max(start_line, math.floor(window_end - (window_end - start_line) * fraction))


def _overlap_line(index: TokenIndex, start_line: int, end_line: int, overlap_tokens: int) -> int:
    """First line after ``start_line`` that begins inside the overlap budget."""
    desired = max(index.starts[start_line], index.ends[end_line] - overlap_tokens)
    for i in range(start_line + 1, end_line + 1):
        if index.starts[i] >= desired:
            return i
    return end_line


def _extend_code_window(index: TokenIndex, start_line: int, limits: ChunkLimits) -> int:
    """Return the exclusive end of the largest window that fits the budget."""
    line_total = len(index.starts)
    chunk_token_start = index.starts[start_line]
    window_end = start_line + 1
    while window_end < line_total:
        token_count = index.ends[window_end] - chunk_token_start
        line_count = window_end - start_line + 1
        if token_count > limits.max_tokens or line_count > limits.max_lines:
            break
        window_end += 1
    return window_end


def _next_code_start(
    lines: Sequence[str],
    index: TokenIndex,
    start_line: int,
    end_line: int,
    limits: ChunkLimits,
) -> int:
    if limits.overlap_tokens <= 0:
        return end_line + 1

    overlap_start = _overlap_line(index, start_line, end_line, limits.overlap_tokens)

    max_overlap_lines = max(1, math.floor(limits.max_lines * CODE_OVERLAP_LINE_FRACTION))
    overlap_start = max(overlap_start, end_line + 1 - max_overlap_lines)

    # Prefer restarting just after a blank line or stronger boundary nearby
    boundary = find_code_boundary(
        lines,
        max(start_line + 1, overlap_start - OVERLAP_BOUNDARY_RADIUS),
        min(end_line + 1, overlap_start + OVERLAP_BOUNDARY_RADIUS),
        CodeBoundary.BLANK_LINE,
    )
    if boundary is not None and boundary > start_line:
        return boundary + 1
    return overlap_start


def chunk_code(
    content: str,
    config: Optional[ChunkConfig] = None,
    tokenizer: Optional[Tokenizer] = None,
) -> List[Chunk]:
    """
    Split program-like text into overlapping token-bounded chunks.

    Args:
        content: Full file content
        config: Chunk options (chunk_max_tokens, chunk_max_line,
            chunk_overlap_tokens); clamped before use
        tokenizer: Encoder for token counting; defaults to tiktoken

    Returns:
        Chunks in increasing line_start order covering every line
    """
    limits = normalize_limits(config)
    lines = split_lines(content)
    if not lines:
        return []

    index = build_token_index(lines, tokenizer)
    line_total = len(lines)

    if index.total <= limits.max_tokens and line_total <= limits.max_lines:
        return [_make_chunk(lines, index, 0, line_total - 1)]

    chunks: List[Chunk] = []
    start_line = 0

    while start_line < line_total:
        window_end = _extend_code_window(index, start_line, limits)

        search_start = _search_start(start_line, window_end, CODE_SEARCH_FRACTION)
        end_line = find_code_boundary(lines, search_start, window_end)
        if end_line is None:
            end_line = window_end - 1
        end_line = max(start_line, end_line)

        chunks.append(_make_chunk(lines, index, start_line, end_line))

        if end_line + 1 >= line_total:
            break

        next_start = _next_code_start(lines, index, start_line, end_line, limits)
        if next_start <= start_line:
            next_start = start_line + 1
        start_line = next_start

    log.debug(
        "chunk.code.done",
        lines=line_total,
        tokens=index.total,
        chunks=len(chunks),
        max_tokens=limits.max_tokens,
        max_lines=limits.max_lines,
    )
    return chunks


def _block_fits(
    block: FencedBlock,
    index: TokenIndex,
    start_line: int,
    window_end: int,
    max_tokens: int,
    max_lines: int,
) -> bool:
    """Check whether a block starting at ``window_end`` fits what is left."""
    block_tokens = index.span(block.start, block.end)
    used_tokens = index.ends[window_end - 1] - index.starts[start_line]
    used_lines = window_end - start_line
    block_lines = block.end - block.start + 1
    return (
        block_tokens <= max_tokens - used_tokens
        and block_lines <= max_lines - used_lines
    )


def _extend_doc_window(
    index: TokenIndex,
    start_line: int,
    blocks: Sequence[FencedBlock],
    max_tokens: int,
    max_lines: int,
) -> int:
    line_total = len(index.starts)
    chunk_token_start = index.starts[start_line]
    window_end = start_line + 1
    while window_end < line_total:
        token_count = index.ends[window_end] - chunk_token_start
        line_count = window_end - start_line + 1
        if token_count > max_tokens or line_count > max_lines:
            break

        # Stop before a fenced block that would not fit whole
        block = block_containing(window_end, blocks)
        if block and block.start == window_end:
            if not _block_fits(block, index, start_line, window_end, max_tokens, max_lines):
                break

        window_end += 1
    return window_end


def _next_doc_start(
    lines: Sequence[str],
    index: TokenIndex,
    blocks: Sequence[FencedBlock],
    start_line: int,
    end_line: int,
) -> int:
    if block_containing(end_line, blocks):
        # No overlap back into code
        next_start = end_line + 1
    else:
        overlap_start = _overlap_line(
            index, start_line, end_line, DOCUMENT_LIMITS.overlap_tokens
        )
        overlap_start = max(overlap_start, end_line + 1 - DOCUMENT_LIMITS.overlap_lines)

        block = block_containing(overlap_start, blocks)
        next_start = block.end + 1 if block else overlap_start

    # Skip one leading blank line, only if the emitted chunk already holds it
    if next_start <= end_line and not lines[next_start].strip():
        next_start += 1

    return next_start


def chunk_document(
    content: str,
    config: Optional[ChunkConfig] = None,
    tokenizer: Optional[Tokenizer] = None,
) -> List[Chunk]:
    """
    Split prose/markdown into small chunks that keep fenced blocks whole.

    Prose uses fixed 256-token / 8-line windows. A chunk that starts inside a
    fenced block gets the 512-token / 30-line block budget and, when the rest
    of the block fits, ends exactly at the closing fence.

    Args:
        content: Full document content
        config: Accepted for signature parity; document budgets are fixed
        tokenizer: Encoder for token counting; defaults to tiktoken

    Returns:
        Chunks in increasing line_start order covering every line
    """
    lines = split_lines(content)
    if not lines:
        return []

    index = build_token_index(lines, tokenizer)
    blocks = find_fenced_blocks(lines)
    line_total = len(lines)

    if index.total <= DOCUMENT_LIMITS.max_tokens and line_total <= DOCUMENT_LIMITS.max_lines:
        return [_make_chunk(lines, index, 0, line_total - 1)]

    chunks: List[Chunk] = []
    start_line = 0

    while start_line < line_total:
        force_end: Optional[int] = None
        block = block_containing(start_line, blocks)

        if block:
            max_tokens = DOCUMENT_LIMITS.code_block_max_tokens
            max_lines = DOCUMENT_LIMITS.code_block_max_lines
            if (
                index.span(start_line, block.end) <= max_tokens
                and block.end - start_line + 1 <= max_lines
            ):
                force_end = block.end
        else:
            max_tokens = DOCUMENT_LIMITS.max_tokens
            max_lines = DOCUMENT_LIMITS.max_lines

        if force_end is not None:
            end_line = force_end
        else:
            window_end = _extend_doc_window(index, start_line, blocks, max_tokens, max_lines)
            search_start = _search_start(start_line, window_end, DOC_SEARCH_FRACTION)
            end_line = find_doc_boundary(lines, search_start, window_end, blocks)
            if end_line is None:
                end_line = window_end - 1
        end_line = max(start_line, end_line)

        chunks.append(_make_chunk(lines, index, start_line, end_line))

        if end_line + 1 >= line_total:
            break

        next_start = _next_doc_start(lines, index, blocks, start_line, end_line)
        if next_start <= start_line:
            next_start = start_line + 1
        start_line = next_start

    log.debug(
        "chunk.document.done",
        lines=line_total,
        tokens=index.total,
        fenced_blocks=len(blocks),
        chunks=len(chunks),
    )
    return chunks


def is_document_file(file_path: str) -> bool:
    """Check if a file should be chunked as prose based on its extension."""
    extension = file_path.lower().rsplit(".", 1)[-1]
    return extension in DOCUMENT_EXTENSIONS


def chunk_auto(
    content: str,
    file_path: str,
    config: Optional[ChunkConfig] = None,
    tokenizer: Optional[Tokenizer] = None,
) -> List[Chunk]:
    """Chunk content with the document or code strategy picked by extension."""
    if is_document_file(file_path):
        return chunk_document(content, config, tokenizer)
    return chunk_code(content, config, tokenizer)
