"""
Verification of a chunk sequence against its source text.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from .engine import Chunk
from .tokens import Tokenizer, build_token_index, split_lines


@dataclass
class ChunkVerification:
    """Outcome of checking one chunk sequence."""

    total_lines: int
    chunk_count: int
    coverage_pct: float
    gaps: List[Tuple[int, int]] = field(default_factory=list)
    progress_violations: List[int] = field(default_factory=list)
    token_mismatches: List[int] = field(default_factory=list)
    content_mismatches: List[int] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not (
            self.gaps
            or self.progress_violations
            or self.token_mismatches
            or self.content_mismatches
        )

    def to_dict(self) -> Dict:
        return {
            "ok": self.ok,
            "total_lines": self.total_lines,
            "chunk_count": self.chunk_count,
            "coverage_pct": self.coverage_pct,
            "gaps": [list(gap) for gap in self.gaps],
            "progress_violations": self.progress_violations,
            "token_mismatches": self.token_mismatches,
            "content_mismatches": self.content_mismatches,
        }


def calculate_line_coverage(
    chunks: Sequence[Chunk], total_lines: int
) -> Tuple[float, List[Tuple[int, int]]]:
    """
    Calculate line coverage from chunks and identify gaps.

    Args:
        chunks: Chunks with 1-based inclusive line ranges
        total_lines: Number of lines in the source text

    Returns:
        Tuple of (coverage_percentage, list_of_gaps) where gaps are
        1-based inclusive (first, last) line ranges nobody covers
    """
    if total_lines == 0:
        return 100.0, []
    if not chunks:
        return 0.0, [(1, total_lines)]

    ranges = sorted((c.line_start, c.line_end) for c in chunks if c.line_start <= c.line_end)

    # Merge overlapping or adjacent ranges
    merged: List[Tuple[int, int]] = []
    for start, end in ranges:
        if merged and start <= merged[-1][1] + 1:
            merged[-1] = (merged[-1][0], max(merged[-1][1], end))
        else:
            merged.append((start, end))

    gaps: List[Tuple[int, int]] = []
    cursor = 1
    for start, end in merged:
        if start > cursor:
            gaps.append((cursor, min(start - 1, total_lines)))
        cursor = max(cursor, end + 1)
    if cursor <= total_lines:
        gaps.append((cursor, total_lines))

    uncovered = sum(last - first + 1 for first, last in gaps)
    coverage = (total_lines - uncovered) / total_lines * 100
    return coverage, gaps


def verify_chunks(
    content: str,
    chunks: Sequence[Chunk],
    tokenizer: Optional[Tokenizer] = None,
) -> ChunkVerification:
    """
    Check a chunk sequence for coverage, forward progress, token accounting
    and content fidelity.

    Args:
        content: The text that was chunked
        chunks: Chunks produced for ``content``
        tokenizer: The encoder used when chunking

    Returns:
        ChunkVerification describing every violation found
    """
    lines = split_lines(content)
    index = build_token_index(lines, tokenizer)
    coverage, gaps = calculate_line_coverage(chunks, len(lines))

    progress_violations = [
        ord_
        for ord_ in range(1, len(chunks))
        if chunks[ord_].line_start <= chunks[ord_ - 1].line_start
    ]

    token_mismatches: List[int] = []
    content_mismatches: List[int] = []
    for ord_, chunk in enumerate(chunks):
        first, last = chunk.line_start - 1, chunk.line_end - 1
        if first < 0 or last >= len(lines) or first > last:
            token_mismatches.append(ord_)
            content_mismatches.append(ord_)
            continue
        if (chunk.token_start, chunk.token_end) != (index.starts[first], index.ends[last]):
            token_mismatches.append(ord_)
        if chunk.content != "\n".join(lines[first : last + 1]):
            content_mismatches.append(ord_)

    return ChunkVerification(
        total_lines=len(lines),
        chunk_count=len(chunks),
        coverage_pct=coverage,
        gaps=gaps,
        progress_violations=progress_violations,
        token_mismatches=token_mismatches,
        content_mismatches=content_mismatches,
    )
