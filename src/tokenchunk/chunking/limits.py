"""
Chunk size limits and their normalization.
"""

import math
from typing import Any, Mapping, NamedTuple, Optional, Union

from ..core.config import Settings

DEFAULT_MAX_TOKENS = 512
DEFAULT_MAX_LINES = 100
DEFAULT_OVERLAP_TOKENS = 64

MIN_MAX_TOKENS, MAX_MAX_TOKENS = 256, 2048
MIN_MAX_LINES, MAX_MAX_LINES = 10, 200


class ChunkLimits(NamedTuple):
    """Budgets for one chunking pass."""

    max_tokens: int
    max_lines: int
    overlap_tokens: int


class DocumentLimits(NamedTuple):
    """Fixed budgets for prose chunking."""

    max_tokens: int = 256
    max_lines: int = 8
    overlap_tokens: int = 64
    overlap_lines: int = 2
    code_block_max_tokens: int = 512
    code_block_max_lines: int = 30


DOCUMENT_LIMITS = DocumentLimits()

# Accepted spellings for each option
_KEYS = {
    "max_tokens": ("chunk_max_tokens", "chunkMaxTokens"),
    "max_lines": ("chunk_max_line", "chunkMaxLine"),
    "overlap_tokens": ("chunk_overlap_tokens", "chunkOverlapTokens"),
}

ChunkConfig = Union[Mapping[str, Any], Settings]


def _numeric(value: Any) -> Optional[int]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not math.isfinite(value):
        return None
    return int(value)


def _lookup(config: Mapping[str, Any], field: str, default: int) -> int:
    for key in _KEYS[field]:
        if key in config:
            value = _numeric(config[key])
            return default if value is None else value
    return default


def _clamp(value: int, low: int, high: int) -> int:
    return min(max(value, low), high)


def normalize_limits(config: Optional[ChunkConfig] = None) -> ChunkLimits:
    """
    Clamp caller-supplied code chunking options into safe ranges.

    Missing or non-numeric options fall back to defaults. Out-of-range values
    are clamped rather than rejected so a bad config never blocks indexing.

    Args:
        config: Mapping of chunk options, or a Settings instance

    Returns:
        ChunkLimits ready for the code chunker
    """
    if isinstance(config, Settings):
        config = config.chunking_config()
    config = config or {}

    max_tokens = _clamp(
        _lookup(config, "max_tokens", DEFAULT_MAX_TOKENS), MIN_MAX_TOKENS, MAX_MAX_TOKENS
    )
    max_lines = _clamp(
        _lookup(config, "max_lines", DEFAULT_MAX_LINES), MIN_MAX_LINES, MAX_MAX_LINES
    )
    overlap_tokens = _clamp(
        _lookup(config, "overlap_tokens", DEFAULT_OVERLAP_TOKENS), 0, max_tokens - 1
    )

    return ChunkLimits(
        max_tokens=max_tokens, max_lines=max_lines, overlap_tokens=overlap_tokens
    )
