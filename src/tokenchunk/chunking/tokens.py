"""
Tokenizer handle and per-line token index.
"""

from __future__ import annotations

import threading
from typing import Any, Dict, List, NamedTuple, Optional, Protocol, Sequence

import tiktoken

from ..core import config as config_module
from ..core.logging import log


class Tokenizer(Protocol):
    """Anything that turns text into a sequence of tokens."""

    def encode(self, text: str) -> Sequence[Any]: ...


class TokenizerUnavailableError(RuntimeError):
    """Raised when the tokenizer cannot be built or fails to encode."""


_encodings: Dict[str, Tokenizer] = {}
_encodings_lock = threading.Lock()


def get_tokenizer(name: Optional[str] = None) -> Tokenizer:
    """Return the shared tiktoken encoding, building it on first use."""
    name = name or config_module.SETTINGS.TOKENIZER_ENCODING
    encoding = _encodings.get(name)
    if encoding is not None:
        return encoding

    with _encodings_lock:
        encoding = _encodings.get(name)
        if encoding is None:
            try:
                encoding = tiktoken.get_encoding(name)
            except Exception as e:
                raise TokenizerUnavailableError(
                    f"Tokenizer '{name}' could not be loaded: {e}"
                ) from e
            log.debug("tokenizer.load", encoding=name)
            _encodings[name] = encoding
    return encoding


def count_tokens(text: Optional[str], tokenizer: Tokenizer) -> int:
    """Count tokens in a single line of text."""
    try:
        return len(tokenizer.encode(text or ""))
    except Exception as e:
        raise TokenizerUnavailableError(f"Tokenizer failed to encode text: {e}") from e


def split_lines(content: str) -> List[str]:
    """Split content on line feeds. Empty content has no lines."""
    if not content:
        return []
    return content.split("\n")


class TokenIndex(NamedTuple):
    """Cumulative token offsets for each line.

    ``starts[i]`` is the number of tokens in lines ``0..i-1`` and
    ``ends[i]`` adds the tokens of line ``i`` itself.
    """

    starts: List[int]
    ends: List[int]

    @property
    def total(self) -> int:
        return self.ends[-1] if self.ends else 0

    def span(self, first: int, last: int) -> int:
        """Tokens covered by lines ``first..last`` inclusive."""
        return self.ends[last] - self.starts[first]


def build_token_index(
    lines: Sequence[Optional[str]], tokenizer: Optional[Tokenizer] = None
) -> TokenIndex:
    """
    Count tokens line by line and accumulate prefix sums.

    Each line is encoded on its own, so a chunk's token span is the sum of
    its lines' counts rather than the count of the joined text.

    Args:
        lines: Lines of the input text
        tokenizer: Encoder to use; defaults to the shared tiktoken handle

    Returns:
        TokenIndex with one start/end entry per line
    """
    if tokenizer is None:
        tokenizer = get_tokenizer()

    starts: List[int] = []
    ends: List[int] = []
    total = 0
    for line in lines:
        starts.append(total)
        total += count_tokens(line, tokenizer)
        ends.append(total)

    return TokenIndex(starts=starts, ends=ends)
