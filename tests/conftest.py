"""Global test configuration for tokenchunk tests."""

import pytest


class WordTokenizer:
    """Deterministic stand-in for tiktoken: one token per whitespace word."""

    def encode(self, text):
        return text.split()


@pytest.fixture
def word_tokenizer():
    """Provide a tokenizer that needs no downloaded vocabulary."""
    return WordTokenizer()


@pytest.fixture(autouse=True)
def reset_tokenizer_cache(monkeypatch):
    """Give each test a fresh process-wide tokenizer cache."""
    from tokenchunk.chunking import tokens as tokens_module

    monkeypatch.setattr(tokens_module, "_encodings", {})
    yield


@pytest.fixture
def patch_default_tokenizer(monkeypatch, word_tokenizer):
    """Make the shared tiktoken handle resolve to the word tokenizer."""
    from tokenchunk.chunking import tokens as tokens_module

    monkeypatch.setattr(tokens_module.tiktoken, "get_encoding", lambda name: word_tokenizer)
    return word_tokenizer
