"""
Token-aware chunking of code and documents.

Sliding windows bounded by token and line budgets, cut at the strongest
nearby semantic boundary, with bounded overlap between chunks.
"""

from .boundaries import (
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
from .engine import Chunk, chunk_auto, chunk_code, chunk_document, is_document_file
from .limits import DOCUMENT_LIMITS, ChunkLimits, normalize_limits
from .tokens import (
    TokenIndex,
    TokenizerUnavailableError,
    build_token_index,
    get_tokenizer,
    split_lines,
)
from .verify import ChunkVerification, verify_chunks

__all__ = [
    "Chunk",
    "ChunkLimits",
    "ChunkVerification",
    "CodeBoundary",
    "DOCUMENT_LIMITS",
    "DocBoundary",
    "FencedBlock",
    "TokenIndex",
    "TokenizerUnavailableError",
    "block_containing",
    "build_token_index",
    "chunk_auto",
    "chunk_code",
    "chunk_document",
    "classify_code_line",
    "classify_doc_line",
    "find_code_boundary",
    "find_doc_boundary",
    "find_fenced_blocks",
    "get_tokenizer",
    "is_document_file",
    "normalize_limits",
    "split_lines",
    "verify_chunks",
]
