"""tokenchunk: boundary-aware token chunking for code and documents."""

__version__ = "0.1.0"
