"""
Errors raised by the vector store engine.

All of them derive from VectorStoreError. Input validation errors also
derive from ValueError and a missing index file from FileNotFoundError,
so callers can catch them with the builtin types as well.
"""

from pathlib import Path


class VectorStoreError(Exception):
    """Base exception for all vector store errors."""

    pass


class DimensionMismatchError(VectorStoreError, ValueError):
    """
    An embedding length disagrees with the store's fixed dimension.

    Fatal to the call that triggered it, never to the store.
    """

    def __init__(self, expected: int, actual: int, message: str | None = None):
        super().__init__(
            message
            or f"Embedding dimension mismatch: expected {expected}, got {actual}"
        )
        self.expected = expected
        self.actual = actual


class LengthMismatchError(VectorStoreError, ValueError):
    """Parallel input sequences have different lengths."""

    pass


class DuplicateIdError(VectorStoreError, ValueError):
    """A chunk id is already present in the store."""

    def __init__(self, chunk_id: str):
        super().__init__(f"Duplicate chunk id: {chunk_id!r}")
        self.chunk_id = chunk_id


class InvalidMetadataError(VectorStoreError, ValueError):
    """A metadata value has a shape the store cannot persist."""

    def __init__(self, key: str, value: object):
        super().__init__(
            f"Unsupported metadata value for key {key!r}: "
            f"{type(value).__name__} (expected number, string, bool or list of strings)"
        )
        self.key = key


class InvalidEmbeddingError(VectorStoreError, ValueError):
    """An embedding contains non-numeric or non-finite values."""

    pass


class IndexNotFoundError(VectorStoreError, FileNotFoundError):
    """No persisted index exists at the given path."""

    def __init__(self, path: Path):
        super().__init__(f"Vector index file not found at {path}")
        self.path = path


class CorruptIndexError(VectorStoreError):
    """A persisted index document does not conform to the expected schema."""

    def __init__(self, message: str, path: Path | None = None):
        super().__init__(f"{message} ({path})" if path else message)
        self.path = path
