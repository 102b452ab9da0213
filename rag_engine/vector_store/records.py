"""
Record types held by the vector stores, plus insert-time validation.
"""

import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from rag_engine.document_processor.chunker import MetadataValue, TextChunk

from .exceptions import InvalidEmbeddingError, InvalidMetadataError

Embedding = tuple[float, ...]


@dataclass(frozen=True)
class VectorRecord:
    """A chunk paired with exactly one embedding."""

    chunk: TextChunk
    embedding: Embedding


@dataclass(frozen=True)
class LabeledEmbedding:
    """One of several embeddings for a chunk, tagged with how it was derived."""

    vector: Embedding
    label: str


@dataclass(frozen=True)
class HyPERecord:
    """A chunk paired with an ordered list of labeled embeddings."""

    chunk: TextChunk
    embeddings: tuple[LabeledEmbedding, ...]


@dataclass
class SearchResult:
    """Result of a vector similarity search."""

    chunk: TextChunk
    score: float
    rank: int
    matched_label: str | None = None


def to_embedding(values: Sequence[float]) -> Embedding:
    """
    Convert a numeric sequence into a stored embedding.

    Raises:
        InvalidEmbeddingError: If an element is not a finite number
    """
    embedding = []
    for value in values:
        if isinstance(value, bool | str | bytes):
            raise InvalidEmbeddingError(
                f"Embedding values must be numbers, got {type(value).__name__}"
            )
        try:
            value = float(value)
        except (TypeError, ValueError) as e:
            raise InvalidEmbeddingError(
                f"Embedding values must be numbers, got {type(value).__name__}"
            ) from e
        if not math.isfinite(value):
            raise InvalidEmbeddingError(f"Embedding values must be finite, got {value}")
        embedding.append(value)
    return tuple(embedding)


def validate_metadata(metadata: Mapping[str, object]) -> dict[str, MetadataValue]:
    """
    Check that metadata only holds persistable values.

    Allowed values are numbers, strings, booleans and lists of strings.

    Returns:
        A fresh copy of the metadata

    Raises:
        InvalidMetadataError: On any other value shape or a non-string key
    """
    clean: dict[str, MetadataValue] = {}
    for key, value in metadata.items():
        if not isinstance(key, str):
            raise InvalidMetadataError(str(key), value)
        if isinstance(value, bool | int | str):
            clean[key] = value
        elif isinstance(value, float):
            if not math.isfinite(value):
                raise InvalidMetadataError(key, value)
            clean[key] = value
        elif isinstance(value, list | tuple) and all(
            isinstance(item, str) for item in value
        ):
            clean[key] = list(value)
        else:
            raise InvalidMetadataError(key, value)
    return clean


def normalize_chunk(chunk: TextChunk) -> TextChunk:
    """Return the chunk with validated, copied metadata."""
    if not isinstance(chunk.sequence, int) or isinstance(chunk.sequence, bool):
        raise ValueError(f"Chunk sequence must be an integer: {chunk.id!r}")
    if chunk.sequence < 0:
        raise ValueError(f"Chunk sequence must be non-negative: {chunk.id!r}")
    return TextChunk(
        id=chunk.id,
        parent_id=chunk.parent_id,
        content=chunk.content,
        sequence=chunk.sequence,
        metadata=validate_metadata(chunk.metadata),
    )
