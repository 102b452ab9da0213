"""
Vector store module for rag-engine.

This module holds the exact cosine-similarity vector stores (single and
multi-embedding), their JSON persistence, and the Ollama embedding
provider that feeds them.
"""

from .embeddings import EmbeddingGenerator
from .exceptions import (
    CorruptIndexError,
    DimensionMismatchError,
    DuplicateIdError,
    IndexNotFoundError,
    InvalidEmbeddingError,
    InvalidMetadataError,
    LengthMismatchError,
    VectorStoreError,
)
from .hype_store import HyPEVectorStore
from .records import HyPERecord, LabeledEmbedding, SearchResult, VectorRecord
from .similarity import cosine_similarity, rank
from .store import VectorStore, VectorStoreStats

__all__ = [
    "CorruptIndexError",
    "DimensionMismatchError",
    "DuplicateIdError",
    "EmbeddingGenerator",
    "HyPERecord",
    "HyPEVectorStore",
    "IndexNotFoundError",
    "InvalidEmbeddingError",
    "InvalidMetadataError",
    "LabeledEmbedding",
    "LengthMismatchError",
    "SearchResult",
    "VectorRecord",
    "VectorStore",
    "VectorStoreError",
    "VectorStoreStats",
    "cosine_similarity",
    "rank",
]
