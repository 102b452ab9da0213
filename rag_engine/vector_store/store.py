"""
In-memory vector storage and exact cosine similarity search.

This module provides the single-embedding-per-chunk VectorStore and the
shared machinery (dimension bookkeeping, id uniqueness, persistence and
statistics) that the HyPE multi-embedding store builds on.
"""

import logging
import time
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import numpy as np

from rag_engine.document_processor.chunker import TextChunk

from . import codec
from .exceptions import (
    CorruptIndexError,
    DimensionMismatchError,
    DuplicateIdError,
    LengthMismatchError,
    VectorStoreError,
)
from .records import (
    Embedding,
    SearchResult,
    VectorRecord,
    normalize_chunk,
    to_embedding,
)
from .similarity import cosine_scores, ranked_indices

# Set up logging
logger = logging.getLogger(__name__)


@dataclass
class VectorStoreStats:
    """Statistics about the vector store."""

    document_count: int
    chunk_count: int
    embedding_count: int
    embedding_dimension: int
    db_size_mb: float
    index_type: str
    last_updated: str


class BaseVectorStore:
    """
    State shared by both store flavours.

    The embedding dimension is fixed by the first embedding ever inserted.
    Inserts validate everything before touching state, so a failed call
    leaves the store exactly as it was.
    """

    index_format: str = ""

    def __init__(self) -> None:
        self.dimension: int | None = None
        self.path: Path | None = None
        self._chunk_ids: set[str] = set()
        self._matrix: np.ndarray | None = None

    @property
    def chunks(self) -> list[TextChunk]:
        """All stored chunks in insertion order."""
        raise NotImplementedError

    @property
    def embedding_count(self) -> int:
        """Total number of stored embeddings."""
        return 0 if self._matrix is None else int(self._matrix.shape[0])

    def __len__(self) -> int:
        return len(self._chunk_ids)

    def get_chunks_by_parent(self, parent_id: str) -> list[TextChunk]:
        """
        Get all chunks derived from a specific document.

        Args:
            parent_id: Identifier of the source document

        Returns:
            List of chunks from that document, in insertion order
        """
        return [chunk for chunk in self.chunks if chunk.parent_id == parent_id]

    def get_all_parent_ids(self) -> list[str]:
        """
        Get the identifiers of all documents in the store.

        Returns:
            Unique parent ids in first-seen order
        """
        return list(dict.fromkeys(chunk.parent_id for chunk in self.chunks))

    def get_statistics(self) -> VectorStoreStats:
        """
        Get statistics about the vector store.

        Returns:
            VectorStoreStats with current store information
        """
        db_size_mb = 0.0
        last_updated = "Never"
        if self.path is not None and self.path.exists():
            stat = self.path.stat()
            db_size_mb = stat.st_size / (1024 * 1024)
            last_updated = time.strftime(
                "%Y-%m-%d %H:%M:%S", time.localtime(stat.st_mtime)
            )

        return VectorStoreStats(
            document_count=len(self.get_all_parent_ids()),
            chunk_count=len(self),
            embedding_count=self.embedding_count,
            embedding_dimension=self.dimension or 0,
            db_size_mb=db_size_mb,
            index_type=self.index_format,
            last_updated=last_updated,
        )

    def persist(self, path: str | Path) -> Path:
        """
        Write the whole store to a JSON index file.

        Overwrites any existing file and creates parent directories.

        Args:
            path: Destination file path

        Returns:
            The resolved path that was written
        """
        resolved = codec.write_document(self._encode(), path)
        self.path = resolved
        logger.info(f"Persisted {self.index_format} ({len(self)} chunks) to {resolved}")
        return resolved

    def _encode(self) -> dict[str, Any]:
        raise NotImplementedError

    def _check_new_id(self, chunk_id: str, pending: set[str]) -> None:
        if chunk_id in self._chunk_ids or chunk_id in pending:
            raise DuplicateIdError(chunk_id)
        pending.add(chunk_id)

    def _check_dimension(self, length: int, dimension: int | None) -> int:
        """Validate an embedding length and return the (possibly new) dimension."""
        if length == 0:
            raise DimensionMismatchError(
                dimension or 0, 0, "Embeddings must have at least one dimension"
            )
        if dimension is None:
            return length
        if length != dimension:
            raise DimensionMismatchError(dimension, length)
        return dimension

    def _prepare_query(self, query_embedding: Sequence[float], top_k: int) -> Embedding:
        if isinstance(top_k, bool) or not isinstance(top_k, int) or top_k <= 0:
            raise ValueError(f"top_k must be a positive integer, got {top_k!r}")

        query = to_embedding(query_embedding)
        if self.dimension is not None and len(query) != self.dimension:
            raise DimensionMismatchError(
                self.dimension,
                len(query),
                f"Query embedding dimension ({len(query)}) doesn't match "
                f"store dimension ({self.dimension})",
            )
        return query

    def _append_rows(self, vectors: list[Embedding]) -> None:
        rows = np.asarray(vectors, dtype=np.float64)
        if self._matrix is None:
            self._matrix = rows
        else:
            self._matrix = np.vstack([self._matrix, rows])


class VectorStore(BaseVectorStore):
    """
    Exact in-memory vector store with one embedding per chunk.

    Search compares the query against every stored embedding with cosine
    similarity; equal scores keep insertion order.
    """

    index_format = codec.VECTOR_STORE_FORMAT

    def __init__(self) -> None:
        """Initialize an empty vector store."""
        super().__init__()
        self._records: list[VectorRecord] = []

    @property
    def records(self) -> list[VectorRecord]:
        """All stored records in insertion order."""
        return list(self._records)

    @property
    def chunks(self) -> list[TextChunk]:
        return [record.chunk for record in self._records]

    def add_many(
        self, chunks: Sequence[TextChunk], embeddings: Sequence[Sequence[float]]
    ) -> None:
        """
        Add text chunks and their embeddings to the vector store.

        The call is atomic: if any chunk or embedding is rejected, nothing
        is inserted.

        Args:
            chunks: List of TextChunk objects
            embeddings: Corresponding embeddings for each chunk

        Raises:
            LengthMismatchError: If the two sequences differ in length
            DimensionMismatchError: If an embedding does not match the store dimension
            DuplicateIdError: If a chunk id is already stored or repeated
            InvalidMetadataError: If chunk metadata cannot be persisted
        """
        if len(chunks) != len(embeddings):
            raise LengthMismatchError(
                f"Chunks ({len(chunks)}) and embeddings ({len(embeddings)}) length mismatch"
            )
        if not chunks:
            logger.warning("No chunks or embeddings provided")
            return

        dimension = self.dimension
        pending_ids: set[str] = set()
        prepared = []
        for chunk, values in zip(chunks, embeddings, strict=True):
            chunk = normalize_chunk(chunk)
            self._check_new_id(chunk.id, pending_ids)
            embedding = to_embedding(values)
            dimension = self._check_dimension(len(embedding), dimension)
            prepared.append(VectorRecord(chunk=chunk, embedding=embedding))

        if self.dimension is None:
            logger.info(f"Vector store dimension fixed at {dimension}")
        self.dimension = dimension
        self._append_rows([record.embedding for record in prepared])
        self._records.extend(prepared)
        self._chunk_ids.update(pending_ids)

        logger.info(f"Added {len(prepared)} chunks. Total chunks: {len(self._records)}")

    def search(
        self, query_embedding: Sequence[float], top_k: int = 5
    ) -> list[SearchResult]:
        """
        Search for similar chunks using cosine similarity.

        Args:
            query_embedding: Query vector
            top_k: Number of results to return

        Returns:
            Up to top_k SearchResult objects, highest score first
        """
        query = self._prepare_query(query_embedding, top_k)
        if not self._records:
            logger.warning("Vector store is empty")
            return []

        scores = cosine_scores(query, self._matrix)
        results = [
            SearchResult(
                chunk=self._records[index].chunk, score=float(scores[index]), rank=rank
            )
            for rank, index in enumerate(ranked_indices(scores, top_k))
        ]

        logger.debug(f"Found {len(results)} similar chunks for query")
        return results

    @classmethod
    def load(cls, path: str | Path) -> "VectorStore":
        """
        Load a vector store previously written with persist().

        Args:
            path: Path to the JSON index file

        Returns:
            A new VectorStore with the same records in the same order

        Raises:
            IndexNotFoundError: If the file does not exist
            CorruptIndexError: If the document does not match the schema
        """
        resolved = Path(path).resolve()
        document = codec.read_document(resolved)
        _, records = codec.decode_vector_store(document, resolved)

        store = cls()
        try:
            store.add_many(
                [record.chunk for record in records],
                [record.embedding for record in records],
            )
        except VectorStoreError as e:
            raise CorruptIndexError(f"Index records are invalid: {e}", resolved) from e

        store.path = resolved
        logger.info(
            f"Loaded vector store: {len(store)} chunks, dimension {store.dimension}"
        )
        return store

    def _encode(self) -> dict[str, Any]:
        return codec.encode_vector_store(self.dimension, self._records)
