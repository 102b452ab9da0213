"""
HyPE (Hypothetical Prompt Embedding) vector store.

Each chunk is indexed under several embeddings, typically one per
hypothetical question the chunk answers. Search scores the query
against every stored embedding, ranks at embedding granularity, keeps
only the best-scoring embedding per chunk, and only then truncates to
top_k. Truncating before deduplication would let several embeddings of
one chunk crowd other chunks out of the result slots.
"""

import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from rag_engine.document_processor.chunker import TextChunk

from . import codec
from .exceptions import CorruptIndexError, LengthMismatchError, VectorStoreError
from .records import (
    HyPERecord,
    LabeledEmbedding,
    SearchResult,
    normalize_chunk,
    to_embedding,
)
from .similarity import cosine_scores, ranked_indices
from .store import BaseVectorStore

# Set up logging
logger = logging.getLogger(__name__)


class HyPEVectorStore(BaseVectorStore):
    """
    Vector store holding multiple labeled embeddings per chunk.

    All embeddings across all chunks share one dimension, fixed by the
    first embedding inserted.
    """

    index_format = codec.HYPE_STORE_FORMAT

    def __init__(self) -> None:
        """Initialize an empty HyPE store."""
        super().__init__()
        self._records: list[HyPERecord] = []
        # Flat per-embedding lookups, aligned with the rows of self._matrix
        self._owners: list[int] = []
        self._labels: list[str] = []

    @property
    def records(self) -> list[HyPERecord]:
        """All stored records in insertion order."""
        return list(self._records)

    @property
    def chunks(self) -> list[TextChunk]:
        return [record.chunk for record in self._records]

    @property
    def chunk_count(self) -> int:
        """Number of chunks stored."""
        return len(self._records)

    def add_chunk_with_embeddings(
        self,
        chunk: TextChunk,
        embeddings: Sequence[Sequence[float]],
        labels: Sequence[str],
    ) -> None:
        """
        Add a chunk indexed under several labeled embeddings.

        Args:
            chunk: The text chunk to store
            embeddings: One embedding per label
            labels: Free text describing each embedding (e.g. the question
                that was embedded)

        Raises:
            LengthMismatchError: If embeddings and labels differ in length
            ValueError: If no embeddings are given or a label is not a string
            DimensionMismatchError: If an embedding does not match the store dimension
            DuplicateIdError: If the chunk id is already stored
        """
        if len(embeddings) != len(labels):
            raise LengthMismatchError(
                f"Embeddings ({len(embeddings)}) and labels ({len(labels)}) length mismatch"
            )
        if not embeddings:
            raise ValueError("At least one embedding is required")

        chunk = normalize_chunk(chunk)
        self._check_new_id(chunk.id, set())

        dimension = self.dimension
        items = []
        for values, label in zip(embeddings, labels, strict=True):
            if not isinstance(label, str):
                raise ValueError(f"Embedding labels must be strings: {label!r}")
            vector = to_embedding(values)
            dimension = self._check_dimension(len(vector), dimension)
            items.append(LabeledEmbedding(vector=vector, label=label))

        if self.dimension is None:
            logger.info(f"HyPE store dimension fixed at {dimension}")
        self.dimension = dimension
        owner = len(self._records)
        self._append_rows([item.vector for item in items])
        self._owners.extend([owner] * len(items))
        self._labels.extend(item.label for item in items)
        self._records.append(HyPERecord(chunk=chunk, embeddings=tuple(items)))
        self._chunk_ids.add(chunk.id)

        logger.debug(f"Added chunk {chunk.id} with {len(items)} embeddings")

    def search(
        self, query_embedding: Sequence[float], top_k: int = 5
    ) -> list[SearchResult]:
        """
        Search chunks by matching the query against all stored embeddings.

        Args:
            query_embedding: Query vector
            top_k: Maximum number of chunks to return

        Returns:
            At most one SearchResult per chunk, highest score first, each
            carrying the label of its best-matching embedding
        """
        query = self._prepare_query(query_embedding, top_k)
        if not self._records:
            logger.warning("HyPE store is empty")
            return []

        scores = cosine_scores(query, self._matrix)

        seen: set[int] = set()
        best: list[tuple[int, float, str]] = []
        for index in ranked_indices(scores):
            owner = self._owners[index]
            if owner in seen:
                continue
            seen.add(owner)
            best.append((owner, float(scores[index]), self._labels[index]))

        best.sort(key=lambda item: item[1], reverse=True)

        results = [
            SearchResult(
                chunk=self._records[owner].chunk,
                score=score,
                rank=rank,
                matched_label=label,
            )
            for rank, (owner, score, label) in enumerate(best[:top_k])
        ]

        logger.debug(
            f"Matched {len(seen)} chunks across {len(self._owners)} embeddings, "
            f"returning {len(results)}"
        )
        return results

    @classmethod
    def load(cls, path: str | Path) -> "HyPEVectorStore":
        """
        Load a HyPE store previously written with persist().

        Args:
            path: Path to the JSON index file

        Returns:
            A new HyPEVectorStore with the same records in the same order

        Raises:
            IndexNotFoundError: If the file does not exist
            CorruptIndexError: If the document does not match the schema
        """
        resolved = Path(path).resolve()
        document = codec.read_document(resolved)
        _, records = codec.decode_hype_store(document, resolved)

        store = cls()
        try:
            for record in records:
                store.add_chunk_with_embeddings(
                    record.chunk,
                    [item.vector for item in record.embeddings],
                    [item.label for item in record.embeddings],
                )
        except VectorStoreError as e:
            raise CorruptIndexError(f"Index records are invalid: {e}", resolved) from e

        store.path = resolved
        logger.info(
            f"Loaded HyPE store: {store.chunk_count} chunks, "
            f"{store.embedding_count} embeddings, dimension {store.dimension}"
        )
        return store

    def _encode(self) -> dict[str, Any]:
        return codec.encode_hype_store(self.dimension, self._records)
