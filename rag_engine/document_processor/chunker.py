"""
Text chunking system for breaking documents into manageable pieces.

This module provides fixed-size sliding-window chunking and a paragraph
based ("semantic") alternative that respects blank-line boundaries.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Any

from rag_engine.config.settings import settings

# Set up logging
logger = logging.getLogger(__name__)

MetadataValue = int | float | str | bool | list[str]


@dataclass(frozen=True)
class TextChunk:
    """An immutable piece of a document, the unit stored and retrieved."""

    id: str
    parent_id: str
    content: str
    sequence: int
    metadata: dict[str, MetadataValue] = field(default_factory=dict)

    @property
    def title(self) -> str:
        """Human readable source label for prompts and listings."""
        title = self.metadata.get("title")
        return title if isinstance(title, str) and title else self.parent_id


class TextChunker:
    """
    Document chunking system.

    Splits documents into overlapping fixed-size windows, or into
    paragraphs when semantic chunking is enabled.
    """

    def __init__(
        self,
        chunk_size: int | None = None,
        overlap: int | None = None,
        semantic: bool | None = None,
    ):
        """
        Initialize the text chunker.

        Args:
            chunk_size: Target size for chunks in characters
            overlap: Overlap size between chunks in characters
            semantic: Split on paragraph boundaries instead of fixed windows
        """
        self.chunk_size = chunk_size if chunk_size is not None else settings.chunk_size
        self.overlap = overlap if overlap is not None else settings.chunk_overlap
        self.semantic = semantic if semantic is not None else settings.semantic_chunking

        # Validate parameters
        if self.chunk_size <= 0:
            raise ValueError("Chunk size must be greater than zero")
        if self.overlap < 0:
            raise ValueError("Overlap cannot be negative")
        if self.overlap >= self.chunk_size:
            raise ValueError("Overlap must be smaller than chunk size")

        logger.info(
            f"TextChunker initialized: size={self.chunk_size}, overlap={self.overlap}, "
            f"semantic={self.semantic}"
        )

    def chunk_document(self, document: dict[str, Any]) -> list[TextChunk]:
        """
        Chunk a document into smaller pieces.

        Args:
            document: Document dictionary from the extractor, with at least
                "id" and "plain_text" keys

        Returns:
            List of TextChunk objects
        """
        content = document.get("plain_text", "")
        doc_id = document.get("id", "doc")
        if not content:
            logger.warning(f"No text content found in document: {doc_id}")
            return []

        metadata = dict(document.get("metadata") or {})

        logger.debug(f"Chunking document: {doc_id} ({len(content)} chars)")

        if self.semantic:
            chunks = self._chunk_paragraphs(content, doc_id, metadata)
        else:
            chunks = self._chunk_sliding_window(content, doc_id, metadata)

        logger.info(f"Created {len(chunks)} chunks for {doc_id}")
        return chunks

    def chunk_multiple_documents(
        self, documents: list[dict[str, Any]]
    ) -> list[TextChunk]:
        """
        Chunk multiple documents.

        Args:
            documents: List of document dictionaries

        Returns:
            List of all chunks from all documents
        """
        all_chunks = []
        for doc in documents:
            all_chunks.extend(self.chunk_document(doc))

        logger.info(f"Total chunks created: {len(all_chunks)}")
        return all_chunks

    def _chunk_sliding_window(
        self, content: str, doc_id: str, metadata: dict[str, Any]
    ) -> list[TextChunk]:
        """Split content into windows advancing by chunk_size - overlap."""
        chunks = []
        start = 0
        sequence = 0
        step = self.chunk_size - self.overlap

        while start < len(content):
            end = min(start + self.chunk_size, len(content))
            chunks.append(
                TextChunk(
                    id=f"{doc_id}-chunk-{sequence}",
                    parent_id=doc_id,
                    content=content[start:end],
                    sequence=sequence,
                    metadata=dict(metadata),
                )
            )
            if end == len(content):
                break
            start += step
            sequence += 1

        return chunks

    def _chunk_paragraphs(
        self, content: str, doc_id: str, metadata: dict[str, Any]
    ) -> list[TextChunk]:
        """Split content on blank lines, windowing paragraphs that are too long."""
        paragraphs = [p.strip() for p in re.split(r"\n{2,}", content)]
        paragraphs = [p for p in paragraphs if p]

        pieces: list[str] = []
        for paragraph in paragraphs:
            if len(paragraph) <= self.chunk_size:
                pieces.append(paragraph)
                continue

            start = 0
            while start < len(paragraph):
                end = min(start + self.chunk_size, len(paragraph))
                pieces.append(paragraph[start:end])
                if end == len(paragraph):
                    break
                start += self.chunk_size - self.overlap

        return [
            TextChunk(
                id=f"{doc_id}-para-{sequence}",
                parent_id=doc_id,
                content=piece,
                sequence=sequence,
                metadata=dict(metadata),
            )
            for sequence, piece in enumerate(pieces)
        ]
