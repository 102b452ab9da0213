"""
Document retrieval component for RAG pipeline.

This module embeds a query and searches a vector store with it. Either
store flavour works: a plain VectorStore or a HyPEVectorStore.
"""

import logging
import time
from dataclasses import dataclass
from typing import Protocol

from rag_engine.config.settings import settings
from rag_engine.vector_store import EmbeddingGenerator, SearchResult

# Set up logging
logger = logging.getLogger(__name__)


class SearchableStore(Protocol):
    def search(self, query_embedding: list[float], top_k: int = 5) -> list[SearchResult]: ...

    def __len__(self) -> int: ...


@dataclass
class RetrievalResult:
    """Result of document retrieval."""

    query: str
    results: list[SearchResult]
    retrieval_time: float

    @property
    def scores(self) -> list[float]:
        return [result.score for result in self.results]

    @property
    def total_retrieved(self) -> int:
        return len(self.results)


class DocumentRetriever:
    """
    Document retrieval system for RAG pipeline.

    Holds an explicit store handle; nothing is loaded implicitly.
    """

    def __init__(
        self,
        vector_store: SearchableStore,
        embedding_generator: EmbeddingGenerator | None = None,
    ):
        """
        Initialize the document retriever.

        Args:
            vector_store: Store to search
            embedding_generator: Embedding generator instance (creates new if None)
        """
        self.vector_store = vector_store
        self.embedding_generator = embedding_generator or EmbeddingGenerator()

        logger.info(f"DocumentRetriever initialized ({len(vector_store)} chunks)")

    def retrieve_relevant_documents(
        self, query: str, top_k: int | None = None
    ) -> RetrievalResult:
        """
        Retrieve relevant chunks for a given query.

        Args:
            query: User query string
            top_k: Number of chunks to retrieve (uses config default if None)

        Returns:
            RetrievalResult with ranked search results
        """
        if not query.strip():
            raise ValueError("Query cannot be empty")

        top_k = top_k or settings.top_k_retrieval

        logger.info(f"Retrieving documents for query: '{query[:50]}...'")
        start_time = time.time()

        query_embedding = self.embedding_generator.generate_query_embedding_sync(query)
        results = self.vector_store.search(query_embedding, top_k)

        retrieval_time = time.time() - start_time
        logger.info(
            f"Retrieved {len(results)} relevant chunks in {retrieval_time:.2f}s"
        )

        return RetrievalResult(
            query=query, results=results, retrieval_time=retrieval_time
        )
