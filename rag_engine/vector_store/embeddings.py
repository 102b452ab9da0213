"""
Embedding generation using Ollama local models.

This module provides the embedding provider used by ingestion and
retrieval: one vector per input text, in input order.
"""

import logging
import time
from dataclasses import dataclass

import httpx
from langchain_ollama import OllamaEmbeddings

from rag_engine.config.settings import settings

# Set up logging
logger = logging.getLogger(__name__)


@dataclass
class EmbeddingResult:
    """Result of embedding generation."""

    embeddings: list[list[float]]
    texts: list[str]
    model_used: str
    generation_time: float
    total_tokens: int

    @property
    def dimension(self) -> int:
        """Get the dimension of the embeddings."""
        if not self.embeddings:
            return 0
        return len(self.embeddings[0]) if self.embeddings[0] else 0


class EmbeddingGenerator:
    """
    Local embedding generation using Ollama.

    Handles conversion of texts (chunks, hypothetical questions, queries)
    to vector embeddings using local Ollama models.
    """

    def __init__(self, model_name: str | None = None):
        """
        Initialize the embedding generator.

        Args:
            model_name: Name of the Ollama embedding model to use
        """
        self.model_name = model_name or settings.embedding_model
        self.base_url = settings.ollama_base_url
        self.timeout = settings.ollama_timeout

        # Initialize Ollama embeddings
        self.embeddings = OllamaEmbeddings(
            model=self.model_name, base_url=self.base_url
        )

        logger.info(f"EmbeddingGenerator initialized with model: {self.model_name}")

    def embed(self, texts: list[str]) -> list[list[float]]:
        """
        Embed a batch of texts.

        Args:
            texts: List of text strings to embed

        Returns:
            One embedding per input text, in the same order
        """
        return self.generate_embeddings_sync(texts).embeddings

    def generate_embeddings_sync(self, texts: list[str]) -> EmbeddingResult:
        """
        Generate embeddings for a list of texts.

        Args:
            texts: List of text strings to embed

        Returns:
            EmbeddingResult with embeddings and metadata
        """
        if not texts:
            logger.warning("No texts provided for embedding generation")
            return EmbeddingResult([], [], self.model_name, 0.0, 0)

        logger.info(f"Generating embeddings for {len(texts)} texts")
        start_time = time.time()

        try:
            embeddings = self.embeddings.embed_documents(texts)
        except Exception as e:
            logger.error(f"Failed to generate embeddings: {str(e)}")
            raise RuntimeError(f"Embedding generation failed: {str(e)}") from e

        return self._build_result(texts, embeddings, start_time)

    def generate_query_embedding_sync(self, query: str) -> list[float]:
        """
        Generate embedding for a single query text.

        Args:
            query: Query string to embed

        Returns:
            Embedding vector as list of floats
        """
        if not query.strip():
            raise ValueError("Query cannot be empty")

        try:
            embedding = self.embeddings.embed_query(query)
        except Exception as e:
            logger.error(f"Failed to generate query embedding: {str(e)}")
            raise RuntimeError(f"Query embedding generation failed: {str(e)}") from e

        logger.debug(f"Generated query embedding with {len(embedding)} dimensions")
        return embedding

    def check_ollama_connection(self) -> tuple[bool, str]:
        """
        Check if Ollama is accessible and the model is available.

        Returns:
            Tuple of (is_available, status_message)
        """
        try:
            with httpx.Client(timeout=10.0) as client:
                response = client.get(f"{self.base_url}/api/tags")

                if response.status_code != 200:
                    return False, f"Ollama API returned status {response.status_code}"

                models_data = response.json()
                available_models = [
                    model["name"] for model in models_data.get("models", [])
                ]

                if self.model_name not in available_models:
                    return (
                        False,
                        f"Model {self.model_name} not found. Available: {available_models}",
                    )

                return True, f"Ollama connection OK, model {self.model_name} available"

        except httpx.ConnectError:
            return False, f"Cannot connect to Ollama at {self.base_url}"
        except httpx.HTTPError as e:
            return False, f"Error checking Ollama: {str(e)}"

    def _build_result(
        self, texts: list[str], embeddings: list[list[float]], start_time: float
    ) -> EmbeddingResult:
        if len(embeddings) != len(texts):
            raise RuntimeError(
                f"Embedding provider returned {len(embeddings)} vectors for {len(texts)} texts"
            )

        generation_time = time.time() - start_time
        total_tokens = sum(len(text.split()) for text in texts)  # Rough token count

        logger.info(
            f"Generated {len(embeddings)} embeddings in {generation_time:.2f}s "
            f"(~{total_tokens} tokens)"
        )

        return EmbeddingResult(
            embeddings=embeddings,
            texts=texts,
            model_used=self.model_name,
            generation_time=generation_time,
            total_tokens=total_tokens,
        )
