"""
Chat and answer generation using Ollama local models.

This module provides the chat provider used downstream of search (answer
generation) and during HyPE ingestion (question generation).
"""

import logging
import time
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage
from langchain_ollama import ChatOllama

from rag_engine.config.settings import settings
from rag_engine.vector_store.records import SearchResult

# Set up logging
logger = logging.getLogger(__name__)

_MESSAGE_TYPES = {
    "system": SystemMessage,
    "user": HumanMessage,
    "assistant": AIMessage,
}


@dataclass
class GenerationResult:
    """Result of answer generation."""

    query: str
    answer: str
    prompt: str
    model_used: str
    generation_time: float
    token_count: int


def format_retrieved_chunks(results: Sequence[SearchResult]) -> str:
    """
    Render search results as a context block for a prompt.

    Args:
        results: Ranked search results

    Returns:
        One paragraph per result with its score, source and content
    """
    if not results:
        return "No relevant context retrieved."

    return "\n\n".join(
        "\n".join(
            [
                f"Chunk {idx} (score={result.score:.3f})",
                f"Source: {result.chunk.title}",
                result.chunk.content,
            ]
        )
        for idx, result in enumerate(results, 1)
    )


def build_rag_prompt(question: str, results: Sequence[SearchResult]) -> str:
    """Build the answer prompt from a question and its retrieved context."""
    return "\n".join(
        [
            "You are a helpful assistant answering questions based only on the provided context.",
            "If the answer is not in the context, say you don't know.",
            "",
            "Context:",
            format_retrieved_chunks(results),
            "",
            f"Question: {question}",
            "Answer:",
        ]
    )


class AnswerGenerator:
    """
    Chat generation system using Ollama local models.

    Wraps a ChatOllama model behind a minimal chat(messages) interface
    and builds grounded answers from search results.
    """

    def __init__(
        self,
        model_name: str | None = None,
        temperature: float | None = None,
        top_p: float | None = None,
    ):
        """
        Initialize the answer generator.

        Args:
            model_name: Name of the Ollama chat model to use
            temperature: Temperature for text generation (0.0-1.0)
            top_p: Top-p sampling parameter (0.0-1.0)
        """
        self.model_name = model_name or settings.chat_model
        self.base_url = settings.ollama_base_url
        self.temperature = (
            temperature if temperature is not None else settings.temperature
        )
        self.top_p = top_p if top_p is not None else settings.top_p
        self.max_tokens = settings.max_tokens_response
        self._models: dict[str, ChatOllama] = {}

        self.llm = self._get_model(self.model_name)

        logger.info(
            f"AnswerGenerator initialized with model: {self.model_name} "
            f"(temp: {self.temperature}, top_p: {self.top_p})"
        )

    def chat(
        self, messages: Sequence[Mapping[str, str]], model: str | None = None
    ) -> str:
        """
        Run a chat completion.

        Args:
            messages: Ordered {"role", "content"} mappings; role is one of
                "system", "user" or "assistant"
            model: Model name overriding the default chat model

        Returns:
            The reply text, stripped
        """
        converted = [self._to_message(message) for message in messages]
        llm = self._get_model(model or self.model_name)

        start_time = time.time()
        try:
            response = llm.invoke(converted)
        except Exception as e:
            logger.error(f"Chat completion failed: {str(e)}")
            raise RuntimeError(f"Chat completion failed: {str(e)}") from e

        text = response.content if isinstance(response.content, str) else str(response.content)
        logger.debug(
            f"Chat completion from {model or self.model_name} in "
            f"{time.time() - start_time:.2f}s (~{len(text)} chars)"
        )
        return text.strip()

    def generate_answer(
        self, query: str, results: Sequence[SearchResult]
    ) -> GenerationResult:
        """
        Generate an answer based on a query and retrieved chunks.

        Args:
            query: User query
            results: Ranked search results used as context

        Returns:
            GenerationResult with generated answer and metadata
        """
        if not query.strip():
            raise ValueError("Query cannot be empty")

        logger.info(f"Generating answer for query: '{query[:50]}...'")
        start_time = time.time()

        prompt = build_rag_prompt(query, results)
        answer = self.chat([{"role": "user", "content": prompt}])

        generation_time = time.time() - start_time
        token_count = len(answer.split())  # Rough token count estimation

        logger.info(f"Generated answer in {generation_time:.2f}s (~{token_count} tokens)")

        return GenerationResult(
            query=query,
            answer=answer,
            prompt=prompt,
            model_used=self.model_name,
            generation_time=generation_time,
            token_count=token_count,
        )

    def _get_model(self, model_name: str) -> ChatOllama:
        if model_name not in self._models:
            self._models[model_name] = ChatOllama(
                model=model_name,
                base_url=self.base_url,
                temperature=self.temperature,
                num_predict=self.max_tokens,  # Max tokens to generate
                top_p=self.top_p,
            )
        return self._models[model_name]

    @staticmethod
    def _to_message(message: Mapping[str, str]) -> BaseMessage:
        role = message.get("role")
        if role not in _MESSAGE_TYPES:
            raise ValueError(f"Unsupported chat role: {role!r}")
        return _MESSAGE_TYPES[role](content=message.get("content", ""))
