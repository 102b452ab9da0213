"""
Hypothetical question generation for HyPE ingestion.

Instead of embedding a chunk directly, HyPE asks a chat model for the
questions the chunk answers and embeds those. At query time the user's
question is then matched against questions rather than passages.
"""

import logging
import re
from typing import Protocol

from rag_engine.config.settings import settings

# Set up logging
logger = logging.getLogger(__name__)

_PREFIX_PATTERNS = [
    re.compile(r"^\d+\.\s*"),  # "1. "
    re.compile(r"^[-*•]\s*"),  # "- ", "* ", "• "
    re.compile(r"^[a-zA-Z]\)\s*"),  # "a) "
    re.compile(r"^\([a-zA-Z0-9]+\)\s*"),  # "(1) "
]
_HEADER_PREFIXES = ("questions:", "sub-queries:")
MIN_QUESTION_LENGTH = 10

QUESTION_PROMPT = """Analyze the input text and generate essential questions that, when answered, capture the main points of the text. Each question should be one line, without numbering or prefixes.

Text:
{text}

Questions:
"""


class ChatProvider(Protocol):
    def chat(self, messages: list[dict[str, str]], model: str | None = None) -> str: ...


def parse_questions(response: str) -> list[str]:
    """
    Extract questions from a free-form model response.

    Handles numbered lists, bulleted lists and plain newline-separated
    lines. Lines of MIN_QUESTION_LENGTH characters or fewer and list
    headers are dropped.

    Args:
        response: Raw model output

    Returns:
        Cleaned questions in response order
    """
    questions = []
    for line in response.splitlines():
        cleaned = line.strip()
        for pattern in _PREFIX_PATTERNS:
            cleaned = pattern.sub("", cleaned)
        cleaned = cleaned.strip()

        if len(cleaned) <= MIN_QUESTION_LENGTH:
            continue
        if cleaned.lower().startswith(_HEADER_PREFIXES):
            continue
        questions.append(cleaned)
    return questions


def fallback_question(chunk_text: str) -> str:
    """Question used when the model response yields nothing usable."""
    return f"What does this text say about {chunk_text[:50]}?"


class QuestionGenerator:
    """Generates hypothetical questions for chunks through a chat provider."""

    def __init__(
        self,
        chat_provider: ChatProvider,
        model_name: str | None = None,
        max_questions: int | None = None,
    ):
        """
        Args:
            chat_provider: Object exposing chat(messages, model)
            model_name: Model used for question generation
            max_questions: Upper bound on questions kept per chunk
        """
        self.chat_provider = chat_provider
        self.model_name = model_name or settings.question_gen_model
        self.max_questions = (
            max_questions if max_questions is not None else settings.questions_per_chunk
        )

        if self.max_questions <= 0:
            raise ValueError("max_questions must be positive")

    def generate(self, chunk_text: str) -> list[str]:
        """
        Generate the questions a chunk answers.

        Args:
            chunk_text: Text content of the chunk

        Returns:
            Between 1 and max_questions questions
        """
        messages = [{"role": "user", "content": QUESTION_PROMPT.format(text=chunk_text)}]

        logger.debug(
            f"Generating hypothetical questions ({len(chunk_text)} chars, model {self.model_name})"
        )
        response = self.chat_provider.chat(messages, model=self.model_name)

        questions = parse_questions(response)[: self.max_questions]
        if not questions:
            logger.warning(
                f"No questions parsed from response, using fallback: {response[:200]!r}"
            )
            return [fallback_question(chunk_text)]

        logger.debug(f"Parsed {len(questions)} hypothetical questions: {questions[:3]}")
        return questions
