"""
RAG (Retrieval-Augmented Generation) module.

This module implements retrieval over the vector stores, HyPE question
generation and answer generation using local Ollama models.
"""

from .generator import AnswerGenerator
from .hype import QuestionGenerator
from .pipeline import RAGPipeline
from .retriever import DocumentRetriever

__all__ = ["AnswerGenerator", "DocumentRetriever", "QuestionGenerator", "RAGPipeline"]
