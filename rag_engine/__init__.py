"""
rag-engine: Educational RAG system built around an exact vector store.

Chunks documents, embeds them with local Ollama models, and answers
questions from a persisted cosine-similarity index, with an optional
HyPE (hypothetical question) index.
"""

__version__ = "0.1.0"
