"""
Document processing module for rag-engine.

This module reads Markdown and plain text documents and splits them
into chunks for indexing.
"""

from .chunker import TextChunk, TextChunker
from .extractor import DocumentExtractor

__all__ = ["DocumentExtractor", "TextChunk", "TextChunker"]
