"""
Basic integration tests for document processing.

These tests read real files from a temporary directory and chunk them.
"""

import pytest

from rag_engine.config.settings import Settings
from rag_engine.document_processor.chunker import TextChunker
from rag_engine.document_processor.extractor import DocumentExtractor
from rag_engine.document_processor.parsers import MarkdownParser


@pytest.fixture
def settings():
    """Create a Settings instance for testing."""
    return Settings.load()


@pytest.fixture
def document_extractor():
    """Create a DocumentExtractor without a title whitelist."""
    return DocumentExtractor(document_titles=[])


@pytest.fixture
def text_chunker():
    """Create a TextChunker instance."""
    return TextChunker(chunk_size=200, overlap=20, semantic=False)


@pytest.fixture
def docs_dir(tmp_path):
    """Directory with Markdown, text and unsupported files."""
    (tmp_path / "guide.md").write_text(
        """---
title: Vector Guide
tags: vectors
---

# Vector Guide

Cosine similarity compares **directions** of embeddings.

## Ranking

- Higher scores rank first
- Ties keep insertion order

See [the docs](https://example.com) for `details`.
""",
        encoding="utf-8",
    )
    nested = tmp_path / "nested"
    nested.mkdir()
    (nested / "notes.txt").write_text("Plain text notes about HyPE.", encoding="utf-8")
    (tmp_path / "image.png").write_bytes(b"\x89PNG")
    return tmp_path


def test_settings_can_be_created_with_defaults(settings):
    """Test that settings load with defaults."""
    assert settings.chunk_size > 0
    assert settings.project_root is not None


def test_settings_validation_passes(settings):
    """Test that the default configuration is valid."""
    is_valid, errors = settings.is_valid()

    assert is_valid, errors


def test_document_extractor_supports_common_formats(document_extractor):
    """Test supported file detection."""
    assert document_extractor.is_supported_file("doc.md")
    assert document_extractor.is_supported_file("doc.TXT")
    assert not document_extractor.is_supported_file("doc.pdf")
    assert not document_extractor.is_supported_file("doc.html")


def test_markdown_parser_strips_frontmatter_and_formatting(docs_dir):
    """Test Markdown to plain text conversion."""
    result = MarkdownParser().extract_content(str(docs_dir / "guide.md"))
    text = result["plain_text"]

    assert result["file_type"] == "markdown"
    assert result["metadata"]["title"] == "Vector Guide"
    assert "title:" not in text
    assert "**" not in text
    assert "#" not in text
    assert "Cosine similarity compares directions of embeddings." in text
    assert "See the docs for details." in text


def test_markdown_parser_missing_file(tmp_path):
    """Test that a missing file raises FileNotFoundError."""
    with pytest.raises(FileNotFoundError):
        MarkdownParser().extract_content(str(tmp_path / "missing.md"))


def test_process_directory(document_extractor, docs_dir):
    """Test processing a directory recursively in sorted order."""
    result = document_extractor.process_directory(str(docs_dir))

    assert result.processed == 2
    assert result.failed == 0
    assert [doc["id"] for doc in result.documents] == ["doc-0", "doc-1"]
    assert [doc["title"] for doc in result.documents] == ["guide.md", "notes.txt"]
    assert result.documents[1]["plain_text"] == "Plain text notes about HyPE."
    assert result.documents[0]["metadata"]["source_file"].endswith("guide.md")


def test_process_directory_title_whitelist(docs_dir):
    """Test that only whitelisted file names are processed."""
    extractor = DocumentExtractor(document_titles=["notes.txt"])

    result = extractor.process_directory(str(docs_dir))

    assert [doc["title"] for doc in result.documents] == ["notes.txt"]
    assert result.documents[0]["id"] == "doc-0"


def test_process_directory_collects_read_errors(document_extractor, tmp_path):
    """Test that undecodable files are reported, not fatal."""
    (tmp_path / "bad.txt").write_bytes(b"\xff\xfe\xfa")
    (tmp_path / "good.txt").write_text("Readable content here.", encoding="utf-8")

    result = document_extractor.process_directory(str(tmp_path))

    assert result.processed == 1
    assert result.failed == 1
    assert "bad.txt" in result.errors[0]
    assert result.documents[0]["id"] == "doc-0"


def test_process_directory_missing(document_extractor, tmp_path):
    """Test processing a directory that does not exist."""
    with pytest.raises(FileNotFoundError):
        document_extractor.process_directory(str(tmp_path / "missing"))


def test_document_to_chunks_pipeline(document_extractor, text_chunker, docs_dir):
    """Test that extracted documents chunk with their metadata."""
    documents = document_extractor.process_directory(str(docs_dir)).documents

    chunks = text_chunker.chunk_multiple_documents(documents)

    assert {chunk.parent_id for chunk in chunks} == {"doc-0", "doc-1"}
    assert len({chunk.id for chunk in chunks}) == len(chunks)
    assert all(chunk.metadata["title"] == chunk.title for chunk in chunks)
    assert chunks[-1].title == "notes.txt"


def test_empty_document_handling(document_extractor, text_chunker, tmp_path):
    """Test that an empty file yields a document but no chunks."""
    (tmp_path / "empty.md").write_text("", encoding="utf-8")

    documents = document_extractor.process_directory(str(tmp_path)).documents

    assert len(documents) == 1
    assert text_chunker.chunk_multiple_documents(documents) == []
