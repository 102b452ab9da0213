"""
Main document extraction coordinator.

This module reads Markdown and plain text files from disk and turns
them into document dictionaries ready for chunking.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from rag_engine.config.settings import settings

from .parsers import MarkdownParser

# Set up logging
logger = logging.getLogger(__name__)


@dataclass
class ProcessingResult:
    """Result of document processing operation."""

    processed: int
    failed: int
    errors: list[str] = field(default_factory=list)
    documents: list[dict[str, Any]] = field(default_factory=list)


class DocumentExtractor:
    """
    Main document extraction coordinator.

    Handles Markdown and plain text files and provides a unified
    document dictionary for the chunker.
    """

    def __init__(self, document_titles: list[str] | None = None):
        """
        Initialize the document extractor.

        Args:
            document_titles: Optional whitelist of file names to keep
        """
        self.markdown_parser = MarkdownParser()
        self.document_titles = (
            document_titles if document_titles is not None else settings.document_titles
        )
        self.supported_extensions = [ext.lower() for ext in settings.supported_extensions]

    def extract_document(self, file_path: str, doc_id: str) -> dict[str, Any]:
        """
        Extract content from a single document.

        Args:
            file_path: Path to the document file
            doc_id: Identifier assigned to the document

        Returns:
            Document dictionary with "id", "title", "plain_text" and "metadata"
        """
        path = Path(file_path)
        extension = path.suffix.lower()

        if extension == ".md":
            result = self.markdown_parser.extract_content(str(path))
        elif extension == ".txt":
            with open(path, encoding="utf-8") as f:
                content = f.read()
            result = {
                "source_file": str(path),
                "file_type": "text",
                "plain_text": content,
                "metadata": {},
                "size_bytes": len(content.encode("utf-8")),
            }
        else:
            raise ValueError(f"Unsupported file type: {extension} for file {file_path}")

        result["id"] = doc_id
        result["title"] = path.name
        result["metadata"] = {
            **result["metadata"],
            "title": path.name,
            "source_file": str(path),
        }

        logger.info(
            f"Extracted {len(result['plain_text'])} characters from {path.name}"
        )
        return result

    def process_directory(self, directory_path: str) -> ProcessingResult:
        """
        Process all supported documents in a directory recursively.

        Files are visited in sorted path order so document ids are stable
        between runs.

        Args:
            directory_path: Path to directory containing documents

        Returns:
            ProcessingResult with statistics and results
        """
        dir_path = Path(directory_path)

        if not dir_path.exists():
            raise FileNotFoundError(f"Directory not found: {directory_path}")

        if not dir_path.is_dir():
            raise ValueError(f"Path is not a directory: {directory_path}")

        logger.info(f"Processing documents in directory: {directory_path}")

        supported_files = sorted(
            path
            for path in dir_path.rglob("*")
            if path.is_file() and self.is_supported_file(str(path))
        )
        if self.document_titles:
            before = len(supported_files)
            supported_files = [
                path for path in supported_files if path.name in self.document_titles
            ]
            logger.info(
                f"Filtered documents by title: kept {len(supported_files)} of {before}"
            )

        logger.info(f"Found {len(supported_files)} supported files")

        documents = []
        errors = []
        for file_path in supported_files:
            try:
                documents.append(
                    self.extract_document(str(file_path), f"doc-{len(documents)}")
                )
            except (OSError, UnicodeDecodeError) as e:
                error_msg = f"Error processing {file_path.name}: {str(e)}"
                errors.append(error_msg)
                logger.error(error_msg)

        logger.info(
            f"Processing complete: {len(documents)} processed, {len(errors)} failed"
        )

        return ProcessingResult(
            processed=len(documents),
            failed=len(errors),
            errors=errors,
            documents=documents,
        )

    def is_supported_file(self, file_path: str) -> bool:
        """
        Check if file type is supported.

        Args:
            file_path: Path to file

        Returns:
            True if file type is supported
        """
        extension = Path(file_path).suffix.lower()
        return extension in self.supported_extensions and extension in (".md", ".txt")
