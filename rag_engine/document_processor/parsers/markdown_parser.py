"""
Markdown document parser.

Turns a Markdown file into plain text for chunking and collects its
frontmatter as document metadata.
"""

import re
from pathlib import Path
from typing import Any

import markdown


class MarkdownParser:
    """Parser for extracting content from Markdown documents."""

    def __init__(self):
        """Initialize the Markdown parser with frontmatter support."""
        self.md = markdown.Markdown(extensions=["meta"])

    def extract_content(self, file_path: str) -> dict[str, Any]:
        """
        Extract plain text and frontmatter from a Markdown file.

        Args:
            file_path: Path to the Markdown file

        Returns:
            Dictionary with "plain_text", "metadata" and file details
        """
        path = Path(file_path)
        if not path.exists():
            raise FileNotFoundError(f"Markdown file not found: {file_path}")

        with open(path, encoding="utf-8") as f:
            content = f.read()

        # Converting populates Meta from the frontmatter block
        self.md.reset()
        self.md.convert(content)
        metadata = getattr(self.md, "Meta", {})

        # Single-valued keys become plain strings, the rest stay lists
        processed_metadata: dict[str, Any] = {}
        for key, value in metadata.items():
            if isinstance(value, list) and len(value) == 1:
                processed_metadata[key] = value[0]
            else:
                processed_metadata[key] = list(value)

        return {
            "source_file": str(path),
            "file_type": "markdown",
            "plain_text": self._convert_to_plain_text(content),
            "metadata": processed_metadata,
            "size_bytes": len(content.encode("utf-8")),
        }

    def _convert_to_plain_text(self, content: str) -> str:
        """
        Convert Markdown content to plain text.

        Args:
            content: Raw Markdown content

        Returns:
            Plain text with Markdown formatting removed
        """
        # Remove frontmatter, delimited or bare "key: value" lines at the top
        if content.startswith("---\n"):
            content = re.sub(r"\A---\n.*?\n---\n", "", content, flags=re.DOTALL)
        elif getattr(self.md, "Meta", None):
            content = re.sub(
                r"\A(?:[A-Za-z0-9_-]+:.*\n(?:[ \t]{4,}.*\n)*)+", "", content
            )

        # Remove headers (keep text)
        content = re.sub(r"^#{1,6}\s*", "", content, flags=re.MULTILINE)

        # Remove emphasis markers
        content = re.sub(r"\*\*(.*?)\*\*", r"\1", content)  # Bold
        content = re.sub(r"\*(.*?)\*", r"\1", content)  # Italic
        content = re.sub(r"__(.*?)__", r"\1", content)  # Bold

        # Remove code fences and inline code markers
        content = re.sub(r"```.*?\n(.*?)\n```", r"\1", content, flags=re.DOTALL)
        content = re.sub(r"`([^`]+)`", r"\1", content)

        # Remove images, then links (keep text)
        content = re.sub(r"!\[([^\]]*)\]\([^\)]+\)", r"\1", content)
        content = re.sub(r"\[([^\]]+)\]\([^\)]+\)", r"\1", content)

        # Remove horizontal rules
        content = re.sub(r"^---+$", "", content, flags=re.MULTILINE)

        # Remove list markers
        content = re.sub(r"^\s*[-*+]\s+", "", content, flags=re.MULTILINE)
        content = re.sub(r"^\s*\d+\.\s+", "", content, flags=re.MULTILINE)

        # Clean up extra whitespace
        content = re.sub(r"\n\s*\n\s*\n", "\n\n", content)
        return content.strip()
