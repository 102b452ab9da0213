"""
Document parsers for different file formats.

This module contains the Markdown parser; plain text needs no parsing.
"""

from .markdown_parser import MarkdownParser

__all__ = ["MarkdownParser"]
