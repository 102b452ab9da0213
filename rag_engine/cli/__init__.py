"""
CLI (Command Line Interface) module for rag-engine.

This module provides the command-line interface for building and
querying vector indexes.
"""

from .commands import main

__all__ = ["main"]
