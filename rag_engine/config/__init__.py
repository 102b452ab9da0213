"""
Configuration module for rag-engine.
"""

from .settings import Settings, settings

__all__ = ["Settings", "settings"]
