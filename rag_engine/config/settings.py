"""
Configuration settings for the rag-engine system.

This module defines all configurable parameters for document processing,
embedding generation, HyPE question generation, retrieval and paths.
"""

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

# Set up logging
logger = logging.getLogger(__name__)


@dataclass
class Settings:
    """Main system configuration with sensible defaults."""

    # === OLLAMA MODELS ===
    embedding_model: str = "nomic-embed-text:v1.5"  # Fast, efficient embeddings
    chat_model: str = "llama3.2:latest"  # Balanced speed/quality
    question_gen_model: str = "llama3.2:latest"  # HyPE question generation
    ollama_base_url: str = "http://localhost:11434"
    ollama_timeout: int = 120

    # === DOCUMENT PROCESSING ===
    chunk_size: int = 1000  # Text chunk size in characters
    chunk_overlap: int = 200  # Overlap between chunks
    semantic_chunking: bool = False  # Paragraph based chunking
    supported_extensions: list[str] = field(default_factory=lambda: [".md", ".txt"])
    document_titles: list[str] | None = None  # Optional file name whitelist

    # === RETRIEVAL ===
    top_k_retrieval: int = 3  # Number of chunks to retrieve
    questions_per_chunk: int = 5  # HyPE questions kept per chunk

    # === GENERATION ===
    max_tokens_response: int = 512  # Maximum response tokens
    temperature: float = 0.1  # LLM temperature (deterministic)
    top_p: float = 0.9  # Nucleus sampling parameter

    # === PATHS ===
    project_root: Path | None = None  # Will be set in __post_init__
    documents_path: str = "data/documents"
    index_path: str = "data/index/basic.index.json"
    hype_index_path: str = "data/index/hype.index.json"

    # === LOGGING ===
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        """Initialize computed fields and apply environment overrides."""
        if self.project_root is None:
            self.project_root = Path.cwd()

        # Apply environment variable overrides
        self._apply_env_overrides()

        # Ensure paths are absolute
        self._resolve_paths()

    def _apply_env_overrides(self) -> None:
        """Apply configuration overrides from environment variables."""
        self.ollama_base_url = os.getenv("OLLAMA_BASE_URL", self.ollama_base_url)
        self.embedding_model = os.getenv("EMBEDDING_MODEL", self.embedding_model)
        self.chat_model = os.getenv("CHAT_MODEL", self.chat_model)
        self.question_gen_model = os.getenv(
            "QUESTION_GEN_MODEL", self.question_gen_model
        )
        self.index_path = os.getenv("INDEX_PATH", self.index_path)
        self.hype_index_path = os.getenv("HYPE_INDEX_PATH", self.hype_index_path)

        # Process numeric environment variables
        if chunk_size := os.getenv("CHUNK_SIZE"):
            self.chunk_size = int(chunk_size)
        if chunk_overlap := os.getenv("CHUNK_OVERLAP"):
            self.chunk_overlap = int(chunk_overlap)
        if top_k := os.getenv("TOP_K_RETRIEVAL"):
            self.top_k_retrieval = int(top_k)
        if questions := os.getenv("QUESTIONS_PER_CHUNK"):
            self.questions_per_chunk = int(questions)

        self.log_level = os.getenv("LOG_LEVEL", self.log_level)

    def _resolve_paths(self) -> None:
        """Convert relative paths to absolute paths."""
        for name in ("documents_path", "index_path", "hype_index_path"):
            value = getattr(self, name)
            if not Path(value).is_absolute():
                setattr(self, name, str(self.project_root / value))

    def get_index_path(self, hype: bool = False) -> Path:
        """Path of the persisted index for the chosen store flavour."""
        return Path(self.hype_index_path if hype else self.index_path)

    def ensure_directories(self) -> None:
        """Create necessary directories if they don't exist."""
        Path(self.documents_path).mkdir(parents=True, exist_ok=True)
        Path(self.index_path).parent.mkdir(parents=True, exist_ok=True)
        Path(self.hype_index_path).parent.mkdir(parents=True, exist_ok=True)

    @classmethod
    def load(cls) -> "Settings":
        """Load configuration with defaults and environment overrides."""
        # Load environment variables only when needed
        load_dotenv()

        settings = cls()
        # Load user configuration overrides
        settings.load_user_config()
        return settings

    def is_valid(self) -> tuple[bool, list[str]]:
        """
        Validate configuration settings.

        Returns:
            Tuple of (is_valid, list_of_errors)
        """
        errors = []

        # Validate chunk settings
        if self.chunk_size <= 0:
            errors.append("chunk_size must be positive")
        if self.chunk_overlap < 0:
            errors.append("chunk_overlap cannot be negative")
        if self.chunk_overlap >= self.chunk_size:
            errors.append("chunk_overlap must be less than chunk_size")

        # Validate retrieval settings
        if self.top_k_retrieval <= 0:
            errors.append("top_k_retrieval must be positive")
        if self.questions_per_chunk <= 0:
            errors.append("questions_per_chunk must be positive")
        if not 0 <= self.temperature <= 2:
            errors.append("temperature must be between 0 and 2")
        if not 0 <= self.top_p <= 1:
            errors.append("top_p must be between 0 and 1")

        if not self.supported_extensions:
            errors.append("supported_extensions cannot be empty")

        return len(errors) == 0, errors

    def _user_config_file(self) -> Path:
        return self.project_root / "config" / "user_config.json"

    def save_user_config(self) -> Path:
        """Save user configuration overrides to local project config file."""
        config_file = self._user_config_file()
        config_file.parent.mkdir(exist_ok=True)

        # Save only the settings that can be modified via CLI
        user_config = {
            "embedding_model": self.embedding_model,
            "chat_model": self.chat_model,
            "question_gen_model": self.question_gen_model,
            "chunk_size": self.chunk_size,
            "chunk_overlap": self.chunk_overlap,
            "semantic_chunking": self.semantic_chunking,
            "top_k_retrieval": self.top_k_retrieval,
            "questions_per_chunk": self.questions_per_chunk,
        }

        with open(config_file, "w") as f:
            json.dump(user_config, f, indent=2)

        return config_file

    def load_user_config(self) -> None:
        """Load user configuration overrides from local project config file."""
        config_file = self._user_config_file()
        if not config_file.exists():
            return

        try:
            with open(config_file) as f:
                user_config = json.load(f)
        except json.JSONDecodeError as e:
            logger.warning(f"Ignoring invalid user config {config_file}: {e}")
            return

        # Apply user overrides
        for key, value in user_config.items():
            if hasattr(self, key):
                setattr(self, key, value)


class _LazySettings:
    """Lazy-loading proxy for Settings that only loads when accessed."""

    def __init__(self) -> None:
        self._settings: Settings | None = None

    def _ensure_loaded(self) -> Settings:
        """Ensure settings are loaded and return them."""
        if self._settings is None:
            self._settings = Settings.load()
        return self._settings

    def __getattr__(self, name: str) -> Any:
        """Delegate attribute access to the actual settings object."""
        return getattr(self._ensure_loaded(), name)

    def __setattr__(self, name: str, value: Any) -> None:
        """Handle setting attributes."""
        if name == "_settings":
            # Internal attribute
            super().__setattr__(name, value)
        else:
            # Delegate to the actual settings object
            setattr(self._ensure_loaded(), name, value)


# Global settings instance - lazy loaded
settings = _LazySettings()
