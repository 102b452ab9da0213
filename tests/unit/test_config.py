"""Tests for configuration module."""

import json
import tempfile
from pathlib import Path
from unittest.mock import patch

import pytest

from rag_engine.config.settings import Settings, _LazySettings


@pytest.fixture
def temp_config_dir():
    """Create temporary directory for config tests."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


@pytest.fixture
def settings_instance():
    """Create a fresh Settings instance."""
    return Settings()


def test_settings_have_reasonable_defaults(settings_instance):
    """Test that settings have reasonable defaults."""
    assert settings_instance.chunk_size > 0
    assert settings_instance.chunk_overlap >= 0
    assert settings_instance.chunk_overlap < settings_instance.chunk_size
    assert settings_instance.top_k_retrieval > 0
    assert settings_instance.questions_per_chunk > 0
    assert settings_instance.temperature >= 0
    assert settings_instance.embedding_model
    assert settings_instance.chat_model
    assert settings_instance.question_gen_model
    assert isinstance(settings_instance.semantic_chunking, bool)


def test_settings_validation_with_valid_settings(settings_instance):
    """Test settings validation with valid settings."""
    is_valid, errors = settings_instance.is_valid()

    assert is_valid
    assert len(errors) == 0


def test_settings_validation_with_invalid_chunk_size():
    """Test settings validation with invalid chunk size."""
    settings = Settings()
    settings.chunk_size = -1

    is_valid, errors = settings.is_valid()

    assert not is_valid
    assert any("chunk_size must be positive" in error for error in errors)


def test_settings_validation_with_invalid_overlap():
    """Test settings validation with overlap larger than chunk size."""
    settings = Settings()
    settings.chunk_overlap = settings.chunk_size + 1000

    is_valid, errors = settings.is_valid()

    assert not is_valid
    assert any("overlap" in error.lower() for error in errors)


def test_settings_validation_with_invalid_questions_per_chunk():
    """Test settings validation with no HyPE questions per chunk."""
    settings = Settings()
    settings.questions_per_chunk = 0

    is_valid, errors = settings.is_valid()

    assert not is_valid
    assert any("questions_per_chunk" in error for error in errors)


def test_settings_validation_with_invalid_temperature():
    """Test settings validation with temperature out of range."""
    settings = Settings()
    settings.temperature = 3.0  # Out of range

    is_valid, errors = settings.is_valid()

    assert not is_valid
    assert len(errors) >= 1


def test_relative_paths_resolve_against_project_root(temp_config_dir):
    """Test that index paths become absolute under project_root."""
    settings = Settings(project_root=temp_config_dir)

    assert Path(settings.index_path) == temp_config_dir / "data/index/basic.index.json"
    assert settings.get_index_path() == Path(settings.index_path)
    assert settings.get_index_path(hype=True) == Path(settings.hype_index_path)


def test_ensure_directories(temp_config_dir):
    """Test that data directories are created on demand."""
    settings = Settings(project_root=temp_config_dir)

    settings.ensure_directories()

    assert (temp_config_dir / "data" / "documents").is_dir()
    assert (temp_config_dir / "data" / "index").is_dir()


@patch.dict(
    "os.environ",
    {
        "CHUNK_SIZE": "500",
        "EMBEDDING_MODEL": "custom-model",
        "CHAT_MODEL": "custom-chat-model",
        "QUESTIONS_PER_CHUNK": "3",
        "HYPE_INDEX_PATH": "/tmp/custom/hype.json",
    },
)
def test_environment_variables_override_defaults():
    """Test that environment variables override default settings."""
    settings = Settings.load()

    assert settings.chunk_size == 500
    assert settings.embedding_model == "custom-model"
    assert settings.chat_model == "custom-chat-model"
    assert settings.questions_per_chunk == 3
    assert settings.hype_index_path == "/tmp/custom/hype.json"


def test_save_and_load_user_config(temp_config_dir):
    """Test saving and loading user configuration."""
    settings = Settings()
    settings.project_root = temp_config_dir

    # Modify some settings
    settings.chat_model = "custom-model"
    settings.questions_per_chunk = 7
    settings.semantic_chunking = True

    # Save configuration
    config_file = settings.save_user_config()

    # Verify file was created
    assert config_file == temp_config_dir / "config" / "user_config.json"
    assert json.loads(config_file.read_text())["chat_model"] == "custom-model"

    # Load configuration into new settings instance
    new_settings = Settings()
    new_settings.project_root = temp_config_dir
    new_settings.load_user_config()

    assert new_settings.chat_model == "custom-model"
    assert new_settings.questions_per_chunk == 7
    assert new_settings.semantic_chunking is True


def test_save_user_config_creates_directory_if_missing(temp_config_dir):
    """Test that save_user_config creates config directory if it doesn't exist."""
    settings = Settings()
    settings.project_root = temp_config_dir

    # Config directory shouldn't exist yet
    config_dir = temp_config_dir / "config"
    assert not config_dir.exists()

    # Save should create directory
    settings.save_user_config()

    assert config_dir.exists()
    assert (config_dir / "user_config.json").exists()


def test_load_user_config_handles_missing_file_gracefully(temp_config_dir):
    """Test that load_user_config handles missing config file gracefully."""
    settings = Settings()
    settings.project_root = temp_config_dir
    original_model = settings.chat_model

    # Try to load non-existent config
    settings.load_user_config()

    # Settings should remain unchanged
    assert settings.chat_model == original_model


def test_load_user_config_handles_invalid_json_gracefully(temp_config_dir):
    """Test that load_user_config handles invalid JSON gracefully."""
    settings = Settings()
    settings.project_root = temp_config_dir
    original_model = settings.chat_model

    # Create config directory and invalid JSON file
    config_dir = temp_config_dir / "config"
    config_dir.mkdir()
    config_file = config_dir / "user_config.json"
    config_file.write_text("invalid json content")

    # Load should not crash
    settings.load_user_config()

    # Settings should remain unchanged
    assert settings.chat_model == original_model


def test_load_user_config_ignores_unknown_keys(temp_config_dir):
    """Test that keys that are not settings are skipped."""
    settings = Settings()
    settings.project_root = temp_config_dir
    config_dir = temp_config_dir / "config"
    config_dir.mkdir()
    (config_dir / "user_config.json").write_text(
        json.dumps({"not_a_setting": 1, "top_k_retrieval": 9})
    )

    settings.load_user_config()

    assert settings.top_k_retrieval == 9
    assert not hasattr(settings, "not_a_setting")


# Tests for lazy settings loading


def test_lazy_settings_delay_loading_until_accessed():
    """Test that lazy settings are not loaded until accessed."""
    lazy_settings = _LazySettings()

    # Settings should not be loaded yet
    assert lazy_settings._settings is None

    # Access an attribute to trigger loading
    _ = lazy_settings.chunk_size

    # Now settings should be loaded
    assert lazy_settings._settings is not None


def test_lazy_settings_allow_setting_attributes():
    """Test that lazy settings allow setting attributes."""
    lazy_settings = _LazySettings()

    # Set an attribute
    lazy_settings.chunk_size = 500

    # Verify it was set
    assert lazy_settings.chunk_size == 500
    assert lazy_settings._settings is not None


def test_lazy_settings_preserve_attribute_changes():
    """Test that lazy settings preserve attribute changes."""
    lazy_settings = _LazySettings()

    # Set multiple attributes
    lazy_settings.chunk_size = 800
    lazy_settings.temperature = 0.5

    # Verify both are preserved
    assert lazy_settings.chunk_size == 800
    assert lazy_settings.temperature == 0.5
