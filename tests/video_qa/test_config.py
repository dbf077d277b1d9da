"""Unit tests for video Q&A configuration."""

import pytest
from pydantic import ValidationError

from src.video_qa.config import VideoQAConfig, get_config

_ENV_VARS = [
    "SUPADATA_API_KEY",
    "CHUNK_SIZE_CHARS",
    "CHUNK_OVERLAP_WORDS",
    "EMBEDDING_PROVIDER",
    "EMBEDDING_API_KEY",
    "EMBEDDING_MODEL_CHOICE",
    "EMBEDDING_DIMENSIONS",
    "EMBEDDING_CONCURRENCY",
    "LLM_API_KEY",
    "LLM_CHOICE",
    "RAG_TOP_K",
    "RELEVANCE_THRESHOLD",
    "SUMMARY_CHUNK_COUNT",
    "MIN_TRANSCRIPT_CHARS",
    "METADATA_REQUIRED",
]


@pytest.mark.unit
class TestVideoQAConfig:
    """Test suite for VideoQAConfig class."""

    @pytest.fixture(autouse=True)
    def clean_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Remove variables that would override defaults."""
        for name in _ENV_VARS:
            monkeypatch.delenv(name, raising=False)

    def test_config_with_defaults(self) -> None:
        """Test config creation with default values."""
        config = VideoQAConfig()

        assert config.chunk_size == 500
        assert config.chunk_overlap == 50
        assert config.embedding_provider == "openai"
        assert config.embedding_model == "text-embedding-3-small"
        assert config.embedding_dimensions == 1536
        assert config.embedding_concurrency == 1
        assert config.llm_choice == "gpt-4o-mini"
        assert config.top_k == 3
        assert config.relevance_threshold == 0.3
        assert config.summary_chunk_count == 5
        assert config.min_transcript_chars == 50
        assert config.metadata_required is False

    def test_defaults_select_demo_providers(self) -> None:
        """Test that no credentials means every provider runs in demo mode."""
        config = VideoQAConfig()

        assert config.embeddings_configured is False
        assert config.llm_configured is False
        assert config.transcripts_configured is False

    def test_config_from_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test config loads from environment variables."""
        monkeypatch.setenv("CHUNK_SIZE_CHARS", "800")
        monkeypatch.setenv("CHUNK_OVERLAP_WORDS", "20")
        monkeypatch.setenv("EMBEDDING_API_KEY", "env_key")
        monkeypatch.setenv("LLM_CHOICE", "gpt-4o")
        monkeypatch.setenv("RAG_TOP_K", "5")
        monkeypatch.setenv("RELEVANCE_THRESHOLD", "0.45")
        monkeypatch.setenv("METADATA_REQUIRED", "true")

        config = VideoQAConfig()

        assert config.chunk_size == 800
        assert config.chunk_overlap == 20
        assert config.embedding_api_key == "env_key"
        assert config.embeddings_configured is True
        assert config.llm_choice == "gpt-4o"
        assert config.top_k == 5
        assert config.relevance_threshold == 0.45
        assert config.metadata_required is True

    def test_ollama_counts_as_configured_embeddings(self) -> None:
        """Test that Ollama needs no embedding API key."""
        config = VideoQAConfig(embedding_provider="ollama", embedding_api_key="")

        assert config.embeddings_configured is True

    def test_explicit_values_override_environment(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test that constructor arguments win over environment variables."""
        monkeypatch.setenv("RAG_TOP_K", "9")

        config = VideoQAConfig(top_k=2)

        assert config.top_k == 2

    @pytest.mark.parametrize(
        "field,value",
        [("chunk_size", 0), ("chunk_overlap", -1), ("top_k", 0), ("embedding_concurrency", 0)],
    )
    def test_invalid_values_rejected(self, field: str, value: int) -> None:
        """Test that out-of-range settings fail validation."""
        with pytest.raises(ValidationError):
            VideoQAConfig(**{field: value})

    def test_get_config_function(self) -> None:
        """Test get_config helper function returns valid config."""
        config = get_config()

        assert isinstance(config, VideoQAConfig)
        assert config.chunk_size > 0
        assert config.top_k >= 1
