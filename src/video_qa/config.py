"""Configuration module for the YouTube video Q&A service."""

import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field

# Load environment variables from .env file
load_dotenv()


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes")


class VideoQAConfig(BaseModel):
    """Configuration for the video Q&A pipeline.

    Manages the transcript source, chunking, embedding, retrieval and answer
    generation settings. Every field defaults from an environment variable so a
    single instance can be built at startup and handed to each service; nothing
    reads the environment after that.
    """

    # Transcript and metadata sources
    supadata_api_key: str = Field(
        default_factory=lambda: os.getenv("SUPADATA_API_KEY", "")
    )
    transcript_lang: str = Field(
        default_factory=lambda: os.getenv("TRANSCRIPT_LANG", "en")
    )
    min_transcript_chars: int = Field(
        default_factory=lambda: int(os.getenv("MIN_TRANSCRIPT_CHARS", "50"))
    )
    metadata_required: bool = Field(
        default_factory=lambda: _env_bool("METADATA_REQUIRED")
    )

    # Chunking settings (character-based, overlap in words)
    chunk_size: int = Field(
        default_factory=lambda: int(os.getenv("CHUNK_SIZE_CHARS", "500")), gt=0
    )
    chunk_overlap: int = Field(
        default_factory=lambda: int(os.getenv("CHUNK_OVERLAP_WORDS", "50")), ge=0
    )

    # Embedding settings
    embedding_provider: str = Field(
        default_factory=lambda: os.getenv("EMBEDDING_PROVIDER", "openai")
    )
    embedding_base_url: str = Field(
        default_factory=lambda: os.getenv(
            "EMBEDDING_BASE_URL", "https://api.openai.com/v1"
        )
    )
    embedding_api_key: str = Field(
        default_factory=lambda: os.getenv("EMBEDDING_API_KEY", "")
    )
    embedding_model: str = Field(
        default_factory=lambda: os.getenv(
            "EMBEDDING_MODEL_CHOICE", "text-embedding-3-small"
        )
    )
    embedding_dimensions: int = Field(
        default_factory=lambda: int(os.getenv("EMBEDDING_DIMENSIONS", "1536")), gt=0
    )

    # Embedding throttle
    embedding_concurrency: int = Field(
        default_factory=lambda: int(os.getenv("EMBEDDING_CONCURRENCY", "1")), ge=1
    )
    embedding_min_interval_seconds: float = Field(
        default_factory=lambda: float(
            os.getenv("EMBEDDING_MIN_INTERVAL_SECONDS", "0.1")
        ),
        ge=0.0,
    )
    embedding_max_retries: int = Field(
        default_factory=lambda: int(os.getenv("EMBEDDING_MAX_RETRIES", "3")), ge=1
    )
    embedding_backoff_seconds: float = Field(
        default_factory=lambda: float(os.getenv("EMBEDDING_BACKOFF_SECONDS", "1.0")),
        ge=0.0,
    )

    # Language model settings
    llm_choice: str = Field(
        default_factory=lambda: os.getenv("LLM_CHOICE", "gpt-4o-mini")
    )
    llm_base_url: str = Field(
        default_factory=lambda: os.getenv("LLM_BASE_URL", "https://api.openai.com/v1")
    )
    llm_api_key: str = Field(default_factory=lambda: os.getenv("LLM_API_KEY", ""))
    llm_temperature: float = Field(
        default_factory=lambda: float(os.getenv("LLM_TEMPERATURE", "0.3"))
    )
    answer_max_tokens: int = Field(
        default_factory=lambda: int(os.getenv("ANSWER_MAX_TOKENS", "500"))
    )
    summary_max_tokens: int = Field(
        default_factory=lambda: int(os.getenv("SUMMARY_MAX_TOKENS", "400"))
    )

    # Retrieval settings
    top_k: int = Field(
        default_factory=lambda: int(os.getenv("RAG_TOP_K", "3")), ge=1
    )
    relevance_threshold: float = Field(
        default_factory=lambda: float(os.getenv("RELEVANCE_THRESHOLD", "0.3"))
    )
    summary_chunk_count: int = Field(
        default_factory=lambda: int(os.getenv("SUMMARY_CHUNK_COUNT", "5")), ge=1
    )

    # Misc
    request_timeout_seconds: float = Field(
        default_factory=lambda: float(os.getenv("REQUEST_TIMEOUT_SECONDS", "30.0")),
        gt=0.0,
    )
    log_level: str = Field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))

    @property
    def embeddings_configured(self) -> bool:
        """Whether a live embedding provider can be used."""
        return bool(self.embedding_api_key) or self.embedding_provider == "ollama"

    @property
    def llm_configured(self) -> bool:
        """Whether a live language model can be used."""
        return bool(self.llm_api_key)

    @property
    def transcripts_configured(self) -> bool:
        """Whether the Supadata transcript API can be used."""
        return bool(self.supadata_api_key)


def get_config() -> VideoQAConfig:
    """Get validated configuration instance.

    Returns:
        VideoQAConfig: Validated configuration object with all settings.

    Raises:
        ValidationError: If environment variables hold invalid values.
    """
    return VideoQAConfig()
