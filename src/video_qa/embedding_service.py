"""Embedding services for generating text embeddings.

Two strategies share the ``Embedder`` protocol: ``OpenAIEmbeddingService``
calls an OpenAI-compatible API (OpenAI, OpenRouter, Ollama) and
``DemoEmbeddingService`` produces pseudo-random vectors so the pipeline runs
end-to-end without credentials. ``create_embedder`` picks one at startup.
"""

import asyncio
import hashlib
import random
from typing import Protocol

import numpy as np
from openai import APITimeoutError, AsyncOpenAI, RateLimitError

from src.utils.logging import get_logger

from .config import VideoQAConfig

logger = get_logger(__name__)


def pseudo_random_embedding(text: str, dimensions: int) -> list[float]:
    """Build a non-semantic vector with components in [-0.5, 0.5).

    The generator is seeded from the text digest, so the same text always maps
    to the same vector while different texts are close to orthogonal.

    Args:
        text: Text the vector stands in for.
        dimensions: Vector length.

    Returns:
        Embedding-shaped list of floats.
    """
    seed = int.from_bytes(hashlib.sha256(text.encode("utf-8")).digest()[:8], "big")
    rng = np.random.default_rng(seed)
    return (rng.random(dimensions) - 0.5).tolist()


class Embedder(Protocol):
    """Maps text to a fixed-length vector."""

    @property
    def dimensions(self) -> int: ...

    async def embed_text(self, text: str) -> list[float]: ...

    async def embed_batch(self, texts: list[str]) -> list[list[float]]: ...


class AsyncRateLimiter:
    """Spaces out calls so that at least ``min_interval`` seconds separate them.

    Callers queue on a lock; each one waits for the remainder of the interval
    since the previous call started. An interval of 0 disables the limiter.
    """

    def __init__(self, min_interval: float):
        self.min_interval = min_interval
        self._lock = asyncio.Lock()
        self._last_call: float | None = None

    async def acquire(self) -> None:
        if self.min_interval <= 0:
            return
        async with self._lock:
            loop = asyncio.get_running_loop()
            if self._last_call is not None:
                wait = self.min_interval - (loop.time() - self._last_call)
                if wait > 0:
                    await asyncio.sleep(wait)
            self._last_call = loop.time()


class DemoEmbeddingService:
    """Embedding fallback used when no provider is configured.

    Similarity between demo vectors carries no meaning; it only keeps the
    retrieval pipeline exercisable.
    """

    def __init__(self, config: VideoQAConfig):
        self.config = config
        logger.warning(
            "demo_embeddings_enabled",
            dimensions=config.embedding_dimensions,
            reason="embedding_api_key_missing",
        )

    @property
    def dimensions(self) -> int:
        return self.config.embedding_dimensions

    async def embed_text(self, text: str) -> list[float]:
        return pseudo_random_embedding(text, self.dimensions)

    async def embed_batch(self, texts: list[str]) -> list[list[float]]:
        return [await self.embed_text(text) for text in texts]


class OpenAIEmbeddingService:
    """Service for generating text embeddings through an OpenAI-compatible API.

    Calls are spaced by an ``AsyncRateLimiter`` and capped at
    ``embedding_concurrency`` in flight. Rate-limit (429) and timeout errors are
    retried with exponential backoff. When a text still cannot be embedded, a
    pseudo-random vector is substituted and the pipeline continues.
    """

    def __init__(self, config: VideoQAConfig, client: AsyncOpenAI | None = None):
        """Initialize embedding service with configuration.

        Args:
            config: Configuration object with embedding provider settings.
            client: Optional pre-built client, mainly for tests.
        """
        self.config = config
        self.client = client or self._get_client()
        self.rate_limiter = AsyncRateLimiter(config.embedding_min_interval_seconds)
        self._semaphore = asyncio.Semaphore(config.embedding_concurrency)
        self._dimensions = config.embedding_dimensions
        logger.info(
            "embedding_service_initialized",
            provider=config.embedding_provider,
            model=config.embedding_model,
            base_url=config.embedding_base_url,
            concurrency=config.embedding_concurrency,
        )

    def _get_client(self) -> AsyncOpenAI:
        """Initialize OpenAI-compatible client based on provider.

        Returns:
            Configured AsyncOpenAI client instance.
        """
        if self.config.embedding_provider == "ollama":
            # Ollama doesn't require a real API key
            api_key = "ollama"
        else:
            api_key = self.config.embedding_api_key

        return AsyncOpenAI(
            base_url=self.config.embedding_base_url,
            api_key=api_key,
            timeout=self.config.request_timeout_seconds,
            max_retries=0,
        )

    @property
    def dimensions(self) -> int:
        """Vector length; follows the provider once a real embedding is seen."""
        return self._dimensions

    async def embed_text(self, text: str) -> list[float]:
        """Generate embedding for a single text.

        Args:
            text: Text content to embed.

        Returns:
            Embedding vector, or a pseudo-random fallback when the provider
            keeps failing.
        """
        async with self._semaphore:
            for attempt in range(1, self.config.embedding_max_retries + 1):
                await self.rate_limiter.acquire()
                try:
                    response = await self.client.embeddings.create(
                        input=text,
                        model=self.config.embedding_model,
                    )
                    embedding = response.data[0].embedding
                    self._dimensions = len(embedding)
                    logger.debug(
                        "embedding_generated",
                        text_length=len(text),
                        embedding_dim=len(embedding),
                    )
                    return embedding

                except (RateLimitError, APITimeoutError) as e:
                    if attempt >= self.config.embedding_max_retries:
                        logger.warning(
                            "embedding_retries_exhausted",
                            attempts=attempt,
                            error_type=type(e).__name__,
                        )
                        break
                    delay = self._backoff_delay(attempt)
                    logger.info(
                        "embedding_retry_scheduled",
                        attempt=attempt,
                        delay_seconds=round(delay, 3),
                        error_type=type(e).__name__,
                    )
                    await asyncio.sleep(delay)

                except Exception as e:
                    logger.exception(
                        "embedding_failed",
                        text_length=len(text),
                        error_type=type(e).__name__,
                    )
                    break

        logger.warning(
            "embedding_fallback_used",
            text_length=len(text),
            dimensions=self.dimensions,
        )
        return pseudo_random_embedding(text, self.dimensions)

    async def embed_batch(self, texts: list[str]) -> list[list[float]]:
        """Generate embeddings for multiple texts.

        Texts are submitted together but only ``embedding_concurrency`` calls
        run at once; results keep the input order.

        Args:
            texts: List of text strings to embed.

        Returns:
            List of embedding vectors in the same order as input texts.
        """
        logger.info(
            "batch_embedding_started",
            count=len(texts),
            concurrency=self.config.embedding_concurrency,
        )

        embeddings = list(await asyncio.gather(*[self.embed_text(text) for text in texts]))

        logger.info(
            "batch_embedding_completed",
            total_embeddings=len(embeddings),
        )
        return embeddings

    def _backoff_delay(self, attempt: int) -> float:
        delay = self.config.embedding_backoff_seconds * 2 ** (attempt - 1)
        return delay + random.uniform(0, delay * 0.25)


def create_embedder(config: VideoQAConfig) -> Embedder:
    """Select the embedding strategy for this process.

    Args:
        config: Loaded configuration.

    Returns:
        Live OpenAI-compatible embedder when credentials (or Ollama) are
        configured, otherwise the demo embedder.
    """
    if config.embeddings_configured:
        return OpenAIEmbeddingService(config)
    return DemoEmbeddingService(config)
