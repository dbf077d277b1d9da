"""Chunking service for sentence-aware transcript segmentation."""

import re

from src.utils.logging import get_logger

from .config import VideoQAConfig
from .schemas import Chunk

logger = get_logger(__name__)

_SENTENCE_BOUNDARY = re.compile(r"[.!?]+")


def split_sentences(text: str) -> list[str]:
    """Split text into sentence units terminated with a period.

    Runs of ``.``, ``!`` and ``?`` end a sentence. Units that are empty after
    trimming are dropped.

    Args:
        text: Raw transcript text.

    Returns:
        Trimmed sentences, each ending with ".".
    """
    return [
        f"{part.strip()}."
        for part in _SENTENCE_BOUNDARY.split(text)
        if part.strip()
    ]


class ChunkingService:
    """Service for chunking transcripts into overlapping text segments.

    Sentences are packed into chunks of roughly ``chunk_size`` characters. Each
    new chunk starts with the last ``chunk_overlap`` words of the previous one
    so that context spanning a boundary is retrievable from either side.
    """

    def __init__(self, config: VideoQAConfig):
        """Initialize chunking service with configuration.

        Args:
            config: Configuration object with chunk size and overlap.
        """
        self.config = config
        logger.info(
            "chunking_service_initialized",
            chunk_size=config.chunk_size,
            chunk_overlap=config.chunk_overlap,
        )

    def chunk_text(self, text: str) -> list[Chunk]:
        """Chunk transcript text on sentence boundaries.

        The size bound is soft: a single sentence longer than ``chunk_size`` is
        kept whole rather than split mid-sentence.

        Args:
            text: Full transcript text.

        Returns:
            Ordered chunks with sequential ids starting at 0. Empty when the
            text contains no sentences.
        """
        sentences = split_sentences(text)
        logger.info(
            "chunking_started",
            text_length=len(text),
            sentences=len(sentences),
        )

        chunks: list[Chunk] = []
        current = ""

        for sentence in sentences:
            if len(current) + len(sentence) > self.config.chunk_size and current:
                chunks.append(Chunk(id=len(chunks), text=current.strip()))
                overlap = self._overlap_words(current)
                current = f"{overlap} {sentence}" if overlap else sentence
            else:
                current = f"{current} {sentence}" if current else sentence

        if current.strip():
            chunks.append(Chunk(id=len(chunks), text=current.strip()))

        logger.info("chunking_completed", chunks_created=len(chunks))
        return chunks

    def _overlap_words(self, text: str) -> str:
        """Return the trailing ``chunk_overlap`` words of a closed chunk."""
        if self.config.chunk_overlap <= 0:
            return ""
        words = text.split()
        return " ".join(words[-self.config.chunk_overlap :])
