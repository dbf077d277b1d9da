"""Cosine-similarity ranking of transcript chunks against a query."""

from collections.abc import Sequence

import numpy as np

from .schemas import Chunk, RankedChunk


def cosine_similarity(vec1: Sequence[float], vec2: Sequence[float]) -> float:
    """Compute cosine similarity between two vectors.

    Returns 0.0 when either vector has zero norm.

    Raises:
        ValueError: If the vectors have different lengths.
    """
    v1 = np.asarray(vec1, dtype=float)
    v2 = np.asarray(vec2, dtype=float)

    if v1.shape != v2.shape:
        raise ValueError(f"vector dimensions differ: {v1.shape[0]} != {v2.shape[0]}")

    norm1 = np.linalg.norm(v1)
    norm2 = np.linalg.norm(v2)

    if norm1 == 0 or norm2 == 0:
        return 0.0

    return float(np.dot(v1, v2) / (norm1 * norm2))


def rank_chunks(
    query_embedding: Sequence[float],
    chunks: Sequence[Chunk],
    embeddings: Sequence[Sequence[float]],
    top_k: int = 3,
) -> list[RankedChunk]:
    """Return the ``top_k`` chunks most similar to the query.

    Scores are sorted in descending order; equal scores keep transcript order.
    Asking for more chunks than exist returns all of them.

    Args:
        query_embedding: Embedding of the user's question.
        chunks: Chunks of the session, position-aligned with ``embeddings``.
        embeddings: One vector per chunk.
        top_k: Maximum number of results.

    Returns:
        Ranked chunks with their similarity scores.

    Raises:
        ValueError: If ``top_k`` < 1 or chunks and embeddings are misaligned.
    """
    if top_k < 1:
        raise ValueError("top_k must be at least 1")
    if len(chunks) != len(embeddings):
        raise ValueError("chunks and embeddings must have the same length")

    scored = [
        RankedChunk(chunk=chunk, similarity=cosine_similarity(query_embedding, embedding))
        for chunk, embedding in zip(chunks, embeddings, strict=True)
    ]
    # sorted() is stable, so ties stay in chunk order
    scored = sorted(scored, key=lambda item: item.similarity, reverse=True)
    return scored[:top_k]
