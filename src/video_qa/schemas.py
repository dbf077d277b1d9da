"""Pydantic schemas for the video Q&A pipeline."""

import uuid
from datetime import UTC, datetime
from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ProcessingState(str, Enum):
    """Lifecycle state of the video currently being handled."""

    IDLE = "idle"
    PROCESSING = "processing"
    READY = "ready"
    ERROR = "error"


class VideoMetadata(BaseModel):
    """YouTube video metadata.

    Used for display and as context for answer generation. Only the title is
    consumed by the core.
    """

    id: str
    title: str
    url: str
    author_name: str | None = None
    thumbnail_url: str


class Chunk(BaseModel):
    """Bounded span of transcript text used as a retrieval unit.

    Chunks are numbered from 0 in transcript order and never change after
    creation.
    """

    model_config = ConfigDict(frozen=True)

    id: int
    text: str


class RankedChunk(BaseModel):
    """A chunk paired with its similarity to a query."""

    model_config = ConfigDict(frozen=True)

    chunk: Chunk
    similarity: float


class ChatMessage(BaseModel):
    """One entry of the conversation history.

    ``context`` lists the ids of the chunks an assistant answer was grounded on.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    role: Literal["user", "assistant"]
    content: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
    context: list[int] | None = None


class VideoSession(BaseModel):
    """In-memory aggregate of one processed video and its conversation.

    Holds the transcript, its chunks and their embeddings (position-aligned)
    plus the append-only message history.
    """

    id: str
    title: str
    metadata: VideoMetadata
    transcript: str
    chunks: list[Chunk]
    embeddings: list[list[float]]
    messages: list[ChatMessage] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @model_validator(mode="after")
    def _check_alignment(self) -> "VideoSession":
        if len(self.embeddings) != len(self.chunks):
            raise ValueError(
                f"embedding count ({len(self.embeddings)}) does not match "
                f"chunk count ({len(self.chunks)})"
            )
        return self

    def add_message(
        self,
        role: Literal["user", "assistant"],
        content: str,
        context: list[int] | None = None,
    ) -> ChatMessage:
        """Append a message to the history and return it."""
        message = ChatMessage(role=role, content=content, context=context)
        self.messages.append(message)
        return message
