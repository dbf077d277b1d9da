"""FastAPI application for the YouTube video Q&A service.

Exposes video processing, question answering, summaries and session reset
over a small JSON API. One in-memory session is shared by all callers.
"""

from datetime import UTC, datetime
from typing import Any

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from src.utils.logging import configure_logging, get_logger
from src.video_qa.config import get_config
from src.video_qa.errors import (
    AnswerGenerationError,
    ChunkingError,
    IngestionCancelledError,
    InvalidQuestionError,
    InvalidVideoURLError,
    MetadataUnavailableError,
    NoActiveSessionError,
    TranscriptUnavailableError,
    VideoQAError,
)
from src.video_qa.schemas import ChatMessage, VideoSession
from src.video_qa.service import VideoQAService

logger = get_logger(__name__)

# Global service initialized in lifespan
video_qa_service: VideoQAService | None = None

_ERROR_STATUS: dict[type[VideoQAError], int] = {
    InvalidVideoURLError: 400,
    InvalidQuestionError: 400,
    TranscriptUnavailableError: 422,
    ChunkingError: 422,
    IngestionCancelledError: 409,
    NoActiveSessionError: 409,
    MetadataUnavailableError: 502,
    AnswerGenerationError: 502,
}


# ==============================================================================
# Lifespan Management
# ==============================================================================


async def lifespan(app: FastAPI):  # type: ignore[misc]
    """Lifecycle manager for the FastAPI application.

    Builds the service once from the environment configuration.
    """
    global video_qa_service

    logger.info("application_startup_started")

    try:
        config = get_config()
        configure_logging(config.log_level)
        video_qa_service = VideoQAService(config)

        logger.info(
            "application_startup_completed",
            **video_qa_service.provider_modes,
        )

    except Exception:
        logger.exception("application_startup_failed")
        raise

    yield  # Application runs here

    logger.info("application_shutdown_started")
    video_qa_service.reset()
    video_qa_service = None
    logger.info("application_shutdown_completed")


# ==============================================================================
# FastAPI Application Setup
# ==============================================================================

app = FastAPI(
    title="YouTube Video Q&A API",
    description="Ask questions about a YouTube video's transcript",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_service() -> VideoQAService:
    """Dependency returning the running service."""
    if video_qa_service is None:
        raise HTTPException(status_code=503, detail="Service not initialized")
    return video_qa_service


def _to_http_error(error: VideoQAError) -> HTTPException:
    status_code = _ERROR_STATUS.get(type(error), 500)
    return HTTPException(status_code=status_code, detail=str(error))


# ==============================================================================
# Request/Response Models
# ==============================================================================


class VideoRequest(BaseModel):
    """Request model for processing a video."""

    url: str


class QuestionRequest(BaseModel):
    """Request model for asking a question."""

    question: str


class SessionResponse(BaseModel):
    """Processed video overview."""

    id: str
    title: str
    url: str
    thumbnail_url: str
    chunk_count: int
    messages: list[ChatMessage]

    @classmethod
    def from_session(cls, session: VideoSession) -> "SessionResponse":
        return cls(
            id=session.id,
            title=session.title,
            url=session.metadata.url,
            thumbnail_url=session.metadata.thumbnail_url,
            chunk_count=len(session.chunks),
            messages=session.messages,
        )


class AnswerResponse(BaseModel):
    """Answer plus the updated conversation history."""

    answer: str
    messages: list[ChatMessage]


class SummaryResponse(BaseModel):
    """Generated video summary."""

    summary: str


# ==============================================================================
# API Endpoints
# ==============================================================================


@app.get("/health")
async def health_check() -> dict[str, Any]:
    """Health check endpoint.

    Returns:
        Health status, timestamp, processing state and provider modes.
    """
    return {
        "status": "healthy",
        "timestamp": datetime.now(UTC).isoformat(),
        "state": video_qa_service.store.state.value if video_qa_service else None,
        "providers": video_qa_service.provider_modes if video_qa_service else {},
    }


@app.post("/api/videos", response_model=SessionResponse)
async def process_video(
    request: VideoRequest,
    service: VideoQAService = Depends(get_service),
) -> SessionResponse:
    """Process a YouTube video and make it the active session."""
    logger.info("process_video_request", url=request.url)

    try:
        session = await service.process_video(request.url)
    except VideoQAError as e:
        raise _to_http_error(e) from e

    return SessionResponse.from_session(session)


@app.get("/api/session", response_model=SessionResponse)
async def get_session(service: VideoQAService = Depends(get_service)) -> SessionResponse:
    """Return the active session."""
    try:
        session = service.store.require()
    except VideoQAError as e:
        raise _to_http_error(e) from e
    return SessionResponse.from_session(session)


@app.post("/api/questions", response_model=AnswerResponse)
async def ask_question(
    request: QuestionRequest,
    service: VideoQAService = Depends(get_service),
) -> AnswerResponse:
    """Answer a question about the active video."""
    logger.info("question_request", question_length=len(request.question))

    try:
        answer = await service.ask_question(request.question)
    except VideoQAError as e:
        raise _to_http_error(e) from e

    return AnswerResponse(answer=answer, messages=service.store.require().messages)


@app.post("/api/summary", response_model=SummaryResponse)
async def generate_summary(service: VideoQAService = Depends(get_service)) -> SummaryResponse:
    """Summarize the active video."""
    try:
        summary = await service.generate_summary()
    except VideoQAError as e:
        raise _to_http_error(e) from e

    return SummaryResponse(summary=summary)


@app.get("/api/messages", response_model=list[ChatMessage])
async def list_messages(service: VideoQAService = Depends(get_service)) -> list[ChatMessage]:
    """Return the conversation history of the active video, oldest first."""
    session = service.session
    return session.messages if session else []


@app.delete("/api/session", status_code=204)
async def reset_session(service: VideoQAService = Depends(get_service)) -> None:
    """Discard the active session."""
    service.reset()
    logger.info("session_reset_request")
