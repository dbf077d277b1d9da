"""Main service orchestrating video ingestion and question answering."""

import asyncio

from src.utils.logging import get_logger

from .answer_service import AnswerProvider, DemoAnswerProvider, create_answer_provider
from .chunking_service import ChunkingService
from .config import VideoQAConfig, get_config
from .embedding_service import (
    DemoEmbeddingService,
    Embedder,
    create_embedder,
    pseudo_random_embedding,
)
from .errors import (
    AnswerGenerationError,
    ChunkingError,
    IngestionCancelledError,
    InvalidQuestionError,
    TranscriptUnavailableError,
    VideoQAError,
)
from .ranking import rank_chunks
from .schemas import VideoSession
from .session_store import SessionStore
from .youtube_service import (
    DemoTranscriptSource,
    OEmbedMetadataSource,
    TranscriptSource,
    create_transcript_source,
    extract_video_id,
)

logger = get_logger(__name__)

WELCOME_MESSAGE = """✅ Video processed successfully! I've analyzed "{title}" and can now answer questions about its content.

**What I can help you with:**
• Answer specific questions about the video content
• Provide summaries of key points
• Find relevant information from the transcript
• Explain concepts discussed in the video

**Try asking something like:**
• "What is the main topic of this video?"
• "Can you summarize the key points?"
• "Does this video mention [specific topic]?"

*Ready to chat! Ask me anything about the video.*"""

QUESTION_FAILED_MESSAGE = (
    "❌ I apologize, but I encountered an error while processing your question. "
    "This might be due to API limitations or network issues. Please try again "
    "or rephrase your question."
)


class VideoQAService:
    """Orchestrates the video Q&A workflow.

    Provider strategies are chosen once here from the injected configuration.
    The service owns the ``SessionStore``: ingestion replaces the session,
    questions and summaries append to its history, ``reset`` clears it. A new
    ``process_video`` call cancels any ingestion still running so that stale
    results never reach the store.
    """

    def __init__(
        self,
        config: VideoQAConfig | None = None,
        *,
        transcript_source: TranscriptSource | None = None,
        metadata_source: OEmbedMetadataSource | None = None,
        embedder: Embedder | None = None,
        answer_provider: AnswerProvider | None = None,
        store: SessionStore | None = None,
    ):
        """Initialize the service with all required collaborators.

        Args:
            config: Configuration object. If None, loads from environment.
            transcript_source: Override for the transcript source.
            metadata_source: Override for the metadata source.
            embedder: Override for the embedding strategy.
            answer_provider: Override for the answer strategy.
            store: Override for the session store.
        """
        self.config = config or get_config()
        self.transcript_source = transcript_source or create_transcript_source(self.config)
        self.metadata_source = metadata_source or OEmbedMetadataSource(self.config)
        self.chunking_service = ChunkingService(self.config)
        self.embedder = embedder or create_embedder(self.config)
        self.answer_provider = answer_provider or create_answer_provider(self.config)
        self.store = store or SessionStore()
        self._ingestion: asyncio.Task[VideoSession] | None = None

        logger.info("video_qa_service_initialized", **self.provider_modes)

    @property
    def provider_modes(self) -> dict[str, str]:
        """Which collaborators run live and which run in demo mode."""
        return {
            "transcripts": "demo"
            if isinstance(self.transcript_source, DemoTranscriptSource)
            else "live",
            "embeddings": "demo" if isinstance(self.embedder, DemoEmbeddingService) else "live",
            "answers": "demo"
            if isinstance(self.answer_provider, DemoAnswerProvider)
            else "live",
        }

    @property
    def session(self) -> VideoSession | None:
        return self.store.session

    async def process_video(self, url: str) -> VideoSession:
        """Process a YouTube URL into a new live session.

        The URL is validated before any external call. On failure the previous
        session, if any, is left untouched.

        Args:
            url: YouTube watch or youtu.be URL.

        Returns:
            The new session, already installed in the store.

        Raises:
            InvalidVideoURLError: If the URL holds no video id.
            TranscriptUnavailableError: If no usable transcript exists.
            MetadataUnavailableError: If metadata is required and unavailable.
            ChunkingError: If the transcript yields no chunks.
            IngestionCancelledError: If a newer submission superseded this one.
        """
        try:
            video_id = extract_video_id(url)
        except VideoQAError as e:
            logger.warning("invalid_video_url", url=url)
            # A running ingestion keeps reporting its own progress
            if self._ingestion is None or self._ingestion.done():
                self.store.mark_failed(str(e))
            raise

        previous = self._ingestion
        if previous is not None and not previous.done():
            logger.info("ingestion_superseded", video_id=video_id)
            previous.cancel()

        self.store.mark_processing()
        task = asyncio.create_task(self._ingest(video_id))
        self._ingestion = task

        try:
            session = await task
        except asyncio.CancelledError:
            if self._ingestion is not task:
                logger.info("ingestion_cancelled", video_id=video_id)
                raise IngestionCancelledError(video_id) from None
            # The caller itself was cancelled
            task.cancel()
            self._ingestion = None
            self.store.abandon_processing()
            logger.info("video_processing_abandoned", video_id=video_id)
            raise
        except Exception as e:
            if self._ingestion is task:
                self.store.mark_failed(str(e))
            logger.warning(
                "video_processing_failed",
                video_id=video_id,
                error_type=type(e).__name__,
                error=str(e),
            )
            raise

        if self._ingestion is not task:
            raise IngestionCancelledError(video_id)

        self._ingestion = None
        self.store.replace(session)
        return session

    async def _ingest(self, video_id: str) -> VideoSession:
        """Fetch, chunk and embed one video.

        This method:
        1. Fetches video metadata
        2. Fetches the transcript and checks its length
        3. Chunks the transcript
        4. Generates one embedding per chunk
        5. Builds the session with a welcome message
        """
        logger.info("video_processing_started", video_id=video_id)

        metadata = await self.metadata_source.fetch_metadata(video_id)

        transcript = await self.transcript_source.fetch_transcript(video_id)
        if not transcript or len(transcript) < self.config.min_transcript_chars:
            raise TranscriptUnavailableError(video_id, "transcript too short")

        chunks = self.chunking_service.chunk_text(transcript)
        if not chunks:
            raise ChunkingError(video_id)

        embeddings = await self.embedder.embed_batch([chunk.text for chunk in chunks])

        session = VideoSession(
            id=video_id,
            title=metadata.title,
            metadata=metadata,
            transcript=transcript,
            chunks=chunks,
            embeddings=embeddings,
        )
        session.add_message("assistant", WELCOME_MESSAGE.format(title=session.title))

        logger.info(
            "video_processed",
            video_id=video_id,
            chunks=len(chunks),
            transcript_length=len(transcript),
        )
        return session

    async def ask_question(self, question: str, session: VideoSession | None = None) -> str:
        """Answer a question about the processed video.

        Both the question and the answer are appended to the session history.
        If answering fails, an apology is recorded instead and the error is
        re-raised; the session stays usable for the next question.

        Args:
            question: The user's question.
            session: Session to use; defaults to the live one.

        Returns:
            The answer text.

        Raises:
            InvalidQuestionError: If the question is blank.
            NoActiveSessionError: If no video has been processed.
            AnswerGenerationError: If answer generation fails.
        """
        if not question or not question.strip():
            raise InvalidQuestionError("Question must not be empty")

        session = session or self.store.require()
        session.add_message("user", question)
        logger.info("question_received", video_id=session.id, question_length=len(question))

        try:
            query_embedding = await self.embedder.embed_text(question)
            stored_dimensions = len(session.embeddings[0]) if session.embeddings else 0
            if stored_dimensions and len(query_embedding) != stored_dimensions:
                logger.warning(
                    "embedding_dimension_mismatch",
                    video_id=session.id,
                    query_dimensions=len(query_embedding),
                    stored_dimensions=stored_dimensions,
                )
                query_embedding = pseudo_random_embedding(question, stored_dimensions)
            ranked = rank_chunks(
                query_embedding,
                session.chunks,
                session.embeddings,
                top_k=self.config.top_k,
            )
            answer = await self.answer_provider.answer(question, ranked, session.title)
        except Exception as e:
            logger.exception(
                "question_answering_failed",
                video_id=session.id,
                error_type=type(e).__name__,
            )
            session.add_message("assistant", QUESTION_FAILED_MESSAGE)
            if isinstance(e, VideoQAError):
                raise
            raise AnswerGenerationError() from e

        session.add_message(
            "assistant",
            answer,
            context=[item.chunk.id for item in ranked],
        )
        logger.info(
            "question_answered",
            video_id=session.id,
            top_similarity=ranked[0].similarity if ranked else None,
        )
        return answer

    async def generate_summary(self, session: VideoSession | None = None) -> str:
        """Summarize the processed video and append it to the history.

        Args:
            session: Session to summarize; defaults to the live one.

        Returns:
            Summary text.

        Raises:
            NoActiveSessionError: If no video has been processed.
        """
        session = session or self.store.require()
        summary = await self.answer_provider.summarize(session)
        session.add_message("assistant", summary)
        logger.info("summary_generated", video_id=session.id, summary_length=len(summary))
        return summary

    def reset(self) -> None:
        """Drop the live session and cancel any ingestion in progress."""
        if self._ingestion is not None and not self._ingestion.done():
            self._ingestion.cancel()
        self._ingestion = None
        self.store.clear()
