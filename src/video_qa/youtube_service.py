"""YouTube sources: video id parsing, transcripts and metadata.

Transcripts come from the Supadata API when a key is configured, otherwise
from a small set of canned demo transcripts. Metadata comes from YouTube's
public oEmbed endpoint.
"""

import asyncio
import re
from typing import Protocol

import httpx
from supadata import Supadata

from src.utils.logging import get_logger

from .config import VideoQAConfig
from .errors import InvalidVideoURLError, MetadataUnavailableError, TranscriptUnavailableError
from .schemas import VideoMetadata

logger = get_logger(__name__)

_VIDEO_ID_PATTERN = re.compile(r"(?:youtube\.com/watch\?v=|youtu\.be/)([a-zA-Z0-9_-]{11})")

OEMBED_URL = "https://www.youtube.com/oembed"

DEMO_TRANSCRIPTS = {
    "dQw4w9WgXcQ": (
        'This is a classic music video featuring Rick Astley performing "Never '
        'Gonna Give You Up". The song became famous as part of internet culture '
        'and "Rickrolling". The video shows Rick Astley singing and dancing in '
        "various settings."
    ),
    "jNQXAC9IVRw": (
        "This video discusses the fundamentals of machine learning and artificial "
        "intelligence. It covers topics like neural networks, deep learning "
        "algorithms, and practical applications in various industries. Key "
        "concepts include supervised learning, unsupervised learning, and "
        "reinforcement learning."
    ),
    "ScMzIvxBSi4": (
        "A comprehensive tutorial on React.js development covering components, "
        "hooks, state management, and modern React patterns. The video explains "
        "how to build scalable applications using React best practices and "
        "includes practical examples."
    ),
}

DEFAULT_DEMO_TRANSCRIPT = (
    "This video content covers various topics and provides valuable information "
    "on the subject matter. The speaker discusses important concepts and shares "
    "insights based on their expertise in the field."
)


def extract_video_id(url: str) -> str:
    """Extract the 11-character video id from a watch or youtu.be URL.

    Args:
        url: URL such as ``https://www.youtube.com/watch?v=dQw4w9WgXcQ`` or
            ``https://youtu.be/dQw4w9WgXcQ``.

    Returns:
        The video identifier.

    Raises:
        InvalidVideoURLError: If no identifier can be found.

    Examples:
        >>> extract_video_id("https://youtu.be/dQw4w9WgXcQ?t=42")
        'dQw4w9WgXcQ'
    """
    match = _VIDEO_ID_PATTERN.search(url or "")
    if not match:
        raise InvalidVideoURLError(url)
    return match.group(1)


def format_video_url(video_id: str) -> str:
    """Canonical watch URL for a video id."""
    return f"https://www.youtube.com/watch?v={video_id}"


def thumbnail_url(video_id: str) -> str:
    """Highest-resolution thumbnail URL for a video id."""
    return f"https://img.youtube.com/vi/{video_id}/maxresdefault.jpg"


class TranscriptSource(Protocol):
    """Returns the concatenated spoken text of a video."""

    async def fetch_transcript(self, video_id: str) -> str: ...


class DemoTranscriptSource:
    """Canned transcripts so the app runs without a transcript API key."""

    def __init__(self) -> None:
        logger.warning("demo_transcripts_enabled", reason="supadata_api_key_missing")

    async def fetch_transcript(self, video_id: str) -> str:
        transcript = DEMO_TRANSCRIPTS.get(video_id, DEFAULT_DEMO_TRANSCRIPT)
        logger.info("demo_transcript_served", video_id=video_id, length=len(transcript))
        return transcript


class SupadataTranscriptSource:
    """Service for fetching YouTube transcripts via Supadata API.

    The SDK is synchronous, so each request runs in a worker thread and is
    bounded by the configured request timeout.
    """

    def __init__(self, config: VideoQAConfig, client: Supadata | None = None):
        """Initialize transcript source with configuration.

        Args:
            config: Configuration object with Supadata API key and settings.
            client: Optional pre-built Supadata client, mainly for tests.
        """
        self.config = config
        self.client = client or Supadata(api_key=config.supadata_api_key)
        logger.info(
            "transcript_source_initialized",
            api_key_present=bool(config.supadata_api_key),
            lang=config.transcript_lang,
        )

    def _fetch(self, video_id: str) -> str:
        response = self.client.youtube.transcript(
            video_id=video_id,
            lang=self.config.transcript_lang,
            text=True,
        )
        content = response.content
        if not isinstance(content, str):
            # Segment list; happens when the API ignores the plain-text flag
            content = " ".join(segment.text for segment in content)
        return content

    async def fetch_transcript(self, video_id: str) -> str:
        """Fetch the plain-text transcript for a video.

        Args:
            video_id: YouTube video ID.

        Returns:
            Transcript text.

        Raises:
            TranscriptUnavailableError: If the video has no transcript, the
                request times out or the API call fails.
        """
        logger.info("fetching_transcript", video_id=video_id)

        try:
            transcript = await asyncio.wait_for(
                asyncio.to_thread(self._fetch, video_id),
                timeout=self.config.request_timeout_seconds,
            )
        except TimeoutError as e:
            logger.warning("transcript_fetch_timeout", video_id=video_id)
            raise TranscriptUnavailableError(video_id, "request timed out") from e
        except Exception as e:
            # Check if transcript is unavailable (common case, not an error)
            error_str = str(e).lower()
            if "transcript-unavailable" in error_str or "206" in error_str:
                logger.warning("transcript_unavailable", video_id=video_id)
                raise TranscriptUnavailableError(video_id) from e

            logger.exception(
                "transcript_fetch_error",
                video_id=video_id,
                error_type=type(e).__name__,
            )
            raise TranscriptUnavailableError(video_id, type(e).__name__) from e

        logger.info("transcript_fetched", video_id=video_id, length=len(transcript))
        return transcript


class OEmbedMetadataSource:
    """Fetches video title and author from YouTube's oEmbed endpoint.

    When metadata is optional (the default) a failed lookup yields a
    placeholder title instead of aborting ingestion.
    """

    def __init__(self, config: VideoQAConfig, http_client: httpx.AsyncClient | None = None):
        self.config = config
        self.http_client = http_client

    async def _get(self, video_id: str) -> httpx.Response:
        params = {"url": format_video_url(video_id), "format": "json"}
        if self.http_client is not None:
            return await self.http_client.get(OEMBED_URL, params=params)
        async with httpx.AsyncClient(timeout=self.config.request_timeout_seconds) as client:
            return await client.get(OEMBED_URL, params=params)

    async def fetch_metadata(self, video_id: str) -> VideoMetadata:
        """Fetch metadata for a video.

        Args:
            video_id: YouTube video ID.

        Returns:
            VideoMetadata with title, author and thumbnail.

        Raises:
            MetadataUnavailableError: If the lookup fails and
                ``metadata_required`` is set.
        """
        logger.info("fetching_metadata", video_id=video_id)

        try:
            response = await self._get(video_id)
            response.raise_for_status()
            data = response.json()
            metadata = VideoMetadata(
                id=video_id,
                title=data["title"],
                url=format_video_url(video_id),
                author_name=data.get("author_name"),
                thumbnail_url=thumbnail_url(video_id),
            )
        except (httpx.HTTPError, ValueError, KeyError) as e:
            if self.config.metadata_required:
                logger.exception(
                    "metadata_fetch_failed",
                    video_id=video_id,
                    error_type=type(e).__name__,
                )
                raise MetadataUnavailableError(video_id) from e

            logger.warning(
                "metadata_fallback_used",
                video_id=video_id,
                error_type=type(e).__name__,
            )
            return VideoMetadata(
                id=video_id,
                title=f"YouTube video {video_id}",
                url=format_video_url(video_id),
                thumbnail_url=thumbnail_url(video_id),
            )

        logger.info("metadata_fetched", video_id=video_id, title=metadata.title)
        return metadata


def create_transcript_source(config: VideoQAConfig) -> TranscriptSource:
    """Select the transcript source for this process."""
    if config.transcripts_configured:
        return SupadataTranscriptSource(config)
    return DemoTranscriptSource()
