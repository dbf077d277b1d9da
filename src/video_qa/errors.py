"""Exception hierarchy for the video Q&A core."""


class VideoQAError(Exception):
    """Base class for every error raised by the video Q&A core."""


class InvalidVideoURLError(VideoQAError):
    """The submitted URL does not contain a YouTube video identifier."""

    def __init__(self, url: str):
        self.url = url
        super().__init__("Invalid YouTube URL")


class InvalidQuestionError(VideoQAError):
    """The submitted question is empty."""


class TranscriptUnavailableError(VideoQAError):
    """No usable transcript could be obtained for the video."""

    def __init__(self, video_id: str, reason: str | None = None):
        self.video_id = video_id
        message = "No transcript available for this video or transcript is too short"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class MetadataUnavailableError(VideoQAError):
    """Video metadata could not be fetched and is required."""

    def __init__(self, video_id: str):
        self.video_id = video_id
        super().__init__("Failed to fetch video metadata")


class ChunkingError(VideoQAError):
    """The transcript produced no chunks."""

    def __init__(self, video_id: str):
        self.video_id = video_id
        super().__init__("Failed to process video transcript")


class IngestionCancelledError(VideoQAError):
    """Processing was superseded by a newer video submission."""

    def __init__(self, video_id: str):
        self.video_id = video_id
        super().__init__(f"Processing of video {video_id} was superseded by a newer request")


class NoActiveSessionError(VideoQAError):
    """An operation needed a processed video but none is loaded."""

    def __init__(self) -> None:
        super().__init__("No video has been processed yet")


class AnswerGenerationError(VideoQAError):
    """The configured language model failed to produce an answer."""

    def __init__(self, message: str = "Failed to generate answer. Please try again."):
        super().__init__(message)
