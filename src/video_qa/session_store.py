"""Owner of the single live video session."""

from src.utils.logging import get_logger

from .errors import NoActiveSessionError
from .schemas import ProcessingState, VideoSession

logger = get_logger(__name__)


class SessionStore:
    """Holds at most one ``VideoSession`` and the current processing state.

    Transitions are explicit: ``replace`` installs a freshly processed session
    and drops the previous one whole, ``clear`` returns to idle.
    """

    def __init__(self) -> None:
        self._session: VideoSession | None = None
        self.state = ProcessingState.IDLE
        self.last_error: str | None = None

    @property
    def session(self) -> VideoSession | None:
        return self._session

    def require(self) -> VideoSession:
        """Return the live session.

        Raises:
            NoActiveSessionError: If no video has been processed.
        """
        if self._session is None:
            raise NoActiveSessionError()
        return self._session

    def mark_processing(self) -> None:
        self.state = ProcessingState.PROCESSING
        self.last_error = None

    def abandon_processing(self) -> None:
        """Leave the processing state without a result or an error."""
        self.state = ProcessingState.READY if self._session else ProcessingState.IDLE
        self.last_error = None

    def mark_failed(self, error: str) -> None:
        """Record a failed ingestion; the previous session is kept."""
        self.state = ProcessingState.ERROR
        self.last_error = error

    def replace(self, session: VideoSession) -> None:
        previous = self._session
        self._session = session
        self.state = ProcessingState.READY
        self.last_error = None
        logger.info(
            "session_replaced",
            video_id=session.id,
            previous_video_id=previous.id if previous else None,
            chunks=len(session.chunks),
        )

    def clear(self) -> None:
        previous = self._session
        self._session = None
        self.state = ProcessingState.IDLE
        self.last_error = None
        logger.info("session_cleared", previous_video_id=previous.id if previous else None)
