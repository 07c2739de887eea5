"""Errors raised by workshop services."""

from uuid import UUID


class WorkshopError(Exception):
    """Base class for workshop service errors."""


class SessionNotFoundError(WorkshopError):
    def __init__(self, session_id: UUID | None) -> None:
        super().__init__(f"Session not found: {session_id}")
        self.session_id = session_id


class ImageNotFoundError(WorkshopError):
    def __init__(self, image_id: UUID) -> None:
        super().__init__(f"Image not found: {image_id}")
        self.image_id = image_id


class ReportNotFoundError(WorkshopError):
    """Raised when audio is requested for a session without a report."""


class NoAnalyzedImagesError(WorkshopError):
    """Raised when a report is requested before any image finished analysis."""


class ReportGenerationError(WorkshopError):
    """Raised when every report model failed."""


class AudioOverviewError(WorkshopError):
    """Raised when the audio overview could not be produced."""


class ScriptGenerationError(AudioOverviewError):
    """The script stage returned no text."""


class AudioSynthesisError(AudioOverviewError):
    """The speech stage returned no audio."""


class StaleReportError(WorkshopError):
    """Raised when the narrated report was replaced before its audio landed."""
