"""Pydantic models for the HTTP API."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from workshop_scribe.domain.audio import (
    CHANNELS,
    SAMPLE_RATE,
    duration_seconds,
    peak_level,
)
from workshop_scribe.domain.sessions import ImageStatus, Report, Session, WorkshopImage


class CreateSessionRequest(BaseModel):
    """Payload for creating a session."""

    title: str | None = Field(default=None, max_length=200)


class RenameSessionRequest(BaseModel):
    """Payload for renaming a session."""

    title: str = Field(min_length=1, max_length=200)


class ImageView(BaseModel):
    """Image metadata and analysis result."""

    id: UUID
    filename: str
    mime_type: str
    status: ImageStatus
    description: str | None
    captured_at: datetime

    @classmethod
    def from_domain(cls, image: WorkshopImage) -> "ImageView":
        return cls(
            id=image.id,
            filename=image.filename,
            mime_type=image.mime_type,
            status=image.status,
            description=image.description,
            captured_at=image.captured_at,
        )


class ReportView(BaseModel):
    """Report content without the audio payload."""

    id: UUID
    markdown: str
    generated_at: datetime
    has_audio: bool
    audio_duration_seconds: float | None = None
    audio_peak_level: float | None = None

    @classmethod
    def from_domain(cls, report: Report) -> "ReportView":
        audio = report.audio_overview
        return cls(
            id=report.id,
            markdown=report.markdown,
            generated_at=report.generated_at,
            has_audio=report.has_audio,
            audio_duration_seconds=duration_seconds(audio) if audio else None,
            audio_peak_level=peak_level(audio) if audio else None,
        )


class SessionSummary(BaseModel):
    """Session card data for listings."""

    id: UUID
    title: str
    created_at: datetime
    image_count: int
    has_report: bool
    active: bool

    @classmethod
    def from_domain(cls, session: Session, active_id: UUID | None) -> "SessionSummary":
        return cls(
            id=session.id,
            title=session.title,
            created_at=session.created_at,
            image_count=len(session.images),
            has_report=session.report is not None,
            active=session.id == active_id,
        )


class SessionDetail(BaseModel):
    """Full session state."""

    id: UUID
    title: str
    created_at: datetime
    images: list[ImageView]
    status_counts: dict[str, int]
    report: ReportView | None
    report_in_progress: bool
    audio_in_progress: bool

    @classmethod
    def from_domain(cls, session: Session) -> "SessionDetail":
        return cls(
            id=session.id,
            title=session.title,
            created_at=session.created_at,
            images=[ImageView.from_domain(image) for image in session.images],
            status_counts=session.status_counts(),
            report=ReportView.from_domain(session.report) if session.report else None,
            report_in_progress=session.report_in_progress,
            audio_in_progress=session.audio_in_progress,
        )


class AudioPayload(BaseModel):
    """Base64-encoded raw PCM audio."""

    audio: str
    encoding: str = "pcm_s16le"
    sample_rate: int = SAMPLE_RATE
    channels: int = CHANNELS
