"""Domain models for workshop sessions."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from uuid import UUID, uuid4


class ImageStatus(StrEnum):
    """Analysis state of a single workshop image."""

    PENDING = "pending"
    ANALYZING = "analyzing"
    DONE = "done"
    ERROR = "error"


_ALLOWED_TRANSITIONS: dict[ImageStatus, frozenset[ImageStatus]] = {
    ImageStatus.PENDING: frozenset({ImageStatus.ANALYZING}),
    ImageStatus.ANALYZING: frozenset({ImageStatus.DONE, ImageStatus.ERROR}),
    ImageStatus.DONE: frozenset(),
    ImageStatus.ERROR: frozenset(),
}


def can_transition(current: ImageStatus, target: ImageStatus) -> bool:
    """Return True if an image may move from ``current`` to ``target``."""
    return target in _ALLOWED_TRANSITIONS[current]


@dataclass(frozen=True)
class WorkshopImage:
    """One uploaded photo plus its analysis state."""

    id: UUID
    filename: str
    mime_type: str
    data_url: str
    base64_data: str
    status: ImageStatus
    captured_at: datetime
    description: str | None = None


@dataclass(frozen=True)
class Report:
    """Synthesized Markdown report with an optional audio overview."""

    markdown: str
    generated_at: datetime
    audio_overview: bytes | None = None
    id: UUID = field(default_factory=uuid4)

    @property
    def has_audio(self) -> bool:
        return self.audio_overview is not None


@dataclass(frozen=True)
class Session:
    """A workshop documentation unit: its images and at most one report."""

    id: UUID
    title: str
    created_at: datetime
    images: tuple[WorkshopImage, ...] = ()
    report: Report | None = None
    report_in_progress: bool = False
    audio_in_progress: bool = False

    def find_image(self, image_id: UUID) -> WorkshopImage | None:
        for image in self.images:
            if image.id == image_id:
                return image
        return None

    def analyzed_descriptions(self) -> list[str]:
        """Descriptions of finished images, in upload order."""
        return [
            image.description
            for image in self.images
            if image.status == ImageStatus.DONE and image.description
        ]

    def status_counts(self) -> dict[str, int]:
        counts = {status.value: 0 for status in ImageStatus}
        for image in self.images:
            counts[image.status.value] += 1
        return counts
