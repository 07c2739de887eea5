"""Turns uploaded files into workshop images."""

import base64
import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID, uuid4

from workshop_scribe.domain.sessions import ImageStatus, WorkshopImage
from workshop_scribe.services.analysis import ImageAnalysisService
from workshop_scribe.services.store import SessionStore

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UploadedFile:
    """A user-selected file as received from the client."""

    filename: str
    content_type: str
    data: bytes


@dataclass
class ImageIngestionService:
    """Adds uploaded images to a session and kicks off their analysis."""

    store: SessionStore
    analysis_service: ImageAnalysisService

    def ingest(
        self, files: Iterable[UploadedFile], session_id: UUID | None = None
    ) -> list[WorkshopImage]:
        """Append image files to a session, defaulting to the active one.

        Non-image files are skipped. Analysis is scheduled for every new image
        but not awaited.
        """
        target_id = session_id or self.store.active_session_id
        session = self.store.require_session(target_id)
        images = [build_image(item) for item in files if is_image(item.content_type)]
        if not images:
            return []
        self.store.add_images(session.id, images)
        _logger.info("Queued %s image(s) for session %s", len(images), session.id)
        self.analysis_service.schedule(session.id, images)
        return images


def is_image(content_type: str | None) -> bool:
    return bool(content_type) and content_type.lower().startswith("image/")


def build_image(upload: UploadedFile) -> WorkshopImage:
    """Create a pending image record from an uploaded file."""
    mime_type = upload.content_type.lower()
    encoded = base64.b64encode(upload.data).decode("ascii")
    return WorkshopImage(
        id=uuid4(),
        filename=upload.filename,
        mime_type=mime_type,
        data_url=f"data:{mime_type};base64,{encoded}",
        base64_data=encoded,
        status=ImageStatus.PENDING,
        captured_at=datetime.now(tz=UTC),
    )
