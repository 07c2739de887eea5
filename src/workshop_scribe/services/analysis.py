"""Per-image analysis with the vision model."""

import asyncio
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field, replace
from uuid import UUID

from workshop_scribe.domain.sessions import ImageStatus, WorkshopImage, can_transition
from workshop_scribe.services.generation import GenerationClient
from workshop_scribe.services.store import SessionStore

ANALYSIS_PROMPT = (
    "Analyze this workshop photo. "
    "1) Transcribe ALL legible text from sticky notes, cards, or whiteboards. "
    "2) Describe the color coding or grouping of items "
    "(e.g., 'yellow notes clustered on the left'). "
    "3) Identify any drawn diagrams or arrows. "
    "Output as a structured summary of the visual data."
)
EMPTY_ANALYSIS = "No analysis generated."

_logger = logging.getLogger(__name__)


@dataclass
class ImageAnalysisService:
    """Runs one independent vision call per image and records the outcome."""

    client: GenerationClient
    store: SessionStore
    model: str
    _tasks: set[asyncio.Task[None]] = field(default_factory=set, init=False)

    async def analyze(self, image: WorkshopImage) -> str:
        """Return the model's description of a single image."""
        text = await self.client.analyze_image(
            model=self.model,
            image_base64=image.base64_data,
            mime_type=image.mime_type,
            prompt=ANALYSIS_PROMPT,
        )
        return text or EMPTY_ANALYSIS

    async def run(self, session_id: UUID, image_id: UUID) -> None:
        """Analyze one stored image, moving it to ``done`` or ``error``."""
        session = self.store.get_session(session_id)
        current = session.find_image(image_id) if session else None
        if current is None or current.status != ImageStatus.PENDING:
            return
        image = self.store.update_image(
            session_id, image_id, lambda item: _transition(item, ImageStatus.ANALYZING)
        )
        if image is None:
            return
        try:
            description = await self.analyze(image)
        except Exception:
            _logger.exception(
                "Image analysis failed",
                extra={"session_id": str(session_id), "image_id": str(image_id)},
            )
            self.store.update_image(
                session_id, image_id, lambda item: _transition(item, ImageStatus.ERROR)
            )
            return
        self.store.update_image(
            session_id,
            image_id,
            lambda item: _transition(item, ImageStatus.DONE, description),
        )

    def schedule(self, session_id: UUID, images: Iterable[WorkshopImage]) -> None:
        """Start analysis tasks without waiting for them."""
        for image in images:
            task = asyncio.create_task(self.run(session_id, image.id))
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)

    @property
    def in_flight(self) -> int:
        return len(self._tasks)

    async def wait_idle(self) -> None:
        """Wait until every scheduled analysis has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def shutdown(self) -> None:
        """Cancel outstanding analyses."""
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)


def _transition(
    image: WorkshopImage, target: ImageStatus, description: str | None = None
) -> WorkshopImage:
    if not can_transition(image.status, target):
        return image
    if description is None:
        return replace(image, status=target)
    return replace(image, status=target, description=description)
