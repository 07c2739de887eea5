"""In-memory session store."""

import logging
from collections.abc import Callable, Iterable
from dataclasses import replace
from datetime import UTC, datetime
from uuid import UUID, uuid4

from workshop_scribe.domain.sessions import Session, WorkshopImage
from workshop_scribe.services.errors import ImageNotFoundError, SessionNotFoundError

_logger = logging.getLogger(__name__)

SessionUpdate = Callable[[Session], Session]
ImageUpdate = Callable[[WorkshopImage], WorkshopImage]


class SessionStore:
    """Holds every workshop session for the lifetime of the process.

    Sessions are immutable values. Each update replaces a whole session keyed
    by id with a function of the previous snapshot, so updates for different
    ids never interfere. Updates addressed to an id that no longer exists are
    dropped.
    """

    def __init__(self) -> None:
        self._sessions: dict[UUID, Session] = {}
        self._active_session_id: UUID | None = None

    def create_session(self, title: str | None = None) -> Session:
        """Create a session and make it the active one."""
        now = datetime.now(tz=UTC)
        session = Session(
            id=uuid4(),
            title=title or f"Workshop {now.date().isoformat()}",
            created_at=now,
        )
        self._sessions[session.id] = session
        self._active_session_id = session.id
        return session

    def get_session(self, session_id: UUID) -> Session | None:
        return self._sessions.get(session_id)

    def require_session(self, session_id: UUID | None) -> Session:
        """Return a session or raise ``SessionNotFoundError``."""
        session = self._sessions.get(session_id) if session_id else None
        if session is None:
            raise SessionNotFoundError(session_id)
        return session

    def list_sessions(self) -> list[Session]:
        """Return sessions, newest first."""
        return list(reversed(self._sessions.values()))

    @property
    def active_session_id(self) -> UUID | None:
        return self._active_session_id

    def set_active(self, session_id: UUID | None) -> None:
        if session_id is not None:
            self.require_session(session_id)
        self._active_session_id = session_id

    def delete_session(self, session_id: UUID) -> bool:
        """Remove a session together with its images and report."""
        removed = self._sessions.pop(session_id, None)
        if self._active_session_id == session_id:
            self._active_session_id = None
        return removed is not None

    def update_session(self, session_id: UUID, fn: SessionUpdate) -> Session | None:
        """Replace a session with ``fn(session)``; no-op for unknown ids."""
        current = self._sessions.get(session_id)
        if current is None:
            _logger.debug("Dropping update for missing session %s", session_id)
            return None
        updated = fn(current)
        self._sessions[session_id] = updated
        return updated

    def update_image(
        self, session_id: UUID, image_id: UUID, fn: ImageUpdate
    ) -> WorkshopImage | None:
        """Replace one image in place; no-op for unknown session or image."""
        result: list[WorkshopImage] = []

        def apply(session: Session) -> Session:
            images = []
            for image in session.images:
                if image.id == image_id:
                    image = fn(image)
                    result.append(image)
                images.append(image)
            return replace(session, images=tuple(images))

        self.update_session(session_id, apply)
        return result[0] if result else None

    def rename_session(self, session_id: UUID, title: str) -> Session:
        self.require_session(session_id)
        updated = self.update_session(
            session_id, lambda session: replace(session, title=title)
        )
        return updated or self.require_session(session_id)

    def add_images(self, session_id: UUID, images: Iterable[WorkshopImage]) -> Session:
        """Append images to a session, keeping their order."""
        self.require_session(session_id)
        new_images = tuple(images)
        updated = self.update_session(
            session_id,
            lambda session: replace(session, images=session.images + new_images),
        )
        return updated or self.require_session(session_id)

    def remove_image(self, session_id: UUID, image_id: UUID) -> None:
        session = self.require_session(session_id)
        if session.find_image(image_id) is None:
            raise ImageNotFoundError(image_id)
        self.update_session(
            session_id,
            lambda current: replace(
                current,
                images=tuple(image for image in current.images if image.id != image_id),
            ),
        )
