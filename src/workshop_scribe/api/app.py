"""FastAPI application factory."""

import base64
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from uuid import UUID

from fastapi import FastAPI, File, HTTPException, Request, Response, UploadFile, status
from fastapi.responses import JSONResponse

from workshop_scribe.api.schemas import (
    AudioPayload,
    CreateSessionRequest,
    ImageView,
    RenameSessionRequest,
    ReportView,
    SessionDetail,
    SessionSummary,
)
from workshop_scribe.app_logging import configure_logging
from workshop_scribe.containers import AppContainer
from workshop_scribe.domain.audio import encode_audio_payload, pcm16_to_wav
from workshop_scribe.domain.sessions import Report, Session
from workshop_scribe.services.errors import (
    AudioOverviewError,
    ImageNotFoundError,
    NoAnalyzedImagesError,
    ReportGenerationError,
    ReportNotFoundError,
    SessionNotFoundError,
    StaleReportError,
)
from workshop_scribe.services.ingestion import UploadedFile


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.exception_handler(SessionNotFoundError)
    async def session_not_found(
        request: Request, exc: SessionNotFoundError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"detail": "Session not found."},
        )

    @app.exception_handler(ImageNotFoundError)
    async def image_not_found(request: Request, exc: ImageNotFoundError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"detail": "Image not found."},
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/sessions")
    async def list_sessions(request: Request) -> list[SessionSummary]:
        """Return sessions, newest first."""
        store = _container(request).store
        return [
            SessionSummary.from_domain(session, store.active_session_id)
            for session in store.list_sessions()
        ]

    @app.post("/sessions", status_code=status.HTTP_201_CREATED)
    async def create_session(
        request: Request, payload: CreateSessionRequest | None = None
    ) -> SessionDetail:
        """Create a session and make it active."""
        store = _container(request).store
        session = store.create_session(payload.title if payload else None)
        logger.info("Created session %s", session.id)
        return SessionDetail.from_domain(session)

    @app.get("/sessions/active")
    async def active_session(request: Request) -> SessionDetail:
        """Return the active session."""
        store = _container(request).store
        session_id = store.active_session_id
        if session_id is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND, detail="No active session."
            )
        return SessionDetail.from_domain(store.require_session(session_id))

    @app.put("/sessions/{session_id}/active")
    async def activate_session(session_id: UUID, request: Request) -> SessionDetail:
        """Mark a session as the active one."""
        store = _container(request).store
        store.set_active(session_id)
        return SessionDetail.from_domain(store.require_session(session_id))

    @app.get("/sessions/{session_id}")
    async def get_session(session_id: UUID, request: Request) -> SessionDetail:
        """Return full session state."""
        return SessionDetail.from_domain(
            _container(request).store.require_session(session_id)
        )

    @app.patch("/sessions/{session_id}")
    async def rename_session(
        session_id: UUID, payload: RenameSessionRequest, request: Request
    ) -> SessionDetail:
        """Rename a session."""
        session = _container(request).store.rename_session(session_id, payload.title)
        return SessionDetail.from_domain(session)

    @app.delete("/sessions/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
    async def delete_session(session_id: UUID, request: Request) -> Response:
        """Delete a session with all its images and report."""
        if not _container(request).store.delete_session(session_id):
            raise SessionNotFoundError(session_id)
        logger.info("Deleted session %s", session_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    @app.post("/sessions/{session_id}/images", status_code=status.HTTP_202_ACCEPTED)
    async def upload_images(
        session_id: UUID,
        request: Request,
        files: list[UploadFile] = File(...),
    ) -> list[ImageView]:
        """Add photos to a session; analysis continues in the background."""
        container = _container(request)
        container.store.require_session(session_id)
        uploads = [
            UploadedFile(
                filename=upload.filename or "upload",
                content_type=upload.content_type or "",
                data=await upload.read(),
            )
            for upload in files
        ]
        images = container.ingestion_service.ingest(uploads, session_id=session_id)
        return [ImageView.from_domain(image) for image in images]

    @app.get("/sessions/{session_id}/images/{image_id}/content")
    async def image_content(
        session_id: UUID, image_id: UUID, request: Request
    ) -> Response:
        """Return the stored image bytes."""
        session = _container(request).store.require_session(session_id)
        image = session.find_image(image_id)
        if image is None:
            raise ImageNotFoundError(image_id)
        return Response(
            content=base64.b64decode(image.base64_data), media_type=image.mime_type
        )

    @app.delete(
        "/sessions/{session_id}/images/{image_id}",
        status_code=status.HTTP_204_NO_CONTENT,
    )
    async def remove_image(
        session_id: UUID, image_id: UUID, request: Request
    ) -> Response:
        """Remove one image regardless of its analysis status."""
        _container(request).store.remove_image(session_id, image_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    @app.post("/sessions/{session_id}/report")
    async def generate_report(session_id: UUID, request: Request) -> ReportView:
        """Synthesize the session report from analyzed images."""
        container = _container(request)
        try:
            report = await container.report_service.generate_for_session(session_id)
        except NoAnalyzedImagesError as exc:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT, detail=str(exc)
            ) from exc
        except ReportGenerationError as exc:
            logger.exception(
                "Report generation failed", extra={"session_id": str(session_id)}
            )
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail=_format_error(
                    container, exc, "Failed to generate report. Please try again."
                ),
            ) from exc
        return ReportView.from_domain(report)

    @app.get("/sessions/{session_id}/report")
    async def get_report(session_id: UUID, request: Request) -> ReportView:
        """Return the current report."""
        return ReportView.from_domain(_require_report(request, session_id))

    @app.get("/sessions/{session_id}/report.md")
    async def download_report(session_id: UUID, request: Request) -> Response:
        """Download the report as a Markdown file."""
        report = _require_report(request, session_id)
        filename = f"workshop-report-{report.generated_at.date().isoformat()}.md"
        return Response(
            content=report.markdown,
            media_type="text/markdown",
            headers={"Content-Disposition": f'attachment; filename="{filename}"'},
        )

    @app.post("/sessions/{session_id}/report/audio")
    async def generate_audio(session_id: UUID, request: Request) -> ReportView:
        """Produce the two-speaker audio overview of the report."""
        container = _container(request)
        try:
            report = await container.audio_service.generate_for_session(session_id)
        except ReportNotFoundError as exc:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)
            ) from exc
        except StaleReportError as exc:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT, detail=str(exc)
            ) from exc
        except AudioOverviewError as exc:
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail=_format_error(
                    container, exc, "Failed to generate audio overview."
                ),
            ) from exc
        return ReportView.from_domain(report)

    @app.get("/sessions/{session_id}/report/audio")
    async def get_audio(session_id: UUID, request: Request) -> AudioPayload:
        """Return the raw PCM audio, base64-encoded."""
        audio = _require_audio(_require_report(request, session_id))
        return AudioPayload(audio=encode_audio_payload(audio))

    @app.get("/sessions/{session_id}/report/audio.wav")
    async def download_audio(session_id: UUID, request: Request) -> Response:
        """Download the audio overview as a WAV file."""
        report = _require_report(request, session_id)
        audio = _require_audio(report)
        filename = f"workshop-overview-{report.generated_at.date().isoformat()}.wav"
        return Response(
            content=pcm16_to_wav(audio),
            media_type="audio/wav",
            headers={"Content-Disposition": f'attachment; filename="{filename}"'},
        )

    return app


def _container(request: Request) -> AppContainer:
    return request.app.state.container


def _require_report(request: Request, session_id: UUID) -> Report:
    session: Session = _container(request).store.require_session(session_id)
    if session.report is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="No report generated yet."
        )
    return session.report


def _require_audio(report: Report) -> bytes:
    if report.audio_overview is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No audio overview generated yet.",
        )
    return report.audio_overview


def _format_error(container: AppContainer, exc: Exception, fallback: str) -> str:
    if container.settings.environment == "local":
        return f"{fallback} ({exc})"
    return fallback
