"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from workshop_scribe.adapters.gemini_client import GeminiGenerationClient
from workshop_scribe.config import Settings
from workshop_scribe.services.analysis import ImageAnalysisService
from workshop_scribe.services.audio import AudioOverviewService
from workshop_scribe.services.generation import GenerationClient
from workshop_scribe.services.ingestion import ImageIngestionService
from workshop_scribe.services.reports import ReportService
from workshop_scribe.services.store import SessionStore


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    store: SessionStore
    generation_client: GenerationClient
    analysis_service: ImageAnalysisService
    ingestion_service: ImageIngestionService
    report_service: ReportService
    audio_service: AudioOverviewService
    close_resources: Callable[[], Awaitable[None]]


def build_container(
    settings: Settings | None = None,
    generation_client: GenerationClient | None = None,
) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    client = generation_client or GeminiGenerationClient.create(
        resolved_settings.gemini_api_key
    )
    store = SessionStore()
    analysis_service = ImageAnalysisService(
        client=client,
        store=store,
        model=resolved_settings.vision_model,
    )
    ingestion_service = ImageIngestionService(
        store=store,
        analysis_service=analysis_service,
    )
    report_service = ReportService(
        client=client,
        store=store,
        models=resolved_settings.report_models,
    )
    audio_service = AudioOverviewService(
        client=client,
        store=store,
        script_model=resolved_settings.script_model,
        tts_model=resolved_settings.tts_model,
    )

    async def close_resources() -> None:
        await analysis_service.shutdown()

    return AppContainer(
        settings=resolved_settings,
        store=store,
        generation_client=client,
        analysis_service=analysis_service,
        ingestion_service=ingestion_service,
        report_service=report_service,
        audio_service=audio_service,
        close_resources=close_resources,
    )
