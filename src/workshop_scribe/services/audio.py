"""Two-speaker audio overview of a workshop report."""

import logging
from dataclasses import dataclass, field, replace
from uuid import UUID

from workshop_scribe.domain.audio import SAMPLE_WIDTH
from workshop_scribe.domain.sessions import Report, Session
from workshop_scribe.services.errors import (
    AudioOverviewError,
    AudioSynthesisError,
    ReportNotFoundError,
    ScriptGenerationError,
    SessionNotFoundError,
    StaleReportError,
)
from workshop_scribe.services.generation import GenerationClient
from workshop_scribe.services.store import SessionStore

SCRIPT_CHAR_BUDGET = 8000
DEFAULT_VOICES = {"Alex": "Fenrir", "Sam": "Puck"}

_logger = logging.getLogger(__name__)


def build_script_prompt(markdown: str, char_budget: int = SCRIPT_CHAR_BUDGET) -> str:
    """Build the instruction that turns a report into a podcast transcript."""
    return (
        "Convert the following workshop report into a lively podcast transcript "
        "between two colleagues, Alex and Sam.\n\n"
        "Report Content:\n"
        f"{markdown[:char_budget]}\n\n"
        "Characters:\n"
        "- Alex: The lead facilitator. Deep voice, confident, summarizing the "
        "big picture.\n"
        "- Sam: The analyst. Higher voice, curious, asking questions and "
        "pointing out specific sticky note details.\n\n"
        "Format the output EXACTLY like this (no other text):\n"
        "Alex: [Line]\n"
        "Sam: [Line]\n"
        "Alex: [Line]\n"
        "...\n\n"
        "Keep it under 2 minutes of speaking time. Start with a friendly welcome."
    )


@dataclass
class AudioOverviewService:
    """Writes a dialogue script for a report, then voices it."""

    client: GenerationClient
    store: SessionStore
    script_model: str
    tts_model: str
    voices: dict[str, str] = field(default_factory=lambda: dict(DEFAULT_VOICES))

    async def write_script(self, markdown: str) -> str:
        script = await self.client.generate_text(
            model=self.script_model, prompt=build_script_prompt(markdown)
        )
        if not script or not script.strip():
            raise ScriptGenerationError("Failed to generate podcast script")
        return script

    async def narrate(self, markdown: str) -> bytes:
        """Return raw 24 kHz mono PCM16 audio narrating the report.

        Both stages must succeed; any failure raises ``AudioOverviewError``.
        """
        try:
            script = await self.write_script(markdown)
            audio = await self.client.synthesize_speech(
                model=self.tts_model, script=script, voices=self.voices
            )
        except AudioOverviewError:
            raise
        except Exception as exc:
            raise AudioOverviewError("Failed to generate audio overview") from exc
        if not audio:
            raise AudioSynthesisError("No audio data received")
        if len(audio) % SAMPLE_WIDTH:
            raise AudioSynthesisError("Audio data ends with a partial PCM16 sample")
        return audio

    async def generate_for_session(self, session_id: UUID) -> Report:
        """Narrate the session's report and attach the audio to it."""
        session = self.store.require_session(session_id)
        report = session.report
        if report is None:
            raise ReportNotFoundError("Generate a report before requesting audio")
        self.store.update_session(
            session_id, lambda current: replace(current, audio_in_progress=True)
        )
        try:
            audio = await self.narrate(report.markdown)
        except Exception:
            _logger.exception(
                "Audio overview failed", extra={"session_id": str(session_id)}
            )
            self.store.update_session(
                session_id, lambda current: replace(current, audio_in_progress=False)
            )
            raise
        updated = self.store.update_session(
            session_id, lambda current: _attach_audio(current, report, audio)
        )
        if updated is None:
            raise SessionNotFoundError(session_id)
        if updated.report is None or updated.report.id != report.id:
            _logger.warning(
                "Discarded audio for a replaced report",
                extra={"session_id": str(session_id)},
            )
            raise StaleReportError(
                "The report changed while its audio was generated. Please try again."
            )
        return updated.report


def _attach_audio(session: Session, narrated: Report, audio: bytes) -> Session:
    # A report regenerated while narrating keeps its own (absent) audio.
    report = session.report
    if report is None or report.id != narrated.id:
        return replace(session, audio_in_progress=False)
    return replace(
        session,
        report=replace(report, audio_overview=audio),
        audio_in_progress=False,
    )
