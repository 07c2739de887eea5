"""Tests for the audio overview pipeline."""

import asyncio
from dataclasses import replace
from datetime import UTC, datetime

import pytest

from workshop_scribe.containers import AppContainer
from workshop_scribe.domain.sessions import Report
from workshop_scribe.services.audio import (
    DEFAULT_VOICES,
    SCRIPT_CHAR_BUDGET,
    build_script_prompt,
)
from workshop_scribe.services.errors import (
    AudioOverviewError,
    AudioSynthesisError,
    ReportNotFoundError,
    ScriptGenerationError,
    SessionNotFoundError,
    StaleReportError,
)
from tests.conftest import FakeGenerationClient

SCRIPT = "Alex: Welcome back!\nSam: Let's look at the yellow notes."


def _session_with_report(container: AppContainer, markdown: str = "# Report"):  # type: ignore[no-untyped-def]
    session = container.store.create_session()
    report = Report(markdown=markdown, generated_at=datetime.now(tz=UTC))
    return container.store.update_session(
        session.id, lambda current: replace(current, report=report)
    )


def test_script_prompt_truncates_report_and_names_speakers() -> None:
    markdown = "x" * (SCRIPT_CHAR_BUDGET + 50) + "TAIL"

    prompt = build_script_prompt(markdown)

    assert "x" * SCRIPT_CHAR_BUDGET in prompt
    assert "TAIL" not in prompt
    assert "Alex: [Line]" in prompt
    assert "Sam: [Line]" in prompt


def test_generate_attaches_audio_to_report(
    container: AppContainer, generation_client: FakeGenerationClient
) -> None:
    generation_client.text_answers = {container.settings.script_model: SCRIPT}
    session = _session_with_report(container)

    report = asyncio.run(container.audio_service.generate_for_session(session.id))

    stored = container.store.require_session(session.id)
    speech_call = generation_client.calls_named("synthesize_speech")[0]
    assert speech_call["script"] == SCRIPT
    assert speech_call["voices"] == DEFAULT_VOICES
    assert speech_call["model"] == container.settings.tts_model
    assert report.audio_overview == generation_client.speech_answer
    assert stored.report == report
    assert stored.audio_in_progress is False


def test_empty_script_skips_speech_stage(
    container: AppContainer, generation_client: FakeGenerationClient
) -> None:
    generation_client.text_default = ""
    session = _session_with_report(container)

    with pytest.raises(ScriptGenerationError):
        asyncio.run(container.audio_service.generate_for_session(session.id))

    stored = container.store.require_session(session.id)
    assert generation_client.calls_named("synthesize_speech") == []
    assert stored.report is not None
    assert stored.report.audio_overview is None
    assert stored.audio_in_progress is False


def test_missing_audio_payload_fails(
    container: AppContainer, generation_client: FakeGenerationClient
) -> None:
    generation_client.speech_answer = None
    session = _session_with_report(container)

    with pytest.raises(AudioSynthesisError):
        asyncio.run(container.audio_service.generate_for_session(session.id))

    assert container.store.require_session(session.id).report.audio_overview is None


def test_client_errors_become_audio_overview_errors(
    container: AppContainer, generation_client: FakeGenerationClient
) -> None:
    generation_client.speech_answer = RuntimeError("tts unavailable")
    session = _session_with_report(container)

    with pytest.raises(AudioOverviewError) as excinfo:
        asyncio.run(container.audio_service.generate_for_session(session.id))

    assert isinstance(excinfo.value.__cause__, RuntimeError)
    stored = container.store.require_session(session.id)
    assert stored.report.markdown == "# Report"
    assert stored.audio_in_progress is False


def test_audio_requires_report(container: AppContainer) -> None:
    session = container.store.create_session()

    with pytest.raises(ReportNotFoundError):
        asyncio.run(container.audio_service.generate_for_session(session.id))


def test_audio_for_replaced_report_is_discarded(
    container: AppContainer, generation_client: FakeGenerationClient
) -> None:
    session = _session_with_report(container, "# Old")
    newer = Report(markdown="# New", generated_at=datetime(2030, 1, 1, tzinfo=UTC))

    async def replace_report_then_answer(**kwargs):  # type: ignore[no-untyped-def]
        container.store.update_session(
            session.id, lambda current: replace(current, report=newer)
        )
        return SCRIPT

    generation_client.generate_text = replace_report_then_answer  # type: ignore[method-assign]

    with pytest.raises(StaleReportError):
        asyncio.run(container.audio_service.generate_for_session(session.id))

    stored = container.store.require_session(session.id)
    assert stored.report == newer
    assert stored.audio_in_progress is False


def test_audio_is_not_attached_to_replacement_with_same_timestamp(
    container: AppContainer, generation_client: FakeGenerationClient
) -> None:
    session = _session_with_report(container, "# Old")
    twin = Report(markdown="# New", generated_at=session.report.generated_at)

    async def replace_report_then_answer(**kwargs):  # type: ignore[no-untyped-def]
        container.store.update_session(
            session.id, lambda current: replace(current, report=twin)
        )
        return SCRIPT

    generation_client.generate_text = replace_report_then_answer  # type: ignore[method-assign]

    with pytest.raises(StaleReportError):
        asyncio.run(container.audio_service.generate_for_session(session.id))

    stored = container.store.require_session(session.id)
    assert stored.report == twin
    assert stored.report.audio_overview is None


def test_audio_for_deleted_session_raises_not_found(
    container: AppContainer, generation_client: FakeGenerationClient
) -> None:
    session = _session_with_report(container)

    async def delete_session_then_answer(**kwargs):  # type: ignore[no-untyped-def]
        container.store.delete_session(session.id)
        return SCRIPT

    generation_client.generate_text = delete_session_then_answer  # type: ignore[method-assign]

    with pytest.raises(SessionNotFoundError):
        asyncio.run(container.audio_service.generate_for_session(session.id))

    assert container.store.get_session(session.id) is None


def test_partial_pcm_sample_fails(
    container: AppContainer, generation_client: FakeGenerationClient
) -> None:
    generation_client.speech_answer = b"\x00\x01\x02"
    session = _session_with_report(container)

    with pytest.raises(AudioSynthesisError):
        asyncio.run(container.audio_service.generate_for_session(session.id))

    assert container.store.require_session(session.id).report.audio_overview is None
