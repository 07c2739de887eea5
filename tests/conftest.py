"""Shared test fixtures."""

import asyncio
import base64
from dataclasses import dataclass, field

import pytest

from workshop_scribe.config import Settings
from workshop_scribe.containers import AppContainer, build_container
from workshop_scribe.services.generation import GenerationClient
from workshop_scribe.services.ingestion import UploadedFile

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"sticky-notes"
JPEG_BYTES = b"\xff\xd8\xff" + b"whiteboard"


@dataclass
class FakeGenerationClient(GenerationClient):
    """Scriptable generation client that records every call.

    Text answers are looked up by model name; a value that is an exception is
    raised instead of returned. Vision answers are looked up by the image's
    raw bytes. An ``asyncio.Event`` in ``vision_gates`` holds that image's
    call until the event is set.
    """

    vision_answers: dict[bytes, object] = field(default_factory=dict)
    vision_default: object = "Yellow notes: 'Ship faster', 'Fewer meetings'."
    vision_gates: dict[bytes, asyncio.Event] = field(default_factory=dict)
    text_answers: dict[str, object] = field(default_factory=dict)
    text_default: object = "# Workshop Summary Report"
    speech_answer: object = b"\x00\x01\xff\x7f"
    calls: list[tuple[str, dict[str, object]]] = field(default_factory=list)

    async def analyze_image(
        self, *, model: str, image_base64: str, mime_type: str, prompt: str
    ) -> str | None:
        self.calls.append(
            (
                "analyze_image",
                {"model": model, "mime_type": mime_type, "prompt": prompt},
            )
        )
        raw = base64.b64decode(image_base64)
        gate = self.vision_gates.get(raw)
        if gate is not None:
            await gate.wait()
        return _resolve(self.vision_answers.get(raw, self.vision_default))

    async def generate_text(self, *, model: str, prompt: str) -> str | None:
        self.calls.append(("generate_text", {"model": model, "prompt": prompt}))
        return _resolve(self.text_answers.get(model, self.text_default))

    async def synthesize_speech(
        self, *, model: str, script: str, voices: dict[str, str]
    ) -> bytes | None:
        self.calls.append(
            (
                "synthesize_speech",
                {"model": model, "script": script, "voices": dict(voices)},
            )
        )
        return _resolve(self.speech_answer)

    def calls_named(self, name: str) -> list[dict[str, object]]:
        return [kwargs for call, kwargs in self.calls if call == name]


def _resolve(answer: object):  # type: ignore[no-untyped-def]
    if isinstance(answer, BaseException):
        raise answer
    return answer


def upload(
    data: bytes = PNG_BYTES,
    content_type: str = "image/png",
    filename: str = "board.png",
) -> UploadedFile:
    return UploadedFile(filename=filename, content_type=content_type, data=data)


@pytest.fixture
def settings() -> Settings:
    return Settings(gemini_api_key="gemini-key", environment="test")


@pytest.fixture
def generation_client() -> FakeGenerationClient:
    return FakeGenerationClient()


@pytest.fixture
def container(
    settings: Settings, generation_client: FakeGenerationClient
) -> AppContainer:
    return build_container(settings, generation_client=generation_client)
