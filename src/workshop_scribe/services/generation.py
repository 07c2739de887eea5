"""Interface to the hosted generative model service."""

from typing import Protocol


class GenerationClient(Protocol):
    """Interface for multimodal text and speech generation."""

    async def analyze_image(
        self, *, model: str, image_base64: str, mime_type: str, prompt: str
    ) -> str | None:
        """Return the model's text answer about an inline image."""

    async def generate_text(self, *, model: str, prompt: str) -> str | None:
        """Return the model's text answer to a prompt."""

    async def synthesize_speech(
        self, *, model: str, script: str, voices: dict[str, str]
    ) -> bytes | None:
        """Return raw PCM audio for a multi-speaker script.

        ``voices`` maps speaker names used in the script to prebuilt voice
        names.
        """
