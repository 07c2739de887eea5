"""Gemini API client for vision, text and speech generation."""

import base64
from dataclasses import dataclass

from google import genai
from google.genai import types

from workshop_scribe.domain.audio import decode_audio_payload
from workshop_scribe.services.generation import GenerationClient


@dataclass
class GeminiGenerationClient(GenerationClient):
    """Generation client backed by the google-genai async API."""

    client: genai.Client

    @classmethod
    def create(cls, api_key: str) -> "GeminiGenerationClient":
        """Create a Gemini generation client."""
        return cls(client=genai.Client(api_key=api_key))

    async def analyze_image(
        self, *, model: str, image_base64: str, mime_type: str, prompt: str
    ) -> str | None:
        """Send an inline image with an instruction and return the text."""
        image_part = types.Part.from_bytes(
            data=base64.b64decode(image_base64), mime_type=mime_type
        )
        response = await self.client.aio.models.generate_content(
            model=model,
            contents=[image_part, types.Part.from_text(text=prompt)],
        )
        return response.text

    async def generate_text(self, *, model: str, prompt: str) -> str | None:
        """Generate text for a single prompt."""
        response = await self.client.aio.models.generate_content(
            model=model,
            contents=[types.Part.from_text(text=prompt)],
        )
        return response.text

    async def synthesize_speech(
        self, *, model: str, script: str, voices: dict[str, str]
    ) -> bytes | None:
        """Render a speaker-labelled script with one prebuilt voice per speaker."""
        speaker_configs = [
            types.SpeakerVoiceConfig(
                speaker=speaker,
                voice_config=types.VoiceConfig(
                    prebuilt_voice_config=types.PrebuiltVoiceConfig(
                        voice_name=voice_name
                    )
                ),
            )
            for speaker, voice_name in voices.items()
        ]
        config = types.GenerateContentConfig(
            response_modalities=[types.Modality.AUDIO],
            speech_config=types.SpeechConfig(
                multi_speaker_voice_config=types.MultiSpeakerVoiceConfig(
                    speaker_voice_configs=speaker_configs
                )
            ),
        )
        response = await self.client.aio.models.generate_content(
            model=model,
            contents=[types.Part.from_text(text=script)],
            config=config,
        )
        return _first_inline_data(response)


def _first_inline_data(response: object) -> bytes | None:
    """Return the first inline data payload of the first candidate."""
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return None
    content = getattr(candidates[0], "content", None)
    for part in getattr(content, "parts", None) or []:
        inline_data = getattr(part, "inline_data", None)
        data = getattr(inline_data, "data", None)
        if data:
            if isinstance(data, str):
                return decode_audio_payload(data)
            return data
    return None
