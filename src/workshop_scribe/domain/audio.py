"""PCM audio helpers for the generated audio overview.

The speech model returns raw mono PCM: signed 16-bit little-endian samples
at 24 kHz. It travels base64-encoded inside JSON payloads.
"""

import base64
import io
import sys
import wave
from array import array

SAMPLE_RATE = 24000
CHANNELS = 1
SAMPLE_WIDTH = 2
_PCM16_SCALE = 32768.0


def encode_audio_payload(pcm: bytes) -> str:
    """Encode raw PCM bytes for JSON transport."""
    return base64.b64encode(pcm).decode("ascii")


def decode_audio_payload(payload: str) -> bytes:
    """Decode a base64 audio payload back to raw PCM bytes."""
    return base64.b64decode(payload, validate=True)


def pcm16_to_float(pcm: bytes) -> list[float]:
    """Normalize signed 16-bit samples to the [-1.0, 1.0) range."""
    if len(pcm) % SAMPLE_WIDTH:
        raise ValueError("PCM16 data must contain a whole number of samples")
    samples = array("h")
    samples.frombytes(pcm)
    if sys.byteorder == "big":
        samples.byteswap()
    return [sample / _PCM16_SCALE for sample in samples]


def pcm16_to_wav(pcm: bytes, sample_rate: int = SAMPLE_RATE) -> bytes:
    """Wrap raw PCM16 mono audio in a WAV container."""
    buffer = io.BytesIO()
    with wave.open(buffer, "wb") as wav_file:
        wav_file.setnchannels(CHANNELS)
        wav_file.setsampwidth(SAMPLE_WIDTH)
        wav_file.setframerate(sample_rate)
        wav_file.writeframes(pcm)
    return buffer.getvalue()


def duration_seconds(pcm: bytes, sample_rate: int = SAMPLE_RATE) -> float:
    """Playback length of raw PCM16 mono audio."""
    return len(pcm) / (SAMPLE_WIDTH * CHANNELS * sample_rate)


def peak_level(pcm: bytes) -> float:
    """Largest absolute normalized sample; 0.0 for empty audio."""
    return max((abs(sample) for sample in pcm16_to_float(pcm)), default=0.0)
