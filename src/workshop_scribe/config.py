"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    gemini_api_key: str
    vision_model: str = "gemini-2.5-flash"
    report_model: str = "gemini-3-pro-preview"
    report_fallback_model: str = "gemini-2.5-flash"
    script_model: str = "gemini-2.5-flash"
    tts_model: str = "gemini-2.5-flash-preview-tts"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

    @property
    def report_models(self) -> tuple[str, ...]:
        """Report models in the order they are tried."""
        return (self.report_model, self.report_fallback_model)
