"""Application configuration."""

import os

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from impromptu_presenter.domain.session import (
    COUNTDOWN_INTERVAL_MS,
    COUNTDOWN_START,
    PROGRESS_INTERVAL_MS,
    SLIDE_DURATION_MS,
)

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    openai_api_key: str
    openai_image_model: str = "gpt-image-1"
    openai_image_size: str = "1024x1024"
    openai_feedback_model: str = "gpt-4o-audio-preview"
    slide_duration_ms: int = Field(default=SLIDE_DURATION_MS, gt=0)
    countdown_start: int = Field(default=COUNTDOWN_START, ge=0)
    countdown_interval_ms: int = Field(default=COUNTDOWN_INTERVAL_MS, gt=0)
    progress_interval_ms: int = Field(default=PROGRESS_INTERVAL_MS, gt=0)
    collaborator_timeout_seconds: float | None = Field(default=120.0, gt=0)
    audio_sample_rate: int = 16000
    audio_channels: int = 1
    audio_device: int | None = None
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )
