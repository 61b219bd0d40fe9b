"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from impromptu_presenter.adapters.openai_feedback_client import OpenAIFeedbackClient
from impromptu_presenter.adapters.openai_image_client import OpenAIImageClient
from impromptu_presenter.adapters.sounddevice_audio_input import (
    SoundDeviceAudioInput,
)
from impromptu_presenter.config import Settings
from impromptu_presenter.services.capture import CaptureController
from impromptu_presenter.services.feedback import FeedbackService
from impromptu_presenter.services.images import ImageService
from impromptu_presenter.services.notifications import NoticeBoard
from impromptu_presenter.services.presenter import PresenterService
from impromptu_presenter.services.timing import TimingEngine


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    presenter_service: PresenterService
    notice_board: NoticeBoard
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    image_client = OpenAIImageClient.create(resolved_settings.openai_api_key)
    feedback_client = OpenAIFeedbackClient.create(resolved_settings.openai_api_key)
    image_service = ImageService(
        client=image_client,
        model=resolved_settings.openai_image_model,
        size=resolved_settings.openai_image_size,
        timeout_seconds=resolved_settings.collaborator_timeout_seconds,
    )
    feedback_service = FeedbackService(
        client=feedback_client,
        model=resolved_settings.openai_feedback_model,
        timeout_seconds=resolved_settings.collaborator_timeout_seconds,
    )
    audio_input = SoundDeviceAudioInput(
        sample_rate=resolved_settings.audio_sample_rate,
        channels=resolved_settings.audio_channels,
        device=resolved_settings.audio_device,
    )
    notice_board = NoticeBoard()
    presenter_service = PresenterService(
        image_service=image_service,
        feedback_service=feedback_service,
        capture=CaptureController(audio_input),
        timing=TimingEngine(
            countdown_interval_ms=resolved_settings.countdown_interval_ms,
            progress_interval_ms=resolved_settings.progress_interval_ms,
        ),
        notifier=notice_board,
        countdown_start=resolved_settings.countdown_start,
        slide_duration_ms=resolved_settings.slide_duration_ms,
    )

    async def close_resources() -> None:
        presenter_service.reset()
        await image_client.close()
        await feedback_client.close()

    return AppContainer(
        settings=resolved_settings,
        presenter_service=presenter_service,
        notice_board=notice_board,
        close_resources=close_resources,
    )
