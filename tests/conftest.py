"""Shared test fixtures."""

import asyncio
import threading
from collections.abc import Callable
from dataclasses import dataclass, field

import pytest

from impromptu_presenter.config import Settings
from impromptu_presenter.containers import AppContainer
from impromptu_presenter.domain.errors import CapturePermissionError
from impromptu_presenter.domain.session import Stage
from impromptu_presenter.services.capture import AudioInput, CaptureController
from impromptu_presenter.services.feedback import FeedbackClient, FeedbackService
from impromptu_presenter.services.images import ImageClient, ImageService
from impromptu_presenter.services.notifications import NoticeBoard
from impromptu_presenter.services.presenter import PresenterService
from impromptu_presenter.services.timing import TimingEngine

FAST_SLIDE_MS = 20
FAST_TICK_MS = 5
FAST_PROGRESS_MS = 2


@dataclass
class FakeImageClient(ImageClient):
    """Fake image client returning numbered data URLs."""

    count: int = 3
    error: Exception | None = None
    prompts: list[str] = field(default_factory=list)

    async def generate(self, *, model: str, prompt: str, size: str) -> str | None:
        if self.error is not None:
            raise self.error
        self.prompts.append(prompt)
        index = len(self.prompts)
        if index > self.count:
            return None
        return f"data:image/png;base64,aW1hZ2U{index}"


@dataclass
class FakeFeedbackClient(FeedbackClient):
    """Fake feedback client recording every request."""

    payload: dict[str, object] = field(
        default_factory=lambda: {
            "clarity_feedback": "Clear and well structured.",
            "pacing_feedback": "Slightly rushed on the last slide.",
            "content_relevance_feedback": "Stayed on topic throughout.",
            "overall_feedback": "A confident impromptu talk.",
        }
    )
    error: Exception | None = None
    gate: asyncio.Event | None = None
    calls: list[dict[str, object]] = field(default_factory=list)

    async def review(
        self,
        *,
        model: str,
        audio_data_url: str,
        schema: dict[str, object],
        prompt: str,
    ) -> dict[str, object]:
        self.calls.append(
            {"model": model, "audio_data_url": audio_data_url, "prompt": prompt}
        )
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return self.payload


@dataclass
class FakeAudioStream:
    """Fake open stream that records whether it was released."""

    closed: bool = False

    def close(self) -> None:
        self.closed = True


@dataclass
class FakeAudioInput(AudioInput):
    """Fake microphone delivering fixed chunks as soon as it opens."""

    chunks: list[bytes] = field(default_factory=lambda: [b"\x01\x00" * 300] * 2)
    error: Exception | None = None
    gate: threading.Event | None = None
    sample_rate: int = 16000
    channels: int = 1
    sample_width: int = 2
    streams: list[FakeAudioStream] = field(default_factory=list)
    callbacks: list[Callable[[bytes], None]] = field(default_factory=list)

    def open(self, on_chunk: Callable[[bytes], None]) -> FakeAudioStream:
        if self.gate is not None:
            self.gate.wait(timeout=5)
        if self.error is not None:
            raise self.error
        stream = FakeAudioStream()
        self.streams.append(stream)
        self.callbacks.append(on_chunk)
        for chunk in self.chunks:
            on_chunk(chunk)
        return stream


def denied_audio_input() -> FakeAudioInput:
    return FakeAudioInput(error=CapturePermissionError("Permission denied"))


def make_presenter(
    image_client: FakeImageClient | None = None,
    feedback_client: FakeFeedbackClient | None = None,
    audio_input: FakeAudioInput | None = None,
    notice_board: NoticeBoard | None = None,
    slide_duration_ms: int = FAST_SLIDE_MS,
    countdown_start: int = 3,
) -> PresenterService:
    return PresenterService(
        image_service=ImageService(
            client=image_client or FakeImageClient(), model="gpt-image-1"
        ),
        feedback_service=FeedbackService(
            client=feedback_client or FakeFeedbackClient(),
            model="gpt-4o-audio-preview",
        ),
        capture=CaptureController(audio_input or FakeAudioInput()),
        timing=TimingEngine(
            countdown_interval_ms=FAST_TICK_MS,
            progress_interval_ms=FAST_PROGRESS_MS,
        ),
        notifier=notice_board or NoticeBoard(),
        countdown_start=countdown_start,
        slide_duration_ms=slide_duration_ms,
    )


async def run_until(
    presenter: PresenterService, stage: Stage, timeout: float = 2.0
) -> None:
    """Yield to the loop until the presenter reaches a stage."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while presenter.stage is not stage:
        if loop.time() > deadline:
            raise AssertionError(f"Timed out waiting for {stage}, at {presenter.stage}")
        await asyncio.sleep(0.001)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        openai_api_key="openai-key",
        slide_duration_ms=FAST_SLIDE_MS,
        countdown_interval_ms=FAST_TICK_MS,
        progress_interval_ms=FAST_PROGRESS_MS,
    )


@pytest.fixture
def image_client() -> FakeImageClient:
    return FakeImageClient()


@pytest.fixture
def feedback_client() -> FakeFeedbackClient:
    return FakeFeedbackClient()


@pytest.fixture
def audio_input() -> FakeAudioInput:
    return FakeAudioInput()


@pytest.fixture
def notice_board() -> NoticeBoard:
    return NoticeBoard()


@pytest.fixture
def container(
    settings: Settings,
    image_client: FakeImageClient,
    feedback_client: FakeFeedbackClient,
    audio_input: FakeAudioInput,
    notice_board: NoticeBoard,
) -> AppContainer:
    presenter_service = make_presenter(
        image_client=image_client,
        feedback_client=feedback_client,
        audio_input=audio_input,
        notice_board=notice_board,
        slide_duration_ms=settings.slide_duration_ms,
    )

    async def close_resources() -> None:
        presenter_service.reset()

    return AppContainer(
        settings=settings,
        presenter_service=presenter_service,
        notice_board=notice_board,
        close_resources=close_resources,
    )
