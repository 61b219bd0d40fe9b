"""Session state machine for timed impromptu presentations."""

import asyncio
import logging
from collections.abc import Callable, Coroutine
from dataclasses import dataclass, field

from impromptu_presenter.domain.audio import CaptureOutcome
from impromptu_presenter.domain.errors import (
    AudioEncodingError,
    FeedbackGenerationError,
    ImageGenerationError,
    InvalidTransitionError,
)
from impromptu_presenter.domain.feedback import (
    FallbackReason,
    PresentationFeedback,
    fallback_feedback,
)
from impromptu_presenter.domain.session import (
    COUNTDOWN_START,
    SLIDE_DURATION_MS,
    Session,
    Stage,
)
from impromptu_presenter.services.capture import CaptureController
from impromptu_presenter.services.feedback import FeedbackService
from impromptu_presenter.services.images import ImageService
from impromptu_presenter.services.notifications import Notice, Notifier
from impromptu_presenter.services.timing import TimingEngine

_logger = logging.getLogger(__name__)

EMPTY_TOPIC_MESSAGE = "Please enter a topic."
RECORDING_ISSUE_MESSAGE = "Recording was not active or failed to initialize."
NO_AUDIO_MESSAGE = "No audio was recorded. Cannot provide feedback."

_CAPTURE_NOTICES: dict[CaptureOutcome, str] = {
    CaptureOutcome.PERMISSION_DENIED: (
        "Microphone permission denied. Continuing without audio."
    ),
    CaptureOutcome.DEVICE_ERROR: (
        "Could not access microphone. Continuing without audio."
    ),
}


@dataclass
class PresenterService:
    """State machine driving one presentation attempt at a time.

    Every mutation of ``session`` happens on the event loop. Work that
    resumes later (timer callbacks and spawned tasks) carries the epoch it
    was scheduled in and is dropped once ``reset`` or a new attempt has
    moved the epoch on.
    """

    image_service: ImageService
    feedback_service: FeedbackService
    capture: CaptureController
    timing: TimingEngine
    notifier: Notifier
    countdown_start: int = COUNTDOWN_START
    slide_duration_ms: int = SLIDE_DURATION_MS
    session: Session = field(init=False)
    _epoch: int = field(default=0, init=False)
    _tasks: set[asyncio.Task] = field(default_factory=set, init=False)

    def __post_init__(self) -> None:
        if self.countdown_start < 0:
            raise ValueError("Countdown start must not be negative")
        if self.slide_duration_ms <= 0:
            raise ValueError("Slide duration must be positive")
        self.session = Session(countdown_value=self.countdown_start)

    @property
    def stage(self) -> Stage:
        return self.session.stage

    async def submit_topic(self, topic: str) -> Session:
        """Start an attempt: validate the topic and generate slide images."""
        if self.session.stage is not Stage.IDLE:
            raise InvalidTransitionError(self.session.stage, "submit a topic")
        cleaned = topic.strip()
        if not cleaned:
            self.session.error = EMPTY_TOPIC_MESSAGE
            return self.session

        epoch = self._next_epoch()
        self.session = Session(
            stage=Stage.GENERATING_IMAGES,
            topic=cleaned,
            countdown_value=self.countdown_start,
        )
        _logger.info("Generating images for topic %r", cleaned)
        try:
            images = await self.image_service.generate(cleaned)
        except ImageGenerationError as exc:
            if self._is_current(epoch):
                self._fail_generation(str(exc))
            return self.session
        if not self._is_current(epoch):
            return self.session

        self.session.images = images
        self._enter_countdown(epoch)
        return self.session

    def reset(self) -> Session:
        """Abandon the current attempt and return to idle."""
        self._next_epoch()
        self.timing.cancel_all()
        for task in self._tasks:
            task.cancel()
        self._tasks.clear()
        self.capture.discard()
        self.session = Session(countdown_value=self.countdown_start)
        _logger.info("Session reset")
        return self.session

    def _next_epoch(self) -> int:
        self._epoch += 1
        return self._epoch

    def _is_current(self, epoch: int) -> bool:
        return epoch == self._epoch

    def _guarded(self, epoch: int, callback: Callable) -> Callable:
        def run(*args: object) -> None:
            if self._is_current(epoch):
                callback(*args)

        return run

    def _spawn(self, coro: Coroutine[object, object, None]) -> None:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._task_done)

    def _task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            _logger.error("Session task failed", exc_info=exc)

    def _transition(self, stage: Stage) -> None:
        _logger.info("Stage %s -> %s", self.session.stage, stage)
        self.session.stage = stage

    def _fail_generation(self, message: str) -> None:
        self.session.images = ()
        self.session.error = f"Failed to generate images: {message}"
        self._transition(Stage.IDLE)
        self.notifier.notify(
            Notice(
                title="Error",
                description=f"Image generation failed: {message}",
                variant="destructive",
            )
        )

    def _enter_countdown(self, epoch: int) -> None:
        self.session.countdown_value = self.countdown_start
        self._transition(Stage.COUNTDOWN)
        self.timing.schedule_countdown(
            self.countdown_start,
            on_tick=self._guarded(epoch, self._on_countdown_tick),
            on_complete=self._guarded(
                epoch, lambda: self._spawn(self._start_slideshow(epoch))
            ),
        )

    def _on_countdown_tick(self, remaining: int) -> None:
        self.session.countdown_value = remaining

    async def _start_slideshow(self, epoch: int) -> None:
        outcome = await self.capture.begin()
        if not self._is_current(epoch):
            return
        self.session.audio_unavailable = outcome is not CaptureOutcome.STARTED
        if self.session.audio_unavailable:
            self.notifier.notify(
                Notice(
                    title="Microphone unavailable",
                    description=_CAPTURE_NOTICES.get(
                        outcome, "Continuing without audio."
                    ),
                )
            )
        self._transition(Stage.SLIDESHOW)
        self.session.current_slide_index = 0
        self._show_slide(epoch)

    def _show_slide(self, epoch: int) -> None:
        self.session.slide_progress = 0.0
        self.timing.schedule_slide(
            self.slide_duration_ms,
            on_progress=self._guarded(epoch, self._on_slide_progress),
            on_elapsed=self._guarded(epoch, lambda: self._on_slide_elapsed(epoch)),
        )

    def _on_slide_progress(self, progress: float) -> None:
        if self.session.stage is Stage.SLIDESHOW:
            self.session.slide_progress = max(0.0, min(100.0, progress))

    def _on_slide_elapsed(self, epoch: int) -> None:
        if self.session.stage is not Stage.SLIDESHOW:
            return
        if self.session.current_slide_index < len(self.session.images) - 1:
            self.session.current_slide_index += 1
            self._show_slide(epoch)
            return
        self._spawn(self._finish_slideshow(epoch))

    async def _finish_slideshow(self, epoch: int) -> None:
        if not self._is_current(epoch):
            return
        if self.session.audio_unavailable:
            self.capture.discard()
            self._complete(fallback_feedback(FallbackReason.MICROPHONE_UNAVAILABLE))
            return

        audio = self.capture.finish()
        if audio is None:
            self.session.error = RECORDING_ISSUE_MESSAGE
            self._complete(fallback_feedback(FallbackReason.RECORDING_ISSUE))
            return
        if audio.size == 0:
            self.session.error = NO_AUDIO_MESSAGE
            self.notifier.notify(
                Notice(
                    title="Warning",
                    description="No audio recorded. Feedback might be limited.",
                )
            )
            self._complete(fallback_feedback(FallbackReason.NO_AUDIO))
            return

        self._transition(Stage.FETCHING_FEEDBACK)
        try:
            encoded = await self.feedback_service.encode(audio)
        except AudioEncodingError as exc:
            if self._is_current(epoch):
                _logger.error("Audio encoding failed: %s", exc)
                self.session.error = f"Failed to process audio: {exc}"
                self._complete(
                    fallback_feedback(FallbackReason.AUDIO_PROCESSING_ERROR)
                )
            return
        if not self._is_current(epoch):
            return

        try:
            feedback = await self.feedback_service.review(
                encoded, self.session.topic
            )
        except FeedbackGenerationError as exc:
            if self._is_current(epoch):
                self.session.error = f"Failed to get feedback: {exc}"
                self.notifier.notify(
                    Notice(
                        title="Error",
                        description=f"Feedback generation failed: {exc}",
                        variant="destructive",
                    )
                )
                self._complete(fallback_feedback(FallbackReason.FEEDBACK_ERROR))
            return
        if self._is_current(epoch):
            self._complete(feedback)

    def _complete(self, feedback: PresentationFeedback) -> None:
        if self.session.feedback is not None:
            _logger.warning("Feedback already recorded; ignoring replacement")
            return
        self.session.feedback = feedback
        self._transition(Stage.SHOW_FEEDBACK)
