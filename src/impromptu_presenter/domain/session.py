"""Domain models for a single presentation attempt."""

from dataclasses import dataclass
from enum import StrEnum

from impromptu_presenter.domain.feedback import PresentationFeedback

SLIDE_COUNT = 3
SLIDE_DURATION_MS = 3000
COUNTDOWN_START = 3
COUNTDOWN_INTERVAL_MS = 1000
PROGRESS_INTERVAL_MS = 100


class Stage(StrEnum):
    """Phase of a presentation session."""

    IDLE = "idle"
    GENERATING_IMAGES = "generating_images"
    COUNTDOWN = "countdown"
    SLIDESHOW = "slideshow"
    FETCHING_FEEDBACK = "fetching_feedback"
    SHOW_FEEDBACK = "show_feedback"


@dataclass
class Session:
    """Mutable state of one presentation attempt."""

    stage: Stage = Stage.IDLE
    topic: str = ""
    images: tuple[str, ...] = ()
    current_slide_index: int = 0
    countdown_value: int = COUNTDOWN_START
    slide_progress: float = 0.0
    audio_unavailable: bool = False
    feedback: PresentationFeedback | None = None
    error: str | None = None

    @property
    def current_image(self) -> str | None:
        if self.stage is not Stage.SLIDESHOW or not self.images:
            return None
        return self.images[self.current_slide_index]
