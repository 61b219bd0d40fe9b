"""Pydantic models for the session HTTP API."""

from pydantic import BaseModel, Field

from impromptu_presenter.domain.feedback import PresentationFeedback
from impromptu_presenter.domain.session import Session, Stage
from impromptu_presenter.services.notifications import Notice, NoticeVariant


class TopicRequest(BaseModel):
    """Topic submitted by the user."""

    topic: str = Field(max_length=500)


class SessionView(BaseModel):
    """Renderable snapshot of the current session."""

    stage: Stage
    topic: str
    images: list[str]
    current_slide_index: int | None
    current_image: str | None
    slide_count: int
    countdown_value: int | None
    slide_progress: float | None
    audio_unavailable: bool
    feedback: PresentationFeedback | None
    error: str | None

    @classmethod
    def from_session(cls, session: Session) -> "SessionView":
        in_slideshow = session.stage is Stage.SLIDESHOW
        return cls(
            stage=session.stage,
            topic=session.topic,
            images=list(session.images),
            current_slide_index=session.current_slide_index if in_slideshow else None,
            current_image=session.current_image,
            slide_count=len(session.images),
            countdown_value=(
                session.countdown_value if session.stage is Stage.COUNTDOWN else None
            ),
            slide_progress=session.slide_progress if in_slideshow else None,
            audio_unavailable=session.audio_unavailable,
            feedback=session.feedback,
            error=session.error,
        )


class NoticeView(BaseModel):
    """Transient notice for a toast."""

    title: str
    description: str
    variant: NoticeVariant

    @classmethod
    def from_notice(cls, notice: Notice) -> "NoticeView":
        return cls(
            title=notice.title,
            description=notice.description,
            variant=notice.variant,
        )
