"""Presentation feedback extraction using audio-capable LLMs."""

import asyncio
import base64
import logging
from dataclasses import dataclass
from typing import Protocol

from pydantic import ValidationError

from impromptu_presenter.domain.audio import CapturedAudio, EncodedAudio
from impromptu_presenter.domain.errors import (
    AudioEncodingError,
    FeedbackGenerationError,
)
from impromptu_presenter.domain.feedback import PresentationFeedback

_logger = logging.getLogger(__name__)

FEEDBACK_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "clarity_feedback": {"type": "string"},
        "pacing_feedback": {"type": "string"},
        "content_relevance_feedback": {"type": "string"},
        "overall_feedback": {"type": "string"},
    },
    "required": [
        "clarity_feedback",
        "pacing_feedback",
        "content_relevance_feedback",
        "overall_feedback",
    ],
    "additionalProperties": False,
}


class FeedbackClient(Protocol):
    """Interface for LLM audio review."""

    async def review(
        self,
        *,
        model: str,
        audio_data_url: str,
        schema: dict[str, object],
        prompt: str,
    ) -> dict[str, object]:
        """Return structured feedback data for a recording."""


@dataclass
class FeedbackService:
    """Service that encodes recordings, prompts the model and validates results."""

    client: FeedbackClient
    model: str
    timeout_seconds: float | None = None

    async def encode(self, audio: CapturedAudio) -> EncodedAudio:
        """Encode captured audio as a base64 data URL off the event loop."""
        try:
            data_url = await asyncio.to_thread(_to_data_url, audio)
        except Exception as exc:
            raise AudioEncodingError(str(exc) or type(exc).__name__) from exc
        return EncodedAudio(mime_type=audio.mime_type, data_url=data_url)

    async def review(self, audio: EncodedAudio, topic: str) -> PresentationFeedback:
        """Request feedback on a recorded presentation about a topic."""
        try:
            raw = await asyncio.wait_for(
                self.client.review(
                    model=self.model,
                    audio_data_url=audio.data_url,
                    schema=FEEDBACK_SCHEMA,
                    prompt=_build_prompt(topic),
                ),
                timeout=self.timeout_seconds,
            )
        except TimeoutError as exc:
            raise FeedbackGenerationError("Feedback generation timed out.") from exc
        except Exception as exc:
            _logger.exception("Feedback generation error")
            raise FeedbackGenerationError(str(exc) or type(exc).__name__) from exc
        try:
            return PresentationFeedback.model_validate(raw)
        except ValidationError as exc:
            raise FeedbackGenerationError("Feedback response was malformed.") from exc


def _build_prompt(topic: str) -> str:
    return (
        "You are an AI agent providing feedback on presentations. "
        "Analyze the presentation recording and provide feedback on clarity, "
        "pacing, and content relevance to the topic.\n\n"
        f"Presentation Topic: {topic}\n\n"
        "Provide detailed feedback on the following aspects:\n\n"
        "- Clarity: How clear and easy to understand was the presentation?\n"
        "- Pacing: Was the presentation too fast, too slow, or just right?\n"
        "- Content Relevance: How relevant was the content to the "
        "presentation topic?\n\n"
        "Also, provide an overall feedback summary."
    )


def _to_data_url(audio: CapturedAudio) -> str:
    """Convert captured bytes to a base64 data URL carrying their MIME type."""
    if not audio.mime_type:
        raise ValueError("Captured audio has no MIME type")
    encoded = base64.b64encode(audio.data).decode("utf-8")
    return f"data:{audio.mime_type};base64,{encoded}"
