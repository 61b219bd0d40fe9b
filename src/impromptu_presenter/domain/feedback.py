"""Models for presentation feedback."""

from enum import StrEnum

from pydantic import BaseModel


class PresentationFeedback(BaseModel):
    """Structured feedback on one recorded presentation."""

    clarity_feedback: str
    pacing_feedback: str
    content_relevance_feedback: str
    overall_feedback: str


class FallbackReason(StrEnum):
    """Why real feedback could not be obtained."""

    MICROPHONE_UNAVAILABLE = "microphone_unavailable"
    RECORDING_ISSUE = "recording_issue"
    NO_AUDIO = "no_audio"
    FEEDBACK_ERROR = "feedback_error"
    AUDIO_PROCESSING_ERROR = "audio_processing_error"


_FALLBACK_TEXT: dict[FallbackReason, str] = {
    FallbackReason.MICROPHONE_UNAVAILABLE: "N/A (microphone unavailable)",
    FallbackReason.RECORDING_ISSUE: "N/A (recording issue)",
    FallbackReason.NO_AUDIO: "N/A (no audio recorded)",
    FallbackReason.FEEDBACK_ERROR: "Error fetching feedback.",
    FallbackReason.AUDIO_PROCESSING_ERROR: "N/A (audio processing error)",
}


def fallback_feedback(reason: FallbackReason) -> PresentationFeedback:
    """Build a locally synthesized feedback record for a degraded session."""
    text = _FALLBACK_TEXT[reason]
    if reason is FallbackReason.MICROPHONE_UNAVAILABLE:
        overall = (
            "N/A (microphone unavailable). The slideshow ran without recording, "
            "so no feedback could be generated."
        )
    else:
        overall = text
    return PresentationFeedback(
        clarity_feedback=text,
        pacing_feedback=text,
        content_relevance_feedback=text,
        overall_feedback=overall,
    )
