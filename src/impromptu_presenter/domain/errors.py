"""Domain exceptions for presentation sessions."""


class PresenterError(Exception):
    """Base class for presenter failures."""


class InvalidTransitionError(PresenterError):
    """Raised when a trigger is not valid in the current stage."""

    def __init__(self, stage: str, action: str) -> None:
        super().__init__(f"Cannot {action} while {stage}")
        self.stage = stage
        self.action = action


class ImageGenerationError(PresenterError):
    """Raised when the image collaborator fails or returns too few images."""


class FeedbackGenerationError(PresenterError):
    """Raised when the feedback collaborator fails or returns invalid data."""


class AudioEncodingError(PresenterError):
    """Raised when captured audio cannot be turned into a data URL."""


class CaptureError(PresenterError):
    """Base class for audio input failures."""


class CapturePermissionError(CaptureError):
    """Raised when the host denies microphone access."""


class CaptureDeviceError(CaptureError):
    """Raised when no usable input device could be opened."""
