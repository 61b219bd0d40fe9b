"""Models for captured and encoded audio."""

from dataclasses import dataclass
from enum import StrEnum


class CaptureOutcome(StrEnum):
    """Result of trying to start a capture."""

    STARTED = "started"
    PERMISSION_DENIED = "permission_denied"
    DEVICE_ERROR = "device_error"
    SUPERSEDED = "superseded"


@dataclass(frozen=True)
class CapturedAudio:
    """Bytes harvested from one capture, tagged with their container type."""

    data: bytes
    mime_type: str

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class EncodedAudio:
    """Audio ready to send to the feedback collaborator."""

    mime_type: str
    data_url: str
