"""Microphone input backed by PortAudio through sounddevice."""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from impromptu_presenter.domain.errors import (
    CaptureDeviceError,
    CapturePermissionError,
)
from impromptu_presenter.services.capture import AudioInput, AudioStream

_logger = logging.getLogger(__name__)

_PERMISSION_MARKERS = ("permission", "denied", "not permitted", "not authorized")


@dataclass
class SoundDeviceStream(AudioStream):
    """Open PortAudio stream."""

    stream: Any

    def close(self) -> None:
        """Stop the stream and release the device."""
        try:
            self.stream.stop()
        finally:
            self.stream.close()


@dataclass
class SoundDeviceAudioInput(AudioInput):
    """Opens 16-bit PCM input streams on a PortAudio device."""

    sample_rate: int = 16000
    channels: int = 1
    sample_width: int = 2
    device: int | None = None
    blocksize: int = 1024
    stream_factory: Callable[..., Any] | None = None

    def open(self, on_chunk: Callable[[bytes], None]) -> SoundDeviceStream:
        """Open the device and forward raw frames to ``on_chunk``."""

        def callback(indata, frames, time_info, status) -> None:
            if status:
                _logger.warning("Audio input status: %s", status)
            on_chunk(bytes(indata))

        factory = self.stream_factory or _raw_input_stream_factory()
        try:
            stream = factory(
                samplerate=self.sample_rate,
                channels=self.channels,
                dtype="int16",
                device=self.device,
                blocksize=self.blocksize,
                callback=callback,
            )
        except Exception as exc:
            raise _classify(exc) from exc
        try:
            stream.start()
        except Exception as exc:
            stream.close()
            raise _classify(exc) from exc
        _logger.info("Opened audio input device %s", self.device)
        return SoundDeviceStream(stream=stream)


def _raw_input_stream_factory() -> Callable[..., Any]:
    # PortAudio is loaded on first use so the app imports without a sound stack.
    try:
        import sounddevice
    except OSError as exc:
        raise CaptureDeviceError(f"PortAudio is not available: {exc}") from exc
    return sounddevice.RawInputStream


def _classify(exc: Exception) -> CaptureDeviceError | CapturePermissionError:
    message = str(exc) or type(exc).__name__
    if any(marker in message.lower() for marker in _PERMISSION_MARKERS):
        return CapturePermissionError(message)
    return CaptureDeviceError(message)
