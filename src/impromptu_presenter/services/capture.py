"""Microphone capture lifecycle for a presentation."""

import asyncio
import io
import logging
import threading
import wave
from collections.abc import Callable
from dataclasses import dataclass, field
from functools import partial
from typing import Protocol

from impromptu_presenter.domain.audio import CapturedAudio, CaptureOutcome
from impromptu_presenter.domain.errors import CapturePermissionError

_logger = logging.getLogger(__name__)

WAV_MIME_TYPE = "audio/wav"


class AudioStream(Protocol):
    """An open input stream delivering chunks to its callback."""

    def close(self) -> None:
        """Stop delivering chunks and release the device."""


class AudioInput(Protocol):
    """Host capability that opens microphone streams of 16-bit PCM."""

    sample_rate: int
    channels: int
    sample_width: int

    def open(self, on_chunk: Callable[[bytes], None]) -> AudioStream:
        """Open and start a stream.

        Raises CapturePermissionError when access is denied and
        CaptureDeviceError when no device could be used.
        """


@dataclass
class CaptureController:
    """Owns the microphone for at most one capture at a time."""

    audio_input: AudioInput
    mime_type: str = WAV_MIME_TYPE
    _stream: AudioStream | None = field(default=None, init=False)
    _chunks: list[bytes] = field(default_factory=list, init=False)
    _generation: int = field(default=0, init=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False)

    @property
    def is_capturing(self) -> bool:
        return self._stream is not None

    async def begin(self) -> CaptureOutcome:
        """Acquire the microphone and start buffering chunks.

        Any capture that was not finished yet is discarded first. The device
        is opened in a worker thread; if the capture was discarded or the
        caller cancelled while the device was opening, the new stream is
        closed as soon as it arrives.
        """
        self.discard()
        generation = self._generation
        on_chunk = partial(self._collect, generation)
        acquisition = asyncio.ensure_future(
            asyncio.to_thread(self.audio_input.open, on_chunk)
        )
        try:
            stream = await asyncio.shield(acquisition)
        except asyncio.CancelledError:
            acquisition.add_done_callback(_close_acquired)
            raise
        except CapturePermissionError as exc:
            _logger.warning("Microphone permission denied: %s", exc)
            return CaptureOutcome.PERMISSION_DENIED
        except Exception as exc:
            _logger.error("Could not access microphone: %s", exc)
            return CaptureOutcome.DEVICE_ERROR
        if generation != self._generation:
            _close_stream(stream)
            return CaptureOutcome.SUPERSEDED
        self._stream = stream
        _logger.info("Audio capture started")
        return CaptureOutcome.STARTED

    def finish(self) -> CapturedAudio | None:
        """Stop the capture and return its audio, or None if not capturing."""
        if self._stream is None:
            return None
        stream = self._stream
        self._stream = None
        with self._lock:
            self._generation += 1
            chunks = self._chunks
            self._chunks = []
        _close_stream(stream)
        pcm = b"".join(chunks)
        data = self._to_wav(pcm) if pcm else b""
        _logger.info("Audio capture finished: %s bytes", len(data))
        return CapturedAudio(data=data, mime_type=self.mime_type)

    def discard(self) -> None:
        """Stop any active capture and drop buffered chunks."""
        with self._lock:
            self._generation += 1
            self._chunks = []
        if self._stream is not None:
            stream = self._stream
            self._stream = None
            _close_stream(stream)
            _logger.info("Audio capture discarded")

    def _collect(self, generation: int, chunk: bytes) -> None:
        # Called from the audio thread.
        if not chunk:
            return
        with self._lock:
            if generation == self._generation:
                self._chunks.append(bytes(chunk))

    def _to_wav(self, pcm: bytes) -> bytes:
        buffer = io.BytesIO()
        with wave.open(buffer, "wb") as wav_file:
            wav_file.setnchannels(self.audio_input.channels)
            wav_file.setsampwidth(self.audio_input.sample_width)
            wav_file.setframerate(self.audio_input.sample_rate)
            wav_file.writeframes(pcm)
        return buffer.getvalue()


def _close_acquired(acquisition: asyncio.Future) -> None:
    if acquisition.cancelled() or acquisition.exception() is not None:
        return
    _close_stream(acquisition.result())


def _close_stream(stream: AudioStream) -> None:
    try:
        stream.close()
    except Exception as exc:
        _logger.error("Error closing audio stream: %s", exc)
