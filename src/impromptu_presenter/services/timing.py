"""Countdown and slide timers driven by the event loop."""

import asyncio
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field

from impromptu_presenter.domain.session import (
    COUNTDOWN_INTERVAL_MS,
    PROGRESS_INTERVAL_MS,
)

_logger = logging.getLogger(__name__)


@dataclass
class ScheduleHandle:
    """Cancellable handle for one scheduled countdown or slide."""

    generation: int
    task: asyncio.Task | None = None
    cancelled: bool = False

    def cancel(self) -> None:
        """Stop the schedule; no callback fires after this returns."""
        self.cancelled = True
        if self.task is not None and self.task is not asyncio.current_task():
            self.task.cancel()


@dataclass
class TimingEngine:
    """Schedules countdown ticks and slide progress on the running loop.

    Callbacks are plain callables invoked on the loop. Each one is checked
    against its handle and the generation it was scheduled in right before
    it runs, so a timer that already woke up cannot call back once its
    schedule was cancelled or superseded. Only ``cancel_all`` advances the
    generation; a countdown and a slide may be live in the same one.
    """

    countdown_interval_ms: int = COUNTDOWN_INTERVAL_MS
    progress_interval_ms: int = PROGRESS_INTERVAL_MS
    clock: Callable[[], float] = time.monotonic
    _generation: int = field(default=0, init=False)
    _countdown: ScheduleHandle | None = field(default=None, init=False)
    _slide: ScheduleHandle | None = field(default=None, init=False)

    def schedule_countdown(
        self,
        start: int,
        on_tick: Callable[[int], None],
        on_complete: Callable[[], None],
    ) -> ScheduleHandle:
        """Tick from ``start`` down to 0 once per interval, then complete."""
        if start < 0:
            raise ValueError("Countdown start must not be negative")
        if self._countdown is not None:
            self._countdown.cancel()
        handle = self._new_handle()
        self._countdown = handle
        handle.task = asyncio.get_running_loop().create_task(
            self._run_countdown(handle, start, on_tick, on_complete)
        )
        return handle

    def schedule_slide(
        self,
        duration_ms: int,
        on_progress: Callable[[float], None],
        on_elapsed: Callable[[], None],
    ) -> ScheduleHandle:
        """Report progress for one slide and signal when it has elapsed."""
        if duration_ms <= 0:
            raise ValueError("Slide duration must be positive")
        if self._slide is not None:
            self._slide.cancel()
        handle = self._new_handle()
        self._slide = handle
        handle.task = asyncio.get_running_loop().create_task(
            self._run_slide(handle, duration_ms, on_progress, on_elapsed)
        )
        return handle

    def cancel_all(self) -> None:
        """Cancel every pending schedule."""
        self._generation += 1
        for handle in (self._countdown, self._slide):
            if handle is not None:
                handle.cancel()
        self._countdown = None
        self._slide = None

    @property
    def pending(self) -> bool:
        """Return True while a countdown or slide is still scheduled."""
        return any(
            handle is not None and not handle.cancelled and not _finished(handle)
            for handle in (self._countdown, self._slide)
        )

    def _new_handle(self) -> ScheduleHandle:
        return ScheduleHandle(generation=self._generation)

    def _is_live(self, handle: ScheduleHandle) -> bool:
        if handle.cancelled or handle.generation != self._generation:
            return False
        return handle is self._countdown or handle is self._slide

    def _fire(self, handle: ScheduleHandle, callback: Callable, *args: object) -> bool:
        if not self._is_live(handle):
            return False
        try:
            callback(*args)
        except Exception:
            _logger.exception("Timer callback failed")
        return True

    async def _run_countdown(
        self,
        handle: ScheduleHandle,
        start: int,
        on_tick: Callable[[int], None],
        on_complete: Callable[[], None],
    ) -> None:
        interval = self.countdown_interval_ms / 1000
        for remaining in range(start, -1, -1):
            if not self._fire(handle, on_tick, remaining):
                return
            if remaining:
                await asyncio.sleep(interval)
        self._fire(handle, on_complete)

    async def _run_slide(
        self,
        handle: ScheduleHandle,
        duration_ms: int,
        on_progress: Callable[[float], None],
        on_elapsed: Callable[[], None],
    ) -> None:
        duration = duration_ms / 1000
        interval = self.progress_interval_ms / 1000
        started_at = self.clock()
        last = 0.0
        if not self._fire(handle, on_progress, last):
            return
        while True:
            elapsed = self.clock() - started_at
            if elapsed >= duration:
                break
            await asyncio.sleep(min(interval, duration - elapsed))
            progress = min(100.0, (self.clock() - started_at) / duration * 100)
            last = max(last, progress)
            if last < 100.0 and not self._fire(handle, on_progress, last):
                return
        if not self._fire(handle, on_progress, 100.0):
            return
        self._fire(handle, on_elapsed)


def _finished(handle: ScheduleHandle) -> bool:
    return handle.task is not None and handle.task.done()
