"""Tests for countdown and slide timers."""

import asyncio

import pytest

from impromptu_presenter.services.timing import ScheduleHandle, TimingEngine


def _engine() -> TimingEngine:
    return TimingEngine(countdown_interval_ms=5, progress_interval_ms=2)


def test_countdown_ticks_each_value_once_then_completes() -> None:
    ticks: list[int] = []
    completions: list[bool] = []

    async def scenario() -> None:
        engine = _engine()
        engine.schedule_countdown(3, ticks.append, lambda: completions.append(True))
        await asyncio.sleep(0.1)
        assert not engine.pending

    asyncio.run(scenario())

    assert ticks == [3, 2, 1, 0]
    assert completions == [True]


def test_countdown_from_zero_ticks_once() -> None:
    ticks: list[int] = []
    completions: list[bool] = []

    async def scenario() -> None:
        _engine().schedule_countdown(0, ticks.append, lambda: completions.append(True))
        await asyncio.sleep(0.02)

    asyncio.run(scenario())

    assert ticks == [0]
    assert completions == [True]


def test_cancel_all_stops_countdown() -> None:
    ticks: list[int] = []
    completions: list[bool] = []

    async def scenario() -> None:
        engine = _engine()
        engine.schedule_countdown(3, ticks.append, lambda: completions.append(True))
        await asyncio.sleep(0.007)
        engine.cancel_all()
        await asyncio.sleep(0.05)

    asyncio.run(scenario())

    assert ticks
    assert ticks[-1] > 0
    assert completions == []


def test_cancelling_from_inside_a_callback_blocks_later_callbacks() -> None:
    ticks: list[int] = []
    completions: list[bool] = []
    holder: dict[str, ScheduleHandle] = {}

    def on_tick(value: int) -> None:
        ticks.append(value)
        if value == 2:
            holder["handle"].cancel()

    async def scenario() -> None:
        holder["handle"] = _engine().schedule_countdown(
            3, on_tick, lambda: completions.append(True)
        )
        await asyncio.sleep(0.05)

    asyncio.run(scenario())

    assert ticks == [3, 2]
    assert completions == []


def test_slide_progress_is_monotonic_and_ends_at_100() -> None:
    progress: list[float] = []
    elapsed: list[bool] = []

    async def scenario() -> None:
        _engine().schedule_slide(30, progress.append, lambda: elapsed.append(True))
        await asyncio.sleep(0.1)

    asyncio.run(scenario())

    assert progress[0] == 0.0
    assert progress[-1] == 100.0
    assert progress == sorted(progress)
    assert all(0.0 <= value <= 100.0 for value in progress)
    assert elapsed == [True]


def test_new_slide_cancels_previous_slide() -> None:
    first: list[float] = []
    second: list[float] = []
    elapsed: list[str] = []

    async def scenario() -> None:
        engine = _engine()
        engine.schedule_slide(20, first.append, lambda: elapsed.append("first"))
        await asyncio.sleep(0.005)
        engine.schedule_slide(20, second.append, lambda: elapsed.append("second"))
        await asyncio.sleep(0.1)

    asyncio.run(scenario())

    assert elapsed == ["second"]
    assert second[0] == 0.0
    assert 100.0 not in first


def test_cancel_all_stops_slide_callbacks() -> None:
    progress: list[float] = []
    elapsed: list[bool] = []

    async def scenario() -> None:
        engine = _engine()
        engine.schedule_slide(50, progress.append, lambda: elapsed.append(True))
        await asyncio.sleep(0.01)
        engine.cancel_all()
        seen = len(progress)
        await asyncio.sleep(0.1)
        assert len(progress) == seen

    asyncio.run(scenario())

    assert elapsed == []


def test_failing_callback_does_not_stop_the_schedule() -> None:
    ticks: list[int] = []

    def on_tick(value: int) -> None:
        ticks.append(value)
        if value == 3:
            raise RuntimeError("boom")

    completions: list[bool] = []

    async def scenario() -> None:
        _engine().schedule_countdown(3, on_tick, lambda: completions.append(True))
        await asyncio.sleep(0.1)

    asyncio.run(scenario())

    assert ticks == [3, 2, 1, 0]
    assert completions == [True]


def test_invalid_arguments_are_rejected() -> None:
    async def scenario() -> None:
        engine = _engine()
        with pytest.raises(ValueError):
            engine.schedule_countdown(-1, lambda value: None, lambda: None)
        with pytest.raises(ValueError):
            engine.schedule_slide(0, lambda value: None, lambda: None)

    asyncio.run(scenario())


def test_countdown_and_slide_run_side_by_side_until_cancel_all() -> None:
    ticks: list[int] = []
    elapsed: list[str] = []

    async def scenario() -> None:
        engine = _engine()
        countdown = engine.schedule_countdown(
            3, ticks.append, lambda: elapsed.append("countdown")
        )
        slide = engine.schedule_slide(
            10, lambda value: None, lambda: elapsed.append("slide")
        )
        assert countdown.generation == slide.generation
        await asyncio.sleep(0.1)

        engine.cancel_all()
        later = engine.schedule_slide(
            10, lambda value: None, lambda: elapsed.append("later")
        )
        assert later.generation > slide.generation
        await asyncio.sleep(0.05)

    asyncio.run(scenario())

    assert ticks == [3, 2, 1, 0]
    assert sorted(elapsed) == ["countdown", "later", "slide"]


def test_handle_from_before_cancel_all_never_fires() -> None:
    progress: list[float] = []

    async def scenario() -> None:
        engine = _engine()
        stale = engine.schedule_slide(50, progress.append, lambda: None)
        engine.cancel_all()
        stale.cancelled = False
        engine._slide = stale
        assert not engine._fire(stale, progress.append, 42.0)
        engine.cancel_all()

    asyncio.run(scenario())

    assert 42.0 not in progress
