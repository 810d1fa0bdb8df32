"""Tests for FlushScheduler."""

import asyncio

import pytest

from pizzatelemetry.runtime.scheduler import FlushScheduler


class CallCounter:
    def __init__(self, fail: bool = False) -> None:
        self.calls = 0
        self.fail = fail

    def __call__(self) -> None:
        self.calls += 1
        if self.fail:
            raise RuntimeError("flush failed")


@pytest.mark.tier(1)
@pytest.mark.asyncio
async def test_start_runs_callback_periodically():
    callback = CallCounter()
    scheduler = FlushScheduler(callback)

    scheduler.start(0.02)
    await asyncio.sleep(0.09)
    scheduler.stop()

    assert callback.calls >= 2


@pytest.mark.tier(1)
@pytest.mark.asyncio
async def test_restart_replaces_previous_timer():
    """Starting twice leaves exactly one active timer."""
    callback = CallCounter()
    scheduler = FlushScheduler(callback)

    scheduler.start(0.05)
    first_task = scheduler._task
    scheduler.start(0.05)
    second_task = scheduler._task
    await asyncio.sleep(0)

    assert first_task is not second_task
    assert first_task.cancelled()
    assert not second_task.done()
    active = [
        t
        for t in asyncio.all_tasks()
        if t is not asyncio.current_task() and not t.done()
    ]
    assert active == [second_task]

    await asyncio.sleep(0.12)
    scheduler.stop()
    # Two timers would have produced about four calls by now.
    assert 1 <= callback.calls <= 3


@pytest.mark.tier(1)
@pytest.mark.asyncio
async def test_stop_cancels_timer():
    callback = CallCounter()
    scheduler = FlushScheduler(callback)

    scheduler.start(0.01)
    assert scheduler.running
    scheduler.stop()
    await asyncio.sleep(0.05)

    assert not scheduler.running
    assert callback.calls == 0


@pytest.mark.tier(1)
@pytest.mark.asyncio
async def test_stop_without_start_is_noop():
    scheduler = FlushScheduler(CallCounter())
    scheduler.stop()
    assert not scheduler.running


@pytest.mark.tier(1)
@pytest.mark.asyncio
async def test_failing_callback_keeps_timer_running():
    callback = CallCounter(fail=True)
    scheduler = FlushScheduler(callback)

    scheduler.start(0.01)
    await asyncio.sleep(0.06)

    assert scheduler.running
    assert callback.calls >= 2
    scheduler.stop()


@pytest.mark.tier(1)
@pytest.mark.asyncio
@pytest.mark.parametrize("period", [0, -1])
async def test_start_rejects_non_positive_period(period: float):
    scheduler = FlushScheduler(CallCounter())
    with pytest.raises(ValueError):
        scheduler.start(period)
    assert not scheduler.running


@pytest.mark.tier(1)
def test_start_requires_running_loop():
    scheduler = FlushScheduler(CallCounter())
    with pytest.raises(RuntimeError):
        scheduler.start(1)
