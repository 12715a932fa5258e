import asyncio

import pytest

from decoding_den.audio.timers import AsyncioScheduler, ManualScheduler


def test_manual_scheduler_runs_callbacks_in_due_order():
    scheduler = ManualScheduler()
    calls = []
    scheduler.call_later(0.3, calls.append, "late")
    scheduler.call_later(0.1, calls.append, "early")
    scheduler.call_later(0.1, calls.append, "early-second")

    ran = scheduler.advance(0.2)

    assert ran == 2
    assert calls == ["early", "early-second"]
    assert scheduler.time() == pytest.approx(0.2)


def test_callbacks_scheduled_while_advancing_also_run():
    scheduler = ManualScheduler()
    seen = []

    def first():
        seen.append(("first", scheduler.time()))
        scheduler.call_later(0.05, lambda: seen.append(("second", scheduler.time())))

    scheduler.call_later(0.1, first)
    scheduler.advance(0.2)

    assert seen == [("first", pytest.approx(0.1)), ("second", pytest.approx(0.15))]


def test_cancelled_callbacks_do_not_run():
    scheduler = ManualScheduler()
    calls = []
    handle = scheduler.call_later(0.1, calls.append, "x")
    handle.cancel()

    assert handle.cancelled
    assert scheduler.pending == 0
    assert scheduler.advance(1.0) == 0
    assert calls == []


def test_float_sums_fall_due():
    scheduler = ManualScheduler()
    calls = []
    scheduler.call_later(0.1 + 0.15, calls.append, "due")

    scheduler.advance(0.25)

    assert calls == ["due"]


def test_run_all_drains_queue():
    scheduler = ManualScheduler()
    calls = []
    scheduler.call_later(5.0, calls.append, 1)
    scheduler.call_later(0.5, calls.append, 2)

    assert scheduler.run_all() == 2
    assert calls == [2, 1]
    assert scheduler.time() == pytest.approx(5.0)


def test_manual_sleep_records_without_advancing():
    scheduler = ManualScheduler()
    asyncio.run(scheduler.sleep(0.01))

    assert scheduler.sleeps == [0.01]
    assert scheduler.time() == 0.0


def test_asyncio_scheduler_call_later():
    scheduler = AsyncioScheduler()
    calls = []

    async def scenario():
        scheduler.call_later(0.01, calls.append, "fired")
        cancelled = scheduler.call_later(0.01, calls.append, "cancelled")
        cancelled.cancel()
        await scheduler.sleep(0.05)
        return cancelled.cancelled

    assert asyncio.run(scenario()) is True
    assert calls == ["fired"]


def test_manual_handle_pending_until_fired_or_cancelled():
    scheduler = ManualScheduler()
    fired = scheduler.call_later(0.1, lambda: None)
    cancelled = scheduler.call_later(0.1, lambda: None)

    assert fired.pending and cancelled.pending

    cancelled.cancel()
    scheduler.advance(0.1)

    assert fired.pending is False
    assert cancelled.pending is False


def test_asyncio_handle_not_pending_once_loop_closed():
    scheduler = AsyncioScheduler()

    async def scenario():
        fired = scheduler.call_later(0.0, lambda: None)
        stranded = scheduler.call_later(60.0, lambda: None)
        assert stranded.pending is True
        await asyncio.sleep(0.01)
        return fired, stranded

    fired, stranded = asyncio.run(scenario())

    assert fired.pending is False
    assert stranded.pending is False
