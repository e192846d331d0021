import asyncio

import pytest

from hostel_complaints.services.debounce import DebouncedTrigger


@pytest.mark.asyncio
async def test_burst_of_schedules_runs_only_the_last_call():
    trigger = DebouncedTrigger(0.05)
    calls = []

    def call(value):
        async def run():
            calls.append(value)
        return run

    for value in range(5):
        trigger.schedule("draft-1", call(value))
        await asyncio.sleep(0.01)

    await trigger.wait("draft-1")

    assert calls == [4]
    assert trigger.pending("draft-1") is False


@pytest.mark.asyncio
async def test_keys_are_debounced_independently():
    trigger = DebouncedTrigger(0.02)
    calls = []

    async def first():
        calls.append("a")

    async def second():
        calls.append("b")

    trigger.schedule("a", first)
    trigger.schedule("b", second)
    await asyncio.gather(trigger.wait("a"), trigger.wait("b"))

    assert sorted(calls) == ["a", "b"]


@pytest.mark.asyncio
async def test_cancel_before_firing():
    trigger = DebouncedTrigger(0.05)
    calls = []

    async def run():
        calls.append(1)

    trigger.schedule("draft-1", run)
    assert trigger.pending("draft-1") is True
    assert trigger.cancel("draft-1") is True

    await asyncio.sleep(0.1)
    assert calls == []
    assert trigger.pending("draft-1") is False


@pytest.mark.asyncio
async def test_fired_call_is_not_cancelled_by_reschedule():
    trigger = DebouncedTrigger(0.01)
    release = asyncio.Event()
    started = asyncio.Event()
    finished = []

    async def slow():
        started.set()
        await release.wait()
        finished.append("slow")

    async def fast():
        finished.append("fast")

    trigger.schedule("draft-1", slow)
    await started.wait()

    # Reschedule while the first call is in flight
    trigger.schedule("draft-1", fast)
    assert trigger.cancel("draft-1") is True
    assert trigger.pending("draft-1") is True

    release.set()
    await trigger.wait("draft-1")

    assert finished == ["slow"]
    assert trigger.pending("draft-1") is False


@pytest.mark.asyncio
async def test_failing_call_does_not_propagate():
    trigger = DebouncedTrigger(0.01)

    async def boom():
        raise RuntimeError("classification crashed")

    trigger.schedule("draft-1", boom)
    await trigger.wait("draft-1")

    assert trigger.pending("draft-1") is False


@pytest.mark.asyncio
async def test_shutdown_cancels_waiting_and_running_calls():
    trigger = DebouncedTrigger(0.01)
    started = asyncio.Event()
    calls = []

    async def hang():
        started.set()
        await asyncio.sleep(10)
        calls.append("hang")

    async def later():
        calls.append("later")

    trigger.schedule("running", hang)
    await started.wait()
    trigger.schedule("waiting", later)

    await trigger.shutdown()

    assert calls == []
    assert trigger.pending("running") is False
    assert trigger.pending("waiting") is False
