import asyncio

import pytest
from loguru import logger

from container_gateway.services.errors import ResourceNotFoundError
from container_gateway.services.fanout import FanOut
from container_gateway.services.result import Result


async def succeed(value, delay: float = 0.0) -> Result:
    await asyncio.sleep(delay)
    return Result.success(value)


async def fail(delay: float = 0.0) -> Result:
    await asyncio.sleep(delay)
    return Result.failure(ResourceNotFoundError("test"))


@pytest.mark.asyncio
async def test_gather_preserves_input_order():
    fanout = FanOut()

    result = await fanout.gather([succeed("a", 0.02), succeed("b", 0.0), succeed("c", 0.01)])

    assert result.ok
    assert result.data == ["a", "b", "c"]


@pytest.mark.asyncio
async def test_gather_of_nothing_succeeds():
    result = await FanOut().gather([])

    assert result.ok
    assert result.data == []


@pytest.mark.asyncio
async def test_first_failure_is_reported_without_waiting_for_stragglers():
    fanout = FanOut()
    release = asyncio.Event()
    finished = []

    async def straggler() -> Result:
        await release.wait()
        finished.append(True)
        return Result.success("late")

    result = await fanout.gather([straggler(), fail()])

    assert isinstance(result.error, ResourceNotFoundError)
    assert finished == []
    assert fanout.get_detached_count() == 1

    release.set()
    await fanout.drain()
    assert finished == [True]
    assert fanout.get_detached_count() == 0


@pytest.mark.asyncio
async def test_limit_bounds_concurrency():
    fanout = FanOut()
    running = 0
    peak = 0

    async def tracked(value) -> Result:
        nonlocal running, peak
        running += 1
        peak = max(peak, running)
        await asyncio.sleep(0.001)
        running -= 1
        return Result.success(value)

    result = await fanout.gather([tracked(n) for n in range(10)], limit=3)

    assert result.data == list(range(10))
    assert peak == 3


@pytest.mark.asyncio
async def test_queued_calls_are_not_started_after_a_failure():
    fanout = FanOut()
    started = []

    async def call(n) -> Result:
        started.append(n)
        await asyncio.sleep(0)
        if n == 0:
            return Result.failure(ResourceNotFoundError("test"))
        return Result.success(n)

    result = await fanout.gather([call(n) for n in range(6)], limit=1)
    await fanout.drain()

    assert isinstance(result.error, ResourceNotFoundError)
    assert started == [0]
    assert fanout.get_detached_count() == 0


@pytest.mark.asyncio
async def test_detached_call_exception_is_logged():
    fanout = FanOut()
    release = asyncio.Event()
    messages = []
    sink_id = logger.add(messages.append, level="ERROR", format="{message}")

    async def broken() -> Result:
        await release.wait()
        raise RuntimeError("boom")

    try:
        result = await fanout.gather([broken(), fail()])
        release.set()
        await fanout.drain()
    finally:
        logger.remove(sink_id)

    assert isinstance(result.error, ResourceNotFoundError)
    assert any("RuntimeError('boom')" in message for message in messages)
