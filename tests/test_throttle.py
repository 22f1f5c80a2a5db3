# File: tests/test_throttle.py
import asyncio
import time

import pytest
from web_capture.fetchers.throttle import HostThrottle


@pytest.fixture()
def fake_time():
    state = {"now": 100.0, "slept": []}

    async def sleep(seconds):
        state["slept"].append(seconds)
        state["now"] += seconds

    return state, sleep, lambda: state["now"]


@pytest.mark.asyncio()
async def test_first_request_is_not_delayed(fake_time, make_random):
    state, sleep, clock = fake_time
    throttle = HostThrottle(2.0, 1.0, rng=make_random(uniform=0.5), sleep=sleep, clock=clock)

    assert await throttle.wait("example.com") == 0
    assert state["slept"] == []


@pytest.mark.asyncio()
async def test_same_host_waits_min_delay_plus_jitter(fake_time, make_random):
    state, sleep, clock = fake_time
    throttle = HostThrottle(2.0, 1.0, rng=make_random(uniform=0.5), sleep=sleep, clock=clock)

    await throttle.wait("example.com")
    waited = await throttle.wait("example.com")

    assert waited == pytest.approx(2.5)
    assert state["slept"] == [pytest.approx(2.5)]


@pytest.mark.asyncio()
async def test_hosts_are_throttled_independently(fake_time, make_random):
    state, sleep, clock = fake_time
    throttle = HostThrottle(2.0, 1.0, rng=make_random(uniform=0.5), sleep=sleep, clock=clock)

    await throttle.wait("a.example")
    assert await throttle.wait("b.example") == 0


@pytest.mark.asyncio()
async def test_elapsed_time_counts_towards_delay(fake_time, make_random):
    state, sleep, clock = fake_time
    throttle = HostThrottle(2.0, 1.0, rng=make_random(uniform=1.0), sleep=sleep, clock=clock)

    await throttle.wait("example.com")
    state["now"] += 1.0
    assert await throttle.wait("example.com") == pytest.approx(2.0)

    state["now"] += 10.0
    assert await throttle.wait("example.com") == 0


@pytest.mark.asyncio()
async def test_concurrent_requests_to_same_host_are_queued(make_random):
    slept = []

    async def sleep(seconds):
        slept.append(seconds)

    throttle = HostThrottle(2.0, 1.0, rng=make_random(uniform=0.5), sleep=sleep, clock=lambda: 100.0)

    waits = await asyncio.gather(*(throttle.wait("example.com") for _ in range(3)))

    assert waits == [0, pytest.approx(2.5), pytest.approx(5.0)]
    assert slept == waits[1:]


@pytest.mark.asyncio()
async def test_other_host_does_not_wait_behind_a_delayed_one(make_random):
    throttle = HostThrottle(0.5, 0, rng=make_random())
    await throttle.wait("a.example")

    async def timed(host):
        start = time.perf_counter()
        await throttle.wait(host)
        return time.perf_counter() - start

    delayed, other = await asyncio.gather(timed("a.example"), timed("b.example"))

    assert delayed >= 0.4
    assert other < 0.1
