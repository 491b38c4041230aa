from __future__ import annotations

import asyncio

import pytest

from ai_quiz.quizzer.countdown import Countdown


def test_tick_is_noop_when_stopped():
    ticks: list[int] = []
    countdown = Countdown(on_tick=ticks.append)
    countdown.reset(10)
    countdown.tick()
    assert countdown.remaining == 10
    assert ticks == []


def test_start_requires_positive_seconds():
    async def scenario():
        with pytest.raises(ValueError):
            Countdown().start(0)

    asyncio.run(scenario())


def test_manual_ticks_expire_once():
    expired: list[bool] = []
    ticks: list[int] = []

    async def scenario():
        countdown = Countdown(
            interval=60,
            on_tick=ticks.append,
            on_expire=lambda: expired.append(True),
        )
        countdown.start(3)
        for _ in range(5):
            countdown.tick()
        return countdown

    countdown = asyncio.run(scenario())
    assert ticks == [2, 1, 0]
    assert expired == [True]
    assert countdown.remaining == 0
    assert not countdown.running


def test_runs_to_zero_on_its_own():
    expired: list[bool] = []

    async def scenario():
        countdown = Countdown(
            interval=0.001, on_expire=lambda: expired.append(True)
        )
        countdown.start(3)
        for _ in range(200):
            if expired:
                break
            await asyncio.sleep(0.005)
        return countdown

    countdown = asyncio.run(scenario())
    assert expired == [True]
    assert countdown.remaining == 0


def test_stop_cancels_synchronously():
    ticks: list[int] = []

    async def scenario():
        countdown = Countdown(interval=0.001, on_tick=ticks.append)
        countdown.start(100)
        assert countdown.stop() is True
        await asyncio.sleep(0.02)
        assert countdown.stop() is False
        return countdown

    countdown = asyncio.run(scenario())
    assert ticks == []
    assert countdown.remaining == 100


def test_restart_replaces_previous_task():
    async def scenario():
        countdown = Countdown(interval=0.001)
        countdown.start(100)
        await asyncio.sleep(0.01)
        countdown.start(50)
        remaining_after_restart = countdown.remaining
        countdown.stop()
        return remaining_after_restart

    assert asyncio.run(scenario()) == 50


def test_failing_tick_callback_still_expires():
    expired: list[bool] = []

    def explode(_remaining: int) -> None:
        raise RuntimeError("listener bug")

    async def scenario():
        countdown = Countdown(
            interval=0.001,
            on_tick=explode,
            on_expire=lambda: expired.append(True),
        )
        countdown.start(3)
        for _ in range(200):
            if expired:
                break
            await asyncio.sleep(0.005)
        return countdown

    countdown = asyncio.run(scenario())
    assert expired == [True]
    assert countdown.remaining == 0
    assert not countdown.running


def test_failing_expiry_callback_stops_the_clock():
    def explode() -> None:
        raise RuntimeError("expiry bug")

    async def scenario():
        countdown = Countdown(interval=0.001, on_expire=explode)
        countdown.start(2)
        await asyncio.sleep(0.05)
        return countdown

    countdown = asyncio.run(scenario())
    assert not countdown.running
    assert countdown.remaining == 0
