# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

import asyncio

import pytest

from guidesphere.scheduler import AsyncioScheduler, ManualScheduler


def test_manual_timers_fire_in_order():
    sched = ManualScheduler()
    calls: list[str] = []
    sched.call_later(0.2, lambda: calls.append("late"))
    sched.call_later(0.1, lambda: calls.append("early"))
    sched.advance(0.15)
    assert calls == ["early"]
    sched.advance(0.1)
    assert calls == ["early", "late"]
    assert sched.now() == pytest.approx(0.25)


def test_manual_cancel_and_frames():
    sched = ManualScheduler()
    calls: list[float] = []
    token = sched.call_later(0.1, lambda: calls.append(-1.0))
    sched.cancel(token)
    frame = sched.request_frame(calls.append)
    sched.cancel(frame)
    sched.request_frame(calls.append)
    sched.cancel("unknown")
    sched.advance(1.0)
    assert sched.run_frame() == 1
    assert calls == [1.0]


def test_frames_requested_during_flush_wait():
    sched = ManualScheduler()
    count = []

    def again(ts: float) -> None:
        count.append(ts)
        sched.request_frame(again)

    sched.request_frame(again)
    sched.run_frame()
    assert len(count) == 1
    assert sched.pending_frames == 1


def test_asyncio_scheduler_runs_and_cancels():
    async def _run() -> list[str]:
        sched = AsyncioScheduler(frame_interval=0.001)
        calls: list[str] = []
        sched.call_later(0.0, lambda: calls.append("timer"))
        sched.request_frame(lambda ts: calls.append("frame"))
        dropped = sched.call_later(0.0, lambda: calls.append("dropped"))
        sched.cancel(dropped)
        await asyncio.sleep(0.05)
        return calls

    calls = asyncio.run(_run())
    assert sorted(calls) == ["frame", "timer"]
