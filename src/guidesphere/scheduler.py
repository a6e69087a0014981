# SPDX-License-Identifier: Apache-2.0
"""Frame and timer scheduling ports.

Everything that animates (the render loop, the typewriter) asks a
:class:`Scheduler` for callbacks and keeps the returned token so the callback
can be canceled. :class:`ManualScheduler` advances a virtual clock on demand
and is what tests and offline rendering use; :class:`AsyncioScheduler` runs
on an asyncio event loop.
"""

from __future__ import annotations

import asyncio
import heapq
import itertools
import logging
from abc import ABC, abstractmethod
from typing import Any, Callable

LOGGER = logging.getLogger(__name__)

FrameCallback = Callable[[float], None]
TimerCallback = Callable[[], None]

FRAME_INTERVAL = 1.0 / 60.0


class Scheduler(ABC):
    """Contract for the host's frame and timer primitives."""

    @abstractmethod
    def now(self) -> float:
        """Current time in seconds."""

    @abstractmethod
    def request_frame(self, callback: FrameCallback) -> Any:
        """Run ``callback(timestamp)`` on the next frame and return a cancel token."""

    @abstractmethod
    def call_later(self, delay: float, callback: TimerCallback) -> Any:
        """Run ``callback()`` after ``delay`` seconds and return a cancel token."""

    @abstractmethod
    def cancel(self, token: Any) -> None:
        """Cancel a pending frame or timer. Unknown tokens are ignored."""


class ManualScheduler(Scheduler):
    """Deterministic scheduler driven by explicit clock advances."""

    def __init__(self, start: float = 0.0) -> None:
        self._now = float(start)
        self._ids = itertools.count(1)
        self._frames: dict[int, FrameCallback] = {}
        self._timers: list[tuple[float, int, TimerCallback]] = []
        self._live_timers: set[int] = set()

    def now(self) -> float:
        return self._now

    def request_frame(self, callback: FrameCallback) -> int:
        token = next(self._ids)
        self._frames[token] = callback
        return token

    def call_later(self, delay: float, callback: TimerCallback) -> int:
        token = next(self._ids)
        heapq.heappush(self._timers, (self._now + max(delay, 0.0), token, callback))
        self._live_timers.add(token)
        return token

    def cancel(self, token: Any) -> None:
        self._frames.pop(token, None)
        self._live_timers.discard(token)

    @property
    def pending_frames(self) -> int:
        return len(self._frames)

    @property
    def pending_timers(self) -> int:
        return len(self._live_timers)

    def advance(self, seconds: float) -> None:
        """Move the clock forward, firing due timers in order."""

        until = self._now + max(seconds, 0.0)
        while self._timers and self._timers[0][0] <= until:
            due, token, callback = heapq.heappop(self._timers)
            if token not in self._live_timers:
                continue
            self._live_timers.discard(token)
            self._now = max(self._now, due)
            callback()
        self._now = until

    def run_frame(self) -> int:
        """Fire the frame callbacks pending right now.

        Callbacks requested while firing wait for the next frame.
        """

        pending = list(self._frames.items())
        self._frames.clear()
        for _token, callback in pending:
            callback(self._now)
        return len(pending)

    def run_frames(self, count: int, interval: float = FRAME_INTERVAL) -> None:
        for _ in range(count):
            self.advance(interval)
            self.run_frame()


class AsyncioScheduler(Scheduler):
    """Scheduler backed by ``loop.call_later``."""

    def __init__(
        self,
        loop: asyncio.AbstractEventLoop | None = None,
        *,
        frame_interval: float = FRAME_INTERVAL,
    ) -> None:
        self._loop = loop if loop is not None else asyncio.get_running_loop()
        self.frame_interval = frame_interval

    def now(self) -> float:
        return self._loop.time()

    def request_frame(self, callback: FrameCallback) -> asyncio.TimerHandle:
        return self._loop.call_later(
            self.frame_interval, lambda: callback(self._loop.time())
        )

    def call_later(self, delay: float, callback: TimerCallback) -> asyncio.TimerHandle:
        return self._loop.call_later(max(delay, 0.0), callback)

    def cancel(self, token: Any) -> None:
        if isinstance(token, asyncio.Handle):
            token.cancel()
        elif token is not None:
            LOGGER.debug("ignoring unknown scheduler token %r", token)
