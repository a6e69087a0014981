# SPDX-License-Identifier: Apache-2.0
"""Character-by-character reveal of the active step's text."""

from __future__ import annotations

from typing import Any, Callable

from guidesphere.scheduler import Scheduler

REVEAL_INTERVAL = 0.015

Listener = Callable[[str], None]


class Typewriter:
    """Fill a display buffer one character per tick.

    At most one timer is pending at any time: :meth:`reveal` cancels the
    previous timer before it schedules the next one.
    """

    def __init__(self, scheduler: Scheduler, *, interval: float = REVEAL_INTERVAL):
        self._scheduler = scheduler
        self.interval = interval
        self._target = ""
        self._buffer = ""
        self._token: Any = None
        self._listeners: list[Listener] = []

    @property
    def text(self) -> str:
        """What the UI should currently display."""
        return self._buffer

    @property
    def target(self) -> str:
        return self._target

    @property
    def is_active(self) -> bool:
        return self._token is not None

    def add_listener(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _remove

    def reveal(self, text: str | None) -> None:
        self.cancel()
        self._target = text or ""
        self._buffer = ""
        self._notify()
        if self._target:
            self._token = self._scheduler.call_later(self.interval, self._tick)

    def cancel(self) -> None:
        if self._token is not None:
            self._scheduler.cancel(self._token)
            self._token = None

    def skip(self) -> None:
        """Show the whole target immediately."""

        self.cancel()
        if self._buffer != self._target:
            self._buffer = self._target
            self._notify()

    def _tick(self) -> None:
        self._token = None
        self._buffer = self._target[: len(self._buffer) + 1]
        self._notify()
        if len(self._buffer) < len(self._target):
            self._token = self._scheduler.call_later(self.interval, self._tick)

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self._buffer)
