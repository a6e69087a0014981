# SPDX-License-Identifier: Apache-2.0
"""Step navigation state machine.

Transitions never raise. Each one returns a :class:`Transition` carrying the
new state and the side effects the caller should run (retarget the rotation,
start or clear the typewriter). Invalid moves return an empty command list.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Sequence, Union

from .models import JourneyStep, with_active_index

LOGGER = logging.getLogger(__name__)


class Phase(str, Enum):
    EMPTY = "empty"
    ACTIVE = "active"
    DONE = "done"


@dataclass(frozen=True, slots=True)
class JourneyState:
    phase: Phase = Phase.EMPTY
    index: int | None = None
    steps: tuple[JourneyStep, ...] = ()

    @property
    def active_step(self) -> JourneyStep | None:
        if self.phase is Phase.ACTIVE and self.index is not None:
            return self.steps[self.index]
        return None

    @property
    def total(self) -> int:
        return len(self.steps)


@dataclass(frozen=True, slots=True)
class RetargetRotation:
    angle: float


@dataclass(frozen=True, slots=True)
class StartTypewriter:
    text: str


@dataclass(frozen=True, slots=True)
class ClearTypewriter:
    pass


Command = Union[RetargetRotation, StartTypewriter, ClearTypewriter]


@dataclass(frozen=True, slots=True)
class Transition:
    state: JourneyState
    commands: tuple[Command, ...] = field(default_factory=tuple)

    @property
    def changed(self) -> bool:
        return bool(self.commands)


def facing_angle(step: JourneyStep) -> float:
    """Rotation angle that brings ``step`` to the front of the sphere."""

    return -math.radians(step.position.lng)


class JourneyStateMachine:
    """Holds the step list and active index of the current journey."""

    def __init__(self) -> None:
        self._state = JourneyState()

    @property
    def state(self) -> JourneyState:
        return self._state

    @property
    def phase(self) -> Phase:
        return self._state.phase

    @property
    def index(self) -> int | None:
        return self._state.index

    @property
    def steps(self) -> tuple[JourneyStep, ...]:
        return self._state.steps

    def load(self, steps: Sequence[JourneyStep]) -> Transition:
        steps = tuple(steps)
        if not steps:
            return self.reset()
        return self._activate(steps, 0)

    def next(self) -> Transition:
        if self._state.phase is not Phase.ACTIVE:
            return self._noop()
        return self.navigate_to(self._state.index + 1)

    def prev(self) -> Transition:
        if self._state.phase is not Phase.ACTIVE:
            return self._noop()
        return self.navigate_to(self._state.index - 1)

    def navigate_to(self, index: int) -> Transition:
        st = self._state
        if st.phase is not Phase.ACTIVE or not 0 <= index < st.total:
            LOGGER.debug("ignoring navigation to %s (phase=%s)", index, st.phase.value)
            return self._noop()
        if index == st.index:
            return self._noop()
        return self._activate(st.steps, index)

    def complete(self) -> Transition:
        st = self._state
        if st.phase is not Phase.ACTIVE or st.index != st.total - 1:
            return self._noop()
        self._state = JourneyState(phase=Phase.DONE)
        return Transition(self._state, (ClearTypewriter(),))

    def reset(self) -> Transition:
        self._state = JourneyState()
        return Transition(self._state, (ClearTypewriter(),))

    def _activate(self, steps: tuple[JourneyStep, ...], index: int) -> Transition:
        # the new tuple and index are published together in one assignment
        flagged = with_active_index(steps, index)
        self._state = JourneyState(phase=Phase.ACTIVE, index=index, steps=flagged)
        step = flagged[index]
        return Transition(
            self._state,
            (RetargetRotation(facing_angle(step)), StartTypewriter(step.content)),
        )

    def _noop(self) -> Transition:
        return Transition(self._state)
