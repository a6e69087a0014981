# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

import math
import random

import pytest

from guidesphere.journey.models import JourneyStep, Position
from guidesphere.journey.state import (
    ClearTypewriter,
    JourneyStateMachine,
    Phase,
    RetargetRotation,
    StartTypewriter,
    facing_angle,
)


def make_steps(n: int) -> list[JourneyStep]:
    return [
        JourneyStep(
            id=f"step-{i + 1}",
            title=f"Step {i + 1}",
            content=f"content of step {i + 1}",
            position=Position(lat=0.0, lng=-90.0 + 30.0 * i),
        )
        for i in range(n)
    ]


def _active_count(machine: JourneyStateMachine) -> int:
    return sum(1 for s in machine.steps if s.is_active)


def test_load_activates_first_step():
    machine = JourneyStateMachine()
    steps = make_steps(3)
    tr = machine.load(steps)
    assert machine.phase is Phase.ACTIVE
    assert machine.index == 0
    assert tr.commands == (
        RetargetRotation(facing_angle(steps[0])),
        StartTypewriter("content of step 1"),
    )
    assert facing_angle(steps[0]) == pytest.approx(math.radians(90.0))
    assert _active_count(machine) == 1


def test_next_stops_at_last_step():
    machine = JourneyStateMachine()
    machine.load(make_steps(3))
    for _ in range(3):
        machine.next()
    assert machine.phase is Phase.ACTIVE
    assert machine.index == 2
    tr = machine.next()
    assert not tr.changed
    assert machine.index == 2


def test_prev_at_first_step_is_noop():
    machine = JourneyStateMachine()
    machine.load(make_steps(2))
    tr = machine.prev()
    assert tr.commands == ()
    assert machine.index == 0


def test_random_walk_keeps_index_in_range():
    machine = JourneyStateMachine()
    machine.load(make_steps(4))
    rng = random.Random(7)
    for _ in range(200):
        rng.choice([machine.next, machine.prev])()
        assert 0 <= machine.index <= 3
        assert _active_count(machine) == 1


def test_navigate_marks_earlier_steps_completed():
    machine = JourneyStateMachine()
    machine.load(make_steps(4))
    machine.navigate_to(2)
    flags = [(s.is_completed, s.is_active) for s in machine.steps]
    assert flags == [(True, False), (True, False), (False, True), (False, False)]


@pytest.mark.parametrize("index", [-1, 4, 0])
def test_navigate_out_of_range_or_same_is_noop(index):
    machine = JourneyStateMachine()
    machine.load(make_steps(4))
    before = machine.state
    tr = machine.navigate_to(index)
    assert not tr.changed
    assert machine.state is before


def test_complete_only_from_last_step():
    machine = JourneyStateMachine()
    machine.load(make_steps(2))
    assert not machine.complete().changed
    machine.next()
    tr = machine.complete()
    assert tr.commands == (ClearTypewriter(),)
    assert machine.phase is Phase.DONE
    assert machine.steps == ()
    assert machine.state.active_step is None
    assert not machine.next().changed


def test_empty_load_resets():
    machine = JourneyStateMachine()
    machine.load(make_steps(2))
    tr = machine.load([])
    assert machine.phase is Phase.EMPTY
    assert machine.index is None
    assert tr.commands == (ClearTypewriter(),)


def test_navigation_ignored_when_empty():
    machine = JourneyStateMachine()
    assert not machine.next().changed
    assert not machine.navigate_to(0).changed
    assert not machine.complete().changed
    assert machine.phase is Phase.EMPTY
