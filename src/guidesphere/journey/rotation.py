# SPDX-License-Identifier: Apache-2.0
"""Inertial rotation of the journey sphere.

Two drive modes share one :class:`RotationState`. While a drag is in
progress pointer moves write the angle directly and frame updates leave the
state alone. Otherwise each frame eases toward the target, applies decaying
momentum and, when nothing is loaded, a slow idle spin.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace


@dataclass(frozen=True, slots=True)
class RotationConfig:
    drag_sensitivity: float = 0.008
    easing: float = 0.05
    damping: float = 0.96
    epsilon: float = 1e-4
    idle_spin: float = 0.002


@dataclass(frozen=True, slots=True)
class RotationState:
    angle: float = 0.0
    target_angle: float = 0.0
    velocity: float = 0.0


@dataclass(frozen=True, slots=True)
class DragState:
    is_dragging: bool = False
    last_pointer_x: float = 0.0


DEFAULT_CONFIG = RotationConfig()


def wrap_angle(delta: float) -> float:
    """Wrap ``delta`` into ``(-pi, pi]``."""

    wrapped = math.fmod(delta + math.pi, 2.0 * math.pi)
    if wrapped <= 0.0:
        wrapped += 2.0 * math.pi
    return wrapped - math.pi


def advance_rotation(
    state: RotationState,
    drag: DragState,
    *,
    has_steps: bool,
    config: RotationConfig = DEFAULT_CONFIG,
) -> RotationState:
    """Return the rotation state after one frame."""

    if drag.is_dragging:
        return state

    angle = state.angle + (state.target_angle - state.angle) * config.easing
    velocity = state.velocity * config.damping
    angle += velocity
    target = state.target_angle
    if abs(velocity) >= config.epsilon:
        # coasting: the target follows so easing does not pull momentum back
        target = angle
    else:
        velocity = 0.0
        if not has_steps:
            angle += config.idle_spin
            target = angle
    return RotationState(angle=angle, target_angle=target, velocity=velocity)


def apply_drag_move(
    state: RotationState,
    drag: DragState,
    pointer_x: float,
    config: RotationConfig = DEFAULT_CONFIG,
) -> tuple[RotationState, DragState]:
    if not drag.is_dragging:
        return state, drag
    velocity = (pointer_x - drag.last_pointer_x) * config.drag_sensitivity
    angle = state.angle + velocity
    return (
        RotationState(angle=angle, target_angle=angle, velocity=velocity),
        replace(drag, last_pointer_x=pointer_x),
    )


def retarget(state: RotationState, angle: float) -> RotationState:
    """Aim the easing at ``angle`` via the equivalent nearest the current angle.

    Residual momentum is dropped so the next frames ease instead of coasting.
    """

    target = state.angle + wrap_angle(angle - state.angle)
    return replace(state, target_angle=target, velocity=0.0)


class RotationEngine:
    """Owns the current rotation and drag values and applies updates to them."""

    def __init__(self, config: RotationConfig | None = None) -> None:
        self.config = config if config is not None else DEFAULT_CONFIG
        self.state = RotationState()
        self.drag = DragState()

    @property
    def angle(self) -> float:
        return self.state.angle

    @property
    def is_dragging(self) -> bool:
        return self.drag.is_dragging

    def drag_start(self, x: float) -> None:
        self.drag = DragState(is_dragging=True, last_pointer_x=float(x))
        self.state = replace(self.state, velocity=0.0, target_angle=self.state.angle)

    def drag_move(self, x: float) -> None:
        self.state, self.drag = apply_drag_move(
            self.state, self.drag, float(x), self.config
        )

    def drag_end(self) -> None:
        self.drag = DragState()

    def update(self, *, has_steps: bool) -> RotationState:
        self.state = advance_rotation(
            self.state, self.drag, has_steps=has_steps, config=self.config
        )
        return self.state

    def retarget(self, angle: float) -> None:
        self.state = retarget(self.state, angle)

    def reset(self) -> None:
        self.state = RotationState()
        self.drag = DragState()
