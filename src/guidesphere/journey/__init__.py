# SPDX-License-Identifier: Apache-2.0
"""Journey core: parsing, placement, rotation, navigation and text reveal."""

from .models import JourneyStep, Position, with_active_index
from .parser import StepParser, parse_steps
from .projection import ProjectedPoint, great_circle, place_position, project
from .rotation import DragState, RotationConfig, RotationEngine, RotationState
from .state import (
    ClearTypewriter,
    JourneyState,
    JourneyStateMachine,
    Phase,
    RetargetRotation,
    StartTypewriter,
    Transition,
)
from .typewriter import Typewriter

__all__ = [
    "JourneyStep",
    "Position",
    "with_active_index",
    "StepParser",
    "parse_steps",
    "ProjectedPoint",
    "great_circle",
    "place_position",
    "project",
    "DragState",
    "RotationConfig",
    "RotationEngine",
    "RotationState",
    "ClearTypewriter",
    "JourneyState",
    "JourneyStateMachine",
    "Phase",
    "RetargetRotation",
    "StartTypewriter",
    "Transition",
    "Typewriter",
]
