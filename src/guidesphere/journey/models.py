# SPDX-License-Identifier: Apache-2.0
"""Value types shared by the journey components."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Sequence


@dataclass(frozen=True, slots=True)
class Position:
    """Spherical coordinates of a step, in degrees."""

    lat: float
    lng: float

    def to_dict(self) -> dict[str, float]:
        return {"lat": self.lat, "lng": self.lng}


@dataclass(frozen=True, slots=True)
class JourneyStep:
    """One unit of guidance placed on the sphere.

    Only ``is_active`` and ``is_completed`` ever change, and they change by
    building a new instance (see :func:`with_active_index`).
    """

    id: str
    title: str
    content: str
    position: Position
    is_active: bool = False
    is_completed: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Return the camelCase mapping used by persisted conversations."""

        return {
            "id": self.id,
            "title": self.title,
            "content": self.content,
            "position": self.position.to_dict(),
            "isActive": self.is_active,
            "isCompleted": self.is_completed,
        }


def with_active_index(
    steps: Sequence[JourneyStep], active: int | None
) -> tuple[JourneyStep, ...]:
    """Return a copy of ``steps`` with flags recomputed for ``active``.

    ``active=None`` clears every flag.
    """

    out = []
    for i, step in enumerate(steps):
        is_active = active is not None and i == active
        is_completed = active is not None and i < active
        if step.is_active == is_active and step.is_completed == is_completed:
            out.append(step)
        else:
            out.append(replace(step, is_active=is_active, is_completed=is_completed))
    return tuple(out)
