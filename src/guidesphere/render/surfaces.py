# SPDX-License-Identifier: Apache-2.0
"""Surface that records primitive calls instead of rasterizing them."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Sequence

from .base import DrawingSurface, GradientStop, Point
from .registry import register


@dataclass(slots=True)
class DrawOp:
    kind: str
    args: dict[str, Any] = field(default_factory=dict)


@register
class RecordingSurface(DrawingSurface):
    """Keeps the primitives of the last frame in memory."""

    slug = "recording"

    def __init__(self, **options: Any) -> None:
        super().__init__(**options)
        self.ops: list[DrawOp] = []
        self.frames = 0

    def begin_frame(self) -> None:
        self.ops = []

    def end_frame(self) -> None:
        self.frames += 1

    def ops_of(self, kind: str) -> list[DrawOp]:
        return [op for op in self.ops if op.kind == kind]

    def clear(self, color: str) -> None:
        self.ops.append(DrawOp("clear", {"color": color}))

    def arc(
        self,
        x: float,
        y: float,
        radius: float,
        *,
        fill: str | None = None,
        stroke: str | None = None,
        alpha: float = 1.0,
        line_width: float = 1.0,
    ) -> None:
        self.ops.append(
            DrawOp(
                "arc",
                {
                    "x": x,
                    "y": y,
                    "radius": radius,
                    "fill": fill,
                    "stroke": stroke,
                    "alpha": alpha,
                    "line_width": line_width,
                },
            )
        )

    def polyline(
        self,
        points: Sequence[Point],
        *,
        color: str,
        alpha: float = 1.0,
        line_width: float = 1.0,
        dash: tuple[float, float] | None = None,
    ) -> None:
        self.ops.append(
            DrawOp(
                "polyline",
                {
                    "points": list(points),
                    "color": color,
                    "alpha": alpha,
                    "line_width": line_width,
                    "dash": dash,
                },
            )
        )

    def text(
        self,
        x: float,
        y: float,
        value: str,
        *,
        color: str,
        size: float = 12.0,
        alpha: float = 1.0,
    ) -> None:
        self.ops.append(
            DrawOp(
                "text",
                {
                    "x": x,
                    "y": y,
                    "value": value,
                    "color": color,
                    "size": size,
                    "alpha": alpha,
                },
            )
        )

    def gradient_circle(
        self, x: float, y: float, radius: float, stops: Sequence[GradientStop]
    ) -> None:
        self.ops.append(
            DrawOp("gradient", {"x": x, "y": y, "radius": radius, "stops": list(stops)})
        )
