# SPDX-License-Identifier: Apache-2.0
"""Per-frame drawing of the journey sphere."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Callable, Sequence

from guidesphere.journey.models import JourneyStep, Position
from guidesphere.journey.projection import (
    CULL_THRESHOLD,
    ProjectedPoint,
    great_circle,
    project,
)
from guidesphere.journey.rotation import RotationEngine
from guidesphere.journey.state import JourneyStateMachine
from guidesphere.scheduler import Scheduler

from .base import DrawingSurface, Point, SurfaceSize
from .starfield import Starfield

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RenderStyle:
    background: str = "#0a0a0f"
    star_color: str = "#ffffff"
    sphere_inner: str = "#1a1a2e"
    sphere_outer: str = "#050508"
    grid_color: str = "#ffffff"
    grid_alpha: float = 0.15
    equator_alpha: float = 0.25
    connection_alpha: float = 0.3
    connection_dash: tuple[float, float] = (4.0, 4.0)
    marker_active: str = "#ffffff"
    marker_completed: str = "#888888"
    marker_pending: str = "#444444"
    label_color: str = "#0a0a0f"
    outline_alpha: float = 0.25
    radius_fraction: float = 0.38
    marker_radius: float = 6.0
    halo_radius: float = 14.0
    pulse_speed: float = 3.0


@dataclass(frozen=True, slots=True)
class Layout:
    size: SurfaceSize
    center: Point
    radius: float


GRID_LATITUDES = (-60, -30, 0, 30, 60)
GRID_LONGITUDES = tuple(range(0, 360, 30))
GRID_STEP_DEG = 5
CONNECTION_SEGMENTS = 16


def front_runs(
    points: Sequence[ProjectedPoint], threshold: float = 0.0
) -> list[list[Point]]:
    """Split projected samples into contiguous runs that face the viewer."""

    runs: list[list[Point]] = []
    current: list[Point] = []
    for p in points:
        if p.visibility >= threshold:
            current.append((p.x, p.y))
        elif current:
            runs.append(current)
            current = []
    if current:
        runs.append(current)
    return [run for run in runs if len(run) >= 2]


class RenderLoop:
    """Draw one frame per scheduler tick while the view is visible.

    The loop owns the :class:`RotationEngine`; pointer events reach it through
    :meth:`drag_start`, :meth:`drag_move` and :meth:`drag_end`. At most one
    frame callback is pending at a time.
    """

    def __init__(
        self,
        surface: DrawingSurface,
        scheduler: Scheduler,
        journey: JourneyStateMachine,
        rotation: RotationEngine | None = None,
        *,
        style: RenderStyle | None = None,
        starfield: Starfield | None = None,
        is_visible: Callable[[], bool] | None = None,
    ) -> None:
        self.surface = surface
        self.scheduler = scheduler
        self.journey = journey
        self.rotation = rotation if rotation is not None else RotationEngine()
        self.style = style if style is not None else RenderStyle()
        self.starfield = starfield if starfield is not None else Starfield.generate()
        self._is_visible = is_visible
        self._visible = False
        self._torn_down = False
        self._token: Any = None
        self._layout: Layout | None = None
        self.frames_rendered = 0

    @property
    def running(self) -> bool:
        return self._token is not None

    @property
    def layout(self) -> Layout | None:
        return self._layout

    # -- lifecycle ---------------------------------------------------------

    def start(self) -> None:
        if self._torn_down:
            LOGGER.warning("render loop was torn down; start() ignored")
            return
        self._visible = True
        if self._token is None:
            self._token = self.scheduler.request_frame(self._on_frame)

    def stop(self) -> None:
        if self._token is not None:
            self.scheduler.cancel(self._token)
            self._token = None

    def set_visible(self, visible: bool) -> None:
        if visible:
            self.start()
        else:
            self._visible = False
            self.stop()

    def teardown(self) -> None:
        self.stop()
        self._visible = False
        self._torn_down = True
        self.rotation.reset()

    # -- pointer input -----------------------------------------------------

    def drag_start(self, x: float) -> None:
        self.rotation.drag_start(x)

    def drag_move(self, x: float) -> None:
        self.rotation.drag_move(x)

    def drag_end(self) -> None:
        self.rotation.drag_end()

    # -- frames ------------------------------------------------------------

    def _on_frame(self, timestamp: float) -> None:
        self._token = None
        if self._torn_down or not self._visible:
            return
        if self._is_visible is not None and not self._is_visible():
            self._visible = False
            LOGGER.debug("view hidden; render loop paused")
            return
        self.render_frame(timestamp)
        self._token = self.scheduler.request_frame(self._on_frame)

    def _resolve_layout(self) -> Layout:
        size = self.surface.size()
        if self._layout is None or self._layout.size != size:
            radius = min(size.width, size.height) * self.style.radius_fraction
            self._layout = Layout(
                size=size, center=(size.width / 2.0, size.height / 2.0), radius=radius
            )
            LOGGER.debug(
                "layout %sx%s@%s radius=%.1f",
                size.width,
                size.height,
                size.pixel_ratio,
                radius,
            )
        return self._layout

    def render_frame(self, t: float) -> None:
        """Advance the rotation by one frame and draw everything."""

        layout = self._resolve_layout()
        state = self.journey.state
        angle = self.rotation.update(has_steps=bool(state.steps)).angle

        surface = self.surface
        surface.begin_frame()
        surface.clear(self.style.background)
        self.starfield.draw(
            surface,
            layout.size.width,
            layout.size.height,
            t,
            color=self.style.star_color,
        )
        self._draw_sphere(layout)
        self._draw_grid(layout, angle)
        self._draw_connections(layout, state.steps, angle)
        self._draw_markers(layout, state.steps, angle, t)
        surface.arc(
            layout.center[0],
            layout.center[1],
            layout.radius,
            stroke=self.style.grid_color,
            alpha=self.style.outline_alpha,
            line_width=1.5,
        )
        surface.end_frame()
        self.frames_rendered += 1

    def _project(
        self, layout: Layout, position: Position, angle: float
    ) -> ProjectedPoint:
        return project(position, angle, layout.radius, layout.center)

    def _draw_sphere(self, layout: Layout) -> None:
        cx, cy = layout.center
        self.surface.gradient_circle(
            cx,
            cy,
            layout.radius,
            (
                (0.0, self.style.sphere_inner, 0.95),
                (1.0, self.style.sphere_outer, 0.95),
            ),
        )

    def _draw_grid(self, layout: Layout, angle: float) -> None:
        style = self.style
        for lat in GRID_LATITUDES:
            samples = [
                self._project(layout, Position(lat, lng), angle)
                for lng in range(-180, 181, GRID_STEP_DEG)
            ]
            alpha = style.equator_alpha if lat == 0 else style.grid_alpha
            for run in front_runs(samples):
                self.surface.polyline(
                    run, color=style.grid_color, alpha=alpha, line_width=0.5
                )
        for lng in GRID_LONGITUDES:
            samples = [
                self._project(layout, Position(lat, lng), angle)
                for lat in range(-90, 91, GRID_STEP_DEG)
            ]
            facing = samples[0].visibility
            if facing < 0:
                continue
            for run in front_runs(samples):
                self.surface.polyline(
                    run,
                    color=style.grid_color,
                    alpha=style.grid_alpha * (0.4 + 0.6 * facing),
                    line_width=0.5,
                )

    def _draw_connections(
        self, layout: Layout, steps: Sequence[JourneyStep], angle: float
    ) -> None:
        style = self.style
        for a, b in zip(steps, steps[1:]):
            pa = self._project(layout, a.position, angle)
            pb = self._project(layout, b.position, angle)
            if pa.culled and pb.culled:
                continue
            samples = [
                self._project(layout, pos, angle)
                for pos in great_circle(a.position, b.position, CONNECTION_SEGMENTS)
            ]
            for run in front_runs(samples, CULL_THRESHOLD):
                self.surface.polyline(
                    run,
                    color=style.grid_color,
                    alpha=style.connection_alpha,
                    line_width=1.0,
                    dash=style.connection_dash,
                )

    def _draw_markers(
        self, layout: Layout, steps: Sequence[JourneyStep], angle: float, t: float
    ) -> None:
        style = self.style
        for i, step in enumerate(steps):
            p = self._project(layout, step.position, angle)
            if p.culled:
                continue
            fade = 0.3 + 0.7 * max(p.visibility, 0.0)
            if step.is_active:
                pulse = 1.0 + math.sin(t * style.pulse_speed) * 0.3
                self.surface.arc(
                    p.x,
                    p.y,
                    style.halo_radius * p.scale * pulse,
                    fill=style.marker_active,
                    alpha=0.3 * fade,
                )
                fill = style.marker_active
            elif step.is_completed:
                fill = style.marker_completed
            else:
                fill = style.marker_pending
            radius = style.marker_radius * p.scale
            self.surface.arc(p.x, p.y, radius, fill=fill, alpha=fade)
            self.surface.arc(
                p.x,
                p.y,
                radius * 1.4,
                stroke=style.grid_color,
                alpha=(0.8 if step.is_active else 0.3) * fade,
                line_width=1.0,
            )
            self.surface.text(
                p.x,
                p.y,
                str(i + 1),
                color=style.label_color if step.is_active else style.grid_color,
                size=9.0 * p.scale,
                alpha=fade,
            )
