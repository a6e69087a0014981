# SPDX-License-Identifier: Apache-2.0
"""Raster surface backed by matplotlib's Agg canvas."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Sequence

import numpy as np
from matplotlib.backends.backend_agg import FigureCanvasAgg
from matplotlib.colors import to_rgb
from matplotlib.figure import Figure
from matplotlib.patches import Circle, Rectangle

from .base import DrawingSurface, GradientStop, Point
from .registry import register

LOGGER = logging.getLogger(__name__)

# logical pixels per inch; the device pixel ratio scales the dpi
BASE_DPI = 100.0
_PT_PER_PX = 72.0 / BASE_DPI
_GRADIENT_RES = 128


@register
class MatplotlibSurface(DrawingSurface):
    """Agg-rendered surface that can be saved as PNG frames."""

    slug = "matplotlib"
    writes_images = True

    def __init__(self, **options: Any) -> None:
        super().__init__(**options)
        self._figure = Figure()
        self._canvas = FigureCanvasAgg(self._figure)
        self._ax = self._figure.add_axes((0.0, 0.0, 1.0, 1.0))
        self._z = 0
        self._apply_size()
        self._reset_axes()

    def resize(
        self, width: float, height: float, pixel_ratio: float | None = None
    ) -> None:
        super().resize(width, height, pixel_ratio)
        self._apply_size()

    def _apply_size(self) -> None:
        size = self.size()
        self._figure.set_dpi(BASE_DPI * size.pixel_ratio)
        self._figure.set_size_inches(size.width / BASE_DPI, size.height / BASE_DPI)

    def _reset_axes(self) -> None:
        size = self.size()
        self._ax.set_xlim(0, size.width)
        self._ax.set_ylim(size.height, 0)
        self._ax.set_aspect("auto")
        self._ax.set_axis_off()

    def _next_z(self) -> int:
        self._z += 1
        return self._z

    def begin_frame(self) -> None:
        self._ax.cla()
        self._z = 0
        self._reset_axes()

    def end_frame(self) -> None:
        # imshow resets limits; restore them before rasterizing
        self._reset_axes()
        self._canvas.draw()

    def clear(self, color: str) -> None:
        size = self.size()
        self._figure.set_facecolor(color)
        self._ax.add_patch(
            Rectangle(
                (0, 0), size.width, size.height, color=color, zorder=self._next_z()
            )
        )

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
        if fill is None and stroke is None:
            return
        self._ax.add_patch(
            Circle(
                (x, y),
                radius,
                facecolor=fill if fill is not None else "none",
                edgecolor=stroke if stroke is not None else "none",
                linewidth=line_width * _PT_PER_PX if stroke is not None else 0.0,
                alpha=float(np.clip(alpha, 0.0, 1.0)),
                zorder=self._next_z(),
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
        if len(points) < 2:
            return
        xs, ys = zip(*points)
        kwargs: dict[str, Any] = {}
        if dash is not None:
            # dash lengths are in units of the line width
            on, off = dash
            kwargs["linestyle"] = (0, (on / line_width, off / line_width))
        self._ax.plot(
            xs,
            ys,
            color=color,
            alpha=float(np.clip(alpha, 0.0, 1.0)),
            linewidth=line_width * _PT_PER_PX,
            zorder=self._next_z(),
            **kwargs,
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
        self._ax.text(
            x,
            y,
            value,
            color=color,
            fontsize=size * _PT_PER_PX,
            alpha=float(np.clip(alpha, 0.0, 1.0)),
            ha="center",
            va="center",
            zorder=self._next_z(),
        )

    def gradient_circle(
        self, x: float, y: float, radius: float, stops: Sequence[GradientStop]
    ) -> None:
        if radius <= 0 or not stops:
            return
        self._ax.imshow(
            radial_gradient(stops, _GRADIENT_RES),
            extent=(x - radius, x + radius, y + radius, y - radius),
            interpolation="bilinear",
            zorder=self._next_z(),
        )

    def to_array(self) -> np.ndarray:
        """Return the last rasterized frame as an RGBA array."""

        return np.asarray(self._canvas.buffer_rgba()).copy()

    def save(self, path: str | Path) -> Path:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        self._figure.savefig(
            path, dpi=self._figure.get_dpi(), facecolor=self._figure.get_facecolor()
        )
        LOGGER.debug("saved frame to %s", path)
        return path


def radial_gradient(stops: Sequence[GradientStop], resolution: int) -> np.ndarray:
    """Build an RGBA image of a radial gradient clipped to the inscribed circle."""

    ordered = sorted(stops, key=lambda s: s[0])
    offsets = np.array([s[0] for s in ordered], dtype=float)
    rgb = np.array([to_rgb(s[1]) for s in ordered], dtype=float)
    alphas = np.array([s[2] for s in ordered], dtype=float)

    coords = np.linspace(-1.0, 1.0, resolution)
    gx, gy = np.meshgrid(coords, coords)
    dist = np.sqrt(gx**2 + gy**2)

    img = np.zeros((resolution, resolution, 4), dtype=float)
    for channel in range(3):
        img[..., channel] = np.interp(dist, offsets, rgb[:, channel])
    img[..., 3] = np.where(dist <= 1.0, np.interp(dist, offsets, alphas), 0.0)
    return img
