# SPDX-License-Identifier: Apache-2.0
"""Base interface for raster drawing surfaces."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Sequence

Point = tuple[float, float]
# (offset in [0, 1], color, alpha)
GradientStop = tuple[float, str, float]


class SurfaceError(RuntimeError):
    pass


@dataclass(frozen=True, slots=True)
class SurfaceSize:
    """Logical size of a surface plus its device pixel ratio."""

    width: float
    height: float
    pixel_ratio: float = 1.0

    @property
    def device_width(self) -> int:
        return int(round(self.width * self.pixel_ratio))

    @property
    def device_height(self) -> int:
        return int(round(self.height * self.pixel_ratio))


def _checked_size(width: float, height: float, pixel_ratio: float) -> SurfaceSize:
    if width <= 0 or height <= 0 or pixel_ratio <= 0:
        raise SurfaceError("surface size and pixel ratio must be positive")
    return SurfaceSize(float(width), float(height), float(pixel_ratio))


class DrawingSurface(ABC):
    """Contract for the host's 2D drawing surface.

    All coordinates are logical pixels with the origin at the top-left
    corner; implementations apply the pixel ratio themselves.
    """

    slug: str = "surface"
    #: True when the surface can write frames to image files via ``save``
    writes_images: bool = False

    def __init__(
        self, *, width: float = 640, height: float = 480, pixel_ratio: float = 1.0
    ) -> None:
        self._size = _checked_size(width, height, pixel_ratio)

    def size(self) -> SurfaceSize:
        return self._size

    def resize(
        self, width: float, height: float, pixel_ratio: float | None = None
    ) -> None:
        """Called by the host when the drawable area changes."""

        ratio = self._size.pixel_ratio if pixel_ratio is None else pixel_ratio
        self._size = _checked_size(width, height, ratio)

    def begin_frame(self) -> None:
        """Hook invoked before the first primitive of a frame."""

    def end_frame(self) -> None:
        """Hook invoked after the last primitive of a frame."""

    @abstractmethod
    def clear(self, color: str) -> None:
        """Fill the whole surface with ``color``."""

    @abstractmethod
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
        """Draw a full circle, filled and/or stroked."""

    @abstractmethod
    def polyline(
        self,
        points: Sequence[Point],
        *,
        color: str,
        alpha: float = 1.0,
        line_width: float = 1.0,
        dash: tuple[float, float] | None = None,
    ) -> None:
        """Stroke connected line segments through ``points``."""

    @abstractmethod
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
        """Draw ``value`` centered at ``(x, y)``."""

    @abstractmethod
    def gradient_circle(
        self, x: float, y: float, radius: float, stops: Sequence[GradientStop]
    ) -> None:
        """Fill a circle with a radial gradient from center to edge."""
