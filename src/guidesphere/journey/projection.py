# SPDX-License-Identifier: Apache-2.0
"""Placement of steps on the sphere and orthographic projection to screen.

Latitude/longitude are in degrees; rotation angles are in radians. The
projection is orthographic around the vertical axis: the viewer looks at
longitude ``-rotation_angle``.
"""

from __future__ import annotations

import math
import random
from dataclasses import dataclass

import numpy as np

from .models import Position

LAT_TOP = 35.0
LAT_BOTTOM = -35.0
LNG_START = -120.0
LNG_SPAN = 240.0
JITTER_DEG = 5.0
CULL_THRESHOLD = -0.1


@dataclass(frozen=True, slots=True)
class ProjectedPoint:
    x: float
    y: float
    visibility: float
    scale: float

    @property
    def culled(self) -> bool:
        """True when the point is far enough behind the sphere to skip drawing."""

        return self.visibility < CULL_THRESHOLD


def _clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


def place_position(
    index: int, total: int, rng: random.Random | None = None
) -> Position:
    """Spread ``total`` points across the latitude and longitude bands.

    Index 0 sits near +35°/−120°, the last index near −35°/+120°. Each axis
    gets independent jitter of up to ±5°.
    """

    rng = rng or random.Random()
    frac = index / max(total - 1, 1)
    lat = LAT_TOP + (LAT_BOTTOM - LAT_TOP) * frac
    lng = LNG_START + LNG_SPAN * frac
    lat += rng.uniform(-JITTER_DEG, JITTER_DEG)
    lng += rng.uniform(-JITTER_DEG, JITTER_DEG)
    return Position(lat=_clamp(lat, -90.0, 90.0), lng=_clamp(lng, -180.0, 180.0))


def project(
    position: Position,
    rotation_angle: float,
    radius: float,
    center: tuple[float, float],
) -> ProjectedPoint:
    lng_eff = math.radians(position.lng) + rotation_angle
    lat = math.radians(position.lat)
    visibility = math.cos(lng_eff)
    cx, cy = center
    x = cx + math.sin(lng_eff) * math.cos(lat) * radius
    y = cy - math.sin(lat) * radius
    scale = 0.5 + max(visibility, 0.0) * 0.5
    return ProjectedPoint(x=x, y=y, visibility=visibility, scale=scale)


def _to_unit(position: Position) -> np.ndarray:
    lat = math.radians(position.lat)
    lng = math.radians(position.lng)
    return np.array(
        [math.cos(lat) * math.cos(lng), math.cos(lat) * math.sin(lng), math.sin(lat)]
    )


def great_circle(a: Position, b: Position, segments: int = 24) -> list[Position]:
    """Sample the shorter great-circle arc from ``a`` to ``b``.

    Returns ``segments + 1`` positions including both endpoints. Coincident
    and antipodal endpoints have no unique great circle; those fall back to
    straight interpolation in latitude/longitude.
    """

    segments = max(int(segments), 1)
    va, vb = _to_unit(a), _to_unit(b)
    dot = float(np.clip(np.dot(va, vb), -1.0, 1.0))
    omega = math.acos(dot)
    sin_omega = math.sin(omega)
    if sin_omega < 1e-6:
        return [
            Position(
                lat=a.lat + (b.lat - a.lat) * i / segments,
                lng=a.lng + (b.lng - a.lng) * i / segments,
            )
            for i in range(segments + 1)
        ]
    t = np.linspace(0.0, 1.0, segments + 1)[:, None]
    pts = (np.sin((1.0 - t) * omega) * va + np.sin(t * omega) * vb) / sin_omega
    pts /= np.linalg.norm(pts, axis=1, keepdims=True)
    lats = np.degrees(np.arcsin(np.clip(pts[:, 2], -1.0, 1.0)))
    lngs = np.degrees(np.arctan2(pts[:, 1], pts[:, 0]))
    return [Position(lat=float(la), lng=float(ln)) for la, ln in zip(lats, lngs)]
