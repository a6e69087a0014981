# SPDX-License-Identifier: Apache-2.0
"""Drawing surfaces, the starfield and the render loop."""

from __future__ import annotations

from . import matplotlib_surface as _matplotlib_surface  # noqa: F401
from . import surfaces as _surfaces  # noqa: F401
from .base import DrawingSurface, SurfaceError, SurfaceSize
from .loop import RenderLoop, RenderStyle
from .registry import available, create, get, register
from .starfield import Starfield

__all__ = [
    "DrawingSurface",
    "SurfaceError",
    "SurfaceSize",
    "RenderLoop",
    "RenderStyle",
    "Starfield",
    "available",
    "create",
    "get",
    "register",
]
