# SPDX-License-Identifier: Apache-2.0
"""Surfaces by slug, so hosts and the CLI can pick one by name."""

from __future__ import annotations

from typing import Any, TypeVar

from .base import DrawingSurface, SurfaceError

_SurfaceT = TypeVar("_SurfaceT", bound=DrawingSurface)

_SURFACES: dict[str, type[DrawingSurface]] = {}


def register(surface_cls: type[_SurfaceT]) -> type[_SurfaceT]:
    """Class decorator making ``surface_cls`` available under its slug."""

    if not issubclass(surface_cls, DrawingSurface):
        raise TypeError("surface must inherit DrawingSurface")
    slug = surface_cls.slug
    if not slug or slug in _SURFACES:
        raise ValueError(f"surface slug missing or taken: {slug!r}")
    _SURFACES[slug] = surface_cls
    return surface_cls


def available(*, writes_images: bool | None = None) -> list[str]:
    """Sorted surface slugs, optionally only those that can save frames."""

    return sorted(
        slug
        for slug, cls in _SURFACES.items()
        if writes_images is None or cls.writes_images == writes_images
    )


def get(slug: str) -> type[DrawingSurface]:
    try:
        return _SURFACES[slug]
    except KeyError as exc:
        raise KeyError(
            f"unknown surface {slug!r}; available: {', '.join(available())}"
        ) from exc


def create(
    slug: str,
    *,
    width: float = 640,
    height: float = 480,
    pixel_ratio: float = 1.0,
    **options: Any,
) -> DrawingSurface:
    """Build the ``slug`` surface at the given logical size.

    The size is validated before the backend is constructed.
    """

    cls = get(slug)
    for label, value in (("width", width), ("height", height)):
        if value <= 0:
            raise SurfaceError(f"surface {label} must be positive, got {value}")
    if pixel_ratio <= 0:
        raise SurfaceError(f"pixel ratio must be positive, got {pixel_ratio}")
    return cls(width=width, height=height, pixel_ratio=pixel_ratio, **options)
