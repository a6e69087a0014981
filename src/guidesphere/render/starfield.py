# SPDX-License-Identifier: Apache-2.0
"""Background stars that are generated once and twinkle over time."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from .base import DrawingSurface


@dataclass(frozen=True, eq=False)
class Starfield:
    """Star positions in normalized ``[0, 1)`` surface coordinates.

    Positions scale with the surface, so a resize never regenerates them.
    """

    xs: np.ndarray
    ys: np.ndarray
    sizes: np.ndarray
    phases: np.ndarray
    speeds: np.ndarray
    base: np.ndarray

    @classmethod
    def generate(cls, count: int = 160, seed: int | None = None) -> Starfield:
        rng = np.random.default_rng(seed)
        return cls(
            xs=rng.random(count),
            ys=rng.random(count),
            sizes=rng.uniform(0.4, 1.6, count),
            phases=rng.uniform(0.0, 2.0 * np.pi, count),
            speeds=rng.uniform(0.5, 2.5, count),
            base=rng.uniform(0.3, 0.7, count),
        )

    def __len__(self) -> int:
        return int(self.xs.shape[0])

    def opacities(self, t: float) -> np.ndarray:
        twinkle = 0.3 * np.sin(t * self.speeds + self.phases)
        return np.clip(self.base + twinkle, 0.05, 1.0)

    def draw(
        self,
        surface: DrawingSurface,
        width: float,
        height: float,
        t: float,
        *,
        color: str = "#ffffff",
    ) -> None:
        alphas = self.opacities(t)
        for x, y, size, alpha in zip(self.xs, self.ys, self.sizes, alphas):
            surface.arc(
                float(x * width),
                float(y * height),
                float(size),
                fill=color,
                alpha=float(alpha),
            )
