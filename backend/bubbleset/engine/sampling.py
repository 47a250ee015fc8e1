"""Grid sampling of scalar fields with reusable per-cluster sample caches."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from bubbleset.engine.fields import Field
from bubbleset.utils.contour import marching_squares
from bubbleset.utils.curve import Curve
from bubbleset.utils.geometry import Bbox

logger = logging.getLogger(__name__)


@dataclass
class SampleCache:
    """Raw field values captured over rows [imin, imax) and columns [jmin, jmax)."""

    imin: int
    imax: int
    jmin: int
    jmax: int
    values: NDArray[np.float64]

    @classmethod
    def empty(cls, imin: int, imax: int, jmin: int, jmax: int) -> SampleCache:
        return cls(imin, imax, jmin, jmax, np.zeros((imax - imin, jmax - jmin)))

    @property
    def shape(self) -> tuple[int, int]:
        return (self.imax - self.imin, self.jmax - self.jmin)

    def get_value(self, i: int, j: int) -> float:
        return float(self.values[i - self.imin, j - self.jmin])

    def set_value(self, i: int, j: int, v: float) -> None:
        self.values[i - self.imin, j - self.jmin] = v


class GridSample:
    """Uniform sampling of the domain [xmin, xmax] x [ymin, ymax].

    Cell (i, j) is sampled at (xmin + j*dx, ymin + i*dy); ``s[i, j]``
    accumulates scaled field contributions.
    """

    def __init__(self, xmin: float, xmax: float, ymin: float, ymax: float, cell_size: float) -> None:
        if cell_size <= 0:
            raise ValueError(f"cell_size must be positive, got {cell_size}")
        if xmax <= xmin or ymax <= ymin:
            raise ValueError(f"empty sampling domain [{xmin}, {xmax}] x [{ymin}, {ymax}]")
        self.xmin = xmin
        self.xmax = xmax
        self.ymin = ymin
        self.ymax = ymax
        self.nx = int((xmax - xmin) / cell_size) + 1
        self.dx = (xmax - xmin) / self.nx
        self.ny = int((ymax - ymin) / cell_size) + 1
        self.dy = (ymax - ymin) / self.ny
        self.s = np.zeros((self.ny, self.nx), dtype=np.float64)

    def __repr__(self) -> str:
        return f"GridSample({self.ny}x{self.nx}, dx={self.dx:.3f}, dy={self.dy:.3f})"

    @property
    def shape(self) -> tuple[int, int]:
        return (self.ny, self.nx)

    def index_range(self, rect: Bbox | None, margin: int = 0) -> tuple[int, int, int, int]:
        """(imin, imax, jmin, jmax) covering rect plus margin cells, clamped to the grid."""
        if rect is None:
            return (0, self.ny, 0, self.nx)
        imin = max(int((rect.y - self.ymin) / self.dy) - margin, 0)
        imax = min(int((rect.ymax - self.ymin) / self.dy) + 1 + margin, self.ny)
        jmin = max(int((rect.x - self.xmin) / self.dx) - margin, 0)
        jmax = min(int((rect.xmax - self.xmin) / self.dx) + 1 + margin, self.nx)
        return (imin, max(imax, imin), jmin, max(jmax, jmin))

    def add_field(self, field: Field, scale: float, rect: Bbox | None = None) -> SampleCache:
        """Sample field over rect, add scale * value to the grid, return the raw samples."""
        t0 = time.perf_counter()
        imin, imax, jmin, jmax = self.index_range(rect)
        cache = SampleCache.empty(imin, imax, jmin, jmax)
        if imax > imin and jmax > jmin:
            xs = self.xmin + np.arange(jmin, jmax) * self.dx
            ys = self.ymin + np.arange(imin, imax) * self.dy
            gx, gy = np.meshgrid(xs, ys)
            cache.values = np.asarray(field(gx, gy), dtype=np.float64).reshape(cache.shape)
            self.s[imin:imax, jmin:jmax] += scale * cache.values
        logger.debug(
            "Sampled %d cells in %.1fms",
            cache.values.size,
            (time.perf_counter() - t0) * 1000,
        )
        return cache

    def add_cache(self, cache: SampleCache, scale: float) -> None:
        """Re-apply a previously captured sample at a new scale."""
        self.s[cache.imin:cache.imax, cache.jmin:cache.jmax] += scale * cache.values

    def polygonize(self, level: float, rect: Bbox | None = None, strict: bool = False) -> list[Curve]:
        """Contours of the grid at level within rect, in world coordinates.

        The window is widened by one cell on each side so crossings on the
        rect boundary are resolved.
        """
        imin, imax, jmin, jmax = self.index_range(rect, margin=1)
        curves = marching_squares(self.s[imin:imax, jmin:jmax], level, strict=strict)
        for curve in curves:
            for p in curve.pts:
                p.x = (p.x + jmin) * self.dx + self.xmin
                p.y = (p.y + imin) * self.dy + self.ymin
        return curves
