"""Tests for grid sampling and sample caches."""

from __future__ import annotations

import math

import numpy as np
import pytest

from bubbleset.engine.fields import DiskField, RadialKernel
from bubbleset.engine.sampling import GridSample, SampleCache
from bubbleset.utils.geometry import Bbox, Vector


def _grid() -> GridSample:
    return GridSample(0, 100, 0, 100, 2)


def _disk() -> DiskField:
    return DiskField(50, 50, RadialKernel(10, 30))


def test_grid_geometry():
    g = GridSample(0, 100, 0, 50, 10)
    assert g.shape == (6, 11)
    assert g.dx == pytest.approx(100 / 11)


def test_invalid_grid():
    with pytest.raises(ValueError):
        GridSample(0, 100, 0, 100, 0)
    with pytest.raises(ValueError):
        GridSample(10, 0, 0, 100, 1)


def test_index_range_is_clamped():
    g = _grid()
    assert g.index_range(None) == (0, g.ny, 0, g.nx)
    imin, imax, jmin, jmax = g.index_range(Bbox(-50, -50, 60, 60))
    assert imin == 0 and jmin == 0
    assert imax <= g.ny and jmax <= g.nx


def test_add_field_then_cache_cancels():
    g = _grid()
    cache = g.add_field(_disk(), 1.0)
    assert cache.shape == g.shape
    assert g.s.max() > 0
    g.add_cache(cache, -1.0)
    assert np.allclose(g.s, 0.0)


def test_add_field_window_matches_full_sample():
    full = _grid()
    full.add_field(_disk(), 1.0)
    windowed = _grid()
    cache = windowed.add_field(_disk(), 1.0, Bbox.around(Vector(50, 50), 30))
    assert cache.imin > 0 and cache.imax < windowed.ny
    assert np.allclose(full.s, windowed.s)


def test_sample_cache_accessors():
    cache = SampleCache.empty(2, 4, 3, 6)
    assert cache.shape == (2, 3)
    cache.set_value(3, 5, 1.5)
    assert cache.get_value(3, 5) == 1.5


def test_polygonize_returns_world_circle():
    g = _grid()
    g.add_field(_disk(), 1.0)
    curves = g.polygonize(0.2)
    assert len(curves) == 1
    # (d - 30)^2 / 400 == 0.2
    expected = 30 - math.sqrt(0.2 * 400)
    for p in curves[0]:
        assert math.hypot(p.x - 50, p.y - 50) == pytest.approx(expected, abs=1.0)


def test_polygonize_window_uses_offset():
    g = _grid()
    g.add_field(_disk(), 1.0)
    full = g.polygonize(0.2)[0].bbox()
    windowed = g.polygonize(0.2, Bbox.around(Vector(50, 50), 30))
    assert len(windowed) == 1
    box = windowed[0].bbox()
    assert (box.x, box.y, box.width, box.height) == pytest.approx((full.x, full.y, full.width, full.height))
