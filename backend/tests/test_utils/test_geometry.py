"""Tests for geometry helpers."""

from __future__ import annotations

import numpy as np
import pytest

from bubbleset.utils.geometry import (
    Bbox,
    Vector,
    dist_point_line_segment,
    dist_points,
    interp_points,
    orientation_2d,
    segment_distance_grid,
    segments_intersect_2d,
    signed_area,
)


def test_vector_arithmetic():
    a = Vector(1, 2)
    b = Vector(3, 5)
    assert (a + b).as_tuple() == (4, 7)
    assert (b - a).as_tuple() == (2, 3)
    assert (2 * a).as_tuple() == (2, 4)
    assert a.dot(b) == 13


def test_dist_points():
    assert dist_points(Vector(0, 0), Vector(3, 4)) == pytest.approx(5.0)


def test_interp_points_midpoint():
    p = interp_points(Vector(0, 0), Vector(10, 20), 0, 1, 0.5)
    assert p.as_tuple() == pytest.approx((5, 10))


def test_dist_point_line_segment_projection_and_clamp():
    p, q = Vector(0, 0), Vector(10, 0)
    assert dist_point_line_segment(p, q, Vector(5, 3)) == pytest.approx(3.0)
    # Beyond the end points the distance is to the nearest end
    assert dist_point_line_segment(p, q, Vector(13, 4)) == pytest.approx(5.0)
    assert dist_point_line_segment(p, q, Vector(-3, -4)) == pytest.approx(5.0)


def test_degenerate_segment_is_a_point():
    p = Vector(2, 2)
    assert dist_point_line_segment(p, Vector(2, 2.00001), Vector(5, 6)) == pytest.approx(5.0, abs=1e-3)


def test_segment_distance_grid_matches_scalar():
    p, q = Vector(0, 0), Vector(10, 5)
    xs = np.array([[-3.0, 4.0], [12.0, 6.0]])
    ys = np.array([[1.0, 7.0], [5.0, -2.0]])
    grid = segment_distance_grid(xs, ys, p, q)
    for i in range(2):
        for j in range(2):
            expected = dist_point_line_segment(p, q, Vector(xs[i, j], ys[i, j]))
            assert grid[i, j] == pytest.approx(expected)


def test_orientation_signs():
    p, q = Vector(0, 0), Vector(10, 0)
    assert orientation_2d(p, q, Vector(5, 5)) == 1
    assert orientation_2d(p, q, Vector(5, -5)) == -1
    assert orientation_2d(p, q, Vector(20, 0)) == 0


def test_segments_intersect():
    assert segments_intersect_2d(Vector(0, 0), Vector(10, 10), Vector(0, 10), Vector(10, 0))
    assert not segments_intersect_2d(Vector(0, 0), Vector(10, 0), Vector(0, 5), Vector(10, 5))


def test_collinear_overlap_is_not_an_intersection():
    assert not segments_intersect_2d(Vector(0, 0), Vector(10, 0), Vector(5, 0), Vector(15, 0))


def test_signed_area_orientation():
    square = np.array([(0, 0), (10, 0), (10, 10), (0, 10)], dtype=np.float64)
    assert signed_area(square) == pytest.approx(100.0)
    assert signed_area(square[::-1]) == pytest.approx(-100.0)


class TestBbox:
    def test_union_and_intersection(self):
        a = Bbox(0, 0, 10, 10)
        b = Bbox(5, 5, 10, 10)
        assert a.union(b) == Bbox(0, 0, 15, 15)
        assert a.intersection(b) == Bbox(5, 5, 5, 5)

    def test_disjoint_intersection_is_none(self):
        assert Bbox(0, 0, 1, 1).intersection(Bbox(2, 2, 1, 1)) is None

    def test_around(self):
        box = Bbox.around(Vector(50, 50), 10)
        assert (box.x, box.y, box.xmax, box.ymax) == (40, 40, 60, 60)
