"""Leaf-node geometry helpers. No engine imports."""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

# Segments shorter than this are treated as a single point.
SEGMENT_EPS = 1e-4


@dataclass
class Vector:
    """A point or displacement. z is carried along but ignored by the 2D predicates."""

    x: float
    y: float
    z: float = 0.0

    def __add__(self, other: Vector) -> Vector:
        return Vector(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: Vector) -> Vector:
        return Vector(self.x - other.x, self.y - other.y, self.z - other.z)

    def __mul__(self, s: float) -> Vector:
        return Vector(self.x * s, self.y * s, self.z * s)

    __rmul__ = __mul__

    def dot(self, other: Vector) -> float:
        return self.x * other.x + self.y * other.y + self.z * other.z

    def copy(self) -> Vector:
        return Vector(self.x, self.y, self.z)

    def set(self, other: Vector) -> None:
        self.x, self.y, self.z = other.x, other.y, other.z

    def as_tuple(self) -> tuple[float, float]:
        return (self.x, self.y)


def dist_points(p: Vector, q: Vector) -> float:
    return math.sqrt((p.x - q.x) ** 2 + (p.y - q.y) ** 2 + (p.z - q.z) ** 2)


def interp_points(p: Vector, q: Vector, wp: float, wq: float, w: float) -> Vector:
    """Point at weight w when p has weight wp and q has weight wq."""
    a = (w - wp) / (wq - wp)
    b = 1 - a
    return Vector(p.x * b + q.x * a, p.y * b + q.y * a, p.z * b + q.z * a)


def closest_point_on_segment(p: Vector, q: Vector, r: Vector) -> Vector:
    """Closest point of segment p-q to r."""
    s = dist_points(p, q)
    if s < SEGMENT_EPS:
        return p.copy()
    v = (q - p) * (1.0 / s)
    d = (r - p).dot(v)
    if d < 0:
        return p.copy()
    if d > s:
        return q.copy()
    return interp_points(p, q, 0, s, d)


def dist_point_line_segment(p: Vector, q: Vector, r: Vector) -> float:
    """Distance from r to segment p-q.

    The projection of r is clamped to the segment; a segment shorter than
    SEGMENT_EPS degenerates to the point p.
    """
    return dist_points(closest_point_on_segment(p, q, r), r)


def segment_distance_grid(
    x: NDArray[np.float64] | float,
    y: NDArray[np.float64] | float,
    p: Vector,
    q: Vector,
) -> NDArray[np.float64]:
    """Vectorised distance from every (x, y) sample to segment p-q."""
    x = np.asarray(x, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)
    s = math.hypot(q.x - p.x, q.y - p.y)
    if s < SEGMENT_EPS:
        return np.hypot(x - p.x, y - p.y)
    ux, uy = (q.x - p.x) / s, (q.y - p.y) / s
    d = np.clip((x - p.x) * ux + (y - p.y) * uy, 0.0, s)
    return np.hypot(x - (p.x + ux * d), y - (p.y + uy * d))


def orientation_2d(p1: Vector, p2: Vector, p3: Vector) -> int:
    """Return -1, 0 or +1 with the sign of the cross product (p2-p1) x (p3-p1)."""
    total = (
        p2.x * p3.y + p1.x * p2.y + p1.y * p3.x
        - p2.x * p1.y - p3.x * p2.y - p3.y * p1.x
    )
    if total < 0:
        return -1
    elif total > 0:
        return 1
    return 0


def segments_intersect_2d(a: Vector, b: Vector, c: Vector, d: Vector) -> bool:
    """True iff segment a-b properly crosses segment c-d.

    Collinear segments yield equal (zero) orientations and are reported as
    non-intersecting, even when they overlap.
    """
    return (
        orientation_2d(a, b, c) != orientation_2d(a, b, d)
        and orientation_2d(c, d, a) != orientation_2d(c, d, b)
    )


def signed_area(points: NDArray[np.float64]) -> float:
    """Shoelace formula over a closed ring (last vertex joins the first)."""
    if len(points) < 3:
        return 0.0
    x = points[:, 0]
    y = points[:, 1]
    return float(0.5 * np.sum(x * np.roll(y, -1) - np.roll(x, -1) * y))


def arc_lengths(points: NDArray[np.float64]) -> NDArray[np.float64]:
    """Cumulative arc-length along a point sequence."""
    if len(points) == 0:
        return np.zeros(0)
    diffs = np.diff(points, axis=0)
    segment_lengths = np.sqrt(np.sum(diffs**2, axis=1))
    return np.concatenate([[0.0], np.cumsum(segment_lengths)])


@dataclass(frozen=True)
class Bbox:
    """Axis-aligned box given by its min corner and extent."""

    x: float
    y: float
    width: float
    height: float

    @property
    def xmax(self) -> float:
        return self.x + self.width

    @property
    def ymax(self) -> float:
        return self.y + self.height

    @classmethod
    def around(cls, center: Vector, half_size: float) -> Bbox:
        return cls(center.x - half_size, center.y - half_size, 2 * half_size, 2 * half_size)

    def union(self, other: Bbox) -> Bbox:
        x = min(self.x, other.x)
        y = min(self.y, other.y)
        w = max(self.xmax, other.xmax) - x
        h = max(self.ymax, other.ymax) - y
        return Bbox(x, y, w, h)

    def intersection(self, other: Bbox) -> Bbox | None:
        """Overlap of both boxes, or None when it has no area."""
        x = max(self.x, other.x)
        y = max(self.y, other.y)
        w = min(self.xmax, other.xmax) - x
        h = min(self.ymax, other.ymax) - y
        if w > 0 and h > 0:
            return Bbox(x, y, w, h)
        return None

