"""Curve: an ordered polyline with measurement, containment and resampling."""

from __future__ import annotations

import heapq
from collections.abc import Iterable, Iterator

import numpy as np
from numpy.typing import NDArray
from shapely.geometry import Point, Polygon

from bubbleset.utils.douglas_peucker import douglas_peucker_rank
from bubbleset.utils.geometry import (
    Bbox,
    Vector,
    arc_lengths,
    dist_point_line_segment,
    dist_points,
    interp_points,
    signed_area,
)

# A curve whose last appended point lands this close to its first point is
# flagged closed.
AUTO_CLOSE_DELTA = 5.0


class Curve:
    """Polyline of Vectors plus a ``closed`` flag."""

    def __init__(
        self,
        pts: Iterable[Vector] | None = None,
        closed: bool = False,
        auto_close_delta: float | None = AUTO_CLOSE_DELTA,
    ) -> None:
        self.pts: list[Vector] = list(pts) if pts is not None else []
        self.closed = closed
        self.auto_close_delta = auto_close_delta

    def __len__(self) -> int:
        return len(self.pts)

    def __iter__(self) -> Iterator[Vector]:
        return iter(self.pts)

    def __repr__(self) -> str:
        return f"Curve(n={len(self.pts)}, closed={self.closed})"

    def count(self) -> int:
        return len(self.pts)

    def add(self, p: Vector) -> None:
        """Append p, re-evaluating auto-closure against the first point."""
        self.pts.append(p)
        if self.auto_close_delta is not None and len(self.pts) > 1:
            self.closed = dist_points(p, self.pts[0]) <= self.auto_close_delta

    def reverse(self) -> None:
        self.pts.reverse()

    def clone(self) -> Curve:
        return Curve((p.copy() for p in self.pts), self.closed, self.auto_close_delta)

    def _empty_like(self) -> Curve:
        return Curve(auto_close_delta=self.auto_close_delta)

    # ── Measurement ──

    def as_array(self) -> NDArray[np.float64]:
        """Nx2 array of (x, y)."""
        if not self.pts:
            return np.empty((0, 2))
        return np.array([(p.x, p.y) for p in self.pts], dtype=np.float64)

    def partial_perimeters(self) -> NDArray[np.float64]:
        """Arc length from the first point up to each point."""
        return arc_lengths(self.as_array())

    def perimeter(self, per: NDArray[np.float64] | None = None) -> float:
        """Length of the polyline (the closing edge is not counted).

        ``per`` may pass in already computed partial perimeters.
        """
        if len(self.pts) < 2:
            return 0.0
        if per is None:
            per = self.partial_perimeters()
        return float(per[-1])

    def area(self) -> float:
        """Signed area of the polygon formed by the points."""
        return signed_area(self.as_array())

    def bbox(self) -> Bbox | None:
        if not self.pts:
            return None
        arr = self.as_array()
        xmin, ymin = arr.min(axis=0)
        xmax, ymax = arr.max(axis=0)
        return Bbox(float(xmin), float(ymin), float(xmax - xmin), float(ymax - ymin))

    def centroid(self) -> Vector:
        """Mean of the vertices."""
        if not self.pts:
            return Vector(0.0, 0.0)
        arr = np.array([(p.x, p.y, p.z) for p in self.pts], dtype=np.float64)
        cx, cy, cz = arr.mean(axis=0)
        return Vector(float(cx), float(cy), float(cz))

    def dist_point(self, p: Vector) -> float:
        """Distance from p to the nearest edge of the polyline."""
        if len(self.pts) == 1:
            return dist_points(self.pts[0], p)
        dmin = float("inf")
        for a, b in zip(self.pts, self.pts[1:]):
            dmin = min(dmin, dist_point_line_segment(a, b, p))
        return dmin

    def to_polygon(self) -> Polygon | None:
        """Shapely polygon of the curve taken as a ring, None if degenerate."""
        if len(self.pts) < 3:
            return None
        return Polygon([(p.x, p.y) for p in self.pts])

    def inside_point(self, p: Vector) -> bool:
        """Treating the curve as a polygon, True iff p lies strictly inside it."""
        polygon = self.to_polygon()
        if polygon is None:
            return False
        return bool(polygon.contains(Point(p.x, p.y)))

    # ── In-place transforms ──

    def translate(self, v: Vector) -> None:
        for p in self.pts:
            p.x += v.x
            p.y += v.y
            p.z += v.z

    def scale(self, v: Vector) -> None:
        for p in self.pts:
            p.x *= v.x
            p.y *= v.y
            p.z *= v.z

    # ── Resampling ──

    def resample(self, n: int) -> Curve:
        """Copy with n points placed at equal arc-length intervals."""
        result = self._empty_like()
        if n <= 0 or not self.pts:
            return result
        result.add(self.pts[0].copy())
        if n == 1 or len(self.pts) < 2:
            return result

        per = self.partial_perimeters()
        dlen = per[-1] / (n - 1)
        last = len(self.pts) - 1
        j = 0
        for i in range(1, n):
            d = dlen * i
            while j + 1 < last and per[j + 1] < d:
                j += 1
            if per[j + 1] == per[j]:
                result.add(self.pts[j + 1].copy())
            else:
                result.add(interp_points(self.pts[j], self.pts[j + 1], per[j], per[j + 1], d))
        return result

    def insert(self, n: int) -> Curve:
        """Copy with n extra points inserted along the longest edges.

        An edge that already received k insertions competes with score
        length / (k + 1), so repeated insertions spread over long edges.
        """
        m = len(self.pts)
        if n <= 0 or m < 2:
            return self.clone()

        per = self.partial_perimeters()
        lengths = np.diff(per)
        insertions = [0] * m
        # Edge i joins pts[i-1] and pts[i].
        heap = [(-float(lengths[i - 1]), i) for i in range(1, m)]
        heapq.heapify(heap)
        for _ in range(n):
            _, index = heapq.heappop(heap)
            insertions[index] += 1
            heapq.heappush(heap, (-float(lengths[index - 1]) / (insertions[index] + 1), index))

        result = self._empty_like()
        result.add(self.pts[0].copy())
        for index in range(1, m):
            k = insertions[index]
            p = self.pts[index - 1]
            q = self.pts[index]
            for step in range(k):
                result.add(interp_points(p, q, 0, 1, (step + 1) / (k + 1)))
            result.add(q.copy())
        return result

    def adaptive_resample(self, n: int) -> Curve:
        """Copy with exactly n points.

        Subsamples by keeping the n best Douglas-Peucker ranked vertices, or
        supersamples by inserting points along the longest edges.
        """
        if n == len(self.pts):
            return self.clone()
        if n < len(self.pts):
            ranks = douglas_peucker_rank(self.pts)
            result = self._empty_like()
            for p, rank in zip(self.pts, ranks):
                if rank is not None and rank < n:
                    result.add(p.copy())
            return result
        return self.insert(n - len(self.pts))

    def simplify(self, tol: float) -> Curve:
        """Copy keeping only the vertices Douglas-Peucker reaches at tolerance tol."""
        ranks = douglas_peucker_rank(self.pts, tol)
        result = self._empty_like()
        for p, rank in zip(self.pts, ranks):
            if rank is not None:
                result.add(p.copy())
        return result
