"""Douglas-Peucker vertex ranking.

Instead of simplifying at one fixed tolerance, the polyline's vertices are
ranked by the order in which the Douglas-Peucker subdivision would pick them.
Keeping every vertex with rank < n then yields the n-point generalization.
"""

from __future__ import annotations

import heapq
import itertools
from collections.abc import Sequence
from dataclasses import dataclass

from bubbleset.utils.geometry import Vector, dist_point_line_segment


@dataclass
class _Span:
    """A span first..last of the polyline and its farthest interior vertex."""

    first: int
    last: int
    farthest: int
    dist: float


def _span(first: int, last: int, poly: Sequence[Vector]) -> _Span:
    dist = 0.0
    farthest = first + 1
    a = poly[first]
    b = poly[last]
    for i in range(first + 1, last):
        d = dist_point_line_segment(a, b, poly[i])
        if d > dist:
            dist = d
            farthest = i
    return _Span(first, last, farthest, dist)


def douglas_peucker_rank(poly: Sequence[Vector], tol: float = 0.0) -> list[int | None]:
    """Rank of each vertex in Douglas-Peucker generalization order.

    The first vertex gets rank 0, the last rank 1, then interior vertices are
    ranked 2, 3, ... as the span with the globally largest deviation is split.
    Vertices whose deviation falls below ``tol`` are never reached and stay
    ``None``.
    """
    n = len(poly)
    ranks: list[int | None] = [None] * n
    if n == 0:
        return ranks
    ranks[0] = 0
    if n == 1:
        return ranks
    ranks[n - 1] = 1
    if n <= 2:
        return ranks

    # Max-heap on dist; the counter keeps ties in insertion order.
    tie = itertools.count()
    heap: list[tuple[float, int, _Span]] = []

    def push(span: _Span) -> None:
        heapq.heappush(heap, (-span.dist, next(tie), span))

    push(_span(0, n - 1, poly))
    rank = 2
    while heap:
        _, _, item = heapq.heappop(heap)
        if item.dist < tol:
            break
        ranks[item.farthest] = rank
        rank += 1
        if item.farthest > item.first + 1:
            push(_span(item.first, item.farthest, poly))
        if item.last > item.farthest + 1:
            push(_span(item.farthest, item.last, poly))

    return ranks
