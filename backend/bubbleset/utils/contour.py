"""Contour extraction: marching squares with cross-cell chain stitching.

``samples[i][j]`` holds f(j, i), i.e. rows are y and columns are x. Output
curves are expressed in that index space; callers map them to world space.
"""

from __future__ import annotations

import logging
from collections import deque
from itertools import islice

import numpy as np
from numpy.typing import ArrayLike

from bubbleset.utils.curve import Curve
from bubbleset.utils.geometry import Vector

logger = logging.getLogger(__name__)

_Pt = tuple[float, float]
_Crossing = tuple[str, _Pt]


class ContourError(RuntimeError):
    """The sampled grid produced a configuration no level set can have."""


class _Chain:
    """A growing polyline; only its two end points accept new segments."""

    __slots__ = ("pts",)

    def __init__(self, a: _Pt, b: _Pt) -> None:
        self.pts: deque[_Pt] = deque([a, b])

    @property
    def head(self) -> _Pt:
        return self.pts[0]

    @property
    def tail(self) -> _Pt:
        return self.pts[-1]

    def extend(self, a: _Pt, b: _Pt) -> bool:
        """Attach segment a-b at whichever chain end it shares."""
        if a == self.tail:
            self.pts.append(b)
        elif b == self.tail:
            self.pts.append(a)
        elif a == self.head:
            self.pts.appendleft(b)
        elif b == self.head:
            self.pts.appendleft(a)
        else:
            return False
        return True

    def absorb(self, other: _Chain) -> bool:
        """Append other's points to this chain if the two share an end point."""
        if other is self:
            raise ContourError("cannot join a chain with itself")
        a, b = other.head, other.tail
        if a == self.tail:
            self.pts.extend(islice(other.pts, 1, None))
        elif b == self.tail:
            self.pts.extend(list(other.pts)[-2::-1])
        elif b == self.head:
            self.pts.extendleft(reversed(list(other.pts)[:-1]))
        elif a == self.head:
            self.pts.extendleft(islice(other.pts, 1, None))
        else:
            return False
        return True


class _ChainRefs:
    """Chains waiting at the edges of the cell being scanned.

    ``above[ix]`` ends on the north edge of column ix (set by the previous
    row), ``left`` ends on the west edge of the current cell.
    """

    def __init__(self) -> None:
        self.above: dict[int, _Chain] = {}
        self.below: dict[int, _Chain] = {}
        self.left: _Chain | None = None
        self.right: _Chain | None = None

    def next_row(self) -> None:
        self.above = self.below
        self.below = {}
        self.left = None

    def redirect(self, old: _Chain, new: _Chain) -> None:
        for refs in (self.above, self.below):
            for ix, chain in refs.items():
                if chain is old:
                    refs[ix] = new
        if self.left is old:
            self.left = new
        if self.right is old:
            self.right = new


def _lerp(level: float, a: float, b: float, x0: float, x1: float) -> float:
    return x0 + (level - a) / (b - a) * (x1 - x0)


def _cell_segments(
    ix: int,
    iy: int,
    corners: tuple[float, float, float, float],
    flags: tuple[bool, bool, bool, bool],
    level: float,
) -> list[tuple[_Crossing, _Crossing]]:
    """Iso-line segments crossing the cell whose south-east corner is (ix, iy)."""
    nw, ne, sw, se = corners
    fnw, fne, fsw, fse = flags

    crossings: dict[str, _Pt] = {}
    if fnw != fne:
        crossings["n"] = (_lerp(level, nw, ne, ix - 1, ix), float(iy - 1))
    if fne != fse:
        crossings["e"] = (float(ix), _lerp(level, ne, se, iy - 1, iy))
    if fsw != fse:
        crossings["s"] = (_lerp(level, sw, se, ix - 1, ix), float(iy))
    if fnw != fsw:
        crossings["w"] = (float(ix - 1), _lerp(level, nw, sw, iy - 1, iy))

    edges = list(crossings)
    if len(edges) == 2:
        a, b = edges
        return [((a, crossings[a]), (b, crossings[b]))]
    if len(edges) == 4:
        # Saddle: the centre value decides which diagonal stays connected.
        centre_in = (nw + ne + sw + se) / 4 < level
        if centre_in == fnw:
            pairs = [("n", "e"), ("s", "w")]
        else:
            pairs = [("n", "w"), ("s", "e")]
        return [((a, crossings[a]), (b, crossings[b])) for a, b in pairs]
    raise ContourError(f"singleton crossing {''.join(edges)!r} in cell ({iy}, {ix})")


def _stitch(
    segment: tuple[_Crossing, _Crossing],
    ix: int,
    refs: _ChainRefs,
    chains: dict[int, _Chain],
) -> None:
    (ea, pa), (eb, pb) = segment

    def waiting(edge: str) -> _Chain | None:
        if edge == "n":
            return refs.above.get(ix)
        if edge == "w":
            return refs.left
        return None

    ca, cb = waiting(ea), waiting(eb)
    if ca is None and cb is None:
        chain = _Chain(pa, pb)
        chains[id(chain)] = chain
    elif ca is not None and cb is not None and ca is not cb:
        if not ca.extend(pa, pb) or not ca.absorb(cb):
            raise ContourError(f"segment {pa}-{pb} does not meet its neighbouring chains")
        del chains[id(cb)]
        refs.redirect(cb, ca)
        chain = ca
    else:
        chain = ca if ca is not None else cb
        if not chain.extend(pa, pb):
            raise ContourError(f"segment {pa}-{pb} does not meet its neighbouring chain")

    for edge in (ea, eb):
        if edge == "s":
            refs.below[ix] = chain
        elif edge == "e":
            refs.right = chain


def _merge_remaining(chains: list[_Chain]) -> list[_Chain]:
    """Join chains sharing an end point until a full pass merges nothing."""
    pending: list[_Chain | None] = list(chains)
    passes = 0
    merged = True
    while merged:
        merged = False
        passes += 1
        for i, ci in enumerate(pending):
            if ci is None:
                continue
            for j in range(i + 1, len(pending)):
                cj = pending[j]
                if cj is not None and ci.absorb(cj):
                    pending[j] = None
                    merged = True
    logger.debug("Chain cleanup finished after %d passes", passes)
    return [c for c in pending if c is not None]


def marching_squares(samples: ArrayLike, level: float, strict: bool = False) -> list[Curve]:
    """Closed curves approximating f(x, y) == level over a sampled grid.

    Args:
        samples: 2D array, row-major, ``samples[i][j] == f(j, i)``.
        level: Iso-level to trace.
        strict: Raise ContourError on an inconsistent cell instead of
            logging it and skipping that cell.
    """
    m = np.asarray(samples, dtype=np.float64)
    if m.ndim != 2 or m.shape[0] < 2 or m.shape[1] < 2:
        return []
    height, width = m.shape

    inside = m < level
    active = (
        (inside[:-1, :-1] != inside[:-1, 1:])
        | (inside[:-1, :-1] != inside[1:, :-1])
        | (inside[1:, 1:] != inside[:-1, 1:])
        | (inside[1:, 1:] != inside[1:, :-1])
    ).tolist()
    values = m.tolist()
    flags = inside.tolist()

    chains: dict[int, _Chain] = {}
    refs = _ChainRefs()
    for iy in range(1, height):
        refs.next_row()
        vprev, vcurr = values[iy - 1], values[iy]
        fprev, fcurr = flags[iy - 1], flags[iy]
        for ix in range(1, width):
            refs.right = None
            if active[iy - 1][ix - 1]:
                corners = (vprev[ix - 1], vprev[ix], vcurr[ix - 1], vcurr[ix])
                cflags = (fprev[ix - 1], fprev[ix], fcurr[ix - 1], fcurr[ix])
                try:
                    for segment in _cell_segments(ix, iy, corners, cflags, level):
                        _stitch(segment, ix, refs, chains)
                except ContourError as exc:
                    if strict:
                        raise
                    logger.warning("Skipping contour cell: %s", exc)
            refs.left = refs.right

    result = []
    for chain in _merge_remaining(list(chains.values())):
        result.append(Curve([Vector(x, y) for x, y in chain.pts], closed=True))
    return result
