"""Exclusion constraint: a drawn cut that keeps two sides of a cluster apart."""

from __future__ import annotations

import logging
from collections.abc import Callable

from bubbleset.engine.primitives import Cluster, Connector, Element, Node
from bubbleset.utils.geometry import Vector, dist_point_line_segment, orientation_2d

logger = logging.getLogger(__name__)

ExclusionPredicate = Callable[[Node, Node], bool]

DEFAULT_CAPTURE_RADIUS = 10.0

_SIDE_A = "a"
_SIDE_B = "b"


class ClusterExclusion:
    """Classifies the elements of a cluster near segment p-q by the side they lie on.

    Elements within ``radius`` of the segment go to ``aset`` when they lie to
    the negative side of p->q and to ``bset`` otherwise; farther elements are
    left unclassified and never excluded.
    """

    def __init__(self, cluster: Cluster, p: Vector, q: Vector, radius: float = DEFAULT_CAPTURE_RADIUS) -> None:
        self.aset: set[Element] = set()
        self.bset: set[Element] = set()
        for e in cluster.elements():
            if dist_point_line_segment(p, q, e.center) <= radius:
                if orientation_2d(p, q, e.center) < 0:
                    self.aset.add(e)
                else:
                    self.bset.add(e)
        logger.debug("Exclusion stroke classified %d | %d elements", len(self.aset), len(self.bset))

    def count(self) -> int:
        """Number of excluded element pairs."""
        return len(self.aset) * len(self.bset)

    def sides(self, node: Node) -> set[str]:
        """Sides of the cut touched by node.

        Connectors touch the sides of their end points; clusters touch the
        sides of every element and connector end point they contain.
        """
        if isinstance(node, Element):
            elements: list[Element] = [node]
        elif isinstance(node, Connector):
            elements = [] if node.dangling else list(node.endpoints())
        else:
            elements = node.elements()
            for c in node.connectors():
                if not c.dangling:
                    elements.extend(c.endpoints())
        touched: set[str] = set()
        for e in elements:
            if e in self.aset:
                touched.add(_SIDE_A)
            elif e in self.bset:
                touched.add(_SIDE_B)
        return touched

    def excluded(self, a: Node, b: Node) -> bool:
        """True if a and b must not be merged: one touches side a, the other side b."""
        sa = self.sides(a)
        if not sa:
            return False
        sb = self.sides(b)
        return (_SIDE_A in sa and _SIDE_B in sb) or (_SIDE_B in sa and _SIDE_A in sb)

    __call__ = excluded

    def exclusion(self) -> ExclusionPredicate:
        return self.excluded
