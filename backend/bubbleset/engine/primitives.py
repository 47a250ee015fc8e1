"""Field primitives: Element (disk), Connector (capsule) and the composite Cluster.

All three share one interface: ``field``, ``bbox``, ``contains``,
``distance``, ``distance_point``, ``translate`` and ``set_field``. Geometry or
dilation changes bump a per-primitive ``version`` so clusters can tell whether
a cached field sample is still valid.
"""

from __future__ import annotations

import itertools
import weakref
from abc import ABC, abstractmethod
from collections.abc import Iterable, Iterator
from typing import TYPE_CHECKING, Hashable, Union

from bubbleset.engine.fields import CapsuleField, DiskField, Field, RadialKernel, SumField
from bubbleset.utils.geometry import (
    Bbox,
    Vector,
    dist_point_line_segment,
    dist_points,
    segments_intersect_2d,
)

if TYPE_CHECKING:
    from bubbleset.engine.sampling import SampleCache
    from bubbleset.utils.curve import Curve

DEFAULT_DILATION = 10.0

_uids = itertools.count(1)


class Primitive(ABC):
    """A leaf of the cluster tree that emits a radial field."""

    def __init__(self, radius: float, dilation: float) -> None:
        self.uid = next(_uids)
        self.radius = radius
        self.dilation = dilation
        self.version = 0
        # True while the field differs from what was last sampled.
        self.dirty = True

    def _touch(self) -> None:
        self.version += 1
        self.dirty = True

    @property
    def kernel(self) -> RadialKernel:
        return RadialKernel(self.radius, self.radius + self.dilation)

    def set_field(self, dilation: float) -> None:
        """Change the dilation; marks the primitive dirty only on an actual change."""
        if dilation != self.dilation:
            self.dilation = dilation
            self._touch()

    def state_key(self) -> Hashable:
        return (self.uid, self.version)

    @property
    @abstractmethod
    def field(self) -> Field: ...

    @abstractmethod
    def bbox(self) -> Bbox: ...

    @abstractmethod
    def contains(self, p: Vector) -> bool: ...

    @abstractmethod
    def distance(self, other: Node) -> float: ...

    @abstractmethod
    def distance_point(self, p: Vector) -> float: ...

    @abstractmethod
    def translate(self, v: Vector) -> None: ...


class Element(Primitive):
    """A disk of ``radius`` around ``center`` whose field reaches ``radius + dilation``."""

    def __init__(self, center: Vector, radius: float, dilation: float = DEFAULT_DILATION) -> None:
        super().__init__(radius, dilation)
        self.center = center.copy()

    def __repr__(self) -> str:
        return f"Element(uid={self.uid}, center=({self.center.x:.1f}, {self.center.y:.1f}), r={self.radius})"

    @property
    def field(self) -> DiskField:
        return DiskField(self.center.x, self.center.y, self.kernel)

    def bbox(self) -> Bbox:
        return Bbox.around(self.center, self.radius + self.dilation)

    def contains(self, p: Vector) -> bool:
        return dist_points(self.center, p) <= self.radius

    def distance(self, other: Node) -> float:
        if isinstance(other, Element):
            return max(dist_points(self.center, other.center) - self.radius - other.radius, 0.0)
        return other.distance(self)

    def distance_point(self, p: Vector) -> float:
        return max(dist_points(self.center, p) - self.radius, 0.0)

    def translate(self, v: Vector) -> None:
        self.center.x += v.x
        self.center.y += v.y
        self._touch()


class Connector(Primitive):
    """A capsule around the segment joining two elements.

    The elements are held through weak references: a connector never keeps
    its end points alive, and reports ``dangling`` once either is gone.
    """

    def __init__(self, elem1: Element, elem2: Element, radius: float, dilation: float = DEFAULT_DILATION) -> None:
        super().__init__(radius, dilation)
        self._elem1 = weakref.ref(elem1)
        self._elem2 = weakref.ref(elem2)

    def __repr__(self) -> str:
        return f"Connector(uid={self.uid}, r={self.radius})"

    @staticmethod
    def _resolve(ref: weakref.ref[Element]) -> Element:
        elem = ref()
        if elem is None:
            raise ReferenceError("connector end point no longer exists")
        return elem

    @property
    def elem1(self) -> Element:
        return self._resolve(self._elem1)

    @property
    def elem2(self) -> Element:
        return self._resolve(self._elem2)

    @property
    def dangling(self) -> bool:
        return self._elem1() is None or self._elem2() is None

    def endpoints(self) -> tuple[Element, Element]:
        return self.elem1, self.elem2

    def state_key(self) -> Hashable:
        # The capsule moves with its end points, wherever they live.
        return (self.uid, self.version, self.elem1.state_key(), self.elem2.state_key())

    def _segdist(self, p: Vector) -> float:
        return dist_point_line_segment(self.elem1.center, self.elem2.center, p)

    @property
    def field(self) -> CapsuleField:
        a, b = self.elem1.center, self.elem2.center
        return CapsuleField(a.x, a.y, b.x, b.y, self.kernel)

    def bbox(self) -> Bbox:
        sz = self.radius + self.dilation
        return Bbox.around(self.elem1.center, sz).union(Bbox.around(self.elem2.center, sz))

    def contains(self, p: Vector) -> bool:
        return self._segdist(p) <= self.radius

    def distance(self, other: Node) -> float:
        if isinstance(other, Element):
            return max(self._segdist(other.center) - self.radius - other.radius, 0.0)
        if isinstance(other, Connector):
            d = min(
                self._segdist(other.elem1.center),
                self._segdist(other.elem2.center),
                other._segdist(self.elem1.center),
                other._segdist(self.elem2.center),
            )
            return max(d - self.radius - other.radius, 0.0)
        return other.distance(self)

    def distance_point(self, p: Vector) -> float:
        return max(self._segdist(p) - self.radius, 0.0)

    def crosses(self, a: Vector, b: Vector) -> bool:
        """True if segment a-b properly crosses this connector's segment."""
        return segments_intersect_2d(self.elem1.center, self.elem2.center, a, b)

    def translate(self, v: Vector) -> None:
        # Position comes from the end points; only the sample is invalidated.
        self._touch()


Node = Union[Element, Connector, "Cluster"]


class Cluster:
    """An ordered, duplicate-free group of elements, connectors and sub-clusters.

    ``cache`` and ``outline`` belong to the last sampling pass. The cluster is
    dirty when it was never sampled, was explicitly marked, or when any
    descendant changed since ``mark_clean``.
    """

    def __init__(self, children: Iterable[Node] = ()) -> None:
        self.uid = next(_uids)
        self.children: list[Node] = []
        self.outline: list[Curve] = []
        self.cache: SampleCache | None = None
        self._signature: tuple[Hashable, ...] | None = None
        self._stale = True
        for child in children:
            self.append(child)

    def __repr__(self) -> str:
        return f"Cluster(uid={self.uid}, children={len(self.children)})"

    def __iter__(self) -> Iterator[Node]:
        return iter(self.children)

    def __len__(self) -> int:
        return len(self.children)

    def __getitem__(self, index: int) -> Node:
        return self.children[index]

    def __contains__(self, item: object) -> bool:
        return any(child is item for child in self.children)

    # ── Membership ──

    def append(self, child: Node) -> None:
        if child in self:
            raise ValueError(f"{child!r} is already a member of {self!r}")
        if child is self:
            raise ValueError("a cluster cannot contain itself")
        self.children.append(child)
        self._stale = True

    def remove(self, child: Node) -> bool:
        """Remove child from this cluster or the sub-cluster holding it."""
        for i, c in enumerate(self.children):
            if c is child:
                del self.children[i]
                self._stale = True
                return True
        for c in self.children:
            if isinstance(c, Cluster) and c.remove(child):
                self._stale = True
                return True
        return False

    def common(self, other: Cluster) -> set[Node]:
        """Direct children shared with other."""
        others = {id(c) for c in other.children}
        return {c for c in self.children if id(c) in others}

    def elements(self) -> list[Element]:
        """All elements, depth-first."""
        result: list[Element] = []
        for c in self.children:
            if isinstance(c, Cluster):
                result.extend(c.elements())
            elif isinstance(c, Element):
                result.append(c)
        return result

    def connectors(self) -> list[Connector]:
        """All connectors, depth-first."""
        result: list[Connector] = []
        for c in self.children:
            if isinstance(c, Cluster):
                result.extend(c.connectors())
            elif isinstance(c, Connector):
                result.append(c)
        return result

    def leaves(self) -> list[Primitive]:
        result: list[Primitive] = []
        for c in self.children:
            if isinstance(c, Cluster):
                result.extend(c.leaves())
            else:
                result.append(c)
        return result

    # ── Geometry ──

    def bbox(self) -> Bbox | None:
        box: Bbox | None = None
        for c in self.children:
            cbox = c.bbox()
            if cbox is None:
                continue
            box = cbox if box is None else box.union(cbox)
        return box

    def contains(self, p: Vector) -> bool:
        return any(c.contains(p) for c in self.children)

    def distance(self, other: Node) -> float:
        """Distance to other from the nearest direct child."""
        return min((other.distance(c) for c in self.children), default=float("inf"))

    def distance_point(self, p: Vector) -> float:
        return min((c.distance_point(p) for c in self.children), default=float("inf"))

    def closest_element(self, p: Vector) -> Element | None:
        return min(self.elements(), key=lambda e: e.distance_point(p), default=None)

    def translate(self, v: Vector) -> None:
        for c in self.children:
            c.translate(v)
        for curve in self.outline:
            curve.translate(v)
        self._stale = True

    # ── Field ──

    @property
    def field(self) -> SumField:
        return SumField(tuple(c.field for c in self.children))

    def set_field(self, dilation: float) -> bool:
        """Apply dilation to every descendant; True if any leaf field is dirty."""
        for c in self.children:
            c.set_field(dilation)
        return any(leaf.dirty for leaf in self.leaves())

    def signature(self) -> tuple[Hashable, ...]:
        return tuple(leaf.state_key() for leaf in self.leaves())

    @property
    def dirty(self) -> bool:
        return self._stale or self.cache is None or self._signature != self.signature()

    @dirty.setter
    def dirty(self, value: bool) -> None:
        if value:
            self._stale = True
        else:
            self.mark_clean()

    def mark_clean(self) -> None:
        """Record the current descendant state as the one cache/outline reflect."""
        self._signature = self.signature()
        self._stale = False
        for leaf in self.leaves():
            leaf.dirty = False

    def adopt_state(self, other: Cluster) -> None:
        """Take over other's sample, outline and clean state (same membership)."""
        self.cache = other.cache
        self.outline = other.outline
        self._signature = other._signature
        self._stale = other._stale
