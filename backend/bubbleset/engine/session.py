"""BubbleSession: the single mutable state object behind one interactive canvas.

Holds the current cluster partition, aggregation level, active exclusion and
selection, and turns edits into recluster + polygonize steps.
"""

from __future__ import annotations

import enum
import logging
import time
from typing import Any

from bubbleset.engine.config import BubbleConfig
from bubbleset.engine.exclusion import ClusterExclusion
from bubbleset.engine.primitives import Cluster, Connector, Element, Node
from bubbleset.engine.recluster import down_level, recluster, up_level
from bubbleset.engine.sampling import GridSample
from bubbleset.utils.geometry import Bbox, Vector, dist_points

logger = logging.getLogger(__name__)


class SessionError(ValueError):
    """An edit that the session's current state does not allow."""


class StrokeAction(str, enum.Enum):
    LINK = "link"
    CUT = "cut"
    EXCLUDE = "exclude"
    NONE = "none"


class BubbleSession:
    """Cluster state for one canvas."""

    def __init__(self, config: BubbleConfig | None = None) -> None:
        self.config = config or BubbleConfig()
        self.clusters: list[Cluster] = []
        self.level = 0
        # Connectors set aside when leaving a level downwards, restored on return
        self.level_connectors: list[list[Connector]] = [[] for _ in range(self.config.max_level)]
        self.exclusion: ClusterExclusion | None = None
        self.selection: Node | None = None
        self.grid: GridSample | None = None
        self._grid_key: tuple[float, float, float] | None = None
        self._paint_anchor: Vector | None = None

    @property
    def dilation_radius(self) -> float:
        return self.config.dilation_radius(self.level)

    @property
    def field_dilation(self) -> float:
        return self.dilation_radius * self.config.field_dilation_factor

    def elements(self) -> list[Element]:
        return [e for c in self.clusters for e in c.elements()]

    def connectors(self) -> list[Connector]:
        return [k for c in self.clusters for k in c.connectors()]

    # ── Reclustering ──

    def _prune_dangling(self) -> None:
        for c in self.clusters:
            for k in c.connectors():
                if k.dangling:
                    c.remove(k)

    def _recluster(self, min_dist: float | None = None, max_dist: float | None = None) -> None:
        r = self.dilation_radius
        min_dist = r if min_dist is None else min_dist
        max_dist = 2 * r if max_dist is None else max_dist
        self._prune_dangling()
        self.clusters = recluster(self.clusters, min_dist, max_dist, self.exclusion)
        self._resolve_selection()

    def _resolve_selection(self) -> None:
        """Follow a selected cluster into whichever new cluster took over its members."""
        sel = self.selection
        if not isinstance(sel, Cluster):
            return
        if any(sel is c or sel in c for c in self.clusters):
            return
        self.selection = next((c for c in self.clusters if c.common(sel)), None)

    # ── Edits ──

    def add_element(self, p: Vector, radius: float | None = None) -> Element:
        """Create an element at p in a cluster of its own, then recluster."""
        if self.level != 0:
            raise SessionError(f"elements can only be created at level 0 (current level {self.level})")
        e = Element(p, radius if radius is not None else self.config.element_radius, self.field_dilation)
        self.clusters.append(Cluster([e]))
        self._recluster()
        logger.debug("Added %r", e)
        return e

    def paint(self, p: Vector) -> Element | None:
        """Lay down an element when p is far enough from the previous painted one."""
        anchor = self._paint_anchor
        if anchor is not None and dist_points(anchor, p) < self.config.paint_spacing:
            return None
        e = self.add_element(p)
        self._paint_anchor = p.copy()
        return e

    def select(self, p: Vector) -> Node | None:
        """Pick the element under p, or else the cluster whose bubble covers p."""
        self.selection = None
        for c in self.clusters:
            if c.distance_point(p) > self.dilation_radius:
                continue
            hit = next((e for e in c if not isinstance(e, Connector) and e.contains(p)), None)
            if hit is not None:
                self.selection = hit
            elif self.selection is None:
                self.selection = c
        return self.selection

    def translate_selection(self, v: Vector) -> None:
        if self.selection is None:
            raise SessionError("nothing is selected")
        self.selection.translate(v)
        self._recluster()

    def release(self) -> None:
        """End the current interaction: drop selection, paint anchor and exclusion."""
        self.selection = None
        self._paint_anchor = None
        self.exclusion = None

    def apply_stroke(self, p: Vector, q: Vector) -> StrokeAction:
        """Interpret a drawn stroke p-q.

        A stroke from inside one outline to another links their closest
        elements; otherwise it cuts the first connector it crosses in each
        cluster; otherwise it declares an exclusion across the stroke.
        """
        self.exclusion = None
        self.polygonize()

        first: Element | None = None
        last: Element | None = None
        for c in self.clusters:
            for outline in c.outline:
                if outline.inside_point(p):
                    first = c.closest_element(p)
                if outline.inside_point(q):
                    last = c.closest_element(q)

        if first is not None and last is not None and first is not last:
            link = Connector(first, last, self.config.connector_radius, self.field_dilation)
            self.clusters.append(Cluster([link]))
            self._recluster()
            logger.info("Stroke linked element %d to %d", first.uid, last.uid)
            return StrokeAction.LINK

        cut = 0
        for c in self.clusters:
            crossed = next((k for k in c.connectors() if k.crosses(p, q)), None)
            if crossed is not None:
                c.remove(crossed)
                cut += 1
        if cut:
            self._recluster()
            logger.info("Stroke cut %d connectors", cut)
            return StrokeAction.CUT

        radius = self.dilation_radius * self.config.exclusion_radius_factor
        for c in self.clusters:
            ex = ClusterExclusion(c, p, q, radius)
            if ex.count() > 0:
                self.exclusion = ex
                self._recluster()
                logger.info("Stroke excludes %d element pairs", ex.count())
                return StrokeAction.EXCLUDE

        return StrokeAction.NONE

    def up_level(self) -> None:
        """Aggregate: every cluster becomes a member of a new parent cluster."""
        if self.level + 1 >= self.config.max_level:
            raise SessionError(f"already at the top level ({self.level})")
        self.exclusion = None
        self.level_connectors[self.level] = []
        self.clusters = up_level(self.clusters)
        self.level += 1
        self._restore_connectors()
        r = self.dilation_radius
        self._recluster(1.5 * r, 1.5 * r)
        logger.info("Moved up to level %d (%d clusters)", self.level, len(self.clusters))

    def down_level(self) -> None:
        """Disaggregate one level, setting this level's connectors aside."""
        if self.level == 0:
            raise SessionError("already at level 0")
        self.exclusion = None
        stash: list[Connector] = []
        for c in self.clusters:
            for child in list(c):
                if isinstance(child, Connector):
                    c.remove(child)
                    stash.append(child)
        self.level_connectors[self.level] = stash
        self.clusters = down_level(self.clusters)
        self.level -= 1
        self._restore_connectors()
        r = self.dilation_radius
        self._recluster(1.5 * r, 1.5 * r)
        logger.info("Moved down to level %d (%d clusters)", self.level, len(self.clusters))

    def _restore_connectors(self) -> None:
        for k in self.level_connectors[self.level]:
            if not k.dangling:
                self.clusters.append(Cluster([k]))
        self.level_connectors[self.level] = []

    # ── Outlines ──

    def polygonize(self) -> bool:
        """Refresh cluster outlines; returns False when nothing needed updating.

        Every cluster's field is subtracted from a fresh grid (from its cache
        when clean). Each cluster to outline is then added back twice, so the
        grid holds its own field minus all the others, and the contour at
        ``level_offset`` is traced over its bounding box.
        """
        self._prune_dangling()
        cfg = self.config
        key = (cfg.canvas_width, cfg.canvas_height, cfg.grid_spacing)
        if key != self._grid_key:
            # Caches index into the grid; a new geometry invalidates them all.
            for c in self.clusters:
                c.dirty = True
            self._grid_key = key

        dilation = self.field_dilation
        needed: Bbox | None = None
        for c in self.clusters:
            c.set_field(dilation)
            box = c.bbox()
            if box is not None and (c.dirty or not c.outline):
                needed = box if needed is None else needed.union(box)
        if needed is None:
            return False

        t0 = time.perf_counter()
        grid = GridSample(0.0, cfg.canvas_width, 0.0, cfg.canvas_height, cfg.grid_spacing)
        self.grid = grid

        pending: list[tuple[Cluster, Bbox, bool]] = []
        for c in self.clusters:
            box = c.bbox()
            if box is None:
                continue
            dirty = c.dirty
            if dirty:
                c.cache = grid.add_field(c.field, -1, box)
            else:
                grid.add_cache(c.cache, -1)
            pending.append((c, box, dirty))

        traced = 0
        for c, box, dirty in pending:
            if dirty or box.intersection(needed) is not None:
                grid.add_cache(c.cache, 2)
                c.outline = grid.polygonize(cfg.level_offset, box)
                grid.add_cache(c.cache, -2)
                c.mark_clean()
                traced += 1

        logger.debug(
            "Polygonized %d/%d clusters in %.1fms",
            traced,
            len(self.clusters),
            (time.perf_counter() - t0) * 1000,
        )
        return True

    def snapshot(self) -> dict[str, Any]:
        """Plain-data view of the session for serialisation."""
        clusters = []
        for c in self.clusters:
            clusters.append({
                "id": c.uid,
                "elements": [
                    {"id": e.uid, "x": e.center.x, "y": e.center.y, "radius": e.radius}
                    for e in c.elements()
                ],
                "connectors": [
                    {"id": k.uid, "elem1": k.elem1.uid, "elem2": k.elem2.uid, "radius": k.radius}
                    for k in c.connectors()
                    if not k.dangling
                ],
                "outline": [[(p.x, p.y) for p in curve] for curve in c.outline],
                "dirty": c.dirty,
            })
        selection = self.selection
        return {
            "level": self.level,
            "dilation_radius": self.dilation_radius,
            "exclusion_active": self.exclusion is not None,
            "selection": selection.uid if selection is not None else None,
            "clusters": clusters,
        }
