"""Hysteresis reclustering and level-of-detail restructuring.

Primitives that already share a cluster stay together up to ``max_dist``;
primitives from different clusters only merge within ``min_dist``. Existing
groups therefore resist splitting more than new groups resist forming.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Sequence

from bubbleset.engine.exclusion import ExclusionPredicate
from bubbleset.engine.primitives import Cluster, Node

logger = logging.getLogger(__name__)


def _never_excluded(a: Node, b: Node) -> bool:
    return False


def recluster(
    clusters: Sequence[Cluster],
    min_dist: float,
    max_dist: float,
    exclusion: ExclusionPredicate | None = None,
) -> list[Cluster]:
    """Regroup the direct children of clusters into a new list of clusters.

    Args:
        clusters: Current partition.
        min_dist: Merge threshold for members of different clusters.
        max_dist: Merge threshold for members of the same cluster.
        exclusion: Symmetric predicate; pairs it accepts are never merged.

    A new cluster whose members are exactly those of a clean original cluster
    inherits that cluster's sample cache and outline.
    """
    t0 = time.perf_counter()
    excluded = exclusion or _never_excluded

    objects: list[Node] = []
    oldgroup: list[int] = []
    for ci, cluster in enumerate(clusters):
        for child in cluster:
            objects.append(child)
            oldgroup.append(ci)
    newgroup = list(range(len(objects)))

    n = len(objects)
    for i in range(n):
        for j in range(i + 1, n):
            if newgroup[i] == newgroup[j]:
                continue
            threshold = max_dist if oldgroup[i] == oldgroup[j] else min_dist
            if objects[i].distance(objects[j]) <= threshold and not excluded(objects[i], objects[j]):
                src, dst = newgroup[j], newgroup[i]
                for k in range(n):
                    if newgroup[k] == src:
                        newgroup[k] = dst

    members: dict[int, list[int]] = {}
    for k, g in enumerate(newgroup):
        members.setdefault(g, []).append(k)

    result: list[Cluster] = []
    reused = 0
    for indices in members.values():
        cluster = Cluster(objects[k] for k in indices)
        origin = clusters[oldgroup[indices[0]]]
        same_members = len(indices) == len(origin) and all(oldgroup[k] == oldgroup[indices[0]] for k in indices)
        if same_members and not origin.dirty:
            cluster.adopt_state(origin)
            reused += 1
        result.append(cluster)

    logger.debug(
        "Reclustered %d objects into %d clusters (%d caches reused) in %.1fms",
        n,
        len(result),
        reused,
        (time.perf_counter() - t0) * 1000,
    )
    return result


def up_level(clusters: Sequence[Cluster]) -> list[Cluster]:
    """Wrap every cluster in a new singleton parent."""
    return [Cluster([c]) for c in clusters]


def down_level(clusters: Sequence[Cluster]) -> list[Cluster]:
    """Remove one level of nesting.

    Sub-clusters are promoted to the top level; bare primitives are wrapped in
    singleton clusters.
    """
    result: list[Cluster] = []
    for c in clusters:
        for child in c:
            if isinstance(child, Cluster):
                result.append(child)
            else:
                result.append(Cluster([child]))
    return result
