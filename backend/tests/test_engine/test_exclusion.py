"""Tests for stroke exclusion constraints."""

from __future__ import annotations

from bubbleset.engine.exclusion import ClusterExclusion
from bubbleset.engine.primitives import Cluster, Connector
from bubbleset.engine.recluster import recluster
from bubbleset.utils.geometry import Vector
from tests.conftest import make_element


def _straddling():
    left, right = make_element(100, 100), make_element(130, 100)
    return left, right, Cluster([left, right])


def test_stroke_between_elements_splits_them():
    left, right, cluster = _straddling()
    ex = ClusterExclusion(cluster, Vector(115, 50), Vector(115, 150), radius=40)
    assert ex.count() == 1
    assert ex.excluded(left, right)
    assert ex(right, left)
    assert not ex.excluded(left, left)


def test_far_stroke_excludes_nothing():
    left, right, cluster = _straddling()
    ex = ClusterExclusion(cluster, Vector(500, 500), Vector(600, 500), radius=40)
    assert ex.count() == 0
    assert not ex.excluded(left, right)


def test_unclassified_elements_are_never_excluded():
    left, right, cluster = _straddling()
    ex = ClusterExclusion(cluster, Vector(115, 50), Vector(115, 150), radius=40)
    outsider = make_element(400, 100)
    assert not ex.excluded(outsider, left)
    assert not ex.excluded(right, outsider)


def test_connector_and_cluster_take_their_elements_sides():
    left, right, cluster = _straddling()
    ex = ClusterExclusion(cluster, Vector(115, 50), Vector(115, 150), radius=40)
    far = make_element(60, 100)
    link = Connector(left, far, 1)
    assert ex.excluded(link, right)
    assert ex.excluded(Cluster([left]), Cluster([right]))


def test_recluster_respects_exclusion():
    left, right, cluster = _straddling()
    ex = ClusterExclusion(cluster, Vector(115, 50), Vector(115, 150), radius=40)
    assert len(recluster([cluster], 10, 20)) == 1
    assert len(recluster([cluster], 10, 20, ex.exclusion())) == 2
