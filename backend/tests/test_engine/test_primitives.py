"""Tests for elements, connectors and clusters."""

from __future__ import annotations

import gc

import pytest

from bubbleset.engine.primitives import Cluster, Connector, Element
from bubbleset.engine.sampling import SampleCache
from bubbleset.utils.geometry import Vector
from tests.conftest import make_element


class TestElement:
    def test_distance_subtracts_radii(self):
        a = make_element(0, 0)
        b = make_element(50, 0)
        assert a.distance(b) == pytest.approx(30.0)
        assert make_element(0, 0).distance(make_element(5, 0)) == 0.0

    def test_contains_and_bbox(self):
        e = Element(Vector(10, 10), 5, dilation=3)
        assert e.contains(Vector(13, 14))
        assert not e.contains(Vector(16, 10))
        box = e.bbox()
        assert (box.x, box.y, box.width) == (2, 2, 16)

    def test_center_is_copied(self):
        p = Vector(1, 1)
        e = Element(p, 5)
        p.x = 100
        assert e.center.x == 1

    def test_translate_bumps_version(self):
        e = make_element(0, 0)
        e.dirty = False
        e.translate(Vector(3, 4))
        assert e.center.as_tuple() == (3, 4)
        assert e.version == 1
        assert e.dirty

    def test_set_field_only_dirties_on_change(self):
        e = make_element(0, 0)
        e.dirty = False
        e.set_field(e.dilation)
        assert not e.dirty
        e.set_field(e.dilation + 5)
        assert e.dirty


class TestConnector:
    def test_distance_to_element_uses_segment(self):
        a, b = make_element(0, 0), make_element(100, 0)
        k = Connector(a, b, 1)
        assert k.distance(make_element(50, 30)) == pytest.approx(19.0)
        assert make_element(50, 30).distance(k) == pytest.approx(19.0)

    def test_crosses(self):
        k = Connector(make_element(0, 0), make_element(100, 0), 1)
        assert k.crosses(Vector(50, -10), Vector(50, 10))
        assert not k.crosses(Vector(50, 5), Vector(50, 10))

    def test_connector_follows_endpoints(self):
        a, b = make_element(0, 0), make_element(100, 0)
        k = Connector(a, b, 1)
        before = k.state_key()
        a.translate(Vector(0, 10))
        assert k.state_key() != before
        assert k.bbox().ymax == pytest.approx(21.0)

    def test_dangling_when_endpoint_is_gone(self):
        a = make_element(0, 0)
        k = Connector(a, make_element(10, 0), 1)
        assert k.dangling
        with pytest.raises(ReferenceError):
            k.elem2

    def test_connector_does_not_keep_elements_alive(self):
        a, b = make_element(0, 0), make_element(10, 0)
        k = Connector(a, b, 1)
        assert not k.dangling
        del b
        gc.collect()
        assert k.dangling


class TestCluster:
    def test_rejects_duplicates(self):
        e = make_element(0, 0)
        c = Cluster([e])
        with pytest.raises(ValueError):
            c.append(e)

    def test_traversal_is_depth_first(self):
        a, b, c = make_element(0, 0), make_element(10, 0), make_element(20, 0)
        k = Connector(a, b, 1)
        outer = Cluster([Cluster([a, k]), Cluster([b]), c])
        assert outer.elements() == [a, b, c]
        assert outer.connectors() == [k]
        assert len(outer.leaves()) == 4

    def test_remove_searches_sub_clusters(self):
        a, b = make_element(0, 0), make_element(10, 0)
        inner = Cluster([a, b])
        outer = Cluster([inner])
        assert outer.remove(b)
        assert inner.elements() == [a]
        assert not outer.remove(b)

    def test_distance_is_minimum_over_children(self):
        left = Cluster([make_element(0, 0), make_element(20, 0)])
        right = Cluster([make_element(100, 0)])
        assert left.distance(right) == pytest.approx(60.0)
        assert Cluster().distance(right) == float("inf")

    def test_closest_element(self):
        a, b = make_element(0, 0), make_element(50, 0)
        assert Cluster([a, b]).closest_element(Vector(40, 0)) is b
        assert Cluster().closest_element(Vector(0, 0)) is None

    def test_dirty_tracking(self):
        e = make_element(0, 0)
        c = Cluster([e])
        assert c.dirty
        c.cache = SampleCache.empty(0, 1, 0, 1)
        c.mark_clean()
        assert not c.dirty
        assert not e.dirty
        e.translate(Vector(1, 0))
        assert c.dirty

    def test_membership_change_marks_dirty(self):
        c = Cluster([make_element(0, 0)])
        c.cache = SampleCache.empty(0, 1, 0, 1)
        c.mark_clean()
        c.append(make_element(30, 0))
        assert c.dirty

    def test_set_field_reports_changes(self):
        e = make_element(0, 0)
        c = Cluster([e])
        c.cache = SampleCache.empty(0, 1, 0, 1)
        c.mark_clean()
        assert not c.set_field(e.dilation)
        assert c.set_field(e.dilation + 1)
        assert c.dirty

    def test_adopt_state(self):
        e = make_element(0, 0)
        old = Cluster([e])
        old.cache = SampleCache.empty(0, 1, 0, 1)
        old.mark_clean()
        new = Cluster([e])
        new.adopt_state(old)
        assert new.cache is old.cache
        assert not new.dirty
