"""Tests for radial kernels and primitive fields."""

from __future__ import annotations

import numpy as np
import pytest

from bubbleset.engine.fields import CapsuleField, DiskField, RadialKernel, SumField


def test_kernel_profile():
    k = RadialKernel(10, 20)
    assert k(10) == pytest.approx(1.0)
    assert k(15) == pytest.approx(0.25)
    assert k(20) == pytest.approx(0.0)
    assert k(35) == 0.0


def test_kernel_rejects_empty_support():
    with pytest.raises(ValueError):
        RadialKernel(10, 10)


def test_kernel_vectorised():
    k = RadialKernel(0, 10)
    out = k(np.array([0.0, 5.0, 10.0, 12.0]))
    assert out == pytest.approx([1.0, 0.25, 0.0, 0.0])


def test_disk_field_scalar_returns_float():
    f = DiskField(0, 0, RadialKernel(5, 15))
    value = f(3.0, 4.0)
    assert isinstance(value, float)
    assert value == pytest.approx(1.0)


def test_capsule_field_is_constant_along_the_segment():
    f = CapsuleField(0, 0, 100, 0, RadialKernel(1, 11))
    xs = np.array([10.0, 50.0, 90.0])
    ys = np.full(3, 6.0)
    assert f(xs, ys) == pytest.approx([0.25, 0.25, 0.25])


def test_sum_field():
    k = RadialKernel(0, 10)
    f = SumField((DiskField(0, 0, k), DiskField(4, 0, k)))
    assert f(2.0, 0.0) == pytest.approx(2 * 0.64)
    assert SumField(())(1.0, 1.0) == 0.0
