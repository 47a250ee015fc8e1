"""Shared test fixtures."""

from __future__ import annotations

import numpy as np
import pytest

from bubbleset.engine.config import BubbleConfig
from bubbleset.engine.primitives import Cluster, Element
from bubbleset.engine.session import BubbleSession
from bubbleset.utils.geometry import Vector


# Small canvas keeps the sampling grid cheap.
SMALL_CONFIG = dict(canvas_width=400.0, canvas_height=300.0, grid_spacing=4.0)

# Element centres used across tests. With radius 10 at level 0 (dilation
# radius 10), TOUCHING merges and FAR_APART stays separate.
TOUCHING = [(100.0, 100.0), (115.0, 100.0)]
FAR_APART = [(100.0, 100.0), (200.0, 100.0)]


def make_element(x: float, y: float, radius: float = 10.0) -> Element:
    return Element(Vector(x, y), radius)


def singleton_clusters(points: list[tuple[float, float]], radius: float = 10.0) -> list[Cluster]:
    return [Cluster([make_element(x, y, radius)]) for x, y in points]


def cone_samples(size: int = 40, cx: float = 20.0, cy: float = 20.0, radius: float = 10.0) -> np.ndarray:
    """samples[i][j] = 1 - dist((j, i), (cx, cy)) / radius; level 0 is a circle."""
    ys, xs = np.mgrid[0:size, 0:size].astype(np.float64)
    return 1.0 - np.hypot(xs - cx, ys - cy) / radius


@pytest.fixture
def config() -> BubbleConfig:
    return BubbleConfig(**SMALL_CONFIG)


@pytest.fixture
def session(config: BubbleConfig) -> BubbleSession:
    return BubbleSession(config)
