"""bubbleset clustering and field-sampling engine."""

from bubbleset.engine.config import BubbleConfig
from bubbleset.engine.exclusion import ClusterExclusion
from bubbleset.engine.primitives import Cluster, Connector, Element
from bubbleset.engine.recluster import down_level, recluster, up_level
from bubbleset.engine.sampling import GridSample, SampleCache
from bubbleset.engine.session import BubbleSession, SessionError, StrokeAction

__all__ = [
    "BubbleConfig",
    "BubbleSession",
    "Cluster",
    "ClusterExclusion",
    "Connector",
    "Element",
    "GridSample",
    "SampleCache",
    "SessionError",
    "StrokeAction",
    "down_level",
    "recluster",
    "up_level",
]
