"""Engine configuration: geometric constants of the bubble-set session."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class BubbleConfig:
    """Tuning knobs for clustering, sampling and contour extraction."""

    # Working domain covered by the sampling grid
    canvas_width: float = 800.0
    canvas_height: float = 600.0

    # Dilation radius at level L = dilation_base + L * dilation_increment
    dilation_base: float = 10.0
    dilation_increment: float = 10.0
    max_level: int = 5

    # Field dilation used for sampling, relative to the dilation radius
    field_dilation_factor: float = 1.5

    # Grid cell size and the iso-level traced as outline
    grid_spacing: float = 6.0
    level_offset: float = 0.2

    # Default sizes of newly created primitives
    element_radius: float = 10.0
    connector_radius: float = 1.0

    # Exclusion strokes capture elements within this many dilation radii
    exclusion_radius_factor: float = 4.0

    # Minimum travel between two elements laid down by a paint stroke
    paint_spacing: float = 10.0

    def dilation_radius(self, level: int) -> float:
        return self.dilation_base + level * self.dilation_increment
