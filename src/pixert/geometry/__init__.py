"""
Module: geometry

Purpose:
    Grid partition engine and the helpers that normalise UI choices
    into layout parameters. Pure functions only, no I/O.

Key Functions:
    - resolve(): Image size + layout -> CropSequence
    - compute_grid(): Unrounded geometry used by resolve()
    - layout_parameters(): Alignment/preset choices -> LayoutParameters
"""

from .alignment import (
    ASPECT_RATIO_PRESETS,
    Alignment,
    aspect_ratio_from,
    clamp_drag_offset,
    layout_parameters,
    preview_grid_height,
    vertical_offset_ratio,
)
from .resolver import ConstraintAxis, GridGeometry, compute_grid, resolve, round_half_up

__all__ = [
    "ASPECT_RATIO_PRESETS",
    "Alignment",
    "ConstraintAxis",
    "GridGeometry",
    "aspect_ratio_from",
    "clamp_drag_offset",
    "compute_grid",
    "layout_parameters",
    "preview_grid_height",
    "resolve",
    "round_half_up",
    "vertical_offset_ratio",
]
