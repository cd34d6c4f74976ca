"""
Module: geometry.alignment

Purpose:
    Translates presentation-layer choices (alignment mode, a dragged
    preview offset, an aspect-ratio preset) into the normalised ratios
    that LayoutParameters carries. The preview is display-scaled, so
    everything here is expressed relative to the preview's extent and
    never in source pixels.

Key Functions:
    - preview_grid_height(): Height of the grid overlay on a preview
    - clamp_drag_offset(): Keep a dragged grid inside the preview
    - vertical_offset_ratio(): Alignment mode -> vertical offset ratio
    - layout_parameters(): Build LayoutParameters from UI choices

Dependencies:
    - pixert.core.models: AspectRatio, LayoutParameters

Used By:
    - cli
"""

from __future__ import annotations

from dataclasses import replace
from enum import Enum
from typing import Dict, Optional, Union

from pixert.core.models import AspectRatio, LayoutParameters


class Alignment(str, Enum):
    """Vertical placement of the grid over the source."""

    TOP = "top"
    BOTTOM = "bottom"
    CUSTOM = "custom"


ASPECT_RATIO_PRESETS: Dict[str, AspectRatio] = {
    "3:4": AspectRatio(3, 4),
    "4:5": AspectRatio(4, 5),
    "1:1": AspectRatio(1, 1),
}

DEFAULT_ASPECT_RATIO = "4:5"


def aspect_ratio_from(value: Union[str, AspectRatio]) -> AspectRatio:
    """Preset name or arbitrary ``"W:H"`` text to AspectRatio."""
    if isinstance(value, AspectRatio):
        return value
    return ASPECT_RATIO_PRESETS.get(value) or AspectRatio.parse(value)


def preview_grid_height(
    preview_width: float,
    split_count: int,
    aspect_ratio: AspectRatio,
) -> float:
    """
    Height of the grid overlay when it spans the full preview width.

    Example:
        >>> preview_grid_height(360, 3, AspectRatio(1, 1))
        120.0
    """
    grid_aspect = aspect_ratio.value * split_count
    return preview_width / grid_aspect


def clamp_drag_offset(offset: float, preview_height: float, grid_height: float) -> float:
    """Clamp a dragged grid top to ``[0, preview_height - grid_height]``."""
    max_offset = max(0.0, preview_height - grid_height)
    return max(0.0, min(offset, max_offset))


def vertical_offset_ratio(
    alignment: Alignment,
    *,
    drag_offset: Optional[float] = None,
    preview_height: Optional[float] = None,
    grid_height: Optional[float] = None,
) -> float:
    """
    Map an alignment mode to a vertical offset ratio.

    TOP pins the row to the top edge. BOTTOM asks for the maximum offset;
    the resolver clamps it to ``height - tile_height``. CUSTOM divides the
    dragged offset by the preview height; with no drag yet the grid starts
    centred in the preview, which needs ``grid_height``.

    Raises:
        ValueError: CUSTOM without a positive preview height, or with
            neither a drag offset nor a grid height
    """
    alignment = Alignment(alignment)
    if alignment is Alignment.TOP:
        return 0.0
    if alignment is Alignment.BOTTOM:
        return 1.0
    if not preview_height or preview_height <= 0:
        raise ValueError("custom alignment requires a positive preview_height")
    if drag_offset is None:
        if grid_height is None:
            raise ValueError("custom alignment without a drag offset requires grid_height")
        drag_offset = max(0.0, (preview_height - grid_height) / 2)
    return max(0.0, min(drag_offset / preview_height, 1.0))


def layout_parameters(
    split_count: int,
    aspect_ratio: Union[str, AspectRatio] = DEFAULT_ASPECT_RATIO,
    *,
    scale_percent: float = 1.0,
    alignment: Alignment = Alignment.TOP,
    drag_offset: Optional[float] = None,
    preview_height: Optional[float] = None,
    preview_width: Optional[float] = None,
    horizontal_offset_ratio: float = 0.0,
) -> LayoutParameters:
    """
    Build LayoutParameters from presentation-layer choices.

    CUSTOM alignment without a drag offset centres the grid overlay, whose
    height follows from ``preview_width``.

    Example:
        >>> layout_parameters(4, "4:5", alignment=Alignment.BOTTOM).vertical_offset_ratio
        1.0
    """
    params = LayoutParameters(
        split_count=split_count,
        aspect_ratio=aspect_ratio_from(aspect_ratio),
        scale_percent=scale_percent,
        vertical_offset_ratio=0.0,
        horizontal_offset_ratio=horizontal_offset_ratio,
    )
    grid_height = None
    if preview_width is not None:
        grid_height = preview_grid_height(preview_width, params.split_count, params.aspect_ratio)
    return replace(
        params,
        vertical_offset_ratio=vertical_offset_ratio(
            alignment,
            drag_offset=drag_offset,
            preview_height=preview_height,
            grid_height=grid_height,
        ),
    )
