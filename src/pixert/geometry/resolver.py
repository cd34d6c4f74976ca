"""
Module: geometry.resolver

Purpose:
    Grid partition engine. Given the true source size and the layout
    parameters, computes the row of integer crop rectangles that, placed
    side by side, reconstruct the chosen region of the photo at the
    target per-tile aspect ratio.

Key Functions:
    - compute_grid(): Unrounded grid geometry (constraint axis, tile size, offsets)
    - resolve(): Integer CropSequence for one export

Dependencies:
    - math (std)
    - pixert.core.models: ImageSize, LayoutParameters, CropRectangle, CropSequence

Used By:
    - export.pipeline callers (cli)

Design Notes:
    Boundaries are rounded, not widths. Each tile's x and right edge are
    rounded independently from the unrounded positions, so consecutive
    tiles always share an edge and the row never drifts, even though an
    individual tile may be one pixel wider or narrower than its neighbour.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum

from pixert.core.errors import DegenerateTileError, OutOfBoundsError
from pixert.core.models import CropRectangle, CropSequence, ImageSize, LayoutParameters

logger = logging.getLogger(__name__)


# Float slack when comparing a computed extent against the image edge.
# W / n * n can land one ulp above W.
BOUNDS_TOLERANCE_PX = 1e-6


class ConstraintAxis(str, Enum):
    """Image dimension that limits how large the grid can be."""

    WIDTH = "width"
    HEIGHT = "height"


@dataclass(frozen=True, slots=True)
class GridGeometry:
    """
    Unrounded geometry of the grid in source pixels.

    Attributes:
        axis: Which image dimension the grid fills at scale 1.0
        tile_width: Width of one tile
        tile_height: Height of one tile
        x_base: Left edge of the first tile (clamped)
        y_offset: Top edge of the row (clamped)
        split_count: Number of tiles
    """

    axis: ConstraintAxis
    tile_width: float
    tile_height: float
    x_base: float
    y_offset: float
    split_count: int

    @property
    def total_width(self) -> float:
        return self.tile_width * self.split_count

    def boundary(self, i: int) -> float:
        """Unrounded x of boundary ``i`` (0 = left edge, split_count = right edge)."""
        return self.x_base + i * self.tile_width


def round_half_up(value: float) -> int:
    """Round to nearest integer, halves away from zero for positives."""
    return int(math.floor(value + 0.5))


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(value, high))


def compute_grid(image_size: ImageSize, params: LayoutParameters) -> GridGeometry:
    """
    Compute the unrounded grid for a layout.

    Picks the constraint axis, applies the scale, and converts the offset
    ratios into clamped source-pixel offsets.

    Args:
        image_size: True pixel size of the source
        params: Layout chosen by the user

    Returns:
        GridGeometry with float tile size and offsets

    Raises:
        OutOfBoundsError: If the grid exceeds the image on either axis

    Example:
        >>> grid = compute_grid(ImageSize(1200, 1600),
        ...                     LayoutParameters(4, AspectRatio(4, 5)))
        >>> grid.axis, grid.tile_width, grid.tile_height
        (<ConstraintAxis.WIDTH: 'width'>, 300.0, 375.0)
    """
    splits = params.split_count
    tile_aspect = params.aspect_ratio.value
    total_grid_aspect = tile_aspect * splits
    image_aspect = image_size.aspect

    if image_aspect <= total_grid_aspect:
        # Relatively tall image: full width available, crop top/bottom
        axis = ConstraintAxis.WIDTH
        max_tile_width = image_size.width / splits
    else:
        # Relatively wide image: full height available, crop the sides
        axis = ConstraintAxis.HEIGHT
        max_tile_width = (image_size.height * total_grid_aspect) / splits

    tile_width = max_tile_width * params.scale_percent
    tile_height = tile_width / tile_aspect
    total_crop_width = tile_width * splits

    if tile_height > image_size.height + BOUNDS_TOLERANCE_PX:
        raise OutOfBoundsError(
            f"Tile height {tile_height:.2f}px exceeds image height {image_size.height}px",
            axis="height",
            required=tile_height,
            available=image_size.height,
        )
    if total_crop_width > image_size.width + BOUNDS_TOLERANCE_PX:
        raise OutOfBoundsError(
            f"Grid width {total_crop_width:.2f}px exceeds image width {image_size.width}px",
            axis="width",
            required=total_crop_width,
            available=image_size.width,
        )

    y_offset = _clamp(
        params.vertical_offset_ratio * image_size.height,
        0.0,
        max(0.0, image_size.height - tile_height),
    )
    x_base = _clamp(
        params.horizontal_offset_ratio * image_size.width,
        0.0,
        max(0.0, image_size.width - total_crop_width),
    )

    return GridGeometry(
        axis=axis,
        tile_width=tile_width,
        tile_height=tile_height,
        x_base=x_base,
        y_offset=y_offset,
        split_count=splits,
    )


def resolve(image_size: ImageSize, params: LayoutParameters) -> CropSequence:
    """
    Resolve a layout into integer crop rectangles.

    Pure and deterministic: identical inputs always give identical
    rectangles.

    Args:
        image_size: True pixel size of the source (not a preview size)
        params: Layout chosen by the user

    Returns:
        CropSequence of exactly ``params.split_count`` rectangles,
        contiguous left to right, sharing y and height, all inside the image

    Raises:
        OutOfBoundsError: Grid does not fit (scale or split count too large)
        DegenerateTileError: A tile rounds to zero width or height

    Example:
        >>> seq = resolve(ImageSize(1200, 1600), LayoutParameters(4, AspectRatio(4, 5)))
        >>> [r.x for r in seq]
        [0, 300, 600, 900]
    """
    grid = compute_grid(image_size, params)

    height = round_half_up(grid.tile_height)
    if height <= 0:
        raise DegenerateTileError(
            f"Tile height rounds to {height}px (unrounded {grid.tile_height:.3f}px)"
        )

    # Rounded y and rounded height can overshoot the bottom edge by one pixel
    y = min(round_half_up(grid.y_offset), image_size.height - height)

    rectangles = []
    for i in range(grid.split_count):
        x_start = round_half_up(grid.boundary(i))
        x_end = round_half_up(grid.boundary(i + 1))
        width = x_end - x_start
        if width <= 0:
            raise DegenerateTileError(
                f"Tile {i} width rounds to {width}px (unrounded {grid.tile_width:.3f}px)",
                index=i,
            )
        rectangles.append(CropRectangle(x=x_start, y=y, width=width, height=height))

    sequence = CropSequence(rectangles)
    logger.debug(
        f"Resolved {grid.split_count} tiles ({grid.axis.value}-constrained): "
        f"tile={grid.tile_width:.2f}x{grid.tile_height:.2f} "
        f"offset=({grid.x_base:.2f}, {grid.y_offset:.2f}) in {image_size!r}"
    )
    return sequence
