"""
Core Models Package

Immutable, validated value types shared by the geometry resolver and the
export pipeline. All models are frozen: a changed layout produces a new
instance, never a mutated one.
"""

from .geometry import AspectRatio, CropRectangle, CropSequence, ImageSize, LayoutParameters
from .results import ExportIssue, ExportResult, ExportStage, ExportStatus, TileOutcome

__all__ = [
    "AspectRatio",
    "CropRectangle",
    "CropSequence",
    "ImageSize",
    "LayoutParameters",
    "ExportIssue",
    "ExportResult",
    "ExportStage",
    "ExportStatus",
    "TileOutcome",
]
