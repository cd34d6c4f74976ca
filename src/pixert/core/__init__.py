"""
Pixert Core Package

Shared data models, the error taxonomy and the collection manifest
schema. Nothing in this package performs I/O except schema loading.
"""

from .models import (
    AspectRatio,
    CropRectangle,
    CropSequence,
    ExportResult,
    ExportStatus,
    ImageSize,
    LayoutParameters,
)

__all__ = [
    "AspectRatio",
    "CropRectangle",
    "CropSequence",
    "ExportResult",
    "ExportStatus",
    "ImageSize",
    "LayoutParameters",
]
