"""
Module: core.errors

Purpose:
    Exception hierarchy shared by the geometry resolver, the codec and
    the export pipeline. Every error carries enough context (stage, tile
    index, underlying cause) for a caller to render an actionable message.

Key Classes:
    - GeometryError: DegenerateTileError, OutOfBoundsError
    - CodecError: crop/encode failure inside the codec collaborator
    - EncodeError: export aborted because tile N could not be encoded
    - PersistenceError: PermissionDeniedError, AssetCreationError,
      CollectionError, UnsupportedOperationError, AttachError

Used By:
    - geometry.resolver
    - export.codec, export.persistence, export.pipeline
"""

from __future__ import annotations

from typing import Optional


class PixertError(Exception):
    """Base class for all errors raised by this package."""


# ─────────────────────────────────────────────────────────────────────────────
# Geometry
# ─────────────────────────────────────────────────────────────────────────────


class GeometryError(PixertError):
    """
    Layout cannot be realised on the source image.

    Caller-correctable: reduce the split count or scale, or pick another
    aspect ratio. Always raised before any I/O.
    """


class DegenerateTileError(GeometryError):
    """A tile width or height rounds to zero pixels or less."""

    def __init__(self, message: str, *, index: Optional[int] = None):
        super().__init__(message)
        self.index = index


class OutOfBoundsError(GeometryError):
    """The grid does not fit inside the source image on some axis."""

    def __init__(self, message: str, *, axis: str, required: float, available: int):
        super().__init__(message)
        self.axis = axis
        self.required = required
        self.available = available


# ─────────────────────────────────────────────────────────────────────────────
# Codec
# ─────────────────────────────────────────────────────────────────────────────


class CodecError(PixertError):
    """Codec could not read the source or crop/encode a rectangle."""


class ExportError(PixertError):
    """Export aborted before anything was persisted."""

    def __init__(self, message: str, *, stage: str, index: Optional[int] = None):
        super().__init__(message)
        self.stage = stage
        self.index = index


class EncodeError(ExportError):
    """Crop/encode of one tile failed; the whole export is abandoned."""

    def __init__(self, message: str, *, index: int):
        super().__init__(message, stage="encode", index=index)


# ─────────────────────────────────────────────────────────────────────────────
# Persistence
# ─────────────────────────────────────────────────────────────────────────────


class PersistenceError(PixertError):
    """Failure reported by a persistence adapter."""


class PermissionDeniedError(PersistenceError):
    """Adapter lacks storage access. Reported once, before any processing."""


class AssetCreationError(PersistenceError):
    """A stored asset could not be created from encoded bytes."""


class CollectionError(PersistenceError):
    """Collection lookup or creation failed."""


class UnsupportedOperationError(CollectionError):
    """Adapter does not support the requested call shape."""


class AttachError(PersistenceError):
    """Adding assets to a collection failed."""
