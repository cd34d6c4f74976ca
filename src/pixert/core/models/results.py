"""
Module: results

Purpose:
    Outcome models returned by the export pipeline: per-tile outcomes,
    recorded issues and the aggregate ExportResult with its terminal
    status.

Key Classes:
    - ExportStatus: COMPLETE / PARTIAL_ATTACH / FAILED
    - ExportStage: Pipeline stage an issue was raised in
    - TileOutcome: What happened to one tile
    - ExportIssue: One recorded (not swallowed) failure
    - ExportResult: Aggregate result handed back to the caller

Dependencies:
    - dataclasses, enum (std)
    - pixert.core.models.geometry: CropRectangle

Used By:
    - export.pipeline
    - cli
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

from .geometry import CropRectangle


class ExportStatus(str, Enum):
    """Terminal status of an export."""

    COMPLETE = "complete"
    PARTIAL_ATTACH = "partial_attach"
    FAILED = "failed"


class ExportStage(str, Enum):
    ENCODE = "encode"
    PERSIST = "persist"
    COLLECTION = "collection"
    ATTACH = "attach"


@dataclass(frozen=True, slots=True)
class TileOutcome:
    """
    Outcome for one tile of the row.

    Attributes:
        index: Position in the crop sequence (0 = leftmost)
        rectangle: Source region this tile was cut from
        encoded: Whether crop/encode succeeded
        asset_id: Stored asset id, or None if creation failed
        attached: Whether the asset is known to be in the collection
        error: Message of the failure affecting this tile, if any
    """

    index: int
    rectangle: CropRectangle
    encoded: bool = False
    asset_id: Optional[str] = None
    attached: bool = False
    error: Optional[str] = None

    @property
    def created(self) -> bool:
        return self.asset_id is not None

    def to_dict(self) -> dict:
        d = {
            "index": self.index,
            "rectangle": self.rectangle.to_dict(),
            "encoded": self.encoded,
            "asset_id": self.asset_id,
            "attached": self.attached,
        }
        if self.error:
            d["error"] = self.error
        return d


@dataclass(frozen=True, slots=True)
class ExportIssue:
    """A failure recorded during export (stage, tile index, message)."""

    stage: ExportStage
    message: str
    index: Optional[int] = None

    def to_dict(self) -> dict:
        return {"stage": self.stage.value, "index": self.index, "message": self.message}

    def __str__(self) -> str:
        where = f" tile {self.index}" if self.index is not None else ""
        return f"[{self.stage.value}{where}] {self.message}"


@dataclass(frozen=True)
class ExportResult:
    """
    Result of one export invocation.

    Tiles are in crop-sequence order, one entry per rectangle, so
    persisted assets correspond 1:1 and in order to the input row.

    Example:
        >>> result.status
        <ExportStatus.PARTIAL_ATTACH: 'partial_attach'>
        >>> result.unattached_indices
        [1]
    """

    status: ExportStatus
    tiles: Tuple[TileOutcome, ...]
    collection_name: str
    collection_id: Optional[str] = None
    issues: Tuple[ExportIssue, ...] = field(default_factory=tuple)

    @property
    def asset_ids(self) -> List[str]:
        """Ids of created assets, in tile order (failed tiles omitted)."""
        return [t.asset_id for t in self.tiles if t.asset_id is not None]

    @property
    def failed_asset_indices(self) -> List[int]:
        """Tiles whose asset could not be created."""
        return [t.index for t in self.tiles if t.asset_id is None]

    @property
    def unattached_indices(self) -> List[int]:
        """Tiles with a created asset that did not make it into the collection."""
        return [t.index for t in self.tiles if t.asset_id is not None and not t.attached]

    @property
    def is_complete(self) -> bool:
        return self.status is ExportStatus.COMPLETE

    def to_dict(self) -> dict:
        return {
            "status": self.status.value,
            "collection_name": self.collection_name,
            "collection_id": self.collection_id,
            "tiles": [t.to_dict() for t in self.tiles],
            "issues": [i.to_dict() for i in self.issues],
        }
