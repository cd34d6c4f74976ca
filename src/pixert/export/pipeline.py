"""
Module: export.pipeline

Purpose:
    Main orchestrator for exporting a carousel. Applies a resolved crop
    sequence to one source image, persists every tile and attaches the
    tiles to a named collection, reporting monotonic progress.

Key Functions:
    - export_carousel(): Main entry point for export

Dependencies:
    - pixert.export.codec: Crop/encode collaborator
    - pixert.export.persistence: Persistence collaborator
    - pixert.export.collection: Ensure/attach fallback policy
    - pixert.export.progress: Banded progress tracker

Used By:
    - pixert.cli: split command

Design Notes:
    Strictly sequential. Stages never overlap and tiles are processed in
    index order inside each stage:

    1. access check      (nothing touched on denial)
    2. crop/encode       0-50%   a codec failure aborts, nothing persisted
    3. create assets     50-90%  per-tile failures recorded, loop continues
    4. collection attach 90-100% lookup/create, batch then individual

    All asset ids are collected before the first collection mutation so
    a device shows at most one round of permission prompts per export.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Dict, List, Optional

from pixert.config import ExportConfig
from pixert.core.errors import CodecError, EncodeError, PersistenceError
from pixert.core.models import (
    CropSequence,
    ExportIssue,
    ExportResult,
    ExportStage,
    ExportStatus,
    TileOutcome,
)

from .codec import EncodedImage, ImageCodec, PillowCodec, SourceRef
from .collection import attach_assets, ensure_collection
from .persistence import PersistenceAdapter
from .progress import ProgressCallback, ProgressTracker

logger = logging.getLogger(__name__)


def export_carousel(
    source: SourceRef,
    crops: CropSequence,
    collection_name: Optional[str] = None,
    *,
    adapter: PersistenceAdapter,
    codec: Optional[ImageCodec] = None,
    config: Optional[ExportConfig] = None,
    on_progress: Optional[ProgressCallback] = None,
) -> ExportResult:
    """
    Export one source image as a row of tiles in a named collection.

    Args:
        source: Source image (path or decoded PIL image)
        crops: Resolved crop sequence for this export
        collection_name: Target collection (defaults to config.collection_name)
        adapter: Persistence collaborator
        codec: Crop/encode collaborator (defaults to PillowCodec)
        config: Export settings (defaults to ExportConfig())
        on_progress: Called with non-decreasing percentages, ending at 100

    Returns:
        ExportResult with one TileOutcome per rectangle, in order. Status
        is FAILED if any asset could not be created, PARTIAL_ATTACH if all
        assets exist but some are not in the collection, else COMPLETE.

    Raises:
        PermissionDeniedError: Adapter lacks storage access (before any work)
        EncodeError: Crop/encode failed for a tile (nothing persisted)

    Example:
        >>> crops = resolve(ImageSize(1200, 1600), LayoutParameters(4, AspectRatio(4, 5)))
        >>> result = export_carousel(Path("photo.jpg"), crops,
        ...                          adapter=DirectoryGallery(Path("out")))
        >>> result.status
        <ExportStatus.COMPLETE: 'complete'>
    """
    config = config or ExportConfig()
    name = collection_name or config.collection_name
    tracker = ProgressTracker(on_progress, bands=config.progress_bands)
    total = len(crops)

    # Stage 0: permission, reported once before anything is created
    adapter.check_access()

    logger.info(f"Exporting {total} tile(s) into {name!r} as {config.output_format}")

    # Stage 1: crop/encode
    if codec is None:
        with PillowCodec() as owned:
            encoded = _encode_tiles(owned, source, crops, config, tracker)
    else:
        encoded = _encode_tiles(codec, source, crops, config, tracker)

    tiles: List[TileOutcome] = [
        TileOutcome(index=i, rectangle=rect, encoded=True) for i, rect in enumerate(crops)
    ]
    issues: List[ExportIssue] = []

    # Stage 2: create assets
    for i, tile in enumerate(encoded):
        try:
            asset_id = adapter.create_asset(tile)
        except PersistenceError as e:
            logger.error(f"Asset creation failed for tile {i + 1}/{total}: {e}")
            tiles[i] = replace(tiles[i], error=f"asset creation failed: {e}")
            issues.append(ExportIssue(ExportStage.PERSIST, str(e), index=i))
        else:
            logger.debug(f"Saved tile {i + 1}/{total} as asset {asset_id}")
            tiles[i] = replace(tiles[i], asset_id=asset_id)
        tracker.advance("persist", i + 1, total)

    index_of: Dict[str, int] = {t.asset_id: t.index for t in tiles if t.asset_id is not None}
    created = list(index_of)
    collection_id: Optional[str] = None

    # Stage 3: collection attach
    if created:
        ensured = ensure_collection(
            adapter, name, created[0], copy_asset=config.copy_on_create
        )
        issues.extend(ensured.issues)
        tracker.advance("attach", 1, 2)

        if ensured.collection is None:
            for i in index_of.values():
                tiles[i] = replace(tiles[i], error=f"collection {name!r} unavailable")
        else:
            collection_id = ensured.collection.id
            for asset_id in ensured.seeded:
                i = index_of[asset_id]
                tiles[i] = replace(tiles[i], attached=True)

            remaining = [a for a in created if a not in ensured.seeded]
            attached = attach_assets(adapter, ensured.collection, remaining)
            issues.extend(attached.issues)
            for asset_id in attached.attached:
                i = index_of[asset_id]
                tiles[i] = replace(tiles[i], attached=True)
            for asset_id, message in attached.failures.items():
                i = index_of[asset_id]
                tiles[i] = replace(tiles[i], error=f"attach failed: {message}")
                issues.append(ExportIssue(ExportStage.ATTACH, message, index=i))
    else:
        logger.error("No assets were created; skipping collection attach")

    tracker.finish()

    result = ExportResult(
        status=_final_status(tiles),
        tiles=tuple(tiles),
        collection_name=name,
        collection_id=collection_id,
        issues=tuple(issues),
    )
    _log_summary(result)
    return result


def _encode_tiles(
    codec: ImageCodec,
    source: SourceRef,
    crops: CropSequence,
    config: ExportConfig,
    tracker: ProgressTracker,
) -> List[EncodedImage]:
    """Crop and encode every rectangle in order; first failure aborts."""
    total = len(crops)
    encoded: List[EncodedImage] = []
    for i, rect in enumerate(crops):
        try:
            tile = codec.crop(source, rect, config.output_format, config.quality)
        except CodecError as e:
            logger.error(f"Crop/encode failed for tile {i + 1}/{total} {rect!r}: {e}")
            raise EncodeError(f"Tile {i} could not be encoded: {e}", index=i) from e
        logger.debug(f"Encoded tile {i + 1}/{total}: {rect!r} -> {tile!r}")
        encoded.append(tile)
        tracker.advance("encode", i + 1, total)
    return encoded


def _final_status(tiles: List[TileOutcome]) -> ExportStatus:
    if any(not t.created for t in tiles):
        return ExportStatus.FAILED
    if any(not t.attached for t in tiles):
        return ExportStatus.PARTIAL_ATTACH
    return ExportStatus.COMPLETE


def _log_summary(result: ExportResult) -> None:
    total = len(result.tiles)
    if result.status is ExportStatus.COMPLETE:
        logger.info(f"Export complete: {total} tile(s) saved to {result.collection_name!r}")
    elif result.status is ExportStatus.PARTIAL_ATTACH:
        logger.warning(
            f"Export saved {total} tile(s) but tiles {result.unattached_indices} "
            f"are not in {result.collection_name!r}"
        )
    else:
        logger.error(
            f"Export failed: {total - len(result.failed_asset_indices)}/{total} tile(s) saved, "
            f"failed tiles {result.failed_asset_indices}"
        )
