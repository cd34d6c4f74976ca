"""
Module: export.gallery

Purpose:
    Filesystem persistence adapter. Assets are image files, collections
    are JSON manifests listing asset ids in insertion order.

    Layout:
        {root}/
        ├── assets/
        │   └── {asset_id}.jpg
        └── collections/
            ├── {stem}.json        # manifest (schema: collection.schema.json)
            └── {stem}/            # copied seed assets (copy_asset=True only)

    {stem} is the slug of the name plus a short hash of the exact name,
    so names that slugify alike ("Trip!", "trip") never share a manifest.

Key Classes:
    - DirectoryGallery: PersistenceAdapter over a directory tree

Dependencies:
    - portalocker (via export.file_locking): Manifest locking
    - jsonschema (via core.schemas): Manifest validation

Used By:
    - cli: --gallery DIR
"""

from __future__ import annotations

import logging
import os
import hashlib
import re
import shutil
import tempfile
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from pixert.core.errors import (
    AssetCreationError,
    AttachError,
    CollectionError,
    PermissionDeniedError,
)
from pixert.core.schemas import COLLECTION_SCHEMA_VERSION, ValidationError, validate_collection

from .codec import EncodedImage
from .file_locking import locked_read_json, locked_read_modify_write_json
from .persistence import CollectionRef, PersistenceAdapter

logger = logging.getLogger(__name__)

_EXTENSIONS = {"JPEG": ".jpg", "PNG": ".png", "WEBP": ".webp"}


def slugify(name: str) -> str:
    """
    Filesystem-safe manifest name for a collection.

    Example:
        >>> slugify("Summer Trip 2024!")
        'summer-trip-2024'
    """
    slug = re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")
    return slug or "collection"


def manifest_stem(name: str) -> str:
    """
    File stem of a collection's manifest: readable slug plus name hash.

    Example:
        >>> manifest_stem("Trip!") != manifest_stem("trip")
        True
    """
    digest = hashlib.sha1(name.encode("utf-8")).hexdigest()[:8]
    return f"{slugify(name)}-{digest}"


class DirectoryGallery(PersistenceAdapter):
    """
    Persistence adapter backed by a directory.

    Manifests are only ever extended under an exclusive portalocker lock,
    so concurrent exports into the same collection interleave safely and
    never lose or reorder each other's members.

    Example:
        >>> gallery = DirectoryGallery(Path("~/Pictures/pixert").expanduser())
        >>> gallery.check_access()
    """

    def __init__(self, root: Path) -> None:
        self.root = Path(root)
        self.assets_dir = self.root / "assets"
        self.collections_dir = self.root / "collections"

    # ─────────────────────────────────────────────────────────────────────────
    # Paths
    # ─────────────────────────────────────────────────────────────────────────

    def manifest_path(self, name: str) -> Path:
        return self.collections_dir / f"{manifest_stem(name)}.json"

    def asset_path(self, asset_id: str) -> Optional[Path]:
        """Path of a stored asset, or None if unknown."""
        matches = sorted(self.assets_dir.glob(f"{asset_id}.*"))
        return matches[0] if matches else None

    # ─────────────────────────────────────────────────────────────────────────
    # PersistenceAdapter
    # ─────────────────────────────────────────────────────────────────────────

    def check_access(self) -> None:
        try:
            self.assets_dir.mkdir(parents=True, exist_ok=True)
            self.collections_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise PermissionDeniedError(f"Cannot create gallery at {self.root}: {e}") from e
        for directory in (self.assets_dir, self.collections_dir):
            if not os.access(directory, os.W_OK):
                raise PermissionDeniedError(f"Gallery directory is not writable: {directory}")

    def create_asset(self, encoded: EncodedImage) -> str:
        asset_id = uuid.uuid4().hex
        suffix = _EXTENSIONS.get(encoded.format, f".{encoded.format.lower()}")
        path = self.assets_dir / f"{asset_id}{suffix}"
        try:
            _atomic_write_bytes(encoded.data, path)
        except OSError as e:
            raise AssetCreationError(f"Failed to write asset {path.name}: {e}") from e
        logger.debug(f"Created asset {asset_id} ({encoded!r})")
        return asset_id

    def get_collection(self, name: str) -> Optional[CollectionRef]:
        path = self.manifest_path(name)
        try:
            data = locked_read_json(path)
        except (OSError, ValueError) as e:
            raise CollectionError(f"Cannot read collection manifest {path.name}: {e}") from e
        if data is None:
            return None
        try:
            validate_collection(data)
        except ValidationError as e:
            raise CollectionError(f"Corrupt collection manifest {path.name}: {e}") from e
        if data["name"] != name:
            raise CollectionError(
                f"Manifest {path.name} belongs to {data['name']!r}, not {name!r}"
            )
        return CollectionRef(id=data["id"], name=data["name"])

    def create_collection_with_options(
        self,
        name: str,
        seed_asset_id: str,
        *,
        copy_asset: bool,
    ) -> CollectionRef:
        copied: Optional[str] = None
        if copy_asset:
            source = self.asset_path(seed_asset_id)
            if source is None:
                raise CollectionError(f"Seed asset {seed_asset_id} does not exist")
            target_dir = self.collections_dir / manifest_stem(name)
            try:
                target_dir.mkdir(parents=True, exist_ok=True)
                shutil.copy2(source, target_dir / source.name)
            except OSError as e:
                raise CollectionError(f"Failed to copy seed asset into {target_dir}: {e}") from e
            copied = source.name
        return self._create(name, seed_asset_id, copied_seed=copied)

    def create_collection(self, name: str, seed_asset_id: str) -> CollectionRef:
        return self._create(name, seed_asset_id, copied_seed=None)

    def add_assets_to_collection(
        self,
        asset_ids: Sequence[str],
        collection: CollectionRef,
    ) -> List[str]:
        rejected = [a for a in asset_ids if self.asset_path(a) is None]
        accepted = [a for a in asset_ids if a not in rejected]

        def append(data: Dict[str, Any]) -> Dict[str, Any]:
            if not data:
                raise AttachError(f"Collection {collection.name!r} no longer exists")
            if data.get("name") != collection.name:
                raise AttachError(
                    f"Manifest for {collection.name!r} belongs to {data.get('name')!r}"
                )
            if data.get("id") != collection.id:
                raise AttachError(
                    f"Collection {collection.name!r} was replaced (id {data.get('id')})"
                )
            members = list(data["assets"])
            members.extend(a for a in accepted if a not in members)
            data["assets"] = members
            validate_collection(data)
            return data

        try:
            locked_read_modify_write_json(self.manifest_path(collection.name), append)
        except (OSError, ValueError, ValidationError) as e:
            raise AttachError(f"Failed to update collection {collection.name!r}: {e}") from e

        if rejected:
            logger.warning(f"Rejected unknown assets for {collection.name!r}: {rejected}")
        return rejected

    # ─────────────────────────────────────────────────────────────────────────
    # Internals
    # ─────────────────────────────────────────────────────────────────────────

    def _create(self, name: str, seed_asset_id: str, *, copied_seed: Optional[str]) -> CollectionRef:
        if self.asset_path(seed_asset_id) is None:
            raise CollectionError(f"Seed asset {seed_asset_id} does not exist")

        def seed(data: Dict[str, Any]) -> Dict[str, Any]:
            if data:
                if data.get("name") != name:
                    raise CollectionError(
                        f"Manifest for {name!r} already belongs to {data.get('name')!r}"
                    )
                # Created concurrently by another export: append, keep its members
                if seed_asset_id not in data["assets"]:
                    data["assets"].append(seed_asset_id)
                validate_collection(data)
                return data
            data = {
                "schema_version": COLLECTION_SCHEMA_VERSION,
                "id": uuid.uuid4().hex,
                "name": name,
                "created_at": datetime.now(timezone.utc).isoformat(),
                "copied_seed": copied_seed,
                "assets": [seed_asset_id],
            }
            validate_collection(data)
            return data

        try:
            data = locked_read_modify_write_json(self.manifest_path(name), seed)
        except (OSError, ValueError, ValidationError) as e:
            raise CollectionError(f"Failed to create collection {name!r}: {e}") from e

        logger.info(f"Created collection {name!r} ({data['id']})")
        return CollectionRef(id=data["id"], name=data["name"])

    def collection_members(self, name: str) -> List[str]:
        """Asset ids currently in a collection, in insertion order."""
        data = locked_read_json(self.manifest_path(name))
        return list(data["assets"]) if data else []


def _atomic_write_bytes(data: bytes, path: Path) -> None:
    """Write bytes atomically using temp file."""
    path.parent.mkdir(parents=True, exist_ok=True)

    with tempfile.NamedTemporaryFile(
        mode="wb",
        suffix=path.suffix,
        dir=path.parent,
        delete=False,
    ) as f:
        f.write(data)
        temp_path = Path(f.name)

    # Use replace() instead of rename() for Windows compatibility
    temp_path.replace(path)
