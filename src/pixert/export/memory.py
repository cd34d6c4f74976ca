"""
Module: export.memory

Purpose:
    In-process persistence adapter. Keeps assets and collections in
    dictionaries; used for dry runs and as the base for test doubles.

Key Classes:
    - MemoryGallery: PersistenceAdapter backed by dicts
"""

from __future__ import annotations

import logging
import uuid
from typing import Dict, List, Optional, Sequence

from pixert.core.errors import AttachError, CollectionError, PermissionDeniedError

from .codec import EncodedImage
from .persistence import CollectionRef, PersistenceAdapter

logger = logging.getLogger(__name__)


class MemoryGallery(PersistenceAdapter):
    """
    Dict-backed gallery.

    Attributes:
        assets: asset id -> EncodedImage
        collections: collection name -> CollectionRef
        members: collection name -> ordered member ids
        writable: When False, check_access() denies permission
    """

    def __init__(self, *, writable: bool = True) -> None:
        self.writable = writable
        self.assets: Dict[str, EncodedImage] = {}
        self.collections: Dict[str, CollectionRef] = {}
        self.members: Dict[str, List[str]] = {}

    def check_access(self) -> None:
        if not self.writable:
            raise PermissionDeniedError("Memory gallery is read-only")

    def create_asset(self, encoded: EncodedImage) -> str:
        asset_id = uuid.uuid4().hex
        self.assets[asset_id] = encoded
        logger.debug(f"Stored asset {asset_id} in memory ({encoded!r})")
        return asset_id

    def get_collection(self, name: str) -> Optional[CollectionRef]:
        return self.collections.get(name)

    def create_collection_with_options(
        self,
        name: str,
        seed_asset_id: str,
        *,
        copy_asset: bool,
    ) -> CollectionRef:
        return self.create_collection(name, seed_asset_id)

    def create_collection(self, name: str, seed_asset_id: str) -> CollectionRef:
        if seed_asset_id not in self.assets:
            raise CollectionError(f"Seed asset {seed_asset_id} does not exist")
        ref = self.collections.get(name)
        if ref is None:
            ref = CollectionRef(id=uuid.uuid4().hex, name=name)
            self.collections[name] = ref
            self.members[name] = []
        if seed_asset_id not in self.members[name]:
            self.members[name].append(seed_asset_id)
        return ref

    def add_assets_to_collection(
        self,
        asset_ids: Sequence[str],
        collection: CollectionRef,
    ) -> List[str]:
        if collection.name not in self.collections:
            raise AttachError(f"Unknown collection {collection.name!r}")
        members = self.members[collection.name]
        rejected = []
        for asset_id in asset_ids:
            if asset_id not in self.assets:
                rejected.append(asset_id)
            elif asset_id not in members:
                members.append(asset_id)
        return rejected
