"""
Module: export.persistence

Purpose:
    Abstract interface for the persistence collaborator: creating stored
    assets from encoded tiles and grouping them in a named collection.
    Mirrors the shape of device gallery APIs, including the two call
    shapes for collection creation.

Key Classes:
    - CollectionRef: Handle to a named collection
    - PersistenceAdapter: Abstract base class for adapters

Dependencies:
    - pixert.export.codec: EncodedImage

Used By:
    - export.collection: Fallback policy
    - export.pipeline: Persistence stage
    - export.gallery, export.memory: Concrete adapters
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional, Sequence

from pixert.core.errors import UnsupportedOperationError

from .codec import EncodedImage


@dataclass(frozen=True, slots=True)
class CollectionRef:
    """Handle to a named collection."""

    id: str
    name: str


class PersistenceAdapter(ABC):
    """
    Abstract persistence collaborator.

    Collections are append-only from the pipeline's point of view:
    adapters may be shared by concurrent exports and must never drop or
    reorder existing members when assets are added.
    """

    @abstractmethod
    def check_access(self) -> None:
        """
        Verify storage access before any work starts.

        Raises:
            PermissionDeniedError: If the adapter cannot write
        """

    @abstractmethod
    def create_asset(self, encoded: EncodedImage) -> str:
        """
        Store an encoded tile.

        Returns:
            New asset id

        Raises:
            AssetCreationError: If the asset could not be stored
        """

    @abstractmethod
    def get_collection(self, name: str) -> Optional[CollectionRef]:
        """
        Look up a collection by name.

        Returns:
            CollectionRef, or None if no such collection exists

        Raises:
            CollectionError: If the lookup itself failed
        """

    def create_collection_with_options(
        self,
        name: str,
        seed_asset_id: str,
        *,
        copy_asset: bool,
    ) -> CollectionRef:
        """
        Richer creation call: create ``name`` seeded with an asset.

        Adapters that only support the simple form leave this as is.

        Raises:
            UnsupportedOperationError: Call shape not supported
            CollectionError: Creation failed
        """
        raise UnsupportedOperationError(
            f"{type(self).__name__} does not support create_collection_with_options"
        )

    @abstractmethod
    def create_collection(self, name: str, seed_asset_id: str) -> CollectionRef:
        """
        Simple creation call: create ``name`` seeded with an asset.

        Raises:
            CollectionError: Creation failed
        """

    @abstractmethod
    def add_assets_to_collection(
        self,
        asset_ids: Sequence[str],
        collection: CollectionRef,
    ) -> List[str]:
        """
        Append assets to a collection.

        Returns:
            Ids that were rejected (empty list on full success)

        Raises:
            AttachError: If the call failed as a whole
        """
