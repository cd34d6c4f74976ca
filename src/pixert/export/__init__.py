"""
Module: export

Purpose:
    Export pipeline and its collaborators: the image codec, persistence
    adapters and the collection fallback policy.

Key Classes:
    - ImageCodec / PillowCodec: Crop and encode tiles
    - PersistenceAdapter: Asset and collection storage interface
    - DirectoryGallery: Filesystem adapter
    - MemoryGallery: In-process adapter (dry runs, tests)

Key Functions:
    - export_carousel(): Crop, persist and attach one row of tiles
    - probe_image_size(): True source dimensions
"""

from .codec import EncodedImage, ImageCodec, PillowCodec, probe_image_size
from .collection import AttachOutcome, EnsureOutcome, FallbackPolicy, attach_assets, ensure_collection
from .gallery import DirectoryGallery
from .memory import MemoryGallery
from .persistence import CollectionRef, PersistenceAdapter
from .pipeline import export_carousel
from .progress import ProgressTracker

__all__ = [
    "AttachOutcome",
    "CollectionRef",
    "DirectoryGallery",
    "EncodedImage",
    "EnsureOutcome",
    "FallbackPolicy",
    "ImageCodec",
    "MemoryGallery",
    "PersistenceAdapter",
    "PillowCodec",
    "ProgressTracker",
    "attach_assets",
    "ensure_collection",
    "export_carousel",
    "probe_image_size",
]
