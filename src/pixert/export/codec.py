"""
Module: export.codec

Purpose:
    Image codec collaborator. Crops one rectangle out of the source image
    and encodes it to bytes at original resolution, and resolves the
    true pixel dimensions of a source file.

Key Classes:
    - EncodedImage: Encoded tile bytes plus format and size
    - ImageCodec: Abstract codec interface used by the pipeline
    - PillowCodec: Pillow implementation

Key Functions:
    - probe_image_size(): True source dimensions via a fallback chain

Dependencies:
    - PIL: Decoding, cropping, encoding
    - pixert.core.models: CropRectangle, ImageSize

Used By:
    - export.pipeline: crop/encode stage
    - cli: image size resolution
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from io import BytesIO
from pathlib import Path
from typing import Dict, Union

from PIL import Image, ImageOps, UnidentifiedImageError

from pixert.core.errors import CodecError
from pixert.core.models import CropRectangle, ImageSize

logger = logging.getLogger(__name__)

SourceRef = Union[str, Path, Image.Image]

# EXIF Orientation values that rotate by 90/270 degrees (width/height swap)
_TRANSPOSING_ORIENTATIONS = {5, 6, 7, 8}
_EXIF_ORIENTATION_TAG = 0x0112


@dataclass(frozen=True, slots=True)
class EncodedImage:
    """Encoded tile ready for persistence."""

    data: bytes
    format: str
    width: int
    height: int

    @property
    def size(self) -> ImageSize:
        return ImageSize(self.width, self.height)

    def __repr__(self) -> str:
        return f"EncodedImage({self.format}, {self.width}x{self.height}, {len(self.data)} bytes)"


class ImageCodec(ABC):
    """
    Abstract codec used by the export pipeline.

    Implementations must not resize: a tile is exactly the source pixels
    inside the rectangle.
    """

    @abstractmethod
    def crop(
        self,
        source: SourceRef,
        rectangle: CropRectangle,
        output_format: str,
        quality: int,
    ) -> EncodedImage:
        """
        Crop ``rectangle`` out of ``source`` and encode it.

        Raises:
            CodecError: Invalid rectangle or unreadable source
        """


class PillowCodec(ImageCodec):
    """
    Codec backed by Pillow.

    EXIF orientation is applied on load so rectangles refer to the upright
    image, matching probe_image_size(). The decoded source is cached per
    path, so cropping N tiles decodes the file once.

    Example:
        >>> codec = PillowCodec()
        >>> tile = codec.crop(Path("photo.jpg"), CropRectangle(0, 0, 300, 375), "JPEG", 95)
        >>> tile.width, tile.height
        (300, 375)
    """

    def __init__(self) -> None:
        self._cache: Dict[Path, Image.Image] = {}

    def _load(self, source: SourceRef) -> Image.Image:
        if isinstance(source, Image.Image):
            return source
        path = Path(source)
        cached = self._cache.get(path)
        if cached is not None:
            return cached
        try:
            with Image.open(path) as img:
                img.load()
                upright = ImageOps.exif_transpose(img)
        except (OSError, UnidentifiedImageError) as e:
            raise CodecError(f"Cannot read source image {path}: {e}") from e
        self._cache[path] = upright
        logger.debug(f"Decoded source {path.name} at {upright.width}x{upright.height}")
        return upright

    def crop(
        self,
        source: SourceRef,
        rectangle: CropRectangle,
        output_format: str,
        quality: int,
    ) -> EncodedImage:
        image = self._load(source)
        if not rectangle.contained_in(ImageSize.of(image)):
            raise CodecError(
                f"{rectangle!r} exceeds source bounds {image.width}x{image.height}"
            )

        tile = image.crop(rectangle.as_box())
        fmt = output_format.upper()
        if fmt == "JPEG" and tile.mode not in ("RGB", "L"):
            tile = tile.convert("RGB")

        buffer = BytesIO()
        try:
            save_kwargs = {"quality": quality} if fmt in ("JPEG", "WEBP") else {}
            tile.save(buffer, format=fmt, **save_kwargs)
        except (OSError, KeyError, ValueError) as e:
            raise CodecError(f"Failed to encode {rectangle!r} as {fmt}: {e}") from e

        return EncodedImage(
            data=buffer.getvalue(),
            format=fmt,
            width=tile.width,
            height=tile.height,
        )

    def close(self) -> None:
        """Release cached decoded sources."""
        for image in self._cache.values():
            image.close()
        self._cache.clear()

    def __enter__(self) -> PillowCodec:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


def probe_image_size(path: Path) -> ImageSize:
    """
    Resolve the true pixel dimensions of an image file.

    Tries the cheapest accurate source first:
    1. Header lookup (lazy ``Image.open``, no pixel decode), corrected for
       EXIF orientation
    2. Full decode and measure

    Args:
        path: Image file path

    Returns:
        ImageSize of the upright image

    Raises:
        CodecError: If neither method can read the file
    """
    try:
        with Image.open(path) as img:
            width, height = img.size
            orientation = img.getexif().get(_EXIF_ORIENTATION_TAG, 1)
        if orientation in _TRANSPOSING_ORIENTATIONS:
            width, height = height, width
        logger.debug(f"Header size for {path.name}: {width}x{height} (orientation {orientation})")
        return ImageSize(width, height)
    except (OSError, UnidentifiedImageError, ValueError) as e:
        logger.warning(f"Header lookup failed for {path}, decoding instead: {e}")

    try:
        with Image.open(path) as img:
            img.load()
            upright = ImageOps.exif_transpose(img)
            return ImageSize.of(upright)
    except (OSError, UnidentifiedImageError, ValueError) as e:
        raise CodecError(f"Cannot determine size of {path}: {e}") from e
