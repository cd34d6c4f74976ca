"""
Module: config

Purpose:
    Configuration dataclass for the export pipeline. Immutable settings
    for the output encoding, the target collection and the progress bands.

Key Classes:
    - ExportConfig: Main configuration for exporting a carousel

Key Functions:
    - load_config(): Read an ExportConfig from a JSON file

Dependencies:
    - dataclasses (std)
    - json (std)

Used By:
    - export.pipeline: Output format, quality, collection name, bands
    - cli: --config option
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, Tuple

logger = logging.getLogger(__name__)

# Formats the export can write (Pillow format names)
SUPPORTED_FORMATS = ("JPEG", "PNG", "WEBP")


@dataclass(frozen=True)
class ExportConfig:
    """
    Configuration for carousel export (immutable).

    Attributes:
        collection_name: Named collection the tiles are saved into
        output_format: Pillow format name for every tile
        quality: Encoder quality, 1-100 (near maximum by default)
        copy_on_create: Ask the adapter to copy the seed asset when it
            creates a new collection (richer creation call only)
        progress_bands: Progress at the end of the encode stage and at the
            end of the persistence stage; attach runs up to 100

    Example:
        >>> config = ExportConfig(collection_name="Holiday", quality=90)
    """

    collection_name: str = "Pixert"
    output_format: str = "JPEG"
    quality: int = 95
    copy_on_create: bool = False
    progress_bands: Tuple[float, float] = (50.0, 90.0)

    def __post_init__(self) -> None:
        """Validate configuration."""
        # Values may come straight from JSON, so check types before ranges
        if not isinstance(self.collection_name, str):
            raise ValueError(f"collection_name must be a string, got {self.collection_name!r}")
        if not isinstance(self.output_format, str):
            raise ValueError(f"output_format must be a string, got {self.output_format!r}")
        if isinstance(self.quality, bool) or not isinstance(self.quality, int):
            raise ValueError(f"quality must be an int, got {self.quality!r}")
        if not isinstance(self.copy_on_create, bool):
            raise ValueError(f"copy_on_create must be a bool, got {self.copy_on_create!r}")
        bands = self.progress_bands
        if (
            not isinstance(bands, (list, tuple))
            or len(bands) != 2
            or any(isinstance(b, bool) or not isinstance(b, (int, float)) for b in bands)
        ):
            raise ValueError(f"progress_bands must be two numbers, got {bands!r}")
        if not self.collection_name.strip():
            raise ValueError("collection_name must not be empty")
        if self.output_format.upper() not in SUPPORTED_FORMATS:
            raise ValueError(
                f"output_format must be one of {SUPPORTED_FORMATS}, got {self.output_format!r}"
            )
        if not 1 <= self.quality <= 100:
            raise ValueError(f"quality must be 1-100, got {self.quality}")
        encode_end, persist_end = self.progress_bands
        if not 0.0 < encode_end < persist_end < 100.0:
            raise ValueError(
                f"progress_bands must satisfy 0 < encode < persist < 100, got {self.progress_bands}"
            )
        # Normalise so Pillow lookups are case-insensitive
        object.__setattr__(self, "output_format", self.output_format.upper())
        object.__setattr__(self, "progress_bands", (float(encode_end), float(persist_end)))

    @property
    def file_extension(self) -> str:
        return {"JPEG": ".jpg", "PNG": ".png", "WEBP": ".webp"}[self.output_format]

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["progress_bands"] = list(self.progress_bands)
        return d

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> ExportConfig:
        """Create from dictionary; unknown keys are rejected."""
        known = set(cls.__dataclass_fields__)
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown config keys: {sorted(unknown)}")
        defaults = cls()
        return cls(
            collection_name=data.get("collection_name", defaults.collection_name),
            output_format=data.get("output_format", defaults.output_format),
            quality=data.get("quality", defaults.quality),
            copy_on_create=data.get("copy_on_create", defaults.copy_on_create),
            progress_bands=data.get("progress_bands", defaults.progress_bands),
        )


def load_config(path: Path) -> ExportConfig:
    """
    Load an ExportConfig from a JSON file.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the JSON is malformed or values are invalid
    """
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid config JSON in {path}: {e}") from e
    if not isinstance(data, dict):
        raise ValueError(f"Config root must be an object in {path}")
    config = ExportConfig.from_dict(data)
    logger.debug(f"Loaded export config from {path}: {config}")
    return config
