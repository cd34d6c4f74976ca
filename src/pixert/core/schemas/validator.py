"""
Schema Validation Utilities

Validates collection manifests written by the directory gallery before
they hit disk, and after they are read back.

Basic structural checks run first so the common mistakes produce a
precise message; the full JSON Schema is then enforced with jsonschema.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import jsonschema


# Schema version constants
COLLECTION_SCHEMA_VERSION = 1


# Load schemas lazily
_SCHEMAS: dict[str, dict] = {}


def _load_schema(name: str) -> dict:
    """Load a schema from the schemas directory."""
    if name not in _SCHEMAS:
        schema_path = Path(__file__).parent / f"{name}.schema.json"
        if not schema_path.exists():
            raise FileNotFoundError(f"Schema not found: {schema_path}")
        with open(schema_path, "r", encoding="utf-8") as f:
            _SCHEMAS[name] = json.load(f)
    return _SCHEMAS[name]


class ValidationError(Exception):
    """Raised when data fails schema validation."""

    def __init__(self, message: str, path: str = "", errors: list[str] | None = None):
        super().__init__(message)
        self.path = path
        self.errors = errors or []


def validate_collection(data: dict[str, Any]) -> None:
    """
    Validate a collection manifest.

    Args:
        data: Manifest dictionary to validate

    Raises:
        ValidationError: If data is invalid
    """
    required = ["schema_version", "id", "name", "created_at", "assets"]
    missing = [f for f in required if f not in data]
    if missing:
        raise ValidationError(
            f"Missing required fields: {missing}",
            errors=[f"Missing field: {f}" for f in missing]
        )

    version = data.get("schema_version")
    if version != COLLECTION_SCHEMA_VERSION:
        raise ValidationError(
            f"Unsupported collection schema version: {version} "
            f"(expected {COLLECTION_SCHEMA_VERSION})",
            path="schema_version"
        )

    assets = data.get("assets")
    if isinstance(assets, list) and len(set(assets)) != len(assets):
        raise ValidationError(
            "assets must not contain duplicates",
            path="assets"
        )

    schema = _load_schema("collection")
    try:
        jsonschema.validate(data, schema)
    except jsonschema.ValidationError as e:
        raise ValidationError(
            f"Schema validation failed: {e.message}",
            path=".".join(str(p) for p in e.absolute_path),
            errors=[e.message]
        ) from e
