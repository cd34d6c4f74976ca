"""
Schemas Package

JSON schema definitions and validation utilities.
"""

from .validator import (
    validate_collection,
    ValidationError,
    COLLECTION_SCHEMA_VERSION,
)

__all__ = [
    "validate_collection",
    "ValidationError",
    "COLLECTION_SCHEMA_VERSION",
]
