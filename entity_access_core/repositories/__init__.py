"""Repository layer for data access."""

from .base_repository import (
    BaseRepository,
    IdentifierIntrospector,
    IdentifierQuery,
    IdentifierStorage,
)
from .identifier_repository import EntityIdentifierRepository, classify_column_type

__all__ = [
    "BaseRepository",
    "EntityIdentifierRepository",
    "IdentifierIntrospector",
    "IdentifierQuery",
    "IdentifierStorage",
    "classify_column_type",
]
