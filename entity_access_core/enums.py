"""
Enums used across the entity_access_core package.

This module contains enum definitions that are used by multiple modules
to avoid circular import issues.
"""

import enum


class IdentifierEncoding(enum.Enum):
    """Physical storage representation of an entity type's identifier."""

    BINARY_UUID = "BINARY_UUID"
    TEXT_UUID = "TEXT_UUID"
    UNSUPPORTED = "UNSUPPORTED"


class ResolutionStatus(str, enum.Enum):
    """Outcome of an identifier resolution."""

    FOUND = "found"
    NOT_FOUND = "not_found"
    AMBIGUOUS = "ambiguous"
