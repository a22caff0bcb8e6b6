"""Service layer."""

from .identifier_resolver import IdentifierResolver

__all__ = ["IdentifierResolver"]
