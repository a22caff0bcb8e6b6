"""Pydantic schemas for payloads and outcomes."""

from .credential_schemas import (
    CredentialPayload,
    deserialize_payload,
    serialize_payload,
    validate_payload,
)
from .resolution_schemas import Resolution

__all__ = [
    "CredentialPayload",
    "Resolution",
    "deserialize_payload",
    "serialize_payload",
    "validate_payload",
]
