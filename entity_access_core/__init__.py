"""
Entity Access Core.

Identifier resolution by full or partial UUID for entity-backed applications,
and authenticated encryption of credential payloads stored at rest.
"""

from .enums import IdentifierEncoding, ResolutionStatus
from .exceptions import (
    AmbiguousIdentifierError,
    AuthenticationFailureError,
    DecodingError,
    InvalidCandidateError,
    InvalidKeyLengthError,
    MalformedBlobError,
    StorageIntegrityViolationError,
    UnsupportedStorageEncodingError,
)
from .repositories import EntityIdentifierRepository
from .schemas import CredentialPayload, Resolution
from .services import IdentifierResolver
from .utils.encryption_utils import (
    decode_key,
    decrypt_credentials,
    encrypt_credentials,
    generate_key,
    key_material,
)

__version__ = "0.1.0"

__all__ = [
    "AmbiguousIdentifierError",
    "AuthenticationFailureError",
    "CredentialPayload",
    "DecodingError",
    "EntityIdentifierRepository",
    "IdentifierEncoding",
    "IdentifierResolver",
    "InvalidCandidateError",
    "InvalidKeyLengthError",
    "MalformedBlobError",
    "Resolution",
    "ResolutionStatus",
    "StorageIntegrityViolationError",
    "UnsupportedStorageEncodingError",
    "decode_key",
    "decrypt_credentials",
    "encrypt_credentials",
    "generate_key",
    "key_material",
]
