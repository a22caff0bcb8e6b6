"""
Authenticated encryption for credential payloads stored at rest.

Payloads are sealed with XChaCha20-Poly1305-IETF (libsodium via PyNaCl) under a
caller-supplied 32-byte key and a fresh 24-byte random nonce per call. The
stored form is a single base64 string of ``nonce || ciphertext || tag``.

There is no version or algorithm marker in the blob. Changing the cipher suite
would make existing blobs fail authentication rather than be detected as
foreign.

Buffers this module owns (key copies, serialized plaintext, decoded blobs) are
overwritten with zeros before they are released. The bytes objects handed to
libsodium are immutable and cannot be wiped, so this is a best-effort hygiene
measure and not a guarantee against a compromised host.
"""

import base64
import binascii
from contextlib import contextmanager
from typing import Callable, Dict, Iterator, Mapping, Union

import nacl.bindings
import nacl.exceptions
import nacl.utils
from pydantic import ValidationError as PydanticValidationError

from ..constants import CipherSizes
from ..exceptions import (
    AuthenticationFailureError,
    DecodingError,
    InvalidKeyLengthError,
    MalformedBlobError,
)
from ..schemas.credential_schemas import deserialize_payload, serialize_payload, validate_payload
from .logger import get_logger

KeyMaterial = Union[bytes, bytearray, memoryview]


def wipe(buffer: bytearray) -> None:
    """Overwrite a mutable buffer with zeros in place."""
    buffer[:] = bytes(len(buffer))


def _copy_key(key: KeyMaterial) -> bytearray:
    if not isinstance(key, (bytes, bytearray, memoryview)):
        raise InvalidKeyLengthError("Key material must be raw bytes")
    key_buffer = bytearray(key)
    if len(key_buffer) != CipherSizes.KEY:
        length = len(key_buffer)
        wipe(key_buffer)
        raise InvalidKeyLengthError(
            f"Key material must be exactly {CipherSizes.KEY} bytes",
            key_length=length,
        )
    return key_buffer


def _b64decode(value: str, what: str) -> bytearray:
    if isinstance(value, (bytes, bytearray)):
        try:
            value = bytes(value).decode("ascii")
        except UnicodeDecodeError:
            raise DecodingError(f"{what} is not valid base64 text") from None
    if not isinstance(value, str):
        raise DecodingError(f"{what} must be a base64 string")
    text = value.strip()
    try:
        raw = bytearray(base64.b64decode(text, validate=True))
    except (binascii.Error, ValueError):
        raise DecodingError(f"{what} is not valid base64 text") from None
    # Only the canonical encoding is accepted; non-zero padding bits would
    # let several texts decode to the same bytes
    if base64.b64encode(raw).decode("ascii") != text:
        wipe(raw)
        raise DecodingError(f"{what} is not canonical base64 text")
    return raw


def encrypt_credentials(payload: Mapping[str, str], key: KeyMaterial) -> str:
    """
    Encrypt a credential payload for storage in a single text column.

    Args:
        payload: Flat mapping of string keys to string values
        key: 32 bytes of key material

    Returns:
        Base64 text of nonce || ciphertext || tag

    Raises:
        InvalidKeyLengthError: If key is not exactly 32 bytes
        ValidationError: If payload is not a flat string mapping
    """
    key_buffer = _copy_key(key)
    plaintext = bytearray()
    sealed = bytearray()
    try:
        validated = validate_payload(payload)
        plaintext = serialize_payload(validated)
        nonce = nacl.utils.random(CipherSizes.NONCE)

        sealed = bytearray(nonce)
        sealed += nacl.bindings.crypto_aead_xchacha20poly1305_ietf_encrypt(
            bytes(plaintext), None, nonce, bytes(key_buffer)
        )
        blob = base64.b64encode(sealed).decode("ascii")

        get_logger().debug(
            "Credential payload encrypted",
            extra={"field_count": len(validated.root), "blob_length": len(blob)},
        )
        return blob
    finally:
        wipe(key_buffer)
        wipe(plaintext)
        wipe(sealed)


def decrypt_credentials(blob: str, key: KeyMaterial) -> Dict[str, str]:
    """
    Decrypt a blob produced by encrypt_credentials.

    Wrong keys, tampered bytes and swapped nonces all surface as the same
    AuthenticationFailureError; nothing is returned unless the tag verifies.

    Args:
        blob: Base64 text of nonce || ciphertext || tag
        key: The 32 bytes of key material used to encrypt

    Returns:
        The original credential mapping

    Raises:
        InvalidKeyLengthError: If key is not exactly 32 bytes
        DecodingError: If blob is not valid base64 text
        MalformedBlobError: If the decoded blob is shorter than nonce + tag
        AuthenticationFailureError: If authenticated decryption fails
    """
    key_buffer = _copy_key(key)
    sealed = bytearray()
    plaintext = bytearray()
    try:
        sealed = _b64decode(blob, "Encrypted blob")
        if len(sealed) < CipherSizes.MIN_BLOB:
            raise MalformedBlobError(
                f"Encrypted blob must be at least {CipherSizes.MIN_BLOB} bytes",
                blob_length=len(sealed),
            )

        nonce = bytes(sealed[: CipherSizes.NONCE])
        try:
            plaintext = bytearray(
                nacl.bindings.crypto_aead_xchacha20poly1305_ietf_decrypt(
                    bytes(sealed[CipherSizes.NONCE :]), None, nonce, bytes(key_buffer)
                )
            )
        except nacl.exceptions.CryptoError:
            raise AuthenticationFailureError() from None

        try:
            payload = deserialize_payload(bytes(plaintext))
        except PydanticValidationError:
            raise MalformedBlobError("Decrypted payload is not a flat string mapping") from None

        return payload.to_dict()
    finally:
        wipe(key_buffer)
        wipe(sealed)
        wipe(plaintext)


def generate_key(random_source: Callable[[int], bytes] = nacl.utils.random) -> str:
    """
    Generate a new base64-encoded 32-byte key for operators to provision.

    Args:
        random_source: Callable returning n random bytes; injectable for tests

    Returns:
        Base64 text of 32 random bytes
    """
    raw = bytearray(random_source(CipherSizes.KEY))
    try:
        if len(raw) != CipherSizes.KEY:
            raise InvalidKeyLengthError(
                "Random source returned the wrong number of bytes", key_length=len(raw)
            )
        return base64.b64encode(raw).decode("ascii")
    finally:
        wipe(raw)


def decode_key(encoded: str) -> bytearray:
    """
    Decode base64 key text into raw key bytes.

    The caller owns the returned buffer and should wipe() it after use;
    key_material() does this automatically.

    Raises:
        DecodingError: If encoded is not valid base64 text
        InvalidKeyLengthError: If the decoded key is not 32 bytes
    """
    raw = _b64decode(encoded, "Encryption key")
    if len(raw) != CipherSizes.KEY:
        length = len(raw)
        wipe(raw)
        raise InvalidKeyLengthError(
            f"Encryption key must decode to exactly {CipherSizes.KEY} bytes", key_length=length
        )
    return raw


@contextmanager
def key_material(encoded: str) -> Iterator[bytearray]:
    """
    Decode a base64 key for the duration of a with-block, then zero it.

    Usage:
        with key_material(get_config().security.require_encryption_key()) as key:
            blob = encrypt_credentials(payload, key)
    """
    key = decode_key(encoded)
    try:
        yield key
    finally:
        wipe(key)
