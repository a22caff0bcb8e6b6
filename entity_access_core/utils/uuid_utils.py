"""
UUID candidate utilities for identifier resolution.

Normalizes caller-supplied identifier candidates and translates hexadecimal
prefixes into the byte ranges used to match 16-byte binary identifiers.
"""

import re
import uuid
from typing import NamedTuple, Tuple

from ..constants import UUIDFormat
from ..exceptions import InvalidCandidateError

_CANDIDATE_CHARS = re.compile(r"^[0-9a-fA-F-]+$")
_CANONICAL_UUID = re.compile(
    r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$"
)


class NormalizedCandidate(NamedTuple):
    """A validated candidate: lower-case hex digits with hyphens removed."""

    hex: str
    canonical: bool

    @property
    def is_full(self) -> bool:
        return len(self.hex) == UUIDFormat.HEX_LENGTH

    def as_uuid(self) -> uuid.UUID:
        """The candidate as a UUID; only valid for full candidates."""
        return uuid.UUID(hex=self.hex)


def is_canonical_uuid(value: str) -> bool:
    """True when value is a 36-character hyphenated 8-4-4-4-12 UUID string."""
    return len(value) == UUIDFormat.CANONICAL_LENGTH and bool(_CANONICAL_UUID.match(value))


def normalize_candidate(candidate: str) -> NormalizedCandidate:
    """
    Validate and normalize an identifier candidate.

    Args:
        candidate: Full canonical UUID or a prefix of one, hyphens optional

    Returns:
        NormalizedCandidate with lower-case hex digits and no hyphens

    Raises:
        InvalidCandidateError: If the candidate is empty, longer than 36
            characters, contains non-hex characters, or holds more than 32
            hex digits
    """
    if not isinstance(candidate, str) or not candidate:
        raise InvalidCandidateError("Identifier candidate must be a non-empty string")

    length = len(candidate)
    if length > UUIDFormat.CANONICAL_LENGTH:
        raise InvalidCandidateError(
            f"Identifier candidate exceeds {UUIDFormat.CANONICAL_LENGTH} characters",
            candidate_length=length,
        )
    if not _CANDIDATE_CHARS.match(candidate):
        raise InvalidCandidateError(
            "Identifier candidate may only contain hexadecimal digits and hyphens",
            candidate_length=length,
        )

    hex_digits = candidate.replace("-", "").lower()
    if not hex_digits or len(hex_digits) > UUIDFormat.HEX_LENGTH:
        raise InvalidCandidateError(
            f"Identifier candidate must hold between 1 and {UUIDFormat.HEX_LENGTH} hex digits",
            candidate_length=length,
        )

    return NormalizedCandidate(hex=hex_digits, canonical=is_canonical_uuid(candidate))


def binary_prefix_bounds(hex_prefix: str) -> Tuple[bytes, bytes]:
    """
    Inclusive byte range covering every 16-byte value that starts with hex_prefix.

    The longest even-length part of the prefix is decoded exactly. A trailing
    odd nibble fixes only the high half of the next byte, so that byte spans
    nibble0 to nibbleF; the remaining bytes span 00 to ff.

    Args:
        hex_prefix: 1 to 32 lower-case hex digits

    Returns:
        (lower, upper) bounds, both 16 bytes long
    """
    even_length = len(hex_prefix) - len(hex_prefix) % 2
    head = bytes.fromhex(hex_prefix[:even_length])

    if even_length < len(hex_prefix):
        nibble = int(hex_prefix[-1], 16) << 4
        lower_head = head + bytes([nibble])
        upper_head = head + bytes([nibble | 0x0F])
    else:
        lower_head = upper_head = head

    padding = UUIDFormat.BINARY_LENGTH - len(lower_head)
    return lower_head + b"\x00" * padding, upper_head + b"\xff" * padding

