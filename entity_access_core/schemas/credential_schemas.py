"""
Pydantic schema for credential payloads.

A credential payload is a flat mapping of string keys to string values
(username, secret, token, ...). Serialization is canonical JSON so that the
same mapping always yields the same bytes and round-trips exactly.
"""

from typing import Dict, Mapping

from pydantic import RootModel, StrictStr, field_validator
from pydantic import ValidationError as PydanticValidationError

from ..exceptions import validation_failed
from ..utils.json_utils import canonical_dumps


class CredentialPayload(RootModel[Dict[StrictStr, StrictStr]]):
    """Flat credential mapping; nested or non-string values are rejected."""

    @field_validator("root")
    def validate_utf8(cls, v: Dict[str, str]) -> Dict[str, str]:
        # Lone surrogates pass StrictStr but cannot be serialized
        for key, value in v.items():
            try:
                key.encode("utf-8")
                value.encode("utf-8")
            except UnicodeEncodeError:
                raise ValueError("credential strings must be encodable as UTF-8") from None
        return v

    def to_dict(self) -> Dict[str, str]:
        return dict(self.root)


def _error_locations(error: PydanticValidationError) -> list:
    # Locations only: pydantic messages echo the offending input values
    return [".".join(str(part) for part in err["loc"]) for err in error.errors()]


def validate_payload(payload: Mapping[str, str]) -> CredentialPayload:
    """
    Validate a credential mapping.

    Raises:
        ValidationError: If payload is not a flat mapping of strings to strings
    """
    if isinstance(payload, CredentialPayload):
        return payload
    if isinstance(payload, Mapping):
        payload = dict(payload)
    try:
        return CredentialPayload.model_validate(payload)
    except PydanticValidationError as e:
        raise validation_failed(
            "payload",
            "credential payload must map string keys to string values",
            invalid_locations=_error_locations(e),
        )


def serialize_payload(payload: CredentialPayload) -> bytearray:
    """
    Serialize a validated payload to canonical UTF-8 JSON.

    Returns a bytearray so the caller can overwrite it once it is no longer needed.
    """
    return bytearray(canonical_dumps(payload.root).encode("utf-8"))


def deserialize_payload(data: bytes) -> CredentialPayload:
    """
    Parse canonical JSON back into a payload.

    Raises:
        pydantic.ValidationError: If the bytes are not a JSON object of strings
    """
    return CredentialPayload.model_validate_json(data)
