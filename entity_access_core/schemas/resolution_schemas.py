"""
Resolution outcome for identifier lookups.

A resolution is exactly one of found (with the entity), not found, or
ambiguous (with the number of matching entities). Ambiguity is an outcome,
not an error: callers branch on it, typically by asking for a longer
identifier.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..enums import IdentifierEncoding, ResolutionStatus


class Resolution(BaseModel):
    """Outcome of resolving an identifier candidate against one entity type."""

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    status: ResolutionStatus = Field(description="Resolution outcome")
    entity: Optional[Any] = Field(default=None, description="Matched entity when found")
    match_count: int = Field(default=0, ge=0, description="Number of matching entities")
    encoding: Optional[IdentifierEncoding] = Field(
        default=None, description="Identifier storage encoding the lookup ran against"
    )

    @model_validator(mode="after")
    def check_consistency(self) -> "Resolution":
        """Keep status, entity and match_count in agreement."""
        if self.status == ResolutionStatus.FOUND:
            if self.entity is None or self.match_count != 1:
                raise ValueError("found resolutions carry exactly one entity")
        elif self.entity is not None:
            raise ValueError(f"{self.status.value} resolutions carry no entity")
        elif self.status == ResolutionStatus.NOT_FOUND and self.match_count != 0:
            raise ValueError("not_found resolutions have a match_count of 0")
        elif self.status == ResolutionStatus.AMBIGUOUS and self.match_count < 2:
            raise ValueError("ambiguous resolutions have a match_count of at least 2")
        return self

    @classmethod
    def found(cls, entity: Any, encoding: Optional[IdentifierEncoding] = None) -> "Resolution":
        return cls(status=ResolutionStatus.FOUND, entity=entity, match_count=1, encoding=encoding)

    @classmethod
    def not_found(cls, encoding: Optional[IdentifierEncoding] = None) -> "Resolution":
        return cls(status=ResolutionStatus.NOT_FOUND, encoding=encoding)

    @classmethod
    def ambiguous(
        cls, match_count: int, encoding: Optional[IdentifierEncoding] = None
    ) -> "Resolution":
        return cls(status=ResolutionStatus.AMBIGUOUS, match_count=match_count, encoding=encoding)

    @property
    def is_found(self) -> bool:
        return self.status == ResolutionStatus.FOUND

    @property
    def is_ambiguous(self) -> bool:
        return self.status == ResolutionStatus.AMBIGUOUS
