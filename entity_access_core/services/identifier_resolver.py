"""
Identifier resolution for entity types keyed by UUIDs.

Resolves a full canonical UUID or a truncated prefix of one to exactly one
entity, or reports that nothing or several entities match. Works the same
for identifiers stored as 16 raw bytes and as text; the encoding is looked up
on every call and never cached here.
"""

from typing import Any, Optional

from sqlalchemy.orm import Session

from ..config import get_config
from ..enums import IdentifierEncoding
from ..exceptions import (
    AmbiguousIdentifierError,
    StorageIntegrityViolationError,
    UnsupportedStorageEncodingError,
    not_found,
)
from ..repositories.base_repository import IdentifierIntrospector, IdentifierQuery
from ..repositories.identifier_repository import EntityIdentifierRepository
from ..schemas.resolution_schemas import Resolution
from ..utils.logger import ContextAwareLogger, get_logger
from ..utils.uuid_utils import normalize_candidate

_SUPPORTED_ENCODINGS = (IdentifierEncoding.BINARY_UUID, IdentifierEncoding.TEXT_UUID)


def _entity_name(entity_type: Any) -> str:
    return getattr(entity_type, "__name__", str(entity_type))


class IdentifierResolver:
    """
    Resolve entities by full or partial UUID.

    Stateless and safe to share between threads as long as the storage
    capabilities are. Ties are never broken: several matches always come back
    as an ambiguous resolution.
    """

    def __init__(
        self,
        introspector: IdentifierIntrospector,
        query: Optional[IdentifierQuery] = None,
        logger: Optional[ContextAwareLogger] = None,
    ):
        """
        Args:
            introspector: Reports the identifier encoding of an entity type
            query: Runs exact and prefix matches; defaults to the introspector
                when one object provides both capabilities
            logger: Optional logger instance
        """
        self.introspector = introspector
        self.query = query if query is not None else introspector
        self.logger = logger or get_logger()

    @classmethod
    def for_session(
        cls, session: Session, identifier_attribute: Optional[str] = None
    ) -> "IdentifierResolver":
        """Build a resolver over a SQLAlchemy session using the configured identifier attribute."""
        if identifier_attribute is None:
            identifier_attribute = get_config().resolver.identifier_attribute
        return cls(EntityIdentifierRepository(session, identifier_attribute=identifier_attribute))

    def resolve(self, entity_type: Any, candidate: str) -> Resolution:
        """
        Resolve a candidate identifier against one entity type.

        Args:
            entity_type: Entity type whose identifier attribute is searched
            candidate: Canonical 36-character UUID, or 1 to 32 hex digits of
                one with hyphens optional

        Returns:
            Resolution that is found, not_found or ambiguous

        Raises:
            InvalidCandidateError: If the candidate is empty, too long or not hexadecimal
            UnsupportedStorageEncodingError: If the identifier encoding is not recognized
            StorageIntegrityViolationError: If a full UUID matches more than one row
        """
        normalized = normalize_candidate(candidate)
        entity_name = _entity_name(entity_type)

        encoding = self.introspector.identifier_encoding(entity_type)
        if encoding not in _SUPPORTED_ENCODINGS:
            raise UnsupportedStorageEncodingError(
                f"{entity_name} identifier uses an unsupported storage encoding",
                entity_type=entity_name,
                encoding=getattr(encoding, "value", str(encoding)),
            )

        if normalized.is_full:
            if encoding == IdentifierEncoding.BINARY_UUID:
                identifier = normalized.as_uuid().bytes
            else:
                identifier = normalized.hex
            matches = self.query.query_exact(entity_type, encoding, identifier)

            if len(matches) > 1:
                raise StorageIntegrityViolationError(
                    f"{entity_name} has {len(matches)} rows sharing one identifier",
                    entity_type=entity_name,
                    encoding=encoding.value,
                    match_count=len(matches),
                )
        else:
            matches = self.query.query_prefix(entity_type, encoding, normalized.hex)

        match_count = len(matches)
        self.logger.debug(
            "Identifier resolved",
            extra={
                "entity_type": entity_name,
                "encoding": encoding.value,
                "match_kind": "exact" if normalized.is_full else "prefix",
                "candidate_length": len(normalized.hex),
                "match_count": match_count,
            },
        )

        if match_count == 0:
            return Resolution.not_found(encoding=encoding)
        if match_count == 1:
            return Resolution.found(matches[0], encoding=encoding)
        return Resolution.ambiguous(match_count, encoding=encoding)

    def get(self, entity_type: Any, candidate: str) -> Any:
        """
        Resolve a candidate and return the entity, raising for any other outcome.

        Raises:
            RepositoryError: NOT_FOUND (404) when nothing matches
            AmbiguousIdentifierError: When several entities match; ask for more characters
            InvalidCandidateError, UnsupportedStorageEncodingError,
            StorageIntegrityViolationError: As for resolve()
        """
        resolution = self.resolve(entity_type, candidate)
        entity_name = _entity_name(entity_type)

        if resolution.is_found:
            return resolution.entity
        if resolution.is_ambiguous:
            raise AmbiguousIdentifierError(
                f"{entity_name} identifier matches {resolution.match_count} entities; "
                f"supply more characters",
                match_count=resolution.match_count,
                entity_type=entity_name,
                candidate_length=len(candidate),
            )
        raise not_found(entity_name, candidate_length=len(candidate))
