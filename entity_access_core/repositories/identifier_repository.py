"""
SQLAlchemy implementation of the identifier storage capabilities.

Discovers, per mapped entity class, whether the identifier attribute holds a
16-byte binary UUID or a canonical text UUID, and runs exact or prefix matches
against it. Read-only: the session is never flushed or committed here.
"""

from typing import Any, List, Optional, Union

from sqlalchemy import BINARY, VARBINARY, LargeBinary, String, func
from sqlalchemy import inspect as sa_inspect
from sqlalchemy.orm import Mapper, Session
from sqlalchemy.types import TypeDecorator, TypeEngine

from ..constants import UUIDFormat
from ..db.db_base import BinaryUUID
from ..enums import IdentifierEncoding
from ..exceptions import UnsupportedStorageEncodingError
from ..utils.logger import ContextAwareLogger
from ..utils.uuid_utils import binary_prefix_bounds
from .base_repository import BaseRepository

_TEXT_UUID_LENGTHS = (UUIDFormat.HEX_LENGTH, UUIDFormat.CANONICAL_LENGTH)


def classify_column_type(column_type: TypeEngine) -> IdentifierEncoding:
    """
    Map a column type onto the identifier encoding it stores.

    BinaryUUID and 16-byte binary columns are BINARY_UUID; 32 or 36 character
    string columns are TEXT_UUID; anything else is UNSUPPORTED.
    """
    if isinstance(column_type, BinaryUUID):
        return IdentifierEncoding.BINARY_UUID
    if isinstance(column_type, TypeDecorator):
        column_type = column_type.impl

    if isinstance(column_type, (LargeBinary, BINARY, VARBINARY)):
        if column_type.length == UUIDFormat.BINARY_LENGTH:
            return IdentifierEncoding.BINARY_UUID
    elif isinstance(column_type, String):
        if column_type.length in _TEXT_UUID_LENGTHS:
            return IdentifierEncoding.TEXT_UUID

    return IdentifierEncoding.UNSUPPORTED


class EntityIdentifierRepository(BaseRepository):
    """
    Identifier introspection and lookup over mapped SQLAlchemy entity classes.

    The identifier attribute is the explicit ``identifier_attribute`` when
    given, otherwise the entity's single primary-key column.
    """

    def __init__(
        self,
        session: Session,
        identifier_attribute: Optional[str] = None,
        logger: Optional[ContextAwareLogger] = None,
    ):
        super().__init__(session, logger)
        self.identifier_attribute = identifier_attribute

    def _mapper(self, entity_type: Any) -> Mapper:
        mapper = sa_inspect(entity_type, raiseerr=False)
        if not isinstance(mapper, Mapper):
            raise UnsupportedStorageEncodingError(
                f"{getattr(entity_type, '__name__', entity_type)!s} is not a mapped entity type",
                entity_type=getattr(entity_type, "__name__", str(entity_type)),
            )
        return mapper

    def identifier_attribute_for(self, entity_type: Any) -> str:
        """
        Name of the attribute holding the entity's identifier.

        Raises:
            UnsupportedStorageEncodingError: If the attribute does not exist or
                the entity has no single primary-key column to default to
        """
        mapper = self._mapper(entity_type)
        entity_name = mapper.class_.__name__

        if self.identifier_attribute:
            if self.identifier_attribute not in mapper.columns:
                raise UnsupportedStorageEncodingError(
                    f"{entity_name} has no column attribute '{self.identifier_attribute}'",
                    entity_type=entity_name,
                    identifier_attribute=self.identifier_attribute,
                )
            return self.identifier_attribute

        if len(mapper.primary_key) != 1:
            raise UnsupportedStorageEncodingError(
                f"{entity_name} needs exactly one primary-key column to resolve identifiers",
                entity_type=entity_name,
                primary_key_columns=len(mapper.primary_key),
            )
        return mapper.get_property_by_column(mapper.primary_key[0]).key

    def identifier_encoding(self, entity_type: Any) -> IdentifierEncoding:
        """Classify the storage encoding of the entity's identifier column."""
        mapper = self._mapper(entity_type)
        column = mapper.columns[self.identifier_attribute_for(entity_type)]
        return classify_column_type(column.type)

    def _identifier(self, entity_type: Any):
        return getattr(entity_type, self.identifier_attribute_for(entity_type))

    @staticmethod
    def _normalized_text(identifier):
        return func.lower(func.replace(identifier, "-", ""))

    def query_exact(
        self, entity_type: Any, encoding: IdentifierEncoding, identifier: Union[bytes, str]
    ) -> List[Any]:
        """
        Entities whose identifier equals the given one.

        Args:
            entity_type: Mapped entity class
            encoding: Encoding previously reported by identifier_encoding()
            identifier: 16 raw bytes for BINARY_UUID, 32 lower-case hex digits for TEXT_UUID
        """
        column = self._identifier(entity_type)

        if encoding == IdentifierEncoding.BINARY_UUID:
            condition = column == bytes(identifier)
        elif encoding == IdentifierEncoding.TEXT_UUID:
            condition = self._normalized_text(column) == identifier
        else:
            raise UnsupportedStorageEncodingError(
                entity_type=entity_type.__name__, encoding=encoding.value
            )

        with self._session_operation("query_exact", entity_type=entity_type.__name__) as session:
            return session.query(entity_type).filter(condition).all()

    def query_prefix(
        self, entity_type: Any, encoding: IdentifierEncoding, hex_prefix: str
    ) -> List[Any]:
        """
        Entities whose identifier starts with the given hex digits.

        BINARY_UUID prefixes become an inclusive byte range, which handles a
        trailing odd nibble exactly. TEXT_UUID values are compared with
        hyphens removed and lower-cased.

        Args:
            entity_type: Mapped entity class
            encoding: Encoding previously reported by identifier_encoding()
            hex_prefix: 1 to 31 lower-case hex digits
        """
        column = self._identifier(entity_type)

        if encoding == IdentifierEncoding.BINARY_UUID:
            lower, upper = binary_prefix_bounds(hex_prefix)
            condition = column.between(lower, upper)
        elif encoding == IdentifierEncoding.TEXT_UUID:
            # hex_prefix is validated hex, so it carries no LIKE wildcards
            condition = self._normalized_text(column).like(f"{hex_prefix}%")
        else:
            raise UnsupportedStorageEncodingError(
                entity_type=entity_type.__name__, encoding=encoding.value
            )

        with self._session_operation("query_prefix", entity_type=entity_type.__name__) as session:
            return session.query(entity_type).filter(condition).all()
