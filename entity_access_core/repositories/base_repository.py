"""
Repository contracts and shared error handling.

The identifier resolver depends only on the two capability protocols below;
any storage layer that implements them can back it.
"""

from contextlib import contextmanager
from typing import Any, List, NoReturn, Optional, Protocol, Union

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..enums import IdentifierEncoding
from ..exceptions import BaseError, ErrorCode, RepositoryError
from ..utils.logger import ContextAwareLogger, get_logger


class IdentifierIntrospector(Protocol):
    """Reports how an entity type's identifier attribute is physically stored."""

    def identifier_encoding(self, entity_type: Any) -> IdentifierEncoding: ...


class IdentifierQuery(Protocol):
    """Runs exact and prefix identifier matches for an entity type."""

    def query_exact(
        self, entity_type: Any, encoding: IdentifierEncoding, identifier: Union[bytes, str]
    ) -> List[Any]: ...

    def query_prefix(
        self, entity_type: Any, encoding: IdentifierEncoding, hex_prefix: str
    ) -> List[Any]: ...


class IdentifierStorage(IdentifierIntrospector, IdentifierQuery, Protocol):
    """Both capabilities, as provided by a single storage adapter."""


class BaseRepository:
    """Base repository holding a caller-owned session and common error handling."""

    def __init__(self, session: Session, logger: Optional[ContextAwareLogger] = None):
        """
        Initialize the base repository.

        Args:
            session: SQLAlchemy session for database operations; never committed here
            logger: Optional logger instance
        """
        self.session = session
        self.logger = logger or get_logger()

    def _handle_db_error(self, e: Exception, operation_name: str, **context: Any) -> NoReturn:
        """
        Translate storage failures into RepositoryError.

        Statement parameters can carry identifier prefixes, so only the driver
        message is recorded, never the rendered statement.

        Raises:
            RepositoryError: With appropriate error code and context
        """
        if isinstance(e, BaseError):
            raise e

        error_context = {"operation_name": operation_name, **context}
        driver_message = str(getattr(e, "orig", None) or type(e).__name__)

        if isinstance(e, SQLAlchemyError):
            raise RepositoryError(
                f"Database error in {operation_name}: {driver_message}",
                error_code=ErrorCode.DATABASE_ERROR,
                error_type=type(e).__name__,
                **error_context,
            ) from e

        raise RepositoryError(
            f"Unexpected error in {operation_name}: {type(e).__name__}",
            error_code=ErrorCode.INTERNAL_ERROR,
            error_type=type(e).__name__,
            **error_context,
        ) from e

    @contextmanager
    def _session_operation(self, operation_name: str, **context: Any):
        """
        Context manager for read operations on the caller's session.

        The repository does not commit, flush or roll back; the session
        lifecycle belongs to the caller.

        Yields:
            The existing session

        Raises:
            RepositoryError: If there's a database error
        """
        try:
            yield self.session
        except Exception as e:
            self._handle_db_error(e, operation_name, **context)
