"""
Declarative base and cross-database column types for UUID identifiers.

Keeps SQLite/PostgreSQL compatibility for the two identifier encodings the
resolver understands: 16-byte binary and canonical text.
"""

import uuid
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import LargeBinary
from sqlalchemy.dialects.postgresql import BYTEA
from sqlalchemy.orm import declarative_base
from sqlalchemy.types import TypeDecorator

# Base class for host applications' SQLAlchemy models
Base: Any = declarative_base()


def utc_now():
    """Return current UTC time with timezone info attached."""
    return datetime.now(UTC)


class BinaryUUID(TypeDecorator):
    """
    UUID stored as its 16 raw bytes.

    Uses BYTEA for PostgreSQL and BLOB elsewhere. Binds uuid.UUID or raw bytes,
    returns uuid.UUID.
    """

    impl = LargeBinary
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "postgresql":
            return dialect.type_descriptor(BYTEA())
        return dialect.type_descriptor(LargeBinary(16))

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if isinstance(value, uuid.UUID):
            return value.bytes
        if isinstance(value, str):
            return uuid.UUID(value).bytes
        return bytes(value)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return uuid.UUID(bytes=bytes(value))
