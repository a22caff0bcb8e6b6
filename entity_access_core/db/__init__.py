"""
SQLAlchemy support: declarative base and identifier column types.
"""

from .db_base import Base, BinaryUUID, utc_now

__all__ = [
    "Base",
    "BinaryUUID",
    "utc_now",
]
