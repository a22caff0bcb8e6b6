"""
Constants for the Entity Access Core package.

This module centralizes all magic strings and sizes used throughout
the package to ensure consistency and maintainability.
"""

from enum import Enum


class LogLevel(str, Enum):
    """Standard logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class EnvironmentVariable(str, Enum):
    """Standard environment variable names."""

    AZURE_STORAGE_CONNECTION = "AzureWebJobsStorage"
    LOG_LEVEL = "LOG_LEVEL"
    LOG_QUEUE_ENABLED = "LOG_QUEUE_ENABLED"
    ENCRYPTION_KEY = "ENCRYPTION_KEY"
    IDENTIFIER_ATTRIBUTE = "IDENTIFIER_ATTRIBUTE"


class UUIDFormat:
    """Sizes of the canonical and stored UUID representations."""

    CANONICAL_LENGTH = 36
    HEX_LENGTH = 32
    BINARY_LENGTH = 16


class CipherSizes:
    """XChaCha20-Poly1305-IETF sizes in bytes."""

    KEY = 32
    NONCE = 24
    TAG = 16
    MIN_BLOB = NONCE + TAG
