"""
Centralized configuration management for Entity Access Core.

This module provides a unified configuration system with support for:
- Environment variables
- Runtime configuration
- Validation using Pydantic
"""

import os
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from .constants import EnvironmentVariable, LogLevel
from .exceptions import ConfigurationError


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(
        default_factory=lambda: os.getenv(EnvironmentVariable.LOG_LEVEL.value, LogLevel.INFO.value),
        description="Logging level",
    )
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log format string",
    )
    enable_queue: bool = Field(
        default_factory=lambda: os.getenv(EnvironmentVariable.LOG_QUEUE_ENABLED.value, "false").lower()
        == "true",
        description="Ship structured logs to an Azure Storage queue",
    )
    queue_name: str = Field(default="logs-queue", description="Log queue name")
    queue_connection_string: str = Field(
        default_factory=lambda: os.getenv(EnvironmentVariable.AZURE_STORAGE_CONNECTION.value, ""),
        description="Azure Storage connection string",
    )

    @field_validator("level")
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is valid."""
        valid_levels = {level.value for level in LogLevel}
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v.upper()


class SecurityConfig(BaseModel):
    """Security-related configuration."""

    encryption_key: Optional[str] = Field(
        default_factory=lambda: os.getenv(EnvironmentVariable.ENCRYPTION_KEY.value) or None,
        description="Credential encryption key (base64 encoded, 32 bytes)",
    )

    def require_encryption_key(self) -> str:
        """Return the encoded encryption key or fail when it is not configured."""
        if not self.encryption_key:
            raise ConfigurationError(
                "Encryption key is not configured",
                setting=EnvironmentVariable.ENCRYPTION_KEY.value,
            )
        return self.encryption_key

    def __repr__(self) -> str:
        """String representation with masked key for security."""
        return f"SecurityConfig(encryption_key={'***' if self.encryption_key else None})"

    __str__ = __repr__


class ResolverConfig(BaseModel):
    """Identifier resolution settings."""

    identifier_attribute: Optional[str] = Field(
        default_factory=lambda: os.getenv(EnvironmentVariable.IDENTIFIER_ATTRIBUTE.value) or None,
        description="Identifier attribute name; defaults to the single primary key column",
    )


class AppConfig(BaseModel):
    """Main application configuration."""

    logging: LoggingConfig = Field(
        default_factory=LoggingConfig, description="Logging configuration"
    )
    security: SecurityConfig = Field(
        default_factory=SecurityConfig, description="Security configuration"
    )
    resolver: ResolverConfig = Field(
        default_factory=ResolverConfig, description="Identifier resolver configuration"
    )

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Create configuration from environment variables."""
        return cls()


# Global configuration instance
_config: Optional[AppConfig] = None


def get_config() -> AppConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = AppConfig.from_env()
    return _config


def set_config(config: AppConfig) -> None:
    """Set the global configuration instance."""
    global _config
    _config = config


def reset_config() -> None:
    """Reset the global configuration instance."""
    global _config
    _config = None
