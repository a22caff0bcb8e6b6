"""Utility modules for Entity Access Core."""

from .json_utils import canonical_dumps, dumps
from .logger import (
    AzureQueueHandler,
    ContextAwareLogger,
    CorrelationContextFilter,
    configure_logging,
    get_logger,
)
from .uuid_utils import (
    NormalizedCandidate,
    binary_prefix_bounds,
    is_canonical_uuid,
    normalize_candidate,
)

__all__ = [
    "AzureQueueHandler",
    "ContextAwareLogger",
    "CorrelationContextFilter",
    "NormalizedCandidate",
    "binary_prefix_bounds",
    "canonical_dumps",
    "configure_logging",
    "dumps",
    "get_logger",
    "is_canonical_uuid",
    "normalize_candidate",
]
