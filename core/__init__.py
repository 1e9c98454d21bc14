# Core package - Infrastructure components
from .exceptions import (
    AdvisorError,
    ConfigurationError,
    NotFoundError,
    UpstreamError,
    ValidationError,
)
from .store import RecommendationStore, get_store, close_store

__all__ = [
    # Errors
    "AdvisorError",
    "ConfigurationError",
    "NotFoundError",
    "UpstreamError",
    "ValidationError",
    # Store
    "RecommendationStore",
    "get_store",
    "close_store",
]
