"""
Company Scout Common Module

Shared infrastructure: configuration, collaborators and error types.
"""

from .config import ScoutConfig, load_config, validate_config
from .embedding_service import EmbeddingService
from .supabase_client import SupabaseClient
from .errors import (
    ScoutError,
    UnconfiguredError,
    EmbeddingError,
    SearchServiceError,
    StoreError,
    QueryRejectedError,
    NotFoundError,
    FetchTimeoutError,
)

__all__ = [
    "ScoutConfig",
    "load_config",
    "validate_config",
    "EmbeddingService",
    "SupabaseClient",
    "ScoutError",
    "UnconfiguredError",
    "EmbeddingError",
    "SearchServiceError",
    "StoreError",
    "QueryRejectedError",
    "NotFoundError",
    "FetchTimeoutError",
]
