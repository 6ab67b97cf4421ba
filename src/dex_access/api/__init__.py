"""API module - remote resource access components.

This module provides:
- Retry logic with bounded exponential backoff
- Sliding-TTL result caching with coalesced loads
- The typed accessor registry
- Paginated listing traversal
- The PokeAPI HTTP client
"""

from dex_access.api.cache import CacheEntry, ResultCache
from dex_access.api.client import PokeApiClient
from dex_access.api.pagination import NamedResource, PageCursor, PageResult, PaginatedIndexBuilder
from dex_access.api.registry import (
    AccessorRegistry,
    ResourceKind,
    TypedAccessor,
    collect_capabilities,
    provides,
)
from dex_access.api.resilience import RETRYABLE_EXCEPTIONS, RetryAttempt, RetryPolicy

__all__ = [
    # Resilience
    "RETRYABLE_EXCEPTIONS",
    "RetryAttempt",
    "RetryPolicy",
    # Caching
    "CacheEntry",
    "ResultCache",
    # Registry
    "AccessorRegistry",
    "ResourceKind",
    "TypedAccessor",
    "collect_capabilities",
    "provides",
    # Pagination
    "NamedResource",
    "PageCursor",
    "PageResult",
    "PaginatedIndexBuilder",
    # Client
    "PokeApiClient",
]
