"""
dex-access - Resilient, cached access to PokeAPI resources

Typed, retry-wrapped and cached fetch-by-ID accessors, paginated name
indexes, and edit-distance suggestions for names that fail an exact lookup.
"""

from __future__ import annotations

import importlib
from typing import TYPE_CHECKING, Any

__all__ = [
    "__version__",
    "AccessorRegistry",
    "Dex",
    "DexConfig",
    "FuzzyMatcher",
    "LookupResult",
    "NameIndex",
    "NameResolver",
    "PaginatedIndexBuilder",
    "PokeApiClient",
    "ResourceKind",
    "ResultCache",
    "RetryPolicy",
    "setup_logging",
]

_EXPORTS = {
    "__version__": "dex_access.core.version",
    "AccessorRegistry": "dex_access.api.registry",
    "Dex": "dex_access.dex",
    "DexConfig": "dex_access.core.config",
    "FuzzyMatcher": "dex_access.lookup.suggest",
    "LookupResult": "dex_access.dex",
    "NameIndex": "dex_access.lookup.names",
    "NameResolver": "dex_access.lookup.resolver",
    "PaginatedIndexBuilder": "dex_access.api.pagination",
    "PokeApiClient": "dex_access.api.client",
    "ResourceKind": "dex_access.api.registry",
    "ResultCache": "dex_access.api.cache",
    "RetryPolicy": "dex_access.api.resilience",
    "setup_logging": "dex_access.core.logging",
}

if TYPE_CHECKING:
    from dex_access.api.cache import ResultCache
    from dex_access.api.client import PokeApiClient
    from dex_access.api.pagination import PaginatedIndexBuilder
    from dex_access.api.registry import AccessorRegistry, ResourceKind
    from dex_access.api.resilience import RetryPolicy
    from dex_access.core.config import DexConfig
    from dex_access.core.logging import setup_logging
    from dex_access.core.version import __version__
    from dex_access.dex import Dex, LookupResult
    from dex_access.lookup.names import NameIndex
    from dex_access.lookup.resolver import NameResolver
    from dex_access.lookup.suggest import FuzzyMatcher


def __getattr__(name: str) -> Any:
    if name in _EXPORTS:
        return getattr(importlib.import_module(_EXPORTS[name]), name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
