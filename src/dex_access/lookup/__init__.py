"""Lookup module - name resolution components.

This module provides:
- Immutable name -> ID indexes built from paginated listings
- Edit-distance suggestions for unmatched names
- Exact-then-fuzzy name resolution
"""

from dex_access.lookup.names import NameIndex, normalize_name
from dex_access.lookup.resolver import NameResolver, Resolution
from dex_access.lookup.suggest import FuzzyMatcher, levenshtein_distance

__all__ = [
    # Indexes
    "NameIndex",
    "normalize_name",
    # Suggestions
    "FuzzyMatcher",
    "levenshtein_distance",
    # Resolution
    "NameResolver",
    "Resolution",
]
