"""Name -> ID indexes built from paginated listings."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from types import MappingProxyType

from tqdm import tqdm

from dex_access.api.pagination import BatchFetch, NamedResource, PaginatedIndexBuilder
from dex_access.api.resilience import RetryPolicy
from dex_access.core.constants import DEFAULT_BATCH_SIZE
from dex_access.core.logging import with_log_context

TQDM_BAR_FORMAT = "{desc}: {n_fmt} [{elapsed}]"


def normalize_name(name: str) -> str:
    """Comparison format for names: trimmed and lower-cased."""
    if name is None:
        raise ValueError("Cannot normalize a null name!")
    return name.strip().lower()


class NameIndex:
    """
    Immutable, case-insensitive name -> ID lookup table.

    Built once, before being shared; no writes happen afterwards so reads
    need no locking. When two listing entries normalize to the same name the
    later one wins and the name is recorded in ``collisions``.
    """

    def __init__(self, mapping: dict[str, int], label: str | None = None, collisions: Iterable[str] = ()):
        self._ids = MappingProxyType(dict(mapping))
        self._names_by_id = MappingProxyType({resource_id: name for name, resource_id in self._ids.items()})
        self._all_names = frozenset(self._ids)
        self.label = label
        self.collisions = tuple(collisions)

    @classmethod
    def from_pairs(
        cls,
        pairs: Iterable[NamedResource | tuple[str, int]],
        label: str | None = None,
        logger: logging.Logger | None = None,
    ) -> NameIndex:
        """Build an index from in-memory (name, id) pairs."""
        logger = logger or logging.getLogger(__name__)
        mapping: dict[str, int] = {}
        collisions: list[str] = []
        for pair in pairs:
            name, resource_id = (pair.name, pair.id) if isinstance(pair, NamedResource) else pair
            key = normalize_name(name)
            previous = mapping.get(key)
            if previous is not None and previous != resource_id:
                # Last write wins; flag it since lookups for this name become ambiguous
                logger.warning(
                    f"Name collision in {label or 'index'}: '{key}' maps to #{previous} and #{resource_id}; "
                    f"keeping #{resource_id}"
                )
                collisions.append(key)
            mapping[key] = resource_id
        return cls(mapping, label=label, collisions=collisions)

    @classmethod
    def build(
        cls,
        batch_fetch: BatchFetch,
        retry_policy: RetryPolicy | None = None,
        batch_size: int = DEFAULT_BATCH_SIZE,
        label: str | None = None,
        show_progress: bool = False,
        logger: logging.Logger | None = None,
    ) -> NameIndex:
        """
        Drain a paginated listing into a NameIndex.

        Args:
            batch_fetch: ``(offset, limit) -> PageResult`` listing function
            retry_policy: Policy wrapped around each batch (default: RetryPolicy())
            batch_size: Items per batch (default: 100)
            label: Name of the listing, used in logs and errors
            show_progress: Display a tqdm counter while draining
            logger: Logger instance

        Raises:
            IndexBuildError: If any batch fails; no partial index is returned
        """
        logger = logger or logging.getLogger(__name__)
        builder = PaginatedIndexBuilder(
            batch_fetch, retry_policy=retry_policy, batch_size=batch_size, label=label, logger=logger
        )
        with tqdm(
            desc=f"Indexing {label or 'names'}",
            unit="name",
            bar_format=TQDM_BAR_FORMAT,
            leave=False,
            disable=not show_progress,
        ) as pbar:
            resources = []
            for resource in builder:
                resources.append(resource)
                pbar.update(1)

        index = cls.from_pairs(resources, label=label, logger=logger)
        with_log_context(logger, index=label, size=len(index)).info(
            f"Built up a mapping of {label or 'resource'} names : IDs ({len(index)} total)."
        )
        return index

    def get_id(self, name: str) -> int | None:
        """Return the ID for name (case- and whitespace-insensitive), or None."""
        return self._ids.get(normalize_name(name))

    def name_for(self, resource_id: int) -> str | None:
        """Reverse lookup: the normalized name indexed for resource_id."""
        return self._names_by_id.get(resource_id)

    def all_names(self) -> frozenset[str]:
        """Every normalized name, for membership checks and as a suggestion dictionary."""
        return self._all_names

    def ids(self) -> frozenset[int]:
        return frozenset(self._names_by_id)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and normalize_name(name) in self._ids

    def __len__(self) -> int:
        return len(self._ids)

    def __iter__(self) -> Iterator[str]:
        return iter(self._ids)

    def __repr__(self) -> str:
        return f"NameIndex(label={self.label!r}, size={len(self)})"
