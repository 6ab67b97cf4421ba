"""Paginated listing traversal for dex-access.

A listing endpoint is consumed through a batch-fetch function
``(offset, limit) -> PageResult``. PaginatedIndexBuilder turns it into a
restartable, lazy iterable of NamedResource items.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from dex_access.api.resilience import RetryPolicy
from dex_access.core.constants import DEFAULT_BATCH_SIZE
from dex_access.core.exceptions import ConfigurationError, IndexBuildError


@dataclass(frozen=True)
class NamedResource:
    """A (name, id) pair from a listing page."""

    name: str
    id: int

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> NamedResource:
        """Parse a PokeAPI ``{"name": ..., "url": ".../<id>/"}`` entry."""
        name = payload["name"]
        if "id" in payload:
            return cls(name=name, id=int(payload["id"]))
        url = str(payload["url"]).rstrip("/")
        try:
            resource_id = int(url.rsplit("/", 1)[-1])
        except ValueError as e:
            raise ValueError(f"Cannot parse a resource ID from URL {payload['url']!r}") from e
        return cls(name=name, id=resource_id)


@dataclass(frozen=True)
class PageResult:
    """One batch of a listing, plus whether another batch follows."""

    items: Sequence[NamedResource]
    has_next: bool

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> PageResult:
        """Parse a PokeAPI listing response (``results`` and ``next``)."""
        results = payload.get("results") or []
        return cls(
            items=tuple(NamedResource.from_payload(item) for item in results),
            has_next=payload.get("next") is not None,
        )


BatchFetch = Callable[[int, int], PageResult]


class PageCursor(Iterator[NamedResource]):
    """
    Single forward traversal over a paginated listing.

    Batches are requested lazily. Once a batch reports no next page and its
    items are consumed the cursor is terminal: has_more() keeps returning
    False without touching the network again.
    """

    def __init__(
        self,
        batch_fetch: BatchFetch,
        retry_policy: RetryPolicy,
        batch_size: int,
        label: str | None = None,
    ):
        self._batch_fetch = batch_fetch
        self._retry_policy = retry_policy
        self._batch_size = batch_size
        self._label = label
        self._batch: Iterator[NamedResource] | None = None
        self._lookahead: list[NamedResource] = []
        self._exhausted = False
        self.offset = 0
        self.batches_fetched = 0

    @property
    def exhausted(self) -> bool:
        """True once the final batch was fetched (items may still be buffered)."""
        return self._exhausted

    def has_more(self) -> bool:
        """Return True if another item is available, fetching batches as needed."""
        while True:
            if self._lookahead:
                return True
            if self._batch is not None:
                item = next(self._batch, None)
                if item is not None:
                    self._lookahead.append(item)
                    return True
            # Short-circuit so repeated checks never re-query a finished listing
            if self._exhausted:
                return False
            self._fetch_next_batch()

    def __next__(self) -> NamedResource:
        if not self.has_more():
            raise StopIteration
        return self._lookahead.pop()

    def _fetch_next_batch(self) -> None:
        offset = self.offset
        operation = f"{self._label or 'listing'} batch @{offset}"
        try:
            page = self._retry_policy.call(self._batch_fetch, offset, self._batch_size, operation_name=operation)
        except Exception as e:
            raise IndexBuildError(offset, e, label=self._label) from e

        self.offset += self._batch_size
        self.batches_fetched += 1
        self._batch = iter(page.items)
        self._exhausted = not page.has_next


class PaginatedIndexBuilder:
    """
    Restartable, finite, lazily evaluated view of a paginated listing.

    Every iter() starts a fresh PageCursor at offset 0 and re-issues the
    batch requests; results are not cached here. NameIndex.build() drains
    one traversal into an immutable mapping.

    Args:
        batch_fetch: ``(offset, limit) -> PageResult``
        retry_policy: Policy wrapped around each batch request (default: RetryPolicy())
        batch_size: Items requested per batch (default: 100)
        label: Name of the listing for logs and errors
        logger: Logger instance
    """

    def __init__(
        self,
        batch_fetch: BatchFetch,
        retry_policy: RetryPolicy | None = None,
        batch_size: int = DEFAULT_BATCH_SIZE,
        label: str | None = None,
        logger: logging.Logger | None = None,
    ):
        if batch_size < 1:
            raise ConfigurationError(f"Batch size must be positive, got {batch_size}", field="batch_size")
        self.batch_fetch = batch_fetch
        self.retry_policy = retry_policy or RetryPolicy(logger=logger)
        self.batch_size = batch_size
        self.label = label
        self.logger = logger or logging.getLogger(__name__)

    def __iter__(self) -> PageCursor:
        self.logger.debug(f"Starting traversal of {self.label or 'listing'} (batch size {self.batch_size})")
        return PageCursor(self.batch_fetch, self.retry_policy, self.batch_size, label=self.label)
