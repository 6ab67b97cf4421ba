"""Result caches for dex-access."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable, Hashable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from dex_access.core.config import CacheConfig
from dex_access.core.constants import DEFAULT_CACHE

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


@dataclass
class CacheEntry(Generic[K, V]):
    """A stored value with its insertion and last-access times (clock seconds)."""

    key: K
    value: V
    inserted_at: float
    last_access: float


class _InFlightLoad:
    """A load shared by every concurrent requester of one key."""

    __slots__ = ("done", "value", "error", "waiters")

    def __init__(self):
        self.done = threading.Event()
        self.value: Any = None
        self.error: BaseException | None = None
        self.waiters = 0


class ResultCache(Generic[K, V]):
    """
    Thread-safe loading cache with a sliding TTL and coalesced loads.

    get(key) returns the stored value when present and fresh; otherwise it
    calls loader(key) and stores the result. Freshness is measured from the
    last access, so every hit pushes expiry back by ttl_seconds.

    Thread Safety:
    - One cache-wide lock guards the entry and in-flight tables only; it is
      never held while the loader runs
    - Concurrent misses for the same key wait on a single in-flight load
    - Failed loads are not stored; each waiter receives the loader's exception

    Example:
        cache = ResultCache(lambda species_id: policy.call(client.get_pokemon_species, species_id))
        sneasel = cache.get(215)
    """

    def __init__(
        self,
        loader: Callable[[K], V],
        config: CacheConfig | None = None,
        name: str | None = None,
        logger: logging.Logger | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize the cache

        Args:
            loader: Function producing the value for a key on a miss
            config: TTL, size bound and enable flag (default: DEFAULT_CACHE)
            name: Label used in log messages (default: loader name)
            logger: Logger instance for cache events (default: module logger)
            clock: Monotonic time source in seconds (injectable for tests)
        """
        self.config = config or DEFAULT_CACHE
        self.name = name or getattr(loader, "__name__", "cache")
        self.logger = logger or logging.getLogger(__name__)
        self._loader = loader
        self._clock = clock

        self._entries: dict[K, CacheEntry[K, V]] = {}
        self._in_flight: dict[K, _InFlightLoad] = {}
        self._lock = threading.Lock()

        # Statistics
        self._hits = 0
        self._misses = 0
        self._loads = 0
        self._load_failures = 0
        self._coalesced = 0
        self._evictions = 0
        self._expirations = 0

    @property
    def ttl_seconds(self) -> float:
        return self.config.ttl_seconds

    def get(self, key: K) -> V:
        """
        Return the value for key, loading it on a miss or after expiry.

        Raises:
            Whatever the loader raises; nothing is stored in that case
        """
        debug_enabled = self.logger.isEnabledFor(logging.DEBUG)

        with self._lock:
            now = self._clock()
            entry = self._entries.get(key)
            if entry is not None:
                if now - entry.last_access <= self.config.ttl_seconds:
                    entry.last_access = now
                    self._hits += 1
                    return entry.value
                del self._entries[key]
                self._expirations += 1
                if debug_enabled:
                    self.logger.debug(f"Cache EXPIRED: {self.name}[{key}] (idle {now - entry.last_access:.1f}s)")

            self._misses += 1
            pending = self._in_flight.get(key)
            if pending is None:
                pending = _InFlightLoad()
                self._in_flight[key] = pending
                owner = True
            else:
                pending.waiters += 1
                self._coalesced += 1
                owner = False

        if not owner:
            if debug_enabled:
                self.logger.debug(f"Cache WAIT: {self.name}[{key}] joins in-flight load")
            pending.done.wait()
            if pending.error is not None:
                raise pending.error
            return pending.value

        return self._load(key, pending, debug_enabled)

    def _load(self, key: K, pending: _InFlightLoad, debug_enabled: bool) -> V:
        """Run the loader for key and publish the outcome to all waiters."""
        try:
            value = self._loader(key)
        except BaseException as e:
            with self._lock:
                self._load_failures += 1
                self._in_flight.pop(key, None)
            pending.error = e
            pending.done.set()
            if debug_enabled:
                self.logger.debug(f"Cache LOAD FAILED: {self.name}[{key}]: {e!s}")
            raise

        with self._lock:
            self._loads += 1
            if self.config.enabled:
                if self.config.max_size is not None and key not in self._entries:
                    while len(self._entries) >= self.config.max_size and self._entries:
                        self._evict_lru(debug_enabled)
                now = self._clock()
                self._entries[key] = CacheEntry(key=key, value=value, inserted_at=now, last_access=now)
            self._in_flight.pop(key, None)
        pending.value = value
        pending.done.set()
        if debug_enabled:
            self.logger.debug(f"Cache STORE: {self.name}[{key}]")
        return value

    def _evict_lru(self, debug_enabled: bool = False) -> None:
        """Evict the least recently accessed entry (must be called within lock)."""
        lru_key = min(self._entries.values(), key=lambda entry: entry.last_access).key
        del self._entries[lru_key]
        self._evictions += 1
        if debug_enabled:
            self.logger.debug(f"Cache EVICT: {self.name}[{lru_key}] (total evictions: {self._evictions})")

    def peek(self, key: K) -> V | None:
        """Return a fresh stored value without loading or resetting its TTL."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None or self._clock() - entry.last_access > self.config.ttl_seconds:
                return None
            return entry.value

    def __contains__(self, key: object) -> bool:
        with self._lock:
            entry = self._entries.get(key)  # type: ignore[call-overload]
            return entry is not None and self._clock() - entry.last_access <= self.config.ttl_seconds

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def invalidate(self, key: K) -> bool:
        """Drop one entry. Returns True if something was removed."""
        with self._lock:
            return self._entries.pop(key, None) is not None

    def purge_expired(self) -> int:
        """Remove every expired entry now and return how many were dropped."""
        with self._lock:
            now = self._clock()
            expired = [k for k, e in self._entries.items() if now - e.last_access > self.config.ttl_seconds]
            for key in expired:
                del self._entries[key]
            self._expirations += len(expired)
            return len(expired)

    def clear(self) -> None:
        """Clear all cache entries (in-flight loads still complete for their waiters)"""
        with self._lock:
            self._entries.clear()
            self.logger.debug(f"Cache cleared: {self.name}")

    def get_statistics(self) -> dict[str, Any]:
        """
        Get cache performance statistics

        Returns:
            Dict with hits, misses, loads, load_failures, coalesced, evictions,
            expirations, size and hit_rate
        """
        with self._lock:
            total_requests = self._hits + self._misses
            hit_rate = (self._hits / total_requests * 100) if total_requests > 0 else 0

            return {
                "name": self.name,
                "hits": self._hits,
                "misses": self._misses,
                "loads": self._loads,
                "load_failures": self._load_failures,
                "coalesced": self._coalesced,
                "evictions": self._evictions,
                "expirations": self._expirations,
                "size": len(self._entries),
                "max_size": self.config.max_size,
                "hit_rate": hit_rate,
                "total_requests": total_requests,
            }

    def log_statistics(self) -> None:
        """Log cache statistics. Only logs if there have been cache requests."""
        stats = self.get_statistics()
        if stats["total_requests"] == 0:
            self.logger.debug(f"Cache statistics ({self.name}): No requests recorded")
            return

        self.logger.info(
            f"Cache Statistics ({self.name}): {stats['hits']}/{stats['total_requests']} hits "
            f"({stats['hit_rate']:.1f}% hit rate)"
        )
        self.logger.info(f"  - Loads: {stats['loads']} ({stats['load_failures']} failed, {stats['coalesced']} coalesced)")
        if stats["evictions"] or stats["expirations"]:
            self.logger.info(f"  - Evictions: {stats['evictions']}, expirations: {stats['expirations']}")
