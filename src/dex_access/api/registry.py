"""Typed accessor registry for dex-access.

One TypedAccessor per resource kind composes a raw ``(id) -> resource``
fetch with its own RetryPolicy and ResultCache. Registries are built from an
explicit capability descriptor (kind -> fetch function), either passed in
directly or collected from client methods marked with @provides.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable, Hashable, Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any

from dex_access.api.cache import ResultCache
from dex_access.api.resilience import RetryPolicy
from dex_access.core.config import CacheConfig, RetryConfig
from dex_access.core.exceptions import (
    DexAccessError,
    DuplicateAccessorError,
    ResourceNotFoundError,
    RetryExhaustedError,
    UnsupportedResourceKindError,
)

Fetch = Callable[[int], Any]

_CAPABILITY_ATTR = "_dex_provides"


class ResourceKind(str, Enum):
    """PokeAPI resource kinds, valued by their endpoint path segment."""

    SPECIES = "pokemon-species"
    POKEMON = "pokemon"
    MOVE = "move"
    NATURE = "nature"
    ABILITY = "ability"
    TYPE = "type"
    EVOLUTION_CHAIN = "evolution-chain"

    def __str__(self) -> str:
        return self.value


def provides(kind: Hashable) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Decorator marking a client method as the ``(id) -> resource`` fetch for kind.

    Usage:
        class Client:
            @provides(ResourceKind.NATURE)
            def get_nature(self, nature_id: int) -> dict: ...
    """

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        setattr(func, _CAPABILITY_ATTR, kind)
        return func

    return decorator


def collect_capabilities(client: object) -> list[tuple[Hashable, Fetch]]:
    """Collect (kind, bound method) pairs for every @provides method on client.

    Duplicates are returned as-is; AccessorRegistry.from_fetchers rejects them.
    """
    capabilities: list[tuple[Hashable, Fetch]] = []
    for name, member in inspect.getmembers(type(client), predicate=callable):
        if name.startswith("_"):
            continue
        kind = getattr(member, _CAPABILITY_ATTR, None)
        if kind is not None:
            capabilities.append((kind, getattr(client, name)))
    return capabilities


def _fetch_name(fetch: Fetch) -> str:
    return getattr(fetch, "__qualname__", None) or getattr(fetch, "__name__", None) or repr(fetch)


def _validate_id(resource_id: int) -> None:
    if isinstance(resource_id, bool) or not isinstance(resource_id, int):
        raise ValueError(f"Resource IDs must be integers, got {resource_id!r}")
    if resource_id < 0:
        raise ValueError(f"Resource IDs must be non-negative, got {resource_id}")


@dataclass(frozen=True)
class TypedAccessor:
    """Retry- and cache-wrapped fetch-by-ID for a single resource kind.

    Created once per registry and shared read-only by every caller.
    """

    kind: Hashable
    fetch: Fetch
    retry_policy: RetryPolicy
    cache: ResultCache

    @classmethod
    def build(
        cls,
        kind: Hashable,
        fetch: Fetch,
        retry_config: RetryConfig | None = None,
        cache_config: CacheConfig | None = None,
        retryable_exceptions: tuple[type[BaseException], ...] | None = None,
        logger: logging.Logger | None = None,
    ) -> TypedAccessor:
        """Compose a fresh RetryPolicy and ResultCache around fetch."""
        policy = RetryPolicy(retry_config, retryable_exceptions=retryable_exceptions, logger=logger)

        def load(resource_id: int) -> Any:
            return policy.call(fetch, resource_id, operation_name=f"{kind} #{resource_id}")

        cache = ResultCache(load, config=cache_config, name=str(kind), logger=logger)
        return cls(kind=kind, fetch=fetch, retry_policy=policy, cache=cache)

    def get(self, resource_id: int) -> Any:
        """Return the resource, raising ResourceNotFoundError or RetryExhaustedError on failure."""
        _validate_id(resource_id)
        return self.cache.get(resource_id)

    __call__ = get

    def invalidate(self, resource_id: int) -> bool:
        return self.cache.invalidate(resource_id)

    def statistics(self) -> dict[str, Any]:
        return self.cache.get_statistics()


class AccessorRegistry:
    """
    Holds one TypedAccessor per supported resource kind.

    get(kind, id) distinguishes "kind not supported by this registry"
    (UnsupportedResourceKindError, a programmer error) from "resource not
    available" (None).

    Example:
        registry = AccessorRegistry.from_client(client, supported_kinds=[ResourceKind.SPECIES])
        species = registry.get(ResourceKind.SPECIES, 215)
    """

    def __init__(self, accessors: Mapping[Hashable, TypedAccessor], logger: logging.Logger | None = None):
        self._accessors = MappingProxyType(dict(accessors))
        self.logger = logger or logging.getLogger(__name__)

    @classmethod
    def from_fetchers(
        cls,
        fetchers: Mapping[Hashable, Fetch] | Iterable[tuple[Hashable, Fetch]],
        supported_kinds: Iterable[Hashable] | None = None,
        retry_config: RetryConfig | None = None,
        cache_config: CacheConfig | None = None,
        retryable_exceptions: tuple[type[BaseException], ...] | None = None,
        logger: logging.Logger | None = None,
    ) -> AccessorRegistry:
        """
        Build a registry from a capability descriptor.

        Args:
            fetchers: Mapping or iterable of (kind, fetch) pairs
            supported_kinds: Kinds to build accessors for (default: every kind given)
            retry_config: Retry settings for every accessor
            cache_config: Cache settings for every accessor
            retryable_exceptions: Transient exception types (default: RETRYABLE_EXCEPTIONS)
            logger: Logger instance

        Raises:
            DuplicateAccessorError: If two fetch functions provide the same supported kind
            UnsupportedResourceKindError: If a supported kind has no fetch function
        """
        logger = logger or logging.getLogger(__name__)
        pairs = list(fetchers.items()) if isinstance(fetchers, Mapping) else list(fetchers)

        offered = list(dict.fromkeys(kind for kind, _ in pairs))
        wanted = list(dict.fromkeys(supported_kinds)) if supported_kinds is not None else offered
        for kind in wanted:
            if kind not in offered:
                raise UnsupportedResourceKindError(kind, offered)

        # Ambiguity only matters for kinds this registry will serve
        by_kind: dict[Hashable, Fetch] = {}
        for kind, fetch in pairs:
            if kind not in wanted:
                continue
            if kind in by_kind:
                raise DuplicateAccessorError(kind, [_fetch_name(by_kind[kind]), _fetch_name(fetch)])
            by_kind[kind] = fetch

        accessors = {
            kind: TypedAccessor.build(
                kind,
                by_kind[kind],
                retry_config=retry_config,
                cache_config=cache_config,
                retryable_exceptions=retryable_exceptions,
                logger=logger,
            )
            for kind in wanted
        }
        logger.info(f"Built up accessors for the following resource kinds: {[str(k) for k in accessors]}")
        return cls(accessors, logger=logger)

    @classmethod
    def from_client(
        cls,
        client: object,
        supported_kinds: Iterable[Hashable] | None = None,
        **kwargs: Any,
    ) -> AccessorRegistry:
        """Build a registry from the @provides-marked methods of client."""
        return cls.from_fetchers(collect_capabilities(client), supported_kinds=supported_kinds, **kwargs)

    @property
    def supported_kinds(self) -> frozenset[Hashable]:
        return frozenset(self._accessors)

    def supports(self, kind: Hashable) -> bool:
        return kind in self._accessors

    def accessor(self, kind: Hashable) -> TypedAccessor:
        """Return the accessor for kind or raise UnsupportedResourceKindError."""
        try:
            return self._accessors[kind]
        except KeyError:
            raise UnsupportedResourceKindError(kind, self._accessors) from None

    def get(self, kind: Hashable, resource_id: int) -> Any | None:
        """
        Fetch a resource by kind and ID.

        Returns:
            The resource, or None when it is not found, retries were exhausted,
            or the fetch failed with any other DexAccessError

        Raises:
            UnsupportedResourceKindError: If no accessor exists for kind
            ValueError: If resource_id is not a non-negative integer
        """
        accessor = self.accessor(kind)
        try:
            return accessor.get(resource_id)
        except ResourceNotFoundError:
            self.logger.debug(f"{kind} #{resource_id} not found")
            return None
        except RetryExhaustedError as e:
            self.logger.warning(f"Giving up on {kind} #{resource_id}: {e}")
            return None
        except DexAccessError as e:
            self.logger.warning(f"Failed to fetch {kind} #{resource_id}: {e}")
            return None

    def get_statistics(self) -> dict[str, dict[str, Any]]:
        """Per-kind cache statistics."""
        return {str(kind): accessor.statistics() for kind, accessor in self._accessors.items()}

    def __contains__(self, kind: object) -> bool:
        return kind in self._accessors

    def __repr__(self) -> str:
        return f"AccessorRegistry(kinds={sorted(str(k) for k in self._accessors)})"
