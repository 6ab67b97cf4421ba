"""Dex facade: wires the registry, name indexes and resolvers together.

Everything is built explicitly up front and then shared read-only:

    config = DexConfig.from_env()
    setup_logging(config=config.log)
    with Dex.from_config(config) as dex:
        result = dex.lookup(ResourceKind.SPECIES, "Sneasel")
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Hashable, Iterable, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

import httpx

from dex_access.api.client import PokeApiClient
from dex_access.api.registry import AccessorRegistry, ResourceKind
from dex_access.api.resilience import RetryPolicy
from dex_access.core.config import DexConfig, SuggestConfig
from dex_access.core.exceptions import ConfigurationError
from dex_access.lookup.names import NameIndex
from dex_access.lookup.resolver import NameResolver, Resolution

DEFAULT_KINDS: tuple[ResourceKind, ...] = (
    ResourceKind.SPECIES,
    ResourceKind.POKEMON,
    ResourceKind.MOVE,
    ResourceKind.NATURE,
    ResourceKind.ABILITY,
    ResourceKind.TYPE,
    ResourceKind.EVOLUTION_CHAIN,
)

DEFAULT_INDEXED_KINDS: tuple[ResourceKind, ...] = (
    ResourceKind.SPECIES,
    ResourceKind.MOVE,
    ResourceKind.NATURE,
    ResourceKind.ABILITY,
    ResourceKind.TYPE,
)


@dataclass(frozen=True)
class LookupResult:
    """A resolved name plus the fetched resource (None when unresolved or unavailable)."""

    resolution: Resolution
    resource: Any | None = None

    @property
    def found(self) -> bool:
        return self.resource is not None


class Dex:
    """
    Read-only access to resources by ID or by name.

    Args:
        registry: Typed accessors per resource kind
        indexes: Name indexes per resource kind
        suggest_config: Suggestion limits used by the resolvers
        logger: Logger instance
        client: Client owned by this Dex and closed by close() (set by from_config)
    """

    def __init__(
        self,
        registry: AccessorRegistry,
        indexes: Mapping[Hashable, NameIndex],
        suggest_config: SuggestConfig | None = None,
        logger: logging.Logger | None = None,
        client: PokeApiClient | None = None,
    ):
        self.registry = registry
        self.indexes = MappingProxyType(dict(indexes))
        self.suggest_config = suggest_config or SuggestConfig()
        self.logger = logger or logging.getLogger(__name__)
        self.client = client
        self._resolvers: dict[Hashable, NameResolver] = {}
        self._resolver_lock = threading.Lock()

    @classmethod
    def from_config(
        cls,
        config: DexConfig | None = None,
        kinds: Iterable[ResourceKind] = DEFAULT_KINDS,
        indexed_kinds: Iterable[ResourceKind] = DEFAULT_INDEXED_KINDS,
        show_progress: bool | None = None,
        http_client: httpx.Client | None = None,
        logger: logging.Logger | None = None,
    ) -> Dex:
        """
        Create a PokeApiClient from config.client and build a Dex that owns it.

        Close the returned Dex (or use it as a context manager) to release
        the client.
        """
        config = config or DexConfig()
        client = PokeApiClient(config.client, http_client=http_client, logger=logger)
        try:
            dex = cls.from_client(
                client,
                config=config,
                kinds=kinds,
                indexed_kinds=indexed_kinds,
                show_progress=show_progress,
                logger=logger,
            )
        except Exception:
            client.close()
            raise
        dex.client = client
        return dex

    @classmethod
    def from_client(
        cls,
        client: PokeApiClient,
        config: DexConfig | None = None,
        kinds: Iterable[ResourceKind] = DEFAULT_KINDS,
        indexed_kinds: Iterable[ResourceKind] = DEFAULT_INDEXED_KINDS,
        show_progress: bool | None = None,
        logger: logging.Logger | None = None,
    ) -> Dex:
        """
        Build the registry and every name index synchronously.

        Raises:
            DuplicateAccessorError: If the client provides a kind twice
            UnsupportedResourceKindError: If the client lacks a requested kind
            IndexBuildError: If a listing cannot be drained
        """
        config = config or DexConfig()
        logger = logger or logging.getLogger(__name__)
        if show_progress is None:
            show_progress = config.index.show_progress

        registry = AccessorRegistry.from_client(
            client,
            supported_kinds=kinds,
            retry_config=config.retry,
            cache_config=config.cache,
            logger=logger,
        )

        policy = RetryPolicy(config.retry, logger=logger)
        indexes = {
            kind: NameIndex.build(
                client.list_fetcher(kind),
                retry_policy=policy,
                batch_size=config.index.batch_size,
                label=str(kind),
                show_progress=show_progress,
                logger=logger,
            )
            for kind in indexed_kinds
        }
        return cls(registry, indexes, suggest_config=config.suggest, logger=logger)

    def index(self, kind: Hashable) -> NameIndex:
        try:
            return self.indexes[kind]
        except KeyError:
            raise ConfigurationError(f"No name index was built for '{kind}'", field="indexed_kinds") from None

    def resolver(self, kind: Hashable) -> NameResolver:
        """Return the resolver for kind; its suggestion dictionary is built once."""
        with self._resolver_lock:
            resolver = self._resolvers.get(kind)
            if resolver is None:
                resolver = NameResolver(self.index(kind), suggest_config=self.suggest_config)
                self._resolvers[kind] = resolver
            return resolver

    def get(self, kind: Hashable, resource_id: int) -> Any | None:
        return self.registry.get(kind, resource_id)

    def lookup(self, kind: Hashable, name: str) -> LookupResult:
        """Resolve name to an ID, then fetch it. Suggestions are attached on a miss."""
        resolution = self.resolver(kind).resolve(name)
        if not resolution.found:
            self.logger.debug(f"No {kind} named '{name}'; suggestions: {list(resolution.suggestions)}")
            return LookupResult(resolution)
        return LookupResult(resolution, self.get(kind, resolution.resource_id))

    def hint(self, kind: Hashable, guess: str) -> str | None:
        return self.resolver(kind).hint(guess)

    def get_statistics(self) -> dict[str, Any]:
        return {
            "cache": self.registry.get_statistics(),
            "indexes": {str(kind): len(index) for kind, index in self.indexes.items()},
        }

    def close(self) -> None:
        """Close the client created by from_config(), if any."""
        if self.client is not None:
            self.client.close()

    def __enter__(self) -> Dex:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
