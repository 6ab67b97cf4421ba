"""PokeAPI HTTP client for dex-access.

This is the raw fetch source the registry and name indexes are built on.
It performs single requests only: retries and caching are layered on top by
RetryPolicy and ResultCache.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

import httpx

from dex_access.api.pagination import PageResult
from dex_access.api.registry import ResourceKind, provides
from dex_access.core.config import ClientConfig
from dex_access.core.constants import RETRYABLE_STATUS_CODES
from dex_access.core.exceptions import DexAccessError, ResourceNotFoundError, RetryableHTTPError

Resource = dict[str, Any]


class PokeApiClient:
    """
    Blocking PokeAPI client over httpx.

    Single-resource methods are marked with @provides so
    AccessorRegistry.from_client() can discover them. Errors are mapped to
    the library taxonomy:

    - 404 -> ResourceNotFoundError (never retried)
    - 408/429/5xx gateway errors -> RetryableHTTPError (retried)
    - other HTTP errors and non-JSON bodies -> DexAccessError
    - httpx.TransportError propagates unchanged (retried)

    Usage:
        with PokeApiClient() as client:
            sneasel = client.get_pokemon_species(215)
    """

    def __init__(
        self,
        config: ClientConfig | None = None,
        http_client: httpx.Client | None = None,
        logger: logging.Logger | None = None,
    ):
        self.config = config or ClientConfig()
        self.logger = logger or logging.getLogger(__name__)
        self._owns_http_client = http_client is None
        self._http = http_client or httpx.Client(
            base_url=self.config.base_url,
            timeout=httpx.Timeout(self.config.timeout),
            headers={"User-Agent": self.config.user_agent},
            follow_redirects=True,
        )

    def __enter__(self) -> PokeApiClient:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def close(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_http_client:
            self._http.close()

    def _request(
        self,
        path: str,
        params: dict[str, Any] | None = None,
        kind: ResourceKind | None = None,
        resource_id: int | None = None,
    ) -> Resource:
        response = self._http.get(path, params=params)
        status = response.status_code
        if status == 404:
            raise ResourceNotFoundError(resource_id if resource_id is not None else path, kind=kind)
        if status in RETRYABLE_STATUS_CODES:
            raise RetryableHTTPError(status, f"GET {path}")
        if status >= 400:
            raise DexAccessError(f"PokeAPI request failed: GET {path}", details=f"HTTP {status}")
        self.logger.debug(f"GET {path} -> {status}")
        try:
            return response.json()
        except ValueError as e:
            raise DexAccessError(f"PokeAPI returned an unreadable payload: GET {path}", details=str(e)) from e

    def get_resource(self, kind: ResourceKind, resource_id: int) -> Resource:
        """Fetch one resource of kind by ID."""
        return self._request(f"/{kind.value}/{resource_id}/", kind=kind, resource_id=resource_id)

    def list_resources(self, kind: ResourceKind, offset: int, limit: int) -> PageResult:
        """Fetch one page of the named-resource listing for kind."""
        payload = self._request(f"/{kind.value}/", params={"offset": offset, "limit": limit}, kind=kind)
        return PageResult.from_payload(payload)

    def list_fetcher(self, kind: ResourceKind) -> Callable[[int, int], PageResult]:
        """Return the ``(offset, limit) -> PageResult`` listing function for kind."""

        def fetch_page(offset: int, limit: int) -> PageResult:
            return self.list_resources(kind, offset, limit)

        fetch_page.__name__ = f"list_{kind.name.lower()}"
        return fetch_page

    # ==================== SINGLE RESOURCES ====================

    @provides(ResourceKind.SPECIES)
    def get_pokemon_species(self, species_id: int) -> Resource:
        return self.get_resource(ResourceKind.SPECIES, species_id)

    @provides(ResourceKind.POKEMON)
    def get_pokemon(self, pokemon_id: int) -> Resource:
        return self.get_resource(ResourceKind.POKEMON, pokemon_id)

    @provides(ResourceKind.MOVE)
    def get_move(self, move_id: int) -> Resource:
        return self.get_resource(ResourceKind.MOVE, move_id)

    @provides(ResourceKind.NATURE)
    def get_nature(self, nature_id: int) -> Resource:
        return self.get_resource(ResourceKind.NATURE, nature_id)

    @provides(ResourceKind.ABILITY)
    def get_ability(self, ability_id: int) -> Resource:
        return self.get_resource(ResourceKind.ABILITY, ability_id)

    @provides(ResourceKind.TYPE)
    def get_type(self, type_id: int) -> Resource:
        return self.get_resource(ResourceKind.TYPE, type_id)

    @provides(ResourceKind.EVOLUTION_CHAIN)
    def get_evolution_chain(self, chain_id: int) -> Resource:
        return self.get_resource(ResourceKind.EVOLUTION_CHAIN, chain_id)

    # ==================== LISTINGS ====================

    def get_pokemon_species_list(self, offset: int, limit: int) -> PageResult:
        return self.list_resources(ResourceKind.SPECIES, offset, limit)

    def get_pokemon_list(self, offset: int, limit: int) -> PageResult:
        return self.list_resources(ResourceKind.POKEMON, offset, limit)

    def get_move_list(self, offset: int, limit: int) -> PageResult:
        return self.list_resources(ResourceKind.MOVE, offset, limit)

    def get_nature_list(self, offset: int, limit: int) -> PageResult:
        return self.list_resources(ResourceKind.NATURE, offset, limit)

    def get_ability_list(self, offset: int, limit: int) -> PageResult:
        return self.list_resources(ResourceKind.ABILITY, offset, limit)

    def get_type_list(self, offset: int, limit: int) -> PageResult:
        return self.list_resources(ResourceKind.TYPE, offset, limit)
