"""End-to-end tests for the Dex facade over a mocked PokeAPI"""
import re
from unittest.mock import patch

import httpx
import pytest

from dex_access.api.client import PokeApiClient
from dex_access.api.registry import ResourceKind
from dex_access.core.config import ClientConfig, DexConfig, IndexConfig, RetryConfig
from dex_access.core.exceptions import ConfigurationError, IndexBuildError
from dex_access.dex import DEFAULT_KINDS, Dex, LookupResult

BASE_URL = "https://pokeapi.co/api/v2"
DETAIL_PATH = re.compile(r"^/api/v2/(?P<kind>[a-z-]+)/(?P<id>\d+)/$")
LIST_PATH = re.compile(r"^/api/v2/(?P<kind>[a-z-]+)/$")

NATURES = ["hardy", "bold", "modest", "calm", "timid"]


class FakePokeApi:
    """Serves listings and detail documents for species and natures"""

    def __init__(self, species_names):
        self.listings = {"pokemon-species": list(species_names), "nature": NATURES}
        self.requests = []
        self.detail_failures = 0

    def __call__(self, request):
        path = request.url.path
        self.requests.append(path)

        match = LIST_PATH.match(path)
        if match:
            names = self.listings[match.group("kind")]
            offset = int(request.url.params["offset"])
            limit = int(request.url.params["limit"])
            end = offset + limit
            return httpx.Response(
                200,
                json={
                    "count": len(names),
                    "next": f"https://pokeapi.co{path}?offset={end}&limit={limit}" if end < len(names) else None,
                    "results": [
                        {"name": name, "url": f"https://pokeapi.co{path}{offset + i + 1}/"}
                        for i, name in enumerate(names[offset:end])
                    ],
                },
            )

        match = DETAIL_PATH.match(path)
        if match:
            if self.detail_failures:
                self.detail_failures -= 1
                return httpx.Response(503)
            names = self.listings.get(match.group("kind"), [])
            resource_id = int(match.group("id"))
            if not 1 <= resource_id <= len(names):
                return httpx.Response(404, text="Not Found")
            return httpx.Response(200, json={"id": resource_id, "name": names[resource_id - 1]})

        return httpx.Response(404)

    def count(self, prefix):
        return sum(1 for path in self.requests if path.startswith(prefix))


@pytest.fixture
def fake_api(pokemon_names):
    return FakePokeApi(pokemon_names)


@pytest.fixture
def config():
    return DexConfig(
        retry=RetryConfig(base_delay=0.01, max_delay=0.01, max_elapsed=0.05),
        index=IndexConfig(batch_size=100),
    )


@pytest.fixture
def dex(fake_api, config):
    http_client = httpx.Client(base_url=BASE_URL, transport=httpx.MockTransport(fake_api))
    with PokeApiClient(http_client=http_client) as client:
        yield Dex.from_client(
            client,
            config=config,
            kinds=[ResourceKind.SPECIES, ResourceKind.NATURE],
            indexed_kinds=[ResourceKind.SPECIES, ResourceKind.NATURE],
        )
    http_client.close()


class TestDexConstruction:
    """Test Dex.from_client()"""

    def test_indexes_are_built_up_front(self, dex, fake_api):
        """Test that every indexed listing is drained during construction"""
        assert len(dex.index(ResourceKind.SPECIES)) == 251
        assert len(dex.index(ResourceKind.NATURE)) == 5
        assert fake_api.count("/api/v2/pokemon-species/") == 3
        assert fake_api.count("/api/v2/nature/") == 1

    def test_missing_index_is_a_configuration_error(self, dex):
        """Test asking for a kind that was not indexed"""
        with pytest.raises(ConfigurationError, match="No name index"):
            dex.index(ResourceKind.MOVE)

    def test_listing_failure_fails_construction(self, pokemon_names, config):
        """Test that an unavailable listing aborts the whole build"""

        def handler(request):
            if request.url.path == "/api/v2/nature/":
                return httpx.Response(503)
            return FakePokeApi(pokemon_names)(request)

        http_client = httpx.Client(base_url=BASE_URL, transport=httpx.MockTransport(handler))
        client = PokeApiClient(http_client=http_client)
        with pytest.raises(IndexBuildError, match="'nature' index"):
            Dex.from_client(
                client,
                config=config,
                kinds=[ResourceKind.SPECIES, ResourceKind.NATURE],
                indexed_kinds=[ResourceKind.SPECIES, ResourceKind.NATURE],
            )
        http_client.close()


class TestDexLookup:
    """Test by-name and by-ID access"""

    def test_lookup_by_name(self, dex):
        """Test that a name resolves and the resource is fetched"""
        result = dex.lookup(ResourceKind.SPECIES, "Sneasel")

        assert isinstance(result, LookupResult)
        assert result.found is True
        assert result.resolution.resource_id == 215
        assert result.resource == {"id": 215, "name": "sneasel"}

    def test_lookup_miss_returns_suggestions(self, dex, fake_api):
        """Test that an unknown name yields suggestions and no fetch"""
        before = len(fake_api.requests)
        result = dex.lookup(ResourceKind.SPECIES, "nseasel")

        assert result.found is False
        assert result.resource is None
        assert result.resolution.suggestions == ("sneasel",)
        assert len(fake_api.requests) == before

    def test_get_is_cached(self, dex, fake_api):
        """Test that repeated fetches hit the API once"""
        dex.get(ResourceKind.NATURE, 3)
        dex.get(ResourceKind.NATURE, 3)
        assert fake_api.count("/api/v2/nature/3/") == 1

    def test_get_not_found_is_none(self, dex):
        """Test that a missing ID maps to None"""
        assert dex.get(ResourceKind.SPECIES, 9999) is None

    def test_transient_failure_is_retried(self, dex, fake_api):
        """Test that a 503 is retried before succeeding"""
        fake_api.detail_failures = 1
        assert dex.get(ResourceKind.NATURE, 2) == {"id": 2, "name": "bold"}
        assert fake_api.count("/api/v2/nature/2/") == 2

    def test_hint(self, dex):
        """Test guess hints against the species index"""
        assert dex.hint(ResourceKind.SPECIES, "sneasl") == "sneasel"
        assert dex.hint(ResourceKind.SPECIES, "sneasel") is None

    def test_resolver_is_cached(self, dex):
        """Test that the suggestion dictionary is built once per kind"""
        assert dex.resolver(ResourceKind.NATURE) is dex.resolver(ResourceKind.NATURE)

    def test_statistics(self, dex):
        """Test the combined statistics view"""
        dex.get(ResourceKind.NATURE, 1)
        stats = dex.get_statistics()

        assert stats["cache"]["nature"]["loads"] == 1
        assert stats["indexes"] == {"pokemon-species": 251, "nature": 5}


class TestDexFromConfig:
    """Test Dex.from_config()"""

    def test_builds_client_from_config(self, fake_api, config):
        """Test that the client section drives the created PokeApiClient"""
        http_client = httpx.Client(base_url=BASE_URL, transport=httpx.MockTransport(fake_api))

        with Dex.from_config(
            config,
            kinds=[ResourceKind.NATURE],
            indexed_kinds=[ResourceKind.NATURE],
            http_client=http_client,
        ) as dex:
            assert dex.client.config is config.client
            assert dex.lookup(ResourceKind.NATURE, "Calm").resource == {"id": 4, "name": "calm"}
        http_client.close()

    def test_owns_and_closes_its_client(self):
        """Test base URL and timeout come from config and the client is closed on exit"""
        config = DexConfig(client=ClientConfig(base_url="http://localhost:8000/api/v2", timeout=5.0))

        with Dex.from_config(config, indexed_kinds=()) as dex:
            assert str(dex.client._http.base_url) == "http://localhost:8000/api/v2/"
            assert dex.client._http.timeout.read == 5.0
            assert dex.registry.supported_kinds == frozenset(DEFAULT_KINDS)

        assert dex.client._http.is_closed

    def test_client_closed_when_construction_fails(self):
        """Test that a failed build releases the client it created"""
        with patch("dex_access.dex.PokeApiClient") as mock_client_class:
            with patch.object(Dex, "from_client", side_effect=ConfigurationError("boom")):
                with pytest.raises(ConfigurationError):
                    Dex.from_config(DexConfig())

        mock_client_class.return_value.close.assert_called_once()

    def test_from_client_does_not_close_callers_client(self, fake_api, config):
        """Test that a Dex built from an existing client leaves it open"""
        http_client = httpx.Client(base_url=BASE_URL, transport=httpx.MockTransport(fake_api))
        client = PokeApiClient(http_client=http_client)

        with Dex.from_client(client, config=config, kinds=[ResourceKind.NATURE], indexed_kinds=()) as dex:
            assert dex.client is None

        assert not http_client.is_closed
        http_client.close()
