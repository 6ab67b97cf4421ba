"""Tests for the PokeAPI HTTP client"""
import httpx
import pytest

from dex_access.api.client import PokeApiClient
from dex_access.api.pagination import NamedResource
from dex_access.api.registry import ResourceKind, collect_capabilities
from dex_access.core.config import ClientConfig
from dex_access.core.exceptions import DexAccessError, ResourceNotFoundError, RetryableHTTPError

BASE_URL = "https://pokeapi.co/api/v2"


def make_client(handler):
    http_client = httpx.Client(base_url=BASE_URL, transport=httpx.MockTransport(handler))
    return PokeApiClient(http_client=http_client)


class TestSingleResources:
    """Test fetch-by-ID requests"""

    def test_get_species(self):
        """Test the request path and JSON decoding"""
        seen = []

        def handler(request):
            seen.append(request.url.path)
            return httpx.Response(200, json={"id": 215, "name": "sneasel"})

        client = make_client(handler)

        assert client.get_pokemon_species(215) == {"id": 215, "name": "sneasel"}
        assert seen == ["/api/v2/pokemon-species/215/"]

    @pytest.mark.parametrize(
        "method, segment",
        [
            ("get_pokemon", "pokemon"),
            ("get_move", "move"),
            ("get_nature", "nature"),
            ("get_ability", "ability"),
            ("get_type", "type"),
            ("get_evolution_chain", "evolution-chain"),
        ],
    )
    def test_endpoint_per_kind(self, method, segment):
        """Test that each fetch method hits its endpoint"""
        seen = []

        def handler(request):
            seen.append(request.url.path)
            return httpx.Response(200, json={"id": 1})

        getattr(make_client(handler), method)(1)
        assert seen == [f"/api/v2/{segment}/1/"]

    def test_not_found(self):
        """Test that 404 maps to ResourceNotFoundError"""
        client = make_client(lambda request: httpx.Response(404, text="Not Found"))

        with pytest.raises(ResourceNotFoundError) as exc_info:
            client.get_move(99999)
        assert exc_info.value.resource_id == 99999
        assert exc_info.value.kind == ResourceKind.MOVE
        assert str(exc_info.value) == "move #99999 not found"

    @pytest.mark.parametrize("status", [408, 429, 500, 502, 503, 504])
    def test_retryable_statuses(self, status):
        """Test that gateway and throttling errors are transient"""
        client = make_client(lambda request: httpx.Response(status))

        with pytest.raises(RetryableHTTPError) as exc_info:
            client.get_nature(1)
        assert exc_info.value.status_code == status

    def test_other_http_errors(self):
        """Test that non-retryable statuses raise DexAccessError"""
        client = make_client(lambda request: httpx.Response(403))

        with pytest.raises(DexAccessError, match="HTTP 403"):
            client.get_type(1)

    def test_unreadable_payload(self):
        """Test that a non-JSON body raises DexAccessError chained from the decode error"""
        client = make_client(lambda request: httpx.Response(200, text="<html>maintenance</html>"))

        with pytest.raises(DexAccessError, match="unreadable payload: GET /move/1/") as exc_info:
            client.get_move(1)
        assert isinstance(exc_info.value.__cause__, ValueError)

    def test_transport_errors_propagate(self):
        """Test that connection failures surface as httpx errors"""

        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(httpx.TransportError):
            make_client(handler).get_ability(1)


class TestListings:
    """Test paginated listing requests"""

    def test_list_resources(self):
        """Test offset/limit parameters and page parsing"""
        seen = []

        def handler(request):
            seen.append((request.url.path, dict(request.url.params)))
            return httpx.Response(
                200,
                json={
                    "count": 1025,
                    "next": f"{BASE_URL}/pokemon-species/?offset=300&limit=100",
                    "results": [{"name": "sneasel", "url": f"{BASE_URL}/pokemon-species/215/"}],
                },
            )

        page = make_client(handler).get_pokemon_species_list(200, 100)

        assert seen == [("/api/v2/pokemon-species/", {"offset": "200", "limit": "100"})]
        assert page.items == (NamedResource(name="sneasel", id=215),)
        assert page.has_next is True

    def test_list_fetcher(self):
        """Test the (offset, limit) listing function for a kind"""

        def handler(request):
            return httpx.Response(200, json={"next": None, "results": []})

        fetch = make_client(handler).list_fetcher(ResourceKind.NATURE)
        assert fetch.__name__ == "list_nature"
        assert fetch(0, 100).has_next is False


class TestClientLifecycle:
    """Test construction and cleanup"""

    def test_capabilities(self):
        """Test that the client advertises one fetch per kind"""
        client = make_client(lambda request: httpx.Response(200, json={}))
        kinds = [kind for kind, _ in collect_capabilities(client)]

        assert sorted(kinds) == sorted(ResourceKind)
        assert len(kinds) == len(set(kinds))

    def test_owned_client_is_closed(self):
        """Test that close() shuts an internally created httpx client"""
        with PokeApiClient(ClientConfig(base_url=BASE_URL)) as client:
            http = client._http
        assert http.is_closed

    def test_injected_client_is_left_open(self):
        """Test that an injected httpx client is the caller's to close"""
        http_client = httpx.Client(transport=httpx.MockTransport(lambda request: httpx.Response(200)))
        PokeApiClient(http_client=http_client).close()
        assert not http_client.is_closed
        http_client.close()

    def test_default_headers(self):
        """Test the User-Agent header from config"""
        client = PokeApiClient(ClientConfig(user_agent="dex-tests/1.0"))
        try:
            assert client._http.headers["User-Agent"] == "dex-tests/1.0"
            assert str(client._http.base_url).rstrip("/") == BASE_URL
        finally:
            client.close()
