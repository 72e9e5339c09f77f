"""Tests for the HTTP API."""

import httpx
import pytest
from fastapi.testclient import TestClient

from conftest import FakeGeocoder, candidate
from makazi.dependencies import get_catalog, get_http_client, get_resolver
from makazi.main import app
from makazi.services.catalog import DEFAULT_CATALOG
from makazi.services.location_errors import GeocodeProviderError
from makazi.services.location_resolver import LocationResolver


@pytest.fixture
def geocoder():
    return FakeGeocoder([candidate(-0.2736, 36.1121, "Hyrax Hill Museum")])


@pytest.fixture
def client(geocoder):
    app.dependency_overrides[get_catalog] = lambda: DEFAULT_CATALOG
    app.dependency_overrides[get_resolver] = lambda: LocationResolver(DEFAULT_CATALOG, geocoder)
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


class TestHealth:
    """Tests for the health endpoint."""

    def test_health(self, client):
        """Test the service reports ok and the catalog size."""
        r = client.get("/health")
        assert r.status_code == 200
        assert r.json() == {"status": "ok", "catalog_size": 2}


class TestFindNearby:
    """Tests for POST /find-nearby."""

    def test_map_link(self, client, geocoder):
        """Test a map link returns the point and nearby listings."""
        r = client.post("/find-nearby", json={"location_reference": "https://maps.google/maps/@-0.2838,36.0725,15z"})

        assert r.status_code == 200
        body = r.json()
        assert body["latitude"] == -0.2838
        assert body["longitude"] == 36.0725
        assert body["strategy"] == "at_sign"
        assert body["nearby"][0] == {"id": 1, "title": "Kabarak University Town Campus", "distance_km": 0.0}
        assert r.headers["X-Strategy"] == "at_sign"
        assert geocoder.calls == []

    def test_url_alias(self, client):
        """Test the legacy 'url' field is accepted."""
        r = client.post("/find-nearby", json={"url": "https://maps.google.com/?q=-0.27,36.11"})
        assert r.status_code == 200
        assert r.json()["strategy"] == "query_param"

    def test_place_link(self, client, geocoder):
        """Test a /place/ link goes through the geocoder."""
        r = client.post("/find-nearby", json={"url": "https://www.google.com/maps/place/Hyrax+Hill+Museum/"})
        assert r.status_code == 200
        assert r.json()["strategy"] == "geocode"
        assert geocoder.calls == ["Hyrax Hill Museum"]

    def test_unresolvable(self, client):
        """Test an unresolvable reference returns the generic error."""
        r = client.post("/find-nearby", json={"location_reference": "behind the big mall"})
        assert r.status_code == 400
        assert r.json() == {"error": "could not extract or find coordinates"}

    def test_provider_error_detail_hidden(self, client):
        """Test provider failures are reported without upstream detail."""
        failing = FakeGeocoder(error=GeocodeProviderError("secret upstream detail", status_code=503))
        app.dependency_overrides[get_resolver] = lambda: LocationResolver(DEFAULT_CATALOG, failing)

        r = client.post("/find-nearby", json={"url": "https://www.google.com/maps/place/Nakuru"})
        assert r.status_code == 400
        assert r.json() == {"error": "could not extract or find coordinates"}

    @pytest.mark.parametrize("payload", [{"location_reference": "   "}, {}, {"location_reference": 123}])
    def test_invalid_request(self, client, geocoder, payload):
        """Test empty or malformed input is rejected."""
        r = client.post("/find-nearby", json=payload)
        assert r.status_code == 400
        assert r.json() == {"error": "invalid request"}
        assert geocoder.calls == []

    def test_missing_body(self, client):
        """Test a request without a JSON body is rejected."""
        r = client.post("/find-nearby", content=b"not json", headers={"Content-Type": "application/json"})
        assert r.status_code == 400
        assert r.json() == {"error": "invalid request"}


class TestExpand:
    """Tests for GET /expand."""

    @pytest.fixture
    def redirecting_client(self):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.host == "maps.app.goo.gl":
                return httpx.Response(
                    302,
                    headers={"Location": "https://www.google.com/maps/place/Hyrax+Hill+Museum/@-0.2736,36.1121,17z"},
                )
            return httpx.Response(200, text="ok")

        return httpx.AsyncClient(transport=httpx.MockTransport(handler))

    def test_follows_redirects(self, client, redirecting_client):
        """Test the final URL is returned."""
        app.dependency_overrides[get_http_client] = lambda: redirecting_client
        r = client.get("/expand", params={"url": "https://maps.app.goo.gl/abc123"})
        assert r.status_code == 200
        assert r.json() == {"full_url": "https://www.google.com/maps/place/Hyrax+Hill+Museum/@-0.2736,36.1121,17z"}

    @pytest.mark.parametrize("params", [{}, {"url": ""}, {"url": "ftp://example.com/x"}, {"url": "not a url"}])
    def test_missing_url(self, client, params):
        """Test missing or non-http urls are rejected."""
        r = client.get("/expand", params=params)
        assert r.status_code == 400
        assert r.json() == {"error": "missing url"}

    def test_transport_failure(self, client):
        """Test an unreachable short link returns 502."""

        def handler(request):
            raise httpx.ConnectError("unreachable", request=request)

        failing = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        app.dependency_overrides[get_http_client] = lambda: failing
        r = client.get("/expand", params={"url": "https://maps.app.goo.gl/abc123"})
        assert r.status_code == 502
        assert r.json() == {"error": "failed to expand"}
