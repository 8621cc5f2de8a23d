"""Integration tests for the FastAPI server.

The app is built around a gateway whose upstream is a fake transport, so the
full HTTP contract is exercised without touching DuckDuckGo.
"""

import httpx
import pytest
from fastapi.testclient import TestClient

from tests.mocks.ddg_pages import FakeUpstream
from websearch_gateway.api.server import create_app
from websearch_gateway.config import Settings
from websearch_gateway.gateway.search_gateway import SearchGateway


def build_client(upstream: FakeUpstream, **overrides) -> tuple[TestClient, SearchGateway]:
    gateway = SearchGateway(config=Settings(**overrides), transport=upstream.transport)
    return TestClient(create_app(gateway)), gateway


class TestApiServer:
    """Integration tests for the search endpoints."""

    @pytest.fixture(autouse=True)
    def setup(self):
        self.upstream = FakeUpstream()
        self.client, self.gateway = build_client(self.upstream)

    def test_health_check(self):
        response = self.client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert "version" in data

    def test_search_returns_results(self):
        response = self.client.post(
            "/api/search/query", json={"query": "python asyncio", "maxResults": 6}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["query"] == "python asyncio"
        assert data["cached"] is False
        assert data["resultCount"] == 3
        assert set(data["results"][0]) == {"title", "url", "snippet", "displayUrl", "source", "type"}
        assert data["results"][0]["source"] == "DuckDuckGo"

    def test_max_results_defaults_to_five(self):
        self.client.post("/api/search/query", json={"query": "python"})
        assert "python_5" in self.gateway.cache

    def test_repeat_search_is_cached(self):
        first = self.client.post("/api/search/query", json={"query": "python", "maxResults": 2})
        second = self.client.post("/api/search/query", json={"query": "python", "maxResults": 2})

        assert second.status_code == 200
        assert second.json()["cached"] is True
        assert second.json()["results"] == first.json()["results"]
        assert self.upstream.call_count == 1

    @pytest.mark.parametrize("query", ["", "   "])
    def test_blank_query_returns_400(self, query: str):
        response = self.client.post("/api/search/query", json={"query": query})

        assert response.status_code == 400
        assert response.json() == {"success": False, "error": "Query is required"}
        assert self.upstream.call_count == 0

    def test_missing_query_field_returns_400(self):
        response = self.client.post("/api/search/query", json={})
        assert response.status_code == 400
        assert response.json()["success"] is False

    def test_malformed_body_returns_400(self):
        response = self.client.post(
            "/api/search/query",
            content="{not json",
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 400
        assert response.json()["success"] is False

    def test_non_positive_max_results_returns_400(self):
        response = self.client.post("/api/search/query", json={"query": "python", "maxResults": 0})
        assert response.status_code == 400
        assert response.json()["error"].startswith("Invalid request")

    def test_rate_limited_client_gets_429(self):
        client, _ = build_client(FakeUpstream(), rate_limit_max_requests=2)

        for _ in range(2):
            assert client.post("/api/search/query", json={"query": "python"}).status_code == 200

        response = client.post("/api/search/query", json={"query": "python"})
        assert response.status_code == 429
        assert response.json() == {
            "success": False,
            "error": "Rate limit exceeded. Try again later.",
        }

    def test_upstream_failure_returns_500(self):
        client, _ = build_client(FakeUpstream(httpx.ReadTimeout("timed out")))

        response = client.post("/api/search/query", json={"query": "python"})

        assert response.status_code == 500
        assert response.json() == {
            "success": False,
            "error": "Search failed: Search request timeout",
        }

    def test_empty_upstream_page_is_success(self):
        client, _ = build_client(FakeUpstream("<html><body>No results.</body></html>"))

        response = client.post("/api/search/query", json={"query": "zzqxj"})

        assert response.status_code == 200
        assert response.json()["results"] == []
        assert response.json()["resultCount"] == 0

    def test_clear_cache(self):
        self.client.post("/api/search/query", json={"query": "python"})

        response = self.client.post("/api/search/clear-cache")

        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "Cache cleared successfully"}
        assert len(self.gateway.cache) == 0
        assert len(self.gateway.rate_limiter) == 0

    def test_status(self):
        self.client.post("/api/search/query", json={"query": "python"})

        response = self.client.get("/api/search/status")

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["provider"] == "DuckDuckGo HTML"
        assert data["method"]
        assert data["cache_size"] == 1
        assert data["rate_limit_entries"] == 1
        assert data["privacy_first"] is True
