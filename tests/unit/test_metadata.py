"""Unit tests for the Semantic Scholar metadata lookup."""

import httpx
import pytest

from neuro_scholar.citations.metadata import SemanticScholarClient


PAPER = {
    "title": "Microglia in Alzheimer's disease",
    "authors": [{"name": "Jane Smith"}, {"name": "Bo Jones"}],
    "year": 2020,
    "venue": "Neuron",
    "externalIds": {"DOI": "10.1016/j.neuron.2020.01.001"},
}


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestSemanticScholarClient:
    """Tests for SemanticScholarClient."""
    
    @pytest.mark.asyncio
    async def test_fetch_parses_metadata(self):
        requests: list[httpx.Request] = []
        
        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, json=PAPER)
        
        async with _client(handler) as http:
            client = SemanticScholarClient(api_key="s2-key", client=http)
            info = await client.fetch_bibliographic_info("doi:10.1016/j.neuron.2020.01.001")
        
        assert info.title == "Microglia in Alzheimer's disease"
        assert info.authors == ["Jane Smith", "Bo Jones"]
        assert info.year == 2020
        assert info.journal == "Neuron"
        assert info.doi == "10.1016/j.neuron.2020.01.001"
        assert requests[0].url.path.endswith("/paper/DOI:10.1016/j.neuron.2020.01.001")
        assert requests[0].headers["x-api-key"] == "s2-key"
        assert requests[0].url.params["fields"] == "title,authors,year,venue,externalIds"
    
    @pytest.mark.asyncio
    async def test_not_found_returns_none(self):
        async with _client(lambda request: httpx.Response(404)) as http:
            client = SemanticScholarClient(api_key="", client=http)
            assert await client.fetch_bibliographic_info("10.1000/missing") is None
    
    @pytest.mark.asyncio
    async def test_results_cached(self):
        calls = {"n": 0}
        
        def handler(request: httpx.Request) -> httpx.Response:
            calls["n"] += 1
            return httpx.Response(200, json=PAPER)
        
        async with _client(handler) as http:
            client = SemanticScholarClient(api_key="", client=http)
            await client.fetch_bibliographic_info("10.1016/j.neuron.2020.01.001")
            await client.fetch_bibliographic_info("10.1016/j.neuron.2020.01.001")
        
        assert calls["n"] == 1
    
    @pytest.mark.asyncio
    async def test_validate_dois_skips_unresolved(self):
        def handler(request: httpx.Request) -> httpx.Response:
            if "missing" in request.url.path:
                return httpx.Response(404)
            return httpx.Response(200, json={**PAPER, "title": request.url.path.rsplit("/", 1)[-1]})
        
        async with _client(handler) as http:
            client = SemanticScholarClient(api_key="", client=http)
            results = await client.validate_dois(
                ["10.1000/a", "10.1000/missing", "10.1000/a", "10.1000/b"], batch_size=2
            )
        
        assert sorted(results) == ["10.1000/a", "10.1000/b"]
        assert results["10.1000/b"].title == "b"
