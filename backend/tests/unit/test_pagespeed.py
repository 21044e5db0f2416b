"""
Unit tests for the PageSpeed Insights client.
"""
import httpx
import pytest

from tests.conftest import PSI_RESPONSE, make_field
from wpaudit.core.exceptions import PageSpeedError
from wpaudit.crawler.pagespeed import FieldPerformanceCache, PageSpeedClient, parse_lighthouse


def _client(handler, **kwargs) -> PageSpeedClient:
    return PageSpeedClient(api_key="test-key", transport=httpx.MockTransport(handler), **kwargs)


class TestParseLighthouse:
    """Test Lighthouse result parsing."""

    def test_extracts_vitals(self):
        result = parse_lighthouse(PSI_RESPONSE, "desktop")

        assert result.lcp_ms == 2100.5
        assert result.cls_score == 0.04
        assert result.inp_ms == 180.0
        assert result.ttfb_ms == 320.0
        assert result.performance_score == 50.0
        assert result.strategy == "desktop"
        assert result.fetched_at is not None

    def test_max_potential_fid_fallback(self):
        audits = dict(PSI_RESPONSE["lighthouseResult"]["audits"])
        del audits["interaction-to-next-paint"]
        audits["max-potential-fid"] = {"numericValue": 95}

        result = parse_lighthouse({"lighthouseResult": {"audits": audits}}, "mobile")

        assert result.inp_ms == 95.0
        assert result.performance_score is None

    def test_missing_audits(self):
        assert parse_lighthouse({"lighthouseResult": {}}, "mobile") is None
        assert parse_lighthouse({}, "mobile") is None
        assert parse_lighthouse([], "mobile") is None


class TestFieldPerformanceCache:
    """Test the per-run cache."""

    def test_keyed_by_url_and_strategy(self):
        cache = FieldPerformanceCache()
        value = make_field()

        cache.put("https://example.com/", "mobile", value)

        assert cache.get("https://example.com/", "mobile") is value
        assert cache.get("https://example.com/", "desktop") is None
        assert len(cache) == 1

        cache.clear()
        assert len(cache) == 0


class TestPageSpeedClient:
    """Test the API client."""

    async def test_analyze_and_cache(self):
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, json=PSI_RESPONSE)

        client = _client(handler)
        first = await client.analyze("https://example.com/", "desktop")
        second = await client.analyze("https://example.com/", "desktop")

        assert first is second
        assert len(requests) == 1
        params = requests[0].url.params
        assert params["url"] == "https://example.com/"
        assert params["strategy"] == "desktop"
        assert params["category"] == "PERFORMANCE"
        assert params["key"] == "test-key"

    async def test_rate_limit_yields_none(self):
        client = _client(lambda request: httpx.Response(429, json={"error": "quota"}))

        assert await client.analyze("https://example.com/") is None
        assert len(client.cache) == 0

    @pytest.mark.parametrize("status,message", [
        (400, "Invalid URL or request"),
        (403, "API key invalid or quota exhausted"),
        (429, "Rate limit exceeded"),
        (502, "HTTP 502"),
    ])
    async def test_request_errors(self, status, message):
        client = _client(lambda request: httpx.Response(status, text="error"))

        with pytest.raises(PageSpeedError) as exc_info:
            await client._request("https://example.com/", "mobile")

        assert exc_info.value.message == message
        assert exc_info.value.status_code == status

    async def test_timeout(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("slow", request=request)

        with pytest.raises(PageSpeedError) as exc_info:
            await _client(handler)._request("https://example.com/", "mobile")

        assert exc_info.value.message == "Request timeout"

    async def test_invalid_json_yields_none(self):
        client = _client(lambda request: httpx.Response(200, text="<html>"))

        assert await client.analyze("https://example.com/") is None

    async def test_body_without_audits_yields_none(self):
        client = _client(lambda request: httpx.Response(200, json={"lighthouseResult": {}}))

        assert await client.analyze("https://example.com/") is None

    async def test_disabled_without_key(self, monkeypatch):
        monkeypatch.setattr("wpaudit.crawler.pagespeed.settings.PAGESPEED_API_KEY", None)
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, json=PSI_RESPONSE)

        client = PageSpeedClient(transport=httpx.MockTransport(handler))

        assert client.enabled is False
        assert await client.analyze("https://example.com/") is None
        assert requests == []
