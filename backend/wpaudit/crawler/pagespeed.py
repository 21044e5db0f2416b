"""
Google PageSpeed Insights API client.

Provides the Core Web Vitals used for the performance bonus. The lookup is
optional: every failure is logged and yields None so the audit carries on
with the HTML-only performance score.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple

import httpx

from wpaudit.core.config import settings
from wpaudit.core.exceptions import PageSpeedError
from wpaudit.core.logging import get_logger
from wpaudit.models import FieldPerformance

logger = get_logger(__name__)


class FieldPerformanceCache:
    """
    Per-run lookup cache keyed by (url, strategy).
    Owned by the audit orchestrator; never evicts.
    """

    def __init__(self):
        self._entries: Dict[Tuple[str, str], FieldPerformance] = {}

    def get(self, url: str, strategy: str) -> Optional[FieldPerformance]:
        return self._entries.get((url, strategy))

    def put(self, url: str, strategy: str, value: FieldPerformance) -> None:
        self._entries[(url, strategy)] = value

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


def _numeric(audits: Dict[str, Any], key: str) -> Optional[float]:
    value = audits.get(key, {}).get("numericValue")
    return float(value) if isinstance(value, (int, float)) else None


def parse_lighthouse(data: Dict[str, Any], strategy: str) -> Optional[FieldPerformance]:
    """Extract the vitals from a PSI v5 response body."""
    if not isinstance(data, dict):
        return None
    lighthouse = data.get("lighthouseResult") or {}
    audits = lighthouse.get("audits")
    if not audits:
        return None

    inp = _numeric(audits, "interaction-to-next-paint")
    if inp is None:
        inp = _numeric(audits, "max-potential-fid")

    score = (lighthouse.get("categories") or {}).get("performance", {}).get("score")

    return FieldPerformance(
        lcp_ms=_numeric(audits, "largest-contentful-paint") or 0.0,
        cls_score=_numeric(audits, "cumulative-layout-shift") or 0.0,
        inp_ms=inp or 0.0,
        ttfb_ms=_numeric(audits, "server-response-time") or 0.0,
        performance_score=score * 100 if isinstance(score, (int, float)) else None,
        strategy=strategy,
        fetched_at=datetime.now(timezone.utc).isoformat(),
    )


class PageSpeedClient:
    """HTTP client for Google PageSpeed Insights API."""

    BASE_URL = "https://www.googleapis.com/pagespeedonline/v5/runPagespeed"

    def __init__(
        self,
        api_key: Optional[str] = None,
        cache: Optional[FieldPerformanceCache] = None,
        timeout: float = settings.PAGESPEED_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key or settings.PAGESPEED_API_KEY
        self.cache = cache if cache is not None else FieldPerformanceCache()
        self.timeout = timeout
        self._transport = transport

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    async def _request(self, url: str, strategy: str) -> Dict[str, Any]:
        params = {
            "url": url,
            "strategy": strategy,
            "category": "PERFORMANCE",
            "key": self.api_key,
        }
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                logger.info("Fetching PageSpeed data", url=url, strategy=strategy)
                response = await client.get(self.BASE_URL, params=params)
                response.raise_for_status()
                return response.json()
        except httpx.TimeoutException:
            raise PageSpeedError("Request timeout")
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            if status == 429:
                raise PageSpeedError("Rate limit exceeded", status_code=status)
            if status == 400:
                raise PageSpeedError("Invalid URL or request", status_code=status)
            if status == 403:
                raise PageSpeedError("API key invalid or quota exhausted", status_code=status)
            raise PageSpeedError(f"HTTP {status}", status_code=status)
        except httpx.HTTPError as e:
            raise PageSpeedError(str(e) or e.__class__.__name__)
        except ValueError:
            raise PageSpeedError("Response is not valid JSON")

    async def analyze(self, url: str, strategy: str = "mobile") -> Optional[FieldPerformance]:
        """Look up Core Web Vitals for `url`; None when unavailable."""
        if not self.api_key:
            logger.debug("PageSpeed API key not configured", url=url)
            return None

        cached = self.cache.get(url, strategy)
        if cached is not None:
            logger.debug("Using cached PageSpeed data", url=url, strategy=strategy)
            return cached

        try:
            data = await self._request(url, strategy)
        except PageSpeedError as e:
            logger.warning("PageSpeed lookup failed", url=url, status=e.status_code, error=e.message)
            return None

        result = parse_lighthouse(data, strategy)
        if result is None:
            logger.warning("PageSpeed response has no Lighthouse audits", url=url)
            return None

        self.cache.put(url, strategy, result)
        logger.info(
            "PageSpeed data received",
            url=url,
            lcp_ms=result.lcp_ms,
            cls=result.cls_score,
            performance_score=result.performance_score,
        )
        return result
