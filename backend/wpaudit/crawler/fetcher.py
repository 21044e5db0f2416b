"""
Async page fetcher built on httpx.

Every audit request goes through PageFetcher: pages, robots.txt, sitemaps
and the REST API probes. Transport errors are retried with exponential
backoff; a request that still fails is returned as a FetchResult with
`error` set instead of raising, so one dead page never aborts an audit.
"""

import asyncio
import time
from typing import Dict, Iterable, List, Optional

import httpx
from tenacity import (
    AsyncRetrying,
    RetryError,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from wpaudit.core.config import settings
from wpaudit.core.logging import get_logger
from wpaudit.crawler.rate_limiter import HostRateLimiter

logger = get_logger(__name__)


class FetchResult:
    """Result of fetching a single URL."""

    def __init__(
        self,
        url: str,
        final_url: str,
        status_code: int,
        headers: Dict[str, str],
        body: str,
        elapsed_ms: int = 0,
        error: Optional[str] = None,
    ):
        self.url = url
        self.final_url = final_url
        self.status_code = status_code
        self.headers = headers
        self.body = body
        self.elapsed_ms = elapsed_ms
        self.error = error
        self.is_success = error is None and status_code == 200

    def __repr__(self) -> str:
        return f"FetchResult(url={self.url!r}, status_code={self.status_code}, error={self.error!r})"


def flatten_headers(headers: httpx.Headers) -> Dict[str, str]:
    """Lower-cased header map; repeated headers are joined with ", "."""
    return {key.lower(): ", ".join(headers.get_list(key)) for key in headers.keys()}


class PageFetcher:
    """
    Shared HTTP client for one audit run with:
    - Redirect following (capped)
    - Retry with exponential backoff on transport errors
    - Bounded concurrency for batch fetches
    - Per-host request spacing
    """

    def __init__(
        self,
        max_retries: int = settings.CRAWLER_MAX_RETRIES,
        max_concurrent: int = settings.CRAWLER_MAX_CONCURRENT,
        rate_limit_rps: float = settings.CRAWLER_RATE_LIMIT_RPS,
        timeout: float = settings.CRAWLER_REQUEST_TIMEOUT,
        backoff_min: float = 1.0,
        backoff_max: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.max_retries = max(1, max_retries)
        self.max_concurrent = max(1, max_concurrent)
        self.timeout = timeout
        self.backoff_min = backoff_min
        self.backoff_max = backoff_max
        self.rate_limiter = HostRateLimiter(rate_limit_rps)
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> "PageFetcher":
        headers = {
            "User-Agent": settings.CRAWLER_USER_AGENT,
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,application/json;q=0.8,*/*;q=0.5",
            "Accept-Language": "en-US,en;q=0.5",
        }
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout),
            follow_redirects=True,
            max_redirects=settings.CRAWLER_MAX_REDIRECTS,
            headers=headers,
            transport=self._transport,
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            raise RuntimeError("PageFetcher must be used as an async context manager")
        return self._client

    async def _get(self, url: str) -> httpx.Response:
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_retries),
            wait=wait_exponential(multiplier=self.backoff_min, min=self.backoff_min, max=self.backoff_max),
            retry=retry_if_exception_type(httpx.TransportError),
        )
        async for attempt in retrying:
            with attempt:
                if attempt.retry_state.attempt_number > 1:
                    logger.debug("Retrying fetch", url=url, attempt=attempt.retry_state.attempt_number)
                return await self.client.get(url)
        raise RuntimeError("unreachable")  # pragma: no cover

    async def fetch(self, url: str) -> FetchResult:
        """Fetch a URL; failures are captured in the result."""
        await self.rate_limiter.acquire(url)
        start = time.monotonic()
        try:
            response = await self._get(url)
        except RetryError as e:
            cause = e.last_attempt.exception()
            elapsed = int((time.monotonic() - start) * 1000)
            logger.warning("Fetch failed", url=url, attempts=self.max_retries, error=str(cause))
            return FetchResult(
                url=url, final_url=url, status_code=0, headers={}, body="",
                elapsed_ms=elapsed, error=str(cause) or cause.__class__.__name__,
            )
        except httpx.HTTPError as e:
            elapsed = int((time.monotonic() - start) * 1000)
            logger.warning("Fetch failed", url=url, error=str(e))
            return FetchResult(
                url=url, final_url=url, status_code=0, headers={}, body="",
                elapsed_ms=elapsed, error=str(e) or e.__class__.__name__,
            )

        elapsed = int((time.monotonic() - start) * 1000)
        logger.debug("Fetched", url=url, status=response.status_code, elapsed_ms=elapsed)
        return FetchResult(
            url=url,
            final_url=str(response.url),
            status_code=response.status_code,
            headers=flatten_headers(response.headers),
            body=response.text,
            elapsed_ms=elapsed,
        )

    async def fetch_many(self, urls: Iterable[str]) -> List[FetchResult]:
        """Fetch several URLs with bounded concurrency, preserving input order."""
        semaphore = asyncio.Semaphore(self.max_concurrent)

        async def _bounded(url: str) -> FetchResult:
            async with semaphore:
                return await self.fetch(url)

        return list(await asyncio.gather(*[_bounded(url) for url in urls]))
