"""
Per-host request spacing for audit fetches.
Keeps a short audit from hammering a single WordPress origin.
"""

import asyncio
import time
from collections import defaultdict
from typing import Dict
from urllib.parse import urlparse


class HostRateLimiter:
    """
    Minimum-interval limiter keyed by host.
    A rate of 0 or less disables spacing entirely.
    """

    def __init__(self, rate_per_second: float = 5.0):
        self.rate = rate_per_second
        self.min_interval = 1.0 / rate_per_second if rate_per_second > 0 else 0.0
        self._last_request: Dict[str, float] = defaultdict(float)
        self._locks: Dict[str, asyncio.Lock] = defaultdict(asyncio.Lock)

    async def acquire(self, url: str) -> None:
        """Wait until a request to the host of `url` is allowed."""
        if self.min_interval == 0.0:
            return
        host = urlparse(url).netloc
        async with self._locks[host]:
            wait_time = self.min_interval - (time.monotonic() - self._last_request[host])
            if wait_time > 0:
                await asyncio.sleep(wait_time)
            self._last_request[host] = time.monotonic()
