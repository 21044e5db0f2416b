"""
Robots.txt fetcher.
Records whether the file exists, parses its rules and exposes the
Sitemap hints it advertises.
"""

from typing import List, Optional

from robotexclusionrulesparser import RobotExclusionRulesParser

from wpaudit.core.config import settings
from wpaudit.core.logging import get_logger
from wpaudit.crawler.fetcher import PageFetcher

logger = get_logger(__name__)


class RobotsChecker:
    """Fetches and parses robots.txt for a site."""

    def __init__(self, base_url: str, fetcher: PageFetcher):
        self.base_url = base_url.rstrip("/")
        self.fetcher = fetcher
        self._parser: Optional[RobotExclusionRulesParser] = None
        self.raw_content: Optional[str] = None
        self.exists = False

    async def fetch(self) -> None:
        robots_url = f"{self.base_url}/robots.txt"
        result = await self.fetcher.fetch(robots_url)
        if not result.is_success:
            logger.info("No robots.txt found", url=robots_url, status=result.status_code, error=result.error)
            return

        self.exists = True
        self.raw_content = result.body
        self._parser = RobotExclusionRulesParser()
        self._parser.parse(self.raw_content)
        logger.info("robots.txt fetched", url=robots_url, sitemaps=len(self.get_sitemaps()))

    def is_allowed(self, url: str) -> bool:
        """Check if the given URL is allowed for our user agent."""
        if self._parser is None:
            return True
        return self._parser.is_allowed(settings.CRAWLER_USER_AGENT, url)

    def get_sitemaps(self) -> List[str]:
        """Extract Sitemap directives from robots.txt."""
        sitemaps = []
        if self.raw_content:
            for line in self.raw_content.splitlines():
                line = line.strip()
                if line.lower().startswith("sitemap:"):
                    sitemap_url = line.split(":", 1)[1].strip()
                    if sitemap_url:
                        sitemaps.append(sitemap_url)
        return sitemaps
