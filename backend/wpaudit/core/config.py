"""
Core configuration module using pydantic-settings.
Loads from environment variables and .env file.
"""

from functools import lru_cache
from typing import List, Optional
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
import json


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    APP_NAME: str = "WordPress Modernization Audit"
    APP_ENV: str = "development"
    APP_VERSION: str = "0.4.0"
    DEBUG: bool = False

    # API
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000
    API_WORKERS: int = 2
    CORS_ORIGINS: List[str] = ["http://localhost:3000"]

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def parse_cors(cls, v):
        if isinstance(v, str):
            try:
                return json.loads(v)
            except ValueError:
                return [origin.strip() for origin in v.split(",")]
        return v

    # Fetching
    CRAWLER_REQUEST_TIMEOUT: int = 30
    CRAWLER_MAX_RETRIES: int = 3
    CRAWLER_MAX_REDIRECTS: int = 5
    CRAWLER_USER_AGENT: str = "wp-modernization-audit/0.4 (+https://github.com/salttechno/wp-modernization-audit)"
    CRAWLER_MAX_CONCURRENT: int = 4
    CRAWLER_RATE_LIMIT_RPS: float = 5.0

    # Audit
    AUDIT_MAX_PAGES: int = 10
    AUDIT_DEFAULT_FORMAT: str = "md"
    SITEMAP_MAX_NESTED: int = 5

    # Field performance (PageSpeed Insights)
    PAGESPEED_API_KEY: Optional[str] = None
    PAGESPEED_STRATEGY: str = "mobile"
    PAGESPEED_TIMEOUT: int = 60
    PAGESPEED_MAX_PAGES: int = 3

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "json"


@lru_cache()
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()


settings = get_settings()
