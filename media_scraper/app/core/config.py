import logging
from functools import lru_cache
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    scraper_user_agent: str = Field("media-scraper/1.0", alias="SCRAPER_USER_AGENT")
    # Upstream HTML pages (Imgur albums) reject non-browser agents more often than the JSON APIs do.
    scraper_browser_user_agent: str = Field(
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 13_6) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/124.0 Safari/537.36",
        alias="SCRAPER_BROWSER_USER_AGENT",
    )
    fetch_timeout_seconds: float = Field(20.0, alias="SCRAPER_FETCH_TIMEOUT_SECONDS")
    probe_timeout_seconds: float = Field(10.0, alias="SCRAPER_PROBE_TIMEOUT_SECONDS")
    batch_max_urls: int = Field(20, alias="SCRAPER_BATCH_MAX_URLS")
    batch_concurrency: int = Field(5, alias="SCRAPER_BATCH_CONCURRENCY")
    fxtwitter_api_base: str = Field("https://api.fxtwitter.com", alias="FXTWITTER_API_BASE")
    vxtwitter_api_base: str = Field("https://api.vxtwitter.com", alias="VXTWITTER_API_BASE")
    twitter_oembed_url: str = Field("https://publish.twitter.com/oembed", alias="TWITTER_OEMBED_URL")
    nitter_instances: List[str] = Field(
        default_factory=lambda: ["nitter.net", "nitter.poast.org", "nitter.privacydev.net"],
        alias="NITTER_INSTANCES",
    )
    cors_allowed_origins: List[str] = Field(
        default_factory=lambda: [
            "http://localhost:5173",
            "http://127.0.0.1:5173",
            "http://localhost:3000",
        ],
        alias="CORS_ALLOWED_ORIGINS",
    )
    log_level: str = Field("INFO", alias="LOG_LEVEL")

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")


logger = logging.getLogger(__name__)


@lru_cache
def get_settings() -> Settings:
    try:
        settings = Settings()
    except PermissionError:
        logger.warning("Unable to read .env; continuing with environment variables only")
        settings = Settings(_env_file=None)
    return settings
