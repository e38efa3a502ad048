"""Fallback-chain base class shared by the source extractors."""

import logging
from abc import ABC, abstractmethod
from typing import Awaitable, Callable, List, Optional, Sequence, Tuple

import httpx

from media_scraper.app.core.config import Settings, get_settings
from media_scraper.app.schemas.media import MediaReference, SourceTag
from media_scraper.app.services.media_extraction.errors import (
    ExtractionFailedError,
    UpstreamUnavailableError,
)
from media_scraper.app.services.media_extraction.security import sanitize_url_for_logging

logger = logging.getLogger(__name__)

Strategy = Callable[[str], Awaitable[Optional[List[MediaReference]]]]


async def run_fallback_chain(
    url: str,
    strategies: Sequence[Tuple[str, Strategy]],
    failure_message: str,
) -> List[MediaReference]:
    """Try each strategy in order and return the first non-empty result.

    A strategy that raises UpstreamUnavailableError, chokes on an unexpected
    upstream payload, or returns nothing hands over to the next one. Any other
    exception (BlockedError in particular) propagates untouched.
    """
    safe_url = sanitize_url_for_logging(url)
    last_error: Optional[str] = None
    for name, strategy in strategies:
        try:
            results = await strategy(url)
        except UpstreamUnavailableError as exc:
            logger.info("Strategy %s unavailable for %s: %s", name, safe_url, exc)
            last_error = str(exc)
            continue
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            logger.warning("Strategy %s could not read upstream payload for %s: %r", name, safe_url, exc)
            last_error = f"unexpected response from {name}"
            continue
        if results:
            logger.info("Strategy %s found %d media item(s) for %s", name, len(results), safe_url)
            return list(results)
        logger.info("Strategy %s found no media for %s", name, safe_url)

    if last_error:
        failure_message = f"{failure_message} (last error: {last_error})"
    raise ExtractionFailedError(failure_message)


class MediaExtractor(ABC):
    """One extractor per source; ``extract`` runs its ordered strategies."""

    source: SourceTag = SourceTag.UNKNOWN
    failure_message: str = "No media could be extracted from this URL."

    def __init__(self, client: httpx.AsyncClient, settings: Optional[Settings] = None):
        self.client = client
        self.settings = settings or get_settings()

    @abstractmethod
    def strategies(self, url: str) -> Sequence[Tuple[str, Strategy]]:
        """Ordered (name, strategy) pairs to try for ``url``."""

    async def extract(self, url: str) -> List[MediaReference]:
        return await run_fallback_chain(url, self.strategies(url), self.failure_message)
