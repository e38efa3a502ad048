from typing import AsyncIterator

import httpx

from media_scraper.app.core.config import get_settings
from media_scraper.app.services.media_extraction import build_client


async def get_http_client() -> AsyncIterator[httpx.AsyncClient]:
    """One pooled client per request, shared by every URL of a batch."""
    async with build_client(get_settings()) as client:
        yield client
