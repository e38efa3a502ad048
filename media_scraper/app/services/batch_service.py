import asyncio
import logging
from typing import List, Optional, Sequence

import httpx

from media_scraper.app.core.config import Settings, get_settings
from media_scraper.app.schemas.media import BatchResult, ExtractionResult
from media_scraper.app.services.extraction_service import extract_media
from media_scraper.app.services.media_extraction import build_client

logger = logging.getLogger(__name__)


async def _gather(
    urls: Sequence[str],
    client: httpx.AsyncClient,
    settings: Settings,
    concurrency: int,
) -> List[ExtractionResult]:
    semaphore = asyncio.Semaphore(concurrency)

    async def run_one(url: str) -> ExtractionResult:
        async with semaphore:
            return await extract_media(url, client=client, settings=settings)

    # gather keeps input order regardless of completion order.
    return list(await asyncio.gather(*(run_one(url) for url in urls)))


async def extract_batch(
    urls: Sequence[str],
    client: Optional[httpx.AsyncClient] = None,
    settings: Optional[Settings] = None,
    concurrency: Optional[int] = None,
) -> BatchResult:
    """Extract every URL with bounded concurrency and aggregate the outcomes.

    Per-item failures are recorded in that item's outcome and never abort the
    batch. Failed items are not retried.
    """
    settings = settings or get_settings()
    if len(urls) > settings.batch_max_urls:
        raise ValueError(f"At most {settings.batch_max_urls} URLs may be extracted per batch")
    limit = max(1, concurrency or settings.batch_concurrency)

    logger.info("Batch extraction starting (%d urls, concurrency=%d)", len(urls), limit)
    if client is None:
        async with build_client(settings) as owned_client:
            items = await _gather(urls, owned_client, settings, limit)
    else:
        items = await _gather(urls, client, settings, limit)

    result = BatchResult.from_items(items)
    logger.info("Batch extraction complete: total=%d success=%d", result.total, result.succeeded)
    return result
