#!/usr/bin/env python
"""
Extract media from one or more URLs from the command line and print the JSON result.

Run manually:
    python scripts/extract_url.py https://www.reddit.com/r/pics/comments/abc123/title/
"""
import argparse
import asyncio
import json
import logging

from media_scraper.app.core.config import get_settings
from media_scraper.app.services.batch_service import extract_batch

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("extract_url")


async def main():
    parser = argparse.ArgumentParser(description="Extract media references from URLs")
    parser.add_argument("urls", nargs="+")
    parser.add_argument("--concurrency", type=int, default=None)
    args = parser.parse_args()

    settings = get_settings()
    if len(args.urls) > settings.batch_max_urls:
        parser.error(f"at most {settings.batch_max_urls} URLs per run")

    result = await extract_batch(args.urls, settings=settings, concurrency=args.concurrency)
    logger.info("Extracted %s/%s URLs", result.succeeded, result.total)
    print(json.dumps(result.model_dump(mode="json", by_alias=True), indent=2))


if __name__ == "__main__":
    asyncio.run(main())
