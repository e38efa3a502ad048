"""Source extractors, one per source tag."""

from typing import Dict, Optional, Type

import httpx

from media_scraper.app.core.config import Settings
from media_scraper.app.schemas.media import SourceTag
from media_scraper.app.services.media_extraction.extractors.base import (
    MediaExtractor,
    run_fallback_chain,
)
from media_scraper.app.services.media_extraction.extractors.direct import DirectExtractor
from media_scraper.app.services.media_extraction.extractors.imgur import ImgurExtractor
from media_scraper.app.services.media_extraction.extractors.reddit import RedditExtractor
from media_scraper.app.services.media_extraction.extractors.twitter import TwitterExtractor

EXTRACTORS: Dict[SourceTag, Type[MediaExtractor]] = {
    SourceTag.TWITTER: TwitterExtractor,
    SourceTag.REDDIT: RedditExtractor,
    SourceTag.IMGUR: ImgurExtractor,
    SourceTag.DIRECT: DirectExtractor,
}


def get_extractor(
    tag: SourceTag,
    client: httpx.AsyncClient,
    settings: Optional[Settings] = None,
) -> MediaExtractor:
    try:
        extractor_cls = EXTRACTORS[tag]
    except KeyError:
        raise ValueError(f"No extractor registered for source {tag.value}") from None
    return extractor_cls(client, settings)


__all__ = [
    "DirectExtractor",
    "EXTRACTORS",
    "ImgurExtractor",
    "MediaExtractor",
    "RedditExtractor",
    "TwitterExtractor",
    "get_extractor",
    "run_fallback_chain",
]
