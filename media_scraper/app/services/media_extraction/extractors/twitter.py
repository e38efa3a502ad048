"""Twitter/X extraction via JSON mirror APIs, with oEmbed and Nitter fallbacks."""

import logging
import re
from typing import Any, Dict, List, Optional
from urllib.parse import unquote, urlparse

from media_scraper.app.schemas.media import MediaReference, MediaType, SourceTag
from media_scraper.app.services.media_extraction.errors import (
    ExtractionFailedError,
    UpstreamUnavailableError,
)
from media_scraper.app.services.media_extraction.extractors.base import MediaExtractor
from media_scraper.app.services.media_extraction.http_client import fetch_json, fetch_text
from media_scraper.app.services.media_extraction.media_utils import decode_entities, guess_media_type

logger = logging.getLogger(__name__)

TWEET_ID_RE = re.compile(r"status(?:es)?/(\d+)")
HANDLE_RE = re.compile(r"^/([^/]+)/status")
PBS_MEDIA_RE = re.compile(r"https://pbs\.twimg\.com/media/[^\"'\s<>]+")
NITTER_PIC_RE = re.compile(r"/pic/[^\"'\s<>]+")


def extract_tweet_id(url: str) -> Optional[str]:
    match = TWEET_ID_RE.search(url or "")
    return match.group(1) if match else None


def extract_twitter_handle(url: str) -> Optional[str]:
    try:
        path = urlparse(url).path
    except ValueError:
        return None
    match = HANDLE_RE.match(path)
    return match.group(1) if match else None


def _typed(kind: Optional[str]) -> MediaType:
    if kind == "video":
        return MediaType.VIDEO
    if kind in {"gif", "animated_gif"}:
        return MediaType.GIF
    return MediaType.IMAGE


def parse_fxtwitter_payload(data: Dict[str, Any], tweet_id: str) -> List[MediaReference]:
    """Read media from an fxtwitter status payload."""
    if data.get("code") == 404 or not data.get("tweet"):
        raise UpstreamUnavailableError("Tweet not found or is private")

    tweet = data["tweet"]
    media = tweet.get("media") or {}
    author = tweet.get("author") or {}
    base_meta = {
        "tweet_id": tweet_id,
        "author": author.get("screen_name"),
        "author_name": author.get("name"),
        "source": "fxtwitter",
    }

    results: List[MediaReference] = []
    for photo in media.get("photos") or []:
        results.append(
            MediaReference(
                media_url=photo["url"],
                media_type=MediaType.IMAGE,
                metadata={
                    **base_meta,
                    "text": (tweet.get("text") or "")[:100],
                    "width": photo.get("width"),
                    "height": photo.get("height"),
                },
            )
        )
    for video in media.get("videos") or []:
        results.append(
            MediaReference(
                media_url=video["url"],
                media_type=MediaType.GIF if video.get("type") == "gif" else MediaType.VIDEO,
                metadata={
                    **base_meta,
                    "thumbnail_url": video.get("thumbnail_url"),
                    "duration": video.get("duration"),
                    "width": video.get("width"),
                    "height": video.get("height"),
                },
            )
        )

    if not results:
        # Older payloads only populate the untyped "all" array.
        for item in media.get("all") or []:
            if item.get("url"):
                results.append(
                    MediaReference(
                        media_url=item["url"],
                        media_type=_typed(item.get("type")),
                        metadata={"tweet_id": tweet_id, "source": "fxtwitter"},
                    )
                )
    return results


def parse_vxtwitter_payload(data: Dict[str, Any], tweet_id: str) -> List[MediaReference]:
    results: List[MediaReference] = []
    for item in data.get("media_extended") or []:
        if not item.get("url"):
            continue
        size = item.get("size") or {}
        duration_ms = item.get("duration_millis")
        results.append(
            MediaReference(
                media_url=item["url"],
                media_type=_typed(item.get("type")),
                metadata={
                    "tweet_id": tweet_id,
                    "author": data.get("user_screen_name"),
                    "author_name": data.get("user_name"),
                    "thumbnail_url": item.get("thumbnail_url"),
                    "duration": duration_ms / 1000 if duration_ms else None,
                    "width": size.get("width"),
                    "height": size.get("height"),
                    "source": "vxtwitter",
                },
            )
        )
    return results


def parse_oembed_html(embed_html: str, tweet_id: str, author: Optional[str] = None) -> List[MediaReference]:
    """Scan oEmbed markup for image CDN URLs. oEmbed never exposes video."""
    results: List[MediaReference] = []
    seen = set()
    for raw in PBS_MEDIA_RE.findall(embed_html or ""):
        media_url = decode_entities(raw)
        if media_url in seen:
            continue
        seen.add(media_url)
        results.append(
            MediaReference(
                media_url=media_url,
                media_type=MediaType.IMAGE,
                metadata={"tweet_id": tweet_id, "author": author, "source": "oembed"},
            )
        )
    return results


def parse_nitter_html(page: str, instance: str, tweet_id: str) -> List[MediaReference]:
    """Collect the ``/pic/...`` image proxy paths from a Nitter status page."""
    results: List[MediaReference] = []
    seen = set()
    for raw in NITTER_PIC_RE.findall(page or ""):
        path = decode_entities(raw)
        target = unquote(path)
        # Avatars are proxied through /pic/ as well.
        if "profile_images" in target or path in seen:
            continue
        seen.add(path)
        results.append(
            MediaReference(
                media_url=f"https://{instance}{path}",
                media_type=guess_media_type(target),
                metadata={"tweet_id": tweet_id, "instance": instance, "source": "nitter"},
            )
        )
    return results


class TwitterExtractor(MediaExtractor):
    source = SourceTag.TWITTER
    failure_message = (
        "Twitter extraction failed. Twitter has restricted API access and videos cannot be "
        "retrieved automatically. Try copying the media URL directly (right-click the image "
        "and choose Copy image address) and paste that instead."
    )

    def strategies(self, url: str):
        return (
            ("fxtwitter", self.from_fxtwitter),
            ("vxtwitter", self.from_vxtwitter),
            ("oembed", self.from_oembed),
            ("nitter", self.from_nitter),
        )

    async def extract(self, url: str) -> List[MediaReference]:
        if not extract_tweet_id(url):
            raise ExtractionFailedError(
                "Invalid Twitter URL - no tweet ID found. Paste a link to a specific tweet "
                "or the direct media URL instead."
            )
        return await super().extract(url)

    def _status_path(self, url: str) -> str:
        return f"{extract_twitter_handle(url) or 'i'}/status/{extract_tweet_id(url)}"

    async def from_fxtwitter(self, url: str) -> List[MediaReference]:
        api_url = f"{self.settings.fxtwitter_api_base.rstrip('/')}/{self._status_path(url)}"
        logger.info("Fetching Twitter via fxtwitter: %s", api_url)
        data = await fetch_json(self.client, api_url)
        return parse_fxtwitter_payload(data, extract_tweet_id(url))

    async def from_vxtwitter(self, url: str) -> List[MediaReference]:
        api_url = f"{self.settings.vxtwitter_api_base.rstrip('/')}/{self._status_path(url)}"
        logger.info("Fetching Twitter via vxtwitter: %s", api_url)
        data = await fetch_json(self.client, api_url)
        return parse_vxtwitter_payload(data, extract_tweet_id(url))

    async def from_oembed(self, url: str) -> List[MediaReference]:
        logger.info("Trying Twitter oEmbed fallback for status %s", extract_tweet_id(url))
        data = await fetch_json(self.client, self.settings.twitter_oembed_url, params={"url": url})
        return parse_oembed_html(data.get("html") or "", extract_tweet_id(url), data.get("author_name"))

    async def from_nitter(self, url: str) -> List[MediaReference]:
        tweet_id = extract_tweet_id(url)
        last_error: Optional[UpstreamUnavailableError] = None
        for instance in self.settings.nitter_instances:
            page_url = f"https://{instance}/{self._status_path(url)}"
            logger.info("Trying Nitter instance %s for status %s", instance, tweet_id)
            try:
                page = await fetch_text(
                    self.client,
                    page_url,
                    headers={"User-Agent": self.settings.scraper_browser_user_agent},
                )
            except UpstreamUnavailableError as exc:
                logger.info("Nitter instance %s unavailable: %s", instance, exc)
                last_error = exc
                continue
            results = parse_nitter_html(page, instance, tweet_id)
            if results:
                return results
        if last_error is not None:
            raise last_error
        return []
