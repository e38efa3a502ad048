"""Reddit extraction through the public ``.json`` post representation."""

import logging
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse

from media_scraper.app.schemas.media import MediaReference, MediaType, SourceTag
from media_scraper.app.services.media_extraction.errors import UpstreamUnavailableError
from media_scraper.app.services.media_extraction.extractors.base import MediaExtractor
from media_scraper.app.services.media_extraction.http_client import (
    fetch_json,
    resolve_redirects,
)
from media_scraper.app.services.media_extraction.media_utils import (
    decode_entities,
    get_hostname,
    guess_media_type,
    host_matches,
    is_image_url,
)
from media_scraper.app.services.media_extraction.security import validate_url

logger = logging.getLogger(__name__)


def is_short_link(url: str) -> bool:
    """redd.it / v.redd.it links and /s/ share links only resolve via redirect."""
    hostname = get_hostname(url)
    if host_matches(hostname, ("redd.it",)):
        return True
    try:
        path = urlparse(url).path
    except ValueError:
        return False
    return "/s/" in path


def to_json_url(url: str) -> str:
    return url.split("#")[0].split("?")[0].rstrip("/") + ".json"


def first_post(data: Any) -> Dict[str, Any]:
    try:
        post = data[0]["data"]["children"][0]["data"]
    except (IndexError, KeyError, TypeError):
        post = None
    if not isinstance(post, dict):
        raise UpstreamUnavailableError("Could not parse Reddit response")
    return post


def collect_post_media(post: Dict[str, Any], source: str = "reddit") -> List[MediaReference]:
    """Collect media candidates from a post object, highest priority first."""
    results: List[MediaReference] = []
    seen = set()
    permalink = post.get("permalink")
    base_meta = {
        "title": post.get("title"),
        "subreddit": post.get("subreddit"),
        "author": post.get("author"),
        "score": post.get("score"),
        "permalink": f"https://reddit.com{permalink}" if permalink else None,
        "source": source,
    }

    def add(raw_url: Optional[str], media_type: MediaType, **extra: Any) -> None:
        if not raw_url or not isinstance(raw_url, str):
            return
        media_url = decode_entities(raw_url)
        if media_url in seen:
            return
        seen.add(media_url)
        results.append(
            MediaReference(media_url=media_url, media_type=media_type, metadata={**base_meta, **extra})
        )

    post_url = post.get("url")
    if is_image_url(post_url):
        add(post_url, guess_media_type(post_url))

    overridden = post.get("url_overridden_by_dest")
    if is_image_url(overridden):
        add(overridden, guess_media_type(overridden))

    for image in (post.get("preview") or {}).get("images") or []:
        source_img = image.get("source") or {}
        add(source_img.get("url"), MediaType.IMAGE, width=source_img.get("width"), height=source_img.get("height"))
        variants = image.get("variants") or {}
        add(((variants.get("gif") or {}).get("source") or {}).get("url"), MediaType.GIF)
        add(((variants.get("mp4") or {}).get("source") or {}).get("url"), MediaType.VIDEO)

    media = post.get("media") or post.get("secure_media") or {}
    reddit_video = media.get("reddit_video") or {}
    add(
        reddit_video.get("fallback_url"),
        MediaType.VIDEO,
        duration=reddit_video.get("duration"),
        width=reddit_video.get("width"),
        height=reddit_video.get("height"),
    )

    gallery_items = (post.get("gallery_data") or {}).get("items") or []
    media_metadata = post.get("media_metadata") or {}
    for index, item in enumerate(gallery_items):
        meta = media_metadata.get(item.get("media_id")) or {}
        best = meta.get("s") or {}
        animated = meta.get("e") == "AnimatedImage"
        add(
            best.get("u") or (best.get("gif") if animated else None),
            MediaType.GIF if animated else MediaType.IMAGE,
            gallery_index=index,
            width=best.get("x"),
            height=best.get("y"),
        )

    if not results and source == "reddit":
        for parent in post.get("crosspost_parent_list") or []:
            results = collect_post_media(parent, source="reddit-crosspost")
            if results:
                break
    return results


class RedditExtractor(MediaExtractor):
    source = SourceTag.REDDIT
    failure_message = (
        "No media found in Reddit post. The post may be private, removed or text-only. "
        "Try pasting the direct image or video URL instead."
    )

    def strategies(self, url: str):
        return (("reddit_json", self.from_json_api),)

    async def from_json_api(self, url: str) -> List[MediaReference]:
        if is_short_link(url):
            url = await resolve_redirects(self.client, url)
            # The expanded link must still point at Reddit.
            validate_url(url)
        json_url = to_json_url(url)
        logger.info("Fetching Reddit: %s", json_url)
        data = await fetch_json(self.client, json_url)
        return collect_post_media(first_post(data))
