"""Map a raw URL to the source it should be extracted from."""

from urllib.parse import urlparse

from media_scraper.app.schemas.media import SourceTag
from media_scraper.app.services.media_extraction.media_utils import (
    has_media_extension,
    host_matches,
)

# Order matters: CDN hosts of the social platforms are plain media, not posts.
DIRECT_CDN_HOSTS = (
    "pbs.twimg.com",
    "video.twimg.com",
    "i.redd.it",
    "preview.redd.it",
    "external-preview.redd.it",
    "media.giphy.com",
)
TWITTER_HOSTS = ("twitter.com", "x.com", "fxtwitter.com", "vxtwitter.com", "fixupx.com")
REDDIT_HOSTS = ("reddit.com", "redd.it")
IMGUR_HOSTS = ("imgur.com",)


def classify_url(url: str) -> SourceTag:
    """Classify ``url`` into a :class:`SourceTag`. Never raises."""
    if not isinstance(url, str) or not url.strip():
        return SourceTag.INVALID
    try:
        parsed = urlparse(url.strip())
        hostname = (parsed.hostname or "").lower()
    except ValueError:
        return SourceTag.INVALID
    if not parsed.scheme or not hostname:
        return SourceTag.INVALID

    if host_matches(hostname, DIRECT_CDN_HOSTS):
        return SourceTag.DIRECT
    if host_matches(hostname, TWITTER_HOSTS):
        return SourceTag.TWITTER
    if host_matches(hostname, REDDIT_HOSTS):
        return SourceTag.REDDIT
    if host_matches(hostname, IMGUR_HOSTS):
        return SourceTag.IMGUR
    if has_media_extension(url.strip()):
        return SourceTag.DIRECT
    return SourceTag.UNKNOWN
