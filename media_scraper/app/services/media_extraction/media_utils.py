"""URL and media-type helpers shared by the classifier, validator and extractors."""

import html
import re
from typing import Iterable, Optional
from urllib.parse import parse_qs, urlparse

from media_scraper.app.schemas.media import MediaType

IMAGE_FORMATS = frozenset({"jpg", "jpeg", "png", "gif", "webp"})
MEDIA_PATH_RE = re.compile(r"\.(jpg|jpeg|png|gif|webp|mp4|webm)$", re.I)
IMAGE_URL_RE = re.compile(r"\.(jpg|jpeg|png|gif|webp|bmp|svg)(\?.*)?$", re.I)
FORMAT_PARAM_RE = re.compile(r"[?&]format=(jpg|jpeg|png|gif|webp)\b", re.I)

_GIF_RE = re.compile(r"\.gifv?(?:$|[?#&])|[?&]format=gif\b", re.I)
_VIDEO_RE = re.compile(r"\.(?:mp4|webm|mov|m4v)(?:$|[?#&])", re.I)

# Image CDNs whose URLs frequently carry no extension at all.
_IMAGE_CDN_HOSTS = ("i.redd.it", "i.imgur.com", "pbs.twimg.com")


def host_matches(hostname: str, domains: Iterable[str]) -> bool:
    """True if ``hostname`` equals one of ``domains`` or is a subdomain of one."""
    hostname = (hostname or "").lower().rstrip(".")
    return any(hostname == domain or hostname.endswith("." + domain) for domain in domains)


def get_hostname(url: str) -> str:
    try:
        return (urlparse(url).hostname or "").lower()
    except ValueError:
        return ""


def is_absolute_http_url(url: Optional[str]) -> bool:
    if not url or not isinstance(url, str):
        return False
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    return parsed.scheme in {"http", "https"} and bool(parsed.hostname)


def has_media_extension(url: str) -> bool:
    """Path ends in a known media extension, or a ``format=`` query names an image format."""
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    if MEDIA_PATH_RE.search(parsed.path.lower()):
        return True
    formats = parse_qs(parsed.query).get("format", [])
    return any(fmt.lower() in IMAGE_FORMATS for fmt in formats)


def is_image_url(url: Optional[str]) -> bool:
    if not url:
        return False
    if IMAGE_URL_RE.search(url) or FORMAT_PARAM_RE.search(url):
        return True
    return host_matches(get_hostname(url), _IMAGE_CDN_HOSTS)


def guess_media_type(url_or_ext: str) -> MediaType:
    """Best-effort type from a URL or a bare extension such as ``.gif``."""
    value = url_or_ext or ""
    if _GIF_RE.search(value):
        return MediaType.GIF
    if _VIDEO_RE.search(value):
        return MediaType.VIDEO
    return MediaType.IMAGE


def media_type_from_content_type(content_type: str, url: str) -> Optional[MediaType]:
    """Type from a response content type, falling back to the URL.

    Returns None when the content type names neither image nor video and the
    URL has no image extension, i.e. the resource does not look like media.
    """
    ctype = (content_type or "").lower()
    guessed = guess_media_type(url)
    if "video" in ctype or guessed is MediaType.VIDEO:
        return MediaType.VIDEO
    if "gif" in ctype or guessed is MediaType.GIF:
        return MediaType.GIF
    if ctype and "image" not in ctype and not is_image_url(url):
        return None
    return MediaType.IMAGE


def decode_entities(url: str) -> str:
    return html.unescape(url.strip()) if isinstance(url, str) else url
