"""Normalize extractor output into the public MediaReference shape."""

import logging
from typing import Any, Iterable, List, Mapping, Union

from media_scraper.app.schemas.media import MediaReference, MediaType
from media_scraper.app.services.media_extraction.media_utils import (
    guess_media_type,
    is_absolute_http_url,
)

logger = logging.getLogger(__name__)

_TYPE_ALIASES = {
    "image": MediaType.IMAGE,
    "photo": MediaType.IMAGE,
    "gif": MediaType.GIF,
    "animated_gif": MediaType.GIF,
    "video": MediaType.VIDEO,
}


def coerce_media_type(value: Any, media_url: str) -> MediaType:
    if isinstance(value, MediaType):
        return value
    if isinstance(value, str) and value.lower() in _TYPE_ALIASES:
        return _TYPE_ALIASES[value.lower()]
    return guess_media_type(media_url)


def _as_reference(item: Union[MediaReference, Mapping[str, Any]]) -> MediaReference:
    if isinstance(item, MediaReference):
        media_url = item.media_url
        raw_type = item.media_type
        metadata = dict(item.metadata)
    else:
        media_url = item.get("mediaUrl") or item.get("media_url") or ""
        raw_type = item.get("mediaType") or item.get("media_type")
        metadata = dict(item.get("metadata") or {})
        # Adapter-level extras are folded into metadata rather than leaking into the shape.
        if item.get("thumbnail"):
            metadata.setdefault("thumbnail_url", item["thumbnail"])
    metadata = {key: value for key, value in metadata.items() if value is not None}
    return MediaReference(
        media_url=media_url.strip(),
        media_type=coerce_media_type(raw_type, media_url),
        metadata=metadata,
    )


def normalize_media(items: Iterable[Union[MediaReference, Mapping[str, Any]]]) -> List[MediaReference]:
    """Coerce, filter and dedupe media, keeping first-seen order."""
    normalized: List[MediaReference] = []
    seen = set()
    for item in items:
        reference = _as_reference(item)
        if not is_absolute_http_url(reference.media_url):
            logger.debug("Dropping media with non-HTTP URL: %r", reference.media_url)
            continue
        if reference.media_url in seen:
            continue
        seen.add(reference.media_url)
        normalized.append(reference)
    return normalized
