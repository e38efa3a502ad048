"""Imgur extraction: CDN shortcut, album page scraping and single-image probing."""

import logging
import re
from typing import List, Optional
from urllib.parse import urlparse

import httpx
from bs4 import BeautifulSoup

from media_scraper.app.schemas.media import MediaReference, MediaType, SourceTag
from media_scraper.app.services.media_extraction.extractors.base import MediaExtractor
from media_scraper.app.services.media_extraction.http_client import fetch_text, probe
from media_scraper.app.services.media_extraction.media_utils import decode_entities, guess_media_type

logger = logging.getLogger(__name__)

CDN_BASE = "https://i.imgur.com"
PROBE_EXTENSIONS = (".jpg", ".png", ".gif", ".mp4", ".webp")
ALBUM_PROBE_EXTENSIONS = (".jpg", ".png", ".gif", ".mp4")
ALBUM_RECORD_RE = re.compile(r'\{"id":"([a-zA-Z0-9]+)"[^}]*"ext":"(\.[a-z0-9]+)"')
CDN_LINK_RE = re.compile(r"https://i\.imgur\.com/([a-zA-Z0-9]+)(\.[a-z0-9]+)")


def _path_parts(url: str) -> List[str]:
    try:
        return [part for part in urlparse(url).path.split("/") if part]
    except ValueError:
        return []


def _album_media(matches, album_id: str) -> List[MediaReference]:
    results: List[MediaReference] = []
    seen = set()
    for image_id, ext in matches:
        if image_id in seen or image_id == album_id:
            continue
        seen.add(image_id)
        results.append(
            MediaReference(
                media_url=f"{CDN_BASE}/{image_id}{ext}",
                media_type=guess_media_type(ext),
                metadata={"album_id": album_id, "image_id": image_id, "source": "imgur-album"},
            )
        )
    return results


def parse_album_records(html: str, album_id: str) -> List[MediaReference]:
    """Image records embedded in the album page's bootstrap JSON."""
    return _album_media(ALBUM_RECORD_RE.findall(html or ""), album_id)


def parse_album_links(html: str, album_id: str) -> List[MediaReference]:
    """Any absolute CDN image URL appearing in the page."""
    return _album_media(CDN_LINK_RE.findall(decode_entities(html or "")), album_id)


def parse_album_meta_images(html: str, album_id: str) -> List[MediaReference]:
    """Open Graph / Twitter card images, which carry at least the album cover."""
    soup = BeautifulSoup(html or "", "lxml")
    matches = []
    for attrs in ({"property": "og:image"}, {"name": "twitter:image"}):
        for tag in soup.find_all("meta", attrs=attrs):
            match = CDN_LINK_RE.search(tag.get("content") or "")
            if match:
                matches.append(match.groups())
    return _album_media(matches, album_id)


class ImgurExtractor(MediaExtractor):
    source = SourceTag.IMGUR
    failure_message = (
        "No images found on Imgur. The album may be private or removed. "
        "Try opening the image and pasting its direct i.imgur.com URL instead."
    )

    def strategies(self, url: str):
        hostname = (urlparse(url).hostname or "").lower()
        parts = _path_parts(url)
        if hostname.startswith("i."):
            return (("imgur_direct", self.from_cdn_url),)
        if parts and parts[0] in {"a", "gallery"}:
            return (
                ("imgur_album", self.from_album_page),
                ("imgur_album_probe", self.from_album_id_probe),
            )
        if parts:
            return (
                ("imgur_probe", self.from_extension_probe),
                ("imgur_guess", self.guess_jpg),
            )
        return ()

    @staticmethod
    def image_id(url: str) -> Optional[str]:
        parts = _path_parts(url)
        return parts[0].split(".")[0] if parts else None

    @staticmethod
    def album_id(url: str) -> Optional[str]:
        parts = _path_parts(url)
        if len(parts) < 2:
            return None
        # Newer album links carry a title slug: /a/some-title-AbC123
        return parts[1].rsplit("-", 1)[-1]

    async def from_cdn_url(self, url: str) -> List[MediaReference]:
        if url.lower().split("?")[0].endswith(".gifv"):
            # .gifv is an HTML wrapper page around the mp4.
            return [
                MediaReference(
                    media_url=re.sub(r"\.gifv", ".mp4", url, count=1, flags=re.I),
                    media_type=MediaType.VIDEO,
                    metadata={"source": "imgur-direct"},
                )
            ]
        return [
            MediaReference(media_url=url, media_type=guess_media_type(url), metadata={"source": "imgur-direct"})
        ]

    async def from_album_page(self, url: str) -> List[MediaReference]:
        album_id = self.album_id(url)
        if not album_id:
            return []
        logger.info("Fetching Imgur album: %s", album_id)
        html = await fetch_text(
            self.client,
            f"https://imgur.com/a/{album_id}",
            headers={"User-Agent": self.settings.scraper_browser_user_agent},
        )
        for parser in (parse_album_records, parse_album_links, parse_album_meta_images):
            results = parser(html, album_id)
            if results:
                return results
        return []

    async def from_extension_probe(self, url: str) -> Optional[List[MediaReference]]:
        return await self._probe_cdn(self.image_id(url), PROBE_EXTENSIONS, "imgur-single")

    async def from_album_id_probe(self, url: str) -> Optional[List[MediaReference]]:
        """Gallery links frequently point at a single image stored under the same id."""
        album_id = self.album_id(url)
        if not album_id:
            return None
        return await self._probe_cdn(album_id, ALBUM_PROBE_EXTENSIONS, "imgur-fallback")

    async def _probe_cdn(self, image_id: str, extensions, source: str) -> Optional[List[MediaReference]]:
        for ext in extensions:
            candidate = f"{CDN_BASE}/{image_id}{ext}"
            try:
                response = await probe(self.client, candidate, timeout=self.settings.probe_timeout_seconds)
            except httpx.HTTPError as exc:
                logger.debug("Imgur probe %s failed: %s", candidate, exc)
                continue
            # Missing images redirect to a "removed" placeholder that still answers 200.
            if response.is_success and "removed" not in response.url.path:
                return [
                    MediaReference(
                        media_url=candidate,
                        media_type=guess_media_type(ext),
                        metadata={"image_id": image_id, "source": source, "verified": True},
                    )
                ]
        return None

    async def guess_jpg(self, url: str) -> List[MediaReference]:
        image_id = self.image_id(url)
        logger.info("Imgur probes inconclusive for %s; guessing .jpg", image_id)
        return [
            MediaReference(
                media_url=f"{CDN_BASE}/{image_id}.jpg",
                media_type=MediaType.IMAGE,
                metadata={"image_id": image_id, "source": "imgur-guess", "verified": False},
            )
        ]
