"""Direct image/video URLs."""

import logging
from typing import List, Optional

import httpx

from media_scraper.app.schemas.media import MediaReference, SourceTag
from media_scraper.app.services.media_extraction.errors import ExtractionFailedError
from media_scraper.app.services.media_extraction.extractors.base import MediaExtractor
from media_scraper.app.services.media_extraction.http_client import probe
from media_scraper.app.services.media_extraction.media_utils import (
    get_hostname,
    guess_media_type,
    host_matches,
    media_type_from_content_type,
)
from media_scraper.app.services.media_extraction.security import sanitize_url_for_logging

logger = logging.getLogger(__name__)

TRUSTED_HOSTS = (
    "pbs.twimg.com",
    "i.imgur.com",
    "i.redd.it",
    "preview.redd.it",
    "media.giphy.com",
    "placekitten.com",
    "picsum.photos",
)


class DirectExtractor(MediaExtractor):
    source = SourceTag.DIRECT
    failure_message = "Direct URL extraction failed. Paste a link that points directly at an image or video file."

    def strategies(self, url: str):
        return (
            ("direct_trusted", self.from_trusted_host),
            ("direct_probe", self.from_probe),
        )

    async def from_trusted_host(self, url: str) -> Optional[List[MediaReference]]:
        if not host_matches(get_hostname(url), TRUSTED_HOSTS):
            return None
        return [
            MediaReference(
                media_url=url,
                media_type=guess_media_type(url),
                metadata={"source": "direct-trusted", "note": "Known image hosting domain"},
            )
        ]

    async def from_probe(self, url: str) -> List[MediaReference]:
        try:
            response = await probe(self.client, url, timeout=self.settings.probe_timeout_seconds)
        except httpx.TransportError as exc:
            # Unreachable is not the same as missing; the caller's browser may still load it.
            logger.info("Could not verify %s (%s); returning it unverified", sanitize_url_for_logging(url), exc)
            return [
                MediaReference(
                    media_url=url,
                    media_type=guess_media_type(url),
                    metadata={
                        "source": "direct-unverified",
                        "verified": False,
                        "note": "Could not verify URL; the host did not answer the existence check",
                    },
                )
            ]
        except httpx.HTTPError as exc:
            raise ExtractionFailedError(f"Direct URL extraction failed: {exc}") from exc

        if not response.is_success:
            raise ExtractionFailedError(
                f"URL returned {response.status_code}. Check that the link is correct and publicly accessible."
            )

        content_type = response.headers.get("content-type", "")
        media_type = media_type_from_content_type(content_type, url)
        if media_type is None:
            raise ExtractionFailedError(
                f"URL does not appear to be an image or video (content type: {content_type}). "
                "Paste a link that points directly at the media file."
            )
        content_length = response.headers.get("content-length")
        return [
            MediaReference(
                media_url=url,
                media_type=media_type,
                metadata={
                    "source": "direct",
                    "verified": True,
                    "content_type": content_type or None,
                    "content_length": int(content_length) if content_length and content_length.isdigit() else None,
                },
            )
        ]
