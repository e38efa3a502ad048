"""Media extraction package.

Turns a social media / image host URL into normalized media references:
classification, SSRF validation, per-source fallback chains and result
normalization.
"""

from media_scraper.app.services.media_extraction.classifier import classify_url
from media_scraper.app.services.media_extraction.errors import (
    BlockedError,
    DomainNotAllowedError,
    ExtractionFailedError,
    InvalidUrlError,
    MediaExtractionError,
    UpstreamUnavailableError,
)
from media_scraper.app.services.media_extraction.extractors import get_extractor
from media_scraper.app.services.media_extraction.http_client import build_client
from media_scraper.app.services.media_extraction.normalizer import normalize_media
from media_scraper.app.services.media_extraction.security import (
    is_blocked_host,
    sanitize_url_for_logging,
    validate_url,
)

__all__ = [
    # Errors
    "BlockedError",
    "DomainNotAllowedError",
    "ExtractionFailedError",
    "InvalidUrlError",
    "MediaExtractionError",
    "UpstreamUnavailableError",
    # Pipeline stages
    "build_client",
    "classify_url",
    "get_extractor",
    "is_blocked_host",
    "normalize_media",
    "sanitize_url_for_logging",
    "validate_url",
]
