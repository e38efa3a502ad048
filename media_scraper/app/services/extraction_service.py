import logging
from typing import Optional

import httpx

from media_scraper.app.core.config import Settings, get_settings
from media_scraper.app.schemas.media import (
    ErrorKind,
    ExtractionFailure,
    ExtractionResult,
    ExtractionSuccess,
    SourceTag,
)
from media_scraper.app.services.media_extraction import (
    MediaExtractionError,
    build_client,
    classify_url,
    get_extractor,
    normalize_media,
    sanitize_url_for_logging,
    validate_url,
)

logger = logging.getLogger(__name__)

# Kinds that may reach the caller as-is; anything else is reported as extraction_failed.
USER_VISIBLE_KINDS = {
    ErrorKind.INVALID_URL,
    ErrorKind.BLOCKED,
    ErrorKind.DOMAIN_NOT_ALLOWED,
    ErrorKind.EXTRACTION_FAILED,
}


def _failed(url: str, tag: SourceTag, reason: ErrorKind, message: str) -> ExtractionResult:
    return ExtractionResult(
        url=url,
        source_tag=tag,
        outcome=ExtractionFailure(reason=reason, message=message),
    )


async def _run_pipeline(url: str, client: httpx.AsyncClient, settings: Settings) -> ExtractionResult:
    target = url.strip() if isinstance(url, str) else ""
    safe_url = sanitize_url_for_logging(target)

    tag = classify_url(target)
    logger.info("Extracting media from %s (type=%s)", safe_url, tag.value)
    if tag is SourceTag.INVALID:
        return _failed(url, tag, ErrorKind.INVALID_URL, "Invalid URL")

    # Unknown hosts get a best-effort direct attempt rather than an outright failure.
    effective_tag = SourceTag.DIRECT if tag is SourceTag.UNKNOWN else tag
    try:
        validate_url(target, allow_any_https=effective_tag is SourceTag.DIRECT)
    except MediaExtractionError as exc:
        logger.info("Rejected %s before extraction: %s", safe_url, exc.message)
        return _failed(url, tag, exc.kind, exc.message)

    extractor = get_extractor(effective_tag, client, settings)
    try:
        raw_media = await extractor.extract(target)
    except MediaExtractionError as exc:
        reason = exc.kind if exc.kind in USER_VISIBLE_KINDS else ErrorKind.EXTRACTION_FAILED
        logger.warning("Extraction failed for %s (type=%s): %s", safe_url, tag.value, exc.message)
        return _failed(url, tag, reason, exc.message)
    except Exception:  # noqa: BLE001
        logger.exception("Unexpected error extracting %s", safe_url)
        return _failed(
            url,
            tag,
            ErrorKind.EXTRACTION_FAILED,
            "Extraction failed unexpectedly. Try pasting the direct media URL instead.",
        )

    media = normalize_media(raw_media)
    if not media:
        return _failed(url, tag, ErrorKind.EXTRACTION_FAILED, extractor.failure_message)
    logger.info("Extracted %d media item(s) from %s", len(media), safe_url)
    return ExtractionResult(url=url, source_tag=tag, outcome=ExtractionSuccess(media=media))


async def extract_media(
    url: str,
    client: Optional[httpx.AsyncClient] = None,
    settings: Optional[Settings] = None,
) -> ExtractionResult:
    """Run one URL through classify -> validate -> extract -> normalize.

    Never raises for bad input or upstream failures; those are reported in the
    returned outcome. A client is created for the call when none is given.
    """
    settings = settings or get_settings()
    if client is None:
        async with build_client(settings) as owned_client:
            return await _run_pipeline(url, owned_client, settings)
    return await _run_pipeline(url, client, settings)
