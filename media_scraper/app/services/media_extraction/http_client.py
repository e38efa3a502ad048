"""Outbound HTTP helpers shared by all extractors."""

import logging
from typing import Any, Dict, Optional

import httpx

from media_scraper.app.core.config import Settings, get_settings
from media_scraper.app.services.media_extraction.errors import (
    BlockedError,
    UpstreamUnavailableError,
)
from media_scraper.app.services.media_extraction.security import (
    is_blocked_host,
    sanitize_url_for_logging,
)

logger = logging.getLogger(__name__)


async def _guard_request(request: httpx.Request) -> None:
    """Re-check every outgoing request, redirect hops included, for internal hosts."""
    if is_blocked_host(request.url.host):
        logger.warning("Blocked outbound request to internal host %s", request.url.host)
        raise BlockedError("Redirected to an internal network URL, which is not allowed")


def build_client(
    settings: Optional[Settings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> httpx.AsyncClient:
    """Create the pooled async client used for one extraction or one batch."""
    settings = settings or get_settings()
    timeout = httpx.Timeout(settings.fetch_timeout_seconds, connect=min(5.0, settings.fetch_timeout_seconds))
    return httpx.AsyncClient(
        timeout=timeout,
        follow_redirects=True,
        headers={"User-Agent": settings.scraper_user_agent},
        event_hooks={"request": [_guard_request]},
        transport=transport,
    )


async def fetch_json(
    client: httpx.AsyncClient,
    url: str,
    params: Optional[Dict[str, str]] = None,
    headers: Optional[Dict[str, str]] = None,
) -> Any:
    """GET ``url`` and decode JSON; any failure becomes UpstreamUnavailableError."""
    try:
        response = await client.get(url, params=params, headers=headers)
        response.raise_for_status()
        return response.json()
    except httpx.HTTPStatusError as exc:
        raise UpstreamUnavailableError(
            f"{sanitize_url_for_logging(url)} returned {exc.response.status_code}"
        ) from exc
    except httpx.TimeoutException as exc:
        raise UpstreamUnavailableError(f"Timed out fetching {sanitize_url_for_logging(url)}") from exc
    except httpx.HTTPError as exc:
        raise UpstreamUnavailableError(f"Network error fetching {sanitize_url_for_logging(url)}: {exc}") from exc
    except ValueError as exc:
        raise UpstreamUnavailableError(f"Invalid JSON from {sanitize_url_for_logging(url)}") from exc


async def fetch_text(
    client: httpx.AsyncClient,
    url: str,
    headers: Optional[Dict[str, str]] = None,
) -> str:
    try:
        response = await client.get(url, headers=headers)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise UpstreamUnavailableError(
            f"{sanitize_url_for_logging(url)} returned {exc.response.status_code}"
        ) from exc
    except httpx.TimeoutException as exc:
        raise UpstreamUnavailableError(f"Timed out fetching {sanitize_url_for_logging(url)}") from exc
    except httpx.HTTPError as exc:
        raise UpstreamUnavailableError(f"Network error fetching {sanitize_url_for_logging(url)}: {exc}") from exc
    return response.text


async def resolve_redirects(client: httpx.AsyncClient, url: str) -> str:
    """Follow redirects from a short link and return the final URL."""
    try:
        # Only the final URL is needed; the page body is never read.
        async with client.stream("GET", url) as response:
            return str(response.url)
    except httpx.HTTPError as exc:
        raise UpstreamUnavailableError(f"Could not expand {sanitize_url_for_logging(url)}: {exc}") from exc


async def probe(client: httpx.AsyncClient, url: str, timeout: Optional[float] = None) -> httpx.Response:
    """Lightweight existence check. HEAD first, fallback to GET on 405.

    httpx errors are left to the caller, which decides whether a transport
    failure is fatal.
    """
    timeout = timeout if timeout is not None else get_settings().probe_timeout_seconds
    response = await client.head(url, timeout=timeout)
    if response.status_code == 405:
        # Stream so the body of a large video is never downloaded.
        async with client.stream("GET", url, timeout=timeout) as streamed:
            response = streamed
    return response
