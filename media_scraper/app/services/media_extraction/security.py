"""URL validation guarding every outbound request against SSRF."""

import ipaddress
import logging
import re
import socket
from urllib.parse import ParseResult, parse_qsl, urlencode, urlparse

from media_scraper.app.services.media_extraction.errors import (
    BlockedError,
    DomainNotAllowedError,
    InvalidUrlError,
)
from media_scraper.app.services.media_extraction.media_utils import host_matches

logger = logging.getLogger(__name__)

ALLOWED_DOMAINS = (
    # Social platforms
    "twitter.com",
    "x.com",
    "reddit.com",
    "redd.it",
    "imgur.com",
    # Platform CDNs
    "twimg.com",
    "redditmedia.com",
    "giphy.com",
    # Twitter mirrors and Nitter instances
    "fxtwitter.com",
    "vxtwitter.com",
    "fixupx.com",
    "nitter.net",
    "nitter.poast.org",
    "nitter.privacydev.net",
    "rxddit.com",
)

BLOCKED_PATTERNS = (
    re.compile(r"^localhost$", re.I),
    re.compile(r"\.localhost$", re.I),
    re.compile(r"^127\."),
    re.compile(r"^10\."),
    re.compile(r"^172\.(1[6-9]|2[0-9]|3[0-1])\."),
    re.compile(r"^192\.168\."),
    re.compile(r"^169\.254\."),
    re.compile(r"^0\.0\.0\.0$"),
    re.compile(r"^::1?$"),
    re.compile(r"\.local$", re.I),
    re.compile(r"\.internal$", re.I),
)

IPV4_LITERAL_RE = re.compile(r"^[0-9a-fx.]+$")

SENSITIVE_PARAMS = frozenset({"key", "token", "auth", "secret", "password", "api_key", "apikey"})


def _parse_ip_literal(host: str):
    if IPV4_LITERAL_RE.match(host):
        try:
            # inet_aton reads hex, octal and shortened forms (0x7f000001, 0177.1) like the resolver does.
            return ipaddress.IPv4Address(socket.inet_aton(host))
        except OSError:
            pass
    try:
        return ipaddress.ip_address(host)
    except ValueError:
        return None


def is_blocked_host(hostname: str) -> bool:
    """Check a hostname against private-network patterns and internal IP ranges."""
    host = (hostname or "").strip("[]").lower().rstrip(".")
    if not host:
        return True
    if any(pattern.search(host) for pattern in BLOCKED_PATTERNS):
        return True
    ip = _parse_ip_literal(host)
    if ip is None:
        return False
    return (
        ip.is_private
        or ip.is_loopback
        or ip.is_link_local
        or ip.is_reserved
        or ip.is_unspecified
        or ip.is_multicast
    )


def validate_url(url: str, allow_any_https: bool = False) -> ParseResult:
    """Validate ``url`` before anything is fetched from it.

    Raises InvalidUrlError for malformed or non-HTTP(S) URLs, BlockedError for
    internal hosts and DomainNotAllowedError for hosts outside the allow-list.
    ``allow_any_https`` lifts the allow-list for HTTPS URLs only.
    """
    if not url or not isinstance(url, str):
        raise InvalidUrlError("Invalid URL")
    try:
        parsed = urlparse(url.strip())
        hostname = (parsed.hostname or "").lower()
    except ValueError:
        raise InvalidUrlError("Malformed URL")

    if parsed.scheme not in {"http", "https"}:
        raise InvalidUrlError("Only HTTP/HTTPS URLs are allowed")
    if not hostname:
        raise InvalidUrlError("Malformed URL")

    if is_blocked_host(hostname):
        logger.warning("Blocked internal network URL: %s", sanitize_url_for_logging(url))
        raise BlockedError("Internal network URLs are not allowed")

    if allow_any_https and parsed.scheme == "https":
        return parsed

    if not host_matches(hostname, ALLOWED_DOMAINS):
        raise DomainNotAllowedError(f"Domain not allowed: {hostname}")
    return parsed


def sanitize_url_for_logging(url: str) -> str:
    """Redact credentials-like query parameters before a URL hits the logs."""
    try:
        parsed = urlparse(url)
    except (TypeError, ValueError):
        return "[Invalid URL]"
    if not parsed.query:
        return url
    params = [
        (name, "[REDACTED]" if name.lower() in SENSITIVE_PARAMS else value)
        for name, value in parse_qsl(parsed.query, keep_blank_values=True)
    ]
    return parsed._replace(query=urlencode(params, safe="[]")).geturl()
