"""Exception taxonomy for media extraction."""

from media_scraper.app.schemas.media import ErrorKind


class MediaExtractionError(Exception):
    """Base error carrying the :class:`ErrorKind` reported to callers."""

    kind: ErrorKind = ErrorKind.EXTRACTION_FAILED

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidUrlError(MediaExtractionError):
    kind = ErrorKind.INVALID_URL


class BlockedError(MediaExtractionError):
    """Target resolves to a private, loopback or otherwise internal host."""

    kind = ErrorKind.BLOCKED


class DomainNotAllowedError(MediaExtractionError):
    kind = ErrorKind.DOMAIN_NOT_ALLOWED


class UpstreamUnavailableError(MediaExtractionError):
    """A single strategy's upstream call failed. Never leaves an extractor."""

    kind = ErrorKind.UPSTREAM_UNAVAILABLE


class ExtractionFailedError(MediaExtractionError):
    """Every strategy of an extractor was exhausted."""

    kind = ErrorKind.EXTRACTION_FAILED
