"""Exception hierarchy for the enrichment pipeline.

All custom exceptions subclass ``EnrichmentError`` so callers can catch the
whole family with a single ``except`` clause.

Hierarchy::

    EnrichmentError
    ├── InvalidUrlError
    ├── FetchError
    │   ├── SsrfBlockedError
    │   ├── FetchTimeoutError
    │   └── ResponseTooLargeError
    ├── ExtractorError
    │   └── ExtractionTimeoutError
    └── NotConfiguredError
"""

from __future__ import annotations


class EnrichmentError(Exception):
    """Base class for all enrichment pipeline exceptions."""


class InvalidUrlError(EnrichmentError):
    """Raised when a submitted URL cannot be classified by any provider."""

    def __init__(self, url: str) -> None:
        super().__init__(
            f"Invalid URL format: {url!r}. Please provide a valid HTTP or HTTPS URL."
        )
        self.url = url


# ---------------------------------------------------------------------------
# Safe fetch layer
# ---------------------------------------------------------------------------


class FetchError(EnrichmentError):
    """Raised when an outbound request fails (network error, bad redirect).

    Args:
        message: Human-readable description of the failure.
        url: The URL being fetched when the failure happened.
    """

    def __init__(self, message: str, url: str | None = None) -> None:
        super().__init__(message)
        self.url = url


class SsrfBlockedError(FetchError):
    """Raised before any request when the target resolves to a private address."""

    def __init__(self, url: str, hostname: str, address: str) -> None:
        if hostname == address:
            message = f"SSRF blocked: {hostname} is a private address"
        else:
            message = f"SSRF blocked: {hostname} resolves to private address {address}"
        super().__init__(message, url=url)
        self.hostname = hostname
        self.address = address


class FetchTimeoutError(FetchError):
    """Raised when the request-response cycle exceeds its time budget."""

    def __init__(self, url: str, timeout: float) -> None:
        super().__init__(f"Fetch timed out after {timeout:g}s: {url}", url=url)
        self.timeout = timeout


class ResponseTooLargeError(FetchError):
    """Raised when a response body exceeds the configured byte cap.

    Args:
        url: The URL being fetched.
        limit: The configured cap in bytes.
        size: Declared ``Content-Length`` when known, else ``None``.
    """

    def __init__(self, url: str, limit: int, size: int | None = None) -> None:
        if size is not None:
            message = f"Response too large: {size} bytes (limit: {limit})"
        else:
            message = f"Response too large: exceeded {limit} byte limit"
        super().__init__(message, url=url)
        self.limit = limit
        self.size = size


# ---------------------------------------------------------------------------
# Extraction
# ---------------------------------------------------------------------------


class ExtractorError(EnrichmentError):
    """Raised when an extractor cannot produce metadata for an item.

    The message is stored verbatim as the item's ``enrichment_error``.

    Args:
        message: Human-readable description of the failure.
        provider: Provider type of the failing extractor (e.g. ``"github"``).
    """

    def __init__(self, message: str, provider: str | None = None) -> None:
        super().__init__(message)
        self.provider = provider


class ExtractionTimeoutError(ExtractorError):
    """Raised when a whole extractor invocation exceeds its time budget."""


class NotConfiguredError(EnrichmentError):
    """Raised when an extractor lacks the credentials it needs.

    Items of such a provider are marked ``skipped`` instead of ``failed``.
    """

    def __init__(self, provider: str) -> None:
        super().__init__(f"No configured extractor for type: {provider}")
        self.provider = provider
