"""Catch-all provider for any http(s) URL no specific provider claimed.

The content id is derived from the normalized URL, so resubmitting the same
link (even with a differently-cased host or a default port) yields the same id.
"""

import hashlib
from urllib.parse import SplitResult

from url_normalize import url_normalize

from brain_enricher.models.provider import ProviderType
from brain_enricher.providers.base import ContentProvider, descriptor

LINK_ID_LENGTH = 12


def normalize_link(url: SplitResult) -> str:
    """Normalize scheme/host case, default ports, empty paths and percent-encoding."""
    return url_normalize(url.geturl())


def link_content_id(url: SplitResult) -> str:
    """First 12 hex chars of the MD5 of the normalized URL (identity, not security)."""
    digest = hashlib.md5(normalize_link(url).encode("utf-8"), usedforsecurity=False)
    return digest.hexdigest()[:LINK_ID_LENGTH]


class GenericProvider(ContentProvider):
    descriptor = descriptor(ProviderType.LINK, "Link", ())

    def can_handle(self, url: SplitResult) -> bool:
        return url.scheme.lower() in ("http", "https")

    def extract_id(self, url: SplitResult) -> str | None:
        return link_content_id(url)

    def canonical_url(self, content_id: str, url: SplitResult) -> str:
        return normalize_link(url)
