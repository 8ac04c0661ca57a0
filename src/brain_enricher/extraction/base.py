"""Extractor contract.

Each extractor handles one provider type: it knows whether it has the
credentials it needs and how to turn a saved URL (plus the provider's
content id) into ``ExtractedMetadata``.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any

from brain_enricher.exceptions import ExtractorError
from brain_enricher.fetch import SafeFetcher
from brain_enricher.models.content import ExtractedMetadata
from brain_enricher.models.provider import ProviderType

EXTRACTOR_VERSION = "1.0.0"

# Sent when scraping HTML pages rather than calling JSON APIs
HTML_HEADERS = {"Accept": "text/html,application/xhtml+xml;q=0.9,*/*;q=0.8"}


class ContentExtractor(ABC):
    """Base class for per-provider metadata extractors."""

    provider: ProviderType
    display_name: str
    version: str = EXTRACTOR_VERSION

    def __init__(self, fetcher: SafeFetcher) -> None:
        self.fetcher = fetcher

    def is_configured(self) -> bool:
        """False if required credentials are missing; items are then skipped."""
        return True

    @abstractmethod
    async def extract(self, url: str, content_id: str) -> ExtractedMetadata:
        """Fetch and normalize metadata. Raises ExtractorError on total failure."""

    def metadata(self, **fields: Any) -> ExtractedMetadata:
        """Build metadata stamped with the extraction time and extractor version.

        ``None`` values are dropped so list/dict fields keep their defaults.
        """
        values = {key: value for key, value in fields.items() if value is not None}
        return ExtractedMetadata(
            extracted_at=datetime.now(timezone.utc),
            extractor_version=self.version,
            **values,
        )

    def error(self, message: str) -> ExtractorError:
        return ExtractorError(message, provider=self.provider.value)
