"""Content extraction: per-provider metadata retrieval.

Public API:
    ExtractorRegistry.from_settings(settings, fetcher)
        Exhaustive provider type -> extractor table.
    extract_with_timeout(extractor, url, content_id, timeout_seconds)
        Single bounded extractor invocation.
"""

from brain_enricher.extraction.base import ContentExtractor
from brain_enricher.extraction.registry import ExtractorRegistry
from brain_enricher.extraction.timeout import extract_with_timeout

__all__ = [
    "ContentExtractor",
    "ExtractorRegistry",
    "extract_with_timeout",
]
