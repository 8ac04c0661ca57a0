"""Wall-clock budget for a single extractor invocation."""

import asyncio
import logging

from brain_enricher.exceptions import ExtractionTimeoutError
from brain_enricher.extraction.base import ContentExtractor
from brain_enricher.models.content import ExtractedMetadata

logger = logging.getLogger(__name__)


async def extract_with_timeout(
    extractor: ContentExtractor,
    url: str,
    content_id: str,
    timeout_seconds: float = 60.0,
) -> ExtractedMetadata:
    """Run ``extractor.extract`` within ``timeout_seconds``.

    Wraps the whole extraction (all HTTP calls, parsing, transcript) in
    asyncio.timeout(). Each HTTP call also carries its own, shorter budget
    inside SafeFetcher.

    Raises:
        ExtractionTimeoutError: The budget ran out before the extractor returned.
    """
    try:
        async with asyncio.timeout(timeout_seconds):
            return await extractor.extract(url, content_id)
    except TimeoutError as exc:
        logger.warning(
            "Extraction timed out after %.1fs: %s (%s)",
            timeout_seconds,
            url,
            extractor.provider.value,
        )
        raise ExtractionTimeoutError(
            f"Extraction timed out after {timeout_seconds:g}s",
            provider=extractor.provider.value,
        ) from exc
