"""Tests for the per-extraction time budget."""

import asyncio

import pytest

from brain_enricher.exceptions import ExtractionTimeoutError
from brain_enricher.extraction.base import ContentExtractor
from brain_enricher.extraction.timeout import extract_with_timeout
from brain_enricher.models.provider import ProviderType


class SlowExtractor(ContentExtractor):
    provider = ProviderType.MEDIUM
    display_name = "Slow"

    def __init__(self, delay: float) -> None:
        super().__init__(fetcher=None)
        self.delay = delay

    async def extract(self, url, content_id):
        await asyncio.sleep(self.delay)
        return self.metadata(title=f"done {content_id}")


@pytest.mark.asyncio
async def test_fast_extraction_returns_metadata():
    metadata = await extract_with_timeout(SlowExtractor(0), "https://medium.com/p/1", "1", 1.0)
    assert metadata.title == "done 1"


@pytest.mark.asyncio
async def test_slow_extraction_times_out():
    with pytest.raises(ExtractionTimeoutError, match="timed out after 0.05s") as exc_info:
        await extract_with_timeout(SlowExtractor(5), "https://medium.com/p/1", "1", 0.05)

    assert exc_info.value.provider == "medium"
