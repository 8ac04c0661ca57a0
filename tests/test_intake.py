"""Tests for saving links."""

import pytest

from brain_enricher.exceptions import InvalidUrlError
from brain_enricher.intake import save_link
from brain_enricher.models.content import EnrichmentStatus
from brain_enricher.providers import ProviderRegistry
from brain_enricher.store import InMemoryContentStore


@pytest.mark.asyncio
async def test_save_link_classifies_and_stores_pending():
    store = InMemoryContentStore()

    item = await save_link(store, ProviderRegistry(), "https://x.com/jane/status/1234567890")

    assert item.type == "twitter"
    assert item.content_id == "1234567890"
    assert item.enrichment_status == EnrichmentStatus.PENDING
    assert item.metadata is None
    assert item.created_at == item.updated_at
    assert await store.get(item.id) == item


@pytest.mark.asyncio
async def test_save_link_keeps_original_url_and_title():
    store = InMemoryContentStore()
    link = "https://Example.com/Article?utm_source=x"

    item = await save_link(store, ProviderRegistry(), link, title="My note")

    assert item.link == link
    assert item.type == "link"
    assert item.title == "My note"


@pytest.mark.asyncio
async def test_save_link_generates_distinct_ids():
    store = InMemoryContentStore()
    providers = ProviderRegistry()

    first = await save_link(store, providers, "https://example.com/a")
    second = await save_link(store, providers, "https://example.com/a")

    assert first.id != second.id


@pytest.mark.asyncio
async def test_save_link_rejects_invalid_url(now):
    store = InMemoryContentStore()

    with pytest.raises(InvalidUrlError):
        await save_link(store, ProviderRegistry(), "javascript:alert(1)")

    assert await store.select_pending(now, limit=10) == []
