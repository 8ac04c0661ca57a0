"""Saving a new link: classify it and persist a pending content item."""

import logging
import uuid

from brain_enricher.exceptions import InvalidUrlError
from brain_enricher.models.content import ContentItem, EnrichmentStatus
from brain_enricher.providers import ProviderRegistry
from brain_enricher.scheduler import utcnow
from brain_enricher.store import ContentStore

logger = logging.getLogger(__name__)


async def save_link(
    store: ContentStore,
    providers: ProviderRegistry,
    link: str,
    title: str | None = None,
) -> ContentItem:
    """Classify ``link`` and store it as ``pending`` for the enrichment scheduler.

    Raises:
        InvalidUrlError: The link is not an http(s) URL any provider accepts.
    """
    parsed = providers.classify(link)
    if parsed is None:
        raise InvalidUrlError(link)

    now = utcnow()
    item = ContentItem(
        id=uuid.uuid4().hex,
        link=link,
        type=parsed.type.value,
        content_id=parsed.content_id,
        title=title,
        enrichment_status=EnrichmentStatus.PENDING,
        created_at=now,
        updated_at=now,
    )
    await store.add(item)
    logger.info("Content saved", extra={"item_id": item.id, "type": item.type})
    return item
