"""In-process content store for tests and ``DATABASE_URL=memory://``."""

import asyncio
from collections.abc import Collection
from datetime import datetime
from typing import Any

from brain_enricher.models.content import ContentItem, EnrichmentStatus
from brain_enricher.store.base import STALE_LEASE_ERROR, check_fields, expected_statuses


class InMemoryContentStore:
    """Dict-backed store. A single lock makes every operation atomic."""

    def __init__(self) -> None:
        self._items: dict[str, ContentItem] = {}
        self._lock = asyncio.Lock()

    async def initialize(self) -> None:
        pass

    async def close(self) -> None:
        pass

    async def add(self, item: ContentItem) -> ContentItem:
        async with self._lock:
            if item.id in self._items:
                raise ValueError(f"Content item already exists: {item.id}")
            self._items[item.id] = item.model_copy(deep=True)
            return item.model_copy(deep=True)

    async def get(self, item_id: str) -> ContentItem | None:
        async with self._lock:
            item = self._items.get(item_id)
            return item.model_copy(deep=True) if item else None

    async def delete(self, item_id: str) -> bool:
        async with self._lock:
            return self._items.pop(item_id, None) is not None

    async def select_pending(self, now: datetime, limit: int) -> list[ContentItem]:
        async with self._lock:
            due = [
                item
                for item in self._items.values()
                if item.enrichment_status == EnrichmentStatus.PENDING
                and (item.next_attempt_at is None or item.next_attempt_at <= now)
            ]
            due.sort(key=lambda item: item.created_at)
            return [item.model_copy(deep=True) for item in due[:limit]]

    async def transition(
        self,
        item_id: str,
        expected: EnrichmentStatus | Collection[EnrichmentStatus],
        target: EnrichmentStatus,
        now: datetime,
        **fields: Any,
    ) -> bool:
        check_fields(fields)
        allowed = expected_statuses(expected)
        async with self._lock:
            item = self._items.get(item_id)
            if item is None or item.enrichment_status not in allowed:
                return False
            self._items[item_id] = item.model_copy(
                update={**fields, "enrichment_status": target, "updated_at": now}, deep=True
            )
            return True

    async def reclaim_stale(
        self,
        cutoff: datetime,
        now: datetime,
        max_retries: int,
        next_attempt_at: datetime,
    ) -> int:
        reclaimed = 0
        async with self._lock:
            for item_id, item in list(self._items.items()):
                if item.enrichment_status != EnrichmentStatus.PROCESSING or item.updated_at >= cutoff:
                    continue
                retries = item.enrichment_retries + 1
                exhausted = retries >= max_retries
                self._items[item_id] = item.model_copy(
                    update={
                        "enrichment_status": (
                            EnrichmentStatus.FAILED if exhausted else EnrichmentStatus.PENDING
                        ),
                        "enrichment_retries": retries,
                        "enrichment_error": STALE_LEASE_ERROR,
                        "next_attempt_at": None if exhausted else next_attempt_at,
                        "updated_at": now,
                    }
                )
                reclaimed += 1
        return reclaimed
