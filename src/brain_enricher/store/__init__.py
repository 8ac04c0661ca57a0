"""Content persistence for intake and enrichment."""

from brain_enricher.config import Settings
from brain_enricher.store.base import ContentStore
from brain_enricher.store.memory import InMemoryContentStore
from brain_enricher.store.sql import SqlContentStore

MEMORY_URL = "memory://"


def build_store(settings: Settings) -> ContentStore:
    """Pick the store implementation from ``DATABASE_URL``."""
    if settings.database_url == MEMORY_URL:
        return InMemoryContentStore()
    return SqlContentStore.from_url(settings.database_url)


__all__ = [
    "ContentStore",
    "InMemoryContentStore",
    "SqlContentStore",
    "build_store",
]
