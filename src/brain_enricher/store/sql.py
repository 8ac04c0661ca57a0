"""SQLAlchemy 2 async content store (PostgreSQL via asyncpg, SQLite via aiosqlite).

Claims and all other enrichment writes are single conditional ``UPDATE``
statements; the affected row count says whether the transition happened.
"""

import logging
from collections.abc import Collection
from datetime import datetime, timezone
from typing import Any

import sqlalchemy as sa
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from brain_enricher.models.content import ContentItem, EnrichmentStatus, ExtractedMetadata
from brain_enricher.store.base import STALE_LEASE_ERROR, check_fields, expected_statuses
from brain_enricher.store.tables import Base, ContentRow

logger = logging.getLogger(__name__)


def normalize_database_url(database_url: str) -> str:
    """Force an async driver for bare ``postgres://`` / ``sqlite://`` URLs."""
    for prefix in ("postgres://", "postgresql://"):
        if database_url.startswith(prefix):
            return "postgresql+asyncpg://" + database_url.removeprefix(prefix)
    if database_url.startswith("sqlite://"):
        return "sqlite+aiosqlite://" + database_url.removeprefix("sqlite://")
    return database_url


def _build_engine(database_url: str) -> AsyncEngine:
    """Create the async engine.

    Pool sizing applies to PostgreSQL only; SQLite picks its own pool class.
    """
    url = normalize_database_url(database_url)
    if url.startswith("postgresql"):
        return create_async_engine(
            url, echo=False, pool_size=10, max_overflow=20, pool_pre_ping=True
        )
    return create_async_engine(url, echo=False)


def _utc(value: datetime | None) -> datetime | None:
    # SQLite returns naive datetimes; everything is stored in UTC
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _to_item(row: ContentRow) -> ContentItem:
    metadata = row.extracted_metadata
    return ContentItem(
        id=row.id,
        link=row.link,
        type=row.type,
        content_id=row.content_id,
        title=row.title,
        enrichment_status=EnrichmentStatus(row.enrichment_status),
        enrichment_error=row.enrichment_error,
        enrichment_retries=row.enrichment_retries,
        enriched_at=_utc(row.enriched_at),
        next_attempt_at=_utc(row.next_attempt_at),
        metadata=ExtractedMetadata.model_validate(metadata) if metadata else None,
        created_at=_utc(row.created_at),
        updated_at=_utc(row.updated_at),
    )


def _column_values(fields: dict[str, Any]) -> dict[str, Any]:
    """Map ContentItem field names to ContentRow attributes."""
    values = dict(fields)
    if "metadata" in values:
        metadata = values.pop("metadata")
        values["extracted_metadata"] = (
            metadata.model_dump(mode="json") if isinstance(metadata, ExtractedMetadata) else metadata
        )
    return values


class SqlContentStore:
    """Content store backed by the ``contents`` table."""

    def __init__(self, engine: AsyncEngine) -> None:
        self.engine = engine
        self._sessions: async_sessionmaker[AsyncSession] = async_sessionmaker(
            bind=engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

    @classmethod
    def from_url(cls, database_url: str) -> "SqlContentStore":
        return cls(_build_engine(database_url))

    async def initialize(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def close(self) -> None:
        await self.engine.dispose()

    async def add(self, item: ContentItem) -> ContentItem:
        row = ContentRow(
            id=item.id,
            link=item.link,
            type=item.type,
            content_id=item.content_id,
            title=item.title,
            enrichment_status=item.enrichment_status.value,
            enrichment_error=item.enrichment_error,
            enrichment_retries=item.enrichment_retries,
            enriched_at=item.enriched_at,
            next_attempt_at=item.next_attempt_at,
            extracted_metadata=item.metadata.model_dump(mode="json") if item.metadata else None,
            created_at=item.created_at,
            updated_at=item.updated_at,
        )
        async with self._sessions() as session, session.begin():
            session.add(row)
        return item

    async def get(self, item_id: str) -> ContentItem | None:
        async with self._sessions() as session:
            row = await session.get(ContentRow, item_id)
            return _to_item(row) if row else None

    async def delete(self, item_id: str) -> bool:
        async with self._sessions() as session, session.begin():
            result = await session.execute(sa.delete(ContentRow).where(ContentRow.id == item_id))
            return result.rowcount == 1

    async def select_pending(self, now: datetime, limit: int) -> list[ContentItem]:
        stmt = (
            sa.select(ContentRow)
            .where(
                ContentRow.enrichment_status == EnrichmentStatus.PENDING.value,
                sa.or_(ContentRow.next_attempt_at.is_(None), ContentRow.next_attempt_at <= now),
            )
            .order_by(ContentRow.created_at)
            .limit(limit)
        )
        async with self._sessions() as session:
            rows = (await session.scalars(stmt)).all()
            return [_to_item(row) for row in rows]

    async def transition(
        self,
        item_id: str,
        expected: EnrichmentStatus | Collection[EnrichmentStatus],
        target: EnrichmentStatus,
        now: datetime,
        **fields: Any,
    ) -> bool:
        check_fields(fields)
        allowed = [status.value for status in expected_statuses(expected)]
        stmt = (
            sa.update(ContentRow)
            .where(ContentRow.id == item_id, ContentRow.enrichment_status.in_(allowed))
            .values(enrichment_status=target.value, updated_at=now, **_column_values(fields))
            .execution_options(synchronize_session=False)
        )
        async with self._sessions() as session, session.begin():
            result = await session.execute(stmt)
            return result.rowcount == 1

    async def reclaim_stale(
        self,
        cutoff: datetime,
        now: datetime,
        max_retries: int,
        next_attempt_at: datetime,
    ) -> int:
        stale = sa.and_(
            ContentRow.enrichment_status == EnrichmentStatus.PROCESSING.value,
            ContentRow.updated_at < cutoff,
        )
        exhausted = ContentRow.enrichment_retries + 1 >= max_retries
        common = {
            "enrichment_retries": ContentRow.enrichment_retries + 1,
            "enrichment_error": STALE_LEASE_ERROR,
            "updated_at": now,
        }
        to_failed = (
            sa.update(ContentRow)
            .where(stale, exhausted)
            .values(enrichment_status=EnrichmentStatus.FAILED.value, next_attempt_at=None, **common)
            .execution_options(synchronize_session=False)
        )
        to_pending = (
            sa.update(ContentRow)
            .where(stale, sa.not_(exhausted))
            .values(
                enrichment_status=EnrichmentStatus.PENDING.value,
                next_attempt_at=next_attempt_at,
                **common,
            )
            .execution_options(synchronize_session=False)
        )
        async with self._sessions() as session, session.begin():
            failed = (await session.execute(to_failed)).rowcount
            pending = (await session.execute(to_pending)).rowcount
        if failed or pending:
            logger.warning(
                "Reclaimed stale processing rows",
                extra={"to_pending": pending, "to_failed": failed},
            )
        return failed + pending
