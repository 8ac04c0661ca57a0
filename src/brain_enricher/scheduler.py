"""Background enrichment: poll pending items, run extractors, record outcomes.

State machine::

    pending    --claim-->                   processing
    processing --success-->                 enriched
    processing --error, retries left-->     pending  (retries += 1, delayed)
    processing --error, exhausted-->        failed   (retries += 1)
    pending    --disabled/unconfigured-->   skipped
    processing --stale lease-->             pending/failed (one failure)

Every write is a conditional transition on the status last seen, so two
workers never process the same row and a deleted row is a silent no-op.
"""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import asdict, dataclass
from datetime import datetime, timedelta, timezone

from brain_enricher.config import Settings
from brain_enricher.exceptions import NotConfiguredError, SsrfBlockedError
from brain_enricher.extraction import ExtractorRegistry, extract_with_timeout
from brain_enricher.models.content import TERMINAL_STATUSES, ContentItem, EnrichmentStatus
from brain_enricher.store import ContentStore

logger = logging.getLogger(__name__)

# Errors retrying cannot fix
PERMANENT_ERRORS = (SsrfBlockedError,)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class TickSummary:
    """Counts of what one poll cycle did."""

    claimed: int = 0
    enriched: int = 0
    retried: int = 0
    failed: int = 0
    skipped: int = 0
    reclaimed: int = 0

    @property
    def is_empty(self) -> bool:
        return not any(asdict(self).values())

    def as_dict(self) -> dict[str, int]:
        return asdict(self)


class EnrichmentScheduler:
    """Polls the store for pending items and enriches them in bounded batches."""

    def __init__(
        self,
        store: ContentStore,
        extractors: ExtractorRegistry,
        settings: Settings,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.store = store
        self.extractors = extractors
        self.settings = settings
        self.clock = clock

        self.poll_interval = settings.enrichment_poll_interval_seconds
        self.max_retries = settings.enrichment_max_retries
        self.batch_size = settings.enrichment_batch_size
        self.concurrency = settings.enrichment_concurrency
        self.extraction_timeout = settings.enrichment_extraction_timeout_seconds
        self.stale_after = timedelta(seconds=settings.enrichment_stale_after_seconds)

        self._task: asyncio.Task | None = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Schedule ``run_forever`` on the running loop. Idempotent."""
        if self.running:
            return
        self._task = asyncio.create_task(self.run_forever(), name="enrichment-scheduler")

    async def stop(self) -> None:
        """Stop polling and cancel the in-flight tick.

        Rows left in ``processing`` are recovered later by the stale-lease rule.
        """
        task, self._task = self._task, None
        if task is None or task.done():
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("Enrichment scheduler stopped")

    async def run_forever(self) -> None:
        logger.info(
            "Enrichment scheduler started (poll every %.0fs, batch %d, concurrency %d)",
            self.poll_interval,
            self.batch_size,
            self.concurrency,
        )
        while True:
            try:
                summary = await self.tick()
                if not summary.is_empty:
                    logger.info("Enrichment tick complete", extra=summary.as_dict())
            except Exception:
                logger.exception("Enrichment tick failed")
            await asyncio.sleep(self.poll_interval)

    # ------------------------------------------------------------------
    # Polling
    # ------------------------------------------------------------------

    def retry_delay(self, retries: int) -> timedelta:
        """Delay before attempt number ``retries + 1``."""
        base = self.settings.enrichment_retry_delay_seconds
        if self.settings.enrichment_retry_backoff == "exponential":
            return timedelta(seconds=base * 2 ** max(retries - 1, 0))
        return timedelta(seconds=base)

    async def tick(self) -> TickSummary:
        """Run one poll cycle: reclaim stale leases, then process a batch."""
        summary = TickSummary()
        now = self.clock()

        summary.reclaimed = await self.store.reclaim_stale(
            cutoff=now - self.stale_after,
            now=now,
            max_retries=self.max_retries,
            next_attempt_at=now + self.retry_delay(1),
        )

        items = await self.store.select_pending(now, self.batch_size)
        if not items:
            return summary

        semaphore = asyncio.Semaphore(self.concurrency)

        async def run(item: ContentItem) -> None:
            async with semaphore:
                await self.process_item(item, summary)

        results = await asyncio.gather(*(run(item) for item in items), return_exceptions=True)
        for item, result in zip(items, results):
            if isinstance(result, Exception):
                logger.error(
                    "Enrichment worker crashed for item %s",
                    item.id,
                    exc_info=result,
                    extra={"item_id": item.id, "type": item.type},
                )
        return summary

    async def process_item(self, item: ContentItem, summary: TickSummary) -> None:
        """Take one pending item through skip, or claim -> extract -> record."""
        log_extra = {"item_id": item.id, "type": item.type}
        extractor = self.extractors.resolve(item.type)

        skip_reason = self._skip_reason(item)
        if skip_reason is not None:
            if await self.store.transition(
                item.id,
                EnrichmentStatus.PENDING,
                EnrichmentStatus.SKIPPED,
                self.clock(),
                enrichment_error=skip_reason,
                next_attempt_at=None,
            ):
                summary.skipped += 1
                logger.info("Enrichment skipped: %s", skip_reason, extra=log_extra)
            return

        if not await self.store.transition(
            item.id, EnrichmentStatus.PENDING, EnrichmentStatus.PROCESSING, self.clock()
        ):
            logger.debug("Claim lost, item taken or deleted", extra=log_extra)
            return
        summary.claimed += 1
        logger.info("Enrichment claimed", extra=log_extra)

        try:
            metadata = await extract_with_timeout(
                extractor, item.link, item.content_id or "", self.extraction_timeout
            )
        except Exception as exc:
            target = await self._record_failure(item, exc)
            if target == EnrichmentStatus.PENDING:
                summary.retried += 1
            elif target == EnrichmentStatus.FAILED:
                summary.failed += 1
            return

        now = self.clock()
        if await self.store.transition(
            item.id,
            EnrichmentStatus.PROCESSING,
            EnrichmentStatus.ENRICHED,
            now,
            metadata=metadata,
            enriched_at=now,
            enrichment_error=None,
            next_attempt_at=None,
        ):
            summary.enriched += 1
            logger.info("Enrichment succeeded", extra=log_extra)
        else:
            logger.info("Item changed during enrichment, result discarded", extra=log_extra)

    def _skip_reason(self, item: ContentItem) -> str | None:
        if not self.settings.provider_enabled(item.type):
            return f"Provider disabled: {item.type}"
        if not self.extractors.is_configured(item.type):
            return str(NotConfiguredError(item.type))
        return None

    async def _record_failure(
        self, item: ContentItem, exc: Exception
    ) -> EnrichmentStatus | None:
        """Write the outcome of a failed extraction. Returns the status written."""
        retries = item.enrichment_retries + 1
        message = str(exc) or exc.__class__.__name__
        now = self.clock()
        log_extra = {"item_id": item.id, "type": item.type, "retries": retries}

        if isinstance(exc, PERMANENT_ERRORS) or retries >= self.max_retries:
            target, next_attempt_at = EnrichmentStatus.FAILED, None
        else:
            target, next_attempt_at = EnrichmentStatus.PENDING, now + self.retry_delay(retries)

        if not await self.store.transition(
            item.id,
            EnrichmentStatus.PROCESSING,
            target,
            now,
            enrichment_retries=retries,
            enrichment_error=message,
            next_attempt_at=next_attempt_at,
        ):
            logger.info("Item changed during enrichment, failure discarded", extra=log_extra)
            return None

        if target == EnrichmentStatus.FAILED:
            logger.warning("Enrichment failed permanently: %s", message, extra=log_extra)
        else:
            logger.info("Enrichment retry scheduled: %s", message, extra=log_extra)
        return target

    # ------------------------------------------------------------------
    # Manual re-enrichment
    # ------------------------------------------------------------------

    async def reenrich(self, item_id: str) -> ContentItem | None:
        """Re-run extraction for a terminal item, replacing its metadata.

        Items still pending or processing are returned unchanged. Returns
        None if the item does not exist.
        """
        item = await self.store.get(item_id)
        if item is None:
            return None

        log_extra = {"item_id": item.id, "type": item.type}
        if not item.enrichment_status.is_terminal:
            logger.info("Re-enrichment ignored, item is still %s", item.enrichment_status.value, extra=log_extra)
            return item

        if not await self.store.transition(
            item.id, TERMINAL_STATUSES, EnrichmentStatus.PROCESSING, self.clock()
        ):
            logger.info("Re-enrichment ignored, item was claimed concurrently", extra=log_extra)
            return await self.store.get(item_id)

        extractor = self.extractors.resolve(item.type)
        skip_reason = self._skip_reason(item)
        if skip_reason is not None:
            await self.store.transition(
                item.id,
                EnrichmentStatus.PROCESSING,
                EnrichmentStatus.SKIPPED,
                self.clock(),
                enrichment_error=skip_reason,
            )
            return await self.store.get(item_id)

        logger.info("Re-enrichment started", extra=log_extra)
        try:
            metadata = await extract_with_timeout(
                extractor, item.link, item.content_id or "", self.extraction_timeout
            )
        except Exception as exc:
            logger.warning("Re-enrichment failed: %s", exc, extra=log_extra)
            await self.store.transition(
                item.id,
                EnrichmentStatus.PROCESSING,
                EnrichmentStatus.FAILED,
                self.clock(),
                enrichment_retries=item.enrichment_retries + 1,
                enrichment_error=str(exc) or exc.__class__.__name__,
                next_attempt_at=None,
            )
            return await self.store.get(item_id)

        now = self.clock()
        await self.store.transition(
            item.id,
            EnrichmentStatus.PROCESSING,
            EnrichmentStatus.ENRICHED,
            now,
            metadata=metadata,
            enriched_at=now,
            enrichment_error=None,
        )
        logger.info("Re-enrichment succeeded", extra=log_extra)
        return await self.store.get(item_id)
