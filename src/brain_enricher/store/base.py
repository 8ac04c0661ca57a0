"""Storage interface used by intake and the enrichment scheduler.

Every enrichment write is a conditional transition: it only applies while the
row is still in the status the caller last saw. A row that was deleted or
moved on by another worker makes the transition return ``False``.
"""

from collections.abc import Collection
from datetime import datetime
from typing import Any, Protocol

from brain_enricher.models.content import ContentItem, EnrichmentStatus

# Fields the scheduler may write alongside a status change
TRANSITION_FIELDS = frozenset(
    {
        "metadata",
        "enriched_at",
        "enrichment_error",
        "enrichment_retries",
        "next_attempt_at",
    }
)

STALE_LEASE_ERROR = "abandoned (stale processing lease)"


def expected_statuses(
    expected: EnrichmentStatus | Collection[EnrichmentStatus],
) -> frozenset[EnrichmentStatus]:
    if isinstance(expected, EnrichmentStatus):
        return frozenset({expected})
    return frozenset(expected)


def check_fields(fields: dict[str, Any]) -> None:
    unknown = set(fields) - TRANSITION_FIELDS
    if unknown:
        raise ValueError(f"Fields not writable by a transition: {', '.join(sorted(unknown))}")


class ContentStore(Protocol):
    async def initialize(self) -> None:
        """Create tables or other backing structures if missing."""

    async def close(self) -> None: ...

    async def add(self, item: ContentItem) -> ContentItem: ...

    async def get(self, item_id: str) -> ContentItem | None: ...

    async def delete(self, item_id: str) -> bool: ...

    async def select_pending(self, now: datetime, limit: int) -> list[ContentItem]:
        """Pending rows whose ``next_attempt_at`` is unset or due, oldest first."""

    async def transition(
        self,
        item_id: str,
        expected: EnrichmentStatus | Collection[EnrichmentStatus],
        target: EnrichmentStatus,
        now: datetime,
        **fields: Any,
    ) -> bool:
        """Move a row to ``target`` if its status is still ``expected``.

        Also sets ``updated_at = now`` and any of ``TRANSITION_FIELDS``.
        Returns False if the row is gone or in another status.
        """

    async def reclaim_stale(
        self,
        cutoff: datetime,
        now: datetime,
        max_retries: int,
        next_attempt_at: datetime,
    ) -> int:
        """Recover ``processing`` rows not updated since ``cutoff``.

        Each counts as one failed attempt: retries are incremented and the row
        goes back to ``pending`` (due at ``next_attempt_at``) or, once retries
        reach ``max_retries``, to ``failed``. Returns the number of rows moved.
        """
