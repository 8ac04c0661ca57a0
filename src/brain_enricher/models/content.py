"""Content item, extracted metadata, and enrichment status models."""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class EnrichmentStatus(str, Enum):
    """Position of a content item in the enrichment state machine."""

    PENDING = "pending"
    PROCESSING = "processing"
    ENRICHED = "enriched"
    FAILED = "failed"
    SKIPPED = "skipped"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


TERMINAL_STATUSES = frozenset(
    {EnrichmentStatus.ENRICHED, EnrichmentStatus.FAILED, EnrichmentStatus.SKIPPED}
)


class FullTextType(str, Enum):
    """What kind of text ``ExtractedMetadata.full_text`` holds."""

    TRANSCRIPT = "transcript"
    ARTICLE = "article"
    MARKDOWN = "markdown"
    PLAIN = "plain"


class TranscriptSegment(BaseModel):
    """One timestamped caption line."""

    text: str
    start: float  # seconds from the start of the video
    duration: float = 0.0


class ExtractedMetadata(BaseModel):
    """Normalized output of every extractor. Only provider_data is schema-less."""

    title: str | None = None
    description: str | None = None
    author: str | None = None
    author_url: str | None = None
    thumbnail_url: str | None = None
    published_date: str | None = None  # Formats vary by provider, kept as string
    tags: list[str] = Field(default_factory=list)
    language: str | None = None

    full_text: str | None = None
    full_text_type: FullTextType | None = None
    transcript_segments: list[TranscriptSegment] = Field(default_factory=list)

    provider_data: dict[str, Any] = Field(default_factory=dict)

    extracted_at: datetime
    extractor_version: str

    def has_content(self) -> bool:
        """True if any descriptive field was filled in."""
        return bool(self.title or self.description or self.full_text)


class ContentItem(BaseModel):
    """A saved link with its enrichment bookkeeping.

    Owned by the CRUD layer; the scheduler only writes the enrichment fields.
    """

    id: str
    link: str  # Original user-submitted URL, immutable
    type: str  # Provider type, set once at creation
    content_id: str | None = None
    title: str | None = None

    enrichment_status: EnrichmentStatus = EnrichmentStatus.PENDING
    enrichment_error: str | None = None
    enrichment_retries: int = 0
    enriched_at: datetime | None = None
    next_attempt_at: datetime | None = None  # Retry gate for pending rows

    metadata: ExtractedMetadata | None = None

    created_at: datetime
    updated_at: datetime
