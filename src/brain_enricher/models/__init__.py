"""Data models and enums for the enrichment pipeline."""

from brain_enricher.models.content import (
    TERMINAL_STATUSES,
    ContentItem,
    EnrichmentStatus,
    ExtractedMetadata,
    FullTextType,
    TranscriptSegment,
)
from brain_enricher.models.provider import (
    EmbedType,
    ParsedContent,
    ProviderDescriptor,
    ProviderType,
)

__all__ = [
    "ContentItem",
    "EnrichmentStatus",
    "TERMINAL_STATUSES",
    "ExtractedMetadata",
    "FullTextType",
    "TranscriptSegment",
    "EmbedType",
    "ParsedContent",
    "ProviderDescriptor",
    "ProviderType",
]
