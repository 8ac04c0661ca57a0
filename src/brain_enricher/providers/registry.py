"""Ordered URL classification across all providers.

Providers are tried most-specific first; the generic link provider is always
last, so every http(s) URL classifies to something.
"""

import logging
from collections.abc import Iterable

from brain_enricher.config import Settings
from brain_enricher.models.provider import ParsedContent
from brain_enricher.providers.base import ContentProvider, parse_url
from brain_enricher.providers.generic import GenericProvider
from brain_enricher.providers.github import GitHubProvider
from brain_enricher.providers.instagram import InstagramProvider
from brain_enricher.providers.medium import MediumProvider
from brain_enricher.providers.notion import NotionProvider
from brain_enricher.providers.twitter import TwitterProvider
from brain_enricher.providers.youtube import YouTubeProvider

logger = logging.getLogger(__name__)


def default_providers() -> list[ContentProvider]:
    """Specific providers in match order (generic excluded)."""
    return [
        YouTubeProvider(),
        TwitterProvider(),
        InstagramProvider(),
        GitHubProvider(),
        MediumProvider(),
        NotionProvider(),
    ]

class ProviderRegistry:
    """Classify URLs into ``ParsedContent`` using an ordered provider list."""

    def __init__(self, providers: Iterable[ContentProvider] | None = None):
        specific = list(default_providers() if providers is None else providers)
        self._generic = GenericProvider()
        self._providers: tuple[ContentProvider, ...] = (*specific, self._generic)

    @classmethod
    def from_settings(cls, settings: Settings) -> "ProviderRegistry":
        """Build the registry, leaving out providers disabled in settings."""
        enabled = []
        for provider in default_providers():
            if settings.provider_enabled(provider.type.value):
                enabled.append(provider)
            else:
                logger.info("Provider disabled", extra={"provider": provider.type.value})
        return cls(enabled)

    def classify(self, url: str) -> ParsedContent | None:
        """Classify a URL. Returns None for strings that are not valid URLs."""
        parts = parse_url(url)
        if parts is None:
            return None

        for provider in self._providers:
            if not provider.can_handle(parts):
                continue
            content_id = provider.extract_id(parts)
            if content_id is None:
                continue

            embed_url = provider.embed_url(content_id)
            return ParsedContent(
                type=provider.type,
                display_name=provider.display_name,
                content_id=content_id,
                original_url=url,
                canonical_url=provider.canonical_url(content_id, parts),
                embed_url=embed_url,
                can_embed=provider.descriptor.supports_embed and embed_url is not None,
                embed_type=provider.descriptor.embed_type,
            )
        return None

    def provider_info(self) -> list[dict]:
        return [
            {
                "type": provider.type.value,
                "display_name": provider.display_name,
                "supports_embed": provider.descriptor.supports_embed,
            }
            for provider in self._providers
        ]
