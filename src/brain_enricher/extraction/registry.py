"""Dispatch from provider type to extractor.

The table is built once from settings and must cover every ``ProviderType``;
notion pages and plain links share the generic extractor.
"""

from brain_enricher.config import Settings
from brain_enricher.extraction.base import ContentExtractor
from brain_enricher.extraction.generic import GenericExtractor
from brain_enricher.extraction.github import GitHubExtractor
from brain_enricher.extraction.instagram import InstagramExtractor
from brain_enricher.extraction.medium import MediumExtractor
from brain_enricher.extraction.twitter import TwitterExtractor
from brain_enricher.extraction.youtube import YouTubeExtractor
from brain_enricher.fetch import SafeFetcher
from brain_enricher.models.content import ExtractedMetadata
from brain_enricher.models.provider import ProviderType


class ExtractorRegistry:
    """Exhaustive ``ProviderType -> ContentExtractor`` table."""

    def __init__(self, extractors: dict[ProviderType, ContentExtractor]) -> None:
        missing = [t.value for t in ProviderType if t not in extractors]
        if missing:
            raise ValueError(f"No extractor registered for provider types: {', '.join(missing)}")
        self._extractors = dict(extractors)

    @classmethod
    def from_settings(cls, settings: Settings, fetcher: SafeFetcher) -> "ExtractorRegistry":
        generic = GenericExtractor(fetcher)
        return cls(
            {
                ProviderType.YOUTUBE: YouTubeExtractor(
                    fetcher,
                    api_key=settings.youtube_api_key,
                    transcript_language=settings.youtube_transcript_language,
                ),
                ProviderType.TWITTER: TwitterExtractor(fetcher),
                ProviderType.INSTAGRAM: InstagramExtractor(fetcher),
                ProviderType.GITHUB: GitHubExtractor(fetcher, token=settings.github_token),
                ProviderType.MEDIUM: MediumExtractor(fetcher),
                ProviderType.NOTION: generic,
                ProviderType.LINK: generic,
            }
        )

    def resolve(self, provider_type: ProviderType | str) -> ContentExtractor:
        """Extractor for a type. Unknown type strings get the generic extractor."""
        if isinstance(provider_type, str):
            provider_type = ProviderType.parse(provider_type)
        return self._extractors[provider_type]

    def is_configured(self, provider_type: ProviderType | str) -> bool:
        return self.resolve(provider_type).is_configured()

    async def extract(
        self, provider_type: ProviderType | str, url: str, content_id: str
    ) -> ExtractedMetadata:
        return await self.resolve(provider_type).extract(url, content_id)
