"""Medium extraction: article extraction of the canonical ``/p/<id>`` URL."""

from brain_enricher.extraction.article import fetch_article
from brain_enricher.extraction.base import ContentExtractor
from brain_enricher.models.content import ExtractedMetadata, FullTextType
from brain_enricher.models.provider import ProviderType


class MediumExtractor(ContentExtractor):
    provider = ProviderType.MEDIUM
    display_name = "Medium"

    async def extract(self, url: str, content_id: str) -> ExtractedMetadata:
        article = await fetch_article(self.fetcher, f"https://medium.com/p/{content_id}")
        if article is None:
            raise self.error(f"Failed to extract Medium article: {content_id}")

        return self.metadata(
            title=article.title,
            description=article.description,
            author=article.author,
            thumbnail_url=article.image,
            published_date=article.published,
            tags=article.tags,
            language=article.language,
            full_text=article.text,
            full_text_type=FullTextType.ARTICLE,
            provider_data=article.provider_data(),
        )
