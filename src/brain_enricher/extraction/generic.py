"""Fallback extractor for plain links and any type without its own extractor.

Strategy, in order:

1. trafilatura article extraction over the fetched HTML
2. Open Graph / ``<meta>`` tag scraping of the same HTML
3. minimal metadata (timestamp and version only)

"No metadata" is an acceptable outcome for arbitrary links, so only an SSRF
rejection escapes as an error.
"""

import logging

from brain_enricher.exceptions import FetchError, SsrfBlockedError
from brain_enricher.extraction.article import parse_article
from brain_enricher.extraction.base import HTML_HEADERS, ContentExtractor
from brain_enricher.extraction.html import extract_meta, extract_tag
from brain_enricher.models.content import ExtractedMetadata, FullTextType
from brain_enricher.models.provider import ProviderType

logger = logging.getLogger(__name__)


class GenericExtractor(ContentExtractor):
    provider = ProviderType.LINK
    display_name = "Generic Link"

    async def extract(self, url: str, content_id: str) -> ExtractedMetadata:
        try:
            response, html = await self.fetcher.fetch_text(url, headers=HTML_HEADERS)
        except SsrfBlockedError:
            raise
        except FetchError as exc:
            logger.info("Link fetch failed, storing minimal metadata: %s (%s)", url, exc)
            return self.metadata()

        if not response.is_success:
            logger.info("Link returned HTTP %s, storing minimal metadata: %s", response.status_code, url)
            return self.metadata()

        try:
            article = await parse_article(html, url)
        except Exception as exc:
            logger.warning("Article extraction failed for %s: %s", url, exc)
            article = None

        if article is not None and article.text:
            return self.metadata(
                title=article.title or extract_meta(html, "og:title") or extract_tag(html, "title"),
                description=article.description,
                author=article.author,
                thumbnail_url=article.image or extract_meta(html, "og:image"),
                published_date=article.published,
                tags=article.tags,
                language=article.language,
                full_text=article.text,
                full_text_type=FullTextType.ARTICLE,
                provider_data=article.provider_data(),
            )

        metadata = self.metadata(
            title=extract_meta(html, "og:title") or extract_tag(html, "title"),
            description=extract_meta(html, "og:description") or extract_meta(html, "description"),
            thumbnail_url=extract_meta(html, "og:image"),
            author=extract_meta(html, "author"),
            provider_data={
                "site_name": extract_meta(html, "og:site_name"),
                "type": extract_meta(html, "og:type"),
            },
        )
        if not metadata.has_content():
            logger.info("No title or description found in page: %s", url)
        return metadata
