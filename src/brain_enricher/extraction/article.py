"""Article content extraction using trafilatura.

The page is downloaded through ``SafeFetcher`` (never trafilatura's own
fetcher) and parsed with ``bare_extraction`` in a worker thread.
"""

import asyncio
import logging
from dataclasses import dataclass, field

from trafilatura import bare_extraction

from brain_enricher.extraction.base import HTML_HEADERS
from brain_enricher.fetch import SafeFetcher

logger = logging.getLogger(__name__)


@dataclass
class Article:
    """Fields trafilatura found on a page. Every field is optional."""

    title: str | None = None
    description: str | None = None
    author: str | None = None
    image: str | None = None
    published: str | None = None
    sitename: str | None = None
    hostname: str | None = None
    language: str | None = None
    text: str | None = None
    tags: list[str] = field(default_factory=list)

    @property
    def word_count(self) -> int:
        return len(self.text.split()) if self.text else 0

    def provider_data(self) -> dict:
        return {
            "source": self.sitename or self.hostname,
            "word_count": self.word_count,
        }


def _as_list(value) -> list[str]:
    if not value:
        return []
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    return [str(part) for part in value if part]


async def parse_article(html: str, url: str) -> Article | None:
    """Run trafilatura over already-downloaded HTML.

    Returns None when trafilatura finds nothing at all.
    """
    # Sync extraction, runs in thread pool
    doc = await asyncio.to_thread(bare_extraction, html, url=url, with_metadata=True)
    if doc is None:
        return None

    return Article(
        title=doc.title or None,
        description=doc.description or None,
        author=doc.author or None,
        image=getattr(doc, "image", None) or None,
        published=doc.date or None,
        sitename=doc.sitename or None,
        hostname=doc.hostname or None,
        language=getattr(doc, "language", None) or None,
        text=doc.text or None,
        tags=_as_list(doc.tags) or _as_list(doc.categories),
    )


async def fetch_article(
    fetcher: SafeFetcher, url: str, *, skip_ssrf_check: bool = False
) -> Article | None:
    """Download a page and extract its article.

    Returns None for non-2xx responses or pages with no extractable body text.
    Fetch errors propagate.
    """
    response, html = await fetcher.fetch_text(
        url, headers=HTML_HEADERS, skip_ssrf_check=skip_ssrf_check
    )
    if not response.is_success:
        logger.info("Article fetch returned HTTP %s: %s", response.status_code, url)
        return None

    article = await parse_article(html, url)
    if article is None or not article.text:
        return None
    return article
