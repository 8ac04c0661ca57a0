"""Instagram extraction from Open Graph tags.

Instagram offers no keyless API, so the public post page is scraped with a
browser User-Agent. Logged-out requests are frequently served a login wall;
a page without any usable tag is treated as blocked and fails the item.
"""

import re

from brain_enricher.extraction.base import HTML_HEADERS, ContentExtractor
from brain_enricher.extraction.html import extract_meta
from brain_enricher.models.content import ExtractedMetadata, FullTextType
from brain_enricher.models.provider import ProviderType

BROWSER_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0 Safari/537.36"
)

HASHTAG_PATTERN = re.compile(r"#([A-Za-z0-9_]+)")
# og:title looks like "Jane Doe on Instagram: \"caption...\""
AUTHOR_PATTERN = re.compile(r"^(.+?)\s+on\s+Instagram", re.IGNORECASE)


class InstagramExtractor(ContentExtractor):
    provider = ProviderType.INSTAGRAM
    display_name = "Instagram"

    async def extract(self, url: str, content_id: str) -> ExtractedMetadata:
        post_url = f"https://www.instagram.com/p/{content_id}/"
        response, html = await self.fetcher.fetch_text(
            post_url,
            headers={**HTML_HEADERS, "User-Agent": BROWSER_USER_AGENT},
            skip_ssrf_check=True,
        )
        if not response.is_success:
            raise self.error(f"Instagram fetch error: {response.status_code}")

        title = extract_meta(html, "og:title")
        description = extract_meta(html, "og:description")
        if not title and not description:
            raise self.error(
                f"Instagram extraction yielded no data for {content_id}, likely blocked"
            )

        author_match = AUTHOR_PATTERN.match(title or "")
        # dict.fromkeys keeps first-seen order while dropping repeats
        tags = list(dict.fromkeys(HASHTAG_PATTERN.findall(description or "")))

        return self.metadata(
            title=title,
            description=description,
            author=author_match.group(1) if author_match else None,
            thumbnail_url=extract_meta(html, "og:image"),
            tags=tags,
            full_text=description,
            full_text_type=FullTextType.PLAIN if description else None,
            provider_data={
                "media_type": extract_meta(html, "og:type"),
                "site_name": extract_meta(html, "og:site_name"),
            },
        )
