"""Twitter/X extraction via the public oEmbed endpoint (no key required)."""

from brain_enricher.extraction.base import ContentExtractor
from brain_enricher.extraction.html import first_paragraph
from brain_enricher.models.content import ExtractedMetadata, FullTextType
from brain_enricher.models.provider import ProviderType

OEMBED_URL = "https://publish.twitter.com/oembed"


class TwitterExtractor(ContentExtractor):
    provider = ProviderType.TWITTER
    display_name = "Twitter"

    async def extract(self, url: str, content_id: str) -> ExtractedMetadata:
        tweet_url = f"https://twitter.com/i/status/{content_id}"
        response, data = await self.fetcher.fetch_json(
            OEMBED_URL,
            params={"url": tweet_url, "format": "json"},
            skip_ssrf_check=True,
        )
        if not response.is_success:
            raise self.error(
                f"Twitter oEmbed error: {response.status_code} {response.reason_phrase}"
            )

        data = data or {}
        embed_html = data.get("html") or ""
        # Tweet text is the first <p> of the embed blockquote
        text = first_paragraph(embed_html)

        return self.metadata(
            author=data.get("author_name"),
            author_url=data.get("author_url"),
            full_text=text,
            full_text_type=FullTextType.PLAIN if text else None,
            provider_data={
                "embed_html": embed_html,
                "oembed_url": data.get("url"),
            },
        )
