"""Twitter / X status URL classification."""

import re
from urllib.parse import SplitResult

from brain_enricher.models.provider import EmbedType, ProviderType
from brain_enricher.providers.base import ContentProvider, descriptor, path_segments

# Snowflake ids: numeric, up to 19 digits
TWEET_ID_PATTERN = re.compile(r"^\d{1,19}$")


class TwitterProvider(ContentProvider):
    descriptor = descriptor(
        ProviderType.TWITTER,
        "Twitter",
        (
            "twitter.com",
            "www.twitter.com",
            "mobile.twitter.com",
            "x.com",
            "www.x.com",
            "mobile.x.com",
        ),
        EmbedType.OEMBED,
    )

    def extract_id(self, url: SplitResult) -> str | None:
        # /{username}/status/{id}[/photo/1...]
        segments = path_segments(url)
        if len(segments) >= 3 and segments[1] == "status":
            if TWEET_ID_PATTERN.match(segments[2]):
                return segments[2]
        return None

    def canonical_url(self, content_id: str, url: SplitResult) -> str:
        # /i/status/ redirects to the full URL without knowing the username
        return f"https://twitter.com/i/status/{content_id}"

    def embed_url(self, content_id: str) -> str | None:
        return f"https://twitter.com/i/status/{content_id}"
