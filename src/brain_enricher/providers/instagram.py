"""Instagram post, reel and IGTV URL classification."""

import re
from urllib.parse import SplitResult

from brain_enricher.models.provider import EmbedType, ProviderType
from brain_enricher.providers.base import ContentProvider, descriptor, path_segments

SHORTCODE_PATTERN = re.compile(r"^[A-Za-z0-9_-]{8,14}$")

_POST_PREFIXES = frozenset({"p", "reel", "tv"})


class InstagramProvider(ContentProvider):
    descriptor = descriptor(
        ProviderType.INSTAGRAM,
        "Instagram",
        ("instagram.com", "www.instagram.com", "m.instagram.com"),
        EmbedType.OEMBED,
    )

    def extract_id(self, url: SplitResult) -> str | None:
        segments = path_segments(url)
        if len(segments) >= 2 and segments[0] in _POST_PREFIXES:
            if SHORTCODE_PATTERN.match(segments[1]):
                return segments[1]
        return None

    def canonical_url(self, content_id: str, url: SplitResult) -> str:
        return f"https://www.instagram.com/p/{content_id}/"

    def embed_url(self, content_id: str) -> str | None:
        return f"https://www.instagram.com/p/{content_id}/embed"
