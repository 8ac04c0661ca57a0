"""YouTube URL classification.

Handles watch, short (youtu.be), shorts, live, embed, legacy /v/ and mobile
URLs, with or without extra parameters (&t=120, &list=PL...).
"""

import re
from urllib.parse import SplitResult

from brain_enricher.models.provider import EmbedType, ProviderType
from brain_enricher.providers.base import (
    ContentProvider,
    descriptor,
    path_segments,
    query_param,
)

# Video ids are exactly 11 characters of [A-Za-z0-9_-]
VIDEO_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]{11}$")

_SHORT_HOSTS = frozenset({"youtu.be", "www.youtu.be"})
_ID_PATH_PREFIXES = ("shorts", "live", "embed", "v")


class YouTubeProvider(ContentProvider):
    descriptor = descriptor(
        ProviderType.YOUTUBE,
        "YouTube",
        ("youtube.com", "www.youtube.com", "m.youtube.com", "youtu.be", "www.youtu.be"),
        EmbedType.IFRAME,
    )
    match_subdomains = True

    def extract_id(self, url: SplitResult) -> str | None:
        hostname = (url.hostname or "").lower()
        segments = path_segments(url)

        video_id = None
        if hostname in _SHORT_HOSTS:
            video_id = segments[0] if segments else None
        elif url.path == "/watch":
            video_id = query_param(url, "v")
        elif len(segments) >= 2 and segments[0] in _ID_PATH_PREFIXES:
            video_id = segments[1]

        if video_id and VIDEO_ID_PATTERN.match(video_id):
            return video_id
        return None

    def canonical_url(self, content_id: str, url: SplitResult) -> str:
        return f"https://www.youtube.com/watch?v={content_id}"

    def embed_url(self, content_id: str) -> str | None:
        return f"https://www.youtube.com/embed/{content_id}"
