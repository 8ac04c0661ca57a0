"""Medium article URL classification.

Article ids are 10-12 hex characters, either in ``/p/{id}`` short links or
as the ``-{id}`` suffix of an article slug.
"""

import re
from urllib.parse import SplitResult

from brain_enricher.models.provider import ProviderType
from brain_enricher.providers.base import ContentProvider, descriptor, path_segments

ARTICLE_ID_PATTERN = re.compile(r"^[a-f0-9]{10,12}$", re.IGNORECASE)
SLUG_ID_PATTERN = re.compile(r"-([a-f0-9]{10,12})$", re.IGNORECASE)


class MediumProvider(ContentProvider):
    descriptor = descriptor(ProviderType.MEDIUM, "Medium", ("medium.com", "www.medium.com"))
    match_subdomains = True  # publication.medium.com

    def extract_id(self, url: SplitResult) -> str | None:
        segments = path_segments(url)

        if len(segments) >= 2 and segments[0] == "p" and ARTICLE_ID_PATTERN.match(segments[1]):
            return segments[1]

        if segments:
            last = segments[-1]
            match = SLUG_ID_PATTERN.search(last)
            if match:
                return match.group(1)
            if ARTICLE_ID_PATTERN.match(last):
                return last
        return None

    def canonical_url(self, content_id: str, url: SplitResult) -> str:
        return f"https://medium.com/p/{content_id}"
