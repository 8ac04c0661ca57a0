"""Notion page URL classification (notion.so and public *.notion.site pages)."""

import re
from urllib.parse import SplitResult

from brain_enricher.models.provider import ProviderType
from brain_enricher.providers.base import ContentProvider, descriptor, path_segments

PAGE_ID_PATTERN = re.compile(r"([a-f0-9]{32})$", re.IGNORECASE)
PAGE_UUID_PATTERN = re.compile(
    r"([a-f0-9]{8}-[a-f0-9]{4}-[a-f0-9]{4}-[a-f0-9]{4}-[a-f0-9]{12})$", re.IGNORECASE
)


class NotionProvider(ContentProvider):
    descriptor = descriptor(
        ProviderType.NOTION, "Notion", ("notion.so", "www.notion.so", "notion.site")
    )
    match_subdomains = True

    def can_handle(self, url: SplitResult) -> bool:
        hostname = (url.hostname or "").lower()
        # Subdomains only count for notion.site (workspace.notion.site)
        return hostname in self.descriptor.hostnames or hostname.endswith(".notion.site")

    def extract_id(self, url: SplitResult) -> str | None:
        segments = path_segments(url)
        if not segments:
            return None

        last = segments[-1]
        match = PAGE_ID_PATTERN.search(last)
        if match:
            return match.group(1).lower()
        match = PAGE_UUID_PATTERN.search(last)
        if match:
            return match.group(1).replace("-", "").lower()
        return None

    def canonical_url(self, content_id: str, url: SplitResult) -> str:
        c = content_id
        return f"https://notion.so/{c[:8]}-{c[8:12]}-{c[12:16]}-{c[16:20]}-{c[20:]}"
