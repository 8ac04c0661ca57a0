"""Provider contract and URL helpers shared by all URL classifiers.

A provider knows three things about its platform: whether a URL belongs to
it, how to pull a stable content id out of that URL, and how to rebuild the
canonical (and optionally embeddable) URL from the id. All of it is pure
string logic; nothing here touches the network.
"""

from urllib.parse import SplitResult, parse_qs, urlsplit

from brain_enricher.models.provider import EmbedType, ProviderDescriptor, ProviderType


def parse_url(raw: str) -> SplitResult | None:
    """Split a URL string, returning None for anything without a scheme and host."""
    if not isinstance(raw, str):
        return None
    try:
        parts = urlsplit(raw.strip())
        parts.port  # raises ValueError on a malformed port
    except ValueError:
        return None
    if not parts.scheme or not parts.hostname:
        return None
    return parts


def path_segments(url: SplitResult) -> list[str]:
    """Non-empty path segments, e.g. ``/a//b/`` -> ``["a", "b"]``."""
    return [segment for segment in url.path.split("/") if segment]


def query_param(url: SplitResult, name: str) -> str | None:
    """First value of a query parameter, or None."""
    values = parse_qs(url.query).get(name)
    return values[0] if values else None


class ContentProvider:
    """Base class for URL classifiers. Subclasses set ``descriptor``."""

    descriptor: ProviderDescriptor
    # Also accept any subdomain of the listed hostnames (e.g. music.youtube.com)
    match_subdomains: bool = False

    @property
    def type(self) -> ProviderType:
        return self.descriptor.type

    @property
    def display_name(self) -> str:
        return self.descriptor.display_name

    def can_handle(self, url: SplitResult) -> bool:
        hostname = (url.hostname or "").lower()
        for candidate in self.descriptor.hostnames:
            if hostname == candidate:
                return True
            if self.match_subdomains and hostname.endswith("." + candidate):
                return True
        return False

    def extract_id(self, url: SplitResult) -> str | None:
        raise NotImplementedError

    def canonical_url(self, content_id: str, url: SplitResult) -> str:
        raise NotImplementedError

    def embed_url(self, content_id: str) -> str | None:
        return None


def descriptor(
    provider_type: ProviderType,
    display_name: str,
    hostnames: tuple[str, ...],
    embed_type: EmbedType = EmbedType.CARD,
) -> ProviderDescriptor:
    """Build a descriptor; only iframe/oembed providers support embedding."""
    return ProviderDescriptor(
        type=provider_type,
        display_name=display_name,
        hostnames=hostnames,
        supports_embed=embed_type in (EmbedType.IFRAME, EmbedType.OEMBED),
        embed_type=embed_type,
    )
