"""Provider vocabulary shared by classification and extraction."""

from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel


class ProviderType(str, Enum):
    """Closed set of supported content platforms plus the generic fallback."""

    YOUTUBE = "youtube"
    TWITTER = "twitter"
    INSTAGRAM = "instagram"
    GITHUB = "github"
    MEDIUM = "medium"
    NOTION = "notion"
    LINK = "link"

    @classmethod
    def parse(cls, value: str) -> "ProviderType":
        """Map a stored type string to a member. Unknown strings become LINK."""
        try:
            return cls(value)
        except ValueError:
            return cls.LINK


class EmbedType(str, Enum):
    """How a frontend should render the saved content."""

    IFRAME = "iframe"
    OEMBED = "oembed"
    CARD = "card"
    NONE = "none"


@dataclass(frozen=True)
class ProviderDescriptor:
    """Static description of a provider, defined at process start."""

    type: ProviderType
    display_name: str
    hostnames: tuple[str, ...]
    supports_embed: bool
    embed_type: EmbedType


class ParsedContent(BaseModel):
    """Result of classifying a URL: everything needed to store and display it."""

    type: ProviderType
    display_name: str
    content_id: str
    original_url: str
    canonical_url: str
    embed_url: str | None = None
    can_embed: bool
    embed_type: EmbedType
