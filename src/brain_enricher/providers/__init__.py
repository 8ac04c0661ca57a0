"""URL classification: which platform a link belongs to and its stable id."""

from brain_enricher.providers.base import ContentProvider, parse_url
from brain_enricher.providers.registry import ProviderRegistry

__all__ = ["ContentProvider", "ProviderRegistry", "parse_url"]
